# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Environment configuration for the Coauthor API.
"""

import os
from typing import Any, Dict, List

DEFAULT_THEMES = "Travel,Food,Music,Sports,Art,Technology,Nature,Fashion"


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() == 'true'


def parse_themes(raw: str) -> List[str]:
    return [theme.strip() for theme in raw.split(',') if theme.strip()]


def load_config() -> Dict[str, Any]:
    """Read application settings from the environment."""
    environment = os.getenv('ENVIRONMENT', 'development')

    return {
        'ENVIRONMENT': environment,
        'DEBUG': environment == 'development',
        'DOCS_ENABLED': _env_flag('DOCS_ENABLED', 'false'),
        'OTEL_ENABLED': _env_flag('OTEL_ENABLED', 'false'),

        # Database configuration
        'MONGODB_URI': os.getenv('MONGODB_URI', 'mongodb://localhost:27017/coauthor_dev'),
        'MONGODB_DATABASE': os.getenv('MONGODB_DATABASE', 'coauthor_dev'),
        'MONGODB_MAX_RETRIES': int(os.getenv('MONGODB_MAX_RETRIES', '3')),
        'MONGODB_OPERATION_TIMEOUT': float(os.getenv('MONGODB_OPERATION_TIMEOUT', '10')),
        'MONGODB_RETRY_FACTOR': float(os.getenv('MONGODB_RETRY_FACTOR', '0.1')),

        # Token blocklist
        'REDIS_URL': os.getenv('REDIS_URL', 'redis://localhost:6379'),

        # JWT configuration
        'JWT_PRIVATE_KEY': os.getenv('JWT_PRIVATE_KEY'),
        'JWT_PUBLIC_KEY': os.getenv('JWT_PUBLIC_KEY'),
        'JWT_ACCESS_TOKEN_EXPIRES_MINUTES': int(os.getenv('JWT_ACCESS_TOKEN_EXPIRES_MINUTES', '60')),

        # Posting
        'POST_THEMES': parse_themes(os.getenv('POST_THEMES', DEFAULT_THEMES)),
    }
