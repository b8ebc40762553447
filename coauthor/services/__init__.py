# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Services package - External integrations and side effects.
"""

from .mongodb import MongoDBService, DocCollection
from .redis import RedisService
from .auth import AuthService, TokenValidationError

__all__ = [
    "MongoDBService",
    "DocCollection",
    "RedisService",
    "AuthService",
    "TokenValidationError"
]
