#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Script to create the MongoDB indexes, including the uniqueness indexes the
concepts rely on (usernames, friend pairs, collection labels).
"""

import sys
import logging

from ..config import load_config
from ..errors import AppError
from ..services.mongodb import MongoDBService

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

logger = logging.getLogger(__name__)


def main():
    """Create MongoDB indexes."""
    config = load_config()
    mongodb_service = MongoDBService(config['MONGODB_URI'], config['MONGODB_DATABASE'])

    try:
        logger.info("Starting MongoDB index creation...")

        health = mongodb_service.health_check()
        if health['status'] != 'healthy':
            logger.error(f"MongoDB is not healthy: {health}")
            sys.exit(1)

        logger.info(f"Connected to MongoDB - Database: {health['database']}")

        mongodb_service.create_indexes()

        logger.info("MongoDB indexes created successfully!")

    except AppError as e:
        logger.error(f"Failed to create indexes: {e.raw_message()}")
        sys.exit(1)
    finally:
        mongodb_service.close_connection()


if __name__ == "__main__":
    main()
