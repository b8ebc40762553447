# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
MongoDB service layer with connection pooling and the document collection
abstraction consumed by every concept.
"""

import os
import logging
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

import backoff
from bson import ObjectId
from pymongo import ASCENDING, DESCENDING, MongoClient, ReturnDocument
from pymongo.collection import Collection
from pymongo.database import Database
from pymongo.errors import (
    AutoReconnect,
    ConnectionFailure,
    DuplicateKeyError,
    ExecutionTimeout,
    NetworkTimeout,
    ServerSelectionTimeoutError,
)

from ..errors import AppError, ErrorKind

logger = logging.getLogger(__name__)

# Errors that are safe to retry at the storage boundary.
TRANSIENT_ERRORS = (AutoReconnect, NetworkTimeout, ServerSelectionTimeoutError, ExecutionTimeout)

Filter = Dict[str, Any]
Sort = Sequence[Tuple[str, int]]


class MongoDBService:
    """MongoDB service with connection pooling."""

    def __init__(
        self,
        connection_string: str = None,
        database_name: str = None,
        client: Optional[MongoClient] = None,
        max_retries: int = 3,
        operation_timeout: float = 10.0,
        retry_factor: float = 0.1,
    ):
        """Initialize MongoDB service; ``client`` may be injected (tests)."""
        self.connection_string = connection_string or os.getenv(
            'MONGODB_URI',
            'mongodb://localhost:27017/coauthor_dev'
        )
        self.database_name = database_name or os.getenv('MONGODB_DATABASE', 'coauthor_dev')
        self._client: Optional[MongoClient] = client
        self._database: Optional[Database] = None

        # Connection pool settings
        self.max_pool_size = int(os.getenv('MONGODB_MAX_POOL_SIZE', '10'))
        self.min_pool_size = int(os.getenv('MONGODB_MIN_POOL_SIZE', '1'))
        self.max_idle_time_ms = int(os.getenv('MONGODB_MAX_IDLE_TIME_MS', '30000'))
        self.server_selection_timeout_ms = int(os.getenv('MONGODB_SERVER_SELECTION_TIMEOUT_MS', '5000'))
        self.socket_timeout_ms = int(os.getenv('MONGODB_SOCKET_TIMEOUT_MS', '10000'))
        self.connect_timeout_ms = int(os.getenv('MONGODB_CONNECT_TIMEOUT_MS', '5000'))

        # Retry policy for transient failures
        self.max_retries = max_retries
        self.operation_timeout = operation_timeout
        self.retry_factor = retry_factor

        logger.info(f"MongoDB service initialized for database: {self.database_name}")

    @property
    def client(self) -> MongoClient:
        """Get MongoDB client with connection pooling."""
        if self._client is None:
            try:
                self._client = MongoClient(
                    self.connection_string,
                    maxPoolSize=self.max_pool_size,
                    minPoolSize=self.min_pool_size,
                    maxIdleTimeMS=self.max_idle_time_ms,
                    serverSelectionTimeoutMS=self.server_selection_timeout_ms,
                    socketTimeoutMS=self.socket_timeout_ms,
                    connectTimeoutMS=self.connect_timeout_ms,
                    retryWrites=True,
                    retryReads=True
                )
                # Test connection
                self._client.admin.command('ping')
                logger.info("MongoDB connection established successfully")
            except (ConnectionFailure, ServerSelectionTimeoutError) as e:
                logger.error(f"Failed to connect to MongoDB: {e}")
                self._client = None
                raise AppError(
                    ErrorKind.STORAGE_UNAVAILABLE,
                    "Storage is temporarily unavailable, please retry"
                )

        return self._client

    @property
    def database(self) -> Database:
        """Get MongoDB database."""
        if self._database is None:
            self._database = self.client[self.database_name]
        return self._database

    def get_collection(self, collection_name: str) -> Collection:
        """Get MongoDB collection."""
        return self.database[collection_name]

    def collection(self, collection_name: str) -> "DocCollection":
        """Get a document collection with the configured retry policy."""
        return DocCollection(
            self,
            collection_name,
            max_retries=self.max_retries,
            operation_timeout=self.operation_timeout,
            retry_factor=self.retry_factor
        )

    def close_connection(self) -> None:
        """Close MongoDB connection."""
        if self._client:
            self._client.close()
            self._client = None
            self._database = None
            logger.info("MongoDB connection closed")

    def health_check(self) -> Dict[str, Any]:
        """Check MongoDB connection health."""
        try:
            result = self.client.admin.command('ping')
            return {
                'status': 'healthy',
                'ping': result.get('ok') == 1,
                'database': self.database_name,
                'connection_pool_size': self.max_pool_size
            }
        except Exception as e:
            logger.error(f"MongoDB health check failed: {e}")
            return {
                'status': 'unhealthy',
                'error': str(e),
                'database': self.database_name
            }

    # Index Management

    def create_indexes(self) -> None:
        """Create lookup and uniqueness indexes for all collections."""
        try:
            logger.info("Creating MongoDB indexes...")

            users = self.get_collection("users")
            users.create_index("username", unique=True)

            drafts = self.get_collection("drafts")
            drafts.create_index("members")

            posts = self.get_collection("posts")
            posts.create_index("approvers")
            posts.create_index([("theme", ASCENDING), ("createdAt", DESCENDING)])
            posts.create_index([("status", ASCENDING), ("createdAt", DESCENDING)])

            events = self.get_collection("events")
            events.create_index("hosts")
            events.create_index("info")

            # One pending request and one friendship per unordered pair
            self.get_collection("friend_requests").create_index("pair", unique=True)
            self.get_collection("friends").create_index("pair", unique=True)

            saved = self.get_collection("saved")
            saved.create_index([("owner", ASCENDING), ("label", ASCENDING)], unique=True)

            logger.info("MongoDB indexes created successfully")

        except Exception as e:
            logger.error(f"Failed to create MongoDB indexes: {e}")
            raise


class DocCollection:
    """
    Persistent collection of documents keyed by ``_id``.

    Every call is retried with exponential backoff on transient pymongo errors
    and raises ``AppError(STORAGE_UNAVAILABLE)`` once the retry budget is spent.
    Concepts only use equality/membership filters and atomic update operators.
    """

    def __init__(
        self,
        service: MongoDBService,
        name: str,
        max_retries: int = 3,
        operation_timeout: float = 10.0,
        retry_factor: float = 0.1,
    ):
        self.service = service
        self.name = name
        self.max_retries = max_retries
        self.operation_timeout = operation_timeout
        self.retry_factor = retry_factor

    @property
    def collection(self) -> Collection:
        return self.service.get_collection(self.name)

    def _run(self, operation: str, func: Callable, *args, **kwargs):
        retrying = backoff.on_exception(
            backoff.expo,
            TRANSIENT_ERRORS,
            max_tries=self.max_retries,
            max_time=self.operation_timeout,
            factor=self.retry_factor,
            logger=logger
        )(func)

        try:
            return retrying(*args, **kwargs)
        except TRANSIENT_ERRORS as e:
            logger.error(
                f"Storage operation {operation} failed on {self.name} after retries",
                extra={"collection": self.name, "operation": operation, "error": str(e)}
            )
            raise AppError(
                ErrorKind.STORAGE_UNAVAILABLE,
                "Storage is temporarily unavailable, please retry"
            )

    @staticmethod
    def _stamp(update: Dict[str, Any]) -> Dict[str, Any]:
        stamped = dict(update)
        stamped.setdefault("$set", {})
        stamped["$set"] = {**stamped["$set"], "updatedAt": datetime.utcnow()}
        return stamped

    def create_one(self, document: Dict[str, Any]) -> ObjectId:
        """Insert a document and return its id."""
        now = datetime.utcnow()
        document = {**document, "createdAt": now, "updatedAt": now}
        generated = "_id" not in document
        document.setdefault("_id", ObjectId())

        def insert():
            try:
                return self.collection.insert_one(document).inserted_id
            except DuplicateKeyError:
                # A previous attempt was applied but its reply was lost
                if generated and self.collection.find_one({"_id": document["_id"]}, {"_id": 1}) is not None:
                    logger.warning(
                        f"Insert into {self.name} already applied by an earlier attempt",
                        extra={"collection": self.name, "document_id": str(document["_id"])}
                    )
                    return document["_id"]
                raise

        inserted_id = self._run("create_one", insert)
        logger.debug(f"Created document in {self.name}: {inserted_id}")
        return inserted_id

    def read_one(self, query: Filter) -> Optional[Dict[str, Any]]:
        return self._run("read_one", lambda: self.collection.find_one(query))

    def read_many(self, query: Filter, sort: Optional[Sort] = None) -> List[Dict[str, Any]]:
        def find():
            cursor = self.collection.find(query)
            if sort:
                cursor = cursor.sort(list(sort))
            return list(cursor)

        return self._run("read_many", find)

    def partial_update_one(self, query: Filter, patch: Dict[str, Any]) -> int:
        """Set the given fields on the first matching document."""
        return self.update_one(query, {"$set": patch})

    def update_one(self, query: Filter, update: Dict[str, Any]) -> int:
        """Apply an atomic update expression; returns the matched count."""
        result = self._run("update_one", lambda: self.collection.update_one(query, self._stamp(update)))
        return result.matched_count

    def find_one_and_update(self, query: Filter, update: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Atomically update one document and return it after the update."""
        return self._run(
            "find_one_and_update",
            lambda: self.collection.find_one_and_update(
                query,
                self._stamp(update),
                return_document=ReturnDocument.AFTER
            )
        )

    def find_one_and_delete(self, query: Filter) -> Optional[Dict[str, Any]]:
        return self._run("find_one_and_delete", lambda: self.collection.find_one_and_delete(query))

    def delete_one(self, query: Filter) -> int:
        result = self._run("delete_one", lambda: self.collection.delete_one(query))
        return result.deleted_count

    def insert_unique(self, document: Dict[str, Any]) -> Optional[ObjectId]:
        """Insert a document guarded by a unique index; None if it already exists."""
        try:
            return self.create_one(document)
        except DuplicateKeyError:
            logger.debug(f"Duplicate key rejected in {self.name}")
            return None
