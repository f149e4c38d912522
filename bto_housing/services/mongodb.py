# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
MongoDB service layer and the MongoDB-backed repository.
"""

import os
import logging
from typing import Any, Dict, List, Optional, Type
from pymongo import MongoClient
from pymongo.collection import Collection
from pymongo.database import Database
from pymongo.errors import (
    ConnectionFailure,
    ServerSelectionTimeoutError,
    PyMongoError
)

from .repository import Repository, T
from ..error_handler import SystemException

logger = logging.getLogger(__name__)


class MongoDBService:
    """MongoDB connection holder with lazy client creation."""

    def __init__(self, connection_string: str = None, database_name: str = None):
        """Initialize MongoDB service from arguments or environment."""
        self.connection_string = connection_string or os.getenv(
            'MONGODB_URI',
            'mongodb://localhost:27017/bto_housing_dev'
        )
        self.database_name = database_name or os.getenv('MONGODB_DATABASE', 'bto_housing_dev')
        self._client: Optional[MongoClient] = None
        self._database: Optional[Database] = None

        self.max_pool_size = int(os.getenv('MONGODB_MAX_POOL_SIZE', '10'))
        self.server_selection_timeout_ms = int(os.getenv('MONGODB_SERVER_SELECTION_TIMEOUT_MS', '5000'))

        logger.info(f"MongoDB service initialized for database: {self.database_name}")

    @property
    def client(self) -> MongoClient:
        """Get MongoDB client, connecting on first use."""
        if self._client is None:
            try:
                self._client = MongoClient(
                    self.connection_string,
                    maxPoolSize=self.max_pool_size,
                    serverSelectionTimeoutMS=self.server_selection_timeout_ms,
                    retryWrites=True,
                    retryReads=True
                )
                # Test connection
                self._client.admin.command('ping')
                logger.info("MongoDB connection established successfully")
            except (ConnectionFailure, ServerSelectionTimeoutError) as e:
                logger.error(f"Failed to connect to MongoDB: {e}")
                self._client = None
                raise SystemException("Could not connect to the record store", cause=e)

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
                'database': self.database_name
            }
        except (PyMongoError, SystemException) as e:
            logger.error(f"MongoDB health check failed: {e}")
            return {
                'status': 'unhealthy',
                'error': str(e),
                'database': self.database_name
            }


class MongoRepository(Repository[T]):
    """Repository storing one entity type in one collection, keyed by _id."""

    def __init__(self, service: MongoDBService, collection_name: str, model_cls: Type[T], key_field: str):
        super().__init__(model_cls, key_field)
        self.service = service
        self.collection_name = collection_name

    @property
    def collection(self) -> Collection:
        return self.service.get_collection(self.collection_name)

    def _to_document(self, entity: T) -> Dict[str, Any]:
        document = entity.model_dump(mode="json")
        document["_id"] = self.key_of(entity)
        return document

    def _from_document(self, document: Dict[str, Any]) -> T:
        document = dict(document)
        document.pop("_id", None)
        return self.model_cls.model_validate(document)

    def get_all(self) -> List[T]:
        try:
            documents = list(self.collection.find({}))
        except PyMongoError as e:
            logger.error(f"Failed to load {self.collection_name}: {e}")
            raise SystemException(f"Failed to load {self.collection_name}", cause=e)

        logger.debug(f"Found {len(documents)} documents in {self.collection_name}")
        return [self._from_document(document) for document in documents]

    def find_by_id(self, entity_id: str) -> Optional[T]:
        try:
            document = self.collection.find_one({"_id": entity_id})
        except PyMongoError as e:
            logger.error(f"Failed to find {entity_id} in {self.collection_name}: {e}")
            raise SystemException(f"Failed to load {entity_id} from {self.collection_name}", cause=e)

        if document is None:
            logger.debug(f"Document {entity_id} not found in {self.collection_name}")
            return None
        return self._from_document(document)

    def save(self, entity: T) -> T:
        entity_id = self.key_of(entity)
        try:
            self.collection.replace_one({"_id": entity_id}, self._to_document(entity), upsert=True)
        except PyMongoError as e:
            logger.error(f"Failed to save {entity_id} in {self.collection_name}: {e}")
            raise SystemException(f"Failed to save {entity_id} to {self.collection_name}", cause=e)

        logger.info(f"Saved document {entity_id} in {self.collection_name}")
        return entity

    def delete(self, entity_id: str) -> bool:
        try:
            result = self.collection.delete_one({"_id": entity_id})
        except PyMongoError as e:
            logger.error(f"Failed to delete {entity_id} from {self.collection_name}: {e}")
            raise SystemException(f"Failed to delete {entity_id} from {self.collection_name}", cause=e)

        if result.deleted_count > 0:
            logger.info(f"Deleted document {entity_id} from {self.collection_name}")
            return True
        logger.warning(f"No document deleted for {entity_id} in {self.collection_name}")
        return False
