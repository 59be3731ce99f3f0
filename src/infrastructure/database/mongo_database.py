"""
MongoDB Database - Infrastructure Layer

This module provides a MongoDB database client for interacting with MongoDB.
It handles connection, collections, indexes and basic CRUD operations.
"""

from typing import Any, Dict, List, Optional

import pymongo.errors
from pymongo import ASCENDING, MongoClient
from pymongo.collection import Collection
from pymongo.database import Database

from src.shared import get_logger

logger = get_logger(__name__)

WEB_SERVICES_COLLECTION = "web_services"


class MongoDatabase:
    """MongoDB database client."""

    def __init__(self, mongo_uri: str, db_name: str):
        """
        Initialize the MongoDB database client.

        Args:
            mongo_uri: MongoDB connection URI
            db_name: Name of the database to use
        """
        self.client: MongoClient = MongoClient(mongo_uri)
        self.db: Database = self.client[db_name]

    def get_collection(self, collection_name: str) -> Collection:
        return self.db[collection_name]

    async def find_one(
        self, collection_name: str, query: Dict[str, Any]
    ) -> Optional[Dict[str, Any]]:
        """
        Find a single document in a collection.

        Args:
            collection_name: Name of the collection
            query: Query to match documents

        Returns:
            The document if found, None otherwise
        """
        return self.db[collection_name].find_one(query)

    async def find_many(
        self,
        collection_name: str,
        query: Dict[str, Any],
        sort_by: Optional[str] = None,
        sort_direction: int = ASCENDING,
        skip: int = 0,
        limit: int = 0,
    ) -> List[Dict[str, Any]]:
        """
        Find multiple documents in a collection.

        Args:
            collection_name: Name of the collection
            query: Query to match documents
            sort_by: Field to sort by
            sort_direction: Sort direction (1 for ascending, -1 for descending)
            skip: Number of documents to skip
            limit: Maximum number of documents to return, 0 for no limit

        Returns:
            List of documents
        """
        cursor = self.db[collection_name].find(query)

        if sort_by:
            cursor = cursor.sort(sort_by, sort_direction)
        if skip:
            cursor = cursor.skip(skip)
        if limit:
            cursor = cursor.limit(limit)

        return list(cursor)

    async def count_documents(
        self, collection_name: str, query: Dict[str, Any]
    ) -> int:
        return self.db[collection_name].count_documents(query)

    async def insert_one(
        self, collection_name: str, document: Dict[str, Any]
    ) -> Dict[str, Any]:
        """
        Insert a document into a collection.

        Raises:
            pymongo.errors.DuplicateKeyError: If a unique index is violated
            pymongo.errors.PyMongoError: If the write is not acknowledged
        """
        result = self.db[collection_name].insert_one(document)
        if not result.acknowledged:
            raise pymongo.errors.PyMongoError(
                f"Failed to insert document in {collection_name}"
            )
        return document

    async def update_one(
        self,
        collection_name: str,
        query: Dict[str, Any],
        changes: Dict[str, Any],
    ) -> int:
        """
        Apply ``$set`` changes to the first matching document.

        Returns:
            Number of matched documents (0 or 1)
        """
        result = self.db[collection_name].update_one(query, {"$set": changes})
        return result.matched_count

    async def delete_many(self, collection_name: str, query: Dict[str, Any]) -> int:
        """
        Delete every matching document.

        Returns:
            Number of deleted documents
        """
        result = self.db[collection_name].delete_many(query)
        return result.deleted_count

    def ping(self) -> None:
        self.client.admin.command("ping")

    def close(self) -> None:
        """Close the database connection."""
        self.client.close()

    async def create_indexes(self) -> None:
        """
        Create the indexes used by the web service registry.
        This is an async method to be called during application startup.

        Raises:
            pymongo.errors.OperationFailure: If the unique ``(service, id)``
            index cannot be built; the registry relies on it for uniqueness.
        """
        collection = self.db[WEB_SERVICES_COLLECTION]

        try:
            collection.create_index(
                [("service", ASCENDING), ("id", ASCENDING)],
                name="service_id_unique_idx",
                unique=True,
            )
        except pymongo.errors.OperationFailure as exc:
            logger.error(
                "mongo.indexes.unique_failed",
                collection=WEB_SERVICES_COLLECTION,
                error=str(exc),
            )
            raise

        try:
            collection.create_index(
                [("service", ASCENDING), ("subservice", ASCENDING), ("name", ASCENDING)],
                name="service_subservice_name_idx",
                background=True,
            )
        except pymongo.errors.OperationFailure as exc:
            logger.warning(
                "mongo.indexes.failed",
                collection=WEB_SERVICES_COLLECTION,
                error=str(exc),
            )
