"""
MongoDB adapter for document-based operations.
Provides the same interface as NoSQLAdapter but uses native MongoDB collections.
"""

import logging
from typing import Any, Dict, List, Optional

from bson import ObjectId
from bson.errors import InvalidId
from pymongo import MongoClient
from pymongo.errors import ConnectionFailure

from .nosql_adapter import DEFAULT_COLLECTIONS
from .schemas import DOCUMENT_VALIDATORS

logger = logging.getLogger(__name__)


class MongoAdapter:
    """MongoDB adapter for document-based database operations"""

    def __init__(
        self,
        connection_string: str,
        database: Optional[str] = None,
        collections: Optional[Dict[str, str]] = None,
        client: Optional[MongoClient] = None,
    ):
        if not connection_string and client is None:
            raise ValueError("MongoDB connection string required. Set MONGODB_URI or pass connection_string")

        self.connection_string = connection_string
        self.database_name = database
        self.collections = dict(collections or DEFAULT_COLLECTIONS)
        self._validators = {
            name: DOCUMENT_VALIDATORS[kind]
            for kind, name in self.collections.items()
            if kind in DOCUMENT_VALIDATORS
        }
        self.client = client
        self.db = None
        self._connect()

    def _connect(self) -> None:
        """Establish MongoDB connection"""
        try:
            if self.client is None:
                self.client = MongoClient(self.connection_string)
            if self.database_name:
                self.db = self.client[self.database_name]
            else:
                # database name from the URI path, e.g. mongodb://host/filegateway
                self.db = self.client.get_default_database(default="file_gateway")

            self.client.admin.command('ping')
            logger.info(f"Connected to MongoDB database: {self.db.name}")

        except ConnectionFailure as e:
            logger.error(f"Failed to connect to MongoDB: {e}")
            raise

    def _collection(self, collection: str):
        if collection not in self.collections.values():
            raise ValueError(f"Unknown collection: {collection}")
        return self.db[collection]

    def _validate_document(self, collection: str, document: Dict[str, Any]) -> None:
        """Validate document against schema"""
        validator = self._validators.get(collection)
        if validator is None:
            return
        try:
            validator(document)
        except Exception as e:
            logger.error(f"Document validation failed for {collection}: {e}")
            raise ValueError(f"Document validation failed: {e}") from e

    @staticmethod
    def _object_id(doc_id: str) -> Optional[ObjectId]:
        try:
            return ObjectId(doc_id)
        except (InvalidId, TypeError):
            return None

    @staticmethod
    def _to_document(raw: Dict[str, Any]) -> Dict[str, Any]:
        # expose the store id under the same key NoSQLAdapter uses
        raw["id"] = str(raw.pop("_id"))
        return raw

    def init_collections(self) -> None:
        """Create the indexes the gateway queries by"""
        try:
            files = self.collections.get("files")
            if files:
                self.db[files].create_index([("fileName", 1)])
                self.db[files].create_index([("uploadDate", -1)])
            logger.info("MongoDB collections and indexes initialized successfully")
        except Exception as e:
            logger.error(f"Error initializing MongoDB collections: {e}")
            raise

    def create_document(self, collection: str, document: Dict[str, Any]) -> str:
        """Insert a document and return its generated id"""
        collection_obj = self._collection(collection)
        self._validate_document(collection, document)
        try:
            # insert_one mutates its argument with _id
            result = collection_obj.insert_one(dict(document))
            doc_id = str(result.inserted_id)
            logger.info(f"Created document in {collection} with ID: {doc_id}")
            return doc_id
        except Exception as e:
            logger.error(f"Error creating document in {collection}: {e}")
            raise

    def get_document(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        """Get a document by ID"""
        collection_obj = self._collection(collection)
        object_id = self._object_id(doc_id)
        if object_id is None:
            return None
        try:
            document = collection_obj.find_one({"_id": object_id})
            return self._to_document(document) if document else None
        except Exception as e:
            logger.error(f"Error getting document from {collection}: {e}")
            raise

    def delete_document(self, collection: str, doc_id: str) -> bool:
        """Delete a document by ID"""
        collection_obj = self._collection(collection)
        object_id = self._object_id(doc_id)
        if object_id is None:
            logger.warning(f"No document found to delete in {collection} with ID: {doc_id}")
            return False
        try:
            result = collection_obj.delete_one({"_id": object_id})
            success = result.deleted_count > 0

            if success:
                logger.info(f"Deleted document from {collection} with ID: {doc_id}")
            else:
                logger.warning(f"No document found to delete in {collection} with ID: {doc_id}")

            return success
        except Exception as e:
            logger.error(f"Error deleting document from {collection}: {e}")
            raise

    def query_documents(
        self,
        collection: str,
        query: Optional[Dict[str, Any]] = None,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> List[Dict[str, Any]]:
        """Query documents by top-level field equality, in insertion order"""
        collection_obj = self._collection(collection)
        mongo_query: Dict[str, Any] = {}
        for key, value in (query or {}).items():
            if key == "id":
                mongo_query["_id"] = self._object_id(value)
            else:
                mongo_query[key] = value
        try:
            cursor = collection_obj.find(mongo_query).sort("_id", 1).skip(offset)
            if limit is not None:
                cursor = cursor.limit(limit)
            return [self._to_document(doc) for doc in cursor]
        except Exception as e:
            logger.error(f"Error querying documents from {collection}: {e}")
            raise

    def count_documents(self, collection: str) -> int:
        """Count documents in a collection"""
        collection_obj = self._collection(collection)
        try:
            return collection_obj.count_documents({})
        except Exception as e:
            logger.error(f"Error counting documents in {collection}: {e}")
            raise

    def ping(self) -> bool:
        """Cheap connectivity check for the health endpoint"""
        self.client.admin.command('ping')
        return True

    def close(self) -> None:
        """Close MongoDB connection"""
        if self.client:
            self.client.close()
