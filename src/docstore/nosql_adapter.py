"""
SQLite-backed document adapter.
Stores each collection as a table of JSON documents keyed by a generated id,
so local development needs nothing beyond the standard library's sqlite3.
"""

import json
import logging
import re
import sqlite3
import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional

from .schemas import DOCUMENT_VALIDATORS

logger = logging.getLogger(__name__)

DEFAULT_COLLECTIONS = {"files": "files", "downloads": "downloads"}

_COLLECTION_NAME_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


class NoSQLAdapter:
    """Document adapter over a single SQLite file"""

    def __init__(self, db_path: str = "gateway.db", collections: Optional[Dict[str, str]] = None):
        self.db_path = db_path
        # logical kind -> collection name
        self.collections = dict(collections or DEFAULT_COLLECTIONS)
        for name in self.collections.values():
            if not _COLLECTION_NAME_RE.match(name):
                raise ValueError(f"Invalid collection name: {name!r}")
        self._validators = {
            name: DOCUMENT_VALIDATORS[kind]
            for kind, name in self.collections.items()
            if kind in DOCUMENT_VALIDATORS
        }

    def _get_connection(self) -> sqlite3.Connection:
        """Get a database connection with row access by column name"""
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def _table(self, collection: str) -> str:
        if collection not in self.collections.values():
            raise ValueError(f"Unknown collection: {collection}")
        return f"{collection}_docs"

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

    def _serialize_document(self, document: Dict[str, Any]) -> str:
        """Serialize document to JSON string"""
        def json_serializer(obj):
            if isinstance(obj, datetime):
                return obj.isoformat()
            raise TypeError(f"Object of type {type(obj)} is not JSON serializable")

        return json.dumps(document, default=json_serializer)

    def _deserialize_row(self, row: sqlite3.Row) -> Dict[str, Any]:
        document = json.loads(row["document"])
        document["id"] = row["doc_id"]
        return document

    def init_collections(self) -> None:
        """Create one document table per collection"""
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            for collection in self.collections.values():
                table = self._table(collection)
                cursor.execute(f'''
                    CREATE TABLE IF NOT EXISTS {table} (
                        doc_id TEXT PRIMARY KEY,
                        document TEXT NOT NULL,
                        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                    )
                ''')
            conn.commit()
            logger.info(f"Initialized collections {sorted(self.collections.values())} in {self.db_path}")
        except Exception as e:
            logger.error(f"Error initializing collections: {e}")
            raise
        finally:
            conn.close()

    def create_document(self, collection: str, document: Dict[str, Any]) -> str:
        """Insert a document and return its generated id"""
        table = self._table(collection)
        self._validate_document(collection, document)
        conn = self._get_connection()
        try:
            doc_id = uuid.uuid4().hex
            conn.execute(
                f"INSERT INTO {table} (doc_id, document) VALUES (?, ?)",
                (doc_id, self._serialize_document(document)),
            )
            conn.commit()
            logger.info(f"Created document in {collection} with ID: {doc_id}")
            return doc_id
        except Exception as e:
            logger.error(f"Error creating document in {collection}: {e}")
            raise
        finally:
            conn.close()

    def get_document(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        """Get a document by ID"""
        table = self._table(collection)
        conn = self._get_connection()
        try:
            row = conn.execute(
                f"SELECT doc_id, document FROM {table} WHERE doc_id = ?", (doc_id,)
            ).fetchone()
            return self._deserialize_row(row) if row else None
        except Exception as e:
            logger.error(f"Error getting document from {collection}: {e}")
            raise
        finally:
            conn.close()

    def delete_document(self, collection: str, doc_id: str) -> bool:
        """Delete a document by ID"""
        table = self._table(collection)
        conn = self._get_connection()
        try:
            cursor = conn.execute(f"DELETE FROM {table} WHERE doc_id = ?", (doc_id,))
            success = cursor.rowcount > 0
            conn.commit()

            if success:
                logger.info(f"Deleted document from {collection} with ID: {doc_id}")
            else:
                logger.warning(f"No document found to delete in {collection} with ID: {doc_id}")

            return success
        except Exception as e:
            logger.error(f"Error deleting document from {collection}: {e}")
            raise
        finally:
            conn.close()

    def query_documents(
        self,
        collection: str,
        query: Optional[Dict[str, Any]] = None,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> List[Dict[str, Any]]:
        """Query documents by top-level field equality, in insertion order"""
        table = self._table(collection)
        sql = f"SELECT doc_id, document FROM {table}"
        where_clauses = []
        params: List[Any] = []

        for key, value in (query or {}).items():
            if key == "id":
                where_clauses.append("doc_id = ?")
                params.append(value)
            else:
                where_clauses.append("json_extract(document, ?) = ?")
                params.extend([f'$."{key}"', value])

        if where_clauses:
            sql += " WHERE " + " AND ".join(where_clauses)
        sql += " ORDER BY rowid"
        if limit is not None:
            sql += " LIMIT ? OFFSET ?"
            params.extend([limit, offset])

        conn = self._get_connection()
        try:
            rows = conn.execute(sql, params).fetchall()
            return [self._deserialize_row(row) for row in rows]
        except Exception as e:
            logger.error(f"Error querying documents from {collection}: {e}")
            raise
        finally:
            conn.close()

    def count_documents(self, collection: str) -> int:
        """Count documents in a collection"""
        table = self._table(collection)
        conn = self._get_connection()
        try:
            row = conn.execute(f"SELECT COUNT(*) AS count FROM {table}").fetchone()
            return row["count"]
        except Exception as e:
            logger.error(f"Error counting documents in {collection}: {e}")
            raise
        finally:
            conn.close()

    def ping(self) -> bool:
        """Cheap connectivity check for the health endpoint"""
        conn = self._get_connection()
        try:
            conn.execute("SELECT 1")
            return True
        finally:
            conn.close()

    def close(self) -> None:
        """Connections are opened per call; nothing to release"""
