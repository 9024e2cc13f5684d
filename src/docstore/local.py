import logging
from typing import Dict, Optional, Union

from .mongo_adapter import MongoAdapter
from .nosql_adapter import NoSQLAdapter

logger = logging.getLogger(__name__)

DocumentAdapter = Union[NoSQLAdapter, MongoAdapter]


def get_nosql_adapter(
    backend: str = "sqlite",
    db_path: str = "gateway.db",
    mongodb_uri: Optional[str] = None,
    mongodb_database: Optional[str] = None,
    collections: Optional[Dict[str, str]] = None,
) -> DocumentAdapter:
    """Build the document adapter for the configured backend."""
    if backend == "mongo":
        logger.info("Using MongoDB document store")
        return MongoAdapter(mongodb_uri, database=mongodb_database, collections=collections)
    if backend == "sqlite":
        logger.info(f"Using SQLite document store at {db_path}")
        return NoSQLAdapter(db_path, collections=collections)
    raise ValueError(f"Unknown metadata backend: {backend}")


def init_db(adapter: DocumentAdapter) -> None:
    """Create collections (and indexes, where the backend has them)."""
    adapter.init_collections()
