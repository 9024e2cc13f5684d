"""
Document store layer for the file gateway.

Holds the document adapters (SQLite JSON documents for local development,
MongoDB for deployed modes) and the per-collection document schemas.
"""

from .local import get_nosql_adapter
from .nosql_adapter import NoSQLAdapter

__all__ = ["get_nosql_adapter", "NoSQLAdapter"]
