"""
Adapter layer for the file gateway.

Wraps the blob store behind a small class that speaks the gateway's error types.
"""

from .blob_store import BlobContent, BlobMetadata, S3BlobStore, blob_key

__all__ = ["BlobContent", "BlobMetadata", "S3BlobStore", "blob_key"]
