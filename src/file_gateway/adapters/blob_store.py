"""
Blob store adapter over an S3-compatible bucket.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, Iterator, List, Optional

from botocore.exceptions import BotoCoreError, ClientError

from file_gateway.errors import StorageDeleteError, StorageReadError, StorageWriteError
from file_gateway.s3.delete_objects import delete_s3_object
from file_gateway.s3.read_objects import (
    fetch_s3_object,
    fetch_s3_object_metadata,
    generate_presigned_get_url,
    iter_s3_object_keys,
    object_exists_in_s3,
)
from file_gateway.s3.write_objects import upload_s3_object

if TYPE_CHECKING:
    from mypy_boto3_s3 import S3Client

logger = logging.getLogger(__name__)

BLOB_ERRORS = (ClientError, BotoCoreError)
STREAM_CHUNK_SIZE = 64 * 1024


def blob_key(file_name: str, prefix: str = "files/") -> str:
    """Key under which a file named ``file_name`` is stored."""
    return f"{prefix}{file_name}"


@dataclass(frozen=True)
class BlobMetadata:
    key: str
    size: Optional[int]
    content_type: Optional[str]
    last_modified: Optional[datetime]


@dataclass
class BlobContent:
    """An open object body plus the headers a download needs."""
    body: object
    content_type: str
    content_length: Optional[int]

    def iter_chunks(self, chunk_size: int = STREAM_CHUNK_SIZE) -> Iterator[bytes]:
        try:
            yield from self.body.iter_chunks(chunk_size)
        finally:
            self.body.close()


class S3BlobStore:
    """Stores, fetches, lists and deletes objects keyed by path; issues signed read links."""

    def __init__(self, bucket_name: str, s3_client: "S3Client"):
        self.bucket_name = bucket_name
        self.s3_client = s3_client

    def put(self, key: str, payload: bytes, content_type: Optional[str] = None) -> None:
        try:
            upload_s3_object(
                bucket_name=self.bucket_name,
                object_key=key,
                file_content=payload,
                s3_client=self.s3_client,
                content_type=content_type,
            )
        except BLOB_ERRORS as e:
            logger.error(f"Error uploading {key} to bucket {self.bucket_name}: {e}")
            raise StorageWriteError(f"Failed to write blob {key}") from e
        logger.info(f"Uploaded {len(payload)} bytes to s3://{self.bucket_name}/{key}")

    def exists(self, key: str) -> bool:
        try:
            return object_exists_in_s3(self.bucket_name, key, self.s3_client)
        except BLOB_ERRORS as e:
            logger.error(f"Error checking {key} in bucket {self.bucket_name}: {e}")
            raise StorageReadError(f"Failed to check blob {key}") from e

    def get(self, key: str) -> BlobContent:
        try:
            response = fetch_s3_object(self.bucket_name, key, self.s3_client)
        except BLOB_ERRORS as e:
            logger.error(f"Error fetching {key} from bucket {self.bucket_name}: {e}")
            raise StorageReadError(f"Failed to read blob {key}") from e
        return BlobContent(
            body=response["Body"],
            content_type=response.get("ContentType") or "application/octet-stream",
            content_length=response.get("ContentLength"),
        )

    def head(self, key: str) -> BlobMetadata:
        try:
            response = fetch_s3_object_metadata(self.bucket_name, key, self.s3_client)
        except BLOB_ERRORS as e:
            raise StorageReadError(f"Failed to read metadata of blob {key}") from e
        return BlobMetadata(
            key=key,
            size=response.get("ContentLength"),
            content_type=response.get("ContentType"),
            last_modified=response.get("LastModified"),
        )

    def list_keys(self, prefix: str = "") -> List[str]:
        try:
            return list(iter_s3_object_keys(self.bucket_name, self.s3_client, prefix=prefix))
        except BLOB_ERRORS as e:
            logger.error(f"Error listing bucket {self.bucket_name} (prefix={prefix!r}): {e}")
            raise StorageReadError(f"Failed to list blobs under {prefix!r}") from e

    def signed_url(self, key: str, expires_in: int) -> str:
        try:
            return generate_presigned_get_url(self.bucket_name, key, self.s3_client, expires_in)
        except BLOB_ERRORS as e:
            logger.error(f"Error signing read link for {key}: {e}")
            raise StorageReadError(f"Failed to sign read link for {key}") from e

    def delete(self, key: str) -> None:
        try:
            delete_s3_object(self.bucket_name, key, self.s3_client)
        except BLOB_ERRORS as e:
            logger.error(f"Error deleting {key} from bucket {self.bucket_name}: {e}")
            raise StorageDeleteError(f"Failed to delete blob {key}") from e
        logger.info(f"Deleted s3://{self.bucket_name}/{key}")

    def ping(self) -> bool:
        """Cheap connectivity check for the health endpoint"""
        try:
            self.s3_client.head_bucket(Bucket=self.bucket_name)
        except BLOB_ERRORS as e:
            raise StorageReadError(f"Bucket {self.bucket_name} unreachable") from e
        return True
