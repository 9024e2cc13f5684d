"""
File lifecycle orchestration.

Upload, list, download and delete as compound operations over two stores
that fail independently. There is no transaction spanning the blob store and
the metadata store, and nothing is rolled back:

- a failed upload batch keeps every file committed before the failing one;
- a metadata write failing after its blob write leaves an orphaned blob;
- a metadata delete failing after its blob delete leaves a dangling record.

``ReconciliationService`` finds and repairs both kinds of drift.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Optional, Sequence

from file_gateway.adapters.blob_store import BlobContent, S3BlobStore, blob_key
from file_gateway.db_layer import FileRecordService
from file_gateway.errors import (
    DownloadError,
    MetadataDeleteError,
    MetadataWriteError,
    NotFound,
    StorageError,
    StorageWriteError,
    ValidationError,
)
from file_gateway.schemas import FileEntry

logger = logging.getLogger(__name__)

DEFAULT_UPLOAD_DATE_FORMAT = "%m/%d/%Y, %I:%M:%S %p"


@dataclass(frozen=True)
class UploadPayload:
    content: bytes
    content_type: Optional[str] = None


@dataclass
class DownloadResult:
    file_name: str
    blob: BlobContent

    @property
    def content_type(self) -> str:
        return self.blob.content_type


def validate_file_name(file_name: str) -> None:
    """A declared name becomes the last segment of the blob key."""
    if not isinstance(file_name, str) or not file_name.strip():
        raise ValidationError("File names must be non-empty strings")
    if "/" in file_name:
        raise ValidationError(f"File name must not contain '/': {file_name!r}")


class FileLifecycleOrchestrator:
    """The only component that mutates both the blob store and the metadata store."""

    def __init__(
        self,
        blob_store: S3BlobStore,
        records: FileRecordService,
        blob_prefix: str = "files/",
        signed_url_expiry_seconds: int = 604800,
        upload_date_format: str = DEFAULT_UPLOAD_DATE_FORMAT,
    ):
        self.blob_store = blob_store
        self.records = records
        self.blob_prefix = blob_prefix
        self.signed_url_expiry_seconds = signed_url_expiry_seconds
        self.upload_date_format = upload_date_format

    def _key(self, file_name: str) -> str:
        return blob_key(file_name, self.blob_prefix)

    def upload(self, payloads: Sequence[UploadPayload], file_names: Sequence[str]) -> List[str]:
        """Store each payload under its declared name and return the signed links, in input order.

        Files are committed one at a time. The first failure stops the batch:
        earlier files stay committed, later ones are never attempted. Retrying
        the whole batch overwrites the committed blobs and duplicates their
        records. An existing blob with the same name is silently replaced.
        """
        if not payloads or not file_names or len(payloads) != len(file_names):
            raise ValidationError("Missing required fields or mismatch in file count")
        for file_name in file_names:
            validate_file_name(file_name)

        file_urls = []
        for index, (payload, file_name) in enumerate(zip(payloads, file_names), start=1):
            key = self._key(file_name)
            try:
                self.blob_store.put(key, payload.content, content_type=payload.content_type)
                file_url = self.blob_store.signed_url(key, self.signed_url_expiry_seconds)
            except StorageError as e:
                logger.error(f"Upload batch stopped at file {index}/{len(payloads)} ({file_name}); {index - 1} committed")
                if isinstance(e, StorageWriteError):
                    raise
                raise StorageWriteError(f"Failed to issue read link for {key}") from e

            try:
                record = self.records.create_record(
                    file_name=file_name,
                    upload_date=datetime.now(timezone.utc),
                    file_url=file_url,
                )
            except MetadataWriteError:
                logger.error(
                    f"Upload batch stopped at file {index}/{len(payloads)}; blob {key} is now orphaned"
                )
                raise

            logger.info(f"Committed {file_name} as record {record.id}")
            file_urls.append(file_url)

        return file_urls

    def list_files(self) -> List[FileEntry]:
        """Every record with its upload date rendered for display. No blob store access."""
        return [
            FileEntry(
                id=record.id,
                file_name=record.file_name,
                upload_date=self._display_date(record.upload_date),
                file_url=record.file_url,
            )
            for record in self.records.list_records()
        ]

    def _display_date(self, value: datetime) -> str:
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.astimezone().strftime(self.upload_date_format)

    def download(self, file_name: str) -> DownloadResult:
        """Open the blob stored under ``file_name``.

        The existence check happens before any fetch; the content is then read
        straight from the blob store rather than through a signed link.
        """
        key = self._key(file_name)
        if not self.blob_store.exists(key):
            raise NotFound("File not found")
        try:
            blob = self.blob_store.get(key)
        except StorageError as e:
            # e.g. deleted between the existence check and the read
            raise DownloadError(f"Failed to download {key}") from e
        return DownloadResult(file_name=file_name, blob=blob)

    def delete(self, record_id: str) -> None:
        """Delete a file's blob, then its record.

        If the record delete fails after the blob is gone, the record is left
        dangling; there is no compensating step.
        """
        record = self.records.get_record(record_id)
        if record is None:
            raise NotFound("File not found")

        self.blob_store.delete(self._key(record.file_name))
        try:
            deleted = self.records.delete_record(record_id)
        except MetadataDeleteError:
            logger.error(f"Blob for record {record_id} deleted but the record was not; record is dangling")
            raise
        if not deleted:
            # a concurrent delete removed it first
            logger.warning(f"Record {record_id} was already gone when deleting it")
