"""
File record service.
Handles the one-document-per-upload collection behind the file listing.
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

import pydantic

from docstore.local import DocumentAdapter
from file_gateway.errors import MetadataDeleteError, MetadataReadError, MetadataWriteError
from file_gateway.schemas import FileRecord

logger = logging.getLogger(__name__)


class FileRecordService:
    """Service for managing file record documents"""

    def __init__(self, adapter: DocumentAdapter, collection: str = "files"):
        self.adapter = adapter
        self.collection = collection

    def _to_record(self, document: Dict[str, Any]) -> FileRecord:
        try:
            return FileRecord.model_validate(document)
        except pydantic.ValidationError as e:
            # written by an older version or by hand
            logger.error(f"Malformed record {document.get('id')} in {self.collection}: {e}")
            raise MetadataReadError(f"Record {document.get('id')} in {self.collection} is malformed") from e

    def create_record(self, file_name: str, upload_date: datetime, file_url: str) -> FileRecord:
        """Append a new record; records are never updated in place"""
        document = {
            "fileName": file_name,
            "uploadDate": upload_date,
            "fileURL": file_url,
        }
        try:
            doc_id = self.adapter.create_document(self.collection, document)
        except Exception as e:
            raise MetadataWriteError(f"Failed to create record for {file_name}") from e
        return FileRecord(id=doc_id, file_name=file_name, upload_date=upload_date, file_url=file_url)

    def get_record(self, record_id: str) -> Optional[FileRecord]:
        try:
            document = self.adapter.get_document(self.collection, record_id)
        except Exception as e:
            raise MetadataReadError(f"Failed to read record {record_id}") from e
        return self._to_record(document) if document else None

    def list_records(self) -> List[FileRecord]:
        try:
            documents = self.adapter.query_documents(self.collection)
        except Exception as e:
            raise MetadataReadError("Failed to list file records") from e
        return [self._to_record(document) for document in documents]

    def find_by_file_name(self, file_name: str) -> List[FileRecord]:
        try:
            documents = self.adapter.query_documents(self.collection, {"fileName": file_name})
        except Exception as e:
            raise MetadataReadError(f"Failed to look up records for {file_name}") from e
        return [self._to_record(document) for document in documents]

    def delete_record(self, record_id: str) -> bool:
        try:
            return self.adapter.delete_document(self.collection, record_id)
        except Exception as e:
            raise MetadataDeleteError(f"Failed to delete record {record_id}") from e
