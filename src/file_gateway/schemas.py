####################################
# --- Request/response schemas --- #
####################################

from datetime import datetime
from typing import Dict, List, Tuple

from pydantic import BaseModel, ConfigDict, Field


class FileRecord(BaseModel):
    """A file's metadata record, one per upload."""
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str = Field(description="Store-generated identifier.")
    file_name: str = Field(alias="fileName", description="Client-supplied name; the blob lives at files/<fileName>.")
    upload_date: datetime = Field(alias="uploadDate", description="When the record was created.")
    file_url: str = Field(alias="fileURL", description="Signed read link captured at upload time.")


class FileEntry(BaseModel):
    """One row of `GET /api/files`."""
    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "id": "6f1c0e0a9d5b4c7e8f3a2b1c0d9e8f7a",
                "fileName": "report.pdf",
                "uploadDate": "10/19/2026, 03:04:05 PM",
                "fileURL": "https://bucket.s3.amazonaws.com/files/report.pdf?X-Amz-Signature=...",
            }
        },
    )

    id: str
    file_name: str = Field(alias="fileName")
    upload_date: str = Field(alias="uploadDate", description="Upload time as a display string.")
    file_url: str = Field(alias="fileURL")


class UploadResponse(BaseModel):
    """Response model for `POST /api/upload`."""
    model_config = ConfigDict(populate_by_name=True)

    message: str
    file_urls: List[str] = Field(alias="fileURLs")


class MessageResponse(BaseModel):
    """Response model for mutations that only report an outcome."""
    message: str


class StatisticsResponse(BaseModel):
    """Response model for `GET /api/statistics`."""
    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={"example": {"totalDownloads": 12, "storageUsed": "1.25", "totalFiles": 40}},
    )

    total_downloads: int = Field(alias="totalDownloads")
    storage_used: str = Field(alias="storageUsed", description="Bytes in the bucket, in GiB, two decimals.")
    total_files: int = Field(alias="totalFiles", description="Objects in the bucket, not metadata records.")


class FileFormatsResponse(BaseModel):
    """Response model for `GET /api/file-formats`."""
    model_config = ConfigDict(json_schema_extra={"example": {"formats": [["PDF", 3], ["PNG", 2]]}})

    formats: List[Tuple[str, int]]


class ReconciliationReport(BaseModel):
    """Differences between the blob listing and the metadata records."""
    model_config = ConfigDict(populate_by_name=True)

    orphaned_blobs: List[str] = Field(alias="orphanedBlobs", description="Keys with no record.")
    dangling_records: List[str] = Field(alias="danglingRecords", description="Record ids whose blob is missing.")
    duplicate_file_names: Dict[str, List[str]] = Field(
        alias="duplicateFileNames",
        description="File names shared by more than one record, with the record ids.",
    )

    @property
    def consistent(self) -> bool:
        return not (self.orphaned_blobs or self.dangling_records)


class ReconciliationRepairResponse(BaseModel):
    """Response model for `POST /api/reconciliation/repair`."""
    model_config = ConfigDict(populate_by_name=True)

    adopted_blobs: List[str] = Field(alias="adoptedBlobs", description="Orphaned keys that now have a record.")
    removed_records: List[str] = Field(alias="removedRecords", description="Dangling record ids that were deleted.")
