"""
Pydantic schemas for document validation.
Each collection the gateway writes to has a validator registered here.
"""

from datetime import datetime
from typing import Any, Callable, Dict

from pydantic import BaseModel, ConfigDict, Field, field_validator


class FileRecordSchema(BaseModel):
    """Schema for file record documents"""
    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    file_name: str = Field(..., alias="fileName", min_length=1, max_length=1024, description="Client supplied file name")
    upload_date: datetime = Field(..., alias="uploadDate", description="Upload timestamp")
    file_url: str = Field(..., alias="fileURL", min_length=1, description="Signed read link captured at upload")

    @field_validator('file_name')
    def file_name_has_no_separator(cls, v):
        """The name is used verbatim as the blob key suffix, so it must stay a single path segment"""
        if "/" in v:
            raise ValueError("fileName must not contain '/'")
        return v


class DownloadEventSchema(BaseModel):
    """Schema for download event documents (written by an external collaborator)"""
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    file_name: str = Field(..., alias="fileName", min_length=1)
    downloaded_at: datetime = Field(..., alias="downloadedAt")


def _validator(schema: type) -> Callable[[Dict[str, Any]], None]:
    def validate(document: Dict[str, Any]) -> None:
        schema.model_validate(document)
    return validate


# Collection name -> validator. Collection names are configurable, so the
# registry is keyed by the logical kind and resolved by the adapters.
DOCUMENT_SCHEMAS = {
    "files": FileRecordSchema,
    "downloads": DownloadEventSchema,
}

DOCUMENT_VALIDATORS = {kind: _validator(schema) for kind, schema in DOCUMENT_SCHEMAS.items()}
