import json
import re
from typing import List
from urllib.parse import quote

from fastapi import APIRouter, Depends, File, Form, Path, UploadFile, status
from fastapi.responses import StreamingResponse

from file_gateway.dependencies import get_orchestrator
from file_gateway.errors import ValidationError, failure_message
from file_gateway.schemas import FileEntry, MessageResponse, UploadResponse
from file_gateway.services import FileLifecycleOrchestrator, UploadPayload

router = APIRouter()


def parse_file_names(raw: str) -> List[str]:
    """The declared names arrive as a JSON array in a single form field."""
    try:
        file_names = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ValidationError("fileNames must be a JSON array of strings") from e
    if not isinstance(file_names, list) or not all(isinstance(name, str) for name in file_names):
        raise ValidationError("fileNames must be a JSON array of strings")
    return file_names


def content_disposition(file_name: str) -> str:
    """Attachment header with a printable-ASCII `filename` and the exact name in `filename*` (RFC 6266)."""
    fallback = re.sub(r'[^\x20-\x7e]|["\\]', "_", file_name)
    return f"attachment; filename=\"{fallback}\"; filename*=UTF-8''{quote(file_name, safe='')}"


@router.post(
    "/upload",
    response_model=UploadResponse,
    responses={
        status.HTTP_400_BAD_REQUEST: {"description": "Missing fields or mismatch in file count."},
        status.HTTP_500_INTERNAL_SERVER_ERROR: {"description": "A blob or metadata write failed."},
    },
)
def upload_files(
    files: List[UploadFile] = File(default=[]),
    file_names: str = Form(default="[]", alias="fileNames"),
    orchestrator: FileLifecycleOrchestrator = Depends(get_orchestrator),
) -> UploadResponse:
    """
    Upload a batch of files.

    Each part in `files` is stored under the name at the same position in
    `fileNames`. Files are committed in order and a failure stops the batch
    without undoing the files already committed.
    """
    names = parse_file_names(file_names)
    payloads = [UploadPayload(content=upload.file.read(), content_type=upload.content_type) for upload in files]
    with failure_message("Failed to upload files"):
        file_urls = orchestrator.upload(payloads, names)
    return UploadResponse(message="Files uploaded successfully", file_urls=file_urls)


@router.get("/files", response_model=List[FileEntry])
def list_files(orchestrator: FileLifecycleOrchestrator = Depends(get_orchestrator)) -> List[FileEntry]:
    """List every file record. Unpaginated."""
    with failure_message("Failed to fetch files"):
        return orchestrator.list_files()


@router.get(
    "/download/{file_name}",
    responses={
        status.HTTP_404_NOT_FOUND: {"description": "No blob stored under `file_name`."},
        status.HTTP_200_OK: {
            "description": "The file content.",
            "content": {
                "application/octet-stream": {
                    "schema": {"type": "string", "format": "binary"},
                },
            },
        },
    },
)
def download_file(
    file_name: str = Path(..., description="Declared name the file was uploaded under"),
    orchestrator: FileLifecycleOrchestrator = Depends(get_orchestrator),
) -> StreamingResponse:
    """Download a file as an attachment."""
    with failure_message("Failed to download file"):
        result = orchestrator.download(file_name)

    headers = {"Content-Disposition": content_disposition(file_name)}
    if result.blob.content_length is not None:
        headers["Content-Length"] = str(result.blob.content_length)
    return StreamingResponse(
        content=result.blob.iter_chunks(),
        media_type=result.content_type,
        headers=headers,
    )


@router.delete(
    "/files/{record_id}",
    response_model=MessageResponse,
    responses={status.HTTP_404_NOT_FOUND: {"description": "No record with this id."}},
)
def delete_file(
    record_id: str = Path(..., description="Identifier of the file record"),
    orchestrator: FileLifecycleOrchestrator = Depends(get_orchestrator),
) -> MessageResponse:
    """Delete a file: its blob first, then its record."""
    with failure_message("Failed to delete file"):
        orchestrator.delete(record_id)
    return MessageResponse(message="File deleted successfully")
