"""
Error taxonomy for the gateway and the FastAPI handlers that map it to responses.

Store adapters translate driver exceptions into these types; routes never
catch them. Client errors carry their message to the caller, server errors
are logged with their cause and answered with a generic message.
"""

import logging
from contextlib import contextmanager
from typing import Iterator, Optional

import pydantic
from fastapi import Request, status
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class GatewayError(Exception):
    """Base class for every error the gateway raises on purpose."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, *, public_message: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.public_message = public_message


class ValidationError(GatewayError):
    """Malformed or inconsistent request shape, e.g. mismatched payload/name counts."""

    status_code = status.HTTP_400_BAD_REQUEST


class NotFound(GatewayError):
    """Referenced file or record is absent."""

    status_code = status.HTTP_404_NOT_FOUND


class StorageError(GatewayError):
    """Failure talking to the blob store."""


class StorageWriteError(StorageError):
    pass


class StorageReadError(StorageError):
    pass


class DownloadError(StorageReadError):
    """The blob exists but its content could not be fetched."""


class StorageDeleteError(StorageError):
    pass


class MetadataError(GatewayError):
    """Failure talking to the document store."""


class MetadataWriteError(MetadataError):
    pass


class MetadataReadError(MetadataError):
    pass


class MetadataDeleteError(MetadataError):
    pass


class AggregationPartialFailure(GatewayError):
    """A single object could not be measured during a corpus scan.

    Recovered where it is raised: the object is skipped and the scan goes on.
    """

    def __init__(self, key: str, cause: Exception) -> None:
        super().__init__(f"Could not read metadata for {key}: {cause}")
        self.key = key
        self.cause = cause


async def handle_gateway_error(request: Request, exc: GatewayError) -> JSONResponse:
    """Map a GatewayError to its status code; server errors get a generic body."""
    if exc.status_code < status.HTTP_500_INTERNAL_SERVER_ERROR:
        return JSONResponse(status_code=exc.status_code, content={"message": exc.message})

    logger.error(f"{request.method} {request.url.path} failed: {exc!r}", exc_info=exc.__cause__ or exc)
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.public_message or "Internal server error"},
    )


async def handle_pydantic_validation_errors(request: Request, exc: pydantic.ValidationError) -> JSONResponse:
    errors = exc.errors()
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "detail": [
                {
                    "msg": error["msg"],
                    "loc": list(error.get("loc", ())),
                }
                for error in errors
            ]
        },
    )


async def handle_broad_exceptions(request: Request, call_next):
    """Handle any exception that goes unhandled by a more specific exception handler."""
    try:
        return await call_next(request)
    except Exception:  # pylint: disable=broad-except
        logger.exception(f"Unhandled error on {request.method} {request.url.path}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"message": "Internal server error"},
        )


@contextmanager
def failure_message(message: str) -> Iterator[None]:
    """Attach the caller-facing message for server errors raised inside the block."""
    try:
        yield
    except GatewayError as e:
        if e.public_message is None:
            e.public_message = message
        raise
