import logging
import sys
from textwrap import dedent
from typing import TYPE_CHECKING, Optional

import pydantic
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.routing import APIRoute

from docstore.local import DocumentAdapter, get_nosql_adapter, init_db
from file_gateway.adapters.blob_store import S3BlobStore
from file_gateway.config.settings import Settings
from file_gateway.db_layer import DownloadEventService, FileRecordService
from file_gateway.errors import (
    GatewayError,
    handle_broad_exceptions,
    handle_gateway_error,
    handle_pydantic_validation_errors,
)
from file_gateway.routers.files import router as files_router
from file_gateway.routers.health import router as health_router
from file_gateway.routers.reconciliation import router as reconciliation_router
from file_gateway.routers.statistics import router as statistics_router
from file_gateway.s3.client import get_s3_client
from file_gateway.services import (
    FileLifecycleOrchestrator,
    FormatClassifier,
    ReconciliationService,
    StatisticsAggregator,
)

if TYPE_CHECKING:
    from mypy_boto3_s3 import S3Client

logger = logging.getLogger(__name__)


def setup_logging(level: str = "INFO") -> None:
    """
    Configures the root logger for the application.
    Call once at startup.
    """
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s - %(name)s - [%(levelname)s] - %(message)s",
        stream=sys.stdout,
    )
    # Silence noisy libraries
    for noisy in ("botocore", "boto3", "urllib3", "pymongo"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


def create_app(
    settings: Settings | None = None,
    s3_client: Optional["S3Client"] = None,
    document_adapter: Optional[DocumentAdapter] = None,
) -> FastAPI:
    """Create a FastAPI application.

    The S3 client and document adapter are built from settings unless given.
    """
    settings = settings or Settings()

    app = FastAPI(
        title="File Gateway",
        summary="Store files in a blob store and track them in a document store",
        version="v1",
        description=dedent(
            """\
        Upload, list, download and delete files, and summarize the stored corpus.

        | Store | Holds |
        | --- | --- |
        | Blob store (S3) | file content at `files/<fileName>` |
        | Document store | one record per upload, plus download events |
        """
        ),
        docs_url="/docs",
        generate_unique_id_function=custom_generate_unique_id,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allowed_origins,
        allow_methods=["GET", "POST", "PUT", "DELETE"],
        allow_headers=["*"],
    )
    app.state.settings = settings

    blob_store = S3BlobStore(settings.s3_bucket_name, s3_client or get_s3_client(settings))
    if document_adapter is None:
        document_adapter = get_nosql_adapter(
            backend=settings.metadata_backend,
            db_path=settings.sqlite_db_path,
            mongodb_uri=settings.mongodb_uri,
            mongodb_database=settings.mongodb_database,
            collections=settings.collections,
        )
    logger.info("initializing document store")
    init_db(document_adapter)

    records = FileRecordService(document_adapter, settings.files_collection)
    app.state.blob_store = blob_store
    app.state.document_adapter = document_adapter
    app.state.orchestrator = FileLifecycleOrchestrator(
        blob_store,
        records,
        blob_prefix=settings.blob_prefix,
        signed_url_expiry_seconds=settings.signed_url_expiry_seconds,
        upload_date_format=settings.upload_date_format,
    )
    app.state.statistics = StatisticsAggregator(
        blob_store,
        DownloadEventService(document_adapter, settings.downloads_collection),
        FormatClassifier(),
    )
    app.state.reconciliation = ReconciliationService(
        blob_store,
        records,
        blob_prefix=settings.blob_prefix,
        signed_url_expiry_seconds=settings.signed_url_expiry_seconds,
    )

    app.include_router(files_router, prefix="/api", tags=["files"])
    app.include_router(statistics_router, prefix="/api", tags=["statistics"])
    app.include_router(reconciliation_router, prefix="/api", tags=["reconciliation"])
    app.include_router(health_router, tags=["health"])

    app.add_exception_handler(GatewayError, handle_gateway_error)
    app.add_exception_handler(
        exc_class_or_status_code=pydantic.ValidationError,
        handler=handle_pydantic_validation_errors,
    )
    app.middleware("http")(handle_broad_exceptions)

    return app


def custom_generate_unique_id(route: APIRoute):
    """
    Generate prettier `operationId`s in the OpenAPI schema.

    These become the function names in generated client SDKs.
    """
    return f"{route.tags[0]}-{route.name}"


if __name__ == "__main__":
    import uvicorn

    settings = Settings()
    setup_logging(settings.log_level)
    app = create_app(settings)
    uvicorn.run(app, host="0.0.0.0", port=8000)
