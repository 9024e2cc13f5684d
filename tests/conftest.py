import os

import boto3
import pytest
from fastapi.testclient import TestClient
from moto import mock_aws

from docstore.nosql_adapter import NoSQLAdapter
from file_gateway.adapters.blob_store import S3BlobStore
from file_gateway.config.settings import Settings
from file_gateway.db_layer import DownloadEventService, FileRecordService
from file_gateway.main import create_app
from file_gateway.services import (
    FileLifecycleOrchestrator,
    FormatClassifier,
    ReconciliationService,
    StatisticsAggregator,
)
from tests.consts import TEST_BUCKET_NAME, TEST_REGION


@pytest.fixture
def aws_credentials(monkeypatch):
    """Fake credentials so nothing can reach a real account."""
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "testing")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "testing")
    monkeypatch.setenv("AWS_SECURITY_TOKEN", "testing")
    monkeypatch.setenv("AWS_SESSION_TOKEN", "testing")
    monkeypatch.setenv("AWS_DEFAULT_REGION", TEST_REGION)


@pytest.fixture
def mocked_aws(aws_credentials):
    """S3 client against moto with the test bucket created."""
    with mock_aws():
        s3_client = boto3.client("s3", region_name=TEST_REGION)
        s3_client.create_bucket(Bucket=TEST_BUCKET_NAME)
        yield s3_client


@pytest.fixture
def test_settings(tmp_path) -> Settings:
    return Settings(
        deployment_mode="local-dev",
        s3_bucket_name=TEST_BUCKET_NAME,
        sqlite_db_path=str(tmp_path / "test_gateway.db"),
        metadata_backend="sqlite",
    )


@pytest.fixture
def document_adapter(test_settings) -> NoSQLAdapter:
    adapter = NoSQLAdapter(test_settings.sqlite_db_path, collections=test_settings.collections)
    adapter.init_collections()
    yield adapter
    if os.path.exists(test_settings.sqlite_db_path):
        os.remove(test_settings.sqlite_db_path)


@pytest.fixture
def blob_store(mocked_aws) -> S3BlobStore:
    return S3BlobStore(TEST_BUCKET_NAME, mocked_aws)


@pytest.fixture
def records(document_adapter) -> FileRecordService:
    return FileRecordService(document_adapter, "files")


@pytest.fixture
def download_events(document_adapter) -> DownloadEventService:
    return DownloadEventService(document_adapter, "downloads")


@pytest.fixture
def orchestrator(blob_store, records) -> FileLifecycleOrchestrator:
    return FileLifecycleOrchestrator(blob_store, records)


@pytest.fixture
def aggregator(blob_store, download_events) -> StatisticsAggregator:
    return StatisticsAggregator(blob_store, download_events, FormatClassifier())


@pytest.fixture
def reconciliation(blob_store, records) -> ReconciliationService:
    return ReconciliationService(blob_store, records)


@pytest.fixture
def client(test_settings, mocked_aws, document_adapter) -> TestClient:
    app = create_app(settings=test_settings, s3_client=mocked_aws, document_adapter=document_adapter)
    with TestClient(app) as test_client:
        yield test_client
