import re

import pytest

from file_gateway.errors import (
    DownloadError,
    MetadataDeleteError,
    MetadataWriteError,
    NotFound,
    StorageReadError,
    StorageWriteError,
    ValidationError,
)
from file_gateway.services import UploadPayload
from tests.consts import TEST_BUCKET_NAME
from tests.fixtures.gateway_fixtures import SAMPLE_FILES, payloads_for


def bucket_keys(s3_client):
    response = s3_client.list_objects_v2(Bucket=TEST_BUCKET_NAME)
    return sorted(item["Key"] for item in response.get("Contents", []))


def test_upload_commits_every_file(orchestrator, records, mocked_aws):
    names = ["report.pdf", "notes.txt", "photo.png"]

    file_urls = orchestrator.upload(payloads_for(names), names)

    assert len(file_urls) == 3
    for name, url in zip(names, file_urls):
        assert f"/files/{name}" in url
        assert "X-Amz-Signature" in url or "Signature" in url
    assert bucket_keys(mocked_aws) == sorted(f"files/{name}" for name in names)
    assert sorted(record.file_name for record in records.list_records()) == sorted(names)


def test_upload_keeps_content_type(orchestrator, mocked_aws):
    orchestrator.upload(payloads_for(["report.pdf"]), ["report.pdf"])

    head = mocked_aws.head_object(Bucket=TEST_BUCKET_NAME, Key="files/report.pdf")
    assert head["ContentType"] == "application/pdf"


def test_upload_defaults_missing_content_type(orchestrator, mocked_aws):
    orchestrator.upload([UploadPayload(content=b"raw")], ["blob.bin"])

    head = mocked_aws.head_object(Bucket=TEST_BUCKET_NAME, Key="files/blob.bin")
    assert head["ContentType"] == "application/octet-stream"


@pytest.mark.parametrize(
    "payload_count, names",
    [
        (2, ["only-one.txt"]),
        (1, ["a.txt", "b.txt"]),
        (0, []),
        (1, [""]),
        (1, ["nested/name.txt"]),
    ],
)
def test_upload_rejects_bad_requests_without_side_effects(orchestrator, records, mocked_aws, payload_count, names):
    payloads = [UploadPayload(content=b"x", content_type="text/plain")] * payload_count

    with pytest.raises(ValidationError):
        orchestrator.upload(payloads, names)

    assert bucket_keys(mocked_aws) == []
    assert records.list_records() == []


def test_partial_batch_keeps_prefix_and_stops(orchestrator, blob_store, records, mocked_aws, monkeypatch):
    names = ["first.txt", "second.txt", "third.txt"]
    attempted = []
    real_put = blob_store.put

    def put_failing_on_second(key, payload, content_type=None):
        attempted.append(key)
        if key == "files/second.txt":
            raise StorageWriteError(f"Failed to write blob {key}")
        real_put(key, payload, content_type=content_type)

    monkeypatch.setattr(blob_store, "put", put_failing_on_second)

    with pytest.raises(StorageWriteError):
        orchestrator.upload(payloads_for(names), names)

    assert attempted == ["files/first.txt", "files/second.txt"]
    assert bucket_keys(mocked_aws) == ["files/first.txt"]
    assert [record.file_name for record in records.list_records()] == ["first.txt"]


def test_link_failure_is_reported_as_write_error(orchestrator, blob_store, records, monkeypatch):
    def broken_signing(key, expires_in):
        raise StorageReadError("signing failed")

    monkeypatch.setattr(blob_store, "signed_url", broken_signing)

    with pytest.raises(StorageWriteError):
        orchestrator.upload(payloads_for(["notes.txt"]), ["notes.txt"])
    assert records.list_records() == []


def test_metadata_failure_leaves_orphaned_blob(orchestrator, records, mocked_aws, monkeypatch):
    def broken_create(**kwargs):
        raise MetadataWriteError("Failed to create record")

    monkeypatch.setattr(records, "create_record", broken_create)

    with pytest.raises(MetadataWriteError):
        orchestrator.upload(payloads_for(["notes.txt"]), ["notes.txt"])

    assert bucket_keys(mocked_aws) == ["files/notes.txt"]


def test_same_name_twice_is_last_write_wins(orchestrator, records, mocked_aws):
    orchestrator.upload([UploadPayload(b"v1", "text/plain")], ["dup.txt"])
    orchestrator.upload([UploadPayload(b"version two", "text/plain")], ["dup.txt"])

    body = mocked_aws.get_object(Bucket=TEST_BUCKET_NAME, Key="files/dup.txt")["Body"].read()
    assert body == b"version two"
    assert len(records.find_by_file_name("dup.txt")) == 2


def test_list_files_renders_display_dates(orchestrator):
    orchestrator.upload(payloads_for(["notes.txt"]), ["notes.txt"])

    entries = orchestrator.list_files()

    assert len(entries) == 1
    entry = entries[0]
    assert entry.file_name == "notes.txt"
    assert "/files/notes.txt" in entry.file_url
    assert re.fullmatch(r"\d{2}/\d{2}/\d{4}, \d{2}:\d{2}:\d{2} (AM|PM)", entry.upload_date)


def test_list_files_is_idempotent(orchestrator):
    orchestrator.upload(payloads_for(["notes.txt", "photo.png"]), ["notes.txt", "photo.png"])

    assert orchestrator.list_files() == orchestrator.list_files()


def test_download_returns_content_and_type(orchestrator):
    orchestrator.upload(payloads_for(["report.pdf"]), ["report.pdf"])

    result = orchestrator.download("report.pdf")

    assert result.content_type == "application/pdf"
    assert b"".join(result.blob.iter_chunks()) == SAMPLE_FILES["report.pdf"][0]


def test_download_missing_file_never_fetches(orchestrator, blob_store, monkeypatch):
    fetched = []
    monkeypatch.setattr(blob_store, "get", lambda key: fetched.append(key))

    with pytest.raises(NotFound):
        orchestrator.download("missing.txt")
    assert fetched == []


def test_download_fetch_failure_is_download_error(orchestrator, blob_store, monkeypatch):
    orchestrator.upload(payloads_for(["notes.txt"]), ["notes.txt"])

    def vanished(key):
        raise StorageReadError(f"Failed to read blob {key}")

    monkeypatch.setattr(blob_store, "get", vanished)

    with pytest.raises(DownloadError):
        orchestrator.download("notes.txt")


def test_delete_removes_blob_and_record(orchestrator, records, mocked_aws):
    orchestrator.upload(payloads_for(["notes.txt", "photo.png"]), ["notes.txt", "photo.png"])
    record = records.find_by_file_name("notes.txt")[0]

    orchestrator.delete(record.id)

    assert bucket_keys(mocked_aws) == ["files/photo.png"]
    assert records.get_record(record.id) is None
    assert record.id not in [entry.id for entry in orchestrator.list_files()]


def test_delete_unknown_id_is_not_found(orchestrator):
    with pytest.raises(NotFound):
        orchestrator.delete("does-not-exist")


def test_delete_metadata_failure_leaves_dangling_record(orchestrator, records, mocked_aws, monkeypatch):
    orchestrator.upload(payloads_for(["notes.txt"]), ["notes.txt"])
    record = records.find_by_file_name("notes.txt")[0]

    def broken_delete(record_id):
        raise MetadataDeleteError(f"Failed to delete record {record_id}")

    monkeypatch.setattr(records, "delete_record", broken_delete)

    with pytest.raises(MetadataDeleteError):
        orchestrator.delete(record.id)

    assert bucket_keys(mocked_aws) == []
    assert records.get_record(record.id) is not None


def test_delete_record_whose_blob_is_already_gone(orchestrator, records, mocked_aws):
    orchestrator.upload(payloads_for(["notes.txt"]), ["notes.txt"])
    record = records.find_by_file_name("notes.txt")[0]
    mocked_aws.delete_object(Bucket=TEST_BUCKET_NAME, Key="files/notes.txt")

    orchestrator.delete(record.id)

    assert records.get_record(record.id) is None
