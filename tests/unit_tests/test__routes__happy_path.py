import json
import sqlite3

from fastapi import status
from fastapi.testclient import TestClient

from file_gateway.errors import MetadataWriteError
from tests.consts import TEST_BUCKET_NAME
from tests.fixtures.gateway_fixtures import SAMPLE_FILES

TEST_PDF_CONTENT, TEST_PDF_CONTENT_TYPE = SAMPLE_FILES["report.pdf"]


def upload(client: TestClient, names, declared_names=None):
    files = [("files", (name, SAMPLE_FILES[name][0], SAMPLE_FILES[name][1])) for name in names]
    data = {"fileNames": json.dumps(declared_names if declared_names is not None else names)}
    return client.post("/api/upload", files=files, data=data)


def test_upload_files(client: TestClient, mocked_aws):
    response = upload(client, ["report.pdf", "notes.txt"])

    assert response.status_code == status.HTTP_200_OK
    body = response.json()
    assert body["message"] == "Files uploaded successfully"
    assert len(body["fileURLs"]) == 2
    assert "files/report.pdf" in body["fileURLs"][0]
    assert "files/notes.txt" in body["fileURLs"][1]
    keys = [item["Key"] for item in mocked_aws.list_objects_v2(Bucket=TEST_BUCKET_NAME)["Contents"]]
    assert sorted(keys) == ["files/notes.txt", "files/report.pdf"]


def test_upload_stores_under_declared_name(client: TestClient):
    upload(client, ["report.pdf"], declared_names=["renamed.pdf"])

    response = client.get("/api/download/renamed.pdf")

    assert response.status_code == status.HTTP_200_OK
    assert response.content == TEST_PDF_CONTENT


def test_upload_count_mismatch(client: TestClient):
    response = upload(client, ["report.pdf", "notes.txt"], declared_names=["report.pdf"])

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json() == {"message": "Missing required fields or mismatch in file count"}
    assert client.get("/api/files").json() == []


def test_upload_without_files(client: TestClient):
    response = client.post("/api/upload", data={"fileNames": json.dumps(["report.pdf"])})

    assert response.status_code == status.HTTP_400_BAD_REQUEST


def test_upload_with_malformed_names(client: TestClient):
    response = client.post(
        "/api/upload",
        files=[("files", ("report.pdf", TEST_PDF_CONTENT, TEST_PDF_CONTENT_TYPE))],
        data={"fileNames": "report.pdf"},
    )

    assert response.status_code == status.HTTP_400_BAD_REQUEST


def test_upload_metadata_failure_is_generic_500(client: TestClient, monkeypatch):
    records = client.app.state.orchestrator.records

    def broken_create(**kwargs):
        raise MetadataWriteError("sqlite exploded")

    monkeypatch.setattr(records, "create_record", broken_create)

    response = upload(client, ["notes.txt"])

    assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
    assert response.json() == {"message": "Failed to upload files"}


def test_list_files(client: TestClient):
    upload(client, ["report.pdf", "notes.txt"])

    response = client.get("/api/files")

    assert response.status_code == status.HTTP_200_OK
    entries = response.json()
    assert [entry["fileName"] for entry in entries] == ["report.pdf", "notes.txt"]
    for entry in entries:
        assert set(entry) == {"id", "fileName", "uploadDate", "fileURL"}


def test_download_file(client: TestClient):
    upload(client, ["report.pdf"])

    response = client.get("/api/download/report.pdf")

    assert response.status_code == status.HTTP_200_OK
    assert response.content == TEST_PDF_CONTENT
    assert response.headers["content-type"] == TEST_PDF_CONTENT_TYPE
    assert response.headers["content-disposition"] == "attachment; filename=\"report.pdf\"; filename*=UTF-8''report.pdf"


def test_download_names_outside_ascii_or_with_quotes(client: TestClient):
    names = ["报告.txt", 'draft "v2".txt']
    response = client.post(
        "/api/upload",
        files=[("files", ("upload.txt", b"content", "text/plain")) for _ in names],
        data={"fileNames": json.dumps(names)},
    )
    assert response.status_code == status.HTTP_200_OK

    non_ascii = client.get(f"/api/download/{names[0]}")
    quoted = client.get(f"/api/download/{names[1]}")

    assert non_ascii.status_code == status.HTTP_200_OK
    assert non_ascii.content == b"content"
    assert non_ascii.headers["content-disposition"] == (
        "attachment; filename=\"__.txt\"; filename*=UTF-8''%E6%8A%A5%E5%91%8A.txt"
    )
    assert quoted.status_code == status.HTTP_200_OK
    assert quoted.headers["content-disposition"] == (
        "attachment; filename=\"draft _v2_.txt\"; filename*=UTF-8''draft%20%22v2%22.txt"
    )


def test_download_missing_file(client: TestClient):
    response = client.get("/api/download/missing.pdf")

    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json() == {"message": "File not found"}


def test_delete_file(client: TestClient, mocked_aws):
    upload(client, ["report.pdf"])
    record_id = client.get("/api/files").json()[0]["id"]

    response = client.delete(f"/api/files/{record_id}")

    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {"message": "File deleted successfully"}
    assert client.get("/api/files").json() == []
    assert "Contents" not in mocked_aws.list_objects_v2(Bucket=TEST_BUCKET_NAME)


def test_delete_unknown_record(client: TestClient):
    response = client.delete("/api/files/does-not-exist")

    assert response.status_code == status.HTTP_404_NOT_FOUND


def test_statistics(client: TestClient):
    upload(client, ["report.pdf", "notes.txt", "photo.png"])

    response = client.get("/api/statistics")

    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {"totalDownloads": 0, "storageUsed": "0.00", "totalFiles": 3}


def test_file_formats(client: TestClient):
    upload(client, ["report.pdf", "notes.txt", "photo.png"])

    response = client.get("/api/file-formats")

    assert response.status_code == status.HTTP_200_OK
    assert sorted(map(tuple, response.json()["formats"])) == [("PDF", 1), ("PNG", 1), ("Text", 1)]


def test_reconciliation_audit(client: TestClient, mocked_aws):
    mocked_aws.put_object(Bucket=TEST_BUCKET_NAME, Key="files/orphan.txt", Body=b"x")

    response = client.get("/api/reconciliation")

    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {
        "orphanedBlobs": ["files/orphan.txt"],
        "danglingRecords": [],
        "duplicateFileNames": {},
    }


def test_reconciliation_repair(client: TestClient, mocked_aws):
    mocked_aws.put_object(Bucket=TEST_BUCKET_NAME, Key="files/orphan.txt", Body=b"x")

    response = client.post("/api/reconciliation/repair")

    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {"adoptedBlobs": ["files/orphan.txt"], "removedRecords": []}
    assert [entry["fileName"] for entry in client.get("/api/files").json()] == ["orphan.txt"]


def test_health(client: TestClient):
    response = client.get("/health")

    assert response.status_code == status.HTTP_200_OK
    body = response.json()
    assert body["ready"] is True
    assert body["components"] == {"api": "ready", "blob_store": "ready", "metadata_store": "ready"}


def test_health_degraded_without_bucket(client: TestClient, mocked_aws):
    mocked_aws.delete_bucket(Bucket=TEST_BUCKET_NAME)

    body = client.get("/health").json()

    assert body["status"] == "degraded"
    assert body["ready"] is False
    assert body["components"]["blob_store"].startswith("error:")


def test_storage_failure_is_generic_500(client: TestClient, mocked_aws):
    mocked_aws.delete_bucket(Bucket=TEST_BUCKET_NAME)

    response = client.get("/api/statistics")

    assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
    assert response.json() == {"message": "Failed to fetch statistics"}


def test_malformed_record_is_generic_500(client: TestClient, test_settings):
    conn = sqlite3.connect(test_settings.sqlite_db_path)
    conn.execute(
        "INSERT INTO files_docs (doc_id, document) VALUES (?, ?)",
        ("legacy", json.dumps({"fileName": "old.txt", "secret": "s3cr3t"})),
    )
    conn.commit()
    conn.close()

    listing = client.get("/api/files")
    deletion = client.delete("/api/files/legacy")

    assert listing.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
    assert listing.json() == {"message": "Failed to fetch files"}
    assert deletion.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
    assert deletion.json() == {"message": "Failed to delete file"}
    assert "s3cr3t" not in listing.text + deletion.text
