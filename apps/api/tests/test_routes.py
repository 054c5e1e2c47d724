"""Tests for the HTTP routes."""

import io
import zipfile

import pytest
from fastapi.testclient import TestClient

from logsync import __version__
from logsync.main import app


LINE_1 = "2023-10-27 10:00:00.000 [main] INFO logger - Message 1\n"
LINE_2 = "2023-10-27 10:00:01.000 [main] ERROR logger - Message 2\n"


@pytest.fixture
def client():
    with TestClient(app) as test_client:
        yield test_client


class TestHealth:
    """Test health and root endpoints."""

    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "ok"}

    def test_root_lists_formats(self, client):
        body = client.get("/").json()

        assert body["name"] == "LogSync"
        assert body["version"] == __version__
        assert len(body["formats"]) == 17
        assert body["formats"][0] == "Logback Default"


class TestIngestFromFolder:
    """Test folder ingestion."""

    def test_groups_folder(self, client, tmp_path):
        (tmp_path / "app.log").write_text(LINE_2)
        (tmp_path / "app.log.1").write_text(LINE_1)
        (tmp_path / "api-2024-01-15.log").write_text(LINE_1 + LINE_2)

        response = client.post("/ingest/from_folder", json={"folder_path": str(tmp_path)})

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert [a["name"] for a in body["applications"]] == ["api", "app"]
        api = body["applications"][0]
        assert api["entry_count"] == 2
        assert api["source_files"] == ["api-2024-01-15.log"]
        assert api["first_timestamp"].startswith("2023-10-27T10:00:00")
        assert api["last_timestamp"].startswith("2023-10-27T10:00:01")

    def test_errors_reported(self, client, tmp_path):
        (tmp_path / "app.log").write_text(LINE_1)
        (tmp_path / "broken.zip").write_bytes(b"not a zip")

        body = client.post("/ingest/from_folder", json={"folder_path": str(tmp_path)}).json()

        assert body["success"] is False
        assert len(body["errors"]) == 1
        assert "broken.zip" in body["errors"][0]
        assert [a["name"] for a in body["applications"]] == ["app"]

    def test_missing_folder(self, client, tmp_path):
        response = client.post("/ingest/from_folder", json={"folder_path": str(tmp_path / "nope")})

        assert response.status_code == 400
        assert "Folder not found" in response.json()["detail"]


class TestUpload:
    """Test single-file upload."""

    def test_upload_log(self, client):
        response = client.post(
            "/ingest/upload",
            files={"file": ("server-1.2.log", LINE_1 + LINE_2, "text/plain")},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["application"] == "server"
        assert [e["message"] for e in body["entries"]] == ["Message 1", "Message 2"]
        assert body["entries"][1]["level"] == "ERROR"
        assert body["entries"][0]["source_file"] == "server-1.2.log"

    def test_upload_zip(self, client):
        buffer = io.BytesIO()
        with zipfile.ZipFile(buffer, "w") as zf:
            zf.writestr("inner.log", LINE_1)

        response = client.post(
            "/ingest/upload",
            files={"file": ("bundle.zip", buffer.getvalue(), "application/zip")},
        )

        assert response.status_code == 200
        assert [e["source_file"] for e in response.json()["entries"]] == ["inner.log"]

    def test_invalid_extension(self, client):
        response = client.post(
            "/ingest/upload",
            files={"file": ("tool.exe", b"MZ", "application/octet-stream")},
        )

        assert response.status_code == 400
        assert "Invalid file type" in response.json()["detail"]

    def test_corrupt_archive(self, client):
        response = client.post(
            "/ingest/upload",
            files={"file": ("bad.zip", b"garbage", "application/zip")},
        )

        assert response.status_code == 400
