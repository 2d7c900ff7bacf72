"""
Tests for the HTTP job API.
"""

import pytest
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

pytest.importorskip("fastapi")
pytest.importorskip("httpx")

from fastapi.testclient import TestClient

from hybrid_docx.config import PipelineConfig
from hybrid_docx.server import create_app
from hybrid_docx.utils.jobs import ConversionService


def converter(input_path, output_path, on_progress):
    on_progress(0)
    if Path(input_path).read_bytes().startswith(b"broken"):
        raise RuntimeError("Failed to parse PDF: broken upload")
    Path(output_path).write_bytes(b"PK docx bytes")


@pytest.fixture
def service(tmp_path):
    config = PipelineConfig()
    config.service.output_dir = tmp_path / "outputs"
    config.service.upload_dir = tmp_path / "uploads"
    service = ConversionService(config, converter=converter)
    yield service
    service.shutdown()


@pytest.fixture
def client(service):
    with TestClient(create_app(service)) as client:
        yield client


class TestConvertEndpoint:
    """Test POST /convert."""

    def test_returns_job_id(self, client, service):
        response = client.post(
            "/convert",
            files={"pdf": ("report.pdf", b"%PDF-1.4 test", "application/pdf")}
        )

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert len(body["jobId"]) == 8

    def test_upload_is_stored(self, client, service):
        client.post("/convert", files={"pdf": ("report.pdf", b"%PDF-1.4 test", "application/pdf")})

        stored = list(Path(service.config.service.upload_dir).iterdir())
        assert len(stored) == 1
        assert stored[0].name.endswith("_report.pdf")
        assert stored[0].read_bytes() == b"%PDF-1.4 test"

    def test_missing_file(self, client):
        response = client.post(
            "/convert",
            files={"document": ("report.pdf", b"%PDF", "application/pdf")}
        )

        assert response.status_code == 400
        assert response.text == "No file uploaded."


class TestProgressEndpoint:
    """Test GET /progress/{job_id}."""

    def test_completed_job(self, client, service):
        job_id = client.post(
            "/convert", files={"pdf": ("report.pdf", b"%PDF", "application/pdf")}
        ).json()["jobId"]
        service.wait(job_id, timeout=10)

        body = client.get(f"/progress/{job_id}").json()

        assert body == {
            "percent": 100,
            "status": "Completed successfully!",
            "downloadUrl": "/download/report.docx",
            "completed": True,
        }

    def test_failed_job(self, client, service):
        job_id = client.post(
            "/convert", files={"pdf": ("bad.pdf", b"broken", "application/pdf")}
        ).json()["jobId"]
        service.wait(job_id, timeout=10)

        body = client.get(f"/progress/{job_id}").json()

        assert body["status"] == "Error"
        assert body["percent"] == 0
        assert "broken upload" in body["message"]

    def test_unknown_job(self, client):
        response = client.get("/progress/unknown")

        assert response.status_code == 404
        assert response.json() == {"message": "Job not found"}


class TestDownloadEndpoint:
    """Test GET /download/{filename}."""

    def test_download_artifact(self, client, service):
        job_id = client.post(
            "/convert", files={"pdf": ("report.pdf", b"%PDF", "application/pdf")}
        ).json()["jobId"]
        service.wait(job_id, timeout=10)

        response = client.get("/download/report.docx")

        assert response.status_code == 200
        assert response.content == b"PK docx bytes"
        assert "report.docx" in response.headers["content-disposition"]

    def test_missing_artifact(self, client):
        response = client.get("/download/missing.docx")

        assert response.status_code == 404
        assert response.text == "File not found."


class TestCors:
    def test_cors_headers(self, client):
        response = client.get("/progress/unknown", headers={"Origin": "http://example.com"})

        assert "access-control-allow-origin" in response.headers


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
