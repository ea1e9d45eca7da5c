"""Tests for the FastAPI service."""

from __future__ import annotations

import httpx
import pytest
from fastapi.testclient import TestClient

from bwconvert.config import BWConvertConfig
from bwconvert.converters import BackendConverter, MockConverter
from bwconvert.orchestrator import ConversionOrchestrator
from bwconvert.service import create_app


def _backend(status: int = 200) -> BackendConverter:
    def handler(request: httpx.Request) -> httpx.Response:
        if status != 200:
            return httpx.Response(status, text="conversion exploded")
        return httpx.Response(
            200,
            content=b"PKconverted",
            headers={"content-disposition": 'attachment; filename="orders-spring.zip"'},
        )

    return BackendConverter("http://backend/convert", transport=httpx.MockTransport(handler))


def _client(config: BWConvertConfig, *, chance: float = 0.99, backend_status: int = 200) -> TestClient:
    orchestrator = ConversionOrchestrator(
        config,
        mock_converter=MockConverter(success_rate=0.7, chance=lambda: chance),
        backend_converter=_backend(backend_status),
    )
    return TestClient(create_app(orchestrator))


@pytest.fixture
def client(config: BWConvertConfig) -> TestClient:
    return _client(config)


def _project_form() -> tuple[dict[str, str], dict[str, tuple[str, bytes, str]]]:
    data = {"work_dir": "orders", "target_git": "https://git.example.com/orders-spring.git"}
    files = {
        "file": ("orders.zip", b"PK\x03\x04", "application/zip"),
        "config_file": ("convert.properties", b"mode=full", "text/plain"),
    }
    return data, files


def test_health_endpoint(client: TestClient) -> None:
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_index_renders_form(client: TestClient) -> None:
    response = client.get("/")
    assert response.status_code == 200
    assert "TIBCO to Spring Boot Converter" in response.text
    assert ".bw,.xml,.java,.properties" in response.text
    assert "Analyzing TIBCO BW Source Code" in response.text


def test_file_conversion_success_offers_code_and_download(client: TestClient) -> None:
    response = client.post(
        "/api/conversions/file",
        files={"file": ("OrderProcess.bw", b"<process/>", "application/xml")},
    )
    assert response.status_code == 202
    job_id = response.json()["id"]

    job = client.get(f"/api/conversions/{job_id}").json()
    assert job["status"] == "succeeded"
    assert job["processing"] is False
    assert job["notification"]["title"] == "Conversion Successful!"
    assert job["filename"] == "ConvertedTibcoApplication.java"
    assert "@SpringBootApplication" in job["generated_code"]
    assert job["download_url"]

    download = client.get(job["download_url"])
    assert download.status_code == 200
    assert "ConvertedTibcoApplication.java" in download.headers["content-disposition"]
    assert download.text == job["generated_code"]

    # The link is one-shot.
    assert client.get(job["download_url"]).status_code == 404
    assert client.get(f"/api/conversions/{job_id}").json()["download_url"] is None

    code = client.get(f"/api/conversions/{job_id}/code").json()
    assert code["code"] == job["generated_code"]
    assert code["notification"]["title"] == "Code Copied!"


def test_file_conversion_failure_has_no_download(config: BWConvertConfig) -> None:
    client = _client(config, chance=0.05)

    job_id = client.post(
        "/api/conversions/file",
        files={"file": ("OrderProcess.bw", b"<process/>", "application/xml")},
    ).json()["id"]
    job = client.get(f"/api/conversions/{job_id}").json()

    assert job["status"] == "failed"
    assert job["download_url"] is None
    assert job["notification"]["title"] == "Conversion Failed"
    assert job["notification"]["variant"] == "destructive"
    assert client.get(f"/api/conversions/{job_id}/code").status_code == 404


def test_missing_file_is_rejected_before_submission(client: TestClient) -> None:
    response = client.post("/api/conversions/file")

    assert response.status_code == 422
    payload = response.json()
    assert payload["fields"] == ["source_file"]
    assert payload["notification"]["title"] == "Missing Source Code"


def test_unsupported_suffix_is_rejected(client: TestClient) -> None:
    response = client.post(
        "/api/conversions/file",
        files={"file": ("readme.txt", b"hello", "text/plain")},
    )

    assert response.status_code == 422
    assert response.json()["notification"]["title"] == "Unsupported File Type"


def test_repository_conversion(client: TestClient) -> None:
    response = client.post(
        "/api/conversions/repository",
        data={
            "repository_urls": "https://git.example.com/a.git\nhttps://git.example.com/b.git",
            "target_git": "https://git.example.com/spring.git",
        },
    )
    assert response.status_code == 202

    job = client.get(f"/api/conversions/{response.json()['id']}").json()
    assert job["variant"] == "repository"
    assert job["status"] == "succeeded"


def test_repository_conversion_requires_target(client: TestClient) -> None:
    response = client.post(
        "/api/conversions/repository",
        data={"repository_urls": "https://git.example.com/a.git"},
    )

    assert response.status_code == 422
    assert response.json()["fields"] == ["target_git"]


def test_project_conversion_downloads_backend_archive(client: TestClient) -> None:
    data, files = _project_form()
    response = client.post("/api/conversions/project", data=data, files=files)
    assert response.status_code == 202

    job = client.get(f"/api/conversions/{response.json()['id']}").json()
    assert job["status"] == "succeeded"
    assert job["generated_code"] is None
    assert job["filename"] == "orders-spring.zip"

    download = client.get(job["download_url"])
    assert download.status_code == 200
    assert download.content == b"PKconverted"
    assert 'filename="orders-spring.zip"' in download.headers["content-disposition"]


def test_project_conversion_backend_failure(config: BWConvertConfig) -> None:
    client = _client(config, backend_status=500)
    data, files = _project_form()

    job_id = client.post("/api/conversions/project", data=data, files=files).json()["id"]
    job = client.get(f"/api/conversions/{job_id}").json()

    assert job["status"] == "failed"
    assert job["download_url"] is None
    assert job["notification"]["title"] == "Conversion Failed"


def test_project_conversion_lists_missing_fields(client: TestClient) -> None:
    response = client.post(
        "/api/conversions/project",
        files={"file": ("orders.zip", b"PK", "application/zip")},
    )

    assert response.status_code == 422
    assert response.json()["fields"] == ["work_dir", "config_file", "target_git"]


def test_unknown_job_returns_404(client: TestClient) -> None:
    assert client.get("/api/conversions/missing").status_code == 404
    assert client.get("/downloads/missing").status_code == 404


def test_repeated_conversions_keep_stores_bounded(config: BWConvertConfig) -> None:
    config.service.max_jobs = 5
    config.service.max_artifacts = 5
    orchestrator = ConversionOrchestrator(
        config,
        mock_converter=MockConverter(success_rate=0.7, chance=lambda: 0.99),
        backend_converter=_backend(),
    )
    client = TestClient(create_app(orchestrator))

    job_ids = []
    for index in range(50):
        response = client.post(
            "/api/conversions/file",
            files={"file": (f"Process{index}.bw", b"<process/>", "application/xml")},
        )
        assert response.status_code == 202
        job_ids.append(response.json()["id"])

    assert len(orchestrator.jobs) == 5
    assert len(orchestrator.artifacts) <= 5
    assert client.get(f"/api/conversions/{job_ids[0]}").status_code == 404
    latest = client.get(f"/api/conversions/{job_ids[-1]}").json()
    assert latest["status"] == "succeeded"
    assert client.get(latest["download_url"]).status_code == 200
