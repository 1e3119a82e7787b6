"""HTTP surface tests. The estimation service is switched off so every call uses the fallback formulas."""
import pytest
from fastapi.testclient import TestClient

from adcarbon.core.config import settings
from adcarbon.main import app
from tests.conftest import make_image_bytes


@pytest.fixture
def client(monkeypatch):
    monkeypatch.setattr(settings, "OPENAI_API_KEY", "")
    with TestClient(app) as c:
        yield c


@pytest.fixture
def png_file():
    return ("banner.png", make_image_bytes(1920, 1080), "image/png")


def test_health(client):
    response = client.get("/api/health")
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "healthy"
    assert body["estimation_service"] == "fallback"


def test_health_treats_blank_key_as_fallback(client, monkeypatch):
    monkeypatch.setattr(settings, "OPENAI_API_KEY", "   ")
    assert client.get("/api/health").json()["estimation_service"] == "fallback"


def test_health_reports_configured_service(client, monkeypatch):
    monkeypatch.setattr(settings, "OPENAI_API_KEY", "sk-test")
    assert client.get("/api/health").json()["estimation_service"] == "configured"


def test_root(client):
    assert client.get("/").json()["app"] == settings.APP_NAME


def test_analyze_banner(client, png_file):
    response = client.post("/api/analysis", files={"file": png_file}, data={"view_count": "1000"})

    assert response.status_code == 200
    body = response.json()
    assert body["metadata"]["resolution"] == "1920x1080"
    assert body["metadata"]["format"] == "PNG"
    assert body["view_count"] == 1000
    assert body["view_count_label"] == "1.0K"
    assert body["co2"]["confidence"] == "low"
    assert body["co2"]["generationCO2"] > 0
    assert body["comparison"]["tier"]["name"] == "Medium Resolution"
    assert body["offsets"]["variant"] == "v2"
    assert body["ai_impact"]["recovery"]["variant"] == "v1"
    assert len(body["comparisons"]) == 4


def test_analyze_banner_defaults_view_count(client, png_file):
    response = client.post("/api/analysis", files={"file": png_file})
    assert response.status_code == 200
    assert response.json()["view_count"] == settings.DEFAULT_VIEW_COUNT


def test_analyze_rejects_wrong_type(client):
    response = client.post("/api/analysis", files={"file": ("doc.pdf", b"%PDF-1.4", "application/pdf")})
    assert response.status_code == 400
    assert "Invalid file type" in response.json()["detail"]


def test_analyze_rejects_negative_views(client, png_file):
    response = client.post("/api/analysis", files={"file": png_file}, data={"view_count": "-5"})
    assert response.status_code == 400


def test_analyze_rejects_corrupt_image(client):
    response = client.post("/api/analysis", files={"file": ("bad.png", b"not an image", "image/png")})
    assert response.status_code == 422
    assert response.json()["detail"] == "Failed to load image. Please upload a valid image."


def test_view_counts(client):
    options = client.get("/api/analysis/view-counts").json()
    assert options[0] == {"value": 1000, "label": "1K"}
    assert options[-1] == {"value": 1_000_000_000, "label": "1B"}


def test_totals(client):
    response = client.post(
        "/api/analysis/totals",
        json={"generation_co2": 500, "transmission_co2_per_view": 0.15, "view_count": 1_000_000},
    )
    assert response.status_code == 200
    body = response.json()
    assert body["total_co2"] == pytest.approx(150_500)
    assert body["total_co2_formatted"] == "151kg"
    assert body["recovery"]["trees_to_plant"] == 8
    assert body["offsets"]["bike_kilometers"] == pytest.approx(716.7)


def test_totals_rejects_negatives(client):
    response = client.post(
        "/api/analysis/totals",
        json={"generation_co2": -1, "transmission_co2_per_view": 0.15, "view_count": 10},
    )
    assert response.status_code == 400


@pytest.mark.parametrize("bad", ["NaN", "Infinity", "-Infinity"])
def test_totals_rejects_non_finite_numbers(client, bad):
    response = client.post(
        "/api/analysis/totals",
        content=f'{{"generation_co2": {bad}, "transmission_co2_per_view": 0.1, "view_count": 10}}',
        headers={"Content-Type": "application/json"},
    )
    assert response.status_code == 422


@pytest.mark.parametrize("bad", ["NaN", "Infinity"])
def test_totals_rejects_non_finite_strings(client, bad):
    response = client.post(
        "/api/analysis/totals",
        json={"generation_co2": 1, "transmission_co2_per_view": bad, "view_count": 10},
    )
    assert response.status_code == 422


def test_totals_rejects_overflowing_total(client):
    response = client.post(
        "/api/analysis/totals",
        json={"generation_co2": 1, "transmission_co2_per_view": 1e308, "view_count": 10},
    )
    assert response.status_code == 400


def _report_files(png_file):
    return [
        ("files", png_file),
        ("files", ("notes.txt", b"hello", "text/plain")),
    ]


def test_report_json(client, png_file):
    response = client.post("/api/reports/json", files=_report_files(png_file), data={"view_count": "1000"})

    assert response.status_code == 200
    body = response.json()
    assert body["generated_by"] == settings.APP_NAME
    report = body["report"]
    assert report["total_images"] == 2
    assert report["analyzed"] == 1
    assert report["errors"] == 1
    assert report["rows"][0]["tier"] == "Medium Resolution"
    assert report["rows"][1]["error"].startswith("Invalid file type")


def test_report_csv(client, png_file):
    response = client.post("/api/reports/csv", files=_report_files(png_file), data={"view_count": "1000"})

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    lines = response.text.splitlines()
    assert lines[0].startswith("File Name,Resolution,File Size")
    assert lines[1].startswith("banner.png,1920x1080,")
    assert "Summary" in lines
    assert "Errors,1" in lines


def test_report_unsupported_format(client, png_file):
    response = client.post("/api/reports/xml", files=[("files", png_file)])
    assert response.status_code == 400


def test_report_too_many_files(client, monkeypatch, png_file):
    monkeypatch.setattr(settings, "REPORT_MAX_IMAGES", 1)
    response = client.post("/api/reports/json", files=[("files", png_file), ("files", png_file)])
    assert response.status_code == 400
