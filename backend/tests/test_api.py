"""HTTP tests for the FastAPI routers, with services swapped for in-memory fakes."""

import pytest
from fastapi.testclient import TestClient

from tar_validator.dependencies import (
    get_bulk_service,
    get_document_processor,
    get_log_service,
    get_rate_client,
    get_validation_service,
)
from tar_validator.main import app
from tar_validator.services.bulk_validation_service import BulkValidationService

CSV_HEADER_LINE = "Timestamp,Traveler,Auth Number,Expected Cost,Claimed Cost,Variance,Variance %,Status"

BULK_CSV = (
    "TAR ID,Traveler,\"Destination (City, State, Country)\",Departure Date,Return Date,"
    "Travel Purpose,Total Actual Cost,Contact Number\n"
    "T-1,Jane Smith,\"Washington, DC, USA\",05/01/2025,05/02/2025,Review,658,5551234567\n"
)


@pytest.fixture
def client(validation_service, rate_client, document_processor, log_service):
    app.dependency_overrides[get_validation_service] = lambda: validation_service
    app.dependency_overrides[get_bulk_service] = lambda: BulkValidationService(validation_service)
    app.dependency_overrides[get_rate_client] = lambda: rate_client
    app.dependency_overrides[get_document_processor] = lambda: document_processor
    app.dependency_overrides[get_log_service] = lambda: log_service
    yield TestClient(app)
    app.dependency_overrides.clear()


class TestHealth:
    def test_health(self, client):
        resp = client.get("/api/health")
        assert resp.status_code == 200
        assert resp.json() == {"status": "ok", "service": "tar-validator"}

    def test_rates_health(self, client):
        assert client.get("/api/rates/health").json()["success"] is True


class TestValidate:
    def test_validate(self, client, washington_tar):
        resp = client.post("/api/tar/validate", json=washington_tar)
        assert resp.status_code == 200
        body = resp.json()
        assert body["success"] is True
        assert body["state"] == "REPORT_READY"
        assert body["expectedCost"] == 987.0
        assert body["variancePercent"] == 1.32
        assert len(body["breakdown"]) == 1
        assert body["validationReport"]["traveler"] == "Jane Smith"

    def test_missing_fields(self, client):
        body = client.post("/api/tar/validate", json={"travelerName": "Jane Smith"}).json()
        assert body["success"] is False
        assert body["state"] == "FAIL"
        assert "Missing required field: contactNumber" in body["errors"]
        assert "expectedCost" not in body or body["expectedCost"] is None

    def test_pdf_report(self, client, washington_tar):
        resp = client.post("/api/tar/validate/pdf", json=washington_tar)
        assert resp.status_code == 200
        assert resp.headers["content-type"] == "application/pdf"
        assert resp.content.startswith(b"%PDF")

    def test_pdf_report_without_result(self, client):
        resp = client.post("/api/tar/validate/pdf", json={})
        assert resp.status_code == 422
        assert resp.json()["state"] == "FAIL"

    def test_bulk(self, client):
        resp = client.post("/api/tar/bulk", files={"file": ("tars.csv", BULK_CSV.encode(), "text/csv")})
        assert resp.status_code == 200
        [item] = resp.json()
        assert item["tarId"] == "T-1"
        assert item["result"]["isValid"] is True

    def test_bulk_empty(self, client):
        resp = client.post("/api/tar/bulk", files={"file": ("tars.csv", b"  ", "text/csv")})
        assert resp.status_code == 400


class TestRates:
    def test_lookup(self, client):
        body = client.get("/api/rates", params={"city": "Washington", "state": "DC"}).json()
        assert body["success"] is True
        assert body["data"]["total"] == 329.0

    def test_defaults(self, client):
        body = client.get("/api/rates", params={"city": "Boston", "state": "MA"}).json()
        assert body["success"] is False
        assert body["data"]["usingDefaults"] is True

    def test_state_required(self, client):
        assert client.get("/api/rates", params={"city": "Boston"}).status_code == 422


class TestDocuments:
    def test_extract(self, client):
        files = {"file": ("tar.pdf", b"%PDF-1.4", "application/pdf")}
        body = client.post("/api/documents/extract", files=files).json()
        assert body["success"] is True
        assert body["extractedData"]["travelerName"] == "Jane Smith"
        assert body["metadata"]["extractionMethod"] == "PDF"

    def test_unsupported_type(self, client):
        files = {"file": ("notes.txt", b"hello", "text/plain")}
        assert client.post("/api/documents/extract", files=files).status_code == 400

    def test_review(self, client):
        files = {"file": ("tar.pdf", b"%PDF-1.4", "application/pdf")}
        body = client.post("/api/documents/review", files=files).json()
        assert body["documentType"] == "TAR"
        assert 0 <= body["riskScore"] <= 100


class TestLogs:
    def test_export_empty(self, client):
        assert client.get("/api/logs/export").status_code == 404

    def test_export_and_clear(self, client, washington_tar):
        client.post("/api/tar/validate", json=washington_tar)

        json_body = client.get("/api/logs/export", params={"format": "json"}).json()
        assert json_body["count"] == 1
        assert json_body["data"][0]["Status"] == "NEEDS REVIEW"

        csv_resp = client.get("/api/logs/export", params={"format": "csv"})
        assert csv_resp.headers["content-type"].startswith("text/csv")
        assert csv_resp.text.splitlines()[0] == CSV_HEADER_LINE

        assert client.delete("/api/logs").json()["deleted"] == 1
        assert client.get("/api/logs/export").status_code == 404

    def test_bad_format(self, client):
        assert client.get("/api/logs/export", params={"format": "xml"}).status_code == 422
