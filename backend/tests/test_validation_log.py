"""Tests for the validation log and its CSV/JSON export."""

from sqlalchemy import create_engine

from tar_validator.services.cost_calculator import CostBreakdownItem, ExpectedCosts
from tar_validator.services.report_generator import ReportGenerator
from tar_validator.services.validation_log_service import (
    STATUS_APPROVED,
    STATUS_NEEDS_REVIEW,
    ValidationLogService,
)


def _report(claimed: float, traveler: str = "Jane Smith"):
    expected = ExpectedCosts(
        total_expected=987.0,
        breakdown=[CostBreakdownItem("Washington, DC", "2025-05-01", 79.0, 250.0, 329.0)],
    )
    data = {"travelerName": traveler, "authorizationNumber": "TAR-2025-0042"}
    return ReportGenerator().generate(data, expected, claimed)


class TestRecord:
    def test_status_follows_validity(self, log_service):
        log_service.record(_report(987))
        log_service.record(_report(1200))
        assert [e.status for e in log_service.list_entries()] == [STATUS_APPROVED, STATUS_NEEDS_REVIEW]

    def test_storage_errors_are_not_raised(self):
        broken = ValidationLogService(create_engine("sqlite:////nonexistent-dir/validation.db"))
        assert broken.record(_report(987)) is None


class TestExport:
    def test_csv_header_and_rows(self, log_service):
        log_service.record(_report(1000))
        lines = log_service.export_csv().splitlines()
        assert lines[0] == "Timestamp,Traveler,Auth Number,Expected Cost,Claimed Cost,Variance,Variance %,Status"
        assert lines[1].endswith(",Jane Smith,TAR-2025-0042,987.0,1000.0,13.0,1.32,NEEDS REVIEW")

    def test_rows(self, log_service):
        log_service.record(_report(987))
        [row] = log_service.export_rows()
        assert row["Expected Cost"] == 987.0
        assert row["Variance %"] == 0.0
        assert row["Status"] == STATUS_APPROVED

    def test_empty(self, log_service):
        assert log_service.export_rows() == []


class TestClear:
    def test_returns_deleted_count(self, log_service):
        for claimed in (900, 987, 1100):
            log_service.record(_report(claimed))
        assert log_service.clear() == 3
        assert log_service.list_entries() == []
