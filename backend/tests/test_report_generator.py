"""Tests for variance, tolerance checks and recommendations."""

from tar_validator.config import ValidationConfig
from tar_validator.services.cost_calculator import CostBreakdownItem, ExpectedCosts
from tar_validator.services.report_generator import ReportGenerator

BUFFER = "Claimed cost exceeds expected amount by more than acceptable buffer"
NO_ITINERARY = "No itinerary data found - manual review required"


def _expected(total: float) -> ExpectedCosts:
    item = CostBreakdownItem("Washington, DC", "2025-05-01", 79.0, total - 79.0, total)
    return ExpectedCosts(total_expected=total, breakdown=[item])


class TestVariance:
    def test_within_buffer_and_deviation(self):
        report = ReportGenerator().generate({}, _expected(1000), 1008)
        assert report.variance == 8.0
        assert report.variance_percent == 0.8
        assert report.is_valid
        assert report.recommendations == []

    def test_over_buffer_only(self):
        report = ReportGenerator().generate({}, _expected(1000), 1015)
        assert report.variance_percent == 1.5
        assert not report.is_within_buffer
        assert report.is_within_deviation
        assert report.recommendations == [BUFFER]

    def test_under_claim_also_checked_against_buffer(self):
        report = ReportGenerator().generate({}, _expected(1000), 980)
        assert report.variance == -20.0
        assert not report.is_valid

    def test_over_deviation(self):
        report = ReportGenerator().generate({}, _expected(1000), 1200)
        assert report.variance_percent == 20.0
        assert report.recommendations == [
            BUFFER,
            "Variance of 20.00% exceeds maximum acceptable deviation",
        ]

    def test_zero_expected_total(self):
        report = ReportGenerator().generate({}, ExpectedCosts(), 5)
        assert report.variance_percent == 0.0
        assert report.recommendations == [NO_ITINERARY]

    def test_custom_tolerances(self):
        config = ValidationConfig(cost_buffer=50, max_deviation_percent=1)
        report = ReportGenerator(config).generate({}, _expected(1000), 1020)
        assert report.is_within_buffer
        assert not report.is_within_deviation


class TestReportShape:
    def test_defaults_for_missing_identity(self):
        report = ReportGenerator().generate({}, _expected(1000), 1000)
        assert report.traveler == "Unknown"
        assert report.authorization_number == "N/A"

    def test_to_dict(self):
        data = {"travelerName": "Jane Smith", "authorizationNumber": "TAR-1"}
        out = ReportGenerator().generate(data, _expected(1000), 1000).to_dict()
        assert out["traveler"] == "Jane Smith"
        assert out["authorizationNumber"] == "TAR-1"
        assert out["validation"]["expectedCosts"]["totalExpected"] == 1000
        assert out["validation"]["isWithinBuffer"] is True
        assert "timestamp" in out
