"""Tests for the end-to-end TAR validation flow."""

import pytest

from tar_validator.config import ValidationConfig
from tar_validator.services.document_source import PDF
from tar_validator.services.tar_validation_service import (
    MSG_FIELD_FAILURE,
    MSG_INVALID,
    MSG_SYSTEM_ERROR,
    MSG_VALID,
    SYSTEM_ERROR,
    TarValidationService,
    ValidationState,
    canonicalize,
    merge_records,
)
from tar_validator.services.validation_log_service import STATUS_NEEDS_REVIEW

BUFFER = "Claimed cost exceeds expected amount by more than acceptable buffer"


class ExplodingCalculator:
    def calculate(self, *args, **kwargs):
        raise RuntimeError("rate table corrupted")


class TestFieldChecks:
    def test_missing_contact_number_fails_without_lookup(self, validation_service, washington_tar, rate_source):
        del washington_tar["contactNumber"]
        result = validation_service.validate(washington_tar)
        assert result.state is ValidationState.FAIL
        assert result.success is False
        assert result.errors == ["Missing required field: contactNumber"]
        assert result.message == MSG_FIELD_FAILURE
        assert rate_source.calls == []

    def test_formatted_phone_accepted(self, validation_service, washington_tar):
        washington_tar["contactNumber"] = "+1 (555) 123-4567"
        assert validation_service.validate(washington_tar).success

    @pytest.mark.parametrize(
        "field,value,error",
        [
            ("vendorCode", "X123", "Invalid vendor code format"),
            ("contactNumber", "call me", "Invalid phone number format"),
            ("estimatedCost", -5, "Invalid estimated cost"),
            ("estimatedCost", "lots", "Invalid estimated cost"),
        ],
    )
    def test_format_errors(self, validation_service, washington_tar, field, value, error):
        washington_tar[field] = value
        result = validation_service.validate(washington_tar)
        assert result.state is ValidationState.FAIL
        assert result.errors == [error]

    def test_errors_accumulate(self, validation_service):
        result = validation_service.validate({})
        assert len(result.errors) == len(ValidationConfig().required_fields)
        assert result.to_dict() == {
            "success": False,
            "isValid": False,
            "state": "FAIL",
            "errors": result.errors,
            "warnings": [],
            "message": MSG_FIELD_FAILURE,
        }


class TestCostValidation:
    def test_over_buffer_is_flagged(self, validation_service, washington_tar, log_service):
        result = validation_service.validate(washington_tar)

        assert result.state is ValidationState.REPORT_READY
        assert result.success is True
        assert result.is_valid is False
        assert result.expected_cost == 987.0
        assert result.claimed_cost == 1000.0
        assert result.variance == 13.0
        assert result.variance_percent == 1.32
        assert result.duration == 3
        assert result.report.recommendations == [BUFFER]
        assert result.message == MSG_INVALID.format(pct="1.32")

        [entry] = log_service.list_entries()
        assert entry.status == STATUS_NEEDS_REVIEW
        assert entry.traveler == "Jane Smith"

    def test_exact_claim_is_valid(self, validation_service, washington_tar):
        washington_tar["estimatedCost"] = 987
        result = validation_service.validate(washington_tar)
        assert result.is_valid is True
        assert result.message == MSG_VALID
        assert result.warnings == []

    def test_total_cost_is_the_claimed_amount(self, validation_service, washington_tar):
        washington_tar["totalCost"] = "$990.00"
        assert validation_service.validate(washington_tar).claimed_cost == 990.0

    def test_duration_from_trip_dates(self, validation_service, washington_tar):
        del washington_tar["duration"]
        washington_tar["tripStartDate"] = "05/01/2025"
        washington_tar["tripEndDate"] = "05/04/2025"
        result = validation_service.validate(washington_tar)
        assert result.duration == 4
        assert result.expected_cost == 1316.0
        assert result.breakdown[0]["date"] == "2025-05-01"

    def test_manual_itinerary(self, validation_service, washington_tar):
        washington_tar["itinerary"] = [
            {"date": "05/01/2025", "city": "Washington", "state": "DC"},
            {"date": "05/02/2025", "city": "Washington", "state": "DC"},
        ]
        result = validation_service.validate(washington_tar)
        assert result.expected_cost == 658.0
        assert [item["date"] for item in result.breakdown] == ["2025-05-01", "2025-05-02"]
        assert result.extracted_data["itinerary"][0] == {
            "date": "2025-05-01", "city": "Washington", "state": "DC",
        }

    def test_manual_itinerary_without_locations_uses_destination(self, validation_service, washington_tar):
        washington_tar["itinerary"] = [{"date": "05/01/2025"}, {"date": "05/02/2025"}]
        result = validation_service.validate(washington_tar)
        assert result.expected_cost == 658.0
        assert [item["location"] for item in result.breakdown] == ["Washington, DC", "Washington, DC"]
        assert result.warnings == []

    @pytest.mark.parametrize("duration", ["inf", "-inf", "1e400"])
    def test_infinite_duration_falls_back_to_trip_dates(self, validation_service, washington_tar, duration):
        washington_tar.update({
            "duration": duration,
            "tripStartDate": "05/01/2025",
            "tripEndDate": "05/04/2025",
        })
        result = validation_service.validate(washington_tar)
        assert result.state is ValidationState.REPORT_READY
        assert result.duration == 4
        assert result.expected_cost == 1316.0

    def test_duty_station_without_comma_skips_lookup(self, validation_service, washington_tar, rate_source):
        del washington_tar["city"]
        del washington_tar["state"]
        washington_tar["dutyStation"] = "Washington DC"
        result = validation_service.validate(washington_tar)
        assert result.success
        assert rate_source.calls == []
        assert result.breakdown[0]["location"] == "Unknown, Unknown"

    def test_unknown_destination_uses_defaults(self, validation_service, washington_tar):
        washington_tar.update({"city": "Boston", "state": "MA", "dutyStation": "Boston, MA"})
        result = validation_service.validate(washington_tar)
        assert result.expected_cost == 687.0
        assert result.warnings == [
            "Unable to fetch per diem rates for Boston, MA - using default values"
        ]


class TestWarnings:
    def test_expense_policy_messages_do_not_change_validity(self, validation_service, washington_tar):
        washington_tar.update({"estimatedCost": 987, "rentalCar": 300})
        result = validation_service.validate(washington_tar)
        assert result.is_valid is True
        assert "Daily rate (100.00) exceeds maximum (75)" in result.warnings

    def test_unrecognized_date(self, validation_service, washington_tar):
        washington_tar["tripDate"] = "May 1st"
        result = validation_service.validate(washington_tar)
        assert result.success
        assert "Unrecognized date format for tripDate: May 1st" in result.warnings


class TestDocumentMerge:
    def test_manual_fields_override_document(self, validation_service, fake_pdf_b64, rate_source):
        result = validation_service.validate({
            "documentContent": fake_pdf_b64,
            "mimeType": PDF,
            "travelerName": "Janet Smith",
        })

        assert result.success
        assert result.report.traveler == "Janet Smith"
        assert result.claimed_cost == 1250.0
        assert result.expected_cost == 687.0
        assert result.duration == 3
        assert len(result.breakdown) == 3
        assert result.warnings == [
            "Unable to fetch per diem rates for Boston, MA - using default values"
        ]
        assert len(rate_source.calls) == 1
        assert result.extraction_quality.confidence == "HIGH"
        assert "documentContent" not in result.extracted_data

    def test_invalid_document_falls_back_to_manual(self, validation_service, washington_tar):
        washington_tar["documentContent"] = "not base64!!"
        result = validation_service.validate(washington_tar)
        assert result.success
        assert result.warnings[0] == (
            "Document extraction failed - using manual input (Document content is not valid base64)"
        )

    def test_no_processor_configured(self, cost_calculator, washington_tar, fake_pdf_b64):
        service = TarValidationService(cost_calculator)
        washington_tar["documentContent"] = fake_pdf_b64
        result = service.validate(washington_tar)
        assert result.success
        assert result.warnings == ["Document extraction unavailable - using manual input"]

    def test_unsupported_media_type(self, cost_calculator, document_processor, washington_tar, fake_pdf_b64):
        service = TarValidationService(cost_calculator, document_processor=document_processor)
        washington_tar.update({"documentContent": fake_pdf_b64, "mimeType": "text/plain"})
        result = service.validate(washington_tar)
        assert result.warnings == [
            "Document extraction failed - using manual input (Unsupported document type: text/plain)"
        ]


class TestSystemErrors:
    def test_unexpected_error_is_generic(self, washington_tar):
        service = TarValidationService(ExplodingCalculator())
        result = service.validate(washington_tar)
        assert result.state is ValidationState.FAIL
        assert result.success is False
        assert result.errors == [SYSTEM_ERROR]
        assert result.message == MSG_SYSTEM_ERROR
        assert "rate table corrupted" not in str(result.to_dict())


class TestMerging:
    def test_blank_manual_value_keeps_extracted(self):
        merged = merge_records({"title": "Analyst"}, {"title": "  ", "travelerName": "Jane"})
        assert merged == {"title": "Analyst", "travelerName": "Jane"}

    def test_document_keys_dropped(self):
        merged = merge_records({}, {"documentContent": "abc", "mimeType": PDF, "city": "Boston"})
        assert merged == {"city": "Boston"}

    def test_duty_station_split_into_city_and_state(self):
        data = canonicalize({"dutyStation": "St. Louis, mo", "itinerary": []})
        assert (data["city"], data["state"]) == ("St. Louis", "MO")

    def test_aliases(self):
        data = canonicalize({"traveler": "Jane", "purpose": "Audit", "poc": "5551234567", "totalCost": 500})
        assert data["travelerName"] == "Jane"
        assert data["travelPurpose"] == "Audit"
        assert data["contactNumber"] == "5551234567"
        assert data["estimatedCost"] == 500
