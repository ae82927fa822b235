"""TAR validation service — merge, field checks, expected cost and report for one request."""

import enum
import logging
import re
from dataclasses import dataclass, field

from tar_validator.config import ExpenseLimits, ValidationConfig
from tar_validator.exceptions import ExtractionFailure, ValidationFailure
from tar_validator.services.cost_calculator import CostCalculator, ExpectedCosts
from tar_validator.services.date_utils import is_iso_date, normalize_date, trip_duration
from tar_validator.services.document_processor import DocumentProcessor, decode_base64
from tar_validator.services.document_source import PDF
from tar_validator.services.expense_policy import check_expense_limits
from tar_validator.services.field_extractor import ExtractionQuality, parse_amount
from tar_validator.services.itinerary_extractor import ItineraryStop
from tar_validator.services.report_generator import ReportGenerator, ValidationReport

logger = logging.getLogger(__name__)

# Request keys that carry the document itself rather than TAR fields
DOCUMENT_KEYS = ("documentContent", "pdfContent", "mimeType", "filename")

DATE_FIELDS = ("tripDate", "tripStartDate", "tripEndDate", "departureDate", "returnDate")

_PHONE_SEPARATORS = re.compile(r"[\s\-()]")

MSG_VALID = "✅ Trip cost is within acceptable per diem range."
MSG_INVALID = "⚠️ Trip cost validation failed. Variance: {pct}%"
MSG_FIELD_FAILURE = "❌ Document validation failed"
MSG_SYSTEM_ERROR = "❌ Validation failed due to system error."
SYSTEM_ERROR = "System error: the validation could not be completed"


class ValidationState(str, enum.Enum):
    INIT = "INIT"
    MERGING = "MERGING"
    FIELD_CHECK = "FIELD_CHECK"
    FAIL = "FAIL"
    COST_CALC = "COST_CALC"
    REPORT_READY = "REPORT_READY"


@dataclass
class ValidationResult:
    success: bool = False
    is_valid: bool = False
    state: ValidationState = ValidationState.INIT
    expected_cost: float | None = None
    claimed_cost: float | None = None
    variance: float | None = None
    variance_percent: float | None = None
    duration: int | None = None
    breakdown: list[dict] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    message: str = ""
    extracted_data: dict = field(default_factory=dict)
    extraction_quality: ExtractionQuality | None = None
    report: ValidationReport | None = None

    def to_dict(self) -> dict:
        data = {
            "success": self.success,
            "isValid": self.is_valid,
            "state": self.state.value,
            "errors": list(self.errors),
            "warnings": list(self.warnings),
            "message": self.message,
        }
        if self.report is None:
            return data

        data.update({
            "expectedCost": self.expected_cost,
            "claimedCost": self.claimed_cost,
            "variance": self.variance,
            "variancePercent": self.variance_percent,
            "duration": self.duration,
            "breakdown": self.breakdown,
            "validationReport": self.report.to_dict(),
            "extractionQuality": self.extraction_quality.to_dict() if self.extraction_quality else None,
        })
        return data


def _present(value) -> bool:
    if value is None:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    return True


def merge_records(extracted: dict, manual: dict) -> dict:
    """Manual values override extracted ones field by field, unless blank."""
    merged = dict(extracted)
    for key, value in manual.items():
        if key in DOCUMENT_KEYS:
            continue
        if _present(value) or key not in merged:
            merged[key] = value
    return merged


def canonicalize(data: dict) -> dict:
    """Map form aliases onto canonical field names and derive city/state."""
    if not _present(data.get("travelerName")) and _present(data.get("traveler")):
        data["travelerName"] = data["traveler"]
    if not _present(data.get("travelPurpose")) and _present(data.get("purpose")):
        data["travelPurpose"] = data["purpose"]
    if not _present(data.get("dutyStation")) and _present(data.get("city")) and _present(data.get("state")):
        data["dutyStation"] = f"{data['city']}, {data['state']}"
    if not _present(data.get("contactNumber")) and _present(data.get("poc")):
        data["contactNumber"] = data["poc"]
    if not _present(data.get("estimatedCost")) and _present(data.get("totalCost")):
        data["estimatedCost"] = data["totalCost"]

    itinerary = data.get("itinerary") or []
    if not _present(data.get("dutyStation")) and itinerary:
        first = itinerary[0]
        if first.city and first.state:
            data["dutyStation"] = first.location

    duty_station = data.get("dutyStation")
    if (
        (not _present(data.get("city")) or not _present(data.get("state")))
        and isinstance(duty_station, str)
        and "," in duty_station
    ):
        city_part, state_part = duty_station.split(",", 1)
        if not _present(data.get("city")):
            data["city"] = city_part.strip()
        if not _present(data.get("state")):
            data["state"] = state_part.strip()[:2].upper()
    return data


def resolve_duration(data: dict) -> int:
    raw = data.get("duration")
    try:
        duration = int(float(raw)) if _present(raw) else 0
    except (TypeError, ValueError, OverflowError):
        duration = 0
    if duration >= 1:
        return duration

    start = data.get("tripStartDate") or data.get("departureDate")
    end = data.get("tripEndDate") or data.get("returnDate")
    return trip_duration(start, end)


class TarValidationService:
    """Validates one TAR: INIT -> MERGING -> FIELD_CHECK -> COST_CALC -> REPORT_READY.

    A failed field check ends in FAIL with the accumulated errors and no cost
    calculation. Rate lookups and document extraction degrade to warnings.
    """

    def __init__(
        self,
        cost_calculator: CostCalculator,
        config: ValidationConfig | None = None,
        document_processor: DocumentProcessor | None = None,
        report_generator: ReportGenerator | None = None,
        expense_limits: ExpenseLimits | None = None,
        log_sink=None,
    ):
        self.cost_calculator = cost_calculator
        self.config = config or ValidationConfig()
        self.document_processor = document_processor
        self.report_generator = report_generator or ReportGenerator(self.config)
        self.expense_limits = expense_limits or ExpenseLimits()
        self.log_sink = log_sink
        self._vendor_code = re.compile(self.config.vendor_code_format)
        self._phone = re.compile(self.config.phone_format)

    def _transition(self, result: ValidationResult, state: ValidationState):
        logger.debug(f"TAR validation {result.state.value} -> {state.value}")
        result.state = state

    # ─── Merging ───

    def _extract_document(self, tar_data: dict, result: ValidationResult) -> dict:
        content = tar_data.get("documentContent") or tar_data.get("pdfContent")
        if not content:
            return {}
        if self.document_processor is None:
            result.warnings.append("Document extraction unavailable - using manual input")
            return {}

        media_type = tar_data.get("mimeType") or PDF
        try:
            raw = decode_base64(content)
            _, record, quality = self.document_processor.extract_bytes(raw, media_type)
        except ExtractionFailure as e:
            logger.warning(f"Document extraction failed, continuing with manual input: {e}")
            result.warnings.append(f"Document extraction failed - using manual input ({e})")
            return {}

        result.extraction_quality = quality
        extracted = dict(record.fields)
        extracted["itinerary"] = list(record.itinerary)
        return extracted

    @staticmethod
    def _itinerary(manual, extracted) -> list[ItineraryStop]:
        if manual:
            stops = [s if isinstance(s, ItineraryStop) else ItineraryStop.from_dict(s) for s in manual]
            return [s for s in stops if s.city or s.date]
        return list(extracted or [])

    def merge(self, tar_data: dict, result: ValidationResult) -> dict:
        extracted = self._extract_document(tar_data, result)
        merged = merge_records(extracted, tar_data)
        merged["itinerary"] = self._itinerary(tar_data.get("itinerary"), extracted.get("itinerary"))
        merged = canonicalize(merged)

        for name in DATE_FIELDS:
            value = merged.get(name)
            if _present(value):
                merged[name] = normalize_date(str(value))
                if not is_iso_date(merged[name]):
                    result.warnings.append(f"Unrecognized date format for {name}: {value}")
        for i, stop in enumerate(merged["itinerary"]):
            if stop.date and not is_iso_date(stop.date):
                result.warnings.append(f"Unrecognized date format for itinerary stop {i + 1}: {stop.date}")
        return merged

    # ─── Field checks ───

    def check_fields(self, data: dict) -> list[str]:
        errors = [
            f"Missing required field: {name}"
            for name in self.config.required_fields
            if not _present(data.get(name))
        ]

        if _present(data.get("vendorCode")):
            if not self._vendor_code.match(str(data["vendorCode"]).strip()):
                errors.append("Invalid vendor code format")

        if _present(data.get("contactNumber")):
            phone = _PHONE_SEPARATORS.sub("", str(data["contactNumber"]))
            if not self._phone.match(phone):
                errors.append("Invalid phone number format")

        if _present(data.get("estimatedCost")):
            amount = parse_amount(data["estimatedCost"])
            if amount is None or amount <= 0:
                errors.append("Invalid estimated cost")
        return errors

    # ─── Pipeline ───

    def _run(self, tar_data: dict, result: ValidationResult) -> ValidationResult:
        self._transition(result, ValidationState.MERGING)
        merged = self.merge(tar_data, result)

        self._transition(result, ValidationState.FIELD_CHECK)
        errors = self.check_fields(merged)
        if errors:
            raise ValidationFailure(errors)

        duration = resolve_duration(merged)
        claimed = parse_amount(merged.get("totalCost"))
        if claimed is None:
            claimed = parse_amount(merged.get("estimatedCost")) or 0.0

        self._transition(result, ValidationState.COST_CALC)
        itinerary = merged["itinerary"]
        expected: ExpectedCosts = self.cost_calculator.calculate(
            itinerary,
            city=merged.get("city"),
            state=merged.get("state"),
            duration=duration,
            trip_date=merged.get("tripDate") or merged.get("tripStartDate") or merged.get("departureDate"),
        )
        result.warnings.extend(expected.warnings)

        for check in check_expense_limits(merged, duration, self.expense_limits):
            if check.level != "success":
                result.warnings.append(check.message)

        report_data = dict(merged)
        report_data["itinerary"] = [s.to_dict() for s in itinerary]
        report = self.report_generator.generate(report_data, expected, claimed)
        self._transition(result, ValidationState.REPORT_READY)

        result.success = True
        result.report = report
        result.is_valid = report.is_valid
        result.expected_cost = round(expected.total_expected, 2)
        result.claimed_cost = report.claimed_cost
        result.variance = report.variance
        result.variance_percent = report.variance_percent
        result.duration = duration
        result.breakdown = [item.to_dict() for item in expected.breakdown]
        result.extracted_data = report_data
        result.message = (
            MSG_VALID if report.is_valid else MSG_INVALID.format(pct=f"{report.variance_percent:.2f}")
        )

        if self.log_sink is not None:
            self.log_sink.record(report)
        return result

    def validate(self, tar_data: dict) -> ValidationResult:
        logger.info("Starting TAR validation")
        result = ValidationResult()
        try:
            self._run(dict(tar_data or {}), result)
        except ValidationFailure as e:
            self._transition(result, ValidationState.FAIL)
            result.success = False
            result.is_valid = False
            result.errors = e.errors
            result.message = MSG_FIELD_FAILURE
            logger.info(f"TAR validation failed field checks: {e}")
            return result
        except Exception:
            logger.exception("TAR validation error")
            failed = ValidationResult(state=ValidationState.FAIL)
            failed.errors = [SYSTEM_ERROR]
            failed.message = MSG_SYSTEM_ERROR
            return failed

        logger.info(
            f"TAR validation completed: valid={result.is_valid} "
            f"expected={result.expected_cost} claimed={result.claimed_cost}"
        )
        return result
