from dataclasses import dataclass, field

from pydantic_settings import BaseSettings

from tar_validator.data.field_patterns import FIELD_PATTERNS, OCR_EXEMPT_FIELDS


class Settings(BaseSettings):
    # GSA per diem API
    gsa_api_key: str = "DEMO_KEY"
    gsa_base_url: str = "https://api.gsa.gov/travel/perdiem/v2"
    gsa_timeout_seconds: float = 15.0
    per_diem_year: str = "2025"  # fiscal year for lookup

    # Fallback rates when the lookup comes back empty
    default_mie: float = 79.0
    default_lodging: float = 150.0

    # Validation thresholds
    cost_buffer: float = 10.0  # USD
    max_deviation_percent: float = 15.0

    # Document processing
    max_file_size: int = 10 * 1024 * 1024  # 10 MB
    ocr_enabled: bool = True
    ocr_corrections_enabled: bool = True
    ocr_min_text_length: int = 50

    # Expense limits (client-side policy thresholds)
    car_rental_max_daily: float = 75.0
    car_rental_justification_threshold: float = 400.0
    parking_max_daily: float = 25.0
    conference_fee_max: float = 2000.0
    conference_justification_threshold: float = 1000.0
    misc_justification_threshold: float = 200.0
    total_variance_threshold: float = 0.15

    # Bulk CSV exports carry no phone column; used as contactNumber when set
    bulk_default_contact_number: str | None = None

    # Validation log
    database_url: str = "sqlite:///./tar_validation.db"

    # CORS
    cors_origins: str = "http://localhost:5173"

    @property
    def cors_origin_list(self) -> list[str]:
        return [origin.strip() for origin in self.cors_origins.split(",")]

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}


settings = Settings()


@dataclass(frozen=True)
class RateConfig:
    """Per diem lookup endpoint and fallback rates."""
    api_key: str = "DEMO_KEY"
    base_url: str = "https://api.gsa.gov/travel/perdiem/v2"
    timeout_seconds: float = 15.0
    year: str = "2025"
    default_mie: float = 79.0
    default_lodging: float = 150.0

    @classmethod
    def from_settings(cls, s: Settings) -> "RateConfig":
        return cls(
            api_key=s.gsa_api_key,
            base_url=s.gsa_base_url,
            timeout_seconds=s.gsa_timeout_seconds,
            year=s.per_diem_year,
            default_mie=s.default_mie,
            default_lodging=s.default_lodging,
        )


@dataclass(frozen=True)
class ValidationConfig:
    """Tolerances and field rules for one validation run."""
    cost_buffer: float = 10.0
    max_deviation_percent: float = 15.0
    required_fields: tuple[str, ...] = (
        "travelerName",
        "travelPurpose",
        "estimatedCost",
        "dutyStation",
        "contactNumber",
    )
    vendor_code_format: str = r"^E\d{8,9}$"
    phone_format: str = r"^[+]?\d{7,15}$"

    @classmethod
    def from_settings(cls, s: Settings) -> "ValidationConfig":
        return cls(cost_buffer=s.cost_buffer, max_deviation_percent=s.max_deviation_percent)


@dataclass(frozen=True)
class ExtractionConfig:
    """Pattern library and OCR correction switches for field extraction."""
    field_patterns: dict = field(default_factory=lambda: dict(FIELD_PATTERNS))
    ocr_corrections: bool = True
    ocr_exempt_fields: frozenset[str] = OCR_EXEMPT_FIELDS
    ocr_enabled: bool = True
    ocr_min_text_length: int = 50
    max_file_size: int = 10 * 1024 * 1024

    @classmethod
    def from_settings(cls, s: Settings) -> "ExtractionConfig":
        return cls(
            ocr_corrections=s.ocr_corrections_enabled,
            ocr_enabled=s.ocr_enabled,
            ocr_min_text_length=s.ocr_min_text_length,
            max_file_size=s.max_file_size,
        )


@dataclass(frozen=True)
class ExpenseLimits:
    """Itemized expense thresholds."""
    car_rental_max_daily: float = 75.0
    car_rental_justification_threshold: float = 400.0
    parking_max_daily: float = 25.0
    conference_fee_max: float = 2000.0
    conference_justification_threshold: float = 1000.0
    misc_justification_threshold: float = 200.0
    total_variance_threshold: float = 0.15  # fraction, not percent

    @classmethod
    def from_settings(cls, s: Settings) -> "ExpenseLimits":
        return cls(
            car_rental_max_daily=s.car_rental_max_daily,
            car_rental_justification_threshold=s.car_rental_justification_threshold,
            parking_max_daily=s.parking_max_daily,
            conference_fee_max=s.conference_fee_max,
            conference_justification_threshold=s.conference_justification_threshold,
            misc_justification_threshold=s.misc_justification_threshold,
            total_variance_threshold=s.total_variance_threshold,
        )
