"""
Pytest fixtures for the TAR validator test suite.

Provides:
- An in-memory per diem rate table (no network)
- Validation, extraction and log services wired to fakes
- In-memory SQLite for the validation log
"""

import base64

import pytest
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from tar_validator.config import ExtractionConfig, RateConfig, ValidationConfig
from tar_validator.services.cost_calculator import CostCalculator
from tar_validator.services.document_processor import DocumentProcessor
from tar_validator.services.document_source import StaticDocumentTextSource
from tar_validator.services.rate_client import MONTHS, InMemoryRateSource, PerDiemRateClient
from tar_validator.services.tar_validation_service import TarValidationService
from tar_validator.services.validation_log_service import ValidationLogService

SAMPLE_TAR_TEXT = """TRAVEL AUTHORIZATION REQUEST
Authorization Number: TAR-2025-0042
Traveler Name: Jane Smith
Title: Program Analyst
Pegasys Vendor Code: E12345678
Official Duty Station: Washington, DC
Contact Telephone Number: (555) 123-4567
Travel Purpose: Annual program review
Estimated Cost Total: $1,250.00
Per Diem: $329.00
Air/Rail: $450.00
Departure Date: 05/01/2025
Return Date: 05/03/2025

AUTHORIZED OFFICIAL ITINERARY
DATE LOCATION
05/01/2025 Boston, MA
05/02/2025 Boston, MA
05/03/2025 Boston, MA

APPROVALS
Approved by supervisor
"""


def washington_rate() -> dict:
    rate = {"Meals": "79"}
    rate.update({m: "250" for m in MONTHS})
    return rate


@pytest.fixture
def rate_config() -> RateConfig:
    return RateConfig(api_key="TEST_KEY", year="2025")


@pytest.fixture
def rate_source() -> InMemoryRateSource:
    return InMemoryRateSource({("Washington", "DC"): washington_rate()})


@pytest.fixture
def rate_client(rate_source, rate_config) -> PerDiemRateClient:
    return PerDiemRateClient(rate_source, rate_config)


@pytest.fixture
def cost_calculator(rate_client, rate_config) -> CostCalculator:
    return CostCalculator(rate_client, rate_config)


@pytest.fixture
def log_engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    yield engine
    engine.dispose()


@pytest.fixture
def log_service(log_engine) -> ValidationLogService:
    return ValidationLogService(log_engine)


@pytest.fixture
def document_processor() -> DocumentProcessor:
    return DocumentProcessor(StaticDocumentTextSource(SAMPLE_TAR_TEXT), ExtractionConfig())


@pytest.fixture
def validation_service(cost_calculator, document_processor, log_service) -> TarValidationService:
    return TarValidationService(
        cost_calculator,
        ValidationConfig(),
        document_processor=document_processor,
        log_sink=log_service,
    )


@pytest.fixture
def washington_tar() -> dict:
    """Manual TAR input for a three-day Washington, DC trip."""
    return {
        "travelerName": "Jane Smith",
        "authorizationNumber": "TAR-2025-0042",
        "travelPurpose": "Annual program review",
        "estimatedCost": 1000,
        "contactNumber": "(555) 123-4567",
        "city": "Washington",
        "state": "DC",
        "duration": 3,
    }


@pytest.fixture
def fake_pdf_b64() -> str:
    return base64.b64encode(b"%PDF-1.4 placeholder").decode()


@pytest.fixture
def sample_tar_text() -> str:
    return SAMPLE_TAR_TEXT
