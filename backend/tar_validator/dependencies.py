"""Service wiring from settings; routers receive these through Depends()."""

from tar_validator.config import (
    ExpenseLimits,
    ExtractionConfig,
    RateConfig,
    ValidationConfig,
    settings,
)
from tar_validator.database import engine, session_factory
from tar_validator.services.bulk_validation_service import BulkValidationService
from tar_validator.services.cost_calculator import CostCalculator
from tar_validator.services.document_processor import DocumentProcessor
from tar_validator.services.document_source import LocalDocumentTextSource
from tar_validator.services.rate_client import GsaRateSource, PerDiemRateClient
from tar_validator.services.tar_validation_service import TarValidationService
from tar_validator.services.validation_log_service import ValidationLogService

rate_config = RateConfig.from_settings(settings)
validation_config = ValidationConfig.from_settings(settings)
extraction_config = ExtractionConfig.from_settings(settings)
expense_limits = ExpenseLimits.from_settings(settings)

rate_client = PerDiemRateClient(GsaRateSource(rate_config), rate_config)
document_processor = DocumentProcessor(
    LocalDocumentTextSource(
        ocr_enabled=extraction_config.ocr_enabled,
        ocr_min_text_length=extraction_config.ocr_min_text_length,
    ),
    extraction_config,
)
validation_log_service = ValidationLogService(engine, session_factory)
tar_validation_service = TarValidationService(
    CostCalculator(rate_client, rate_config),
    validation_config,
    document_processor=document_processor,
    expense_limits=expense_limits,
    log_sink=validation_log_service,
)
bulk_validation_service = BulkValidationService(
    tar_validation_service,
    default_contact_number=settings.bulk_default_contact_number,
)


def get_rate_client() -> PerDiemRateClient:
    return rate_client


def get_document_processor() -> DocumentProcessor:
    return document_processor


def get_validation_service() -> TarValidationService:
    return tar_validation_service


def get_bulk_service() -> BulkValidationService:
    return bulk_validation_service


def get_log_service() -> ValidationLogService:
    return validation_log_service
