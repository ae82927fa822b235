"""Document processor — base64 upload to extracted record plus quality score."""

import base64
import binascii
import logging
from dataclasses import dataclass, field

from tar_validator.config import ExtractionConfig
from tar_validator.exceptions import ExtractionFailure
from tar_validator.services.document_source import SUPPORTED_MEDIA_TYPES, DocumentTextSource
from tar_validator.services.field_extractor import (
    ExtractedRecord,
    ExtractionQuality,
    FieldExtractor,
)
from tar_validator.services.text_normalizer import TextNormalizer

logger = logging.getLogger(__name__)


@dataclass
class ProcessedDocument:
    success: bool
    extracted_text: str = ""
    record: ExtractedRecord = field(default_factory=ExtractedRecord)
    quality: ExtractionQuality | None = None
    metadata: dict = field(default_factory=dict)
    error: str | None = None

    def to_dict(self) -> dict:
        if not self.success:
            return {
                "success": False,
                "error": self.error,
                "extractedData": {},
                "quality": {"confidence": "FAILED", "issues": [self.error]},
            }
        return {
            "success": True,
            "extractedText": self.extracted_text,
            "extractedData": self.record.to_dict(),
            "quality": self.quality.to_dict() if self.quality else None,
            "metadata": self.metadata,
        }


def decode_base64(data: str) -> bytes:
    # Tolerate data-URL prefixes ("data:application/pdf;base64,...")
    if data.startswith("data:") and "," in data:
        data = data.split(",", 1)[1]
    try:
        return base64.b64decode(data, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ExtractionFailure("Document content is not valid base64") from e


class DocumentProcessor:
    """Runs the text source, normalizer and extractor over one document."""

    def __init__(
        self,
        text_source: DocumentTextSource,
        config: ExtractionConfig | None = None,
        normalizer: TextNormalizer | None = None,
        extractor: FieldExtractor | None = None,
    ):
        self.text_source = text_source
        self.config = config or ExtractionConfig()
        self.normalizer = normalizer or TextNormalizer(ocr_corrections=self.config.ocr_corrections)
        self.extractor = extractor or FieldExtractor(self.config)

    def extract_from_text(self, text: str) -> tuple[str, ExtractedRecord, ExtractionQuality]:
        cleaned = self.normalizer.normalize(text)
        # Codes like vendor numbers are read from text without letter->digit fixes
        raw = self.normalizer.normalize(text, ocr_corrections=False)
        record = self.extractor.extract(cleaned, raw_text=raw)
        return cleaned, record, self.extractor.assess_quality(record)

    def extract_bytes(self, content: bytes, media_type: str) -> tuple[str, ExtractedRecord, ExtractionQuality]:
        """Raises ExtractionFailure for unsupported, oversize or empty documents."""
        if media_type not in SUPPORTED_MEDIA_TYPES:
            raise ExtractionFailure(f"Unsupported document type: {media_type}")
        if len(content) > self.config.max_file_size:
            raise ExtractionFailure(
                f"File size exceeds maximum limit of {self.config.max_file_size // (1024 * 1024)}MB"
            )

        text = self.text_source.extract_text(content, media_type)
        if not text or not text.strip():
            raise ExtractionFailure("No text could be extracted from the document")
        return self.extract_from_text(text)

    def process(self, base64_data: str, media_type: str, filename: str = "document") -> ProcessedDocument:
        try:
            content = decode_base64(base64_data or "")
        except ExtractionFailure as e:
            logger.warning(f"Document processing failed for {filename}: {e}")
            return ProcessedDocument(success=False, error=str(e))
        return self.process_bytes(content, media_type, filename)

    def process_bytes(self, content: bytes, media_type: str, filename: str = "document") -> ProcessedDocument:
        logger.info(f"Processing document: {filename} ({media_type})")
        try:
            cleaned, record, quality = self.extract_bytes(content, media_type)
        except ExtractionFailure as e:
            logger.warning(f"Document processing failed for {filename}: {e}")
            return ProcessedDocument(success=False, error=str(e))

        return ProcessedDocument(
            success=True,
            extracted_text=cleaned,
            record=record,
            quality=quality,
            metadata={
                "filename": filename,
                "mimeType": media_type,
                "extractionMethod": SUPPORTED_MEDIA_TYPES[media_type],
                "textLength": len(cleaned),
                "confidence": quality.confidence,
            },
        )
