"""Document text sources — plain text out of PDF and Word uploads."""

import io
import logging
from abc import ABC, abstractmethod

import pdfplumber
import pytesseract
from docx import Document
from pdf2image import convert_from_bytes

logger = logging.getLogger(__name__)

PDF = "application/pdf"
DOCX = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
MSWORD = "application/msword"

SUPPORTED_MEDIA_TYPES = {PDF: "PDF", DOCX: "Word", MSWORD: "Word"}


class DocumentTextSource(ABC):
    """Extracts plain text from document bytes of a declared media type."""

    @abstractmethod
    def extract_text(self, content: bytes, media_type: str) -> str | None:
        """Return the document text, or None when nothing could be extracted."""


class LocalDocumentTextSource(DocumentTextSource):
    """pdfplumber / python-docx extraction with a Tesseract OCR fallback for scans."""

    def __init__(self, ocr_enabled: bool = True, ocr_min_text_length: int = 50):
        self.ocr_enabled = ocr_enabled
        self.ocr_min_text_length = ocr_min_text_length

    def extract_text(self, content: bytes, media_type: str) -> str | None:
        if media_type == PDF:
            return self._extract_pdf(content)
        if media_type == DOCX:
            return self._extract_docx(content)
        if media_type == MSWORD:
            # Legacy binary .doc has no pure-Python reader
            logger.warning("Legacy .doc upload; convert to .docx or PDF for extraction")
            return None
        logger.warning(f"No text extractor for media type {media_type}")
        return None

    def _extract_pdf(self, content: bytes) -> str | None:
        text = ""
        try:
            with pdfplumber.open(io.BytesIO(content)) as pdf:
                pages = [page.extract_text() or "" for page in pdf.pages]
            text = "\n".join(pages).strip()
        except Exception as e:
            logger.warning(f"PDF text extraction failed: {e}")

        if len(text) < self.ocr_min_text_length and self.ocr_enabled:
            logger.info(f"PDF text too short ({len(text)} chars), trying OCR")
            ocr_text = self._ocr_pdf(content)
            if ocr_text and len(ocr_text) > len(text):
                return ocr_text

        return text or None

    def _ocr_pdf(self, content: bytes) -> str | None:
        try:
            images = convert_from_bytes(content)
            pages = [pytesseract.image_to_string(img) for img in images]
        except Exception as e:
            logger.warning(f"OCR failed: {e}")
            return None
        return "\n".join(pages).strip() or None

    def _extract_docx(self, content: bytes) -> str | None:
        try:
            doc = Document(io.BytesIO(content))
        except Exception as e:
            logger.warning(f"Word extraction failed: {e}")
            return None

        lines = [p.text for p in doc.paragraphs]
        for table in doc.tables:
            for row in table.rows:
                lines.append(" ".join(cell.text.strip() for cell in row.cells))
        return "\n".join(lines).strip() or None


class StaticDocumentTextSource(DocumentTextSource):
    """Returns canned text regardless of content; used in tests."""

    def __init__(self, text: str | None):
        self.text = text
        self.calls: list[str] = []

    def extract_text(self, content: bytes, media_type: str) -> str | None:
        self.calls.append(media_type)
        return self.text
