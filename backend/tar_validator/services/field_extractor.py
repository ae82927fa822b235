"""Field extractor — turns normalized TAR text into a sparse structured record."""

import logging
import math
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping

from tar_validator.config import ExtractionConfig
from tar_validator.data.field_patterns import (
    DATE_KEYWORDS,
    FORM_HEADINGS,
    NUMBERED_LINE,
    NUMERIC_FIELDS,
    date_pattern,
)
from tar_validator.services.date_utils import is_iso_date, normalize_date
from tar_validator.services.itinerary_extractor import ItineraryStop, extract_itinerary

logger = logging.getLogger(__name__)

# Quality scoring weights
REQUIRED_FIELDS = ("travelerName", "estimatedCost", "travelPurpose")
REQUIRED_POINTS = 20
SECONDARY_FIELDS = ("authorizationNumber", "dutyStation", "contactNumber", "title")
SECONDARY_POINTS = 10
ITINERARY_POINTS = 20
SCORED_NUMERIC_FIELDS = ("estimatedCost", "perDiem", "airRail")
NUMERIC_POINTS = 5


@dataclass(frozen=True)
class ExtractedRecord:
    """Sparse field -> value mapping produced once per document."""
    fields: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))
    itinerary: tuple[ItineraryStop, ...] = ()

    def get(self, name: str, default=None):
        if name == "itinerary":
            return list(self.itinerary)
        return self.fields.get(name, default)

    def to_dict(self) -> dict:
        data = dict(self.fields)
        data["itinerary"] = [s.to_dict() for s in self.itinerary]
        return data


@dataclass
class ExtractionQuality:
    score: int = 0
    max_score: int = 0
    confidence: str = "LOW"  # HIGH | MEDIUM | LOW
    issues: list[str] = field(default_factory=list)

    @property
    def percentage(self) -> float:
        return (self.score / self.max_score * 100) if self.max_score else 0.0

    def to_dict(self) -> dict:
        return {
            "score": self.score,
            "maxScore": self.max_score,
            "percentage": round(self.percentage, 1),
            "confidence": self.confidence,
            "issues": list(self.issues),
        }


def parse_amount(value) -> float | None:
    """Strip thousands separators and currency symbols; None if not a number."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value) if math.isfinite(value) else None
    cleaned = str(value).replace(",", "").replace("$", "").strip()
    try:
        amount = float(cleaned)
    except ValueError:
        return None
    return amount if math.isfinite(amount) else None


def extract_date(text: str, keywords: tuple[str, ...]) -> str | None:
    for keyword in keywords:
        m = date_pattern(keyword).search(text)
        if m:
            return normalize_date(m.group(1))
    return None


def _from_next_lines(lines: list[str], start: int, max_lines: int) -> str:
    collected = []
    for line in lines[start:start + max_lines]:
        line = line.strip()
        if NUMBERED_LINE.match(line):
            break
        if line:
            collected.append(line)
    return " ".join(collected).strip()


def detect_form_fields(text: str) -> dict[str, str]:
    """Read numbered GSA form headings ("3. TRAVELER") from the lines below them."""
    fields: dict[str, str] = {}
    lines = text.split("\n")
    for i, line in enumerate(lines):
        for pattern, name, max_lines in FORM_HEADINGS:
            if name not in fields and pattern.search(line.strip()):
                value = _from_next_lines(lines, i + 1, max_lines)
                if value:
                    fields[name] = value
    return fields


class FieldExtractor:
    """Applies the ordered pattern library to normalized document text."""

    def __init__(self, config: ExtractionConfig | None = None):
        self.config = config or ExtractionConfig()

    def extract(self, text: str, raw_text: str | None = None) -> ExtractedRecord:
        """Extract a record from ``text``.

        ``raw_text`` is the same document normalized without OCR letter/digit
        corrections; fields in ``config.ocr_exempt_fields`` are read from it.
        """
        if not text:
            return ExtractedRecord()

        exempt_source = raw_text if raw_text is not None else text
        values: dict[str, Any] = {}

        for name, patterns in self.config.field_patterns.items():
            source = exempt_source if name in self.config.ocr_exempt_fields else text
            for pattern in patterns:
                m = pattern.search(source)
                if m and m.group(1) and m.group(1).strip():
                    values[name] = m.group(1).strip()
                    break

        for name, value in detect_form_fields(text).items():
            values.setdefault(name, value)

        for name in NUMERIC_FIELDS:
            if name in values:
                amount = parse_amount(values[name])
                if amount is None:
                    logger.debug(f"Dropping non-numeric {name}: {values[name]!r}")
                    del values[name]
                else:
                    values[name] = amount

        for name, keywords in DATE_KEYWORDS.items():
            found = extract_date(text, keywords)
            if found:
                values[name] = found

        itinerary = tuple(extract_itinerary(text))
        return ExtractedRecord(fields=MappingProxyType(values), itinerary=itinerary)

    @staticmethod
    def assess_quality(record: ExtractedRecord) -> ExtractionQuality:
        quality = ExtractionQuality()

        for name in REQUIRED_FIELDS:
            quality.max_score += REQUIRED_POINTS
            if record.get(name):
                quality.score += REQUIRED_POINTS
            else:
                quality.issues.append(f"Missing required field: {name}")

        for name in SECONDARY_FIELDS:
            quality.max_score += SECONDARY_POINTS
            if record.get(name):
                quality.score += SECONDARY_POINTS

        quality.max_score += ITINERARY_POINTS
        if record.itinerary:
            quality.score += ITINERARY_POINTS
        else:
            quality.issues.append("No itinerary data extracted")

        for name in SCORED_NUMERIC_FIELDS:
            quality.max_score += NUMERIC_POINTS
            value = record.get(name)
            if isinstance(value, (int, float)) and not isinstance(value, bool) and value:
                quality.score += NUMERIC_POINTS

        for name in DATE_KEYWORDS:
            value = record.get(name)
            if value and not is_iso_date(value):
                quality.issues.append(f"Unrecognized date format for {name}: {value}")

        pct = quality.percentage
        if pct >= 80:
            quality.confidence = "HIGH"
        elif pct >= 60:
            quality.confidence = "MEDIUM"
        else:
            quality.confidence = "LOW"
        return quality
