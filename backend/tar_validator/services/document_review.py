"""Document review — classify TAR / RIP / invoice uploads and score their completeness."""

import logging
import re
from dataclasses import dataclass, field

from tar_validator.data.review_rules import (
    CLASSIFICATION_KEYWORDS,
    CLASSIFICATION_PRIORITY,
    INVOICE_ELEMENTS,
    INVOICE_FORMAT_SCORE,
    ISSUE_PENALTY,
    RIP_MIN_WORDS,
    RIP_SECTIONS,
    RISK_WEIGHTS,
    TAR_MIN_WORDS,
    TAR_SECTIONS,
    UNKNOWN_FORMAT_SCORE,
)

logger = logging.getLogger(__name__)

_DOCUMENT_EXTENSION = re.compile(r"\.(pdf|docx|doc)$", re.I)
_TABLES_OR_FIGURES = re.compile(r"\d+\.\d+|\d+%|table|figure", re.I)
_CONTRACT_REFERENCE = re.compile(r"contract\s+\w*\d+")
_REPORTING_PERIOD = re.compile(
    r"\b(quarter|q[1-4]|january|february|march|april|may|june|july|august"
    r"|september|october|november|december)\b"
)
_APPROVALS = re.compile(r"signature|approved|reviewed|certified")
_CURRENCY = re.compile(r"\$[\d,]+\.?\d*")
_HOURS_TIMES_RATE = re.compile(r"\d+\s*[x*×]\s*\d+|\d+\s*hours?", re.I)


@dataclass
class DocumentReview:
    document_type: str
    completeness_score: int = 0
    compliance_score: int = 0
    format_score: int = 0
    issues: list[str] = field(default_factory=list)
    validation_details: dict[str, bool] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "documentType": self.document_type,
            "completenessScore": self.completeness_score,
            "complianceScore": self.compliance_score,
            "formatScore": self.format_score,
            "issues": list(self.issues),
            "validationDetails": dict(self.validation_details),
        }


def keyword_score(text: str, keywords: list[str]) -> int:
    """Count whole-word occurrences of every keyword in ``text``."""
    return sum(
        len(re.findall(rf"\b{re.escape(keyword)}\b", text, re.I))
        for keyword in keywords
    )


def classify_document(content: str, filename: str = "") -> str:
    text = f"{content or ''} {filename or ''}".lower()
    scores = {doc_type: keyword_score(text, kws) for doc_type, kws in CLASSIFICATION_KEYWORDS.items()}
    logger.debug(f"Classification scores for {filename}: {scores}")

    best = max(scores.values())
    if best == 0:
        return "UNKNOWN"
    return next(t for t in CLASSIFICATION_PRIORITY if scores[t] == best)


def _check_sections(content: str, sections: dict[str, list[str]], label: str) -> tuple[int, list[str], dict[str, bool]]:
    lowered = content.lower()
    issues = []
    details = {}
    for name, keywords in sections.items():
        found = any(k in lowered for k in keywords)
        details[name] = found
        if not found:
            issues.append(f"Missing required {label}: {name}")
    completeness = round(sum(details.values()) / len(sections) * 100)
    return completeness, issues, details


def _word_count(content: str) -> int:
    return len(content.split())


def _tar_format(content: str, filename: str) -> tuple[int, list[str]]:
    score, issues = 100, []
    if not _DOCUMENT_EXTENSION.search(filename or ""):
        issues.append("Invalid file format - must be PDF or Word document")
        score -= 20
    if _word_count(content) < TAR_MIN_WORDS:
        issues.append("Document appears too short for a comprehensive TAR")
        score -= 15
    if not _TABLES_OR_FIGURES.search(content):
        issues.append("Document may lack required tables or figures")
        score -= 10
    return max(0, score), issues


def _tar_compliance(content: str) -> tuple[int, list[str]]:
    score, issues = 100, []
    lowered = content.lower()
    if not _CONTRACT_REFERENCE.search(lowered):
        issues.append("Missing proper contract number reference")
        score -= 20
    if not _REPORTING_PERIOD.search(lowered):
        issues.append("Missing clear reporting period identification")
        score -= 15
    if not _APPROVALS.search(lowered):
        issues.append("Missing approval or signature indicators")
        score -= 10
    return max(0, score), issues


def _rip_format(content: str, filename: str) -> tuple[int, list[str]]:
    score, issues = 100, []
    if not _DOCUMENT_EXTENSION.search(filename or ""):
        issues.append("Invalid file format for RIP submission")
        score -= 25
    if _word_count(content) < RIP_MIN_WORDS:
        issues.append("RIP response appears too brief")
        score -= 20
    return max(0, score), issues


def _invoice_financials(content: str) -> tuple[int, list[str]]:
    score, issues = 100, []
    if not _CURRENCY.search(content):
        issues.append("No currency amounts found in invoice")
        score -= 30
    if not _HOURS_TIMES_RATE.search(content):
        issues.append("Missing calculation details (hours x rate)")
        score -= 20
    return max(0, score), issues


def review_document(doc_type: str, content: str, filename: str = "") -> DocumentReview:
    content = content or ""
    logger.info(f"Reviewing {doc_type} document: {filename}")

    if doc_type == "TAR":
        completeness, issues, details = _check_sections(content, TAR_SECTIONS, "section")
        format_score, format_issues = _tar_format(content, filename)
        compliance, compliance_issues = _tar_compliance(content)
        return DocumentReview(
            document_type="TAR",
            completeness_score=completeness,
            compliance_score=compliance,
            format_score=format_score,
            issues=issues + format_issues + compliance_issues,
            validation_details=details,
        )

    if doc_type == "RIP":
        completeness, issues, details = _check_sections(content, RIP_SECTIONS, "section")
        format_score, format_issues = _rip_format(content, filename)
        return DocumentReview(
            document_type="RIP",
            completeness_score=completeness,
            compliance_score=format_score,
            format_score=format_score,
            issues=issues + format_issues,
            validation_details=details,
        )

    if doc_type == "INVOICE":
        completeness, issues, details = _check_sections(content, INVOICE_ELEMENTS, "element")
        compliance, financial_issues = _invoice_financials(content)
        return DocumentReview(
            document_type="INVOICE",
            completeness_score=completeness,
            compliance_score=compliance,
            format_score=INVOICE_FORMAT_SCORE,
            issues=issues + financial_issues,
            validation_details=details,
        )

    return DocumentReview(
        document_type=doc_type,
        format_score=UNKNOWN_FORMAT_SCORE,
        issues=["Unknown document type - manual review required"],
    )


def risk_score(review: DocumentReview) -> int:
    """Weighted 0-100 quality score; higher means fewer concerns."""
    issues_component = max(0, 100 - len(review.issues) * ISSUE_PENALTY)
    weighted = (
        review.completeness_score * RISK_WEIGHTS["completeness"]
        + review.compliance_score * RISK_WEIGHTS["compliance"]
        + review.format_score * RISK_WEIGHTS["format"]
        + issues_component * RISK_WEIGHTS["issues"]
    )
    return round(max(0, min(100, weighted)))
