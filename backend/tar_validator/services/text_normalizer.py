"""Text normalizer — cleans raw document text before pattern matching."""

import re

_HORIZONTAL_WS = re.compile(r"[ \t\f\v\xa0]+")
_LINE_EDGE_WS = re.compile(r" *\n *")
_BLANK_LINES = re.compile(r"\n{3,}")
_DISALLOWED = re.compile(r"[^\w\s$.,()\-:/&#+'%@]")
_DOLLAR_SPACE = re.compile(r"\$\s+")

# Letters OCR commonly confuses with digits, only fixed right before a digit
_OCR_FIXES: list[tuple[re.Pattern, str]] = [
    (re.compile(r"[Oo](?=\d)"), "0"),
    (re.compile(r"[Il](?=\d)"), "1"),
    (re.compile(r"[Ss](?=\d)"), "5"),
]


class TextNormalizer:
    """Whitespace, allow-list and OCR-confusion cleanup.

    Line breaks survive normalization: runs of blank lines collapse to a
    single blank line so line-anchored patterns and section boundaries still
    work on the output.
    """

    def __init__(self, ocr_corrections: bool = True):
        self.ocr_corrections = ocr_corrections

    def normalize(self, text: str | None, ocr_corrections: bool | None = None) -> str:
        if not text:
            return ""

        apply_fixes = self.ocr_corrections if ocr_corrections is None else ocr_corrections

        cleaned = text.replace("\r\n", "\n").replace("\r", "\n")
        cleaned = _HORIZONTAL_WS.sub(" ", cleaned)
        cleaned = _LINE_EDGE_WS.sub("\n", cleaned)
        cleaned = _BLANK_LINES.sub("\n\n", cleaned)
        cleaned = _DISALLOWED.sub("", cleaned)
        cleaned = _DOLLAR_SPACE.sub("$", cleaned)
        if apply_fixes:
            cleaned = self.fix_ocr_confusions(cleaned)
        return cleaned.strip()

    @staticmethod
    def fix_ocr_confusions(text: str) -> str:
        for pattern, replacement in _OCR_FIXES:
            text = pattern.sub(replacement, text)
        return text
