"""Date helpers shared by extraction, cost calculation and bulk mapping."""

import math
import re
from datetime import date, datetime

_US_DATE = re.compile(r"^(\d{1,2})[/\-](\d{1,2})[/\-](\d{4})$")
_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")

# Formats accepted from spreadsheets and free-form form input
_PARSE_FORMATS = (
    "%Y-%m-%d",
    "%m/%d/%Y",
    "%m-%d-%Y",
    "%m/%d/%y",
    "%Y/%m/%d",
    "%b %d, %Y",
    "%B %d, %Y",
    "%d %b %Y",
)


def normalize_date(value: str | None) -> str | None:
    """Rewrite MM/DD/YYYY or MM-DD-YYYY as YYYY-MM-DD.

    Anything that does not end up as a real calendar date is returned
    unchanged, e.g. "13/45/2025" stays "13/45/2025".
    """
    if not value:
        return None

    raw = value.strip()
    m = _US_DATE.match(raw)
    candidate = f"{m.group(3)}-{int(m.group(1)):02d}-{int(m.group(2)):02d}" if m else raw

    try:
        date.fromisoformat(candidate)
    except ValueError:
        return value
    return candidate


def is_iso_date(value) -> bool:
    if not isinstance(value, str) or not _ISO_DATE.match(value):
        return False
    try:
        date.fromisoformat(value)
    except ValueError:
        return False
    return True


def parse_date(value) -> date | None:
    """Best-effort parse of a date-ish value; None when unparseable."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    raw = str(value).strip()
    if not raw:
        return None
    # ISO timestamps ("2025-05-01T00:00:00Z")
    if len(raw) > 10 and raw[4:5] == "-" and raw[10:11] in ("T", " "):
        raw = raw[:10]
    for fmt in _PARSE_FORMATS:
        try:
            return datetime.strptime(raw, fmt).date()
        except ValueError:
            continue
    return None


def trip_duration(start, end) -> int:
    """Inclusive day count between two dates; 1 when unknown or reversed."""
    start_d = parse_date(start)
    end_d = parse_date(end)
    if not start_d or not end_d or end_d < start_d:
        return 1
    seconds = (end_d - start_d).total_seconds()
    return max(1, math.ceil(seconds / 86400) + 1)
