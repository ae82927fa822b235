"""Field pattern library — ordered recognition patterns per TAR field.

Each field maps to a list of compiled patterns tried in order; the first one
whose first group captures non-blank text wins. Support for a new form layout
is added here, not in the extractor.
"""

import re

_I = re.IGNORECASE

# Captures the rest of the line after a label
_LINE = r"[:\s]*([^\n\r]+)"
# Captures a money amount after a label, e.g. "$1,234.50"
_MONEY = r"[:\s]*\$?(\d[\d,]*(?:\.\d+)?)"


def _p(*patterns: str, flags: int = _I) -> list[re.Pattern]:
    return [re.compile(p, flags) for p in patterns]


FIELD_PATTERNS: dict[str, list[re.Pattern]] = {
    "authorizationNumber": _p(
        r"\bauthorization\s+number" + _LINE,
        r"\bauth\s*#" + _LINE,
        r"\bauthorization[:\s]*([A-Z0-9\-/]+)",
    ),
    "travelerName": _p(
        r"\btraveler(?:'s)?\s+name" + _LINE,
        r"\btraveler" + _LINE,
        r"\bemployee\s+name" + _LINE,
        r"\bname[:\s]*([A-Za-z][A-Za-z ,.]*)",
    ),
    "title": _p(
        r"\bjob\s+title" + _LINE,
        r"\btitle" + _LINE,
        r"\bposition" + _LINE,
    ),
    "vendorCode": _p(
        r"\bpegasys\s+vendor\s+code[:\s]*(E\d{8,9})\b",
        r"\bvendor\s+code[:\s]*(E\d{8,9})\b",
        r"\bemployee\s+id[:\s]*(E\d{8,9})\b",
    ),
    "currentAddress": _p(
        r"\bcurrent\s+residence\s+address" + _LINE,
        r"\baddress" + _LINE,
        r"\bresidence" + _LINE,
    ),
    "officeDivision": _p(
        r"\boffice/service\s+and\s+division" + _LINE,
        r"\boffice" + _LINE,
        r"\bdivision" + _LINE,
    ),
    "dutyStation": _p(
        r"\bofficial\s+duty\s+station" + _LINE,
        r"\bduty\s+station" + _LINE,
        r"\bwork\s+location" + _LINE,
    ),
    "contactNumber": _p(
        r"\bcontact\s+telephone\s+number" + _LINE,
        r"\bphone" + _LINE,
        r"\btelephone" + _LINE,
        r"(\(?\d{3}\)?[-.\s]?\d{3}[-.\s]?\d{4})",
    ),
    "travelPurpose": _p(
        r"\btravel\s+purpose" + _LINE,
        r"\bpurpose" + _LINE,
        r"\breason\s+for\s+travel" + _LINE,
    ),
    "briefDescription": _p(
        r"\bbrief\s+description" + _LINE,
        r"\bdescription" + _LINE,
        r"\bdetails" + _LINE,
    ),
    "estimatedCost": _p(
        r"\bestimated\s+cost[:\s]*total" + _MONEY,
        r"\btotal\s+cost" + _MONEY,
        r"\bamount" + _MONEY,
    ),
    "perDiem": _p(
        r"\bper\s+diem" + _MONEY,
        r"\bmeals\s+and\s+incidentals" + _MONEY,
    ),
    "airRail": _p(
        r"\bair/rail" + _MONEY,
        r"\btransportation" + _MONEY,
        r"\bairfare" + _MONEY,
    ),
    "lodging": _p(
        r"\blodging" + _MONEY,
        r"\bhotel" + _MONEY,
        r"\baccommodation" + _MONEY,
    ),
    "rentalCar": _p(
        r"\brental\s+car" + _MONEY,
        r"\bcar\s+rental" + _MONEY,
        r"\bvehicle" + _MONEY,
    ),
    "miscellaneous": _p(
        r"\bmiscellaneous" + _MONEY,
        r"\bother" + _MONEY,
        r"\bmisc\b" + _MONEY,
    ),
}

NUMERIC_FIELDS: tuple[str, ...] = (
    "estimatedCost",
    "perDiem",
    "airRail",
    "lodging",
    "rentalCar",
    "miscellaneous",
)

# Codes that OCR letter->digit corrections would corrupt
OCR_EXEMPT_FIELDS: frozenset[str] = frozenset({"vendorCode", "authorizationNumber"})

DATE_KEYWORDS: dict[str, tuple[str, ...]] = {
    "departureDate": ("departure", "depart", "leave"),
    "returnDate": ("return", "arrive back", "end"),
}

_DATE_VALUE = r"(\d{1,4}[/\-]\d{1,2}[/\-]\d{1,4})"


def date_pattern(keyword: str) -> re.Pattern:
    """Keyword-anchored date pattern, tolerating a trailing "date" label."""
    return re.compile(rf"\b{re.escape(keyword)}\w*(?:\s+date)?[:\s]*{_DATE_VALUE}", _I)


# ─── Itinerary ───

ITINERARY_HEADERS: list[re.Pattern] = _p(
    r"AUTHORIZED\s+OFFICIAL\s+ITINERARY",
    r"\bITINERARY\b",
    r"\bTRAVEL\s+SCHEDULE\b",
)

# Heading line that closes a section: all caps, three letters or more
SECTION_HEADING = re.compile(r"^[ \t]*[A-Z]{3}[A-Z &/\-]*:?[ \t]*$")

# Column row directly under an itinerary header, e.g. "DATE LOCATION"
ITINERARY_COLUMN_HEADING = re.compile(r"^[ \t]*DATES?[ \t]*[/|&-]?[ \t]*(?:LOCATIONS?|CITY(?:[ \t]*[/,][ \t]*STATE)?)[ \t]*$", _I)

ITINERARY_DATE_VARIANTS: list[re.Pattern] = _p(
    r"\b(\d{1,2}/\d{1,2}/\d{4})\b",
    r"\b(\d{1,2}-\d{1,2}-\d{4})\b",
    r"\b(\d{4}-\d{1,2}-\d{1,2})\b",
    flags=0,
)

ITINERARY_LOCATION_VARIANTS: list[re.Pattern] = _p(
    r"([A-Za-z][A-Za-z .']*?),[ \t]*([A-Z]{2})\b",
    r"([A-Za-z][A-Za-z .']*?)[ \t]+([A-Z]{2})(?=\s|$)",
    flags=0,
)

# Free-text fallback when no itinerary section exists; yields undated stops
TRAVEL_LOCATION_PATTERNS: list[re.Pattern] = _p(
    r"\b(?i:travel|trip|visit|go)\s+(?i:to)\s+([A-Za-z][A-Za-z .']*?),[ \t]*([A-Z]{2})\b",
    r"\b(?i:from|depart)\s+([A-Za-z][A-Za-z .']*?),[ \t]*([A-Z]{2})\b",
    r"\b(?i:arrive|return)\s+([A-Za-z][A-Za-z .']*?),[ \t]*([A-Z]{2})\b",
    flags=0,
)

# ─── Numbered GSA form headings ("3. TRAVELER") read from following lines ───

FORM_HEADINGS: list[tuple[re.Pattern, str, int]] = [
    (re.compile(r"\d+\.\s*AUTHORIZATION NUMBER", _I), "authorizationNumber", 2),
    (re.compile(r"\d+\.\s*TRAVELER", _I), "travelerName", 2),
    (re.compile(r"\d+\.\s*TITLE", _I), "title", 2),
    (re.compile(r"\d+\.\s*(?:PEGASYS\s+)?VENDOR CODE", _I), "vendorCode", 2),
    (re.compile(r"\d+\.\s*CURRENT RESIDENCE ADDRESS", _I), "currentAddress", 3),
    (re.compile(r"\d+\.\s*OFFICE.*DIVISION", _I), "officeDivision", 2),
    (re.compile(r"\d+\.\s*OFFICIAL DUTY STATION", _I), "dutyStation", 2),
    (re.compile(r"\d+\.\s*CONTACT TELEPHONE", _I), "contactNumber", 1),
    (re.compile(r"\d+\.\s*TRAVEL PURPOSE", _I), "travelPurpose", 2),
    (re.compile(r"\d+\.\s*BRIEF DESCRIPTION", _I), "briefDescription", 3),
]

NUMBERED_LINE = re.compile(r"^\d+\.")
