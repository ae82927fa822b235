"""Itinerary extraction — pairs dates with city/state mentions in a TAR."""

import logging
import re
from dataclasses import dataclass

from tar_validator.data.field_patterns import (
    ITINERARY_COLUMN_HEADING,
    ITINERARY_DATE_VARIANTS,
    ITINERARY_HEADERS,
    ITINERARY_LOCATION_VARIANTS,
    SECTION_HEADING,
    TRAVEL_LOCATION_PATTERNS,
)
from tar_validator.services.date_utils import normalize_date

logger = logging.getLogger(__name__)

UNKNOWN_LOCATION = "Unknown"


@dataclass(frozen=True)
class ItineraryStop:
    """One stop of a trip. Stops found outside an itinerary section have no date."""
    date: str | None = None
    city: str | None = None
    state: str | None = None

    @property
    def location(self) -> str:
        return f"{self.city or UNKNOWN_LOCATION}, {self.state or UNKNOWN_LOCATION}"

    def to_dict(self) -> dict:
        return {k: v for k, v in (("date", self.date), ("city", self.city), ("state", self.state)) if v}

    @classmethod
    def from_dict(cls, data: dict) -> "ItineraryStop":
        state = data.get("state")
        return cls(
            date=normalize_date(str(data["date"])) if data.get("date") else None,
            city=str(data["city"]).strip() if data.get("city") else None,
            state=str(state).strip().upper()[:2] if state else None,
        )


def find_itinerary_section(text: str) -> str | None:
    """Return the text under the first itinerary header, or None.

    The section runs to the next blank line, the next all-caps heading line,
    or the end of the text. A column-heading row ("DATE LOCATION") directly
    under the header belongs to the section. A section with no content
    counts as no section.
    """
    for header in ITINERARY_HEADERS:
        m = header.search(text)
        if not m:
            continue

        lines = text[m.end():].split("\n")
        section = [lines[0]]
        for i, line in enumerate(lines[1:]):
            if not line.strip():
                break
            if SECTION_HEADING.match(line) and not (i == 0 and ITINERARY_COLUMN_HEADING.match(line)):
                break
            section.append(line)

        body = [line for line in section if line.strip() and not ITINERARY_COLUMN_HEADING.match(line)]
        return "\n".join(section) if body else None
    return None


def _first_variant(section: str, variants: list[re.Pattern]) -> list[re.Match]:
    """Matches of the first pattern variant that hits anywhere in the section."""
    for pattern in variants:
        matches = list(pattern.finditer(section))
        if matches:
            return matches
    return []


def _pair_stops(dates: list[str], locations: list[tuple[str, str]]) -> list[ItineraryStop]:
    """Zip dates with locations by index.

    Extra dates reuse the last known location. Extra locations have no date
    to pair with and become undated stops.
    """
    stops: list[ItineraryStop] = []
    for i in range(max(len(dates), len(locations))):
        stop_date = normalize_date(dates[i]) if i < len(dates) else None
        if i < len(locations):
            city, state = locations[i]
        elif locations:
            city, state = locations[-1]
        else:
            city, state = None, None

        if city or stop_date:
            stops.append(ItineraryStop(date=stop_date, city=city, state=state))
    return stops


def extract_from_general_text(text: str) -> list[ItineraryStop]:
    """Scan the whole document for travel-keyword city/state mentions."""
    seen: set[tuple[str, str]] = set()
    stops: list[ItineraryStop] = []
    for pattern in TRAVEL_LOCATION_PATTERNS:
        for m in pattern.finditer(text):
            key = (m.group(1).strip(), m.group(2).strip())
            if key in seen:
                continue
            seen.add(key)
            stops.append(ItineraryStop(city=key[0], state=key[1]))
    return stops


def extract_itinerary(text: str) -> list[ItineraryStop]:
    if not text:
        return []

    section = find_itinerary_section(text)
    if section is None:
        stops = extract_from_general_text(text)
        logger.debug(f"No itinerary section; {len(stops)} locations found in free text")
        return stops

    dates = [m.group(1) for m in _first_variant(section, ITINERARY_DATE_VARIANTS)]
    locations = [
        (m.group(1).strip(), m.group(2).strip())
        for m in _first_variant(section, ITINERARY_LOCATION_VARIANTS)
    ]
    return _pair_stops(dates, locations)
