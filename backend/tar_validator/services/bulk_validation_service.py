"""Bulk validation — CSV cost-line export grouped by TAR ID and validated in order."""

import csv
import io
import logging
import re

from tar_validator.services.date_utils import parse_date, trip_duration
from tar_validator.services.tar_validation_service import TarValidationService

logger = logging.getLogger(__name__)

COL_TAR_ID = "TAR ID"
COL_DEPARTURE = "Departure Date"
COL_SUBMITTED = "Date Submitted"
COL_RETURN = "Return Date"
COL_DESTINATION = "Destination (City, State, Country)"
COL_PURPOSE = "Travel Purpose"
COL_COMMENTS = "Comments"
COL_ACTUAL = "Total Actual Cost"
COL_ESTIMATE = "Total Travel Estimate"
COL_COST_VALUE = "Cost Type Value"
COL_TRAVELER = "Traveler"
COL_CREATOR = "Creator"
COL_PHONE = ("Contact Number", "Phone", "POC Phone")

_NON_NUMERIC = re.compile(r"[^0-9.]")


def to_number(value) -> float:
    """Loose spreadsheet number: strips everything but digits and dots, 0 if empty."""
    if value is None:
        return 0.0
    cleaned = _NON_NUMERIC.sub("", str(value))
    try:
        return float(cleaned)
    except ValueError:
        return 0.0


def read_csv(text: str) -> list[dict]:
    reader = csv.DictReader(io.StringIO(text.lstrip("\ufeff")))
    rows = []
    for row in reader:
        if not any((v or "").strip() for v in row.values() if isinstance(v, str)):
            continue
        rows.append({(k or "").strip(): (v or "").strip() if isinstance(v, str) else "" for k, v in row.items()})
    return rows


def group_by_tar_id(rows: list[dict]) -> dict[str, list[dict]]:
    """Rows grouped by TAR ID in first-seen order; rows without an ID are skipped."""
    groups: dict[str, list[dict]] = {}
    for row in rows:
        tar_id = row.get(COL_TAR_ID, "")
        if tar_id:
            groups.setdefault(tar_id, []).append(row)
    return groups


def _first_nonblank(rows: list[dict], column: str) -> str:
    return next((r[column] for r in rows if r.get(column, "").strip()), "")


def aggregate_rows(rows: list[dict]) -> dict:
    """Collapse the cost lines of one TAR into a single record.

    Earliest departure (or submission) date is the start, latest return date
    the end. Destination and purpose come from the first row that has one.
    The total is the first non-zero explicit total, else the sum of the
    itemized cost values.
    """
    agg = dict(rows[0])

    starts = [d for d in (parse_date(r.get(COL_DEPARTURE) or r.get(COL_SUBMITTED)) for r in rows) if d]
    ends = [d for d in (parse_date(r.get(COL_RETURN)) for r in rows) if d]
    if starts:
        agg[COL_DEPARTURE] = min(starts).isoformat()
    if ends:
        agg[COL_RETURN] = max(ends).isoformat()

    destination = _first_nonblank(rows, COL_DESTINATION)
    if destination:
        agg[COL_DESTINATION] = destination
    agg[COL_PURPOSE] = _first_nonblank(rows, COL_PURPOSE) or _first_nonblank(rows, COL_COMMENTS)

    explicit = next((to_number(r.get(COL_ACTUAL)) for r in rows if to_number(r.get(COL_ACTUAL))), 0.0)
    itemized = sum(to_number(r.get(COL_COST_VALUE)) for r in rows)
    agg[COL_ACTUAL] = explicit or itemized

    estimate = next((to_number(r.get(COL_ESTIMATE)) for r in rows if to_number(r.get(COL_ESTIMATE))), 0.0)
    agg[COL_ESTIMATE] = estimate
    return agg


def split_destination(destination: str) -> tuple[str, str]:
    parts = [p.strip() for p in (destination or "").split(",")]
    city = parts[0] if parts else ""
    state = parts[1][:2].upper() if len(parts) > 1 else ""
    return city, state


def map_record(record: dict, default_contact_number: str | None = None) -> dict:
    city, state = split_destination(record.get(COL_DESTINATION, ""))
    start = parse_date(record.get(COL_DEPARTURE))
    end = parse_date(record.get(COL_RETURN))

    total = to_number(record.get(COL_ACTUAL)) or to_number(record.get(COL_ESTIMATE))
    estimated = to_number(record.get(COL_ESTIMATE)) or total
    phone = next((record[c] for c in COL_PHONE if record.get(c)), None) or default_contact_number

    return {
        "traveler": record.get(COL_TRAVELER) or record.get(COL_CREATOR) or "",
        "city": city,
        "state": state,
        "tripStartDate": start.isoformat() if start else "",
        "tripEndDate": end.isoformat() if end else "",
        "duration": trip_duration(start, end),
        "totalCost": total,
        "estimatedCost": estimated,
        "purpose": record.get(COL_PURPOSE) or record.get(COL_COMMENTS) or "",
        "poc": record.get(COL_CREATOR) or "",
        "contactNumber": phone,
        "dutyStation": f"{city}, {state}" if city and state else "",
        "tarId": record.get(COL_TAR_ID, ""),
        "tarTitle": record.get("TAR Title", ""),
        "contractId": record.get("Contract Specific ID", ""),
    }


class BulkValidationService:
    def __init__(self, validator: TarValidationService, default_contact_number: str | None = None):
        self.validator = validator
        self.default_contact_number = default_contact_number

    def validate_csv(self, text: str) -> list[dict]:
        """Validate every TAR in the export, one at a time, in input order."""
        groups = group_by_tar_id(read_csv(text))
        logger.info(f"Bulk validation: {len(groups)} unique TAR IDs")

        results = []
        for tar_id, rows in groups.items():
            tar_data = map_record(aggregate_rows(rows), self.default_contact_number)
            result = self.validator.validate(tar_data)
            results.append({"tarId": tar_id, "result": result.to_dict()})
        return results
