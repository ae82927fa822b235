"""Validation log service — append-only audit trail of validation results."""

import csv
import io
import logging
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import Engine, delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from tar_validator.models.validation_log import ValidationLogEntry
from tar_validator.services.report_generator import ValidationReport

logger = logging.getLogger(__name__)

CSV_HEADER = [
    "Timestamp",
    "Traveler",
    "Auth Number",
    "Expected Cost",
    "Claimed Cost",
    "Variance",
    "Variance %",
    "Status",
]

STATUS_APPROVED = "APPROVED"
STATUS_NEEDS_REVIEW = "NEEDS REVIEW"


def _parse_timestamp(value: str) -> datetime:
    try:
        return datetime.fromisoformat(value)
    except (TypeError, ValueError):
        return datetime.now(timezone.utc)


class ValidationLogService:
    """Writes one row per completed validation; the table is created on first use."""

    def __init__(self, engine: Engine, session_factory: sessionmaker | None = None):
        self.engine = engine
        self.session_factory = session_factory or sessionmaker(engine, class_=Session, expire_on_commit=False)
        self._table_ready = False

    def _ensure_table(self):
        if not self._table_ready:
            ValidationLogEntry.__table__.create(self.engine, checkfirst=True)
            self._table_ready = True

    def record(self, report: ValidationReport) -> ValidationLogEntry | None:
        """Append a row for ``report``. Storage errors are logged, not raised."""
        entry = ValidationLogEntry(
            timestamp=_parse_timestamp(report.timestamp),
            traveler=str(report.traveler)[:200],
            auth_number=str(report.authorization_number)[:100],
            expected_cost=Decimal(str(round(report.expected_costs.total_expected, 2))),
            claimed_cost=Decimal(str(report.claimed_cost)),
            variance=Decimal(str(report.variance)),
            variance_percent=Decimal(str(report.variance_percent)),
            status=STATUS_APPROVED if report.is_valid else STATUS_NEEDS_REVIEW,
        )
        try:
            self._ensure_table()
            with self.session_factory() as session:
                session.add(entry)
                session.commit()
        except SQLAlchemyError as e:
            logger.warning(f"Failed to log validation results: {e}")
            return None
        return entry

    def list_entries(self) -> list[ValidationLogEntry]:
        self._ensure_table()
        with self.session_factory() as session:
            result = session.execute(select(ValidationLogEntry).order_by(ValidationLogEntry.id))
            return list(result.scalars().all())

    def export_rows(self) -> list[dict]:
        return [
            {
                "Timestamp": e.timestamp.isoformat() if e.timestamp else "",
                "Traveler": e.traveler,
                "Auth Number": e.auth_number,
                "Expected Cost": float(e.expected_cost),
                "Claimed Cost": float(e.claimed_cost),
                "Variance": float(e.variance),
                "Variance %": float(e.variance_percent),
                "Status": e.status,
            }
            for e in self.list_entries()
        ]

    def export_csv(self) -> str:
        output = io.StringIO()
        writer = csv.DictWriter(output, fieldnames=CSV_HEADER)
        writer.writeheader()
        writer.writerows(self.export_rows())
        return output.getvalue()

    def clear(self) -> int:
        self._ensure_table()
        with self.session_factory() as session:
            result = session.execute(delete(ValidationLogEntry))
            session.commit()
            count = result.rowcount or 0
        logger.info(f"Cleared {count} validation log entries")
        return count
