"""Validation log model — one audit row per completed TAR validation."""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import DateTime, Integer, Numeric, String, func
from sqlalchemy.orm import Mapped, mapped_column

from tar_validator.database import Base


class ValidationLogEntry(Base):
    __tablename__ = "validation_logs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    timestamp: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    traveler: Mapped[str] = mapped_column(String(200), nullable=False)
    auth_number: Mapped[str] = mapped_column(String(100), nullable=False)
    expected_cost: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    claimed_cost: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    variance: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    variance_percent: Mapped[Decimal] = mapped_column(Numeric(8, 2), nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False)  # APPROVED | NEEDS REVIEW
