"""Report generator — variance, tolerance checks and recommendations."""

from dataclasses import dataclass, field
from datetime import datetime, timezone

from tar_validator.config import ValidationConfig
from tar_validator.services.cost_calculator import ExpectedCosts


@dataclass
class ValidationReport:
    timestamp: str
    traveler: str
    authorization_number: str
    extracted_data: dict
    expected_costs: ExpectedCosts
    claimed_cost: float
    variance: float
    variance_percent: float
    is_within_buffer: bool
    is_within_deviation: bool
    recommendations: list[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return self.is_within_buffer and self.is_within_deviation

    def to_dict(self) -> dict:
        return {
            "timestamp": self.timestamp,
            "traveler": self.traveler,
            "authorizationNumber": self.authorization_number,
            "validation": {
                "extractedData": self.extracted_data,
                "expectedCosts": self.expected_costs.to_dict(),
                "claimedCost": self.claimed_cost,
                "variance": self.variance,
                "variancePercent": self.variance_percent,
                "isWithinBuffer": self.is_within_buffer,
                "isWithinDeviation": self.is_within_deviation,
            },
            "recommendations": list(self.recommendations),
        }


class ReportGenerator:
    def __init__(self, config: ValidationConfig | None = None):
        self.config = config or ValidationConfig()

    def generate(self, data: dict, expected: ExpectedCosts, claimed_cost: float) -> ValidationReport:
        total = expected.total_expected
        variance = round(claimed_cost - total, 2)
        variance_percent = round(variance / total * 100, 2) if total else 0.0

        within_buffer = abs(variance) <= self.config.cost_buffer
        within_deviation = abs(variance_percent) <= self.config.max_deviation_percent

        recommendations = []
        if not within_buffer:
            recommendations.append("Claimed cost exceeds expected amount by more than acceptable buffer")
        if not within_deviation:
            recommendations.append(
                f"Variance of {variance_percent:.2f}% exceeds maximum acceptable deviation"
            )
        if not expected.breakdown:
            recommendations.append("No itinerary data found - manual review required")

        return ValidationReport(
            timestamp=datetime.now(timezone.utc).isoformat(),
            traveler=data.get("travelerName") or "Unknown",
            authorization_number=data.get("authorizationNumber") or "N/A",
            extracted_data=data,
            expected_costs=expected,
            claimed_cost=round(claimed_cost, 2),
            variance=variance,
            variance_percent=variance_percent,
            is_within_buffer=within_buffer,
            is_within_deviation=within_deviation,
            recommendations=recommendations,
        )
