"""Cost calculator — expected trip cost from per diem rates."""

import logging
from dataclasses import asdict, dataclass, field
from datetime import date

from tar_validator.config import RateConfig
from tar_validator.services.itinerary_extractor import UNKNOWN_LOCATION, ItineraryStop
from tar_validator.services.rate_client import PerDiemRateClient, RateEntry

logger = logging.getLogger(__name__)


def _label(city: str | None, state: str | None) -> str:
    return f"{city or UNKNOWN_LOCATION}, {state or UNKNOWN_LOCATION}"


@dataclass
class CostBreakdownItem:
    location: str
    date: str
    mie: float
    lodging: float
    total: float

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class ExpectedCosts:
    total_expected: float = 0.0
    breakdown: list[CostBreakdownItem] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "totalExpected": round(self.total_expected, 2),
            "breakdown": [item.to_dict() for item in self.breakdown],
        }


class CostCalculator:
    """Turns an itinerary, or a destination plus duration, into expected costs.

    Rates are cached per run by (city, state, year) so repeated stops in a
    round trip cost one lookup.
    """

    def __init__(self, rate_client: PerDiemRateClient, config: RateConfig | None = None):
        self.rate_client = rate_client
        self.config = config or rate_client.config

    def _daily_rates(
        self,
        city: str | None,
        state: str | None,
        cache: dict[tuple, RateEntry | None],
        warnings: list[str],
    ) -> tuple[float, float]:
        key = (
            self.rate_client.sanitize_city(city).lower(),
            self.rate_client.normalize_state(state),
            self.config.year,
        )
        if key not in cache:
            cache[key] = self.rate_client.fetch_rate(city, state, self.config.year)

        meals, lodging, using_defaults = self.rate_client.daily_rates(cache[key])
        if using_defaults:
            message = f"Unable to fetch per diem rates for {_label(city, state)} - using default values"
            if message not in warnings:
                warnings.append(message)
        return meals, lodging

    def from_itinerary(
        self,
        itinerary: list[ItineraryStop],
        default_city: str | None = None,
        default_state: str | None = None,
    ) -> ExpectedCosts:
        """Cost each stop for one day. Stops without a city take the default destination."""
        costs = ExpectedCosts()
        cache: dict[tuple, RateEntry | None] = {}

        for stop in itinerary:
            city, state = (stop.city, stop.state) if stop.city else (default_city, default_state)
            meals, lodging = self._daily_rates(city, state, cache, costs.warnings)
            daily_total = meals + lodging
            costs.total_expected += daily_total
            costs.breakdown.append(CostBreakdownItem(
                location=_label(city, state),
                date=stop.date or "",
                mie=meals,
                lodging=round(lodging, 2),
                total=round(daily_total, 2),
            ))

        logger.debug(f"Itinerary mode: {len(itinerary)} stops, {len(cache)} lookups")
        return costs

    def from_destination(
        self,
        city: str | None,
        state: str | None,
        duration: int,
        trip_date: str | None = None,
    ) -> ExpectedCosts:
        costs = ExpectedCosts()
        meals, lodging = self._daily_rates(city, state, {}, costs.warnings)
        daily_total = meals + lodging
        days = max(1, int(duration or 1))

        costs.total_expected = daily_total * days
        costs.breakdown.append(CostBreakdownItem(
            location=_label(city, state),
            date=trip_date or date.today().isoformat(),
            mie=meals,
            lodging=round(lodging, 2),
            total=round(daily_total, 2),
        ))
        return costs

    def calculate(
        self,
        itinerary: list[ItineraryStop] | None,
        city: str | None = None,
        state: str | None = None,
        duration: int = 1,
        trip_date: str | None = None,
    ) -> ExpectedCosts:
        if itinerary:
            return self.from_itinerary(itinerary, city, state)
        return self.from_destination(city, state, duration, trip_date)
