"""Per diem rate client — GSA rate lookup with default fallback."""

import logging
import math
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from urllib.parse import quote

import httpx

from tar_validator.config import RateConfig
from tar_validator.exceptions import LookupUnavailable

logger = logging.getLogger(__name__)

MONTHS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")

_CITY_PUNCTUATION = re.compile(r"[.'\-]")
_RANGE = re.compile(r"^\s*(-?\d+(?:\.\d+)?)\s*-\s*(-?\d+(?:\.\d+)?)\s*$")


def _to_number(value) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        raw = str(value).replace("$", "").replace(",", "").strip()
        m = _RANGE.match(raw)
        if m:
            number = (float(m.group(1)) + float(m.group(2))) / 2
        else:
            try:
                number = float(raw)
            except ValueError:
                return None
    return number if math.isfinite(number) else None


def average_lodging(values) -> float:
    """Mean of monthly lodging values; "low-high" ranges count as their midpoint.

    Unparseable entries are skipped. No valid entries gives 0.
    """
    numbers = [n for n in (_to_number(v) for v in values or []) if n is not None]
    if not numbers:
        return 0.0
    return sum(numbers) / len(numbers)


@dataclass
class RateEntry:
    """Per diem rate for one location: M&IE plus monthly lodging."""
    meals: float | None = None
    monthly_lodging: dict[str, object] = field(default_factory=dict)

    @property
    def average_lodging(self) -> float:
        return average_lodging([self.monthly_lodging.get(m) for m in MONTHS])

    @classmethod
    def from_raw(cls, raw: dict) -> "RateEntry":
        """Build from the flat rate object ({"Meals": "79", "Jan": "250", ...})."""
        return cls(
            meals=_to_number(raw.get("Meals")),
            monthly_lodging={m: raw.get(m) for m in MONTHS if m in raw},
        )


class RateSource(ABC):
    """Where per diem rate objects come from."""

    @abstractmethod
    def fetch(self, city: str, state: str, year: str) -> dict:
        """Return a flat rate object or raise LookupUnavailable."""


def flatten_gsa_response(payload) -> dict | None:
    """Normalize a GSA response to the flat {Meals, Jan..Dec} rate object.

    Accepts a list of flat rate objects or the nested v2 shape
    {"rates": [{"rate": [{"meals": ..., "months": {"month": [...]}}]}]}.
    """
    if isinstance(payload, list):
        return payload[0] if payload and isinstance(payload[0], dict) else None
    if not isinstance(payload, dict):
        return None
    if "Meals" in payload:
        return payload

    for rates in payload.get("rates") or []:
        for rate in rates.get("rate") or []:
            flat: dict = {"Meals": rate.get("meals")}
            months = (rate.get("months") or {}).get("month") or []
            for month in months:
                short = month.get("short")
                if short in MONTHS:
                    flat[short] = month.get("value")
            return flat
    return None


class GsaRateSource(RateSource):
    """GSA per diem API v2 over a blocking httpx client."""

    def __init__(self, config: RateConfig, client: httpx.Client | None = None):
        self.config = config
        self._client = client

    def _get_client(self) -> httpx.Client:
        if self._client is None:
            self._client = httpx.Client(
                base_url=self.config.base_url,
                timeout=self.config.timeout_seconds,
            )
        return self._client

    def fetch(self, city: str, state: str, year: str) -> dict:
        path = f"/rates/city/{quote(city, safe='')}/state/{quote(state, safe='')}/year/{quote(str(year), safe='')}"
        try:
            resp = self._get_client().get(
                path,
                params={"api_key": self.config.api_key},
                headers={"Accept": "application/json"},
            )
        except httpx.HTTPError as e:
            raise LookupUnavailable(f"GSA request failed for {city}, {state}: {e}") from e

        if resp.status_code != 200:
            raise LookupUnavailable(f"GSA returned {resp.status_code} for {city}, {state}")

        try:
            payload = resp.json()
        except ValueError as e:
            raise LookupUnavailable(f"GSA returned invalid JSON for {city}, {state}") from e

        rate = flatten_gsa_response(payload)
        if not rate:
            raise LookupUnavailable(f"No GSA rate data for {city}, {state}")
        return rate

    def close(self):
        if self._client is not None:
            self._client.close()
            self._client = None


class InMemoryRateSource(RateSource):
    """Fixed rate table keyed by (city, state); for tests and offline use."""

    def __init__(self, rates: dict[tuple[str, str], dict] | None = None):
        self.rates = {(c.lower(), s.upper()): r for (c, s), r in (rates or {}).items()}
        self.calls: list[tuple[str, str, str]] = []

    def fetch(self, city: str, state: str, year: str) -> dict:
        self.calls.append((city, state, year))
        rate = self.rates.get((city.lower(), state.upper()))
        if not rate:
            raise LookupUnavailable(f"No rate data for {city}, {state}")
        return rate


class PerDiemRateClient:
    """Resolves city/state to a RateEntry, treating lookup failures as absent."""

    def __init__(self, source: RateSource, config: RateConfig | None = None):
        self.source = source
        self.config = config or RateConfig()

    @staticmethod
    def sanitize_city(city: str | None) -> str:
        return " ".join(_CITY_PUNCTUATION.sub(" ", city or "").split())

    @staticmethod
    def normalize_state(state: str | None) -> str:
        return (state or "").strip().upper()[:2]

    def fetch_rate(self, city: str | None, state: str | None, year: str | None = None) -> RateEntry | None:
        clean_city = self.sanitize_city(city)
        clean_state = self.normalize_state(state)
        if not clean_city or not clean_state:
            return None

        try:
            raw = self.source.fetch(clean_city, clean_state, year or self.config.year)
        except LookupUnavailable as e:
            logger.warning(f"Per diem lookup unavailable: {e}")
            return None
        return RateEntry.from_raw(raw)

    def daily_rates(self, entry: RateEntry | None) -> tuple[float, float, bool]:
        """(meals, lodging, using_defaults) for a looked-up entry."""
        if entry is None:
            return self.config.default_mie, self.config.default_lodging, True
        return entry.meals or self.config.default_mie, entry.average_lodging, False

    def get_rates(self, city: str, state: str) -> dict:
        entry = self.fetch_rate(city, state)
        meals, lodging, using_defaults = self.daily_rates(entry)

        if using_defaults:
            return {
                "success": False,
                "message": f"No GSA rates found for {city}, {state}",
                "data": {
                    "city": city,
                    "state": state,
                    "meals": meals,
                    "lodging": lodging,
                    "total": meals + lodging,
                    "usingDefaults": True,
                },
            }

        return {
            "success": True,
            "data": {
                "city": city,
                "state": state,
                "meals": meals,
                "lodging": round(lodging, 2),
                "total": round(meals + lodging, 2),
                "monthlyRates": {m: entry.monthly_lodging.get(m) for m in MONTHS},
            },
        }

    def check_connectivity(self, city: str = "Washington", state: str = "DC") -> dict:
        entry = self.fetch_rate(city, state)
        if entry is None:
            return {"success": False, "message": "GSA API test failed - no data returned"}
        logger.info(f"GSA API test successful for {city}, {state}")
        return {
            "success": True,
            "message": "GSA API connectivity confirmed",
            "data": {"meals": entry.meals, "lodging": round(entry.average_lodging, 2)},
        }
