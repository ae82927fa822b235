"""Expense policy checks — itemized TAR expenses against configured limits."""

from dataclasses import asdict, dataclass

from tar_validator.config import ExpenseLimits

# Itemized amounts summed into the calculated total
ITEMIZED_FIELDS = (
    "airRail",
    "airfare",
    "rentalCar",
    "transportation",
    "parking",
    "conferenceFee",
    "miscellaneous",
    "lodging",
    "perDiem",
)


@dataclass
class ExpenseCheck:
    field: str
    level: str  # success | warning | error
    message: str

    def to_dict(self) -> dict:
        return asdict(self)


def _amount(data: dict, name: str) -> float:
    value = data.get(name)
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        return float(str(value).replace(",", "").replace("$", "").strip() or 0)
    except ValueError:
        return 0.0


def _check_rental_car(value: float, duration: int, limits: ExpenseLimits) -> ExpenseCheck:
    daily = value / duration if duration > 0 else value
    if daily > limits.car_rental_max_daily:
        return ExpenseCheck(
            "rentalCar", "error",
            f"Daily rate ({daily:.2f}) exceeds maximum ({limits.car_rental_max_daily:g})",
        )
    if value > limits.car_rental_justification_threshold:
        return ExpenseCheck(
            "rentalCar", "warning",
            f"Total cost requires business justification (>{limits.car_rental_justification_threshold:g})",
        )
    return ExpenseCheck("rentalCar", "success", f"Car rental cost is within policy limits ({daily:.2f}/day)")


def _check_parking(value: float, duration: int, limits: ExpenseLimits) -> ExpenseCheck:
    daily = value / duration if duration > 0 else value
    if daily > limits.parking_max_daily:
        return ExpenseCheck(
            "parking", "warning",
            f"Daily parking ({daily:.2f}) exceeds recommended limit ({limits.parking_max_daily:g})",
        )
    return ExpenseCheck("parking", "success", f"Parking cost is within guidelines ({daily:.2f}/day)")


def _check_conference(value: float, limits: ExpenseLimits) -> ExpenseCheck:
    if value > limits.conference_fee_max:
        return ExpenseCheck(
            "conferenceFee", "error",
            f"Conference fee exceeds maximum allowed ({limits.conference_fee_max:g})",
        )
    if value > limits.conference_justification_threshold:
        return ExpenseCheck(
            "conferenceFee", "warning",
            f"Pre-approval required for fees >{limits.conference_justification_threshold:g}",
        )
    return ExpenseCheck("conferenceFee", "success", "Conference fee is within policy limits")


def _check_miscellaneous(value: float, limits: ExpenseLimits) -> ExpenseCheck:
    if value > limits.misc_justification_threshold:
        return ExpenseCheck(
            "miscellaneous", "warning",
            f"Detailed receipts required for misc expenses >{limits.misc_justification_threshold:g}",
        )
    return ExpenseCheck("miscellaneous", "success", "Miscellaneous expense is within policy limits")


def _check_total(claimed: float, calculated: float, limits: ExpenseLimits) -> ExpenseCheck:
    variance = claimed - calculated
    ratio = abs(variance) / calculated if calculated > 0 else 0.0
    if variance == 0:
        return ExpenseCheck("totalCost", "success", "Claimed total matches itemized total")
    detail = f"Claimed total differs by {variance:.2f} ({ratio * 100:.1f}%)"
    if ratio <= limits.total_variance_threshold:
        return ExpenseCheck("totalCost", "warning", f"{detail}, within acceptable variance")
    return ExpenseCheck("totalCost", "error", f"{detail}, exceeds acceptable variance")


def check_expense_limits(data: dict, duration: int = 1, limits: ExpenseLimits | None = None) -> list[ExpenseCheck]:
    """Check each itemized expense present in ``data``.

    Zero or absent amounts are skipped. The claimed-vs-itemized comparison
    runs only when a claimed total and at least one itemized amount exist.
    """
    limits = limits or ExpenseLimits()
    duration = max(1, int(duration or 1))
    checks: list[ExpenseCheck] = []

    rental = _amount(data, "rentalCar")
    if rental:
        checks.append(_check_rental_car(rental, duration, limits))

    parking = _amount(data, "parking")
    if parking:
        checks.append(_check_parking(parking, duration, limits))

    conference = _amount(data, "conferenceFee")
    if conference:
        checks.append(_check_conference(conference, limits))

    misc = _amount(data, "miscellaneous")
    if misc:
        checks.append(_check_miscellaneous(misc, limits))

    calculated = sum(_amount(data, name) for name in ITEMIZED_FIELDS)
    claimed = _amount(data, "totalCost")
    if claimed and calculated:
        checks.append(_check_total(claimed, calculated, limits))

    return checks
