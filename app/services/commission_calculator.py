"""Pure money and time-window arithmetic shared by the dashboard, payout and earnings services.

Nothing here touches the store. Amounts are Decimal throughout so sums reconcile to the cent.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Iterable, Mapping, Optional, Union
from app.models.admin.admin_dashboard_models import Timeframe, TrendDirection

CENTS = Decimal("0.01")
DEFAULT_TIMEFRAME = Timeframe.THIRTY_DAYS

_TIMEFRAME_DAYS = {
    Timeframe.SEVEN_DAYS: 7,
    Timeframe.THIRTY_DAYS: 30,
    Timeframe.NINETY_DAYS: 90,
}

Number = Union[int, float, Decimal]


@dataclass(frozen=True)
class TimeWindow:
    """Half-open interval [start, end)"""

    start: datetime
    end: datetime

    @property
    def duration(self) -> timedelta:
        return self.end - self.start

    def contains(self, instant: datetime) -> bool:
        return self.start <= instant < self.end


# =====================================
# Amount helpers
# =====================================


def to_decimal(value: Any) -> Decimal:
    """Numeric column value -> Decimal (PostgREST sends numerics as JSON numbers or strings, None counts as 0)"""
    if value is None:
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    # go through str so 0.1 stays 0.1 instead of its binary float expansion
    return Decimal(str(value))


def quantize_cents(value: Decimal) -> Decimal:
    return value.quantize(CENTS, rounding=ROUND_HALF_UP)


def net_payout(record: Mapping[str, Any]) -> Decimal:
    """Amount owed to the artisan for one booking: total minus the platform fee"""
    return to_decimal(record.get("total")) - to_decimal(record.get("platform_fee"))


def sum_net_payouts(records: Iterable[Mapping[str, Any]]) -> Decimal:
    return sum((net_payout(record) for record in records), Decimal("0"))


def sum_column(records: Iterable[Mapping[str, Any]], column: str) -> Decimal:
    return sum((to_decimal(record.get(column)) for record in records), Decimal("0"))


def average(values: Iterable[Number]) -> float:
    """Arithmetic mean, 0 for an empty input"""
    values = [float(v) for v in values]
    if not values:
        return 0.0
    return sum(values) / len(values)


# =====================================
# Period-over-period change
# =====================================


def percentage_change(previous: Number, current: Number) -> float:
    """Signed change from previous to current in percent.

    A zero baseline is a policy case, not an error: any growth from nothing counts as +100%,
    and nothing to nothing is 0%.
    """
    previous = to_decimal(previous)
    current = to_decimal(current)

    if previous == 0:
        return 100.0 if current > 0 else 0.0
    return float((current - previous) / previous * 100)


def trend_direction(change: float) -> TrendDirection:
    return TrendDirection.UP if change >= 0 else TrendDirection.DOWN


def format_percent_change(change: float) -> str:
    """Dashboard label: "+50%", "-12%", "0%" """
    rounded = int(Decimal(str(change)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
    prefix = "+" if change > 0 and rounded > 0 else ""
    return f"{prefix}{rounded}%"


def format_money(amount: Number) -> str:
    return f"${quantize_cents(to_decimal(amount))}"


# =====================================
# Time windows
# =====================================


def parse_timeframe(token: Optional[str]) -> Timeframe:
    """Unknown or missing tokens fall back to the 30 day window"""
    try:
        return Timeframe(token)
    except ValueError:
        return DEFAULT_TIMEFRAME


def _one_year_before(instant: datetime) -> datetime:
    try:
        return instant.replace(year=instant.year - 1)
    except ValueError:
        # Feb 29 has no counterpart in the previous year
        return instant.replace(year=instant.year - 1, day=28)


def resolve_timeframe(token: Optional[str], now: datetime) -> TimeWindow:
    """Current window for a timeframe token, ending at now"""
    timeframe = parse_timeframe(token)

    if timeframe == Timeframe.ONE_YEAR:
        start = _one_year_before(now)
    else:
        start = now - timedelta(days=_TIMEFRAME_DAYS[timeframe])

    return TimeWindow(start=start, end=now)


def previous_window(window: TimeWindow) -> TimeWindow:
    """The window of identical length immediately before the given one"""
    return TimeWindow(start=window.start - window.duration, end=window.start)


# =====================================
# Booking amounts
# =====================================


def compute_booking_amounts(hourly_rate: Number, hours: Number, commission_rate: Number, tax_rate: Number = 0) -> dict:
    """Money columns for a new booking.

    total = subtotal + tax and the platform fee is a share of the subtotal, so platform_fee <= total
    as long as the commission rate stays within 0..100.
    """
    commission_rate = to_decimal(commission_rate)
    tax_rate = to_decimal(tax_rate)
    if not Decimal("0") <= commission_rate <= Decimal("100"):
        raise ValueError(f"Commission rate must be between 0 and 100, got {commission_rate}")
    if tax_rate < 0:
        raise ValueError(f"Tax rate must not be negative, got {tax_rate}")

    hourly_rate = to_decimal(hourly_rate)
    subtotal = quantize_cents(hourly_rate * to_decimal(hours))
    platform_fee = quantize_cents(subtotal * commission_rate / 100)
    tax = quantize_cents(subtotal * tax_rate / 100)
    total = subtotal + tax

    return {
        "hourly_rate": quantize_cents(hourly_rate),
        "subtotal": subtotal,
        "platform_fee": platform_fee,
        "tax": tax,
        "total": total,
    }
