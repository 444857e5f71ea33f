import calendar
import re
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum

from domain.exceptions.currency import InvalidPeriodError

PERIOD_PATTERN = re.compile(r"^(\d+)([HDMY])$", re.IGNORECASE)
DEFAULT_MIN_HOURS = 12


class PeriodUnit(Enum):
    HOUR = "H"
    DAY = "D"
    MONTH = "M"
    YEAR = "Y"

    @property
    def label(self) -> str:
        return {
            PeriodUnit.HOUR: "hour",
            PeriodUnit.DAY: "day",
            PeriodUnit.MONTH: "month",
            PeriodUnit.YEAR: "year",
        }[self]


def _minus_months(moment: datetime, months: int) -> datetime:
    # Clamp to the last valid day, e.g. 31 March minus one month is end of February.
    month_index = moment.year * 12 + (moment.month - 1) - months
    year, month = divmod(month_index, 12)
    month += 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


@dataclass(frozen=True)
class PeriodSpec:
    amount: int
    unit: PeriodUnit

    def subtract_from(self, end: datetime) -> datetime:
        """Start of the window that ends at ``end``.

        Hours and days are fixed durations; months and years follow the calendar.
        """
        try:
            if self.unit is PeriodUnit.HOUR:
                return end - timedelta(hours=self.amount)
            if self.unit is PeriodUnit.DAY:
                return end - timedelta(days=self.amount)
            if self.unit is PeriodUnit.MONTH:
                return _minus_months(end, self.amount)
            return _minus_months(end, self.amount * 12)
        except (ValueError, OverflowError) as e:
            raise InvalidPeriodError(str(self), f"Period {self} starts before the earliest supported date") from e

    def describe(self) -> str:
        suffix = "" if self.amount == 1 else "s"
        return f"{self.amount} {self.unit.label}{suffix}"

    def __str__(self) -> str:
        return f"{self.amount}{self.unit.value}"


def parse_period(period: str | None, min_hours: int = DEFAULT_MIN_HOURS) -> PeriodSpec:
    """Parse strings such as ``12H``, ``7D``, ``3M`` or ``1Y``.

    Raises:
        InvalidPeriodError: on malformed input, a zero amount, or an hour
            period shorter than ``min_hours``. ``subtract_from`` raises it
            too when the window would start before the earliest ``datetime``.
    """
    if period is None or not period.strip():
        raise InvalidPeriodError(period, "Period cannot be null or empty")

    match = PERIOD_PATTERN.match(period.strip())
    if not match:
        raise InvalidPeriodError(period)

    try:
        amount = int(match.group(1))
    except ValueError as e:
        raise InvalidPeriodError(period, "Period amount is too large") from e
    unit = PeriodUnit(match.group(2).upper())

    if amount <= 0:
        raise InvalidPeriodError(period, f"Period amount must be positive. Got: {amount}")

    if unit is PeriodUnit.HOUR and amount < min_hours:
        raise InvalidPeriodError(
            period,
            f"Period in hours must be at least {min_hours}. Use format: {min_hours}H, 10D, 3M, or 1Y",
        )

    return PeriodSpec(amount=amount, unit=unit)
