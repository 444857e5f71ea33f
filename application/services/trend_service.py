import logging
from collections.abc import Callable
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal

from domain.exceptions.currency import InsufficientDataError
from domain.models.currency import TrendResult
from domain.models.period import DEFAULT_MIN_HOURS, PeriodSpec, parse_period
from infrastructure.persistence.repositories.rate import RateRepository
from utils.time import utc_now

logger = logging.getLogger(__name__)

HUNDRED = Decimal("100")
TWO_PLACES = Decimal("0.01")


def describe_trend(base: str, target: str, period: PeriodSpec, percentage: Decimal) -> str:
    direction = "appreciated" if percentage >= 0 else "depreciated"
    return f"{base} {direction} by {abs(percentage)}% against {target} over the last {period.describe()}"


class TrendAnalyzer:
    def __init__(
        self,
        rate_repository: RateRepository,
        min_hours: int = DEFAULT_MIN_HOURS,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.rate_repository = rate_repository
        self.min_hours = min_hours
        self.clock = clock

    def parse_period(self, period: str) -> PeriodSpec:
        return parse_period(period, min_hours=self.min_hours)

    async def calculate_trend(self, base: str, target: str, period: str) -> TrendResult:
        """
        Percentage change of ``base -> target`` between the oldest and the
        newest stored rate inside the period ending now.

        Raises:
            InvalidPeriodError: malformed period, checked before any query.
            InsufficientDataError: no history inside the window.
        """
        window = self.parse_period(period)
        end = self.clock()
        start = window.subtract_from(end)
        logger.debug(f"Analyzing trend for {base} -> {target} from {start} to {end}")

        rates = await self.rate_repository.find_by_period(base, target, start, end)
        if not rates:
            logger.warning(f"No historical data available for {base} -> {target} in period {window}")
            raise InsufficientDataError(base, target, str(window))

        oldest = min(rates, key=lambda r: r.timestamp)
        newest = max(rates, key=lambda r: r.timestamp)

        percentage = ((newest.rate - oldest.rate) / oldest.rate * HUNDRED).quantize(
            TWO_PLACES, rounding=ROUND_HALF_UP
        )

        logger.info(
            f"Trend for {base} -> {target} over {window}: {percentage}% "
            f"(from {oldest.rate} to {newest.rate} using {len(rates)} data points)"
        )
        return TrendResult(
            base=base,
            target=target,
            period=str(window),
            percentage=percentage,
            oldest_rate=oldest.rate,
            newest_rate=newest.rate,
            data_points=len(rates),
            start=start,
            end=end,
            description=describe_trend(base, target, window, percentage),
        )
