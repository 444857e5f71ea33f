import re
from dataclasses import dataclass
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal

from domain.exceptions.currency import InvalidCurrencyError

AGGREGATED_PROVIDER = "aggregated"

# Decimal places kept by the rate history; cached rates use the same precision.
RATE_SCALE = 8
RATE_QUANTUM = Decimal(1).scaleb(-RATE_SCALE)

CURRENCY_CODE_PATTERN = re.compile(r"^[A-Z]{3}$")


def normalize_currency_code(code: str) -> str:
    """Upper-case and validate a 3-letter ISO 4217 code."""
    normalized = (code or "").strip().upper()
    if not CURRENCY_CODE_PATTERN.match(normalized):
        raise InvalidCurrencyError(
            f"Invalid currency code: '{code}'. Must be 3 letters (e.g., USD, EUR, GBP)"
        )
    return normalized


def round_rate(rate: Decimal) -> Decimal:
    """Round a finite rate half-up to at most ``RATE_SCALE`` decimal places."""
    if rate.as_tuple().exponent >= -RATE_SCALE:
        return rate
    return rate.quantize(RATE_QUANTUM, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class SupportedCurrency:
    code: str
    name: str | None


@dataclass(frozen=True)
class RateQuote:
    base: str
    target: str
    rate: Decimal
    provider: str


@dataclass(frozen=True)
class ReconciledRate:
    base: str
    target: str
    rate: Decimal
    timestamp: datetime
    provider: str = AGGREGATED_PROVIDER

    def __post_init__(self):
        if self.rate <= 0:
            raise ValueError(f"Rate for {self.base}->{self.target} must be positive, got {self.rate}")


@dataclass(frozen=True)
class TrendResult:
    base: str
    target: str
    period: str
    percentage: Decimal
    oldest_rate: Decimal
    newest_rate: Decimal
    data_points: int
    start: datetime
    end: datetime
    description: str
