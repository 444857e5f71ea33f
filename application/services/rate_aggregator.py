import asyncio
import logging
import time
from collections.abc import Callable, Mapping
from datetime import datetime
from decimal import Decimal, InvalidOperation

from application.services.currency_service import CurrencyService
from domain.models.currency import RateQuote, ReconciledRate, round_rate
from infrastructure.providers.base import ExchangeRateProvider
from utils.time import utc_now

logger = logging.getLogger(__name__)

AggregatedRates = dict[str, dict[str, ReconciledRate]]


def _as_positive_decimal(value) -> Decimal | None:
    try:
        rate = value if isinstance(value, Decimal) else Decimal(str(value))
        if not rate.is_finite():
            return None
        # History and cache both receive this rounded value.
        rate = round_rate(rate)
    except (InvalidOperation, TypeError, ValueError):
        return None
    if rate <= 0:
        return None
    return rate


class RateAggregator:
    """Reconciles the quotes of several unreliable providers into one rate per pair.

    The winning rate for a pair is the highest quote; on a tie the first quote
    observed (provider order, then base order) is kept.
    """

    def __init__(
        self,
        providers: list[ExchangeRateProvider],
        currency_service: CurrencyService,
        max_workers: int = 5,
        fetch_timeout: float = 10.0,
        clock: Callable[[], datetime] = utc_now,
    ):
        if max_workers < 1:
            raise ValueError("max_workers must be at least 1")

        self.providers = providers
        self.currency_service = currency_service
        self.max_workers = max_workers
        self.fetch_timeout = fetch_timeout
        self.clock = clock

    async def aggregate(self) -> AggregatedRates:
        """
        Run one aggregation pass:
        1. Read the registered currencies (nothing to do when there are none)
        2. Keep the providers reporting themselves available
        3. Fetch all target rates for every (provider, base) pair, at most
           ``max_workers`` calls in flight
        4. Drop unregistered targets and keep the maximum quote per pair
        """
        start_time = time.time()

        registered = await self.currency_service.get_supported_currencies()
        if not registered:
            logger.warning("No currencies registered. Cannot fetch exchange rates.")
            return {}

        providers = await self._available_providers()
        logger.info(
            f"Aggregating rates for {len(registered)} currencies from "
            f"{len(providers)}/{len(self.providers)} available providers"
        )
        if not providers:
            return {}

        semaphore = asyncio.Semaphore(self.max_workers)
        tasks = [
            self._fetch_quotes(semaphore, provider, base)
            for provider in providers
            for base in registered
        ]
        results = await asyncio.gather(*tasks)

        quotes = [quote for provider_quotes in results for quote in provider_quotes]
        reconciled = self._reconcile(quotes, set(registered), self.clock())

        logger.info(
            f"Aggregated best rates for {len(reconciled)} base currencies with total "
            f"{sum(len(targets) for targets in reconciled.values())} currency pairs "
            f"in {(time.time() - start_time) * 1000:.0f}ms"
        )
        return reconciled

    async def available_provider_count(self) -> int:
        return len(await self._available_providers())

    async def _available_providers(self) -> list[ExchangeRateProvider]:
        checks = await asyncio.gather(*(self._check_available(p) for p in self.providers))
        return [provider for provider, available in zip(self.providers, checks, strict=True) if available]

    async def _check_available(self, provider: ExchangeRateProvider) -> bool:
        try:
            return bool(await asyncio.wait_for(provider.is_available(), self.fetch_timeout))
        except TimeoutError:
            logger.warning(f"Availability check timed out for {provider.name}, skipping this cycle")
        except Exception as e:
            logger.warning(f"Availability check failed for {provider.name}, skipping this cycle: {e}")
        return False

    async def _fetch_quotes(
        self, semaphore: asyncio.Semaphore, provider: ExchangeRateProvider, base: str
    ) -> list[RateQuote]:
        async with semaphore:
            try:
                rates = await asyncio.wait_for(provider.fetch_latest_rates(base), self.fetch_timeout)
            except TimeoutError:
                logger.error(f"Timed out after {self.fetch_timeout}s fetching rates from {provider.name} for {base}")
                return []
            except Exception as e:
                logger.error(f"Error fetching rates from {provider.name} for {base}: {e}")
                return []

        if not isinstance(rates, Mapping):
            logger.error(f"{provider.name} returned {type(rates).__name__} instead of a rate mapping for {base}")
            return []

        logger.debug(f"Fetched {len(rates)} rates from {provider.name} for {base}")
        quotes = []
        for target, value in rates.items():
            rate = _as_positive_decimal(value)
            if rate is None:
                logger.debug(f"Skipping invalid rate from {provider.name} for {base}->{target}: {value!r}")
                continue
            quotes.append(
                RateQuote(base=base, target=str(target).strip().upper(), rate=rate, provider=provider.name)
            )
        return quotes

    def _reconcile(self, quotes: list[RateQuote], registered: set[str], timestamp: datetime) -> AggregatedRates:
        winners: dict[str, dict[str, RateQuote]] = {}
        for quote in quotes:
            if quote.target not in registered:
                logger.debug(f"Skipping unsupported currency: {quote.target}")
                continue
            if quote.target == quote.base:
                continue

            by_target = winners.setdefault(quote.base, {})
            current = by_target.get(quote.target)
            if current is None or quote.rate > current.rate:
                by_target[quote.target] = quote

        return {
            base: {
                target: ReconciledRate(base=base, target=target, rate=quote.rate, timestamp=timestamp)
                for target, quote in targets.items()
            }
            for base, targets in winners.items()
        }
