import logging
from decimal import Decimal

from infrastructure.cache.redis_cache import RateCache
from infrastructure.persistence.repositories.rate import RateRepository

logger = logging.getLogger(__name__)


class RateRetrievalService:
    """Read path: cache first, durable history on a miss, then write-back.

    The cache holds one hash per base currency and ``get_all_rates`` trusts a
    non-empty hash as the full map, so every write-back stores the latest rate
    of every target for that base, never a single pair.
    """

    def __init__(self, cache: RateCache, rate_repository: RateRepository):
        self.cache = cache
        self.rate_repository = rate_repository

    async def get_rate(self, base: str, target: str) -> Decimal | None:
        cached = await self.cache.get(base, target)
        if cached is not None:
            logger.debug(f"Rate found in cache: {base} -> {target}")
            return cached

        logger.debug(f"Rate not in cache, querying database: {base} -> {target}")
        latest = await self.rate_repository.find_latest(base, target)
        if latest is None:
            return None

        logger.info(f"Rate retrieved from database: {base} -> {target} = {latest.rate}")
        await self._repopulate(base)
        return latest.rate

    async def get_all_rates(self, base: str) -> dict[str, Decimal]:
        cached = await self.cache.get_all(base)
        if cached:
            logger.debug(f"Rates found in cache for base currency: {base}")
            return cached

        rates = await self._repopulate(base)
        if rates:
            logger.info(f"Retrieved {len(rates)} rates from database for base currency {base}")
        return rates

    async def _repopulate(self, base: str) -> dict[str, Decimal]:
        latest = await self.rate_repository.find_latest_for_base(base)
        rates = {rate.target: rate.rate for rate in latest}
        if rates:
            await self.cache.store(base, rates)
        return rates
