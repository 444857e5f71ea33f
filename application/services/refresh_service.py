import logging
import time

from application.services.rate_aggregator import AggregatedRates, RateAggregator
from domain.exceptions.currency import RefreshError
from infrastructure.cache.redis_cache import RateCache
from infrastructure.persistence.repositories.rate import RateRepository

logger = logging.getLogger(__name__)


class RefreshOrchestrator:
    """One full refresh cycle: aggregate, append to history, rebuild the cache."""

    def __init__(self, aggregator: RateAggregator, rate_repository: RateRepository, cache: RateCache):
        self.aggregator = aggregator
        self.rate_repository = rate_repository
        self.cache = cache

    async def refresh(self) -> int:
        """
        Returns the number of pairs written to the rate history.

        Raises:
            RefreshError: when the history cannot be written. Rows appended
                before the failure are kept.
        """
        start_time = time.time()
        logger.info("Starting exchange rates refresh")

        best_rates = await self.aggregator.aggregate()
        if not best_rates:
            logger.warning("No rates received from providers")
            return 0

        saved_count = await self._persist(best_rates)
        await self._rebuild_cache(best_rates)

        logger.info(
            f"Successfully refreshed {saved_count} exchange rates in {time.time() - start_time:.2f}s"
        )
        return saved_count

    async def _persist(self, best_rates: AggregatedRates) -> int:
        count = 0
        try:
            for targets in best_rates.values():
                for rate in targets.values():
                    await self.rate_repository.append(rate)
                    count += 1
        except Exception as e:
            logger.error(f"Error refreshing exchange rates after {count} writes: {e}", exc_info=True)
            raise RefreshError(f"Failed to refresh exchange rates: {e}") from e

        logger.info(f"Saved {count} exchange rates to database")
        return count

    async def _rebuild_cache(self, best_rates: AggregatedRates) -> None:
        # The cache is always replaced wholesale so no stale pair survives.
        try:
            await self.cache.evict_all()
            for base, targets in best_rates.items():
                await self.cache.store(base, {target: rate.rate for target, rate in targets.items()})
            logger.info(f"Stored best rates for {len(best_rates)} base currencies in cache")
        except Exception as e:
            logger.error(f"Cache rebuild failed, rates remain available from the database: {e}")
