import logging
from datetime import timedelta
from decimal import Decimal, InvalidOperation
from typing import Protocol

from redis import RedisError
from redis import asyncio as redis

logger = logging.getLogger(__name__)

RATES_KEY_PREFIX = "rates:"
DEFAULT_RATE_TTL = timedelta(hours=2)

# Every backend failure is swallowed at this boundary.
BACKEND_ERRORS = (RedisError, OSError)


class RateCache(Protocol):
    """Best-effort store of the current rates, grouped per base currency."""

    async def store(self, base: str, rates: dict[str, Decimal]) -> None: ...

    async def get(self, base: str, target: str) -> Decimal | None: ...

    async def get_all(self, base: str) -> dict[str, Decimal]: ...

    async def evict(self, base: str) -> None: ...

    async def evict_all(self) -> None: ...

    async def is_available(self) -> bool: ...


class NullRateCache:
    """Cache used when caching is disabled: writes vanish, reads always miss."""

    async def store(self, base: str, rates: dict[str, Decimal]) -> None:
        logger.debug(f"Cache disabled, skipping storage for {base}")

    async def get(self, base: str, target: str) -> Decimal | None:
        return None

    async def get_all(self, base: str) -> dict[str, Decimal]:
        return {}

    async def evict(self, base: str) -> None:
        return None

    async def evict_all(self) -> None:
        return None

    async def is_available(self) -> bool:
        return False


class RedisRateCache:
    """Redis hash per base currency: key ``rates:{BASE}``, one field per target."""

    def __init__(self, redis_client: redis.Redis, rate_ttl: timedelta = DEFAULT_RATE_TTL):
        self.redis = redis_client
        self.rate_ttl = rate_ttl

    def _make_rates_key(self, base: str) -> str:
        return f"{RATES_KEY_PREFIX}{base}"

    @staticmethod
    def _to_decimal(value) -> Decimal | None:
        try:
            return Decimal(value)
        except (InvalidOperation, TypeError, ValueError):
            return None

    async def store(self, base: str, rates: dict[str, Decimal]) -> None:
        if not rates:
            return

        key = self._make_rates_key(base)
        try:
            await self.redis.hset(key, mapping={target: str(rate) for target, rate in rates.items()})
            await self.redis.expire(key, self.rate_ttl)
            logger.info(f"Stored {len(rates)} rates for base currency {base} in cache")
        except BACKEND_ERRORS as e:
            logger.error(f"Failed to store rates in cache for base currency {base}: {e}")

    async def get(self, base: str, target: str) -> Decimal | None:
        key = self._make_rates_key(base)
        try:
            raw = await self.redis.hget(key, target)
        except BACKEND_ERRORS as e:
            logger.error(f"Error retrieving rate from cache: {base} -> {target}: {e}")
            return None

        if raw is None:
            logger.debug(f"Rate not found in cache: {base} -> {target}")
            return None

        rate = self._to_decimal(raw)
        if rate is None:
            logger.warning(f"Discarding unparsable cached rate for {base} -> {target}: {raw!r}")
        return rate

    async def get_all(self, base: str) -> dict[str, Decimal]:
        key = self._make_rates_key(base)
        try:
            entries = await self.redis.hgetall(key)
        except BACKEND_ERRORS as e:
            logger.error(f"Error retrieving all rates from cache for base currency {base}: {e}")
            return {}

        rates: dict[str, Decimal] = {}
        for target, raw in (entries or {}).items():
            rate = self._to_decimal(raw)
            if rate is not None:
                rates[target] = rate
        return rates

    async def evict(self, base: str) -> None:
        try:
            deleted = await self.redis.delete(self._make_rates_key(base))
            if deleted:
                logger.info(f"Evicted rates for base currency {base} from cache")
        except BACKEND_ERRORS as e:
            logger.error(f"Error evicting rates for base currency {base}: {e}")

    async def evict_all(self) -> None:
        try:
            keys = await self.redis.keys(f"{RATES_KEY_PREFIX}*")
            if keys:
                await self.redis.delete(*keys)
                logger.info(f"Evicted {len(keys)} rate entries from cache")
        except BACKEND_ERRORS as e:
            logger.error(f"Error evicting cache: {e}")

    async def is_available(self) -> bool:
        try:
            return bool(await self.redis.ping())
        except BACKEND_ERRORS as e:
            logger.warning(f"Cache is not available: {e}")
            return False
