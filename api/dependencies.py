import logging
from datetime import timedelta
from typing import Annotated

from fastapi import Depends
from redis.asyncio import Redis

from application.services import (
	ConversionService,
	CurrencyService,
	RateAggregator,
	RateRetrievalService,
	RefreshOrchestrator,
	TrendAnalyzer,
)
from config.settings import Settings, get_settings
from infrastructure.cache.redis_cache import NullRateCache, RateCache, RedisRateCache
from infrastructure.persistence.database import Database
from infrastructure.persistence.repositories.currency import CurrencyRepository
from infrastructure.persistence.repositories.rate import RateRepository
from infrastructure.providers import ExchangeRateProvider, build_providers

logger = logging.getLogger(__name__)


class AppDependencies:
	"""Container for application-wide singleton dependencies."""

	db: Database | None = None
	redis_client: Redis | None = None
	cache: RateCache | None = None
	providers: dict[str, ExchangeRateProvider] | None = None


deps = AppDependencies()


def init_dependencies() -> None:
	"""Initialize all singleton dependencies. Called at app startup."""
	logger.info('Initializing dependencies...')
	settings = get_settings()

	deps.db = Database(settings.DATABASE_URL)

	if settings.CACHE_ENABLED:
		deps.redis_client = Redis.from_url(settings.REDIS_URL, decode_responses=True)
		deps.cache = RedisRateCache(deps.redis_client, rate_ttl=timedelta(hours=settings.CACHE_TTL_HOURS))
	else:
		logger.info('Rate cache disabled, reads go straight to the database')
		deps.cache = NullRateCache()

	deps.providers = build_providers(settings)
	logger.info(f'Dependencies initialized with providers: {list(deps.providers)}')


async def bootstrap() -> None:
	"""Bootstrap application data. Called after init_dependencies() at startup."""
	logger.info('Bootstrapping application...')

	if deps.db is None:
		raise RuntimeError('Dependencies not initialized. Call init_dependencies() first.')

	await deps.db.create_tables()
	logger.info('Database tables created')

	service = CurrencyService(CurrencyRepository(deps.db))
	added = await service.seed_currencies(get_settings().seed_currencies)
	logger.info(f'Bootstrap complete, {added} currencies seeded')


async def cleanup_dependencies() -> None:
	logger.info('Cleaning up dependencies...')

	if deps.redis_client:
		await deps.redis_client.aclose()
	if deps.db:
		await deps.db.close()
	if deps.providers:
		for provider in deps.providers.values():
			await provider.close()

	deps.db = None
	deps.redis_client = None
	deps.cache = None
	deps.providers = None
	logger.info('Cleanup complete')


def get_database() -> Database:
	if deps.db is None:
		raise RuntimeError('Database is not initialized')
	return deps.db


def get_rate_cache() -> RateCache:
	if deps.cache is None:
		raise RuntimeError('Rate cache not initialized')
	return deps.cache


def get_providers() -> dict[str, ExchangeRateProvider]:
	if deps.providers is None:
		raise RuntimeError('Providers not initialized')
	return deps.providers


def get_currency_repository(database: Annotated[Database, Depends(get_database)]) -> CurrencyRepository:
	return CurrencyRepository(database)


def get_rate_repository(database: Annotated[Database, Depends(get_database)]) -> RateRepository:
	return RateRepository(database)


def get_currency_service(
	repository: Annotated[CurrencyRepository, Depends(get_currency_repository)],
) -> CurrencyService:
	return CurrencyService(repository)


def get_rate_aggregator(
	providers: Annotated[dict[str, ExchangeRateProvider], Depends(get_providers)],
	currency_service: Annotated[CurrencyService, Depends(get_currency_service)],
	settings: Annotated[Settings, Depends(get_settings)],
) -> RateAggregator:
	return RateAggregator(
		providers=list(providers.values()),
		currency_service=currency_service,
		max_workers=settings.AGGREGATION_MAX_WORKERS,
		fetch_timeout=settings.PROVIDER_TIMEOUT_SECONDS,
	)


def get_rate_service(
	cache: Annotated[RateCache, Depends(get_rate_cache)],
	rate_repository: Annotated[RateRepository, Depends(get_rate_repository)],
) -> RateRetrievalService:
	return RateRetrievalService(cache=cache, rate_repository=rate_repository)


def get_conversion_service(
	rate_service: Annotated[RateRetrievalService, Depends(get_rate_service)],
	currency_service: Annotated[CurrencyService, Depends(get_currency_service)],
) -> ConversionService:
	return ConversionService(rate_service=rate_service, currency_service=currency_service)


def get_trend_analyzer(
	rate_repository: Annotated[RateRepository, Depends(get_rate_repository)],
	settings: Annotated[Settings, Depends(get_settings)],
) -> TrendAnalyzer:
	return TrendAnalyzer(rate_repository, min_hours=settings.TREND_MIN_HOURS)


def get_refresh_orchestrator(
	aggregator: Annotated[RateAggregator, Depends(get_rate_aggregator)],
	rate_repository: Annotated[RateRepository, Depends(get_rate_repository)],
	cache: Annotated[RateCache, Depends(get_rate_cache)],
) -> RefreshOrchestrator:
	return RefreshOrchestrator(aggregator=aggregator, rate_repository=rate_repository, cache=cache)


def build_refresh_orchestrator() -> RefreshOrchestrator:
	"""Same wiring as the request-scoped providers, for use outside FastAPI."""
	database = get_database()
	rate_repository = get_rate_repository(database)
	currency_service = get_currency_service(get_currency_repository(database))
	aggregator = get_rate_aggregator(get_providers(), currency_service, get_settings())
	return get_refresh_orchestrator(aggregator, rate_repository, get_rate_cache())
