import logging
from typing import Annotated

from fastapi import APIRouter, Depends

from api.dependencies import get_database, get_rate_aggregator, get_rate_cache
from api.schemas import HealthResponse
from application.services import RateAggregator
from infrastructure.cache.redis_cache import RateCache
from infrastructure.persistence.database import Database

logger = logging.getLogger(__name__)

router = APIRouter(prefix='/api/v1/currencies', tags=['health'])


@router.get(
	'/health',
	response_model=HealthResponse,
	summary='System health check',
)
async def health_check(
	database: Annotated[Database, Depends(get_database)],
	cache: Annotated[RateCache, Depends(get_rate_cache)],
	aggregator: Annotated[RateAggregator, Depends(get_rate_aggregator)],
) -> HealthResponse:
	"""
	The service is degraded, not down, when the cache or some providers are
	unavailable; only the database is required to answer rate queries.
	"""
	database_ok = await database.health_check()
	cache_ok = await cache.is_available()
	providers_available = await aggregator.available_provider_count()

	healthy = database_ok and providers_available > 0
	if not healthy:
		logger.warning(
			f'Health check degraded: database={database_ok}, cache={cache_ok}, '
			f'providers={providers_available}/{len(aggregator.providers)}'
		)

	return HealthResponse(
		status='healthy' if healthy else 'degraded',
		database=database_ok,
		cache=cache_ok,
		providers_available=providers_available,
		providers_total=len(aggregator.providers),
	)
