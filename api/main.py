import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from api.dependencies import bootstrap, cleanup_dependencies, init_dependencies
from api.error_handlers import register_exception_handlers
from api.routes import currency, health, rates
from config.logging_config import setup_logging
from config.settings import get_settings

logger = logging.getLogger(__name__)


settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
	setup_logging(settings)
	logger.info(f'Starting {settings.APP_NAME}...')

	init_dependencies()
	await bootstrap()

	logger.info('Application ready')

	yield

	logger.info('Shutting down...')
	await cleanup_dependencies()


app = FastAPI(title=settings.APP_NAME, lifespan=lifespan)

app.include_router(currency.router)
app.include_router(rates.router)
app.include_router(health.router)
register_exception_handlers(app)


if __name__ == '__main__':
	import uvicorn

	logger.info(f'Starting server on {settings.HOST}:{settings.PORT}')

	uvicorn.run(
		'api.main:app',
		host=settings.HOST,
		port=settings.PORT,
		reload=settings.DEBUG,
		log_level=settings.LOG_LEVEL.lower(),
	)
