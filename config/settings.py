from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


def split_codes(raw: str) -> list[str]:
	return [code.strip().upper() for code in raw.split(',') if code.strip()]


class Settings(BaseSettings):
	DATABASE_URL: str = 'sqlite+aiosqlite:///./exchange_rates.db'

	# Cache
	REDIS_URL: str = 'redis://localhost:6379'
	CACHE_ENABLED: bool = True
	CACHE_TTL_HOURS: int = 2

	# Providers
	FIXERIO_API_KEY: str = ''
	OPENEXCHANGE_APP_ID: str = ''
	CURRENCYAPI_API_KEY: str = ''
	ENABLED_PROVIDERS: str = 'fixerio,openexchange,currencyapi'
	PROVIDER_TIMEOUT_SECONDS: float = 10.0

	# Aggregation and refresh
	AGGREGATION_MAX_WORKERS: int = 5
	REFRESH_INTERVAL_SECONDS: int = 3600
	SEED_CURRENCIES: str = 'USD,EUR,GBP,JPY,CHF,CAD,AUD,NGN'

	# Trend analysis
	TREND_MIN_HOURS: int = 12

	# Application
	APP_NAME: str = 'Exchange Rate Aggregator API'
	HOST: str = '0.0.0.0'
	PORT: int = 8000
	DEBUG: bool = False
	LOG_LEVEL: str = 'INFO'
	LOG_DIR: str = 'logs'
	LOG_JSON_FILE: bool = True

	model_config = SettingsConfigDict(env_file='.env', case_sensitive=False, extra='ignore')

	@property
	def seed_currencies(self) -> list[str]:
		return split_codes(self.SEED_CURRENCIES)

	@property
	def enabled_providers(self) -> list[str]:
		return [name.lower() for name in split_codes(self.ENABLED_PROVIDERS)]


@lru_cache
def get_settings() -> Settings:
	return Settings()
