from .requests import CurrencyCreateRequest
from .responses import (
	ConversionResponse,
	CurrencyResponse,
	ExchangeRateResponse,
	HealthResponse,
	RatesResponse,
	RefreshResponse,
	SupportedCurrenciesResponse,
	TrendResponse,
)

__all__ = [
	'ConversionResponse',
	'CurrencyCreateRequest',
	'CurrencyResponse',
	'ExchangeRateResponse',
	'HealthResponse',
	'RatesResponse',
	'RefreshResponse',
	'SupportedCurrenciesResponse',
	'TrendResponse',
]
