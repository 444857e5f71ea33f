from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field


class ConversionResponse(BaseModel):
	from_currency: str = Field(..., description='Source currency code')
	to_currency: str = Field(..., description='Target currency code')
	original_amount: Decimal = Field(..., description='Original amount requested')
	converted_amount: Decimal = Field(..., description='Converted amount, rounded to 2 decimal places')
	exchange_rate: Decimal = Field(..., description='Exchange rate used for conversion')
	timestamp: datetime = Field(..., description='When the conversion was computed')

	class ConfigDict:
		json_schema_extra = {
			'example': {
				'from_currency': 'USD',
				'to_currency': 'EUR',
				'original_amount': 100.00,
				'converted_amount': 85.50,
				'exchange_rate': 0.8550,
				'timestamp': '2025-09-27T10:30:00Z',
			}
		}


class ExchangeRateResponse(BaseModel):
	base: str = Field(..., description='Base currency code')
	target: str = Field(..., description='Target currency code')
	rate: Decimal = Field(..., description='Best known rate')


class RatesResponse(BaseModel):
	base: str = Field(..., description='Base currency code')
	rates: dict[str, Decimal] = Field(..., description='Best known rate per target currency')

	class ConfigDict:
		json_schema_extra = {'example': {'base': 'USD', 'rates': {'EUR': 0.85, 'GBP': 0.79}}}


class SupportedCurrenciesResponse(BaseModel):
	currencies: list[str] = Field(description='List of currency codes')

	class ConfigDict:
		json_schema_extra = {'examples': [{'currencies': ['USD', 'EUR', 'GBP', 'JPY']}]}


class CurrencyResponse(BaseModel):
	code: str
	name: str | None = None


class RefreshResponse(BaseModel):
	message: str
	updated_count: int = Field(..., description='Number of currency pairs written to history')
	timestamp: datetime


class TrendResponse(BaseModel):
	base: str
	target: str
	period: str
	percentage: Decimal = Field(..., description='Positive for appreciation, negative for depreciation')
	oldest_rate: Decimal
	newest_rate: Decimal
	data_points: int
	start: datetime
	end: datetime
	description: str

	class ConfigDict:
		json_schema_extra = {
			'example': {
				'base': 'USD',
				'target': 'EUR',
				'period': '7D',
				'percentage': 2.35,
				'description': 'USD appreciated by 2.35% against EUR over the last 7 days',
			}
		}


class HealthResponse(BaseModel):
	status: str = Field(..., description='"healthy" or "degraded"')
	database: bool
	cache: bool
	providers_available: int
	providers_total: int
