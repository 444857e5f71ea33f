from decimal import Decimal
from typing import Annotated

from fastapi import APIRouter, Depends, Path, Query, status

from api.dependencies import (
	get_conversion_service,
	get_currency_service,
	get_rate_service,
	get_refresh_orchestrator,
	get_trend_analyzer,
)
from api.schemas import (
	ConversionResponse,
	ExchangeRateResponse,
	RatesResponse,
	RefreshResponse,
	TrendResponse,
)
from application.services import (
	ConversionService,
	CurrencyService,
	RateRetrievalService,
	RefreshOrchestrator,
	TrendAnalyzer,
)
from domain.exceptions.currency import RateNotFoundError
from utils.time import utc_now

router = APIRouter(prefix='/api/v1/currencies', tags=['rates'])

CurrencyPath = Annotated[str, Path(min_length=3, max_length=3)]
CurrencyQuery = Annotated[str, Query(min_length=3, max_length=3)]


@router.get(
	'/rates/{base}',
	response_model=RatesResponse,
	status_code=status.HTTP_200_OK,
	summary='Get all current rates for a base currency',
)
async def get_rates(
	base: CurrencyPath,
	currency_service: Annotated[CurrencyService, Depends(get_currency_service)],
	service: Annotated[RateRetrievalService, Depends(get_rate_service)],
) -> RatesResponse:
	base = await currency_service.validate_currency(base)
	rates = await service.get_all_rates(base)
	return RatesResponse(base=base, rates=rates)


@router.get(
	'/rates/{base}/{target}',
	response_model=ExchangeRateResponse,
	status_code=status.HTTP_200_OK,
	summary='Get current exchange rate',
)
async def get_exchange_rate(
	base: CurrencyPath,
	target: CurrencyPath,
	currency_service: Annotated[CurrencyService, Depends(get_currency_service)],
	service: Annotated[RateRetrievalService, Depends(get_rate_service)],
) -> ExchangeRateResponse:
	base = await currency_service.validate_currency(base)
	target = await currency_service.validate_currency(target)

	rate = await service.get_rate(base, target)
	if rate is None:
		raise RateNotFoundError(base, target)
	return ExchangeRateResponse(base=base, target=target, rate=rate)


@router.get(
	'/exchange-rates',
	response_model=ConversionResponse,
	status_code=status.HTTP_200_OK,
	summary='Convert currency amount',
)
async def convert_currency(
	amount: Annotated[Decimal, Query(gt=0)],
	from_currency: Annotated[str, Query(alias='from', min_length=3, max_length=3)],
	to_currency: Annotated[str, Query(alias='to', min_length=3, max_length=3)],
	service: Annotated[ConversionService, Depends(get_conversion_service)],
) -> ConversionResponse:
	result = await service.convert(amount, from_currency, to_currency)
	return ConversionResponse(
		from_currency=result.from_currency,
		to_currency=result.to_currency,
		original_amount=result.original_amount,
		converted_amount=result.converted_amount,
		exchange_rate=result.exchange_rate,
		timestamp=result.timestamp,
	)


@router.post(
	'/refresh',
	response_model=RefreshResponse,
	status_code=status.HTTP_200_OK,
	summary='Refresh exchange rates from all providers',
)
async def refresh_rates(
	orchestrator: Annotated[RefreshOrchestrator, Depends(get_refresh_orchestrator)],
) -> RefreshResponse:
	updated_count = await orchestrator.refresh()
	return RefreshResponse(
		message='Exchange rates refreshed successfully',
		updated_count=updated_count,
		timestamp=utc_now(),
	)


@router.get(
	'/trends',
	response_model=TrendResponse,
	status_code=status.HTTP_200_OK,
	summary='Analyze exchange rate trend',
)
async def analyze_trend(
	from_currency: Annotated[str, Query(alias='from', min_length=3, max_length=3)],
	to_currency: Annotated[str, Query(alias='to', min_length=3, max_length=3)],
	period: Annotated[str, Query(description='<number><unit>, unit one of H, D, M, Y. Examples: 12H, 7D, 3M, 1Y')],
	currency_service: Annotated[CurrencyService, Depends(get_currency_service)],
	analyzer: Annotated[TrendAnalyzer, Depends(get_trend_analyzer)],
) -> TrendResponse:
	base = await currency_service.validate_currency(from_currency)
	target = await currency_service.validate_currency(to_currency)

	result = await analyzer.calculate_trend(base, target, period)
	return TrendResponse(
		base=result.base,
		target=result.target,
		period=result.period,
		percentage=result.percentage,
		oldest_rate=result.oldest_rate,
		newest_rate=result.newest_rate,
		data_points=result.data_points,
		start=result.start,
		end=result.end,
		description=result.description,
	)
