from typing import Annotated

from fastapi import APIRouter, Depends, status

from api.dependencies import get_currency_service
from api.schemas import CurrencyCreateRequest, CurrencyResponse, SupportedCurrenciesResponse
from application.services import CurrencyService

router = APIRouter(prefix='/api/v1/currencies', tags=['currency'])


@router.get(
	'',
	response_model=SupportedCurrenciesResponse,
	status_code=status.HTTP_200_OK,
	summary='List tracked currencies',
)
async def get_supported_currencies(
	service: Annotated[CurrencyService, Depends(get_currency_service)],
) -> SupportedCurrenciesResponse:
	currencies = await service.get_supported_currencies()
	return SupportedCurrenciesResponse(currencies=currencies)


@router.post(
	'',
	response_model=CurrencyResponse,
	status_code=status.HTTP_201_CREATED,
	summary='Start tracking a currency',
)
async def add_currency(
	request: CurrencyCreateRequest,
	service: Annotated[CurrencyService, Depends(get_currency_service)],
) -> CurrencyResponse:
	currency = await service.add_currency(request.code, request.name)
	return CurrencyResponse(code=currency.code, name=currency.name)
