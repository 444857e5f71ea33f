import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from domain.exceptions.currency import (
	CurrencyAlreadyExistsError,
	InsufficientDataError,
	InvalidCurrencyError,
	InvalidPeriodError,
	ProviderError,
	RateNotFoundError,
	RefreshError,
)

logger = logging.getLogger(__name__)


def register_exception_handlers(app: FastAPI) -> None:
	@app.exception_handler(InvalidCurrencyError)
	async def invalid_currency_handler(request: Request, exc: InvalidCurrencyError):
		return JSONResponse(status_code=400, content={'detail': str(exc)})

	@app.exception_handler(InvalidPeriodError)
	async def invalid_period_handler(request: Request, exc: InvalidPeriodError):
		return JSONResponse(status_code=400, content={'detail': str(exc)})

	@app.exception_handler(CurrencyAlreadyExistsError)
	async def currency_exists_handler(request: Request, exc: CurrencyAlreadyExistsError):
		return JSONResponse(status_code=409, content={'detail': str(exc)})

	@app.exception_handler(RateNotFoundError)
	async def rate_not_found_handler(request: Request, exc: RateNotFoundError):
		return JSONResponse(status_code=404, content={'detail': str(exc)})

	@app.exception_handler(InsufficientDataError)
	async def insufficient_data_handler(request: Request, exc: InsufficientDataError):
		return JSONResponse(status_code=404, content={'detail': str(exc)})

	@app.exception_handler(RefreshError)
	async def refresh_error_handler(request: Request, exc: RefreshError):
		logger.error(f'Refresh failed: {exc}')
		return JSONResponse(status_code=500, content={'detail': str(exc)})

	@app.exception_handler(ProviderError)
	async def provider_error_handler(request: Request, exc: ProviderError):
		logger.error(f'Provider error: {exc}')
		return JSONResponse(
			status_code=503, content={'detail': 'Exchange rate service unavailable'}
		)

	@app.exception_handler(Exception)
	async def global_exception_handler(request: Request, exc: Exception):
		logger.error(f'Unhandled exception: {exc}', exc_info=True)
		return JSONResponse(status_code=500, content={'detail': 'Internal server error'})
