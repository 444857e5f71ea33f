import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal

from application.services.currency_service import CurrencyService
from application.services.rate_service import RateRetrievalService
from domain.exceptions.currency import RateNotFoundError
from domain.models.currency import normalize_currency_code
from utils.time import utc_now

logger = logging.getLogger(__name__)

CENTS = Decimal('0.01')


@dataclass(frozen=True)
class ConversionResult:
	from_currency: str
	to_currency: str
	original_amount: Decimal
	converted_amount: Decimal
	exchange_rate: Decimal
	timestamp: datetime


class ConversionService:
	def __init__(self, rate_service: RateRetrievalService, currency_service: CurrencyService):
		self.rate_service = rate_service
		self.currency_service = currency_service

	async def convert(self, amount: Decimal, from_currency: str, to_currency: str) -> ConversionResult:
		from_currency = normalize_currency_code(from_currency)
		to_currency = normalize_currency_code(to_currency)

		if from_currency == to_currency:
			rate = Decimal('1')
		else:
			await self.currency_service.validate_currency(from_currency)
			await self.currency_service.validate_currency(to_currency)

			rate = await self.rate_service.get_rate(from_currency, to_currency)
			if rate is None:
				logger.warning(f'Exchange rate not found for {from_currency} -> {to_currency}')
				raise RateNotFoundError(from_currency, to_currency)

		converted_amount = (amount * rate).quantize(CENTS, rounding=ROUND_HALF_UP)
		logger.info(f'Converted {amount} {from_currency} to {converted_amount} {to_currency} using rate {rate}')

		return ConversionResult(
			from_currency=from_currency,
			to_currency=to_currency,
			original_amount=amount,
			converted_amount=converted_amount,
			exchange_rate=rate,
			timestamp=utc_now(),
		)
