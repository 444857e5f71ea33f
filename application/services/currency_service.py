import logging

from domain.exceptions.currency import CurrencyAlreadyExistsError, InvalidCurrencyError
from domain.models.currency import SupportedCurrency, normalize_currency_code
from infrastructure.persistence.repositories.currency import CurrencyRepository

logger = logging.getLogger(__name__)


class CurrencyService:
	"""Registry of the currency codes the system tracks."""

	def __init__(self, repository: CurrencyRepository):
		self.repository = repository

	async def seed_currencies(self, codes: list[str]) -> int:
		currencies = [SupportedCurrency(code=normalize_currency_code(code), name=None) for code in codes]
		added = await self.repository.save_supported_currencies(currencies)
		logger.info(f'Seeded {added} new currencies ({len(currencies)} requested)')
		return added

	async def get_supported_currencies(self) -> list[str]:
		currencies = await self.repository.get_supported_currencies()
		return [c.code for c in currencies]

	async def add_currency(self, code: str, name: str | None = None) -> SupportedCurrency:
		normalized = normalize_currency_code(code)
		logger.info(f'Adding new currency: {normalized} - {name}')

		if await self.repository.exists(normalized):
			raise CurrencyAlreadyExistsError(f'Currency with code {normalized} already exists')

		return await self.repository.add(SupportedCurrency(code=normalized, name=name))

	async def is_registered(self, code: str) -> bool:
		return await self.repository.exists(code)

	async def validate_currency(self, code: str) -> str:
		normalized = normalize_currency_code(code)
		if not await self.is_registered(normalized):
			raise InvalidCurrencyError(f'Currency {normalized} is not supported')
		return normalized
