from sqlalchemy import select

from domain.models.currency import SupportedCurrency
from infrastructure.persistence.database import Database
from infrastructure.persistence.models.currency import CurrencyDB


class CurrencyRepository:
	def __init__(self, database: Database):
		self.database = database

	async def get_supported_currencies(self) -> list[SupportedCurrency]:
		async with self.database.session() as session:
			result = await session.execute(select(CurrencyDB).order_by(CurrencyDB.code))
			return [SupportedCurrency(code=c.code, name=c.name) for c in result.scalars().all()]

	async def exists(self, code: str) -> bool:
		async with self.database.session() as session:
			return await session.get(CurrencyDB, code) is not None

	async def add(self, currency: SupportedCurrency) -> SupportedCurrency:
		async with self.database.session() as session:
			session.add(CurrencyDB(code=currency.code, name=currency.name))
		return currency

	async def save_supported_currencies(self, currencies: list[SupportedCurrency]) -> int:
		async with self.database.session() as session:
			existing_codes = set((await session.execute(select(CurrencyDB.code))).scalars().all())
			new_currencies = [c for c in currencies if c.code not in existing_codes]

			if new_currencies:
				session.add_all([CurrencyDB(code=c.code, name=c.name) for c in new_currencies])

		return len(new_currencies)
