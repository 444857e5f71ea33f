# nosec B101

import pytest

from domain.models.currency import SupportedCurrency
from infrastructure.persistence.repositories.currency import CurrencyRepository


@pytest.mark.asyncio
async def test_add_and_exists(database):
    repository = CurrencyRepository(database)

    assert not await repository.exists("USD")
    await repository.add(SupportedCurrency(code="USD", name="US Dollar"))

    assert await repository.exists("USD")
    assert await repository.get_supported_currencies() == [SupportedCurrency(code="USD", name="US Dollar")]


@pytest.mark.asyncio
async def test_save_supported_currencies_skips_existing(database):
    repository = CurrencyRepository(database)
    await repository.add(SupportedCurrency(code="EUR", name=None))

    added = await repository.save_supported_currencies(
        [SupportedCurrency(code="EUR", name=None), SupportedCurrency(code="GBP", name=None)]
    )

    assert added == 1
    assert [c.code for c in await repository.get_supported_currencies()] == ["EUR", "GBP"]


@pytest.mark.asyncio
async def test_database_health_check(database):
    assert await database.health_check() is True
