"""
Shared fixtures: a throwaway SQLite database and fake rate providers.
"""
from unittest.mock import AsyncMock, Mock

import pytest
import pytest_asyncio

from infrastructure.persistence.database import Database


@pytest_asyncio.fixture
async def database(tmp_path):
    db = Database(f"sqlite+aiosqlite:///{tmp_path}/test.db")
    await db.create_tables()
    yield db
    await db.close()


@pytest.fixture
def make_provider():
    """
    Build a fake provider. ``rates`` maps base -> {target: rate}; ``error``
    is raised from every fetch instead.
    """
    def _make(name, rates=None, available=True, error=None):
        provider = Mock()
        provider.name = name

        if isinstance(available, Exception):
            provider.is_available = AsyncMock(side_effect=available)
        else:
            provider.is_available = AsyncMock(return_value=available)

        async def fetch(base):
            if error is not None:
                raise error
            return dict((rates or {}).get(base, {}))

        provider.fetch_latest_rates = AsyncMock(side_effect=fetch)
        return provider

    return _make


@pytest.fixture
def make_currency_service():
    def _make(codes):
        service = Mock()
        service.get_supported_currencies = AsyncMock(return_value=list(codes))
        return service

    return _make
