from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from api.dependencies import get_currency_service
from api.main import app
from application.services import CurrencyService
from domain.models.currency import SupportedCurrency

REGISTERED = {"USD", "EUR", "GBP", "JPY"}


@pytest.fixture
def mock_currency_repository():
    mock_repo = MagicMock()
    mock_repo.exists = AsyncMock(side_effect=lambda code: code in REGISTERED)
    mock_repo.get_supported_currencies = AsyncMock(
        return_value=[SupportedCurrency(code=code, name=None) for code in sorted(REGISTERED)]
    )
    mock_repo.add = AsyncMock(side_effect=lambda currency: currency)
    return mock_repo


@pytest.fixture
def client(mock_currency_repository):
    # Routes run against real services; only storage and providers are mocked.
    app.dependency_overrides[get_currency_service] = lambda: CurrencyService(mock_currency_repository)
    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()
