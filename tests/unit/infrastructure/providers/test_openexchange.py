# nosec B101

from datetime import date
from decimal import Decimal
from unittest.mock import AsyncMock, Mock

import httpx
import pytest

from infrastructure.providers.openexchange import OpenExchangeProvider


def json_response(payload):
    mock_response = Mock()
    mock_response.json.return_value = payload
    mock_response.raise_for_status = Mock()
    return mock_response


@pytest.mark.asyncio
async def test_fetch_latest_rates_success():
    mock_client = AsyncMock(spec=httpx.AsyncClient)
    mock_client.get.return_value = json_response({"base": "USD", "rates": {"EUR": 0.86, "JPY": 149.5}})

    provider = OpenExchangeProvider("app_id", client=mock_client)

    rates = await provider.fetch_latest_rates("USD")

    assert rates == {"EUR": Decimal("0.86"), "JPY": Decimal("149.5")}
    call_args = mock_client.get.call_args
    assert call_args[0][0] == "https://openexchangerates.org/api/latest.json"
    assert call_args[1]["params"] == {"app_id": "app_id", "base": "USD"}


@pytest.mark.asyncio
async def test_error_payload_returns_empty():
    mock_client = AsyncMock(spec=httpx.AsyncClient)
    mock_client.get.return_value = json_response(
        {"error": True, "status": 401, "message": "invalid_app_id", "description": "Invalid App ID provided"}
    )

    provider = OpenExchangeProvider("bad", client=mock_client)

    assert await provider.fetch_latest_rates("USD") == {}


@pytest.mark.asyncio
async def test_missing_rates_returns_empty():
    mock_client = AsyncMock(spec=httpx.AsyncClient)
    mock_client.get.return_value = json_response({"base": "USD"})

    provider = OpenExchangeProvider("app_id", client=mock_client)

    assert await provider.fetch_latest_rates("USD") == {}


@pytest.mark.asyncio
async def test_fetch_historical_rate():
    mock_client = AsyncMock(spec=httpx.AsyncClient)
    mock_client.get.return_value = json_response({"rates": {"EUR": 0.9}})

    provider = OpenExchangeProvider("app_id", client=mock_client)

    assert await provider.fetch_historical_rate("USD", "EUR", date(2024, 3, 1)) == Decimal("0.9")
    assert mock_client.get.call_args[0][0] == "https://openexchangerates.org/api/historical/2024-03-01.json"
