from unittest.mock import AsyncMock, MagicMock

import pytest

from api.dependencies import get_database, get_rate_aggregator, get_rate_cache
from api.main import app


@pytest.fixture
def mock_database():
    mock_db = MagicMock()
    mock_db.health_check = AsyncMock(return_value=True)
    return mock_db


@pytest.fixture
def mock_cache():
    mock_cache = MagicMock()
    mock_cache.is_available = AsyncMock(return_value=True)
    return mock_cache


@pytest.fixture
def mock_aggregator():
    mock_agg = MagicMock()
    mock_agg.providers = ["fixerio", "openexchange", "currencyapi"]
    mock_agg.available_provider_count = AsyncMock(return_value=3)
    return mock_agg


@pytest.fixture(autouse=True)
def overrides(client, mock_database, mock_cache, mock_aggregator):
    app.dependency_overrides[get_database] = lambda: mock_database
    app.dependency_overrides[get_rate_cache] = lambda: mock_cache
    app.dependency_overrides[get_rate_aggregator] = lambda: mock_aggregator


def test_health_all_up(client):
    response = client.get("/api/v1/currencies/health")

    assert response.status_code == 200
    assert response.json() == {
        "status": "healthy",
        "database": True,
        "cache": True,
        "providers_available": 3,
        "providers_total": 3,
    }


def test_health_cache_down_is_still_healthy(client, mock_cache):
    mock_cache.is_available.return_value = False

    data = client.get("/api/v1/currencies/health").json()

    assert data["status"] == "healthy"
    assert data["cache"] is False


def test_health_degraded_without_providers(client, mock_aggregator):
    mock_aggregator.available_provider_count.return_value = 0

    data = client.get("/api/v1/currencies/health").json()

    assert data["status"] == "degraded"
    assert data["providers_available"] == 0


def test_health_degraded_without_database(client, mock_database):
    mock_database.health_check.return_value = False

    assert client.get("/api/v1/currencies/health").json()["status"] == "degraded"
