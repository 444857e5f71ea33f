# nosec B101

import asyncio
from datetime import UTC, datetime
from decimal import Decimal
from itertools import permutations

import pytest

from application.services.rate_aggregator import RateAggregator
from domain.models.currency import AGGREGATED_PROVIDER

FIXED_NOW = datetime(2025, 11, 5, 10, 0, tzinfo=UTC)


def build_aggregator(providers, currency_service, **kwargs):
    return RateAggregator(providers, currency_service, clock=lambda: FIXED_NOW, **kwargs)


# ============================================================================
# TEST: aggregate() - reconciliation policy
# ============================================================================

@pytest.mark.asyncio
async def test_highest_quote_wins(make_provider, make_currency_service):
    a = make_provider("a", {"USD": {"EUR": Decimal("0.85")}})
    b = make_provider("b", {"USD": {"EUR": Decimal("0.87")}})
    aggregator = build_aggregator([a, b], make_currency_service(["USD", "EUR"]))

    result = await aggregator.aggregate()

    best = result["USD"]["EUR"]
    assert best.rate == Decimal("0.87")
    assert best.provider == AGGREGATED_PROVIDER
    assert best.timestamp == FIXED_NOW


@pytest.mark.asyncio
async def test_result_independent_of_provider_order(make_provider, make_currency_service):
    quotes = [Decimal("0.85"), Decimal("0.87"), Decimal("0.86")]
    registry = make_currency_service(["USD", "EUR"])

    for ordering in permutations(quotes):
        providers = [make_provider(f"p{i}", {"USD": {"EUR": q}}) for i, q in enumerate(ordering)]
        result = await build_aggregator(providers, registry).aggregate()
        assert result["USD"]["EUR"].rate == Decimal("0.87")


@pytest.mark.asyncio
async def test_tie_keeps_first_quote(make_provider, make_currency_service):
    a = make_provider("a", {"USD": {"EUR": Decimal("0.85")}})
    b = make_provider("b", {"USD": {"EUR": Decimal("0.850")}})
    aggregator = build_aggregator([a, b], make_currency_service(["USD", "EUR"]))

    result = await aggregator.aggregate()

    assert str(result["USD"]["EUR"].rate) == "0.85"


@pytest.mark.asyncio
async def test_unregistered_targets_never_appear(make_provider, make_currency_service):
    provider = make_provider(
        "a", {"USD": {"EUR": Decimal("0.85"), "XAU": Decimal("0.0004"), "btc": Decimal("0.00001")}}
    )
    aggregator = build_aggregator([provider], make_currency_service(["USD", "EUR"]))

    result = await aggregator.aggregate()

    assert set(result["USD"]) == {"EUR"}


@pytest.mark.asyncio
async def test_target_codes_are_upper_cased(make_provider, make_currency_service):
    provider = make_provider("a", {"USD": {"eur": "0.85"}})
    aggregator = build_aggregator([provider], make_currency_service(["USD", "EUR"]))

    result = await aggregator.aggregate()

    assert result["USD"]["EUR"].rate == Decimal("0.85")


@pytest.mark.asyncio
async def test_self_pairs_and_invalid_values_dropped(make_provider, make_currency_service):
    provider = make_provider(
        "a",
        {"USD": {"USD": Decimal("1"), "EUR": Decimal("0"), "GBP": "not-a-number", "JPY": Decimal("-3")}},
    )
    aggregator = build_aggregator([provider], make_currency_service(["USD", "EUR", "GBP", "JPY"]))

    result = await aggregator.aggregate()

    assert result == {}


@pytest.mark.asyncio
async def test_every_registered_code_is_a_base(make_provider, make_currency_service):
    provider = make_provider(
        "a",
        {
            "USD": {"EUR": Decimal("0.85"), "GBP": Decimal("0.79")},
            "EUR": {"USD": Decimal("1.17")},
        },
    )
    aggregator = build_aggregator([provider], make_currency_service(["USD", "EUR", "GBP"]))

    result = await aggregator.aggregate()

    assert set(result) == {"USD", "EUR"}
    assert result["EUR"]["USD"].rate == Decimal("1.17")
    assert provider.fetch_latest_rates.await_count == 3


# ============================================================================
# TEST: aggregate() - provider failures
# ============================================================================

@pytest.mark.asyncio
async def test_empty_registry_makes_no_provider_calls(make_provider, make_currency_service):
    provider = make_provider("a", {"USD": {"EUR": Decimal("0.85")}})
    aggregator = build_aggregator([provider], make_currency_service([]))

    assert await aggregator.aggregate() == {}
    provider.is_available.assert_not_awaited()
    provider.fetch_latest_rates.assert_not_awaited()


@pytest.mark.asyncio
async def test_unavailable_provider_contributes_nothing(make_provider, make_currency_service):
    up = make_provider("up", {"USD": {"EUR": Decimal("0.85")}})
    down = make_provider("down", {"USD": {"EUR": Decimal("0.99")}}, available=False)
    aggregator = build_aggregator([up, down], make_currency_service(["USD", "EUR"]))

    result = await aggregator.aggregate()

    assert result["USD"]["EUR"].rate == Decimal("0.85")
    down.fetch_latest_rates.assert_not_awaited()


@pytest.mark.asyncio
async def test_availability_check_error_excludes_provider(make_provider, make_currency_service):
    broken = make_provider("broken", {"USD": {"EUR": Decimal("0.99")}}, available=RuntimeError("boom"))
    ok = make_provider("ok", {"USD": {"EUR": Decimal("0.85")}})
    aggregator = build_aggregator([broken, ok], make_currency_service(["USD", "EUR"]))

    result = await aggregator.aggregate()

    assert result["USD"]["EUR"].rate == Decimal("0.85")


@pytest.mark.asyncio
async def test_no_available_providers_returns_empty(make_provider, make_currency_service):
    provider = make_provider("a", available=False)
    aggregator = build_aggregator([provider], make_currency_service(["USD", "EUR"]))

    assert await aggregator.aggregate() == {}


@pytest.mark.asyncio
async def test_failing_provider_is_absorbed(make_provider, make_currency_service):
    failing = make_provider("failing", error=RuntimeError("connection reset"))
    ok = make_provider("ok", {"USD": {"EUR": Decimal("0.85")}})
    aggregator = build_aggregator([failing, ok], make_currency_service(["USD", "EUR"]))

    result = await aggregator.aggregate()

    assert result["USD"]["EUR"].rate == Decimal("0.85")


@pytest.mark.asyncio
async def test_slow_provider_times_out(make_provider, make_currency_service):
    slow = make_provider("slow")

    async def never_returns(base):
        await asyncio.sleep(10)
        return {"EUR": Decimal("0.99")}

    slow.fetch_latest_rates.side_effect = never_returns
    ok = make_provider("ok", {"USD": {"EUR": Decimal("0.85")}})
    aggregator = build_aggregator([slow, ok], make_currency_service(["USD", "EUR"]), fetch_timeout=0.05)

    result = await aggregator.aggregate()

    assert result["USD"]["EUR"].rate == Decimal("0.85")


@pytest.mark.asyncio
async def test_non_mapping_result_is_ignored(make_provider, make_currency_service):
    weird = make_provider("weird")
    weird.fetch_latest_rates.side_effect = None
    weird.fetch_latest_rates.return_value = [("EUR", Decimal("0.99"))]
    ok = make_provider("ok", {"USD": {"EUR": Decimal("0.85")}})
    aggregator = build_aggregator([weird, ok], make_currency_service(["USD", "EUR"]))

    result = await aggregator.aggregate()

    assert result["USD"]["EUR"].rate == Decimal("0.85")


@pytest.mark.asyncio
async def test_concurrency_bounded_by_max_workers(make_provider, make_currency_service):
    in_flight = 0
    peak = 0

    async def tracked(base):
        nonlocal in_flight, peak
        in_flight += 1
        peak = max(peak, in_flight)
        await asyncio.sleep(0.01)
        in_flight -= 1
        return {}

    providers = [make_provider(f"p{i}") for i in range(3)]
    for provider in providers:
        provider.fetch_latest_rates.side_effect = tracked

    registry = make_currency_service(["USD", "EUR", "GBP", "JPY"])
    await build_aggregator(providers, registry, max_workers=2).aggregate()

    assert peak == 2


def test_max_workers_must_be_positive(make_currency_service):
    with pytest.raises(ValueError):
        RateAggregator([], make_currency_service([]), max_workers=0)


# ============================================================================
# TEST: aggregate() - rate precision
# ============================================================================

@pytest.mark.asyncio
async def test_quotes_rounded_to_stored_precision(make_provider, make_currency_service):
    provider = make_provider("a", {"USD": {"JPY": "150.123456789", "EUR": Decimal("0.87")}})
    aggregator = build_aggregator([provider], make_currency_service(["USD", "EUR", "JPY"]))

    result = await aggregator.aggregate()

    assert result["USD"]["JPY"].rate == Decimal("150.12345679")
    assert str(result["USD"]["EUR"].rate) == "0.87"


@pytest.mark.asyncio
async def test_quote_rounding_to_zero_is_dropped(make_provider, make_currency_service):
    provider = make_provider("a", {"USD": {"EUR": "0.000000001", "GBP": "0.000000005"}})
    aggregator = build_aggregator([provider], make_currency_service(["USD", "EUR", "GBP"]))

    result = await aggregator.aggregate()

    assert set(result["USD"]) == {"GBP"}
    assert result["USD"]["GBP"].rate == Decimal("0.00000001")


# ============================================================================
# TEST: available_provider_count()
# ============================================================================

@pytest.mark.asyncio
async def test_available_provider_count(make_provider, make_currency_service):
    providers = [make_provider("a"), make_provider("b", available=False), make_provider("c")]
    aggregator = build_aggregator(providers, make_currency_service([]))

    assert await aggregator.available_provider_count() == 2
