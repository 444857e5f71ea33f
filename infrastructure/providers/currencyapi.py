from datetime import date
from decimal import Decimal
from typing import Any

from domain.exceptions.currency import ProviderError
from infrastructure.providers.base import ExchangeRateProvider


class CurrencyAPIProvider(ExchangeRateProvider):
    BASE_URL = "https://api.currencyapi.com/v3"

    @property
    def name(self) -> str:
        return "currencyapi"

    def _default_headers(self) -> dict[str, str]:
        return {"accept": "application/json", "apikey": self.credential}

    def _check_payload(self, data: dict[str, Any]) -> None:
        if "error" in data:
            error = data["error"]
            message = error.get("message", "Unknown error") if isinstance(error, dict) else str(error)
            raise ProviderError(f"CurrencyAPI error: {message}")

    def _flatten(self, data: dict[str, Any]) -> dict[str, Decimal]:
        # {"data": {"EUR": {"code": "EUR", "value": 0.85}}}
        entries = data.get("data")
        if not isinstance(entries, dict):
            raise ProviderError("CurrencyAPI response has no data")
        return self._parse_rates({
            info.get("code", code): info.get("value")
            for code, info in entries.items()
            if isinstance(info, dict)
        })

    async def _fetch_latest(self, base: str) -> dict[str, Decimal]:
        data = await self._request("latest", {"base_currency": base})
        return self._flatten(data)

    async def _fetch_historical(self, base: str, target: str, on: date) -> Decimal | None:
        data = await self._request(
            "historical",
            {"date": on.isoformat(), "base_currency": base, "currencies": target},
        )
        return self._flatten(data).get(target)
