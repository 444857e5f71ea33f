from datetime import date
from decimal import Decimal
from typing import Any


from domain.exceptions.currency import ProviderError
from infrastructure.providers.base import ExchangeRateProvider


class OpenExchangeProvider(ExchangeRateProvider):
    BASE_URL = "https://openexchangerates.org/api"

    @property
    def name(self) -> str:
        return "openexchange"

    def _check_payload(self, data: dict[str, Any]) -> None:
        if data.get("error"):
            message = data.get("description", data.get("message", "Unknown error"))
            raise ProviderError(f"OpenExchange API error: {message}")

    async def _fetch_latest(self, base: str) -> dict[str, Decimal]:
        data = await self._request("latest.json", {"app_id": self.credential, "base": base})
        return self._parse_rates(data.get("rates"))

    async def _fetch_historical(self, base: str, target: str, on: date) -> Decimal | None:
        data = await self._request(
            f"historical/{on.isoformat()}.json",
            {"app_id": self.credential, "base": base, "symbols": target},
        )
        return self._parse_rates(data.get("rates")).get(target)
