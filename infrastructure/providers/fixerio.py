from datetime import date
from decimal import Decimal
from typing import Any

from domain.exceptions.currency import ProviderError
from infrastructure.providers.base import ExchangeRateProvider


class FixerIOProvider(ExchangeRateProvider):
    BASE_URL = 'http://data.fixer.io/api'

    @property
    def name(self) -> str:
        return 'fixerio'

    def _check_payload(self, data: dict[str, Any]) -> None:
        if not data.get('success', False):
            info = data.get('error', {}).get('info', 'Unknown error')
            raise ProviderError(f'Fixer.io API error: {info}')

    async def _fetch_latest(self, base: str) -> dict[str, Decimal]:
        data = await self._request('latest', {'access_key': self.credential, 'base': base})
        return self._parse_rates(data.get('rates'))

    async def _fetch_historical(self, base: str, target: str, on: date) -> Decimal | None:
        data = await self._request(
            on.isoformat(),
            {'access_key': self.credential, 'base': base, 'symbols': target},
        )
        return self._parse_rates(data.get('rates')).get(target)
