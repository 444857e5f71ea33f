import contextlib
import logging
from abc import ABC, abstractmethod
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Any

import httpx

from domain.exceptions.currency import ProviderError

logger = logging.getLogger(__name__)


class ExchangeRateProvider(ABC):
    """Capability contract every rate source implements.

    Public methods never raise for provider faults: ``fetch_latest_rates``
    returns an empty mapping and ``fetch_historical_rate`` returns ``None``.
    Subclasses only implement the wire-specific ``_fetch_*`` hooks, which
    signal failures with :class:`ProviderError`.
    """

    BASE_URL: str = ""

    def __init__(self, credential: str, client: httpx.AsyncClient | None = None, timeout: float = 10):
        self.credential = credential
        self.timeout = timeout
        self._client = client or httpx.AsyncClient(
            timeout=httpx.Timeout(timeout),
            headers=self._default_headers(),
            limits=httpx.Limits(max_keepalive_connections=5, max_connections=10),
        )

    @property
    @abstractmethod
    def name(self) -> str:
        ...

    @abstractmethod
    async def _fetch_latest(self, base: str) -> dict[str, Decimal]:
        ...

    @abstractmethod
    async def _fetch_historical(self, base: str, target: str, on: date) -> Decimal | None:
        ...

    def _default_headers(self) -> dict[str, str]:
        return {"accept": "application/json"}

    def _check_payload(self, data: dict[str, Any]) -> None:
        """Raise ProviderError when a 2xx payload carries an API-level error."""

    async def fetch_latest_rates(self, base: str) -> dict[str, Decimal]:
        try:
            rates = await self._fetch_latest(base)
        except ProviderError as e:
            logger.error(f"{self.name} failed to fetch latest rates for {base}: {e}")
            return {}

        logger.info(f"Fetched {len(rates)} rates from {self.name} for base {base}")
        return rates

    async def fetch_historical_rate(self, base: str, target: str, on: date) -> Decimal | None:
        try:
            return await self._fetch_historical(base, target, on)
        except ProviderError as e:
            logger.error(f"{self.name} failed to fetch historical rate {base}->{target} on {on}: {e}")
            return None

    async def is_available(self) -> bool:
        """Cheap local check: a provider without credentials is never queried."""
        return bool(self.credential)

    async def _request(self, endpoint: str, params: dict | None = None) -> dict[str, Any]:
        url = f"{self.BASE_URL}/{endpoint}"
        try:
            response = await self._client.get(url, params=params)
            response.raise_for_status()
            data = response.json()
            if not isinstance(data, dict):
                raise ProviderError(f"{self.name} returned an unexpected payload")
            self._check_payload(data)
            return data

        except ProviderError:
            raise
        except httpx.HTTPStatusError as e:
            msg = None
            with contextlib.suppress(Exception):
                msg = e.response.json().get("message")
            raise ProviderError(
                f"{self.name} HTTP error {e.response.status_code}: {msg or e.response.text[:200]}"
            ) from e
        except httpx.RequestError as e:
            raise ProviderError(f"{self.name} request failed: {e.__class__.__name__}") from e
        except Exception as e:
            raise ProviderError(f"{self.name} response parsing error: {str(e)}") from e

    def _parse_rates(self, raw_rates: Any) -> dict[str, Decimal]:
        if not isinstance(raw_rates, dict):
            raise ProviderError(f"{self.name} response has no rates")
        rates: dict[str, Decimal] = {}
        for code, value in raw_rates.items():
            try:
                rates[str(code).upper()] = Decimal(str(value))
            except InvalidOperation:
                logger.warning(f"{self.name} returned a non-numeric rate for {code}: {value!r}")
        return rates

    async def close(self) -> None:
        await self._client.aclose()
