from enum import Enum

from config.settings import Settings

from .base import ExchangeRateProvider
from .currencyapi import CurrencyAPIProvider
from .fixerio import FixerIOProvider
from .openexchange import OpenExchangeProvider


class ProviderName(str, Enum):
    FIXERIO = 'fixerio'
    OPENEXCHANGE = 'openexchange'
    CURRENCYAPI = 'currencyapi'


def build_providers(settings: Settings) -> dict[str, ExchangeRateProvider]:
    """Instantiate the configured providers, in ENABLED_PROVIDERS order."""
    factories = {
        ProviderName.FIXERIO: lambda: FixerIOProvider(
            settings.FIXERIO_API_KEY, timeout=settings.PROVIDER_TIMEOUT_SECONDS
        ),
        ProviderName.OPENEXCHANGE: lambda: OpenExchangeProvider(
            settings.OPENEXCHANGE_APP_ID, timeout=settings.PROVIDER_TIMEOUT_SECONDS
        ),
        ProviderName.CURRENCYAPI: lambda: CurrencyAPIProvider(
            settings.CURRENCYAPI_API_KEY, timeout=settings.PROVIDER_TIMEOUT_SECONDS
        ),
    }

    providers: dict[str, ExchangeRateProvider] = {}
    for name in settings.enabled_providers:
        try:
            key = ProviderName(name)
        except ValueError:
            raise ValueError(f'Unknown provider in ENABLED_PROVIDERS: {name}') from None
        providers[key.value] = factories[key]()
    return providers


__all__ = [
    'CurrencyAPIProvider',
    'ExchangeRateProvider',
    'FixerIOProvider',
    'OpenExchangeProvider',
    'ProviderName',
    'build_providers',
]
