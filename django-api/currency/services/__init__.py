"""Service wiring for the currency app."""

from currency.services.config_service import CurrencyConfigService
from currency.services.exchange_rate_service import ExchangeRateService


def build_config_service() -> CurrencyConfigService:
    from currency.stores.django_store import DjangoCurrencyConfigStore

    return CurrencyConfigService(DjangoCurrencyConfigStore())


def build_exchange_rate_service() -> ExchangeRateService:
    from currency.stores.django_store import DjangoExchangeRateStore

    return ExchangeRateService(DjangoExchangeRateStore())


__all__ = [
    "CurrencyConfigService",
    "ExchangeRateService",
    "build_config_service",
    "build_exchange_rate_service",
]
