from currency.domain.models import (
    ChangeContext,
    ChangeType,
    ConfigPatch,
    CurrencyChange,
    CurrencyConfig,
    CurrencyPosition,
    ExchangeRate,
    RateSource,
)
from currency.domain.value_objects import CurrencyCode, ExchangeRateId, Money

__all__ = [
    "ChangeContext",
    "ChangeType",
    "ConfigPatch",
    "CurrencyChange",
    "CurrencyConfig",
    "CurrencyPosition",
    "ExchangeRate",
    "RateSource",
    "CurrencyCode",
    "ExchangeRateId",
    "Money",
]
