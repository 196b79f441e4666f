from currency.handlers.views import (
    ConvertView,
    CurrencyConfigView,
    CurrencyHistoryView,
    CurrencyListView,
    ExchangeRateListView,
)

__all__ = [
    "ConvertView",
    "CurrencyConfigView",
    "CurrencyHistoryView",
    "CurrencyListView",
    "ExchangeRateListView",
]
