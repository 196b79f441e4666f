from django.urls import path

from currency.handlers import (
    ConvertView,
    CurrencyConfigView,
    CurrencyHistoryView,
    CurrencyListView,
    ExchangeRateListView,
)

urlpatterns = [
    path("currency/config", CurrencyConfigView.as_view(), name="currency-config"),
    path("currency/currencies", CurrencyListView.as_view(), name="currency-list"),
    path("currency/rates", ExchangeRateListView.as_view(), name="exchange-rate-list"),
    path("currency/convert", ConvertView.as_view(), name="currency-convert"),
    path("currency/history", CurrencyHistoryView.as_view(), name="currency-history"),
]
