"""In-process implementation of the currency stores.

Used by single-process tools and tests. A lock serialises every write so
the same atomicity guarantees as the ORM stores hold across threads.
"""

import threading
from dataclasses import replace
from datetime import datetime

from currency.domain import CurrencyChange, CurrencyCode, CurrencyConfig, ExchangeRate
from currency.stores.interfaces import ConfigMutation, CurrencyConfigStore, ExchangeRateStore


class InMemoryCurrencyConfigStore(CurrencyConfigStore):
    def __init__(self, config: CurrencyConfig | None = None) -> None:
        self._lock = threading.Lock()
        self._config = config
        self._changes: list[CurrencyChange] = []

    def load(self) -> CurrencyConfig | None:
        return self._config

    def create_if_missing(self, config: CurrencyConfig) -> CurrencyConfig:
        with self._lock:
            if self._config is None:
                self._config = config
            return self._config

    def update(self, mutate: ConfigMutation) -> tuple[CurrencyConfig, CurrencyConfig]:
        with self._lock:
            if self._config is None:
                raise LookupError("currency configuration has not been initialised")
            old = self._config
            new, change = mutate(old)
            self._config = new
            if change is not None:
                self._changes.append(change)
            return old, new

    def list_changes(self, limit: int) -> list[CurrencyChange]:
        ordered = sorted(self._changes, key=lambda c: c.created_at, reverse=True)
        return ordered[:limit]


class InMemoryExchangeRateStore(ExchangeRateStore):
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._rows: list[ExchangeRate] = []

    def replace_active_rate(self, rate: ExchangeRate, deactivated_at: datetime) -> int:
        with self._lock:
            deactivated = 0
            for index, row in enumerate(self._rows):
                if (
                    row.is_active
                    and row.from_currency == rate.from_currency
                    and row.to_currency == rate.to_currency
                ):
                    valid_until = row.valid_until
                    if valid_until is None or valid_until > deactivated_at:
                        valid_until = deactivated_at
                    self._rows[index] = replace(row, is_active=False, valid_until=valid_until)
                    deactivated += 1
            self._rows.append(replace(rate, is_active=True))
            return deactivated

    def find_effective_rate(
        self, from_currency: CurrencyCode, to_currency: CurrencyCode, at: datetime
    ) -> ExchangeRate | None:
        matches = [
            row
            for row in self._snapshot()
            if row.from_currency == from_currency
            and row.to_currency == to_currency
            and row.is_effective_at(at)
        ]
        return max(matches, key=lambda r: r.valid_from, default=None)

    def list_effective_rates(self, at: datetime) -> list[ExchangeRate]:
        rows = [row for row in self._snapshot() if row.is_effective_at(at)]
        return sorted(
            rows,
            key=lambda r: (str(r.from_currency), str(r.to_currency), -r.valid_from.timestamp()),
        )

    def list_rates_for_pair(
        self, from_currency: CurrencyCode, to_currency: CurrencyCode
    ) -> list[ExchangeRate]:
        rows = [
            row
            for row in self._snapshot()
            if row.from_currency == from_currency and row.to_currency == to_currency
        ]
        return sorted(rows, key=lambda r: r.valid_from, reverse=True)

    def _snapshot(self) -> list[ExchangeRate]:
        with self._lock:
            return list(self._rows)
