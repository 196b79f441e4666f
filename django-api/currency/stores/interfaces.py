"""Store interfaces (repository pattern).

Stores must be swappable and return domain models.
"""

from abc import ABC, abstractmethod
from collections.abc import Callable
from datetime import datetime

from currency.domain import CurrencyChange, CurrencyCode, CurrencyConfig, ExchangeRate

ConfigMutation = Callable[[CurrencyConfig], tuple[CurrencyConfig, CurrencyChange | None]]


class CurrencyConfigStore(ABC):
    """Interface for the singleton configuration and its change log."""

    @abstractmethod
    def load(self) -> CurrencyConfig | None:
        """Return the configuration, or None if it was never created."""
        ...

    @abstractmethod
    def create_if_missing(self, config: CurrencyConfig) -> CurrencyConfig:
        """Persist ``config`` unless a configuration exists; return the stored one."""
        ...

    @abstractmethod
    def update(self, mutate: ConfigMutation) -> tuple[CurrencyConfig, CurrencyConfig]:
        """Apply ``mutate`` to the stored configuration atomically.

        ``mutate`` receives the current configuration and returns the new one
        plus an optional change-log entry, written in the same transaction.
        Returns ``(old, new)``.
        """
        ...

    @abstractmethod
    def list_changes(self, limit: int) -> list[CurrencyChange]:
        """Return change-log entries, newest first."""
        ...


class ExchangeRateStore(ABC):
    """Interface for exchange rate persistence operations."""

    @abstractmethod
    def replace_active_rate(self, rate: ExchangeRate, deactivated_at: datetime) -> int:
        """Deactivate every active row for the rate's pair and insert ``rate``.

        Both steps happen atomically. Returns the number of rows deactivated.
        """
        ...

    @abstractmethod
    def find_effective_rate(
        self, from_currency: CurrencyCode, to_currency: CurrencyCode, at: datetime
    ) -> ExchangeRate | None:
        """Return the active row for the exact pair covering ``at``, latest valid_from first."""
        ...

    @abstractmethod
    def list_effective_rates(self, at: datetime) -> list[ExchangeRate]:
        """Return every active row covering ``at``, ordered by (from, to)."""
        ...

    @abstractmethod
    def list_rates_for_pair(
        self, from_currency: CurrencyCode, to_currency: CurrencyCode
    ) -> list[ExchangeRate]:
        """Return all rows for a pair, active or not, newest valid_from first."""
        ...
