"""Domain models for currency configuration and exchange rates.

These are pure domain objects. Django ORM models are in currency/models.py.
"""

from dataclasses import dataclass, fields
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any

from currency.domain.value_objects import CurrencyCode, ExchangeRateId


class CurrencyPosition(str, Enum):
    BEFORE = "before"
    AFTER = "after"


class RateSource(str, Enum):
    MANUAL = "manual"
    API = "api"
    SYSTEM = "system"


class ChangeType(str, Enum):
    """Change-log tags, most significant first."""

    DEFAULT_CURRENCY = "default_currency"
    SUPPORTED_CURRENCIES = "supported_currencies"
    MULTI_CURRENCY_TOGGLE = "multi_currency_toggle"
    EXCHANGE_RATE_SETTINGS = "exchange_rate_settings"
    DISPLAY_FORMAT = "display_format"


DEFAULT_CURRENCY = "NGN"
RATE_DECIMAL_PLACES = 10
DEFAULT_SUPPORTED_CURRENCIES = ("NGN", "USD", "GBP", "EUR", "GHS", "KES", "ZAR")


@dataclass(frozen=True)
class CurrencyConfig:
    """Domain representation of the platform currency configuration."""

    default_currency: CurrencyCode
    supported_currencies: tuple[CurrencyCode, ...]
    multi_currency_enabled: bool
    currency_symbol: str
    currency_position: CurrencyPosition
    decimal_places: int
    decimal_separator: str
    thousands_separator: str
    exchange_rates_enabled: bool
    allow_organizer_currency: bool
    auto_update_rates: bool
    update_frequency: str
    updated_by: str | None = None
    updated_at: datetime | None = None

    def supports(self, code: CurrencyCode) -> bool:
        return code in self.supported_currencies

    def snapshot(self) -> dict[str, Any]:
        """JSON-friendly copy of the tracked fields."""
        return {
            "default_currency": str(self.default_currency),
            "supported_currencies": [str(c) for c in self.supported_currencies],
            "multi_currency_enabled": self.multi_currency_enabled,
            "currency_symbol": self.currency_symbol,
            "currency_position": self.currency_position.value,
            "decimal_places": self.decimal_places,
            "decimal_separator": self.decimal_separator,
            "thousands_separator": self.thousands_separator,
            "exchange_rates_enabled": self.exchange_rates_enabled,
            "allow_organizer_currency": self.allow_organizer_currency,
            "auto_update_rates": self.auto_update_rates,
            "update_frequency": self.update_frequency,
        }


def default_config() -> CurrencyConfig:
    return CurrencyConfig(
        default_currency=CurrencyCode(DEFAULT_CURRENCY),
        supported_currencies=tuple(CurrencyCode(c) for c in DEFAULT_SUPPORTED_CURRENCIES),
        multi_currency_enabled=False,
        currency_symbol="₦",
        currency_position=CurrencyPosition.BEFORE,
        decimal_places=2,
        decimal_separator=".",
        thousands_separator=",",
        exchange_rates_enabled=False,
        allow_organizer_currency=False,
        auto_update_rates=False,
        update_frequency="daily",
    )


@dataclass(frozen=True)
class ConfigPatch:
    """Partial update; ``None`` means the field was not supplied."""

    default_currency: str | None = None
    supported_currencies: list[str] | None = None
    multi_currency_enabled: bool | None = None
    currency_symbol: str | None = None
    currency_position: str | None = None
    decimal_places: int | None = None
    decimal_separator: str | None = None
    thousands_separator: str | None = None
    exchange_rates_enabled: bool | None = None
    allow_organizer_currency: bool | None = None
    auto_update_rates: bool | None = None
    update_frequency: str | None = None

    def provided(self) -> dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self) if getattr(self, f.name) is not None}


@dataclass(frozen=True)
class ChangeContext:
    """Who made a configuration change and from where."""

    actor_id: str
    ip_address: str | None = None
    user_agent: str | None = None


@dataclass(frozen=True)
class CurrencyChange:
    """One entry of the configuration change log."""

    change_type: ChangeType
    old_value: dict[str, Any]
    new_value: dict[str, Any]
    changed_by: str
    ip_address: str | None
    user_agent: str | None
    created_at: datetime


@dataclass(frozen=True)
class ExchangeRate:
    """Directional rate: one unit of ``from_currency`` buys ``rate`` units of ``to_currency``."""

    id: ExchangeRateId
    from_currency: CurrencyCode
    to_currency: CurrencyCode
    rate: Decimal
    inverse_rate: Decimal
    source: RateSource
    provider: str | None
    valid_from: datetime
    valid_until: datetime | None
    is_active: bool
    created_by: str | None
    created_at: datetime

    def is_effective_at(self, at: datetime) -> bool:
        return (
            self.is_active
            and self.valid_from <= at
            and (self.valid_until is None or self.valid_until >= at)
        )

