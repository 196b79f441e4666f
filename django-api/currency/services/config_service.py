"""Currency configuration service.

Owns the singleton platform configuration: explicit bootstrap, TTL-cached
reads, validated and audited updates, and display formatting.

The cache is the Django cache framework. Every successful write deletes the
cached entry synchronously, so reads in the same process are consistent
immediately. With a per-process cache backend other instances may serve the
previous value for up to ``CURRENCY_CONFIG_CACHE_TTL`` seconds; configure a
shared backend when that staleness is not acceptable.
"""

import logging
from dataclasses import replace
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from django.conf import settings
from django.core.cache import cache as default_cache

from core.clock import Clock, SystemClock
from currency.domain import (
    ChangeContext,
    ChangeType,
    ConfigPatch,
    CurrencyChange,
    CurrencyCode,
    CurrencyConfig,
    CurrencyPosition,
)
from currency.domain.errors import InvalidConfigurationError, InvalidCurrencyCodeError
from currency.domain.models import default_config
from currency.domain.registry import currency_symbol, minor_unit
from currency.stores.interfaces import CurrencyConfigStore

logger = logging.getLogger(__name__)

CONFIG_CACHE_KEY = "currency:config"
MAX_DECIMAL_PLACES = 4

# Most significant first; the first changed group names the change-log entry.
_CHANGE_GROUPS: tuple[tuple[ChangeType, frozenset[str]], ...] = (
    (ChangeType.DEFAULT_CURRENCY, frozenset({"default_currency"})),
    (ChangeType.SUPPORTED_CURRENCIES, frozenset({"supported_currencies"})),
    (ChangeType.MULTI_CURRENCY_TOGGLE, frozenset({"multi_currency_enabled"})),
    (
        ChangeType.EXCHANGE_RATE_SETTINGS,
        frozenset({"exchange_rates_enabled", "auto_update_rates", "update_frequency", "allow_organizer_currency"}),
    ),
    (
        ChangeType.DISPLAY_FORMAT,
        frozenset(
            {"currency_symbol", "currency_position", "decimal_places", "decimal_separator", "thousands_separator"}
        ),
    ),
)


def diff_configs(old: CurrencyConfig, new: CurrencyConfig) -> dict[str, dict[str, Any]]:
    """Field-level diff of two snapshots: ``{field: {"old": ..., "new": ...}}``."""
    before, after = old.snapshot(), new.snapshot()
    return {
        name: {"old": before[name], "new": after[name]}
        for name in before
        if before[name] != after[name]
    }


def classify_change(diff: dict[str, Any]) -> ChangeType:
    for change_type, names in _CHANGE_GROUPS:
        if names & diff.keys():
            return change_type
    return ChangeType.DISPLAY_FORMAT


class CurrencyConfigService:
    """Service for the platform currency configuration."""

    def __init__(
        self,
        store: CurrencyConfigStore,
        clock: Clock | None = None,
        cache_ttl: int | None = None,
        cache=None,
    ) -> None:
        self._store = store
        self._clock = clock or SystemClock()
        self._cache_ttl = settings.CURRENCY_CONFIG_CACHE_TTL if cache_ttl is None else cache_ttl
        self._cache = cache if cache is not None else default_cache

    def init(self) -> CurrencyConfig:
        """Create the configuration with platform defaults unless it exists."""
        config = self._store.create_if_missing(default_config())
        logger.debug("Currency configuration ready (default %s)", config.default_currency)
        return config

    def get_config(self) -> CurrencyConfig:
        cached = self._cache.get(CONFIG_CACHE_KEY)
        if cached is not None:
            return cached

        config = self._store.load()
        if config is None:
            logger.info("Initializing currency configuration with %s defaults", default_config().default_currency)
            config = self.init()

        self._cache.set(CONFIG_CACHE_KEY, config, self._cache_ttl)
        return config

    def update_config(self, patch: ConfigPatch, context: ChangeContext) -> CurrencyConfig:
        """Apply a partial update.

        Raises:
            InvalidCurrencyCodeError: If any supplied code is not in the registry.
            InvalidConfigurationError: If a formatting field is out of range.
        """
        changes = self._validate_patch(patch)
        self.get_config()

        def mutate(current: CurrencyConfig) -> tuple[CurrencyConfig, CurrencyChange | None]:
            default = changes.get("default_currency", current.default_currency)
            supported = list(changes.get("supported_currencies", current.supported_currencies))
            if default not in supported:
                supported.append(default)
            symbol = changes.get("currency_symbol", current.currency_symbol)
            if default != current.default_currency and "currency_symbol" not in changes:
                symbol = currency_symbol(default.value)
            updated = replace(
                current,
                **{
                    **changes,
                    "default_currency": default,
                    "supported_currencies": tuple(supported),
                    "currency_symbol": symbol,
                },
                updated_by=context.actor_id,
                updated_at=self._clock.now(),
            )
            diff = diff_configs(current, updated)
            if not diff:
                return updated, None
            return updated, CurrencyChange(
                change_type=classify_change(diff),
                old_value=current.snapshot(),
                new_value=updated.snapshot(),
                changed_by=context.actor_id,
                ip_address=context.ip_address,
                user_agent=context.user_agent,
                created_at=self._clock.now(),
            )

        old, new = self._store.update(mutate)
        self.invalidate_cache()

        diff = diff_configs(old, new)
        if diff:
            logger.info("Currency configuration updated by %s: %s", context.actor_id, diff)
        return new

    def toggle_multi_currency(self, enabled: bool, context: ChangeContext) -> CurrencyConfig:
        return self.update_config(ConfigPatch(multi_currency_enabled=enabled), context)

    def invalidate_cache(self) -> None:
        self._cache.delete(CONFIG_CACHE_KEY)

    def get_default_currency(self) -> CurrencyCode:
        return self.get_config().default_currency

    def is_multi_currency_enabled(self) -> bool:
        return self.get_config().multi_currency_enabled

    def get_supported_currencies(self) -> tuple[CurrencyCode, ...]:
        return self.get_config().supported_currencies

    def is_currency_supported(self, currency: str) -> bool:
        try:
            code = CurrencyCode.parse(currency)
        except InvalidCurrencyCodeError:
            return False
        return self.get_config().supports(code)

    def format_amount(self, amount_minor: int, currency: str | None = None) -> str:
        """Render minor units for display, e.g. ``1234550`` NGN -> ``₦12,345.50``."""
        config = self.get_config()
        code = CurrencyCode.parse(currency) if currency else config.default_currency
        symbol = config.currency_symbol if code == config.default_currency else currency_symbol(code.value)

        major = Decimal(amount_minor).scaleb(-minor_unit(code.value))
        quantum = Decimal(1).scaleb(-config.decimal_places)
        major = major.quantize(quantum, rounding=ROUND_HALF_UP)

        digits = f"{abs(major):,.{config.decimal_places}f}"
        digits = digits.translate(
            str.maketrans({",": "\0", ".": config.decimal_separator})
        ).replace("\0", config.thousands_separator)

        sign = "-" if major < 0 else ""
        if config.currency_position == CurrencyPosition.BEFORE:
            return f"{sign}{symbol}{digits}"
        return f"{sign}{digits}{symbol}"

    def get_change_history(self, limit: int = 50) -> list[CurrencyChange]:
        return self._store.list_changes(limit)

    def _validate_patch(self, patch: ConfigPatch) -> dict[str, Any]:
        values = patch.provided()

        if "default_currency" in values:
            values["default_currency"] = CurrencyCode.parse(values["default_currency"])

        if "supported_currencies" in values:
            parsed: list[CurrencyCode] = []
            for raw in values["supported_currencies"]:
                code = CurrencyCode.parse(raw)
                if code not in parsed:
                    parsed.append(code)
            values["supported_currencies"] = tuple(parsed)

        if "currency_position" in values:
            try:
                values["currency_position"] = CurrencyPosition(values["currency_position"])
            except ValueError:
                raise InvalidConfigurationError("currency_position", "must be 'before' or 'after'") from None

        if "decimal_places" in values:
            places = values["decimal_places"]
            if isinstance(places, bool) or not isinstance(places, int) or not 0 <= places <= MAX_DECIMAL_PLACES:
                raise InvalidConfigurationError("decimal_places", f"must be between 0 and {MAX_DECIMAL_PLACES}")

        if "decimal_separator" in values and not values["decimal_separator"]:
            raise InvalidConfigurationError("decimal_separator", "must not be empty")

        return values
