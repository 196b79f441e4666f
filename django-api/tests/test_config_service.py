"""Unit tests for CurrencyConfigService.

Run with: pytest tests/test_config_service.py -v
"""

from dataclasses import replace
from datetime import timedelta

import pytest

from currency.domain import ChangeContext, ChangeType, ConfigPatch, CurrencyCode
from currency.domain.errors import InvalidConfigurationError, InvalidCurrencyCodeError

ADMIN = ChangeContext(actor_id="admin-1", ip_address="10.0.0.1", user_agent="pytest")


def codes(*values: str) -> tuple[CurrencyCode, ...]:
    return tuple(CurrencyCode(v) for v in values)


class TestGetConfig:
    """Tests for lazy initialization and caching."""

    def test_first_read_creates_defaults(self, config_service, config_store):
        """Given no configuration, the first read creates the NGN defaults."""
        config = config_service.get_config()

        assert config.default_currency == CurrencyCode("NGN")
        assert CurrencyCode("NGN") in config.supported_currencies
        assert config.multi_currency_enabled is False
        assert config_store.load() == config

    def test_init_is_idempotent(self, config_service):
        first = config_service.init()
        config_service.update_config(ConfigPatch(currency_symbol="N"), ADMIN)

        assert config_service.init().currency_symbol == "N"
        assert first.currency_symbol == "₦"

    def test_reads_are_cached(self, config_service, config_store):
        """A write that bypasses the service is not seen until the cache is invalidated."""
        config_service.get_config()
        config_store.update(lambda current: (replace(current, currency_symbol="NGN "), None))

        assert config_service.get_config().currency_symbol == "₦"
        config_service.invalidate_cache()
        assert config_service.get_config().currency_symbol == "NGN "

    def test_update_invalidates_cache(self, config_service):
        """A read right after an update sees the update."""
        config_service.get_config()
        config_service.toggle_multi_currency(True, ADMIN)

        assert config_service.is_multi_currency_enabled() is True


class TestUpdateConfig:
    """Tests for validation and the default-currency invariant."""

    def test_default_is_appended_to_supported(self, config_service):
        config = config_service.update_config(ConfigPatch(supported_currencies=["usd", "EUR"]), ADMIN)

        assert config.supported_currencies == codes("USD", "EUR", "NGN")

    def test_new_default_is_appended(self, config_service):
        config = config_service.update_config(
            ConfigPatch(default_currency="GBP", supported_currencies=["USD"]), ADMIN
        )

        assert config.default_currency == CurrencyCode("GBP")
        assert config.supported_currencies == codes("USD", "GBP")

    def test_default_stays_supported_after_any_update(self, config_service):
        patches = [
            ConfigPatch(default_currency="USD"),
            ConfigPatch(supported_currencies=["EUR"]),
            ConfigPatch(default_currency="KES", supported_currencies=["ZAR", "ZAR"]),
            ConfigPatch(multi_currency_enabled=True),
        ]
        for patch in patches:
            config = config_service.update_config(patch, ADMIN)
            assert config.default_currency in config.supported_currencies

    def test_invalid_code_rejected_before_write(self, config_service, config_store):
        before = config_service.get_config()

        with pytest.raises(InvalidCurrencyCodeError):
            config_service.update_config(ConfigPatch(supported_currencies=["USD", "XYZ"]), ADMIN)

        assert config_service.get_config() == before
        assert config_store.list_changes(10) == []

    @pytest.mark.parametrize(
        "patch",
        [
            ConfigPatch(decimal_places=5),
            ConfigPatch(currency_position="middle"),
            ConfigPatch(decimal_separator=""),
        ],
    )
    def test_formatting_fields_validated(self, config_service, patch):
        with pytest.raises(InvalidConfigurationError):
            config_service.update_config(patch, ADMIN)

    def test_records_actor(self, config_service, clock):
        config = config_service.update_config(ConfigPatch(currency_symbol="N"), ADMIN)

        assert config.updated_by == "admin-1"
        assert config.updated_at == clock.now()


class TestChangeLog:
    """Tests for change-log tagging."""

    def test_tagged_by_most_significant_field(self, config_service):
        config_service.update_config(ConfigPatch(default_currency="USD", currency_symbol="$"), ADMIN)

        [change] = config_service.get_change_history()
        assert change.change_type is ChangeType.DEFAULT_CURRENCY
        assert change.old_value["default_currency"] == "NGN"
        assert change.new_value["default_currency"] == "USD"
        assert change.changed_by == "admin-1"
        assert change.ip_address == "10.0.0.1"

    @pytest.mark.parametrize(
        "patch, expected",
        [
            (ConfigPatch(supported_currencies=["NGN", "JPY"]), ChangeType.SUPPORTED_CURRENCIES),
            (ConfigPatch(multi_currency_enabled=True), ChangeType.MULTI_CURRENCY_TOGGLE),
            (ConfigPatch(auto_update_rates=True), ChangeType.EXCHANGE_RATE_SETTINGS),
            (ConfigPatch(decimal_places=0), ChangeType.DISPLAY_FORMAT),
        ],
    )
    def test_change_types(self, config_service, patch, expected):
        config_service.update_config(patch, ADMIN)

        assert config_service.get_change_history()[0].change_type is expected

    def test_no_change_writes_no_entry(self, config_service):
        config_service.update_config(ConfigPatch(default_currency="NGN"), ADMIN)

        assert config_service.get_change_history() == []

    def test_history_is_newest_first(self, config_service, clock):
        config_service.update_config(ConfigPatch(currency_symbol="N"), ADMIN)
        clock.advance(timedelta(minutes=5))
        config_service.toggle_multi_currency(True, ADMIN)

        history = config_service.get_change_history()
        assert [c.change_type for c in history] == [
            ChangeType.MULTI_CURRENCY_TOGGLE,
            ChangeType.DISPLAY_FORMAT,
        ]


class TestQueries:
    def test_is_currency_supported(self, config_service):
        assert config_service.is_currency_supported("usd") is True
        assert config_service.is_currency_supported("JPY") is False
        assert config_service.is_currency_supported("nope") is False

    def test_default_and_supported(self, config_service):
        assert config_service.get_default_currency() == CurrencyCode("NGN")
        assert CurrencyCode("USD") in config_service.get_supported_currencies()


class TestFormatAmount:
    """Tests for display formatting of minor units."""

    def test_default_currency(self, config_service):
        assert config_service.format_amount(1_234_550) == "₦12,345.50"

    def test_other_currency_uses_registry_symbol(self, config_service):
        assert config_service.format_amount(1_234_550, "usd") == "$12,345.50"

    def test_negative_amount(self, config_service):
        assert config_service.format_amount(-5_050) == "-₦50.50"

    def test_zero_minor_unit_currency(self, config_service):
        config_service.update_config(ConfigPatch(decimal_places=0), ADMIN)

        assert config_service.format_amount(1_500, "JPY") == "¥1,500"

    def test_custom_separators_and_position(self, config_service):
        config_service.update_config(
            ConfigPatch(decimal_separator=",", thousands_separator=".", currency_position="after"),
            ADMIN,
        )

        assert config_service.format_amount(1_234_550) == "12.345,50₦"

    def test_new_default_currency_takes_its_own_symbol(self, config_service):
        """Switching the default without a symbol formats with the new currency's sign."""
        config = config_service.update_config(ConfigPatch(default_currency="USD"), ADMIN)

        assert config.currency_symbol == "$"
        assert config_service.format_amount(123_456) == "$1,234.56"

    def test_explicit_symbol_survives_default_change(self, config_service):
        config_service.update_config(ConfigPatch(default_currency="USD", currency_symbol="US$"), ADMIN)

        assert config_service.format_amount(123_456) == "US$1,234.56"
