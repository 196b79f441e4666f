"""Serializers for transforming currency domain models to API responses."""

from rest_framework import serializers

from currency.domain import RateSource
from currency.domain.models import RATE_DECIMAL_PLACES


class CurrencyConfigSerializer(serializers.Serializer):
    """Serializer for the CurrencyConfig domain model."""

    default_currency = serializers.CharField()
    supported_currencies = serializers.ListField(child=serializers.CharField())
    multi_currency_enabled = serializers.BooleanField()
    currency_symbol = serializers.CharField()
    currency_position = serializers.CharField(source="currency_position.value")
    decimal_places = serializers.IntegerField()
    decimal_separator = serializers.CharField()
    thousands_separator = serializers.CharField()
    exchange_rates_enabled = serializers.BooleanField()
    allow_organizer_currency = serializers.BooleanField()
    auto_update_rates = serializers.BooleanField()
    update_frequency = serializers.CharField()
    updated_by = serializers.CharField(allow_null=True)
    updated_at = serializers.DateTimeField(allow_null=True)


class ConfigPatchSerializer(serializers.Serializer):
    """Input for PATCH /api/currency/config. Every field is optional."""

    default_currency = serializers.CharField(max_length=3, required=False)
    supported_currencies = serializers.ListField(
        child=serializers.CharField(max_length=3), allow_empty=False, required=False
    )
    multi_currency_enabled = serializers.BooleanField(required=False)
    currency_symbol = serializers.CharField(max_length=8, required=False)
    currency_position = serializers.CharField(required=False)
    decimal_places = serializers.IntegerField(required=False)
    decimal_separator = serializers.CharField(max_length=3, required=False)
    thousands_separator = serializers.CharField(max_length=3, required=False, allow_blank=True, trim_whitespace=False)
    exchange_rates_enabled = serializers.BooleanField(required=False)
    allow_organizer_currency = serializers.BooleanField(required=False)
    auto_update_rates = serializers.BooleanField(required=False)
    update_frequency = serializers.CharField(max_length=20, required=False)


class CurrencyInfoSerializer(serializers.Serializer):
    code = serializers.CharField()
    symbol = serializers.CharField()
    name = serializers.CharField()
    minor_unit = serializers.IntegerField()


class ExchangeRateSerializer(serializers.Serializer):
    """Serializer for the ExchangeRate domain model."""

    id = serializers.UUIDField(source="id.value")
    from_currency = serializers.CharField()
    to_currency = serializers.CharField()
    rate = serializers.DecimalField(max_digits=28, decimal_places=RATE_DECIMAL_PLACES)
    inverse_rate = serializers.DecimalField(max_digits=28, decimal_places=RATE_DECIMAL_PLACES)
    source = serializers.CharField(source="source.value")
    provider = serializers.CharField(allow_null=True)
    valid_from = serializers.DateTimeField()
    valid_until = serializers.DateTimeField(allow_null=True)
    is_active = serializers.BooleanField()


class AddExchangeRateSerializer(serializers.Serializer):
    from_currency = serializers.CharField(max_length=3)
    to_currency = serializers.CharField(max_length=3)
    rate = serializers.DecimalField(max_digits=28, decimal_places=RATE_DECIMAL_PLACES)
    source = serializers.ChoiceField(choices=[s.value for s in RateSource], default=RateSource.MANUAL.value)
    provider = serializers.CharField(max_length=100, required=False, allow_null=True)
    valid_from = serializers.DateTimeField(required=False)
    valid_until = serializers.DateTimeField(required=False, allow_null=True)


class ConvertQuerySerializer(serializers.Serializer):
    amount = serializers.IntegerField()
    from_currency = serializers.CharField(max_length=3)
    to_currency = serializers.CharField(max_length=3)


class CurrencyChangeSerializer(serializers.Serializer):
    change_type = serializers.CharField(source="change_type.value")
    old_value = serializers.JSONField()
    new_value = serializers.JSONField()
    changed_by = serializers.CharField()
    ip_address = serializers.CharField(allow_null=True)
    user_agent = serializers.CharField(allow_null=True)
    created_at = serializers.DateTimeField()
