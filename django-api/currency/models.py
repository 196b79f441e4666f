"""Django ORM models (persistence layer).

These models handle database concerns. Domain logic lives in domain/models.py.
"""

import uuid

from django.db import models
from django.db.models import F, Q

from currency.domain.models import RATE_DECIMAL_PLACES

SINGLETON_ID = 1


class CurrencyPositionChoices(models.TextChoices):
    BEFORE = "before", "Before amount"
    AFTER = "after", "After amount"


class RateSourceChoices(models.TextChoices):
    MANUAL = "manual", "Manual"
    API = "api", "API import"
    SYSTEM = "system", "System"


class CurrencyConfiguration(models.Model):
    """Platform-wide currency settings. Exactly one row, id=1."""

    id = models.PositiveSmallIntegerField(primary_key=True, default=SINGLETON_ID, editable=False)
    default_currency = models.CharField(max_length=3)
    supported_currencies = models.JSONField(default=list)
    multi_currency_enabled = models.BooleanField(default=False)
    currency_symbol = models.CharField(max_length=8)
    currency_position = models.CharField(
        max_length=6,
        choices=CurrencyPositionChoices.choices,
        default=CurrencyPositionChoices.BEFORE,
    )
    decimal_places = models.PositiveSmallIntegerField(default=2)
    decimal_separator = models.CharField(max_length=3, default=".")
    thousands_separator = models.CharField(max_length=3, default=",", blank=True)
    exchange_rates_enabled = models.BooleanField(default=False)
    allow_organizer_currency = models.BooleanField(default=False)
    auto_update_rates = models.BooleanField(default=False)
    update_frequency = models.CharField(max_length=20, default="daily")
    updated_by = models.CharField(max_length=64, null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "currency configuration"
        verbose_name_plural = "currency configuration"

    def __str__(self) -> str:
        return f"Currency configuration ({self.default_currency})"


class ExchangeRate(models.Model):
    """Persistence model for directional exchange rates. Rows are never deleted."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    from_currency = models.CharField(max_length=3)
    to_currency = models.CharField(max_length=3)
    rate = models.DecimalField(max_digits=28, decimal_places=RATE_DECIMAL_PLACES)
    inverse_rate = models.DecimalField(max_digits=28, decimal_places=RATE_DECIMAL_PLACES)
    source = models.CharField(
        max_length=10,
        choices=RateSourceChoices.choices,
        default=RateSourceChoices.MANUAL,
    )
    provider = models.CharField(max_length=100, null=True, blank=True)
    valid_from = models.DateTimeField()
    valid_until = models.DateTimeField(null=True, blank=True)
    is_active = models.BooleanField(default=True)
    created_by = models.CharField(max_length=64, null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["from_currency", "to_currency", "-valid_from"]
        indexes = [
            models.Index(fields=["from_currency", "to_currency", "is_active"], name="exrate_pair_active_idx"),
            models.Index(fields=["valid_from"], name="exrate_valid_from_idx"),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["from_currency", "to_currency"],
                condition=Q(is_active=True),
                name="one_active_rate_per_pair",
            ),
            models.CheckConstraint(
                condition=~Q(from_currency=F("to_currency")),
                name="rate_pair_distinct",
            ),
            models.CheckConstraint(condition=Q(rate__gt=0), name="rate_positive"),
        ]

    def __str__(self) -> str:
        return f"1 {self.from_currency} = {self.rate} {self.to_currency}"


class CurrencyChangeLog(models.Model):
    """Append-only record of configuration changes."""

    id = models.BigAutoField(primary_key=True)
    change_type = models.CharField(max_length=40)
    old_value = models.JSONField()
    new_value = models.JSONField()
    changed_by = models.CharField(max_length=64)
    ip_address = models.GenericIPAddressField(null=True, blank=True)
    user_agent = models.TextField(null=True, blank=True)
    created_at = models.DateTimeField(db_index=True)

    class Meta:
        ordering = ["-created_at", "-id"]

    def __str__(self) -> str:
        return f"{self.change_type} by {self.changed_by}"
