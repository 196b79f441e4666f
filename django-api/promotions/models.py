"""Django ORM models (persistence layer).

These models handle database concerns. Domain logic lives in domain/models.py.
"""

import uuid

from django.db import models
from django.db.models import F, Q


class PromotionTypeChoices(models.TextChoices):
    DISCOUNT = "discount", "Discount"
    ACCESS = "access", "Access"


class DiscountTypeChoices(models.TextChoices):
    PERCENTAGE = "percentage", "Percentage"
    FIXED = "fixed", "Fixed amount"


class Promotion(models.Model):
    """Persistence model for promotion campaigns."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    org_id = models.CharField(max_length=64, db_index=True)
    name = models.CharField(max_length=255)
    description = models.TextField(blank=True, default="")
    type = models.CharField(
        max_length=10,
        choices=PromotionTypeChoices.choices,
        default=PromotionTypeChoices.DISCOUNT,
    )
    discount_type = models.CharField(max_length=10, choices=DiscountTypeChoices.choices)
    discount_value = models.DecimalField(max_digits=14, decimal_places=2)
    currency = models.CharField(max_length=3)
    max_uses = models.PositiveIntegerField(default=0)
    max_uses_per_user = models.PositiveIntegerField(null=True, blank=True)
    starts_at = models.DateTimeField()
    ends_at = models.DateTimeField()
    event_ids = models.JSONField(default=list, blank=True)
    ticket_type_ids = models.JSONField(default=list, blank=True)
    min_order_amount = models.PositiveBigIntegerField(null=True, blank=True)
    redemptions = models.PositiveIntegerField(default=0)
    created_by = models.CharField(max_length=64, null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["org_id", "-created_at"], name="promotion_org_created_idx"),
        ]
        constraints = [
            models.CheckConstraint(condition=Q(starts_at__lt=F("ends_at")), name="promotion_window_ordered"),
            models.CheckConstraint(condition=Q(discount_value__gte=0), name="promotion_discount_non_negative"),
        ]

    def __str__(self) -> str:
        return self.name


class PromoCode(models.Model):
    """Persistence model for promo codes. Codes are unique per organization."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    code = models.CharField(max_length=50)
    org_id = models.CharField(max_length=64)
    promotion = models.ForeignKey(
        Promotion,
        on_delete=models.CASCADE,
        related_name="promo_codes",
        null=True,
        blank=True,
    )
    kind = models.CharField(
        max_length=10,
        choices=PromotionTypeChoices.choices,
        default=PromotionTypeChoices.DISCOUNT,
    )
    percent_off = models.DecimalField(max_digits=5, decimal_places=2, null=True, blank=True)
    amount_off_cents = models.PositiveBigIntegerField(null=True, blank=True)
    currency = models.CharField(max_length=3)
    max_redemptions = models.PositiveIntegerField(null=True, blank=True)
    per_user_limit = models.PositiveIntegerField(null=True, blank=True)
    starts_at = models.DateTimeField(null=True, blank=True)
    ends_at = models.DateTimeField(null=True, blank=True)
    event_id = models.CharField(max_length=64, null=True, blank=True)
    created_by = models.CharField(max_length=64, null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["code"], name="promo_code_code_idx"),
        ]
        constraints = [
            models.UniqueConstraint(fields=["org_id", "code"], name="promo_code_unique_per_org"),
            models.CheckConstraint(
                condition=Q(percent_off__isnull=True) | Q(amount_off_cents__isnull=True),
                name="promo_code_single_discount",
            ),
        ]

    def __str__(self) -> str:
        return self.code


class PromoRedemption(models.Model):
    """One row per successful redemption. Retained when the code is deleted."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    promo = models.ForeignKey(
        PromoCode,
        on_delete=models.SET_NULL,
        related_name="redemptions",
        null=True,
    )
    code = models.CharField(max_length=50)
    user_id = models.CharField(max_length=64)
    order_id = models.CharField(max_length=64)
    redeemed_at = models.DateTimeField()

    class Meta:
        ordering = ["-redeemed_at"]
        indexes = [
            models.Index(fields=["promo", "user_id"], name="redemption_promo_user_idx"),
        ]
        constraints = [
            models.UniqueConstraint(fields=["promo", "order_id"], name="redemption_once_per_order"),
        ]

    def __str__(self) -> str:
        return f"{self.code} on {self.order_id}"
