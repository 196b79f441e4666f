"""Serializers for transforming promotion domain models to API responses."""

from rest_framework import serializers

from promotions.domain import DiscountType, PromotionType


class PromotionSerializer(serializers.Serializer):
    """Serializer for the Promotion domain model."""

    id = serializers.UUIDField(source="id.value")
    org_id = serializers.CharField()
    name = serializers.CharField()
    description = serializers.CharField()
    type = serializers.CharField(source="type.value")
    discount_type = serializers.CharField(source="discount_type.value")
    discount_value = serializers.DecimalField(max_digits=14, decimal_places=2)
    currency = serializers.CharField()
    max_uses = serializers.IntegerField()
    max_uses_per_user = serializers.IntegerField(allow_null=True)
    starts_at = serializers.DateTimeField()
    ends_at = serializers.DateTimeField()
    event_ids = serializers.SerializerMethodField()
    ticket_type_ids = serializers.SerializerMethodField()
    min_order_amount = serializers.IntegerField(allow_null=True)
    redemptions = serializers.IntegerField()
    created_at = serializers.DateTimeField()

    def get_event_ids(self, promotion) -> list[str]:
        return sorted(promotion.event_ids)

    def get_ticket_type_ids(self, promotion) -> list[str]:
        return sorted(promotion.ticket_type_ids)


class PromoCodeSerializer(serializers.Serializer):
    """Serializer for the PromoCode domain model."""

    id = serializers.UUIDField(source="id.value")
    code = serializers.CharField()
    org_id = serializers.CharField()
    promotion_id = serializers.SerializerMethodField()
    kind = serializers.CharField(source="kind.value")
    percent_off = serializers.DecimalField(max_digits=5, decimal_places=2, allow_null=True)
    amount_off_cents = serializers.IntegerField(allow_null=True)
    currency = serializers.CharField()
    max_redemptions = serializers.IntegerField(allow_null=True)
    per_user_limit = serializers.IntegerField(allow_null=True)
    starts_at = serializers.DateTimeField(allow_null=True)
    ends_at = serializers.DateTimeField(allow_null=True)
    event_id = serializers.CharField(allow_null=True)
    created_at = serializers.DateTimeField()

    def get_promotion_id(self, promo_code) -> str | None:
        return str(promo_code.promotion_id.value) if promo_code.promotion_id else None


class PromoCodeListingSerializer(serializers.Serializer):
    def to_representation(self, listing):
        return {
            **PromoCodeSerializer(listing.promo_code).data,
            "redemption_count": listing.redemption_count,
            "status": listing.status.value,
        }


class DiscountQuoteSerializer(serializers.Serializer):
    def to_representation(self, quote):
        code = quote.promo_code
        return {
            "promo_code": {
                "id": str(code.id.value),
                "code": code.code,
                "kind": code.kind.value,
                "percent_off": str(code.percent_off) if code.percent_off is not None else None,
                "amount_off_cents": code.amount_off_cents,
            },
            "discount_amount": quote.discount_amount,
            "currency": str(quote.discount.currency),
            "is_valid": quote.is_valid,
        }


class PromotionCreateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    description = serializers.CharField(required=False, allow_blank=True, default="")
    type = serializers.ChoiceField(choices=[t.value for t in PromotionType], default=PromotionType.DISCOUNT.value)
    discount_type = serializers.ChoiceField(choices=[t.value for t in DiscountType])
    discount_value = serializers.DecimalField(max_digits=14, decimal_places=2, min_value=0)
    currency = serializers.CharField(max_length=3, required=False)
    max_uses = serializers.IntegerField(min_value=0, default=0)
    max_uses_per_user = serializers.IntegerField(min_value=1, required=False, allow_null=True)
    starts_at = serializers.DateTimeField()
    ends_at = serializers.DateTimeField()
    event_ids = serializers.ListField(child=serializers.CharField(max_length=64), required=False)
    ticket_type_ids = serializers.ListField(child=serializers.CharField(max_length=64), required=False)
    min_order_amount = serializers.IntegerField(min_value=0, required=False, allow_null=True)


class PromotionPatchSerializer(serializers.Serializer):
    """Input for PATCH. Every field is optional."""

    name = serializers.CharField(max_length=255, required=False)
    description = serializers.CharField(required=False, allow_blank=True)
    discount_type = serializers.ChoiceField(choices=[t.value for t in DiscountType], required=False)
    discount_value = serializers.DecimalField(max_digits=14, decimal_places=2, min_value=0, required=False)
    max_uses = serializers.IntegerField(min_value=0, required=False)
    max_uses_per_user = serializers.IntegerField(min_value=1, required=False, allow_null=True)
    starts_at = serializers.DateTimeField(required=False)
    ends_at = serializers.DateTimeField(required=False)
    event_ids = serializers.ListField(child=serializers.CharField(max_length=64), required=False)
    ticket_type_ids = serializers.ListField(child=serializers.CharField(max_length=64), required=False)
    min_order_amount = serializers.IntegerField(min_value=0, required=False, allow_null=True)


class PromotionListQuerySerializer(serializers.Serializer):
    active = serializers.BooleanField(required=False, allow_null=True, default=None)


class PromoCodeCreateSerializer(serializers.Serializer):
    code = serializers.CharField(max_length=50)
    promotion_id = serializers.UUIDField(required=False, allow_null=True)
    kind = serializers.ChoiceField(choices=[t.value for t in PromotionType], required=False)
    percent_off = serializers.DecimalField(max_digits=5, decimal_places=2, min_value=0, max_value=100, required=False)
    amount_off_cents = serializers.IntegerField(min_value=0, required=False)
    currency = serializers.CharField(max_length=3, required=False)
    max_redemptions = serializers.IntegerField(min_value=1, required=False, allow_null=True)
    per_user_limit = serializers.IntegerField(min_value=1, required=False, allow_null=True)
    starts_at = serializers.DateTimeField(required=False, allow_null=True)
    ends_at = serializers.DateTimeField(required=False, allow_null=True)
    event_id = serializers.CharField(max_length=64, required=False, allow_null=True)


class PromoCodePatchSerializer(serializers.Serializer):
    """Input for PATCH. Discount terms cannot be changed after creation."""

    code = serializers.CharField(max_length=50, required=False)
    max_redemptions = serializers.IntegerField(min_value=1, required=False, allow_null=True)
    per_user_limit = serializers.IntegerField(min_value=1, required=False, allow_null=True)
    starts_at = serializers.DateTimeField(required=False, allow_null=True)
    ends_at = serializers.DateTimeField(required=False, allow_null=True)
    event_id = serializers.CharField(max_length=64, required=False, allow_null=True)


class PromoCodeListQuerySerializer(serializers.Serializer):
    promotion_id = serializers.UUIDField(required=False)


class ValidatePromoCodeSerializer(serializers.Serializer):
    code = serializers.CharField(max_length=50)
    order_amount = serializers.IntegerField(min_value=0)
    order_currency = serializers.CharField(max_length=3, required=False)
    event_id = serializers.CharField(max_length=64, required=False)
    org_id = serializers.CharField(max_length=64, required=False)
