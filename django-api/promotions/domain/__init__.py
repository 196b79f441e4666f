from promotions.domain.models import (
    CodeStatus,
    CodeUsage,
    DiscountQuote,
    DiscountType,
    PromoCode,
    PromoCodeDraft,
    PromoCodeListing,
    PromoCodePatch,
    PromoRedemption,
    Promotion,
    PromotionDraft,
    PromotionPatch,
    PromotionStats,
    PromotionType,
    UNSET,
    ValidationRequest,
)
from promotions.domain.value_objects import PromoCodeId, PromotionId, RedemptionId, normalize_code

__all__ = [
    "CodeStatus",
    "CodeUsage",
    "DiscountQuote",
    "DiscountType",
    "PromoCode",
    "PromoCodeDraft",
    "PromoCodeListing",
    "PromoCodePatch",
    "PromoRedemption",
    "Promotion",
    "PromotionDraft",
    "PromotionPatch",
    "PromotionStats",
    "PromotionType",
    "UNSET",
    "ValidationRequest",
    "PromoCodeId",
    "PromotionId",
    "RedemptionId",
    "normalize_code",
]
