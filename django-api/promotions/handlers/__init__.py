from promotions.handlers.views import (
    PromoCodeDetailView,
    PromoCodeListView,
    PromotionDetailView,
    PromotionListView,
    ValidatePromoCodeView,
)

__all__ = [
    "PromoCodeDetailView",
    "PromoCodeListView",
    "PromotionDetailView",
    "PromotionListView",
    "ValidatePromoCodeView",
]
