from django.urls import path

from promotions.handlers import (
    PromoCodeDetailView,
    PromoCodeListView,
    PromotionDetailView,
    PromotionListView,
    ValidatePromoCodeView,
)

urlpatterns = [
    path("orgs/<str:org_id>/promotions", PromotionListView.as_view(), name="promotion-list"),
    path(
        "orgs/<str:org_id>/promotions/<str:promotion_id>",
        PromotionDetailView.as_view(),
        name="promotion-detail",
    ),
    path("orgs/<str:org_id>/promo-codes", PromoCodeListView.as_view(), name="promo-code-list"),
    path(
        "orgs/<str:org_id>/promo-codes/<str:promo_code_id>",
        PromoCodeDetailView.as_view(),
        name="promo-code-detail",
    ),
    path("promo-codes/validate", ValidatePromoCodeView.as_view(), name="promo-code-validate"),
]
