"""Service wiring for the promotions app."""

from currency.services import build_config_service, build_exchange_rate_service
from promotions.services.promo_code_service import PromoCodeService
from promotions.services.promotion_service import PromotionService


def build_promotion_service() -> PromotionService:
    from promotions.stores.django_store import DjangoPromotionStore

    return PromotionService(DjangoPromotionStore(), build_config_service())


def build_promo_code_service() -> PromoCodeService:
    from promotions.stores.django_store import DjangoPromoCodeStore, DjangoPromotionStore

    return PromoCodeService(
        DjangoPromoCodeStore(),
        DjangoPromotionStore(),
        build_config_service(),
        build_exchange_rate_service(),
    )


__all__ = [
    "PromoCodeService",
    "PromotionService",
    "build_promo_code_service",
    "build_promotion_service",
]
