"""Django ORM implementation of the promotion stores."""

from datetime import datetime
from uuid import uuid4

from django.db import IntegrityError, OperationalError, transaction
from django.db.models import Count, F, Q

from core.errors import ConcurrentUpdateError
from currency.domain import CurrencyCode
from promotions import models as orm
from promotions.domain import (
    CodeUsage,
    DiscountType,
    PromoCode,
    PromoCodeId,
    PromoRedemption,
    Promotion,
    PromotionId,
    PromotionStats,
    PromotionType,
    RedemptionId,
)
from promotions.domain.errors import DuplicatePromoCodeError
from promotions.stores.interfaces import PromoCodeStore, PromotionStore, RedemptionGuard


def _to_promotion(row: orm.Promotion) -> Promotion:
    return Promotion(
        id=PromotionId(row.id),
        org_id=row.org_id,
        name=row.name,
        description=row.description,
        type=PromotionType(row.type),
        discount_type=DiscountType(row.discount_type),
        discount_value=row.discount_value,
        currency=CurrencyCode(row.currency),
        max_uses=row.max_uses,
        max_uses_per_user=row.max_uses_per_user,
        starts_at=row.starts_at,
        ends_at=row.ends_at,
        event_ids=frozenset(row.event_ids),
        ticket_type_ids=frozenset(row.ticket_type_ids),
        min_order_amount=row.min_order_amount,
        redemptions=row.redemptions,
        created_at=row.created_at,
    )


def _promotion_columns(promotion: Promotion) -> dict:
    return {
        "org_id": promotion.org_id,
        "name": promotion.name,
        "description": promotion.description,
        "type": promotion.type.value,
        "discount_type": promotion.discount_type.value,
        "discount_value": promotion.discount_value,
        "currency": promotion.currency.value,
        "max_uses": promotion.max_uses,
        "max_uses_per_user": promotion.max_uses_per_user,
        "starts_at": promotion.starts_at,
        "ends_at": promotion.ends_at,
        "event_ids": sorted(promotion.event_ids),
        "ticket_type_ids": sorted(promotion.ticket_type_ids),
        "min_order_amount": promotion.min_order_amount,
    }


def _to_code(row: orm.PromoCode) -> PromoCode:
    return PromoCode(
        id=PromoCodeId(row.id),
        code=row.code,
        org_id=row.org_id,
        promotion_id=PromotionId(row.promotion_id) if row.promotion_id else None,
        kind=PromotionType(row.kind),
        percent_off=row.percent_off,
        amount_off_cents=row.amount_off_cents,
        currency=CurrencyCode(row.currency),
        max_redemptions=row.max_redemptions,
        per_user_limit=row.per_user_limit,
        starts_at=row.starts_at,
        ends_at=row.ends_at,
        event_id=row.event_id,
        created_at=row.created_at,
    )


def _code_columns(promo_code: PromoCode) -> dict:
    return {
        "code": promo_code.code,
        "org_id": promo_code.org_id,
        "promotion_id": promo_code.promotion_id.value if promo_code.promotion_id else None,
        "kind": promo_code.kind.value,
        "percent_off": promo_code.percent_off,
        "amount_off_cents": promo_code.amount_off_cents,
        "currency": promo_code.currency.value,
        "max_redemptions": promo_code.max_redemptions,
        "per_user_limit": promo_code.per_user_limit,
        "starts_at": promo_code.starts_at,
        "ends_at": promo_code.ends_at,
        "event_id": promo_code.event_id,
    }


def _to_redemption(row: orm.PromoRedemption) -> PromoRedemption:
    return PromoRedemption(
        id=RedemptionId(row.id),
        promo_id=PromoCodeId(row.promo_id) if row.promo_id else None,
        code=row.code,
        user_id=row.user_id,
        order_id=row.order_id,
        redeemed_at=row.redeemed_at,
    )


def _running(at: datetime) -> Q:
    return Q(starts_at__lte=at, ends_at__gte=at)


class DjangoPromotionStore(PromotionStore):
    """Promotion campaigns backed by the Promotion table."""

    def add_promotion(self, promotion: Promotion, created_by: str | None = None) -> Promotion:
        row = orm.Promotion.objects.create(
            id=promotion.id.value,
            redemptions=promotion.redemptions,
            created_by=created_by,
            **_promotion_columns(promotion),
        )
        return _to_promotion(row)

    def get_promotion(self, promotion_id: PromotionId) -> Promotion | None:
        row = orm.Promotion.objects.filter(pk=promotion_id.value).first()
        return _to_promotion(row) if row else None

    def save_promotion(self, promotion: Promotion) -> Promotion:
        with transaction.atomic():
            row = orm.Promotion.objects.select_for_update().get(pk=promotion.id.value)
            for name, value in _promotion_columns(promotion).items():
                setattr(row, name, value)
            row.save()
        return _to_promotion(row)

    def delete_promotion(self, promotion_id: PromotionId) -> bool:
        deleted, _ = orm.Promotion.objects.filter(pk=promotion_id.value).delete()
        return deleted > 0

    def list_promotions(self, org_id: str) -> list[Promotion]:
        rows = orm.Promotion.objects.filter(org_id=org_id).order_by("-created_at")
        return [_to_promotion(row) for row in rows]

    def stats(self, at: datetime, top: int) -> PromotionStats:
        top_codes = (
            orm.PromoCode.objects.annotate(redemption_count=Count("redemptions"))
            .order_by("-redemption_count", "code")
            .values_list("id", "code", "redemption_count")[:top]
        )
        return PromotionStats(
            total_promotions=orm.Promotion.objects.count(),
            active_promotions=orm.Promotion.objects.filter(_running(at)).count(),
            total_promo_codes=orm.PromoCode.objects.count(),
            total_redemptions=orm.PromoRedemption.objects.count(),
            top_promo_codes=tuple((PromoCodeId(pk), code, count) for pk, code, count in top_codes),
        )


class DjangoPromoCodeStore(PromoCodeStore):
    """Promo codes and redemptions backed by the PromoCode and PromoRedemption tables."""

    def add_code(self, promo_code: PromoCode, created_by: str | None = None) -> PromoCode:
        try:
            with transaction.atomic():
                row = orm.PromoCode.objects.create(
                    id=promo_code.id.value, created_by=created_by, **_code_columns(promo_code)
                )
        except IntegrityError as exc:
            raise DuplicatePromoCodeError(promo_code.code) from exc
        return _to_code(row)

    def get_code(self, promo_code_id: PromoCodeId) -> PromoCode | None:
        row = orm.PromoCode.objects.filter(pk=promo_code_id.value).first()
        return _to_code(row) if row else None

    def find_codes(self, code: str, org_id: str | None = None) -> list[PromoCode]:
        rows = orm.PromoCode.objects.filter(code=code)
        if org_id is not None:
            rows = rows.filter(org_id=org_id)
        return [_to_code(row) for row in rows]

    def code_exists(self, org_id: str, code: str, exclude: PromoCodeId | None = None) -> bool:
        rows = orm.PromoCode.objects.filter(org_id=org_id, code=code)
        if exclude is not None:
            rows = rows.exclude(pk=exclude.value)
        return rows.exists()

    def save_code(self, promo_code: PromoCode) -> PromoCode:
        try:
            with transaction.atomic():
                row = orm.PromoCode.objects.select_for_update().get(pk=promo_code.id.value)
                for name, value in _code_columns(promo_code).items():
                    setattr(row, name, value)
                row.save()
        except IntegrityError as exc:
            raise DuplicatePromoCodeError(promo_code.code) from exc
        return _to_code(row)

    def delete_code(self, promo_code_id: PromoCodeId) -> bool:
        deleted, _ = orm.PromoCode.objects.filter(pk=promo_code_id.value).delete()
        return deleted > 0

    def list_codes(
        self, org_id: str, promotion_id: PromotionId | None = None
    ) -> list[tuple[PromoCode, int]]:
        rows = orm.PromoCode.objects.filter(org_id=org_id)
        if promotion_id is not None:
            rows = rows.filter(promotion_id=promotion_id.value)
        rows = rows.annotate(redemption_count=Count("redemptions")).order_by("-created_at")
        return [(_to_code(row), row.redemption_count) for row in rows]

    def usage(self, promo_code_id: PromoCodeId, user_id: str | None = None) -> CodeUsage:
        return _usage(promo_code_id.value, user_id)

    def list_redemptions(self, promo_code_id: PromoCodeId) -> list[PromoRedemption]:
        rows = orm.PromoRedemption.objects.filter(promo_id=promo_code_id.value)
        return [_to_redemption(row) for row in rows]

    def redeem(
        self,
        promo_code_id: PromoCodeId,
        user_id: str,
        order_id: str,
        redeemed_at: datetime,
        guard: RedemptionGuard,
    ) -> tuple[PromoRedemption, bool] | None:
        try:
            with transaction.atomic():
                row = orm.PromoCode.objects.select_for_update().filter(pk=promo_code_id.value).first()
                if row is None:
                    return None
                existing = orm.PromoRedemption.objects.filter(promo=row, order_id=order_id).first()
                if existing is not None:
                    return _to_redemption(existing), False

                guard(_to_code(row), _usage(row.pk, user_id))
                redemption = orm.PromoRedemption.objects.create(
                    id=uuid4(),
                    promo=row,
                    code=row.code,
                    user_id=user_id,
                    order_id=order_id,
                    redeemed_at=redeemed_at,
                )
                if row.promotion_id:
                    orm.Promotion.objects.filter(pk=row.promotion_id).update(
                        redemptions=F("redemptions") + 1
                    )
        except (IntegrityError, OperationalError) as exc:
            # A concurrent request for the same order won the insert, or the row lock timed out.
            raise ConcurrentUpdateError(f"promo_redemption:{promo_code_id.value}:{order_id}") from exc
        return _to_redemption(redemption), True


def _usage(promo_pk, user_id: str | None) -> CodeUsage:
    redemptions = orm.PromoRedemption.objects.filter(promo_id=promo_pk)
    by_user = redemptions.filter(user_id=user_id).count() if user_id else 0
    return CodeUsage(total=redemptions.count(), by_user=by_user)
