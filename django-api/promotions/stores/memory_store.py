"""In-process implementation of the promotion stores.

One object backs both interfaces so that cascades and the promotion
counter stay consistent. A single lock serialises every write, which is
what makes the redemption caps hold across threads.
"""

import threading
from collections import Counter
from dataclasses import replace
from datetime import datetime
from uuid import uuid4

from promotions.domain import (
    CodeUsage,
    PromoCode,
    PromoCodeId,
    PromoRedemption,
    Promotion,
    PromotionId,
    PromotionStats,
    RedemptionId,
)
from promotions.domain.errors import DuplicatePromoCodeError
from promotions.stores.interfaces import PromoCodeStore, PromotionStore, RedemptionGuard


class InMemoryPromotionStore(PromotionStore, PromoCodeStore):
    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._promotions: dict[PromotionId, Promotion] = {}
        self._codes: dict[PromoCodeId, PromoCode] = {}
        self._redemptions: list[PromoRedemption] = []

    # Promotions

    def add_promotion(self, promotion: Promotion, created_by: str | None = None) -> Promotion:
        with self._lock:
            self._promotions[promotion.id] = promotion
            return promotion

    def get_promotion(self, promotion_id: PromotionId) -> Promotion | None:
        return self._promotions.get(promotion_id)

    def save_promotion(self, promotion: Promotion) -> Promotion:
        with self._lock:
            stored = self._promotions[promotion.id]
            saved = replace(promotion, redemptions=stored.redemptions, created_at=stored.created_at)
            self._promotions[promotion.id] = saved
            return saved

    def delete_promotion(self, promotion_id: PromotionId) -> bool:
        with self._lock:
            if self._promotions.pop(promotion_id, None) is None:
                return False
            for code in [c for c in self._codes.values() if c.promotion_id == promotion_id]:
                self._drop_code(code.id)
            return True

    def list_promotions(self, org_id: str) -> list[Promotion]:
        rows = [p for p in self._promotions.values() if p.org_id == org_id]
        return sorted(rows, key=lambda p: p.created_at, reverse=True)

    def stats(self, at: datetime, top: int) -> PromotionStats:
        with self._lock:
            counts = Counter(r.promo_id for r in self._redemptions if r.promo_id is not None)
            ranked = sorted(self._codes.values(), key=lambda c: (-counts[c.id], c.code))[:top]
            return PromotionStats(
                total_promotions=len(self._promotions),
                active_promotions=sum(1 for p in self._promotions.values() if p.is_running_at(at)),
                total_promo_codes=len(self._codes),
                total_redemptions=len(self._redemptions),
                top_promo_codes=tuple((c.id, c.code, counts[c.id]) for c in ranked),
            )

    # Promo codes

    def add_code(self, promo_code: PromoCode, created_by: str | None = None) -> PromoCode:
        with self._lock:
            if self.code_exists(promo_code.org_id, promo_code.code):
                raise DuplicatePromoCodeError(promo_code.code)
            self._codes[promo_code.id] = promo_code
            return promo_code

    def get_code(self, promo_code_id: PromoCodeId) -> PromoCode | None:
        return self._codes.get(promo_code_id)

    def find_codes(self, code: str, org_id: str | None = None) -> list[PromoCode]:
        return [
            c
            for c in list(self._codes.values())
            if c.code == code and (org_id is None or c.org_id == org_id)
        ]

    def code_exists(self, org_id: str, code: str, exclude: PromoCodeId | None = None) -> bool:
        return any(
            c.org_id == org_id and c.code == code and c.id != exclude
            for c in list(self._codes.values())
        )

    def save_code(self, promo_code: PromoCode) -> PromoCode:
        with self._lock:
            if self.code_exists(promo_code.org_id, promo_code.code, exclude=promo_code.id):
                raise DuplicatePromoCodeError(promo_code.code)
            self._codes[promo_code.id] = promo_code
            return promo_code

    def delete_code(self, promo_code_id: PromoCodeId) -> bool:
        with self._lock:
            if promo_code_id not in self._codes:
                return False
            self._drop_code(promo_code_id)
            return True

    def list_codes(
        self, org_id: str, promotion_id: PromotionId | None = None
    ) -> list[tuple[PromoCode, int]]:
        with self._lock:
            rows = [
                c
                for c in self._codes.values()
                if c.org_id == org_id and (promotion_id is None or c.promotion_id == promotion_id)
            ]
            rows.sort(key=lambda c: c.created_at, reverse=True)
            return [(c, self._usage(c.id, None).total) for c in rows]

    def usage(self, promo_code_id: PromoCodeId, user_id: str | None = None) -> CodeUsage:
        with self._lock:
            return self._usage(promo_code_id, user_id)

    def list_redemptions(self, promo_code_id: PromoCodeId) -> list[PromoRedemption]:
        with self._lock:
            rows = [r for r in self._redemptions if r.promo_id == promo_code_id]
        return sorted(rows, key=lambda r: r.redeemed_at, reverse=True)

    def redeem(
        self,
        promo_code_id: PromoCodeId,
        user_id: str,
        order_id: str,
        redeemed_at: datetime,
        guard: RedemptionGuard,
    ) -> tuple[PromoRedemption, bool] | None:
        with self._lock:
            code = self._codes.get(promo_code_id)
            if code is None:
                return None
            for existing in self._redemptions:
                if existing.promo_id == promo_code_id and existing.order_id == order_id:
                    return existing, False

            guard(code, self._usage(promo_code_id, user_id))
            redemption = PromoRedemption(
                id=RedemptionId(uuid4()),
                promo_id=promo_code_id,
                code=code.code,
                user_id=user_id,
                order_id=order_id,
                redeemed_at=redeemed_at,
            )
            self._redemptions.append(redemption)
            promotion = self._promotions.get(code.promotion_id) if code.promotion_id else None
            if promotion is not None:
                self._promotions[promotion.id] = replace(promotion, redemptions=promotion.redemptions + 1)
            return redemption, True

    def _usage(self, promo_code_id: PromoCodeId, user_id: str | None) -> CodeUsage:
        rows = [r for r in self._redemptions if r.promo_id == promo_code_id]
        by_user = sum(1 for r in rows if r.user_id == user_id) if user_id else 0
        return CodeUsage(total=len(rows), by_user=by_user)

    def _drop_code(self, promo_code_id: PromoCodeId) -> None:
        del self._codes[promo_code_id]
        self._redemptions = [
            replace(r, promo_id=None) if r.promo_id == promo_code_id else r for r in self._redemptions
        ]
