"""Promo code service - validation and redemption live here.

Validation is read-only and safe to call any number of times while a cart
changes. Redemption is the only write on the checkout path; it is
idempotent per order and re-counts the caps under the store's lock.
"""

import logging
import re
from dataclasses import replace
from datetime import datetime
from uuid import uuid4

from django.conf import settings

from core.audit import AuditSink, LoggingAuditSink
from core.clock import Clock, SystemClock
from currency.domain import CurrencyCode, Money
from currency.services.config_service import CurrencyConfigService
from currency.services.exchange_rate_service import ExchangeRateService
from promotions.domain import (
    CodeUsage,
    DiscountQuote,
    DiscountType,
    PromoCode,
    PromoCodeDraft,
    PromoCodeId,
    PromoCodeListing,
    PromoCodePatch,
    PromoRedemption,
    Promotion,
    PromotionType,
    ValidationRequest,
    normalize_code,
)
from promotions.domain.discounts import compute_discount, derive_status, validate_fixed_amount, validate_percent
from promotions.domain.errors import (
    BelowMinimumOrderAmountError,
    CodeNotFoundError,
    DuplicatePromoCodeError,
    ExpiredError,
    InvalidDiscountError,
    InvalidIdError,
    InvalidOrderAmountError,
    InvalidPromoCodeError,
    NotApplicableToEventError,
    NotYetActiveError,
    PromoCodeNotFoundError,
    PromotionNotFoundError,
    UsageLimitReachedError,
    UserUsageLimitReachedError,
)
from promotions.services.promotion_service import ensure_window, parse_promotion_id
from promotions.stores.interfaces import PromoCodeStore, PromotionStore

logger = logging.getLogger(__name__)

CODE_PATTERN = re.compile(r"^[A-Z0-9_-]{3,50}$")


def parse_code(raw: str) -> str:
    code = normalize_code(raw)
    if not CODE_PATTERN.match(code):
        raise InvalidPromoCodeError("Code must be 3-50 letters, digits, '-' or '_'")
    return code


def parse_promo_code_id(raw: str) -> PromoCodeId:
    try:
        return PromoCodeId.from_string(str(raw))
    except ValueError:
        raise InvalidIdError() from None


def check_window(code: str, starts_at: datetime | None, ends_at: datetime | None, at: datetime) -> None:
    if starts_at is not None and at < starts_at:
        raise NotYetActiveError(code)
    if ends_at is not None and at > ends_at:
        raise ExpiredError(code)


def check_caps(code: PromoCode, usage: CodeUsage) -> None:
    """Guard used by both validation and redemption."""
    if code.max_redemptions is not None and usage.total >= code.max_redemptions:
        raise UsageLimitReachedError(code.code)
    if code.per_user_limit is not None and usage.by_user >= code.per_user_limit:
        raise UserUsageLimitReachedError(code.code)


class PromoCodeService:
    """Service for promo code administration, validation and redemption."""

    def __init__(
        self,
        store: PromoCodeStore,
        promotions: PromotionStore,
        config: CurrencyConfigService,
        rates: ExchangeRateService,
        clock: Clock | None = None,
        audit: AuditSink | None = None,
        enforce_min_order_amount: bool | None = None,
    ) -> None:
        self._store = store
        self._promotions = promotions
        self._config = config
        self._rates = rates
        self._clock = clock or SystemClock()
        self._audit = audit or LoggingAuditSink()
        if enforce_min_order_amount is None:
            enforce_min_order_amount = settings.PROMOTIONS_ENFORCE_MIN_ORDER_AMOUNT
        self._enforce_min_order_amount = enforce_min_order_amount

    # Administration

    def create_promo_code(self, org_id: str, draft: PromoCodeDraft, actor_id: str) -> PromoCode:
        """Create a code in ``org_id``.

        A code linked to a promotion copies that promotion's kind, discount
        and currency. A standalone code carries its own terms.

        Raises:
            InvalidPromoCodeError: If the code is malformed.
            DuplicatePromoCodeError: If the code already exists in the organization.
            PromotionNotFoundError: If the linked promotion is missing or owned elsewhere.
            InvalidDiscountError: If the discount terms are invalid.
            InvalidWindowError: If both bounds are set and do not form a window.
        """
        code = parse_code(draft.code)
        if self._store.code_exists(org_id, code):
            raise DuplicatePromoCodeError(code)
        ensure_window(draft.starts_at, draft.ends_at)

        if draft.promotion_id:
            if draft.percent_off is not None or draft.amount_off_cents is not None:
                raise InvalidDiscountError("A code linked to a promotion takes its discount from the promotion")
            promotion = self._owned_promotion(draft.promotion_id, org_id)
            terms = self._terms_from_promotion(promotion)
        else:
            terms = self._standalone_terms(draft)

        promo_code = PromoCode(
            id=PromoCodeId(uuid4()),
            code=code,
            org_id=org_id,
            max_redemptions=draft.max_redemptions,
            per_user_limit=draft.per_user_limit,
            starts_at=draft.starts_at,
            ends_at=draft.ends_at,
            event_id=draft.event_id,
            created_at=self._clock.now(),
            **terms,
        )
        promo_code = self._store.add_code(promo_code, created_by=actor_id)

        logger.info("Promo code %s created for org %s", code, org_id)
        self._audit.record(actor_id, "promo_code.created", str(promo_code.id.value), {"code": code, "org_id": org_id})
        return promo_code

    def update_promo_code(
        self, promo_code_id: str, org_id: str, patch: PromoCodePatch, actor_id: str
    ) -> PromoCode:
        """Apply ``patch``. Discount terms are fixed at creation.

        Raises:
            InvalidIdError: If the promo_code_id is not a valid UUID.
            PromoCodeNotFoundError: If the code does not exist in the organization.
            DuplicatePromoCodeError: If a rename collides with another code.
            InvalidWindowError: If the merged bounds do not form a window.
        """
        current = self.get_promo_code(promo_code_id, org_id)
        changes = patch.provided()
        if "code" in changes:
            changes["code"] = parse_code(changes["code"])
            if self._store.code_exists(org_id, changes["code"], exclude=current.id):
                raise DuplicatePromoCodeError(changes["code"])
        merged = replace(current, **changes)
        ensure_window(merged.starts_at, merged.ends_at)

        updated = self._store.save_code(merged)
        logger.info("Promo code %s updated", updated.code)
        self._audit.record(actor_id, "promo_code.updated", str(updated.id.value), {"fields": sorted(changes)})
        return updated

    def delete_promo_code(self, promo_code_id: str, org_id: str, actor_id: str) -> None:
        """Delete a code. Its redemptions are kept for audit."""
        promo_code = self.get_promo_code(promo_code_id, org_id)
        self._store.delete_code(promo_code.id)
        logger.info("Promo code %s deleted", promo_code.code)
        self._audit.record(actor_id, "promo_code.deleted", str(promo_code.id.value), {"code": promo_code.code})

    def get_promo_code(self, promo_code_id: str, org_id: str) -> PromoCode:
        promo_code = self._store.get_code(parse_promo_code_id(promo_code_id))
        if promo_code is None or promo_code.org_id != org_id:
            raise PromoCodeNotFoundError(promo_code_id)
        return promo_code

    def list_promo_codes(self, org_id: str, promotion_id: str | None = None) -> list[PromoCodeListing]:
        """Return the organization's codes with redemption counts and live status."""
        parent = parse_promotion_id(promotion_id) if promotion_id else None
        now = self._clock.now()
        promotions: dict = {}
        listings = []
        for promo_code, count in self._store.list_codes(org_id, parent):
            promotion = None
            if promo_code.promotion_id is not None:
                if promo_code.promotion_id not in promotions:
                    promotions[promo_code.promotion_id] = self._promotions.get_promotion(promo_code.promotion_id)
                promotion = promotions[promo_code.promotion_id]
            listings.append(
                PromoCodeListing(promo_code, count, derive_status(promo_code, count, now, promotion))
            )
        return listings

    def list_redemptions(self, promo_code_id: str, org_id: str) -> list[PromoRedemption]:
        return self._store.list_redemptions(self.get_promo_code(promo_code_id, org_id).id)

    # Checkout

    def validate_promo_code(self, request: ValidationRequest) -> DiscountQuote:
        """Check a code against an order and compute the discount. Never writes.

        Checks run in a fixed order and the first failure is raised.

        Raises:
            CodeNotFoundError: If the code does not resolve to exactly one promo code.
            InvalidOrderAmountError: If the order amount is negative.
            NotYetActiveError: If the code or its campaign has not started.
            ExpiredError: If the code or its campaign has ended.
            UsageLimitReachedError: If the code's global cap is used up.
            UserUsageLimitReachedError: If the user's cap is used up.
            NotApplicableToEventError: If the code is pinned to another event.
            BelowMinimumOrderAmountError: If minimums are enforced and the order is too small.
            RateNotFoundError: If a fixed discount needs a conversion with no rate.
        """
        code = normalize_code(request.code)
        matches = self._store.find_codes(code, request.org_id)
        if len(matches) != 1:
            raise CodeNotFoundError(code)
        promo_code = matches[0]

        now = self._clock.now()
        check_window(code, promo_code.starts_at, promo_code.ends_at, now)
        promotion = None
        if promo_code.promotion_id is not None:
            promotion = self._promotions.get_promotion(promo_code.promotion_id)
            if promotion is not None:
                check_window(code, promotion.starts_at, promotion.ends_at, now)

        check_caps(promo_code, self._store.usage(promo_code.id, request.user_id))

        if promo_code.event_id and promo_code.event_id != request.event_id:
            raise NotApplicableToEventError(code)

        order_currency = (
            CurrencyCode.parse(request.order_currency)
            if request.order_currency
            else self._config.get_default_currency()
        )
        order = Money(request.order_amount, order_currency)
        if order.is_negative():
            raise InvalidOrderAmountError(request.order_amount)

        if self._enforce_min_order_amount and promotion is not None and promotion.min_order_amount is not None:
            minimum = self._rates.convert_money(Money(promotion.min_order_amount, promotion.currency), order_currency)
            if order < minimum:
                raise BelowMinimumOrderAmountError(code, minimum.amount)

        discount = compute_discount(promo_code, order, self._rates.convert_money)
        return DiscountQuote(promo_code=promo_code, discount=discount)

    def use_promo_code(self, promo_code_id: str, user_id: str, order_id: str) -> tuple[PromoRedemption, bool]:
        """Record that ``user_id`` used the code on ``order_id``.

        Returns the redemption and whether it was created by this call. A
        repeat for the same order returns the original row unchanged.

        Raises:
            InvalidIdError: If the promo_code_id is not a valid UUID.
            PromoCodeNotFoundError: If the code does not exist.
            UsageLimitReachedError: If the global cap is used up.
            UserUsageLimitReachedError: If the user's cap is used up.
            ConcurrentUpdateError: If a concurrent call for the same order won.
        """
        result = self._store.redeem(
            parse_promo_code_id(promo_code_id),
            user_id,
            order_id,
            self._clock.now(),
            check_caps,
        )
        if result is None:
            raise PromoCodeNotFoundError(promo_code_id)
        redemption, created = result

        if created:
            logger.info("Promo code %s redeemed on order %s", redemption.code, order_id)
            self._audit.record(
                user_id,
                "promo_code.redeemed",
                promo_code_id,
                {"order_id": order_id, "redemption_id": str(redemption.id.value)},
            )
        else:
            logger.info("Promo code %s already redeemed on order %s", redemption.code, order_id)
        return redemption, created

    def _owned_promotion(self, promotion_id: str, org_id: str) -> Promotion:
        promotion = self._promotions.get_promotion(parse_promotion_id(promotion_id))
        if promotion is None or promotion.org_id != org_id:
            raise PromotionNotFoundError(promotion_id)
        return promotion

    @staticmethod
    def _terms_from_promotion(promotion: Promotion) -> dict:
        percentage = promotion.discount_type is DiscountType.PERCENTAGE
        return {
            "promotion_id": promotion.id,
            "kind": promotion.type,
            "percent_off": promotion.discount_value if percentage else None,
            "amount_off_cents": None if percentage else int(promotion.discount_value),
            "currency": promotion.currency,
        }

    def _standalone_terms(self, draft: PromoCodeDraft) -> dict:
        if draft.percent_off is not None and draft.amount_off_cents is not None:
            raise InvalidDiscountError("Set either percent_off or amount_off_cents, not both")
        try:
            kind = PromotionType(draft.kind or PromotionType.DISCOUNT.value)
        except ValueError:
            raise InvalidDiscountError(f"Unknown promotion type: {draft.kind}") from None
        return {
            "promotion_id": None,
            "kind": kind,
            "percent_off": validate_percent(draft.percent_off) if draft.percent_off is not None else None,
            "amount_off_cents": (
                validate_fixed_amount(draft.amount_off_cents) if draft.amount_off_cents is not None else None
            ),
            "currency": (
                CurrencyCode.parse(draft.currency) if draft.currency else self._config.get_default_currency()
            ),
        }
