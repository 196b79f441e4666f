"""Promotion campaign service.

Campaign CRUD is plain apart from two rules: the window must start before
it ends, and discount terms must be in range for their type.
"""

import logging
from dataclasses import replace
from datetime import datetime
from decimal import Decimal, InvalidOperation
from uuid import uuid4

from django.utils import timezone

from core.audit import AuditSink, LoggingAuditSink
from core.clock import Clock, SystemClock
from core.errors import InvalidWindowError
from currency.domain import CurrencyCode
from currency.services.config_service import CurrencyConfigService
from promotions.domain import (
    DiscountType,
    Promotion,
    PromotionDraft,
    PromotionId,
    PromotionPatch,
    PromotionStats,
    PromotionType,
)
from promotions.domain.discounts import validate_percent
from promotions.domain.errors import InvalidDiscountError, InvalidIdError, PromotionNotFoundError
from promotions.stores.interfaces import PromotionStore

logger = logging.getLogger(__name__)

TOP_CODES_LIMIT = 10


def ensure_window(starts_at: datetime | None, ends_at: datetime | None) -> None:
    """Reject naive instants and windows that do not start before they end."""
    for instant in (starts_at, ends_at):
        if instant is not None and timezone.is_naive(instant):
            raise ValueError("Window bounds must be timezone-aware")
    if starts_at is not None and ends_at is not None and starts_at >= ends_at:
        raise InvalidWindowError(starts_at, ends_at)


def parse_promotion_id(raw: str) -> PromotionId:
    try:
        return PromotionId.from_string(str(raw))
    except ValueError:
        raise InvalidIdError() from None


def parse_discount(discount_type: DiscountType | str, value: Decimal | int | str) -> tuple[DiscountType, Decimal]:
    try:
        kind = DiscountType(discount_type)
    except ValueError:
        raise InvalidDiscountError(f"Unknown discount type: {discount_type}") from None
    if isinstance(value, (bool, float)):
        raise InvalidDiscountError("Discount value must be a decimal string or integer")
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value))
    except InvalidOperation:
        raise InvalidDiscountError(f"Invalid discount value: {value!r}") from None

    if kind is DiscountType.PERCENTAGE:
        return kind, validate_percent(amount)
    if not amount.is_finite() or amount < 0 or amount != amount.to_integral_value():
        raise InvalidDiscountError("Fixed discount must be a non-negative whole number of minor units")
    return kind, amount.quantize(Decimal(1))


def _parse_type(value: PromotionType | str) -> PromotionType:
    try:
        return PromotionType(value)
    except ValueError:
        raise InvalidDiscountError(f"Unknown promotion type: {value}") from None


class PromotionService:
    """Service for promotion campaign operations."""

    def __init__(
        self,
        store: PromotionStore,
        config: CurrencyConfigService,
        clock: Clock | None = None,
        audit: AuditSink | None = None,
    ) -> None:
        self._store = store
        self._config = config
        self._clock = clock or SystemClock()
        self._audit = audit or LoggingAuditSink()

    def create_promotion(self, org_id: str, draft: PromotionDraft, actor_id: str) -> Promotion:
        """Create a campaign owned by ``org_id``.

        Raises:
            InvalidWindowError: If ``starts_at`` is not before ``ends_at``.
            InvalidDiscountError: If the discount terms are out of range.
            InvalidCurrencyCodeError: If the currency is not in the registry.
        """
        ensure_window(draft.starts_at, draft.ends_at)
        discount_type, discount_value = parse_discount(draft.discount_type, draft.discount_value)
        currency = (
            CurrencyCode.parse(draft.currency) if draft.currency else self._config.get_default_currency()
        )

        promotion = Promotion(
            id=PromotionId(uuid4()),
            org_id=org_id,
            name=draft.name,
            description=draft.description,
            type=_parse_type(draft.type),
            discount_type=discount_type,
            discount_value=discount_value,
            currency=currency,
            max_uses=draft.max_uses,
            max_uses_per_user=draft.max_uses_per_user,
            starts_at=draft.starts_at,
            ends_at=draft.ends_at,
            event_ids=frozenset(draft.event_ids),
            ticket_type_ids=frozenset(draft.ticket_type_ids),
            min_order_amount=draft.min_order_amount,
            redemptions=0,
            created_at=self._clock.now(),
        )
        promotion = self._store.add_promotion(promotion, created_by=actor_id)

        logger.info("Promotion %s created for org %s", promotion.id.value, org_id)
        self._audit.record(actor_id, "promotion.created", str(promotion.id.value), {"org_id": org_id})
        return promotion

    def update_promotion(
        self, promotion_id: str, org_id: str, patch: PromotionPatch, actor_id: str
    ) -> Promotion:
        """Apply ``patch`` and re-check the merged window and discount.

        Raises:
            InvalidIdError: If the promotion_id is not a valid UUID.
            PromotionNotFoundError: If the promotion does not exist in the organization.
            InvalidWindowError: If the merged window does not start before it ends.
            InvalidDiscountError: If the merged discount terms are out of range.
        """
        current = self.get_promotion(promotion_id, org_id)
        changes = patch.provided()
        for name in ("event_ids", "ticket_type_ids"):
            if name in changes:
                changes[name] = frozenset(changes[name])
        merged = replace(current, **changes)

        ensure_window(merged.starts_at, merged.ends_at)
        discount_type, discount_value = parse_discount(merged.discount_type, merged.discount_value)
        merged = replace(merged, discount_type=discount_type, discount_value=discount_value)

        updated = self._store.save_promotion(merged)
        logger.info("Promotion %s updated", promotion_id)
        self._audit.record(actor_id, "promotion.updated", str(updated.id.value), {"fields": sorted(changes)})
        return updated

    def delete_promotion(self, promotion_id: str, org_id: str, actor_id: str) -> None:
        """Delete a campaign and its codes. Redemption history is kept."""
        promotion = self.get_promotion(promotion_id, org_id)
        self._store.delete_promotion(promotion.id)
        logger.info("Promotion %s deleted", promotion_id)
        self._audit.record(actor_id, "promotion.deleted", str(promotion.id.value), {"org_id": org_id})

    def get_promotion(self, promotion_id: str, org_id: str) -> Promotion:
        """Return a promotion owned by ``org_id``.

        Raises:
            InvalidIdError: If the promotion_id is not a valid UUID.
            PromotionNotFoundError: If it does not exist or belongs to another organization.
        """
        promotion = self._store.get_promotion(parse_promotion_id(promotion_id))
        if promotion is None or promotion.org_id != org_id:
            raise PromotionNotFoundError(promotion_id)
        return promotion

    def list_promotions(self, org_id: str, active: bool | None = None) -> list[Promotion]:
        """Return an organization's promotions, newest first.

        ``active`` keeps only campaigns whose window covers now (True) or
        does not (False).
        """
        promotions = self._store.list_promotions(org_id)
        if active is None:
            return promotions
        now = self._clock.now()
        return [p for p in promotions if p.is_running_at(now) == active]

    def deactivate_promotion(self, promotion_id: str, org_id: str, actor_id: str) -> Promotion:
        """End the campaign now. A campaign that already ended is returned unchanged.

        Raises:
            InvalidWindowError: If the campaign has not started yet.
        """
        promotion = self.get_promotion(promotion_id, org_id)
        now = self._clock.now()
        if promotion.ends_at <= now:
            return promotion
        ensure_window(promotion.starts_at, now)

        updated = self._store.save_promotion(replace(promotion, ends_at=now))
        logger.info("Promotion %s deactivated", promotion_id)
        self._audit.record(actor_id, "promotion.deactivated", str(updated.id.value), {"ends_at": now.isoformat()})
        return updated

    def get_stats(self) -> PromotionStats:
        return self._store.stats(self._clock.now(), TOP_CODES_LIMIT)
