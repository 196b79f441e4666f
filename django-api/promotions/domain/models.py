"""Domain models for promotion campaigns, promo codes and redemptions.

These are pure domain objects with no API input rules.
Django ORM models are in promotions/models.py (persistence layer).
"""

from dataclasses import dataclass, fields
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, ClassVar

from currency.domain import CurrencyCode, Money
from promotions.domain.value_objects import PromoCodeId, PromotionId, RedemptionId


class PromotionType(str, Enum):
    DISCOUNT = "discount"
    ACCESS = "access"


class DiscountType(str, Enum):
    PERCENTAGE = "percentage"
    FIXED = "fixed"


class CodeStatus(str, Enum):
    """Usability of a promo code, always derived, never stored."""

    PENDING = "pending"
    ACTIVE = "active"
    EXHAUSTED = "exhausted"
    EXPIRED = "expired"


@dataclass(frozen=True)
class Promotion:
    """Domain representation of a discount campaign."""

    id: PromotionId
    org_id: str
    name: str
    description: str
    type: PromotionType
    discount_type: DiscountType
    discount_value: Decimal  # percent for PERCENTAGE, minor units for FIXED
    currency: CurrencyCode
    max_uses: int  # 0 = unlimited
    max_uses_per_user: int | None
    starts_at: datetime
    ends_at: datetime
    event_ids: frozenset[str]
    ticket_type_ids: frozenset[str]
    min_order_amount: int | None
    redemptions: int
    created_at: datetime

    def is_running_at(self, at: datetime) -> bool:
        return self.starts_at <= at <= self.ends_at


@dataclass(frozen=True)
class PromoCode:
    """Domain representation of a redeemable code."""

    id: PromoCodeId
    code: str
    org_id: str
    promotion_id: PromotionId | None
    kind: PromotionType
    percent_off: Decimal | None
    amount_off_cents: int | None
    currency: CurrencyCode
    max_redemptions: int | None
    per_user_limit: int | None
    starts_at: datetime | None
    ends_at: datetime | None
    event_id: str | None
    created_at: datetime


@dataclass(frozen=True)
class PromoRedemption:
    """Immutable fact: a user used a code on an order."""

    id: RedemptionId
    promo_id: PromoCodeId | None
    code: str
    user_id: str
    order_id: str
    redeemed_at: datetime


@dataclass(frozen=True)
class CodeUsage:
    """Redemption counts for a code, overall and for one user."""

    total: int
    by_user: int = 0


@dataclass(frozen=True)
class DiscountQuote:
    """Outcome of a successful validation."""

    promo_code: PromoCode
    discount: Money
    is_valid: bool = True

    @property
    def discount_amount(self) -> int:
        return self.discount.amount


@dataclass(frozen=True)
class PromoCodeListing:
    promo_code: PromoCode
    redemption_count: int
    status: CodeStatus


@dataclass(frozen=True)
class PromotionStats:
    total_promotions: int
    active_promotions: int
    total_promo_codes: int
    total_redemptions: int
    top_promo_codes: tuple[tuple[PromoCodeId, str, int], ...]


@dataclass(frozen=True)
class ValidationRequest:
    """Order context a code is validated against."""

    code: str
    order_amount: int
    order_currency: str | None = None
    event_id: str | None = None
    user_id: str | None = None
    org_id: str | None = None


@dataclass(frozen=True)
class PromotionDraft:
    name: str
    discount_type: str
    discount_value: Decimal
    starts_at: datetime
    ends_at: datetime
    type: str = PromotionType.DISCOUNT.value
    description: str = ""
    currency: str | None = None
    max_uses: int = 0
    max_uses_per_user: int | None = None
    event_ids: tuple[str, ...] = ()
    ticket_type_ids: tuple[str, ...] = ()
    min_order_amount: int | None = None


@dataclass(frozen=True)
class PromoCodeDraft:
    code: str
    promotion_id: str | None = None
    kind: str | None = None
    percent_off: Decimal | None = None
    amount_off_cents: int | None = None
    currency: str | None = None
    max_redemptions: int | None = None
    per_user_limit: int | None = None
    starts_at: datetime | None = None
    ends_at: datetime | None = None
    event_id: str | None = None


UNSET: Any = object()


class _Patch:
    """Fields left at UNSET were not supplied. ``None`` clears a nullable field."""

    nullable: ClassVar[frozenset[str]] = frozenset()

    def provided(self) -> dict[str, Any]:
        values = {f.name: getattr(self, f.name) for f in fields(self)}
        return {
            name: value
            for name, value in values.items()
            if value is not UNSET and (value is not None or name in self.nullable)
        }


@dataclass(frozen=True)
class PromotionPatch(_Patch):
    nullable = frozenset({"max_uses_per_user", "min_order_amount"})

    name: str | None = UNSET
    description: str | None = UNSET
    discount_type: str | None = UNSET
    discount_value: Decimal | None = UNSET
    max_uses: int | None = UNSET
    max_uses_per_user: int | None = UNSET
    starts_at: datetime | None = UNSET
    ends_at: datetime | None = UNSET
    event_ids: tuple[str, ...] | None = UNSET
    ticket_type_ids: tuple[str, ...] | None = UNSET
    min_order_amount: int | None = UNSET


@dataclass(frozen=True)
class PromoCodePatch(_Patch):
    nullable = frozenset({"max_redemptions", "per_user_limit", "starts_at", "ends_at", "event_id"})

    code: str | None = UNSET
    max_redemptions: int | None = UNSET
    per_user_limit: int | None = UNSET
    starts_at: datetime | None = UNSET
    ends_at: datetime | None = UNSET
    event_id: str | None = UNSET
