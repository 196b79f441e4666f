"""Discount arithmetic and derived code status.

All money is integer minor units. Percentages are applied in basis points
with integer floor division, so results do not depend on float rounding.
"""

from collections.abc import Callable
from datetime import datetime
from decimal import Decimal

from currency.domain import CurrencyCode, Money
from promotions.domain.errors import InvalidDiscountError
from promotions.domain.models import CodeStatus, PromoCode, Promotion

MAX_PERCENT = Decimal(100)
PERCENT_PLACES = 2

Converter = Callable[[Money, CurrencyCode], Money]


def validate_percent(percent: Decimal) -> Decimal:
    if not percent.is_finite() or not Decimal(0) <= percent <= MAX_PERCENT:
        raise InvalidDiscountError("Percentage must be between 0 and 100")
    if percent.as_tuple().exponent < -PERCENT_PLACES:
        raise InvalidDiscountError(f"Percentage supports at most {PERCENT_PLACES} decimal places")
    return percent


def validate_fixed_amount(amount: int) -> int:
    if isinstance(amount, bool) or not isinstance(amount, int) or amount < 0:
        raise InvalidDiscountError("Fixed discount must be a non-negative number of minor units")
    return amount


def percentage_of(amount_minor: int, percent: Decimal) -> int:
    """floor(amount * percent / 100) in exact integer arithmetic."""
    basis_points = int(validate_percent(percent).scaleb(PERCENT_PLACES))
    return (amount_minor * basis_points) // 10_000


def compute_discount(code: PromoCode, order: Money, convert: Converter) -> Money:
    """Discount for ``order`` in the order's currency, never more than the order itself."""
    if code.percent_off is not None:
        return Money(percentage_of(order.amount, code.percent_off), order.currency)
    if code.amount_off_cents is not None:
        off = Money(code.amount_off_cents, code.currency)
        if off.currency != order.currency:
            off = convert(off, order.currency)
        return off.min_of(order)
    return Money.zero(order.currency)


def derive_status(
    code: PromoCode,
    redemption_count: int,
    at: datetime,
    promotion: Promotion | None = None,
) -> CodeStatus:
    windows = [(code.starts_at, code.ends_at)]
    if promotion is not None:
        windows.append((promotion.starts_at, promotion.ends_at))

    if any(ends is not None and at > ends for _, ends in windows):
        return CodeStatus.EXPIRED
    if any(starts is not None and at < starts for starts, _ in windows):
        return CodeStatus.PENDING
    if code.max_redemptions is not None and redemption_count >= code.max_redemptions:
        return CodeStatus.EXHAUSTED
    return CodeStatus.ACTIVE
