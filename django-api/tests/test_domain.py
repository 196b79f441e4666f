"""Unit tests for domain primitives.

These test invariants that must hold at construction time.
Run with: pytest tests/test_domain.py -v
"""

from datetime import datetime, timedelta, timezone
from decimal import Decimal
from uuid import uuid4

import pytest

from currency.domain import CurrencyCode, Money
from currency.domain.errors import CurrencyMismatchError, InvalidCurrencyCodeError
from currency.domain.registry import currency_symbol, minor_unit
from promotions.domain import CodeStatus, PromoCode, PromoCodeId, PromotionId, PromotionType, normalize_code
from promotions.domain.discounts import compute_discount, derive_status, percentage_of
from promotions.domain.errors import InvalidDiscountError

NGN = CurrencyCode("NGN")
USD = CurrencyCode("USD")
NOW = datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)


def make_code(**overrides) -> PromoCode:
    fields = {
        "id": PromoCodeId(uuid4()),
        "code": "SAVE10",
        "org_id": "org-1",
        "promotion_id": None,
        "kind": PromotionType.DISCOUNT,
        "percent_off": None,
        "amount_off_cents": None,
        "currency": NGN,
        "max_redemptions": None,
        "per_user_limit": None,
        "starts_at": None,
        "ends_at": None,
        "event_id": None,
        "created_at": NOW,
    }
    fields.update(overrides)
    return PromoCode(**fields)


def no_conversion(money, currency):
    raise AssertionError("conversion not expected")


class TestCurrencyCode:
    """Tests for CurrencyCode value object."""

    def test_accepts_registered_code(self):
        assert CurrencyCode("NGN").value == "NGN"

    def test_parse_normalizes_case_and_whitespace(self):
        """User input is upper-cased and stripped."""
        assert CurrencyCode.parse(" usd ") == USD

    @pytest.mark.parametrize("raw", ["usd", "US", "USDT", "XYZ", "U5D", ""])
    def test_rejects_invalid_codes(self, raw):
        with pytest.raises(InvalidCurrencyCodeError):
            CurrencyCode(raw)

    def test_parse_rejects_non_string(self):
        with pytest.raises(InvalidCurrencyCodeError):
            CurrencyCode.parse(840)


class TestRegistry:
    def test_symbol_and_minor_unit(self):
        assert currency_symbol("NGN") == "₦"
        assert minor_unit("JPY") == 0
        assert minor_unit("USD") == 2

    def test_unknown_symbol_falls_back_to_code(self):
        assert currency_symbol("XYZ") == "XYZ"


class TestMoney:
    """Tests for Money value object."""

    def test_adds_same_currency(self):
        assert Money(150, NGN) + Money(50, NGN) == Money(200, NGN)

    def test_mixing_currencies_fails_fast(self):
        """Arithmetic and ordering across currencies raise instead of coercing."""
        with pytest.raises(CurrencyMismatchError):
            Money(100, NGN) + Money(100, USD)
        with pytest.raises(CurrencyMismatchError):
            Money(100, NGN) < Money(100, USD)

    def test_rejects_non_integer_amounts(self):
        with pytest.raises(TypeError):
            Money(10.5, NGN)
        with pytest.raises(TypeError):
            Money(True, NGN)

    def test_multiplies_by_integer_only(self):
        assert Money(250, USD) * 3 == Money(750, USD)
        assert 2 * Money(250, USD) == Money(500, USD)
        with pytest.raises(TypeError):
            Money(250, USD) * 1.5

    def test_min_of_and_negative(self):
        assert Money(2000, NGN).min_of(Money(1000, NGN)) == Money(1000, NGN)
        assert (Money(100, NGN) - Money(300, NGN)).is_negative()

    def test_of_parses_currency(self):
        assert Money.of(500, "ngn") == Money(500, NGN)

    def test_str_format(self):
        assert str(Money(5000, NGN)) == "5000 NGN"


class TestIds:
    def test_promotion_id_from_string(self):
        raw = uuid4()
        assert PromotionId.from_string(str(raw)).value == raw

    def test_promotion_id_from_invalid_string(self):
        with pytest.raises(ValueError):
            PromotionId.from_string("not-a-uuid")

    def test_normalize_code(self):
        assert normalize_code("  save10 ") == "SAVE10"


class TestDiscounts:
    """Tests for discount arithmetic."""

    def test_percentage_of_floors(self):
        """Fractional minor units are dropped, never rounded up."""
        assert percentage_of(50_000, Decimal("10")) == 5_000
        assert percentage_of(999, Decimal("10")) == 99
        assert percentage_of(1_001, Decimal("12.5")) == 125

    def test_percentage_out_of_range(self):
        with pytest.raises(InvalidDiscountError):
            percentage_of(1_000, Decimal("100.01"))

    def test_percentage_rejects_excess_precision(self):
        with pytest.raises(InvalidDiscountError):
            percentage_of(1_000, Decimal("10.005"))

    def test_percent_code(self):
        code = make_code(percent_off=Decimal("10"))
        assert compute_discount(code, Money(50_000, NGN), no_conversion) == Money(5_000, NGN)

    def test_fixed_code(self):
        code = make_code(code="FLAT2000", amount_off_cents=2_000)
        assert compute_discount(code, Money(50_000, NGN), no_conversion) == Money(2_000, NGN)

    def test_fixed_code_clamped_to_order(self):
        code = make_code(code="FLAT2000", amount_off_cents=2_000)
        assert compute_discount(code, Money(1_000, NGN), no_conversion) == Money(1_000, NGN)

    def test_fixed_code_converted_before_clamping(self):
        """A USD amount is converted into the order currency, then clamped."""
        code = make_code(amount_off_cents=500, currency=USD)
        seen = []

        def to_ngn(money, currency):
            seen.append((money, currency))
            return Money(money.amount * 1500, currency)

        assert compute_discount(code, Money(1_000_000, NGN), to_ngn) == Money(750_000, NGN)
        assert compute_discount(code, Money(100_000, NGN), to_ngn) == Money(100_000, NGN)
        assert seen[0] == (Money(500, USD), NGN)

    def test_code_without_terms_gives_zero(self):
        assert compute_discount(make_code(), Money(1_000, NGN), no_conversion) == Money(0, NGN)


class TestDeriveStatus:
    """Status is computed from the window and the redemption count."""

    def test_pending_before_start(self):
        code = make_code(starts_at=NOW + timedelta(days=1))
        assert derive_status(code, 0, NOW) is CodeStatus.PENDING

    def test_active_inside_window(self):
        code = make_code(starts_at=NOW - timedelta(days=1), ends_at=NOW + timedelta(days=1), max_redemptions=5)
        assert derive_status(code, 4, NOW) is CodeStatus.ACTIVE

    def test_exhausted_at_cap(self):
        code = make_code(max_redemptions=5)
        assert derive_status(code, 5, NOW) is CodeStatus.EXHAUSTED

    def test_expired_after_end(self):
        code = make_code(ends_at=NOW - timedelta(seconds=1), max_redemptions=1)
        assert derive_status(code, 1, NOW) is CodeStatus.EXPIRED

    def test_end_instant_is_still_active(self):
        code = make_code(ends_at=NOW)
        assert derive_status(code, 0, NOW) is CodeStatus.ACTIVE
