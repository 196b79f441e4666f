"""Unit tests for promo code administration and validation.

Run with: pytest tests/test_promo_codes.py -v
"""

from datetime import timedelta
from decimal import Decimal

import pytest

from core.errors import InvalidWindowError
from currency.domain import CurrencyCode, Money
from currency.domain.errors import RateNotFoundError
from promotions.domain import CodeStatus, PromoCodeDraft, PromoCodePatch, PromotionDraft, PromotionType, ValidationRequest
from promotions.domain.errors import (
    BelowMinimumOrderAmountError,
    CodeNotFoundError,
    DuplicatePromoCodeError,
    ExpiredError,
    InvalidDiscountError,
    InvalidOrderAmountError,
    InvalidPromoCodeError,
    NotApplicableToEventError,
    NotYetActiveError,
    PromoCodeNotFoundError,
    PromotionNotFoundError,
    UsageLimitReachedError,
    UserUsageLimitReachedError,
)
from promotions.services import PromoCodeService


@pytest.fixture
def create_code(promo_code_service):
    def create(code: str, org_id: str = "org-1", **fields):
        return promo_code_service.create_promo_code(org_id, PromoCodeDraft(code=code, **fields), "admin-1")

    return create


@pytest.fixture
def campaign(promotion_service, clock):
    def create(org_id: str = "org-1", **fields):
        values = {
            "name": "Campaign",
            "discount_type": "fixed",
            "discount_value": Decimal("2000"),
            "starts_at": clock.now() - timedelta(days=1),
            "ends_at": clock.now() + timedelta(days=1),
        }
        values.update(fields)
        return promotion_service.create_promotion(org_id, PromotionDraft(**values), "admin-1")

    return create


def validate(service: PromoCodeService, code: str, amount: int = 50_000, **fields):
    return service.validate_promo_code(ValidationRequest(code=code, order_amount=amount, **fields))


class TestCreatePromoCode:
    """Tests for code creation."""

    def test_standalone_code_is_upper_cased(self, create_code):
        code = create_code(" save10 ", percent_off=Decimal("10"))

        assert code.code == "SAVE10"
        assert code.percent_off == Decimal("10")
        assert code.amount_off_cents is None
        assert code.currency == CurrencyCode("NGN")
        assert code.kind is PromotionType.DISCOUNT
        assert code.promotion_id is None

    def test_duplicate_in_same_org(self, create_code):
        create_code("SAVE10", percent_off=Decimal("10"))

        with pytest.raises(DuplicatePromoCodeError):
            create_code("save10", percent_off=Decimal("5"))

    def test_same_code_in_other_org(self, create_code):
        create_code("SAVE10", percent_off=Decimal("10"))

        assert create_code("SAVE10", org_id="org-2", percent_off=Decimal("10")).org_id == "org-2"

    def test_linked_code_inherits_promotion_terms(self, create_code, campaign):
        promotion = campaign(currency="USD", type="access")

        code = create_code("VIP", promotion_id=str(promotion.id.value))

        assert code.promotion_id == promotion.id
        assert code.amount_off_cents == 2000
        assert code.percent_off is None
        assert code.currency == CurrencyCode("USD")
        assert code.kind is PromotionType.ACCESS

    def test_linked_to_percentage_promotion(self, create_code, campaign):
        promotion = campaign(discount_type="percentage", discount_value=Decimal("12.5"))

        code = create_code("TWELVE", promotion_id=str(promotion.id.value))

        assert code.percent_off == Decimal("12.5")
        assert code.amount_off_cents is None

    def test_promotion_of_other_org(self, create_code, campaign):
        promotion = campaign(org_id="org-2")

        with pytest.raises(PromotionNotFoundError):
            create_code("VIP", promotion_id=str(promotion.id.value))

    def test_linked_code_cannot_override_discount(self, create_code, campaign):
        promotion = campaign()

        with pytest.raises(InvalidDiscountError):
            create_code("VIP", promotion_id=str(promotion.id.value), percent_off=Decimal("50"))

    def test_rejects_both_discount_kinds(self, create_code):
        with pytest.raises(InvalidDiscountError):
            create_code("BOTH", percent_off=Decimal("10"), amount_off_cents=100)

    @pytest.mark.parametrize("raw", ["AB", "HAS SPACE", "BAD!", "X" * 51])
    def test_rejects_malformed_codes(self, create_code, raw):
        with pytest.raises(InvalidPromoCodeError):
            create_code(raw, percent_off=Decimal("10"))

    def test_rejects_inverted_window(self, create_code, clock):
        with pytest.raises(InvalidWindowError):
            create_code("LATE", percent_off=Decimal("10"), starts_at=clock.now(), ends_at=clock.now())

    def test_emits_audit_record(self, create_code, audit):
        create_code("SAVE10", percent_off=Decimal("10"))

        assert audit.actions() == ["promo_code.created"]


class TestUpdateAndDeletePromoCode:
    def test_rename_is_normalized(self, promo_code_service, create_code):
        code = create_code("SAVE10", percent_off=Decimal("10"))

        updated = promo_code_service.update_promo_code(
            str(code.id.value), "org-1", PromoCodePatch(code="save15", max_redemptions=3), "admin-1"
        )

        assert updated.code == "SAVE15"
        assert updated.max_redemptions == 3
        assert updated.percent_off == Decimal("10")

    def test_rename_collision(self, promo_code_service, create_code):
        create_code("TAKEN", percent_off=Decimal("10"))
        code = create_code("FREE", percent_off=Decimal("10"))

        with pytest.raises(DuplicatePromoCodeError):
            promo_code_service.update_promo_code(str(code.id.value), "org-1", PromoCodePatch(code="taken"), "admin-1")

    def test_window_checked_on_merged_result(self, promo_code_service, create_code, clock):
        code = create_code("SAVE10", percent_off=Decimal("10"), ends_at=clock.now())

        with pytest.raises(InvalidWindowError):
            promo_code_service.update_promo_code(
                str(code.id.value), "org-1", PromoCodePatch(starts_at=clock.now() + timedelta(hours=1)), "admin-1"
            )

    def test_other_org_cannot_update(self, promo_code_service, create_code):
        code = create_code("SAVE10", percent_off=Decimal("10"))

        with pytest.raises(PromoCodeNotFoundError):
            promo_code_service.update_promo_code(str(code.id.value), "org-2", PromoCodePatch(max_redemptions=1), "u")

    def test_null_clears_limits_window_and_scope(self, promo_code_service, create_code, clock):
        """Explicit None removes a cap, a bound or the event scope."""
        code = create_code(
            "CAPPED",
            percent_off=Decimal("10"),
            max_redemptions=1,
            per_user_limit=1,
            starts_at=clock.now() - timedelta(days=1),
            ends_at=clock.now() + timedelta(days=1),
            event_id="evt-1",
        )
        promo_code_service.use_promo_code(str(code.id.value), "user-1", "order-1")

        updated = promo_code_service.update_promo_code(
            str(code.id.value),
            "org-1",
            PromoCodePatch(max_redemptions=None, per_user_limit=None, starts_at=None, ends_at=None, event_id=None),
            "admin-1",
        )

        assert updated.max_redemptions is None
        assert updated.per_user_limit is None
        assert updated.starts_at is None and updated.ends_at is None
        assert updated.event_id is None
        assert validate(promo_code_service, "CAPPED", user_id="user-1").discount_amount == 5_000

    def test_omitted_fields_are_kept(self, promo_code_service, create_code):
        code = create_code("KEEP", percent_off=Decimal("10"), max_redemptions=5, event_id="evt-1")

        updated = promo_code_service.update_promo_code(
            str(code.id.value), "org-1", PromoCodePatch(per_user_limit=2), "admin-1"
        )

        assert updated.max_redemptions == 5
        assert updated.event_id == "evt-1"
        assert updated.per_user_limit == 2

    def test_clearing_one_bound_rechecks_window(self, promo_code_service, create_code, clock):
        code = create_code(
            "OPEN", percent_off=Decimal("10"), starts_at=clock.now(), ends_at=clock.now() + timedelta(days=1)
        )

        updated = promo_code_service.update_promo_code(
            str(code.id.value), "org-1", PromoCodePatch(ends_at=None), "admin-1"
        )

        assert updated.starts_at == clock.now()
        assert updated.ends_at is None

    def test_delete_keeps_redemptions(self, promo_code_service, promotion_service, create_code):
        code = create_code("SAVE10", percent_off=Decimal("10"))
        promo_code_service.use_promo_code(str(code.id.value), "user-1", "order-1")

        promo_code_service.delete_promo_code(str(code.id.value), "org-1", "admin-1")

        with pytest.raises(PromoCodeNotFoundError):
            promo_code_service.get_promo_code(str(code.id.value), "org-1")
        assert promotion_service.get_stats().total_redemptions == 1


class TestListPromoCodes:
    def test_listing_carries_count_and_status(self, promo_code_service, create_code, campaign, clock):
        promotion = campaign()
        limited = create_code("ONCE", percent_off=Decimal("10"), max_redemptions=1)
        clock.advance(timedelta(seconds=1))
        upcoming = create_code("SOON", percent_off=Decimal("10"), starts_at=clock.now() + timedelta(days=1))
        clock.advance(timedelta(seconds=1))
        linked = create_code("LINKED", promotion_id=str(promotion.id.value))
        promo_code_service.use_promo_code(str(limited.id.value), "user-1", "order-1")

        listings = promo_code_service.list_promo_codes("org-1")

        assert [(l.promo_code.code, l.redemption_count, l.status) for l in listings] == [
            ("LINKED", 0, CodeStatus.ACTIVE),
            ("SOON", 0, CodeStatus.PENDING),
            ("ONCE", 1, CodeStatus.EXHAUSTED),
        ]
        assert [l.promo_code.id for l in promo_code_service.list_promo_codes("org-1", str(promotion.id.value))] == [
            linked.id
        ]
        assert upcoming.id not in {l.promo_code.id for l in promo_code_service.list_promo_codes("org-2")}

    def test_status_follows_campaign_window(self, promo_code_service, create_code, campaign, clock):
        promotion = campaign()
        create_code("LINKED", promotion_id=str(promotion.id.value))
        clock.advance(timedelta(days=2))

        [listing] = promo_code_service.list_promo_codes("org-1")
        assert listing.status is CodeStatus.EXPIRED


class TestValidatePromoCode:
    """Tests for the read-only validation path."""

    def test_percentage_scenario(self, promo_code_service, create_code):
        """SAVE10 on a 50,000 NGN order gives 5,000."""
        create_code("SAVE10", percent_off=Decimal("10"))

        quote = validate(promo_code_service, "SAVE10")

        assert quote.is_valid is True
        assert quote.discount_amount == 5_000
        assert quote.discount == Money(5_000, CurrencyCode("NGN"))
        assert quote.promo_code.code == "SAVE10"

    def test_fixed_scenario(self, promo_code_service, create_code):
        create_code("FLAT2000", amount_off_cents=2_000, currency="NGN")

        assert validate(promo_code_service, "FLAT2000").discount_amount == 2_000

    def test_fixed_discount_clamped(self, promo_code_service, create_code):
        """FLAT2000 on a 1,000 order gives 1,000, never a negative total."""
        create_code("FLAT2000", amount_off_cents=2_000, currency="NGN")

        assert validate(promo_code_service, "FLAT2000", amount=1_000).discount_amount == 1_000

    def test_lookup_is_case_insensitive(self, promo_code_service, create_code):
        create_code("SAVE10", percent_off=Decimal("10"))

        assert validate(promo_code_service, "  save10").discount_amount == 5_000

    def test_unknown_code(self, promo_code_service):
        with pytest.raises(CodeNotFoundError):
            validate(promo_code_service, "NOPE")

    def test_ambiguous_code_needs_org(self, promo_code_service, create_code):
        create_code("SHARED", percent_off=Decimal("10"))
        create_code("SHARED", org_id="org-2", percent_off=Decimal("20"))

        with pytest.raises(CodeNotFoundError):
            validate(promo_code_service, "SHARED")
        assert validate(promo_code_service, "SHARED", org_id="org-2").discount_amount == 10_000

    def test_not_yet_active(self, promo_code_service, create_code, clock):
        create_code("SOON", percent_off=Decimal("10"), starts_at=clock.now() + timedelta(seconds=1))

        with pytest.raises(NotYetActiveError):
            validate(promo_code_service, "SOON")

    def test_expired(self, promo_code_service, create_code, clock):
        create_code("PAST", percent_off=Decimal("10"), ends_at=clock.now() - timedelta(seconds=1))

        with pytest.raises(ExpiredError):
            validate(promo_code_service, "PAST")

    def test_campaign_window_also_enforced(self, promo_code_service, create_code, campaign, clock):
        promotion = campaign(starts_at=clock.now() + timedelta(days=1), ends_at=clock.now() + timedelta(days=2))
        create_code("EARLY", promotion_id=str(promotion.id.value))

        with pytest.raises(NotYetActiveError):
            validate(promo_code_service, "EARLY")

    def test_negative_order_amount(self, promo_code_service, create_code):
        create_code("SAVE10", percent_off=Decimal("10"))

        with pytest.raises(InvalidOrderAmountError):
            validate(promo_code_service, "SAVE10", amount=-1)

    def test_global_cap(self, promo_code_service, create_code):
        code = create_code("ONCE", percent_off=Decimal("10"), max_redemptions=1)
        promo_code_service.use_promo_code(str(code.id.value), "user-1", "order-1")

        with pytest.raises(UsageLimitReachedError):
            validate(promo_code_service, "ONCE", user_id="user-2")

    def test_per_user_cap(self, promo_code_service, create_code):
        code = create_code("ONEEACH", percent_off=Decimal("10"), per_user_limit=1)
        promo_code_service.use_promo_code(str(code.id.value), "user-1", "order-1")

        with pytest.raises(UserUsageLimitReachedError):
            validate(promo_code_service, "ONEEACH", user_id="user-1")
        assert validate(promo_code_service, "ONEEACH", user_id="user-2").discount_amount == 5_000
        assert validate(promo_code_service, "ONEEACH").discount_amount == 5_000

    def test_event_scope(self, promo_code_service, create_code):
        create_code("GIGONLY", percent_off=Decimal("10"), event_id="evt-1")

        with pytest.raises(NotApplicableToEventError):
            validate(promo_code_service, "GIGONLY", event_id="evt-2")
        with pytest.raises(NotApplicableToEventError):
            validate(promo_code_service, "GIGONLY")
        assert validate(promo_code_service, "GIGONLY", event_id="evt-1").discount_amount == 5_000

    def test_window_checked_before_caps(self, promo_code_service, create_code, clock):
        code = create_code("BOTH", percent_off=Decimal("10"), max_redemptions=1, ends_at=clock.now())
        promo_code_service.use_promo_code(str(code.id.value), "user-1", "order-1")
        clock.advance(timedelta(seconds=1))

        with pytest.raises(ExpiredError):
            validate(promo_code_service, "BOTH")

    def test_caps_checked_before_scope(self, promo_code_service, create_code):
        code = create_code("CAPPED", percent_off=Decimal("10"), max_redemptions=1, event_id="evt-1")
        promo_code_service.use_promo_code(str(code.id.value), "user-1", "order-1")

        with pytest.raises(UsageLimitReachedError):
            validate(promo_code_service, "CAPPED", event_id="evt-2")

    def test_is_read_only(self, promo_code_service, promotion_service, create_code, campaign):
        """Previewing a discount many times consumes nothing."""
        promotion = campaign()
        code = create_code("PREVIEW", promotion_id=str(promotion.id.value), max_redemptions=1)

        for _ in range(5):
            validate(promo_code_service, "PREVIEW", user_id="user-1")

        assert promo_code_service.list_redemptions(str(code.id.value), "org-1") == []
        assert promotion_service.get_promotion(str(promotion.id.value), "org-1").redemptions == 0

    def test_fixed_discount_in_other_currency(self, promo_code_service, rate_service, create_code):
        create_code("FIVEUSD", amount_off_cents=500, currency="USD")
        rate_service.add_rate("USD", "NGN", "1500", actor_id="admin-1")

        assert validate(promo_code_service, "FIVEUSD", amount=1_000_000).discount_amount == 750_000
        assert validate(promo_code_service, "FIVEUSD", amount=100_000).discount_amount == 100_000

    def test_conversion_without_rate(self, promo_code_service, create_code):
        create_code("FIVEUSD", amount_off_cents=500, currency="USD")

        with pytest.raises(RateNotFoundError):
            validate(promo_code_service, "FIVEUSD")

    def test_percentage_is_currency_agnostic(self, promo_code_service, create_code):
        create_code("SAVE10", percent_off=Decimal("10"))

        quote = validate(promo_code_service, "SAVE10", amount=10_000, order_currency="usd")

        assert quote.discount == Money(1_000, CurrencyCode("USD"))


class TestMinimumOrderAmount:
    """Minimum order amounts are only enforced when switched on."""

    def test_ignored_by_default(self, promo_code_service, create_code, campaign):
        promotion = campaign(min_order_amount=100_000)
        create_code("MIN", promotion_id=str(promotion.id.value))

        assert validate(promo_code_service, "MIN", amount=50_000).discount_amount == 2_000

    def test_enforced_when_enabled(
        self, promotion_store, config_service, rate_service, clock, audit, create_code, campaign
    ):
        service = PromoCodeService(
            promotion_store,
            promotion_store,
            config_service,
            rate_service,
            clock=clock,
            audit=audit,
            enforce_min_order_amount=True,
        )
        promotion = campaign(min_order_amount=100_000)
        create_code("MIN", promotion_id=str(promotion.id.value))

        with pytest.raises(BelowMinimumOrderAmountError) as excinfo:
            validate(service, "MIN", amount=50_000)
        assert excinfo.value.minimum == 100_000
        assert validate(service, "MIN", amount=100_000).discount_amount == 2_000
