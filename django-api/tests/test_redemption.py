"""Unit tests for promo code redemption.

Covers idempotency per order and cap enforcement under concurrent calls.
Run with: pytest tests/test_redemption.py -v
"""

import threading
from datetime import timedelta
from decimal import Decimal
from uuid import uuid4

import pytest

from core.errors import DomainError
from promotions.domain import PromoCodeDraft, PromotionDraft
from promotions.domain.errors import (
    InvalidIdError,
    PromoCodeNotFoundError,
    UsageLimitReachedError,
    UserUsageLimitReachedError,
)


def redeem_concurrently(service, code_id: str, attempts: list[tuple[str, str]]) -> tuple[int, list[DomainError]]:
    """Fire every (user_id, order_id) attempt at once; return successes and errors."""
    barrier = threading.Barrier(len(attempts))
    lock = threading.Lock()
    created: list[bool] = []
    errors: list[DomainError] = []

    def worker(user_id: str, order_id: str) -> None:
        barrier.wait()
        try:
            _, was_created = service.use_promo_code(code_id, user_id, order_id)
        except DomainError as exc:
            with lock:
                errors.append(exc)
        else:
            with lock:
                created.append(was_created)

    threads = [threading.Thread(target=worker, args=attempt) for attempt in attempts]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()
    return sum(created), errors


@pytest.fixture
def promotion(promotion_service, clock):
    return promotion_service.create_promotion(
        "org-1",
        PromotionDraft(
            name="Launch",
            discount_type="percentage",
            discount_value=Decimal("10"),
            starts_at=clock.now() - timedelta(days=1),
            ends_at=clock.now() + timedelta(days=1),
        ),
        "admin-1",
    )


@pytest.fixture
def code(promo_code_service, promotion):
    return promo_code_service.create_promo_code(
        "org-1",
        PromoCodeDraft(code="LAUNCH", promotion_id=str(promotion.id.value), max_redemptions=5, per_user_limit=2),
        "admin-1",
    )


class TestUsePromoCode:
    """Tests for the mutating redemption path."""

    def test_creates_redemption_and_bumps_counter(self, promo_code_service, promotion_service, promotion, code, clock):
        redemption, created = promo_code_service.use_promo_code(str(code.id.value), "user-1", "order-1")

        assert created is True
        assert redemption.promo_id == code.id
        assert redemption.code == "LAUNCH"
        assert redemption.order_id == "order-1"
        assert redemption.redeemed_at == clock.now()
        assert promotion_service.get_promotion(str(promotion.id.value), "org-1").redemptions == 1

    def test_same_order_is_idempotent(self, promo_code_service, promotion_service, promotion, code, audit):
        """A repeat for the same order returns the first row and changes nothing."""
        first, _ = promo_code_service.use_promo_code(str(code.id.value), "user-1", "order-1")

        again, created = promo_code_service.use_promo_code(str(code.id.value), "user-1", "order-1")

        assert created is False
        assert again == first
        assert len(promo_code_service.list_redemptions(str(code.id.value), "org-1")) == 1
        assert promotion_service.get_promotion(str(promotion.id.value), "org-1").redemptions == 1
        assert audit.actions().count("promo_code.redeemed") == 1

    def test_repeat_allowed_even_when_cap_reached(self, promo_code_service, code):
        for order in ("o-1", "o-2"):
            promo_code_service.use_promo_code(str(code.id.value), "user-1", order)

        _, created = promo_code_service.use_promo_code(str(code.id.value), "user-1", "o-2")

        assert created is False

    def test_per_user_cap(self, promo_code_service, code):
        for order in ("o-1", "o-2"):
            promo_code_service.use_promo_code(str(code.id.value), "user-1", order)

        with pytest.raises(UserUsageLimitReachedError):
            promo_code_service.use_promo_code(str(code.id.value), "user-1", "o-3")

    def test_global_cap(self, promo_code_service, code):
        for index in range(5):
            promo_code_service.use_promo_code(str(code.id.value), f"user-{index}", f"order-{index}")

        with pytest.raises(UsageLimitReachedError):
            promo_code_service.use_promo_code(str(code.id.value), "user-9", "order-9")

    def test_invalid_id(self, promo_code_service):
        with pytest.raises(InvalidIdError):
            promo_code_service.use_promo_code("nope", "user-1", "order-1")

    def test_unknown_code(self, promo_code_service):
        with pytest.raises(PromoCodeNotFoundError):
            promo_code_service.use_promo_code(str(uuid4()), "user-1", "order-1")


class TestConcurrentRedemption:
    """Caps hold when many checkouts finish at the same moment."""

    def test_global_cap_never_exceeded(self, promo_code_service, code):
        attempts = [(f"user-{i}", f"order-{i}") for i in range(20)]

        succeeded, errors = redeem_concurrently(promo_code_service, str(code.id.value), attempts)

        assert succeeded == 5
        assert len(errors) == 15
        assert all(isinstance(e, UsageLimitReachedError) for e in errors)
        assert len(promo_code_service.list_redemptions(str(code.id.value), "org-1")) == 5

    def test_per_user_cap_never_exceeded(self, promo_code_service, code):
        attempts = [("user-1", f"order-{i}") for i in range(10)]

        succeeded, errors = redeem_concurrently(promo_code_service, str(code.id.value), attempts)

        assert succeeded == 2
        assert all(isinstance(e, UserUsageLimitReachedError) for e in errors)

    def test_same_order_from_many_threads_creates_one_row(self, promo_code_service, promotion_service, promotion, code):
        attempts = [("user-1", "order-1")] * 8

        succeeded, errors = redeem_concurrently(promo_code_service, str(code.id.value), attempts)

        assert succeeded == 1
        assert errors == []
        assert len(promo_code_service.list_redemptions(str(code.id.value), "org-1")) == 1
        assert promotion_service.get_promotion(str(promotion.id.value), "org-1").redemptions == 1
