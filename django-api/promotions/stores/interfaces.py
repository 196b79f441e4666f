"""Store interfaces (repository pattern).

Stores must be swappable and return domain models.
"""

from abc import ABC, abstractmethod
from collections.abc import Callable
from datetime import datetime

from promotions.domain import (
    CodeUsage,
    PromoCode,
    PromoCodeId,
    PromoRedemption,
    Promotion,
    PromotionId,
    PromotionStats,
)

# Called under the code's lock with the freshly loaded code and its usage.
# Raises to abort the redemption.
RedemptionGuard = Callable[[PromoCode, CodeUsage], None]


class PromotionStore(ABC):
    """Interface for promotion campaign persistence."""

    @abstractmethod
    def add_promotion(self, promotion: Promotion, created_by: str | None = None) -> Promotion:
        ...

    @abstractmethod
    def get_promotion(self, promotion_id: PromotionId) -> Promotion | None:
        """Return a promotion by ID, or None if not found."""
        ...

    @abstractmethod
    def save_promotion(self, promotion: Promotion) -> Promotion:
        """Persist changed campaign fields. The redemptions counter is left as stored."""
        ...

    @abstractmethod
    def delete_promotion(self, promotion_id: PromotionId) -> bool:
        """Delete a promotion and its codes. Redemptions are kept with no code reference."""
        ...

    @abstractmethod
    def list_promotions(self, org_id: str) -> list[Promotion]:
        """Return an organization's promotions ordered by created_at descending."""
        ...

    @abstractmethod
    def stats(self, at: datetime, top: int) -> PromotionStats:
        """Platform-wide totals, with the ``top`` codes by redemption count."""
        ...


class PromoCodeStore(ABC):
    """Interface for promo code and redemption persistence."""

    @abstractmethod
    def add_code(self, promo_code: PromoCode, created_by: str | None = None) -> PromoCode:
        """Insert a code.

        Raises:
            DuplicatePromoCodeError: If the code already exists in the organization.
        """
        ...

    @abstractmethod
    def get_code(self, promo_code_id: PromoCodeId) -> PromoCode | None:
        ...

    @abstractmethod
    def find_codes(self, code: str, org_id: str | None = None) -> list[PromoCode]:
        """Return every code matching the normalized ``code``, optionally within one org."""
        ...

    @abstractmethod
    def code_exists(self, org_id: str, code: str, exclude: PromoCodeId | None = None) -> bool:
        ...

    @abstractmethod
    def save_code(self, promo_code: PromoCode) -> PromoCode:
        """Persist changed fields.

        Raises:
            DuplicatePromoCodeError: If a rename collides with another code in the organization.
        """
        ...

    @abstractmethod
    def delete_code(self, promo_code_id: PromoCodeId) -> bool:
        ...

    @abstractmethod
    def list_codes(
        self, org_id: str, promotion_id: PromotionId | None = None
    ) -> list[tuple[PromoCode, int]]:
        """Return codes with their redemption counts, newest first."""
        ...

    @abstractmethod
    def usage(self, promo_code_id: PromoCodeId, user_id: str | None = None) -> CodeUsage:
        """Count redemptions for a code, and for one user of it when ``user_id`` is given."""
        ...

    @abstractmethod
    def list_redemptions(self, promo_code_id: PromoCodeId) -> list[PromoRedemption]:
        ...

    @abstractmethod
    def redeem(
        self,
        promo_code_id: PromoCodeId,
        user_id: str,
        order_id: str,
        redeemed_at: datetime,
        guard: RedemptionGuard,
    ) -> tuple[PromoRedemption, bool] | None:
        """Record one redemption per (code, order) atomically.

        Under a lock on the code: return ``(existing, False)`` if the order
        already redeemed it; otherwise call ``guard`` with the current usage,
        insert the redemption, bump the linked promotion's counter and return
        ``(redemption, True)``. Returns None if the code does not exist.
        """
        ...
