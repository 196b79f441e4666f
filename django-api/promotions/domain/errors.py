"""Domain error codes for the promotions module."""

from enum import Enum

from core.errors import DomainError


class ErrorCode(Enum):
    """Domain error codes."""

    INVALID_ID = "INVALID_ID"
    PROMOTION_NOT_FOUND = "PROMOTION_NOT_FOUND"
    PROMO_CODE_NOT_FOUND = "PROMO_CODE_NOT_FOUND"
    CODE_NOT_FOUND = "CODE_NOT_FOUND"
    NOT_YET_ACTIVE = "NOT_YET_ACTIVE"
    EXPIRED = "EXPIRED"
    USAGE_LIMIT_REACHED = "USAGE_LIMIT_REACHED"
    USER_USAGE_LIMIT_REACHED = "USER_USAGE_LIMIT_REACHED"
    NOT_APPLICABLE_TO_EVENT = "NOT_APPLICABLE_TO_EVENT"
    BELOW_MINIMUM_ORDER_AMOUNT = "BELOW_MINIMUM_ORDER_AMOUNT"
    DUPLICATE_PROMO_CODE = "DUPLICATE_PROMO_CODE"
    INVALID_PROMO_CODE = "INVALID_PROMO_CODE"
    INVALID_DISCOUNT = "INVALID_DISCOUNT"
    INVALID_ORDER_AMOUNT = "INVALID_ORDER_AMOUNT"


class InvalidIdError(DomainError):
    """Raised when a promotion or promo code ID is not a UUID."""

    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.INVALID_ID,
            message="Invalid ID format",
        )


class PromotionNotFoundError(DomainError):
    """Raised when a promotion is missing or belongs to another organization."""

    def __init__(self, promotion_id: str) -> None:
        super().__init__(
            code=ErrorCode.PROMOTION_NOT_FOUND,
            message="Promotion not found",
        )
        self.promotion_id = promotion_id


class PromoCodeNotFoundError(DomainError):
    """Raised when a promo code looked up by ID does not exist."""

    def __init__(self, promo_code_id: str) -> None:
        super().__init__(
            code=ErrorCode.PROMO_CODE_NOT_FOUND,
            message="Promo code not found",
        )
        self.promo_code_id = promo_code_id


class CodeNotFoundError(DomainError):
    """Raised when a code entered at checkout does not resolve to one promo code."""

    def __init__(self, code: str) -> None:
        super().__init__(
            code=ErrorCode.CODE_NOT_FOUND,
            message="Invalid promo code",
        )
        self.promo_code = code


class NotYetActiveError(DomainError):
    def __init__(self, code: str) -> None:
        super().__init__(
            code=ErrorCode.NOT_YET_ACTIVE,
            message="Promo code is not yet active",
        )
        self.promo_code = code


class ExpiredError(DomainError):
    def __init__(self, code: str) -> None:
        super().__init__(
            code=ErrorCode.EXPIRED,
            message="Promo code has expired",
        )
        self.promo_code = code


class UsageLimitReachedError(DomainError):
    def __init__(self, code: str) -> None:
        super().__init__(
            code=ErrorCode.USAGE_LIMIT_REACHED,
            message="Promo code has reached its maximum usage limit",
        )
        self.promo_code = code


class UserUsageLimitReachedError(DomainError):
    def __init__(self, code: str) -> None:
        super().__init__(
            code=ErrorCode.USER_USAGE_LIMIT_REACHED,
            message="You have reached the maximum usage limit for this promo code",
        )
        self.promo_code = code


class NotApplicableToEventError(DomainError):
    def __init__(self, code: str) -> None:
        super().__init__(
            code=ErrorCode.NOT_APPLICABLE_TO_EVENT,
            message="Promo code is not applicable to this event",
        )
        self.promo_code = code


class BelowMinimumOrderAmountError(DomainError):
    def __init__(self, code: str, minimum: int) -> None:
        super().__init__(
            code=ErrorCode.BELOW_MINIMUM_ORDER_AMOUNT,
            message="Order amount is below the minimum for this promo code",
        )
        self.promo_code = code
        self.minimum = minimum


class DuplicatePromoCodeError(DomainError):
    """Raised when the code already exists in the organization."""

    def __init__(self, code: str) -> None:
        super().__init__(
            code=ErrorCode.DUPLICATE_PROMO_CODE,
            message="Promo code already exists",
        )
        self.promo_code = code


class InvalidPromoCodeError(DomainError):
    def __init__(self, reason: str) -> None:
        super().__init__(code=ErrorCode.INVALID_PROMO_CODE, message=reason)


class InvalidDiscountError(DomainError):
    """Raised when discount terms are out of range or ambiguous."""

    def __init__(self, reason: str) -> None:
        super().__init__(code=ErrorCode.INVALID_DISCOUNT, message=reason)


class InvalidOrderAmountError(DomainError):
    def __init__(self, amount: int) -> None:
        super().__init__(code=ErrorCode.INVALID_ORDER_AMOUNT, message="Order amount cannot be negative")
        self.amount = amount
