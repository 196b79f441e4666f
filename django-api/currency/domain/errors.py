"""Domain error codes for the currency module."""

from enum import Enum

from core.errors import DomainError


class ErrorCode(Enum):
    """Domain error codes."""

    INVALID_CURRENCY_CODE = "INVALID_CURRENCY_CODE"
    CURRENCY_MISMATCH = "CURRENCY_MISMATCH"
    RATE_NOT_FOUND = "RATE_NOT_FOUND"
    INVALID_RATE = "INVALID_RATE"
    INVALID_CONFIGURATION = "INVALID_CONFIGURATION"


class InvalidCurrencyCodeError(DomainError):
    """Raised when a code is not in the currency registry."""

    def __init__(self, currency_code: str) -> None:
        super().__init__(
            code=ErrorCode.INVALID_CURRENCY_CODE,
            message=f"Invalid currency code: {currency_code}",
        )
        self.currency_code = currency_code


class CurrencyMismatchError(DomainError):
    """Raised when money in two currencies is combined."""

    def __init__(self, left: str, right: str) -> None:
        super().__init__(
            code=ErrorCode.CURRENCY_MISMATCH,
            message=f"Cannot combine {left} with {right}",
        )
        self.left = left
        self.right = right


class RateNotFoundError(DomainError):
    """Raised when no active rate covers a pair at the requested instant."""

    def __init__(self, from_currency: str, to_currency: str) -> None:
        super().__init__(
            code=ErrorCode.RATE_NOT_FOUND,
            message=f"No exchange rate found for {from_currency} to {to_currency}",
        )
        self.from_currency = from_currency
        self.to_currency = to_currency


class InvalidRateError(DomainError):
    def __init__(self, reason: str) -> None:
        super().__init__(code=ErrorCode.INVALID_RATE, message=reason)


class InvalidConfigurationError(DomainError):
    """Raised when a configuration patch carries an unusable value."""

    def __init__(self, field_name: str, reason: str) -> None:
        super().__init__(
            code=ErrorCode.INVALID_CONFIGURATION,
            message=f"{field_name}: {reason}",
        )
        self.field_name = field_name
