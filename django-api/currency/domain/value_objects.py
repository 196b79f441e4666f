"""Domain primitives that enforce validity at creation time."""

from dataclasses import dataclass
from typing import Self
from uuid import UUID

from currency.domain.errors import CurrencyMismatchError, InvalidCurrencyCodeError
from currency.domain.registry import is_valid_currency


@dataclass(frozen=True)
class CurrencyCode:
    """Three-letter uppercase ISO 4217 code known to the registry."""

    value: str

    def __post_init__(self) -> None:
        if (
            not isinstance(self.value, str)
            or len(self.value) != 3
            or not self.value.isalpha()
            or not self.value.isupper()
            or not is_valid_currency(self.value)
        ):
            raise InvalidCurrencyCodeError(str(self.value))

    @classmethod
    def parse(cls, value: str) -> Self:
        """Build a code from user input, upper-casing it first."""
        if not isinstance(value, str):
            raise InvalidCurrencyCodeError(str(value))
        return cls(value=value.strip().upper())

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class ExchangeRateId:
    """Unique identifier for an ExchangeRate row."""

    value: UUID

    @classmethod
    def from_string(cls, value: str) -> Self:
        return cls(value=UUID(value))


@dataclass(frozen=True)
class Money:
    """Integer amount of minor units tagged with its currency.

    Arithmetic and ordering between different currencies raise
    CurrencyMismatchError instead of coercing.
    """

    amount: int
    currency: CurrencyCode

    def __post_init__(self) -> None:
        if isinstance(self.amount, bool) or not isinstance(self.amount, int):
            raise TypeError("Money amount must be an integer number of minor units")
        if not isinstance(self.currency, CurrencyCode):
            raise TypeError("Money currency must be a CurrencyCode")

    @classmethod
    def of(cls, amount: int, currency: str) -> Self:
        return cls(amount=amount, currency=CurrencyCode.parse(currency))

    @classmethod
    def zero(cls, currency: CurrencyCode) -> Self:
        return cls(amount=0, currency=currency)

    def _require_same_currency(self, other: "Money") -> None:
        if self.currency != other.currency:
            raise CurrencyMismatchError(str(self.currency), str(other.currency))

    def __add__(self, other: "Money") -> "Money":
        if not isinstance(other, Money):
            return NotImplemented
        self._require_same_currency(other)
        return Money(self.amount + other.amount, self.currency)

    def __sub__(self, other: "Money") -> "Money":
        if not isinstance(other, Money):
            return NotImplemented
        self._require_same_currency(other)
        return Money(self.amount - other.amount, self.currency)

    def __mul__(self, factor: int) -> "Money":
        if isinstance(factor, bool) or not isinstance(factor, int):
            return NotImplemented
        return Money(self.amount * factor, self.currency)

    __rmul__ = __mul__

    def __neg__(self) -> "Money":
        return Money(-self.amount, self.currency)

    def __lt__(self, other: "Money") -> bool:
        if not isinstance(other, Money):
            return NotImplemented
        self._require_same_currency(other)
        return self.amount < other.amount

    def __le__(self, other: "Money") -> bool:
        if not isinstance(other, Money):
            return NotImplemented
        self._require_same_currency(other)
        return self.amount <= other.amount

    def __gt__(self, other: "Money") -> bool:
        if not isinstance(other, Money):
            return NotImplemented
        self._require_same_currency(other)
        return self.amount > other.amount

    def __ge__(self, other: "Money") -> bool:
        if not isinstance(other, Money):
            return NotImplemented
        self._require_same_currency(other)
        return self.amount >= other.amount

    def min_of(self, other: "Money") -> "Money":
        """Return the smaller of the two amounts; both must share a currency."""
        return self if self <= other else other

    def is_negative(self) -> bool:
        return self.amount < 0

    def __str__(self) -> str:
        return f"{self.amount} {self.currency}"
