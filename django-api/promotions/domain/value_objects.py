"""Domain primitives that enforce validity at creation time."""

from dataclasses import dataclass
from typing import Self
from uuid import UUID


@dataclass(frozen=True)
class PromotionId:
    """Unique identifier for a Promotion."""

    value: UUID

    @classmethod
    def from_string(cls, value: str) -> Self:
        return cls(value=UUID(value))


@dataclass(frozen=True)
class PromoCodeId:
    """Unique identifier for a PromoCode."""

    value: UUID

    @classmethod
    def from_string(cls, value: str) -> Self:
        return cls(value=UUID(value))


@dataclass(frozen=True)
class RedemptionId:
    """Unique identifier for a PromoRedemption."""

    value: UUID


def normalize_code(raw: str) -> str:
    """Codes are matched case-insensitively and stored upper-cased."""
    return raw.strip().upper()
