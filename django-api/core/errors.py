"""Base domain error shared by every app."""

from dataclasses import dataclass
from enum import Enum


@dataclass(eq=False)
class DomainError(Exception):
    """Base domain error with code and user-safe message."""

    code: Enum
    message: str

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


class ErrorCode(Enum):
    """Error codes shared across apps."""

    INVALID_WINDOW = "INVALID_WINDOW"
    CONCURRENT_UPDATE = "CONCURRENT_UPDATE"


class InvalidWindowError(DomainError):
    """Raised when a validity window does not start before it ends."""

    def __init__(self, starts_at, ends_at) -> None:
        super().__init__(
            code=ErrorCode.INVALID_WINDOW,
            message="Start must be before end",
        )
        self.starts_at = starts_at
        self.ends_at = ends_at


class ConcurrentUpdateError(DomainError):
    """Raised when a write lost a race with another writer. Safe to retry."""

    def __init__(self, resource: str) -> None:
        super().__init__(
            code=ErrorCode.CONCURRENT_UPDATE,
            message="The resource was modified concurrently, please retry",
        )
        self.resource = resource
