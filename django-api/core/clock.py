"""Time source used by services.

Services never call ``timezone.now()`` directly so tests can pin the instant.
"""

from abc import ABC, abstractmethod
from datetime import datetime, timedelta

from django.utils import timezone


class Clock(ABC):
    """Returns timezone-aware instants."""

    @abstractmethod
    def now(self) -> datetime: ...


class SystemClock(Clock):
    def now(self) -> datetime:
        return timezone.now()


class FixedClock(Clock):
    """Clock frozen at a given instant; ``advance`` moves it forward."""

    def __init__(self, fixed: datetime) -> None:
        if timezone.is_naive(fixed):
            raise ValueError("FixedClock requires a timezone-aware datetime")
        self._fixed = fixed

    def now(self) -> datetime:
        return self._fixed

    def advance(self, delta: timedelta) -> None:
        self._fixed = self._fixed + delta
