"""Exchange rate ledger.

Rates are directional, time-windowed rows. Adding a rate deactivates the
pair's previous active row in the same store transaction, so readers see
either the old rate or the new one, never both and never neither.
"""

import logging
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation, localcontext
from uuid import uuid4

from django.conf import settings
from django.utils import timezone

from core.audit import AuditSink, LoggingAuditSink
from core.clock import Clock, SystemClock
from core.errors import InvalidWindowError
from currency.domain import CurrencyCode, ExchangeRate, ExchangeRateId, Money, RateSource
from currency.domain.errors import InvalidRateError, RateNotFoundError
from currency.domain.models import RATE_DECIMAL_PLACES
from currency.domain.registry import minor_unit
from currency.stores.interfaces import ExchangeRateStore

logger = logging.getLogger(__name__)

_ARITHMETIC_PRECISION = 60


def parse_rate(value: Decimal | int | str) -> Decimal:
    """Convert user input to Decimal. Binary floats are refused."""
    if isinstance(value, (bool, float)):
        raise InvalidRateError("Rate must be given as a decimal string or Decimal, not a float")
    try:
        rate = value if isinstance(value, Decimal) else Decimal(str(value).strip())
    except InvalidOperation:
        raise InvalidRateError(f"Invalid rate: {value!r}") from None
    if not rate.is_finite() or rate <= 0:
        raise InvalidRateError("Rate must be a positive number")
    return rate


def _parse_source(source: RateSource | str) -> RateSource:
    try:
        return RateSource(source)
    except ValueError:
        raise InvalidRateError(f"Unknown rate source: {source}") from None


class ExchangeRateService:
    """Service for adding, resolving and applying exchange rates."""

    def __init__(
        self,
        store: ExchangeRateStore,
        clock: Clock | None = None,
        audit: AuditSink | None = None,
        rate_scale: int | None = None,
    ) -> None:
        self._store = store
        self._clock = clock or SystemClock()
        self._audit = audit or LoggingAuditSink()
        scale = settings.CURRENCY_RATE_SCALE if rate_scale is None else rate_scale
        self._quantum = Decimal(1).scaleb(-min(scale, RATE_DECIMAL_PLACES))

    def add_rate(
        self,
        from_currency: str,
        to_currency: str,
        rate: Decimal | int | str,
        *,
        actor_id: str,
        source: RateSource | str = RateSource.MANUAL,
        provider: str | None = None,
        valid_from: datetime | None = None,
        valid_until: datetime | None = None,
    ) -> ExchangeRate:
        """Record a new active rate for the ordered pair, retiring the previous one.

        Raises:
            InvalidCurrencyCodeError: If either code is not in the registry.
            InvalidRateError: If the rate is not positive or the pair is degenerate.
            InvalidWindowError: If ``valid_until`` does not follow ``valid_from``.
        """
        src = CurrencyCode.parse(from_currency)
        dst = CurrencyCode.parse(to_currency)
        if src == dst:
            raise InvalidRateError("Source and target currency must differ")

        value = parse_rate(rate).quantize(self._quantum, rounding=ROUND_HALF_UP)
        if value <= 0:
            raise InvalidRateError("Rate is too small for the configured precision")
        with localcontext() as ctx:
            ctx.prec = _ARITHMETIC_PRECISION
            inverse = (Decimal(1) / value).quantize(self._quantum, rounding=ROUND_HALF_UP)

        now = self._clock.now()
        starts = valid_from or now
        for instant in (starts, valid_until):
            if instant is not None and timezone.is_naive(instant):
                raise ValueError("Rate validity bounds must be timezone-aware")
        if valid_until is not None and valid_until <= starts:
            raise InvalidWindowError(starts, valid_until)

        record = ExchangeRate(
            id=ExchangeRateId(uuid4()),
            from_currency=src,
            to_currency=dst,
            rate=value,
            inverse_rate=inverse,
            source=_parse_source(source),
            provider=provider,
            valid_from=starts,
            valid_until=valid_until,
            is_active=True,
            created_by=actor_id,
            created_at=now,
        )
        deactivated = self._store.replace_active_rate(record, deactivated_at=now)

        logger.info("Exchange rate added: 1 %s = %s %s", src, value, dst)
        self._audit.record(
            actor_id,
            "exchange_rate.added",
            f"{src}/{dst}",
            {
                "rate": str(value),
                "inverse_rate": str(inverse),
                "source": record.source.value,
                "provider": provider,
                "valid_from": starts.isoformat(),
                "valid_until": valid_until.isoformat() if valid_until else None,
                "deactivated": deactivated,
            },
        )
        return record

    def get_rate(self, from_currency: str, to_currency: str, at: datetime | None = None) -> Decimal:
        """Return the rate for the exact ordered pair effective at ``at``.

        Raises:
            RateNotFoundError: If no active row covers the instant.
        """
        src = CurrencyCode.parse(from_currency)
        dst = CurrencyCode.parse(to_currency)
        if src == dst:
            return Decimal(1)
        row = self._store.find_effective_rate(src, dst, at or self._clock.now())
        if row is None:
            raise RateNotFoundError(src.value, dst.value)
        return row.rate

    def convert(
        self, amount_minor: int, from_currency: str, to_currency: str, at: datetime | None = None
    ) -> int:
        """Convert minor units, rounding half-up to a whole minor unit."""
        if isinstance(amount_minor, bool) or not isinstance(amount_minor, int):
            raise TypeError("amount must be an integer number of minor units")
        src = CurrencyCode.parse(from_currency)
        dst = CurrencyCode.parse(to_currency)
        if src == dst:
            return amount_minor

        rate = self.get_rate(src.value, dst.value, at)
        with localcontext() as ctx:
            ctx.prec = _ARITHMETIC_PRECISION
            converted = (Decimal(amount_minor) * rate).scaleb(minor_unit(dst.value) - minor_unit(src.value))
            return int(converted.quantize(Decimal(1), rounding=ROUND_HALF_UP))

    def convert_money(self, money: Money, to_currency: CurrencyCode, at: datetime | None = None) -> Money:
        return Money(self.convert(money.amount, money.currency.value, to_currency.value, at), to_currency)

    def list_active_rates(self, at: datetime | None = None) -> list[ExchangeRate]:
        return self._store.list_effective_rates(at or self._clock.now())

    def get_rate_history(self, from_currency: str, to_currency: str) -> list[ExchangeRate]:
        return self._store.list_rates_for_pair(CurrencyCode.parse(from_currency), CurrencyCode.parse(to_currency))
