"""Django ORM implementation of the currency stores."""

from datetime import datetime

from django.db import IntegrityError, OperationalError, transaction
from django.db.models import Q

from core.errors import ConcurrentUpdateError
from currency import models as orm
from currency.domain import (
    ChangeType,
    CurrencyChange,
    CurrencyCode,
    CurrencyConfig,
    CurrencyPosition,
    ExchangeRate,
    ExchangeRateId,
    RateSource,
)
from currency.stores.interfaces import ConfigMutation, CurrencyConfigStore, ExchangeRateStore


def _to_config(row: orm.CurrencyConfiguration) -> CurrencyConfig:
    return CurrencyConfig(
        default_currency=CurrencyCode(row.default_currency),
        supported_currencies=tuple(CurrencyCode(c) for c in row.supported_currencies),
        multi_currency_enabled=row.multi_currency_enabled,
        currency_symbol=row.currency_symbol,
        currency_position=CurrencyPosition(row.currency_position),
        decimal_places=row.decimal_places,
        decimal_separator=row.decimal_separator,
        thousands_separator=row.thousands_separator,
        exchange_rates_enabled=row.exchange_rates_enabled,
        allow_organizer_currency=row.allow_organizer_currency,
        auto_update_rates=row.auto_update_rates,
        update_frequency=row.update_frequency,
        updated_by=row.updated_by,
        updated_at=row.updated_at,
    )


def _config_columns(config: CurrencyConfig) -> dict:
    columns = config.snapshot()
    columns["updated_by"] = config.updated_by
    return columns


def _to_change(row: orm.CurrencyChangeLog) -> CurrencyChange:
    return CurrencyChange(
        change_type=ChangeType(row.change_type),
        old_value=row.old_value,
        new_value=row.new_value,
        changed_by=row.changed_by,
        ip_address=row.ip_address,
        user_agent=row.user_agent,
        created_at=row.created_at,
    )


def _to_rate(row: orm.ExchangeRate) -> ExchangeRate:
    return ExchangeRate(
        id=ExchangeRateId(row.id),
        from_currency=CurrencyCode(row.from_currency),
        to_currency=CurrencyCode(row.to_currency),
        rate=row.rate,
        inverse_rate=row.inverse_rate,
        source=RateSource(row.source),
        provider=row.provider,
        valid_from=row.valid_from,
        valid_until=row.valid_until,
        is_active=row.is_active,
        created_by=row.created_by,
        created_at=row.created_at,
    )


def _covering(at: datetime) -> Q:
    return Q(is_active=True, valid_from__lte=at) & (
        Q(valid_until__isnull=True) | Q(valid_until__gte=at)
    )


class DjangoCurrencyConfigStore(CurrencyConfigStore):
    """Currency configuration backed by the singleton CurrencyConfiguration row."""

    def load(self) -> CurrencyConfig | None:
        row = orm.CurrencyConfiguration.objects.filter(pk=orm.SINGLETON_ID).first()
        return _to_config(row) if row else None

    def create_if_missing(self, config: CurrencyConfig) -> CurrencyConfig:
        row, _ = orm.CurrencyConfiguration.objects.get_or_create(
            pk=orm.SINGLETON_ID, defaults=_config_columns(config)
        )
        return _to_config(row)

    def update(self, mutate: ConfigMutation) -> tuple[CurrencyConfig, CurrencyConfig]:
        try:
            with transaction.atomic():
                row = orm.CurrencyConfiguration.objects.select_for_update().get(pk=orm.SINGLETON_ID)
                old = _to_config(row)
                new, change = mutate(old)
                for name, value in _config_columns(new).items():
                    setattr(row, name, value)
                row.save()
                if change is not None:
                    orm.CurrencyChangeLog.objects.create(
                        change_type=change.change_type.value,
                        old_value=change.old_value,
                        new_value=change.new_value,
                        changed_by=change.changed_by,
                        ip_address=change.ip_address,
                        user_agent=change.user_agent,
                        created_at=change.created_at,
                    )
        except OperationalError as exc:
            raise ConcurrentUpdateError("currency_configuration") from exc
        return old, _to_config(row)

    def list_changes(self, limit: int) -> list[CurrencyChange]:
        return [_to_change(row) for row in orm.CurrencyChangeLog.objects.all()[:limit]]


class DjangoExchangeRateStore(ExchangeRateStore):
    """Exchange rate ledger backed by the ExchangeRate table."""

    def replace_active_rate(self, rate: ExchangeRate, deactivated_at: datetime) -> int:
        pair = {"from_currency": str(rate.from_currency), "to_currency": str(rate.to_currency)}
        try:
            with transaction.atomic():
                active_ids = list(
                    orm.ExchangeRate.objects.select_for_update()
                    .filter(is_active=True, **pair)
                    .values_list("id", flat=True)
                )
                current = orm.ExchangeRate.objects.filter(id__in=active_ids)
                current.filter(
                    Q(valid_until__isnull=True) | Q(valid_until__gt=deactivated_at)
                ).update(valid_until=deactivated_at)
                current.update(is_active=False)
                orm.ExchangeRate.objects.create(
                    id=rate.id.value,
                    rate=rate.rate,
                    inverse_rate=rate.inverse_rate,
                    source=rate.source.value,
                    provider=rate.provider,
                    valid_from=rate.valid_from,
                    valid_until=rate.valid_until,
                    is_active=True,
                    created_by=rate.created_by,
                    **pair,
                )
        except (IntegrityError, OperationalError) as exc:
            # Another writer inserted an active row for the same pair first, or held the lock too long.
            raise ConcurrentUpdateError(f"exchange_rate:{pair['from_currency']}-{pair['to_currency']}") from exc
        return len(active_ids)

    def find_effective_rate(
        self, from_currency: CurrencyCode, to_currency: CurrencyCode, at: datetime
    ) -> ExchangeRate | None:
        row = (
            orm.ExchangeRate.objects.filter(
                _covering(at),
                from_currency=str(from_currency),
                to_currency=str(to_currency),
            )
            .order_by("-valid_from")
            .first()
        )
        return _to_rate(row) if row else None

    def list_effective_rates(self, at: datetime) -> list[ExchangeRate]:
        rows = orm.ExchangeRate.objects.filter(_covering(at)).order_by(
            "from_currency", "to_currency", "-valid_from"
        )
        return [_to_rate(row) for row in rows]

    def list_rates_for_pair(
        self, from_currency: CurrencyCode, to_currency: CurrencyCode
    ) -> list[ExchangeRate]:
        rows = orm.ExchangeRate.objects.filter(
            from_currency=str(from_currency), to_currency=str(to_currency)
        ).order_by("-valid_from", "-created_at")
        return [_to_rate(row) for row in rows]
