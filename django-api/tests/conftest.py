"""Pytest configuration and shared fixtures."""

from datetime import datetime, timezone

import pytest
from rest_framework.test import APIClient

from core.audit import RecordingAuditSink
from core.clock import FixedClock
from currency.services import CurrencyConfigService, ExchangeRateService
from currency.stores.memory_store import InMemoryCurrencyConfigStore, InMemoryExchangeRateStore
from promotions.services import PromoCodeService, PromotionService
from promotions.stores.memory_store import InMemoryPromotionStore

NOW = datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def api_client() -> APIClient:
    return APIClient()


@pytest.fixture
def admin_client(db, django_user_model) -> APIClient:
    user = django_user_model.objects.create_user(username="admin", password="secret", is_staff=True)
    client = APIClient()
    client.force_authenticate(user=user)
    return client


@pytest.fixture(autouse=True)
def clear_cache():
    from django.core.cache import cache
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(NOW)


@pytest.fixture
def audit() -> RecordingAuditSink:
    return RecordingAuditSink()


@pytest.fixture
def config_store() -> InMemoryCurrencyConfigStore:
    return InMemoryCurrencyConfigStore()


@pytest.fixture
def config_service(config_store, clock) -> CurrencyConfigService:
    return CurrencyConfigService(config_store, clock=clock)


@pytest.fixture
def rate_store() -> InMemoryExchangeRateStore:
    return InMemoryExchangeRateStore()


@pytest.fixture
def rate_service(rate_store, clock, audit) -> ExchangeRateService:
    return ExchangeRateService(rate_store, clock=clock, audit=audit)


@pytest.fixture
def promotion_store() -> InMemoryPromotionStore:
    return InMemoryPromotionStore()


@pytest.fixture
def promotion_service(promotion_store, config_service, clock, audit) -> PromotionService:
    return PromotionService(promotion_store, config_service, clock=clock, audit=audit)


@pytest.fixture
def promo_code_service(promotion_store, config_service, rate_service, clock, audit) -> PromoCodeService:
    return PromoCodeService(
        promotion_store,
        promotion_store,
        config_service,
        rate_service,
        clock=clock,
        audit=audit,
    )
