"""Django signals for cache invalidation.

The service already drops the cached configuration after its own writes.
These handlers cover writes made elsewhere (admin, shell, data migrations)
and run after commit so a reader cannot re-cache the pre-commit row.
"""

from django.core.cache import cache
from django.db import transaction
from django.db.models.signals import post_delete, post_save
from django.dispatch import receiver

from currency.models import CurrencyConfiguration
from currency.services.config_service import CONFIG_CACHE_KEY


@receiver([post_save, post_delete], sender=CurrencyConfiguration)
def invalidate_config_cache(sender, instance, **kwargs):
    """Invalidate the cached configuration when the row is saved or deleted."""
    transaction.on_commit(lambda: cache.delete(CONFIG_CACHE_KEY))
