from django.apps import AppConfig


class CurrencyAppConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "currency"
    verbose_name = "Currency"

    def ready(self) -> None:
        from currency import signals  # noqa: F401
