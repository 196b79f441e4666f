from django.db import migrations

DEFAULTS = {
    "default_currency": "NGN",
    "supported_currencies": ["NGN", "USD", "GBP", "EUR", "GHS", "KES", "ZAR"],
    "multi_currency_enabled": False,
    "currency_symbol": "₦",
    "currency_position": "before",
}


def seed_currency_configuration(apps, schema_editor):
    CurrencyConfiguration = apps.get_model("currency", "CurrencyConfiguration")
    CurrencyConfiguration.objects.get_or_create(id=1, defaults=DEFAULTS)


class Migration(migrations.Migration):
    dependencies = [
        ("currency", "0001_initial"),
    ]

    operations = [
        migrations.RunPython(seed_currency_configuration, migrations.RunPython.noop),
    ]
