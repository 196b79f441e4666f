import uuid

import django.db.models.expressions
from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="CurrencyConfiguration",
            fields=[
                ("id", models.PositiveSmallIntegerField(default=1, editable=False, primary_key=True, serialize=False)),
                ("default_currency", models.CharField(max_length=3)),
                ("supported_currencies", models.JSONField(default=list)),
                ("multi_currency_enabled", models.BooleanField(default=False)),
                ("currency_symbol", models.CharField(max_length=8)),
                ("currency_position", models.CharField(choices=[("before", "Before amount"), ("after", "After amount")], default="before", max_length=6)),
                ("decimal_places", models.PositiveSmallIntegerField(default=2)),
                ("decimal_separator", models.CharField(default=".", max_length=3)),
                ("thousands_separator", models.CharField(blank=True, default=",", max_length=3)),
                ("exchange_rates_enabled", models.BooleanField(default=False)),
                ("allow_organizer_currency", models.BooleanField(default=False)),
                ("auto_update_rates", models.BooleanField(default=False)),
                ("update_frequency", models.CharField(default="daily", max_length=20)),
                ("updated_by", models.CharField(blank=True, max_length=64, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "verbose_name": "currency configuration",
                "verbose_name_plural": "currency configuration",
            },
        ),
        migrations.CreateModel(
            name="ExchangeRate",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("from_currency", models.CharField(max_length=3)),
                ("to_currency", models.CharField(max_length=3)),
                ("rate", models.DecimalField(decimal_places=10, max_digits=28)),
                ("inverse_rate", models.DecimalField(decimal_places=10, max_digits=28)),
                ("source", models.CharField(choices=[("manual", "Manual"), ("api", "API import"), ("system", "System")], default="manual", max_length=10)),
                ("provider", models.CharField(blank=True, max_length=100, null=True)),
                ("valid_from", models.DateTimeField()),
                ("valid_until", models.DateTimeField(blank=True, null=True)),
                ("is_active", models.BooleanField(default=True)),
                ("created_by", models.CharField(blank=True, max_length=64, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
            options={
                "ordering": ["from_currency", "to_currency", "-valid_from"],
                "indexes": [
                    models.Index(fields=["from_currency", "to_currency", "is_active"], name="exrate_pair_active_idx"),
                    models.Index(fields=["valid_from"], name="exrate_valid_from_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(condition=models.Q(("is_active", True)), fields=("from_currency", "to_currency"), name="one_active_rate_per_pair"),
                    models.CheckConstraint(condition=models.Q(("from_currency", django.db.models.expressions.F("to_currency")), _negated=True), name="rate_pair_distinct"),
                    models.CheckConstraint(condition=models.Q(("rate__gt", 0)), name="rate_positive"),
                ],
            },
        ),
        migrations.CreateModel(
            name="CurrencyChangeLog",
            fields=[
                ("id", models.BigAutoField(primary_key=True, serialize=False)),
                ("change_type", models.CharField(max_length=40)),
                ("old_value", models.JSONField()),
                ("new_value", models.JSONField()),
                ("changed_by", models.CharField(max_length=64)),
                ("ip_address", models.GenericIPAddressField(blank=True, null=True)),
                ("user_agent", models.TextField(blank=True, null=True)),
                ("created_at", models.DateTimeField(db_index=True)),
            ],
            options={
                "ordering": ["-created_at", "-id"],
            },
        ),
    ]
