import uuid

import django.db.models.deletion
import django.db.models.expressions
from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Promotion",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("org_id", models.CharField(db_index=True, max_length=64)),
                ("name", models.CharField(max_length=255)),
                ("description", models.TextField(blank=True, default="")),
                ("type", models.CharField(choices=[("discount", "Discount"), ("access", "Access")], default="discount", max_length=10)),
                ("discount_type", models.CharField(choices=[("percentage", "Percentage"), ("fixed", "Fixed amount")], max_length=10)),
                ("discount_value", models.DecimalField(decimal_places=2, max_digits=14)),
                ("currency", models.CharField(max_length=3)),
                ("max_uses", models.PositiveIntegerField(default=0)),
                ("max_uses_per_user", models.PositiveIntegerField(blank=True, null=True)),
                ("starts_at", models.DateTimeField()),
                ("ends_at", models.DateTimeField()),
                ("event_ids", models.JSONField(blank=True, default=list)),
                ("ticket_type_ids", models.JSONField(blank=True, default=list)),
                ("min_order_amount", models.PositiveBigIntegerField(blank=True, null=True)),
                ("redemptions", models.PositiveIntegerField(default=0)),
                ("created_by", models.CharField(blank=True, max_length=64, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [models.Index(fields=["org_id", "-created_at"], name="promotion_org_created_idx")],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("starts_at__lt", django.db.models.expressions.F("ends_at"))),
                        name="promotion_window_ordered",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("discount_value__gte", 0)),
                        name="promotion_discount_non_negative",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="PromoCode",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("code", models.CharField(max_length=50)),
                ("org_id", models.CharField(max_length=64)),
                (
                    "promotion",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="promo_codes",
                        to="promotions.promotion",
                    ),
                ),
                ("kind", models.CharField(choices=[("discount", "Discount"), ("access", "Access")], default="discount", max_length=10)),
                ("percent_off", models.DecimalField(blank=True, decimal_places=2, max_digits=5, null=True)),
                ("amount_off_cents", models.PositiveBigIntegerField(blank=True, null=True)),
                ("currency", models.CharField(max_length=3)),
                ("max_redemptions", models.PositiveIntegerField(blank=True, null=True)),
                ("per_user_limit", models.PositiveIntegerField(blank=True, null=True)),
                ("starts_at", models.DateTimeField(blank=True, null=True)),
                ("ends_at", models.DateTimeField(blank=True, null=True)),
                ("event_id", models.CharField(blank=True, max_length=64, null=True)),
                ("created_by", models.CharField(blank=True, max_length=64, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [models.Index(fields=["code"], name="promo_code_code_idx")],
                "constraints": [
                    models.UniqueConstraint(fields=("org_id", "code"), name="promo_code_unique_per_org"),
                    models.CheckConstraint(
                        condition=models.Q(("percent_off__isnull", True), ("amount_off_cents__isnull", True), _connector="OR"),
                        name="promo_code_single_discount",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="PromoRedemption",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("code", models.CharField(max_length=50)),
                ("user_id", models.CharField(max_length=64)),
                ("order_id", models.CharField(max_length=64)),
                ("redeemed_at", models.DateTimeField()),
                (
                    "promo",
                    models.ForeignKey(
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="redemptions",
                        to="promotions.promocode",
                    ),
                ),
            ],
            options={
                "ordering": ["-redeemed_at"],
                "indexes": [models.Index(fields=["promo", "user_id"], name="redemption_promo_user_idx")],
                "constraints": [
                    models.UniqueConstraint(fields=("promo", "order_id"), name="redemption_once_per_order"),
                ],
            },
        ),
    ]
