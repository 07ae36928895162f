import uuid

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("accounts", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="PaymentMethod",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("uuid", models.UUIDField(default=uuid.uuid4, editable=False, unique=True)),
                ("name", models.CharField(blank=True, max_length=255)),
                (
                    "service",
                    models.CharField(
                        choices=[("stripe", "Stripe"), ("paypal", "PayPal"), ("opencollective", "Open Collective")],
                        default="stripe",
                        max_length=20,
                    ),
                ),
                (
                    "type",
                    models.CharField(
                        choices=[
                            ("creditcard", "Credit card"),
                            ("prepaid", "Prepaid"),
                            ("giftcard", "Gift card"),
                            ("adaptive", "Adaptive"),
                        ],
                        default="creditcard",
                        max_length=20,
                    ),
                ),
                ("token", models.CharField(blank=True, max_length=255)),
                ("customer_id", models.CharField(blank=True, max_length=255)),
                ("currency", models.CharField(max_length=3)),
                ("data", models.JSONField(blank=True, default=dict)),
                ("saved", models.BooleanField(default=False)),
                (
                    "provision_status",
                    models.CharField(
                        choices=[("pending", "Pending"), ("provisioned", "Provisioned"), ("rejected", "Rejected")],
                        default="pending",
                        max_length=12,
                    ),
                ),
                ("stripe_error", models.JSONField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "collective",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="payment_methods",
                        to="accounts.collective",
                    ),
                ),
                (
                    "created_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="payment_methods",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ("-created_at",),
            },
        ),
    ]
