# payment_methods/models.py

import uuid

from django.conf import settings
from django.db import models


class PaymentMethodService(models.TextChoices):
    STRIPE = "stripe", "Stripe"
    PAYPAL = "paypal", "PayPal"
    OPENCOLLECTIVE = "opencollective", "Open Collective"


class PaymentMethodType(models.TextChoices):
    CREDITCARD = "creditcard", "Credit card"
    PREPAID = "prepaid", "Prepaid"
    GIFTCARD = "giftcard", "Gift card"
    ADAPTIVE = "adaptive", "Adaptive"


class ProvisionStatus(models.TextChoices):
    PENDING = "pending", "Pending"
    PROVISIONED = "provisioned", "Provisioned"
    REJECTED = "rejected", "Rejected"


class PaymentMethod(models.Model):
    uuid = models.UUIDField(default=uuid.uuid4, unique=True, editable=False)
    collective = models.ForeignKey(
        "accounts.Collective",
        on_delete=models.PROTECT,
        related_name="payment_methods",
    )
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="payment_methods",
    )
    name = models.CharField(max_length=255, blank=True)
    service = models.CharField(max_length=20, choices=PaymentMethodService.choices, default=PaymentMethodService.STRIPE)
    type = models.CharField(max_length=20, choices=PaymentMethodType.choices, default=PaymentMethodType.CREDITCARD)
    token = models.CharField(max_length=255, blank=True)
    customer_id = models.CharField(max_length=255, blank=True)
    currency = models.CharField(max_length=3)
    data = models.JSONField(default=dict, blank=True)
    saved = models.BooleanField(default=False)
    provision_status = models.CharField(
        max_length=12,
        choices=ProvisionStatus.choices,
        default=ProvisionStatus.PENDING,
    )
    stripe_error = models.JSONField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ("-created_at",)

    def __str__(self):
        return f"{self.name or self.type} ({self.service}) - {self.collective.slug}"

    @property
    def is_usable(self) -> bool:
        return self.provision_status == ProvisionStatus.PROVISIONED and bool(self.customer_id)
