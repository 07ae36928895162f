from django.conf import settings
from django.core.serializers.json import DjangoJSONEncoder
from django.db import models


class OrderStatus(models.TextChoices):
    PENDING = "PENDING", "Pending"
    PAID = "PAID", "Paid"
    ACTIVE = "ACTIVE", "Active"
    CANCELLED = "CANCELLED", "Cancelled"
    ERROR = "ERROR", "Error"


class SubscriptionInterval(models.TextChoices):
    MONTH = "month", "Monthly"
    YEAR = "year", "Yearly"


class Frequency(models.TextChoices):
    MONTHLY = "MONTHLY", "Monthly"
    YEARLY = "YEARLY", "Yearly"


FREQUENCY_INTERVALS = {
    Frequency.MONTHLY.value: SubscriptionInterval.MONTH,
    Frequency.YEARLY.value: SubscriptionInterval.YEAR,
}


class ActivityType(models.TextChoices):
    SUBSCRIPTION_CANCELED = "subscription.canceled", "Subscription canceled"
    SUBSCRIPTION_ACTIVATED = "subscription.activated", "Subscription activated"


class OrderQuerySet(models.QuerySet):
    def with_aggregate(self):
        return self.select_related(
            "subscription",
            "collective",
            "from_collective",
            "created_by",
            "payment_method",
        )

    def recurring(self):
        return self.filter(subscription__isnull=False)


class Order(models.Model):
    collective = models.ForeignKey("accounts.Collective", on_delete=models.PROTECT, related_name="orders")
    from_collective = models.ForeignKey(
        "accounts.Collective",
        on_delete=models.PROTECT,
        related_name="outgoing_orders",
    )
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="orders",
    )
    payment_method = models.ForeignKey(
        "payment_methods.PaymentMethod",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="orders",
    )
    status = models.CharField(max_length=16, choices=OrderStatus.choices, default=OrderStatus.PENDING)
    total_amount = models.PositiveIntegerField(help_text="Amount in cents.")
    currency = models.CharField(max_length=3)
    description = models.CharField(max_length=255, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = OrderQuerySet.as_manager()

    class Meta:
        ordering = ("-created_at",)
        indexes = [
            models.Index(fields=("from_collective", "status"), name="order_from_status_idx"),
        ]

    def __str__(self) -> str:
        return f"Order #{self.pk} {self.from_collective_id} -> {self.collective_id} ({self.status})"


class Subscription(models.Model):
    order = models.OneToOneField(Order, on_delete=models.CASCADE, related_name="subscription")
    amount = models.PositiveIntegerField(help_text="Amount in cents.")
    currency = models.CharField(max_length=3)
    interval = models.CharField(max_length=10, choices=SubscriptionInterval.choices, default=SubscriptionInterval.MONTH)
    activated_at = models.DateTimeField(null=True, blank=True)
    deactivated_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self) -> str:
        return f"{self.amount} {self.currency} / {self.interval}"

    @property
    def is_active(self) -> bool:
        # Derived from the owning order so the two can never disagree.
        return self.order.status == OrderStatus.ACTIVE

    def mark_activated(self, when) -> None:
        self.activated_at = when
        self.save(update_fields=["activated_at", "updated_at"])

    def mark_deactivated(self, when) -> None:
        self.deactivated_at = when
        self.save(update_fields=["deactivated_at", "updated_at"])

    @property
    def snapshot(self) -> dict:
        return {
            "id": self.id,
            "amount": self.amount,
            "currency": self.currency,
            "interval": self.interval,
            "is_active": self.is_active,
            "activated_at": self.activated_at,
            "deactivated_at": self.deactivated_at,
        }


class Activity(models.Model):
    type = models.CharField(max_length=80, choices=ActivityType.choices)
    collective = models.ForeignKey(
        "accounts.Collective",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="activities",
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="activities",
    )
    order = models.ForeignKey(Order, on_delete=models.SET_NULL, null=True, blank=True, related_name="activities")
    data = models.JSONField(default=dict, blank=True, encoder=DjangoJSONEncoder)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ("-created_at",)
        verbose_name_plural = "activities"
        indexes = [
            models.Index(fields=("type", "created_at"), name="activity_type_created_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.type} @ {self.created_at.isoformat()}"

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValueError("Activities are append-only.")
        super().save(*args, **kwargs)
