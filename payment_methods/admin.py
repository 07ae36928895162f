# payment_methods/admin.py

from django.contrib import admin
from .models import PaymentMethod

@admin.register(PaymentMethod)
class PaymentMethodAdmin(admin.ModelAdmin):
    list_display = ("uuid", "collective", "name", "service", "type", "currency", "provision_status", "created_at")
    list_filter = ("service", "type", "provision_status")
    search_fields = ("uuid", "collective__slug", "customer_id")
    readonly_fields = ("uuid", "stripe_error", "customer_id")
    ordering = ("-created_at",)
