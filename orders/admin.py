from django.contrib import admin

from .models import Activity, Order, Subscription


class SubscriptionInline(admin.StackedInline):
    model = Subscription
    extra = 0
    readonly_fields = ("activated_at", "deactivated_at")


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = ("id", "from_collective", "collective", "status", "total_amount", "currency", "created_at")
    list_filter = ("status", "currency")
    search_fields = ("from_collective__slug", "collective__slug", "created_by__email")
    autocomplete_fields = ("collective", "from_collective", "created_by")
    raw_id_fields = ("payment_method",)
    inlines = [SubscriptionInline]


@admin.register(Activity)
class ActivityAdmin(admin.ModelAdmin):
    list_display = ("type", "collective", "user", "order", "created_at")
    list_filter = ("type",)
    search_fields = ("collective__slug", "user__email")

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
