from rest_framework import serializers

from accounts.serializers import CollectiveSerializer
from payment_methods.serializers import PaymentMethodReferenceSerializer

from .identifiers import encode_id
from .models import Frequency, Order, Subscription


class SubscriptionSerializer(serializers.ModelSerializer):
    is_active = serializers.BooleanField(read_only=True)

    class Meta:
        model = Subscription
        fields = (
            "amount",
            "currency",
            "interval",
            "is_active",
            "activated_at",
            "deactivated_at",
        )
        read_only_fields = fields


class OrderSerializer(serializers.ModelSerializer):
    id = serializers.SerializerMethodField()
    legacy_id = serializers.ReadOnlyField(source="pk")
    collective = CollectiveSerializer(read_only=True)
    from_collective = CollectiveSerializer(read_only=True)
    payment_method = serializers.SlugRelatedField(slug_field="uuid", read_only=True)
    subscription = SubscriptionSerializer(read_only=True)

    class Meta:
        model = Order
        fields = (
            "id",
            "legacy_id",
            "status",
            "total_amount",
            "currency",
            "description",
            "collective",
            "from_collective",
            "payment_method",
            "subscription",
            "created_at",
            "updated_at",
        )
        read_only_fields = fields

    def get_id(self, obj: Order) -> str:
        return encode_id("order", obj.pk)


class OrderUpdateSerializer(serializers.Serializer):
    amount = serializers.IntegerField(min_value=1, required=False, help_text="Amount in cents of the order")
    frequency = serializers.ChoiceField(
        choices=Frequency.choices,
        required=False,
        help_text="Frequency of the recurring order, either MONTHLY or YEARLY",
    )
    tier = serializers.CharField(required=False, help_text="The tier of the recurring contribution")
    payment_method = PaymentMethodReferenceSerializer(required=False)
