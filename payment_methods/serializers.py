# payment_methods/serializers.py

from rest_framework import serializers

from .models import PaymentMethod, PaymentMethodService, PaymentMethodType


class PaymentMethodDataSerializer(serializers.Serializer):
    brand = serializers.CharField()
    country = serializers.CharField()
    exp_month = serializers.IntegerField(min_value=1, max_value=12)
    exp_year = serializers.IntegerField(min_value=2000)
    full_name = serializers.CharField(required=False, allow_blank=True)
    funding = serializers.CharField(required=False, allow_blank=True)
    zip = serializers.CharField(required=False, allow_blank=True)


class PaymentMethodCreateSerializer(serializers.Serializer):
    data = PaymentMethodDataSerializer()
    name = serializers.CharField()
    token = serializers.CharField()


class NewPaymentMethodSerializer(PaymentMethodCreateSerializer):
    service = serializers.ChoiceField(choices=PaymentMethodService.choices, required=False)
    type = serializers.ChoiceField(choices=PaymentMethodType.choices)


class PaymentMethodReferenceSerializer(serializers.Serializer):
    uuid = serializers.UUIDField()
    # Accepted for compatibility; ownership is always read from the stored record.
    collective_id = serializers.IntegerField(required=False)


class _CurrencyMixin(serializers.Serializer):
    currency = serializers.CharField(min_length=3, max_length=3, required=False)

    def validate_currency(self, value: str) -> str:
        return value.upper()


class AddPaymentMethodSerializer(_CurrencyMixin):
    new_payment_method = NewPaymentMethodSerializer()


class AddStripeCreditCardSerializer(_CurrencyMixin):
    new_payment_method = PaymentMethodCreateSerializer()


class PaymentMethodSerializer(serializers.ModelSerializer):
    collective = serializers.ReadOnlyField(source="collective_id")

    class Meta:
        model = PaymentMethod
        fields = (
            "uuid",
            "collective",
            "name",
            "service",
            "type",
            "currency",
            "saved",
            "data",
            "provision_status",
            "stripe_error",
            "created_at",
            "updated_at",
        )
        read_only_fields = fields
