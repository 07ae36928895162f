# payment_methods/views.py

from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from accounts.authorization import AuthorizationGuard
from .models import PaymentMethod
from .serializers import AddStripeCreditCardSerializer, PaymentMethodSerializer
from .services import PaymentMethodProvisioner


class PaymentMethodViewSet(viewsets.ReadOnlyModelViewSet):
    serializer_class = PaymentMethodSerializer
    permission_classes = [IsAuthenticated]
    lookup_field = "uuid"

    def get_queryset(self):
        collective_ids = AuthorizationGuard().administered_collective_ids(self.request.user)
        return PaymentMethod.objects.filter(collective_id__in=collective_ids, saved=True)

    @action(detail=False, methods=["post"], url_path="stripe-credit-card", url_name="stripe-credit-card")
    def add_stripe_credit_card(self, request):
        serializer = AddStripeCreditCardSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        validated = serializer.validated_data

        payment_method = PaymentMethodProvisioner().add_stripe_credit_card(
            request.user,
            validated["new_payment_method"],
            currency=validated.get("currency"),
        )
        return Response(PaymentMethodSerializer(payment_method).data, status=status.HTTP_201_CREATED)
