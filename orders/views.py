from rest_framework import permissions, status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from payment_methods.serializers import AddPaymentMethodSerializer, PaymentMethodSerializer
from payment_methods.services import PaymentMethodProvisioner

from .identifiers import decode_id
from .serializers import OrderSerializer, OrderUpdateSerializer
from .services import OrderLifecycleService


class OrderViewSet(viewsets.GenericViewSet):
    serializer_class = OrderSerializer
    permission_classes = [permissions.IsAuthenticated]
    lookup_value_regex = r"[A-Za-z0-9_-]+"

    def _order_id(self) -> int:
        return decode_id(self.kwargs[self.lookup_field], "order")

    def retrieve(self, request, pk=None):
        order = OrderLifecycleService().view_order(self._order_id(), principal=request.user)
        return Response(self.get_serializer(order).data)

    def partial_update(self, request, pk=None):
        serializer = OrderUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        validated = serializer.validated_data
        payment_method = validated.get("payment_method")

        order = OrderLifecycleService().update_order(
            self._order_id(),
            principal=request.user,
            amount=validated.get("amount"),
            frequency=validated.get("frequency"),
            tier=validated.get("tier"),
            payment_method_uuid=payment_method["uuid"] if payment_method else None,
        )
        return Response(self.get_serializer(order).data)

    @action(detail=True, methods=["post"])
    def cancel(self, request, pk=None):
        order = OrderLifecycleService().cancel_order(self._order_id(), principal=request.user)
        return Response(self.get_serializer(order).data)

    @action(detail=True, methods=["post"])
    def activate(self, request, pk=None):
        order = OrderLifecycleService().activate_order(self._order_id(), principal=request.user)
        return Response(self.get_serializer(order).data)

    @action(detail=False, methods=["post"], url_path="payment-methods", url_name="add-payment-method")
    def add_payment_method(self, request):
        serializer = AddPaymentMethodSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        validated = serializer.validated_data

        payment_method = PaymentMethodProvisioner().add_payment_method(
            request.user,
            validated["new_payment_method"],
            currency=validated.get("currency"),
        )
        return Response(PaymentMethodSerializer(payment_method).data, status=status.HTTP_201_CREATED)
