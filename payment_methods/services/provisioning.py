from __future__ import annotations

import logging
from typing import Optional

from accounts.authorization import Action, AuthorizationGuard
from accounts.models import Collective
from orders.exceptions import FatalError
from payment_methods.models import (
    PaymentMethod,
    PaymentMethodService,
    PaymentMethodType,
    ProvisionStatus,
)
from payment_methods.services.gateway import GatewayRejected, Provisioned, StripeGateway

logger = logging.getLogger(__name__)

_ACCEPTED_FIELDS = ("name", "token", "type", "service", "data")


class PaymentMethodProvisioner:
    def __init__(self, *, gateway=None, guard: Optional[AuthorizationGuard] = None):
        self.gateway = gateway or StripeGateway()
        self.guard = guard or AuthorizationGuard()

    def add_payment_method(self, principal, data: dict, *, currency: Optional[str] = None) -> PaymentMethod:
        """Persist a payment method for the principal's collective and provision it.

        The record is committed before the gateway is called. A structured
        gateway refusal is stored on the record and the record is returned;
        any other gateway failure propagates and leaves the record PENDING.
        """
        self.guard.require_login(principal, Action.ADD_PAYMENT_METHOD)
        collective = self._resolve_collective(principal)
        self.guard.authorize(principal, collective.id, Action.ADD_PAYMENT_METHOD)

        fields = {key: data[key] for key in _ACCEPTED_FIELDS if data.get(key) is not None}
        fields["data"] = dict(fields.get("data") or {})
        fields["service"] = fields.get("service") or PaymentMethodService.STRIPE

        payment_method = PaymentMethod.objects.create(
            **fields,
            created_by=principal,
            currency=currency or collective.currency,
            saved=True,
            collective=collective,
        )
        logger.info("Created payment method %s for collective=%s", payment_method.uuid, collective.id)

        return self._provision(payment_method, collective=collective, principal=principal)

    def add_stripe_credit_card(self, principal, data: dict, *, currency: Optional[str] = None) -> PaymentMethod:
        return self.add_payment_method(
            principal,
            {
                **data,
                "service": PaymentMethodService.STRIPE,
                "type": PaymentMethodType.CREDITCARD,
            },
            currency=currency,
        )

    def _resolve_collective(self, principal) -> Collective:
        collective = None
        if principal.collective_id is not None:
            collective = Collective.objects.filter(pk=principal.collective_id).first()
        if collective is None:
            logger.error("User %s has no collective record", principal.pk)
            raise FatalError("This collective does not exist")
        return collective

    def _provision(self, payment_method: PaymentMethod, *, collective, principal) -> PaymentMethod:
        try:
            outcome = self.gateway.provision_card(payment_method, collective=collective, principal=principal)
        except Exception:
            logger.exception("Provisioning failed for payment method %s", payment_method.uuid)
            raise

        if isinstance(outcome, GatewayRejected):
            payment_method.provision_status = ProvisionStatus.REJECTED
            payment_method.stripe_error = {
                "message": outcome.message,
                "response": outcome.response,
            }
            if outcome.customer_id:
                payment_method.customer_id = outcome.customer_id
            if "setupIntent" in outcome.response:
                payment_method.data = {**payment_method.data, "setupIntent": outcome.response["setupIntent"]}
        elif isinstance(outcome, Provisioned):
            payment_method.provision_status = ProvisionStatus.PROVISIONED
            payment_method.customer_id = outcome.customer_id
            if outcome.setup_intent:
                payment_method.data = {**payment_method.data, "setupIntent": outcome.setup_intent}
        else:
            raise TypeError(f"Unexpected provisioning outcome: {outcome!r}")

        payment_method.save(update_fields=["provision_status", "stripe_error", "customer_id", "data", "updated_at"])
        return payment_method
