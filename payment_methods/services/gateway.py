from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Optional, Union

import stripe
from django.conf import settings
from django.core.exceptions import ImproperlyConfigured

logger = logging.getLogger(__name__)

VERIFY_PAYMENT_METHOD_MESSAGE = "Please verify your payment method."


@dataclass(frozen=True)
class Provisioned:
    customer_id: str
    setup_intent: dict = field(default_factory=dict)


@dataclass(frozen=True)
class GatewayRejected:
    message: str
    response: dict
    customer_id: Optional[str] = None


ProvisionOutcome = Union[Provisioned, GatewayRejected]


def _as_dict(obj) -> Any:
    if obj is None or isinstance(obj, (str, int, float, bool)):
        return obj
    to_dict = getattr(obj, "to_dict_recursive", None) or getattr(obj, "to_dict", None)
    if callable(to_dict):
        return to_dict()
    return dict(obj)


class StripeGateway:
    """Tokenizes cards against Stripe.

    Card-level refusals come back as ``GatewayRejected`` so the caller can
    keep the local record. Errors without a structured Stripe response
    (network failures, timeouts, bad configuration) are raised.
    """

    def __init__(self, *, api_key: Optional[str] = None, api_version: Optional[str] = None):
        self._api_key = api_key
        self._api_version = api_version

    def _credentials(self) -> dict:
        api_key = self._api_key or getattr(settings, "STRIPE_SECRET_KEY", "")
        if not api_key:
            raise ImproperlyConfigured("STRIPE_SECRET_KEY must be configured to provision cards.")
        credentials = {"api_key": api_key}
        api_version = self._api_version or getattr(settings, "STRIPE_API_VERSION", "")
        if api_version:
            credentials["stripe_version"] = api_version
        return credentials

    def provision_card(self, payment_method, *, collective, principal) -> ProvisionOutcome:
        credentials = self._credentials()

        try:
            customer = stripe.Customer.create(
                source=payment_method.token,
                email=principal.email,
                description=f"collective/{collective.slug}",
                metadata={
                    "collective": collective.slug,
                    "payment_method": str(payment_method.uuid),
                },
                **credentials,
            )
        except stripe.StripeError as exc:
            return self._rejected(payment_method, exc)

        # The customer exists on Stripe from here on; every outcome carries its id.
        try:
            setup_intent = stripe.SetupIntent.create(
                customer=customer.id,
                payment_method=customer.default_source,
                confirm=True,
                **credentials,
            )
        except stripe.StripeError as exc:
            return self._rejected(payment_method, exc, customer_id=customer.id)

        intent = {
            "id": setup_intent.id,
            "client_secret": setup_intent.client_secret,
            "next_action": _as_dict(setup_intent.next_action),
        }
        if setup_intent.next_action:
            return GatewayRejected(
                message=VERIFY_PAYMENT_METHOD_MESSAGE,
                response={"setupIntent": intent},
                customer_id=customer.id,
            )
        return Provisioned(customer_id=customer.id, setup_intent=intent)

    @staticmethod
    def _rejected(payment_method, exc, *, customer_id: Optional[str] = None) -> GatewayRejected:
        if not exc.json_body:
            raise exc
        logger.warning(
            "Stripe refused payment method %s: %s",
            payment_method.uuid,
            exc.user_message or exc,
        )
        return GatewayRejected(
            message=exc.user_message or str(exc),
            response=exc.json_body,
            customer_id=customer_id,
        )
