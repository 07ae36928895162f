from unittest import mock

from django.contrib.auth.models import AnonymousUser
from django.test import TestCase

from accounts.exceptions import LoginRequired
from accounts.models import Collective, CollectiveType, User
from orders.exceptions import FatalError
from payment_methods.models import PaymentMethod, PaymentMethodService, PaymentMethodType, ProvisionStatus
from payment_methods.services import GatewayRejected, PaymentMethodProvisioner, Provisioned

CARD = {
    "name": "4242",
    "token": "tok_visa",
    "type": PaymentMethodType.CREDITCARD,
    "data": {"brand": "Visa", "country": "US", "exp_month": 12, "exp_year": 2030},
}


class FakeGateway:
    def __init__(self, outcome=None, error=None):
        self.outcome = outcome
        self.error = error
        self.calls = []

    def provision_card(self, payment_method, *, collective, principal):
        self.calls.append((payment_method.pk, collective.slug, principal.email))
        if self.error is not None:
            raise self.error
        return self.outcome


class PaymentMethodProvisionerTests(TestCase):
    def setUp(self):
        collective = Collective.objects.create(
            slug="alice",
            name="Alice",
            type=CollectiveType.USER,
            currency="EUR",
        )
        self.user = User.objects.create_user(
            email="alice@example.com",
            password="pass1234",
            username="alice",
            collective=collective,
        )

    def test_provisioned_card_is_saved_for_own_collective(self):
        gateway = FakeGateway(Provisioned(customer_id="cus_123", setup_intent={"id": "seti_1"}))

        payment_method = PaymentMethodProvisioner(gateway=gateway).add_payment_method(self.user, CARD)

        payment_method.refresh_from_db()
        self.assertEqual(payment_method.collective_id, self.user.collective_id)
        self.assertEqual(payment_method.created_by_id, self.user.id)
        self.assertEqual(payment_method.currency, "EUR")
        self.assertEqual(payment_method.service, PaymentMethodService.STRIPE)
        self.assertTrue(payment_method.saved)
        self.assertEqual(payment_method.provision_status, ProvisionStatus.PROVISIONED)
        self.assertEqual(payment_method.customer_id, "cus_123")
        self.assertEqual(payment_method.data["setupIntent"], {"id": "seti_1"})
        self.assertEqual(payment_method.data["brand"], "Visa")
        self.assertTrue(payment_method.is_usable)
        self.assertEqual(len(gateway.calls), 1)

    def test_explicit_currency_wins(self):
        gateway = FakeGateway(Provisioned(customer_id="cus_123"))

        payment_method = PaymentMethodProvisioner(gateway=gateway).add_payment_method(
            self.user, CARD, currency="USD"
        )

        self.assertEqual(payment_method.currency, "USD")

    def test_unknown_fields_are_ignored(self):
        gateway = FakeGateway(Provisioned(customer_id="cus_123"))
        data = {**CARD, "customer_id": "cus_forged", "saved": False}

        payment_method = PaymentMethodProvisioner(gateway=gateway).add_payment_method(self.user, data)

        self.assertEqual(payment_method.customer_id, "cus_123")
        self.assertTrue(payment_method.saved)

    def test_gateway_rejection_is_stored_on_record(self):
        response = {"error": {"type": "card_error", "code": "card_declined", "message": "Your card was declined."}}
        gateway = FakeGateway(GatewayRejected(message="Your card was declined.", response=response))

        payment_method = PaymentMethodProvisioner(gateway=gateway).add_payment_method(self.user, CARD)

        payment_method.refresh_from_db()
        self.assertEqual(payment_method.provision_status, ProvisionStatus.REJECTED)
        self.assertEqual(payment_method.stripe_error["message"], "Your card was declined.")
        self.assertEqual(payment_method.stripe_error["response"], response)
        self.assertFalse(payment_method.is_usable)

    def test_verification_required_keeps_setup_intent(self):
        setup_intent = {"id": "seti_1", "client_secret": "secret", "next_action": {"type": "use_stripe_sdk"}}
        gateway = FakeGateway(
            GatewayRejected(
                message="Please verify your payment method.",
                response={"setupIntent": setup_intent},
                customer_id="cus_123",
            )
        )

        payment_method = PaymentMethodProvisioner(gateway=gateway).add_payment_method(self.user, CARD)

        payment_method.refresh_from_db()
        self.assertEqual(payment_method.provision_status, ProvisionStatus.REJECTED)
        self.assertEqual(payment_method.customer_id, "cus_123")
        self.assertEqual(payment_method.data["setupIntent"], setup_intent)

    def test_unstructured_gateway_error_propagates(self):
        gateway = FakeGateway(error=ConnectionError("stripe unreachable"))

        with self.assertRaises(ConnectionError):
            PaymentMethodProvisioner(gateway=gateway).add_payment_method(self.user, CARD)

        payment_method = PaymentMethod.objects.get()
        self.assertEqual(payment_method.provision_status, ProvisionStatus.PENDING)
        self.assertIsNone(payment_method.stripe_error)

    def test_missing_collective_is_fatal(self):
        orphan = User.objects.create_user(email="orphan@example.com", password="pass1234", username="orphan")
        gateway = FakeGateway(Provisioned(customer_id="cus_123"))

        with self.assertRaises(FatalError) as ctx:
            PaymentMethodProvisioner(gateway=gateway).add_payment_method(orphan, CARD)

        self.assertEqual(str(ctx.exception.detail), "This collective does not exist")
        self.assertFalse(PaymentMethod.objects.exists())
        self.assertEqual(gateway.calls, [])

    def test_anonymous_must_log_in(self):
        gateway = mock.Mock()

        with self.assertRaises(LoginRequired):
            PaymentMethodProvisioner(gateway=gateway).add_payment_method(AnonymousUser(), CARD)

        gateway.provision_card.assert_not_called()

    def test_stripe_credit_card_forces_service_and_type(self):
        gateway = FakeGateway(Provisioned(customer_id="cus_123"))
        data = {key: value for key, value in CARD.items() if key != "type"}

        payment_method = PaymentMethodProvisioner(gateway=gateway).add_stripe_credit_card(self.user, data)

        self.assertEqual(payment_method.service, PaymentMethodService.STRIPE)
        self.assertEqual(payment_method.type, PaymentMethodType.CREDITCARD)
