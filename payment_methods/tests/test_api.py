from unittest import mock

from django.test import TestCase
from django.urls import reverse
from rest_framework.test import APIClient

from accounts.models import Collective, CollectiveType, Member, MemberRoles, User
from payment_methods.models import PaymentMethod, ProvisionStatus
from payment_methods.services import GatewayRejected, Provisioned, StripeGateway

CARD_PAYLOAD = {
    "new_payment_method": {
        "name": "4242",
        "token": "tok_visa",
        "data": {"brand": "Visa", "country": "US", "exp_month": 12, "exp_year": 2030},
    },
}


class PaymentMethodApiTests(TestCase):
    def setUp(self):
        collective = Collective.objects.create(slug="alice", name="Alice", type=CollectiveType.USER)
        self.user = User.objects.create_user(
            email="alice@example.com",
            password="pass1234",
            username="alice",
            collective=collective,
        )
        self.api_client = APIClient()
        self.api_client.force_authenticate(self.user)

    @mock.patch.object(StripeGateway, "provision_card")
    def test_add_stripe_credit_card(self, mock_provision):
        mock_provision.return_value = Provisioned(customer_id="cus_123")

        response = self.api_client.post(
            reverse("paymentmethod-stripe-credit-card"),
            {**CARD_PAYLOAD, "currency": "eur"},
            format="json",
        )

        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.data["type"], "creditcard")
        self.assertEqual(response.data["service"], "stripe")
        self.assertEqual(response.data["currency"], "EUR")
        self.assertEqual(response.data["provision_status"], ProvisionStatus.PROVISIONED)
        self.assertNotIn("token", response.data)

    @mock.patch.object(StripeGateway, "provision_card")
    def test_declined_card_is_still_returned(self, mock_provision):
        mock_provision.return_value = GatewayRejected(
            message="Your card was declined.",
            response={"error": {"code": "card_declined"}},
        )

        response = self.api_client.post(reverse("paymentmethod-stripe-credit-card"), CARD_PAYLOAD, format="json")

        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.data["provision_status"], ProvisionStatus.REJECTED)
        self.assertEqual(response.data["stripe_error"]["message"], "Your card was declined.")

    def test_anonymous_cannot_add_card(self):
        response = APIClient().post(reverse("paymentmethod-stripe-credit-card"), CARD_PAYLOAD, format="json")

        self.assertEqual(response.status_code, 401)
        self.assertFalse(PaymentMethod.objects.exists())

    def test_list_only_shows_administered_collectives(self):
        organization = Collective.objects.create(slug="acme", name="Acme", type=CollectiveType.ORGANIZATION)
        stranger = Collective.objects.create(slug="mallory", name="Mallory", type=CollectiveType.USER)
        Member.objects.create(
            member_collective=self.user.collective,
            collective=organization,
            role=MemberRoles.ADMIN,
        )
        own = PaymentMethod.objects.create(collective=self.user.collective, currency="USD", saved=True)
        shared = PaymentMethod.objects.create(collective=organization, currency="USD", saved=True)
        PaymentMethod.objects.create(collective=stranger, currency="USD", saved=True)
        PaymentMethod.objects.create(collective=self.user.collective, currency="USD", saved=False)

        response = self.api_client.get(reverse("paymentmethod-list"))

        self.assertEqual(response.status_code, 200)
        self.assertEqual(
            {item["uuid"] for item in response.data},
            {str(own.uuid), str(shared.uuid)},
        )
