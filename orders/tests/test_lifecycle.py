from datetime import datetime, timezone as dt_timezone
from unittest import mock

from django.contrib.auth.models import AnonymousUser
from django.test import TestCase
from rest_framework.exceptions import ValidationError

from accounts.exceptions import LoginRequired, Unauthorized
from accounts.models import Collective, CollectiveType, Member, MemberRoles, User
from orders.exceptions import InvalidState, NotFound
from orders.models import Activity, ActivityType, Order, OrderStatus, Subscription, SubscriptionInterval
from orders.services import ActivityRecorder, OrderLifecycleService
from payment_methods.models import PaymentMethod, ProvisionStatus

FIXED_NOW = datetime(2024, 3, 1, 12, 0, tzinfo=dt_timezone.utc)


def _create_user(slug: str) -> User:
    collective = Collective.objects.create(slug=slug, name=slug.title(), type=CollectiveType.USER)
    return User.objects.create_user(
        email=f"{slug}@example.com",
        password="pass1234",
        username=slug,
        collective=collective,
    )


class LifecycleTestMixin:
    def setUp(self):
        self.contributor = _create_user("alice")
        self.stranger = _create_user("mallory")
        self.project = Collective.objects.create(slug="webpack", name="Webpack")
        self.payment_method = PaymentMethod.objects.create(
            collective=self.contributor.collective,
            created_by=self.contributor,
            name="4242",
            token="tok_visa",
            currency="USD",
            saved=True,
            provision_status=ProvisionStatus.PROVISIONED,
            customer_id="cus_123",
        )
        self.order = Order.objects.create(
            pk=42,
            collective=self.project,
            from_collective=self.contributor.collective,
            created_by=self.contributor,
            payment_method=self.payment_method,
            status=OrderStatus.ACTIVE,
            total_amount=1000,
            currency="USD",
        )
        self.subscription = Subscription.objects.create(
            order=self.order,
            amount=1000,
            currency="USD",
            interval=SubscriptionInterval.MONTH,
        )
        self.service = OrderLifecycleService(now=lambda: FIXED_NOW)


class CancelAndActivateTests(LifecycleTestMixin, TestCase):
    def test_cancel_active_order(self):
        order = self.service.cancel_order(42, principal=self.contributor)

        self.assertEqual(order.status, OrderStatus.CANCELLED)
        self.assertFalse(order.subscription.is_active)
        self.assertEqual(order.subscription.deactivated_at, FIXED_NOW)

        activity = Activity.objects.get()
        self.assertEqual(activity.type, ActivityType.SUBSCRIPTION_CANCELED)
        self.assertEqual(activity.order_id, 42)
        self.assertEqual(activity.collective_id, self.project.id)
        self.assertEqual(activity.user_id, self.contributor.id)
        self.assertEqual(activity.data["collective"]["slug"], "webpack")
        self.assertEqual(activity.data["from_collective"]["slug"], "alice")
        self.assertEqual(activity.data["user"]["email"], "alice@example.com")
        self.assertFalse(activity.data["subscription"]["is_active"])

    def test_cancel_twice_raises_invalid_state(self):
        self.service.cancel_order(42, principal=self.contributor)

        with self.assertRaises(InvalidState) as ctx:
            self.service.cancel_order(42, principal=self.contributor)

        self.assertEqual(str(ctx.exception.detail), "Recurring contribution already canceled")
        self.assertEqual(Activity.objects.count(), 1)

    def test_activate_already_active_raises_invalid_state(self):
        with self.assertRaises(InvalidState) as ctx:
            self.service.activate_order(42, principal=self.contributor)

        self.assertEqual(str(ctx.exception.detail), "Recurring contribution already active")
        self.assertFalse(Activity.objects.exists())

    def test_cancel_then_activate_round_trip(self):
        self.service.cancel_order(42, principal=self.contributor)
        order = self.service.activate_order(42, principal=self.contributor)

        self.assertEqual(order.status, OrderStatus.ACTIVE)
        self.assertTrue(order.subscription.is_active)
        self.assertEqual(order.subscription.activated_at, FIXED_NOW)
        self.assertEqual(
            list(Activity.objects.order_by("id").values_list("type", flat=True)),
            [ActivityType.SUBSCRIPTION_CANCELED, ActivityType.SUBSCRIPTION_ACTIVATED],
        )

    def test_activate_pending_order(self):
        Order.objects.filter(pk=42).update(status=OrderStatus.PENDING)

        order = self.service.activate_order(42, principal=self.contributor)

        self.assertEqual(order.status, OrderStatus.ACTIVE)

    def test_organization_admin_may_cancel(self):
        organization = Collective.objects.create(slug="acme", name="Acme", type=CollectiveType.ORGANIZATION)
        Order.objects.filter(pk=42).update(from_collective=organization)
        Member.objects.create(
            member_collective=self.stranger.collective,
            collective=organization,
            role=MemberRoles.ADMIN,
        )

        order = self.service.cancel_order(42, principal=self.stranger)

        self.assertEqual(order.status, OrderStatus.CANCELLED)
        self.assertEqual(Activity.objects.get().data["user"]["email"], "mallory@example.com")

    def test_non_admin_is_unauthorized(self):
        with self.assertRaises(Unauthorized) as ctx:
            self.service.cancel_order(42, principal=self.stranger)

        self.assertEqual(
            str(ctx.exception.detail),
            "You don't have permission to cancel this recurring contribution",
        )
        self.order.refresh_from_db()
        self.assertEqual(self.order.status, OrderStatus.ACTIVE)
        self.assertFalse(Activity.objects.exists())

    def test_anonymous_is_rejected_before_lookup(self):
        for order_id in (42, 9999):
            with self.assertRaises(LoginRequired):
                self.service.cancel_order(order_id, principal=AnonymousUser())

    def test_missing_order_is_not_found(self):
        with self.assertRaises(NotFound) as ctx:
            self.service.activate_order(9999, principal=self.contributor)

        self.assertEqual(str(ctx.exception.detail), "Recurring contribution not found")

    def test_one_off_order_is_not_a_recurring_contribution(self):
        one_off = Order.objects.create(
            collective=self.project,
            from_collective=self.contributor.collective,
            created_by=self.contributor,
            status=OrderStatus.PAID,
            total_amount=500,
            currency="USD",
        )

        with self.assertRaises(NotFound):
            self.service.cancel_order(one_off.pk, principal=self.contributor)

    def test_failed_activity_rolls_back_transition(self):
        recorder = mock.Mock(spec=ActivityRecorder)
        recorder.record.side_effect = RuntimeError("activity store unavailable")
        service = OrderLifecycleService(activity_recorder=recorder, now=lambda: FIXED_NOW)

        with self.assertRaises(RuntimeError):
            service.cancel_order(42, principal=self.contributor)

        self.order.refresh_from_db()
        self.subscription.refresh_from_db()
        self.assertEqual(self.order.status, OrderStatus.ACTIVE)
        self.assertIsNone(self.subscription.deactivated_at)

    def test_view_order_access(self):
        recipient_admin = _create_user("sokra")
        Member.objects.create(
            member_collective=recipient_admin.collective,
            collective=self.project,
            role=MemberRoles.ADMIN,
        )

        self.assertEqual(self.service.view_order(42, principal=self.contributor).pk, 42)
        self.assertEqual(self.service.view_order(42, principal=recipient_admin).pk, 42)
        with self.assertRaises(Unauthorized):
            self.service.view_order(42, principal=self.stranger)
        with self.assertRaises(LoginRequired):
            self.service.view_order(42, principal=AnonymousUser())

    def test_recipient_admin_cannot_cancel(self):
        recipient_admin = _create_user("sokra")
        Member.objects.create(
            member_collective=recipient_admin.collective,
            collective=self.project,
            role=MemberRoles.ADMIN,
        )

        with self.assertRaises(Unauthorized):
            self.service.cancel_order(42, principal=recipient_admin)

    def test_activities_are_append_only(self):
        self.service.cancel_order(42, principal=self.contributor)
        activity = Activity.objects.get()
        activity.data = {}

        with self.assertRaises(ValueError):
            activity.save()


class UpdateOrderTests(LifecycleTestMixin, TestCase):
    def _other_payment_method(self, collective, **kwargs):
        fields = {
            "provision_status": ProvisionStatus.PROVISIONED,
            "customer_id": "cus_456",
            **kwargs,
        }
        return PaymentMethod.objects.create(
            collective=collective,
            name="1881",
            token="tok_mastercard",
            currency="USD",
            saved=True,
            **fields,
        )

    def test_update_amount_and_frequency(self):
        order = self.service.update_order(
            42,
            principal=self.contributor,
            amount=2500,
            frequency="YEARLY",
        )

        self.assertEqual(order.total_amount, 2500)
        self.assertEqual(order.subscription.amount, 2500)
        self.assertEqual(order.subscription.interval, SubscriptionInterval.YEAR)
        self.assertFalse(Activity.objects.exists())

    def test_update_payment_method_of_own_collective(self):
        replacement = self._other_payment_method(self.contributor.collective)

        order = self.service.update_order(
            42,
            principal=self.contributor,
            payment_method_uuid=replacement.uuid,
        )

        self.assertEqual(order.payment_method_id, replacement.id)

    def test_foreign_payment_method_is_unauthorized(self):
        foreign = self._other_payment_method(self.stranger.collective)

        with self.assertRaises(Unauthorized) as ctx:
            self.service.update_order(42, principal=self.contributor, payment_method_uuid=foreign.uuid)

        self.assertEqual(str(ctx.exception.detail), "You don't have permission to use this payment method")
        self.order.refresh_from_db()
        self.assertEqual(self.order.payment_method_id, self.payment_method.id)

    def test_unprovisioned_payment_method_cannot_be_attached(self):
        for status in (ProvisionStatus.PENDING, ProvisionStatus.REJECTED):
            with self.subTest(status=status):
                unusable = self._other_payment_method(
                    self.contributor.collective,
                    provision_status=status,
                    customer_id="",
                )

                with self.assertRaises(InvalidState) as ctx:
                    self.service.update_order(42, principal=self.contributor, payment_method_uuid=unusable.uuid)

                self.assertEqual(
                    str(ctx.exception.detail),
                    "Payment method must be provisioned before it can be used",
                )
                self.order.refresh_from_db()
                self.assertEqual(self.order.payment_method_id, self.payment_method.id)

    def test_unknown_payment_method_is_not_found(self):
        with self.assertRaises(NotFound) as ctx:
            self.service.update_order(
                42,
                principal=self.contributor,
                payment_method_uuid="00000000-0000-0000-0000-000000000000",
            )

        self.assertEqual(str(ctx.exception.detail), "Payment method not found with this uuid")

    def test_inactive_subscription_cannot_be_updated(self):
        self.service.cancel_order(42, principal=self.contributor)

        with self.assertRaises(InvalidState) as ctx:
            self.service.update_order(42, principal=self.contributor, amount=2000)

        self.assertEqual(str(ctx.exception.detail), "Subscription must be active to be updated")

    def test_tier_change_is_rejected(self):
        with self.assertRaises(ValidationError):
            self.service.update_order(42, principal=self.contributor, tier="gold")

    def test_invalid_values_are_rejected(self):
        with self.assertRaises(ValidationError):
            self.service.update_order(42, principal=self.contributor, amount=0)
        with self.assertRaises(ValidationError):
            self.service.update_order(42, principal=self.contributor, frequency="WEEKLY")

    def test_stranger_cannot_update(self):
        with self.assertRaises(Unauthorized):
            self.service.update_order(42, principal=self.stranger, amount=2000)
