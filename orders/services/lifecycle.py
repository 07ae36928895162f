from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from django.db import transaction
from django.utils import timezone
from rest_framework.exceptions import ValidationError

from accounts.authorization import Action, AuthorizationGuard
from orders.exceptions import InvalidState, NotFound
from orders.models import FREQUENCY_INTERVALS, ActivityType, Order, OrderStatus
from orders.services.activities import ActivityRecorder
from payment_methods.models import PaymentMethod

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Transition:
    action: Action
    target: OrderStatus
    activity_type: ActivityType
    already_message: str


CANCEL = Transition(
    action=Action.CANCEL_ORDER,
    target=OrderStatus.CANCELLED,
    activity_type=ActivityType.SUBSCRIPTION_CANCELED,
    already_message="Recurring contribution already canceled",
)

ACTIVATE = Transition(
    action=Action.ACTIVATE_ORDER,
    target=OrderStatus.ACTIVE,
    activity_type=ActivityType.SUBSCRIPTION_ACTIVATED,
    already_message="Recurring contribution already active",
)


class OrderLifecycleService:
    """Cancels, reactivates and updates recurring contributions.

    Every operation checks the principal first, then loads the order
    aggregate, then authorizes against the contributing collective. State
    changes run inside a single transaction on a locked order row, and the
    precondition is checked again on that row, so two concurrent requests
    cannot both apply the same edge.
    """

    def __init__(
        self,
        *,
        guard: Optional[AuthorizationGuard] = None,
        activity_recorder: Optional[ActivityRecorder] = None,
        now=None,
    ):
        self.guard = guard or AuthorizationGuard()
        self.activities = activity_recorder or ActivityRecorder()
        self._now = now or timezone.now

    def get_order(self, order_id: int) -> Order:
        order = Order.objects.recurring().with_aggregate().filter(pk=order_id).first()
        if order is None:
            raise NotFound("Recurring contribution not found")
        return order

    def view_order(self, order_id: int, *, principal) -> Order:
        self.guard.require_login(principal, Action.VIEW_ORDER)
        order = self.get_order(order_id)
        # Admins of the receiving collective may read the order but not change it.
        if not self.guard.can(principal, order.collective_id):
            self.guard.authorize(principal, order.from_collective_id, Action.VIEW_ORDER)
        return order

    def cancel_order(self, order_id: int, *, principal) -> Order:
        return self._apply(CANCEL, order_id, principal=principal)

    def activate_order(self, order_id: int, *, principal) -> Order:
        return self._apply(ACTIVATE, order_id, principal=principal)

    def update_order(
        self,
        order_id: int,
        *,
        principal,
        amount: Optional[int] = None,
        frequency: Optional[str] = None,
        tier: Optional[str] = None,
        payment_method_uuid=None,
    ) -> Order:
        self.guard.require_login(principal, Action.UPDATE_ORDER)
        order = self.get_order(order_id)
        self.guard.authorize(principal, order.from_collective_id, Action.UPDATE_ORDER)

        if not order.subscription.is_active:
            raise InvalidState("Subscription must be active to be updated")
        if tier is not None:
            raise ValidationError({"tier": "Changing the tier of a recurring contribution is not supported."})
        if amount is not None and amount <= 0:
            raise ValidationError({"amount": "Amount must be a positive number of cents."})

        interval = None
        if frequency is not None:
            try:
                interval = FREQUENCY_INTERVALS[frequency]
            except KeyError:
                raise ValidationError({"frequency": "Frequency must be either MONTHLY or YEARLY."})

        new_payment_method = None
        if payment_method_uuid is not None:
            new_payment_method = PaymentMethod.objects.filter(uuid=payment_method_uuid).first()
            if new_payment_method is None:
                raise NotFound("Payment method not found with this uuid")
            # Ownership comes from the stored record, never from the request.
            self.guard.authorize(principal, new_payment_method.collective_id, Action.USE_PAYMENT_METHOD)
            if not new_payment_method.is_usable:
                raise InvalidState("Payment method must be provisioned before it can be used")

        with transaction.atomic():
            locked = Order.objects.select_for_update().get(pk=order.pk)
            if locked.status != OrderStatus.ACTIVE:
                raise InvalidState("Subscription must be active to be updated")

            order_fields = []
            if new_payment_method is not None:
                locked.payment_method = new_payment_method
                order_fields.append("payment_method")
            if amount is not None:
                locked.total_amount = amount
                order_fields.append("total_amount")
            if order_fields:
                locked.save(update_fields=order_fields + ["updated_at"])

            subscription = locked.subscription
            subscription_fields = []
            if amount is not None:
                subscription.amount = amount
                subscription_fields.append("amount")
            if interval is not None:
                subscription.interval = interval
                subscription_fields.append("interval")
            if subscription_fields:
                subscription.save(update_fields=subscription_fields + ["updated_at"])

        logger.info(
            "Updated order=%s by user=%s (payment_method=%s amount=%s interval=%s)",
            order.pk,
            principal.pk,
            new_payment_method.uuid if new_payment_method else None,
            amount,
            interval,
        )
        return self.get_order(order.pk)

    def _apply(self, transition: Transition, order_id: int, *, principal) -> Order:
        self.guard.require_login(principal, transition.action)
        order = self.get_order(order_id)
        self.guard.authorize(principal, order.from_collective_id, transition.action)

        if order.status == transition.target:
            raise InvalidState(transition.already_message)

        now = self._now()
        with transaction.atomic():
            locked = Order.objects.select_for_update().get(pk=order.pk)
            if locked.status == transition.target:
                raise InvalidState(transition.already_message)

            previous_status = locked.status
            locked.status = transition.target
            locked.save(update_fields=["status", "updated_at"])

            subscription = locked.subscription
            if transition.target == OrderStatus.ACTIVE:
                subscription.mark_activated(now)
            else:
                subscription.mark_deactivated(now)

            self.activities.record(
                transition.activity_type,
                collective_id=order.collective_id,
                user_id=order.created_by_id,
                order=locked,
                data={
                    "subscription": subscription.snapshot,
                    "collective": order.collective.minimal,
                    "user": principal.minimal,
                    "from_collective": order.from_collective.minimal,
                },
            )

        logger.info(
            "Order %s moved %s -> %s by user=%s",
            order.pk,
            previous_status,
            transition.target,
            principal.pk,
        )
        return self.get_order(order.pk)
