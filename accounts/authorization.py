from __future__ import annotations

import logging
from typing import Optional

from django.db import models

from .exceptions import LoginRequired, Unauthorized
from .models import ADMINISTRATIVE_ROLES, Member

logger = logging.getLogger(__name__)


class Action(models.TextChoices):
    VIEW_ORDER = "view_order", "see a recurring contribution"
    CANCEL_ORDER = "cancel_order", "cancel a recurring contribution"
    ACTIVATE_ORDER = "activate_order", "activate a recurring contribution"
    UPDATE_ORDER = "update_order", "update a subscription"
    USE_PAYMENT_METHOD = "use_payment_method", "use this payment method"
    ADD_PAYMENT_METHOD = "add_payment_method", "add a payment method"


_DENIED_MESSAGES = {
    Action.VIEW_ORDER: "You don't have permission to see this recurring contribution",
    Action.CANCEL_ORDER: "You don't have permission to cancel this recurring contribution",
    Action.ACTIVATE_ORDER: "You don't have permission to activate this recurring contribution",
    Action.UPDATE_ORDER: "You don't have permission to update this subscription",
    Action.USE_PAYMENT_METHOD: "You don't have permission to use this payment method",
    Action.ADD_PAYMENT_METHOD: "You don't have permission to add a payment method to this account",
}


def _is_authenticated(principal) -> bool:
    return principal is not None and getattr(principal, "is_authenticated", False)


class AuthorizationGuard:
    """Decides whether a principal may act on behalf of a collective.

    A principal administers a collective when it is their own collective, or
    when their collective holds an administrative membership (ADMIN or HOST)
    on it. How memberships are stored does not leak past this class.
    """

    def __init__(self, *, roles=ADMINISTRATIVE_ROLES):
        self.roles = tuple(roles)

    def administered_collective_ids(self, principal) -> set[int]:
        if not _is_authenticated(principal) or principal.collective_id is None:
            return set()
        ids = set(
            Member.objects.filter(
                member_collective_id=principal.collective_id,
                role__in=self.roles,
            ).values_list("collective_id", flat=True)
        )
        ids.add(principal.collective_id)
        return ids

    def can(self, principal, collective_id: Optional[int]) -> bool:
        if not _is_authenticated(principal) or collective_id is None:
            return False
        if principal.collective_id is None:
            return False
        if principal.collective_id == collective_id:
            return True
        return Member.objects.filter(
            member_collective_id=principal.collective_id,
            collective_id=collective_id,
            role__in=self.roles,
        ).exists()

    def require_login(self, principal, action: Action) -> None:
        if not _is_authenticated(principal):
            raise LoginRequired(f"You need to be logged in to {Action(action).label}")

    def authorize(self, principal, collective_id: Optional[int], action: Action) -> None:
        self.require_login(principal, action)
        if not self.can(principal, collective_id):
            logger.info(
                "Denied %s for user=%s on collective=%s",
                action,
                principal.pk,
                collective_id,
            )
            raise Unauthorized(_DENIED_MESSAGES[Action(action)])
