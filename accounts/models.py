from django.conf import settings
from django.contrib.auth.models import AbstractUser
from django.db import models


# -----------------------------
# MODELS - accounts/models.py
# -----------------------------


class CollectiveType(models.TextChoices):
    USER = "USER", "User"
    ORGANIZATION = "ORGANIZATION", "Organization"
    COLLECTIVE = "COLLECTIVE", "Collective"
    EVENT = "EVENT", "Event"


class MemberRoles(models.TextChoices):
    # Holds money on behalf of the collective
    HOST = "HOST", "Host"
    # Can approve expenses
    ADMIN = "ADMIN", "Administrator"
    # Member of the collective but cannot approve expenses
    MEMBER = "MEMBER", "Core Contributor"
    # Occasional contributor (giving time)
    CONTRIBUTOR = "CONTRIBUTOR", "Contributor"
    # Supporter giving money
    BACKER = "BACKER", "Financial Contributor"
    # Deprecated on 2019-08-22
    FUNDRAISER = "FUNDRAISER", "Fundraiser"
    # Registered for a free tier (typically a free event ticket)
    ATTENDEE = "ATTENDEE", "Attendee"
    FOLLOWER = "FOLLOWER", "Follower"
    CONNECTED_COLLECTIVE = "CONNECTED_COLLECTIVE", "Connected-collective"


ADMINISTRATIVE_ROLES = (MemberRoles.ADMIN, MemberRoles.HOST)


def _default_currency():
    return getattr(settings, "DEFAULT_CURRENCY", "USD")


class Collective(models.Model):
    slug = models.SlugField(max_length=255, unique=True)
    name = models.CharField(max_length=255)
    type = models.CharField(max_length=20, choices=CollectiveType.choices, default=CollectiveType.COLLECTIVE)
    currency = models.CharField(max_length=3, default=_default_currency)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ("slug",)

    def __str__(self) -> str:
        return self.slug

    @property
    def minimal(self) -> dict:
        return {
            "id": self.id,
            "slug": self.slug,
            "name": self.name,
            "type": self.type,
            "currency": self.currency,
        }


class Member(models.Model):
    member_collective = models.ForeignKey(Collective, on_delete=models.CASCADE, related_name="memberships")
    collective = models.ForeignKey(Collective, on_delete=models.CASCADE, related_name="members")
    role = models.CharField(max_length=24, choices=MemberRoles.choices)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=("member_collective", "collective", "role"), name="unique_member_role"),
        ]

    def __str__(self) -> str:
        return f"{self.member_collective.slug} {self.role} of {self.collective.slug}"


class User(AbstractUser):
    email = models.EmailField(unique=True)
    collective = models.OneToOneField(
        Collective,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="user",
    )
    USERNAME_FIELD = "email"
    REQUIRED_FIELDS = ["username"]

    @property
    def minimal(self) -> dict:
        return {
            "id": self.id,
            "email": self.email,
            "collective_id": self.collective_id,
        }
