"""
Shared registration shape for every capacity-bounded subject.

Concrete registration models add the foreign key to their subject (with
related_name="registrations") and a partial unique constraint allowing at
most one non-cancelled row per (subject, user).
"""

import uuid
from django.db import models


class RegistrationStatus(models.TextChoices):
    REGISTERED = "REGISTERED"
    CONFIRMED = "CONFIRMED"
    CANCELLED = "CANCELLED"
    WAITLISTED = "WAITLISTED"


# Every status except CANCELLED holds a slot.
ACTIVE_STATUSES = [
    RegistrationStatus.REGISTERED,
    RegistrationStatus.CONFIRMED,
    RegistrationStatus.WAITLISTED,
]


class RegistrationBase(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey(
        "users.User",
        on_delete=models.CASCADE,
        related_name="%(class)ss",
    )
    status = models.CharField(
        max_length=20,
        choices=RegistrationStatus.choices,
        default=RegistrationStatus.REGISTERED,
    )
    notes = models.TextField(blank=True, default="")
    registered_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)
    cancelled_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        abstract = True
        ordering = ["registered_at"]

    @property
    def is_active(self):
        return self.status != RegistrationStatus.CANCELLED
