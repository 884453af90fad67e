"""
Event and EventRegistration models.

current_participants is the occupancy counter; it only moves through the
registry engine's conditional updates. Check constraints keep it within
[0, max_participants] at the database level.
"""

import uuid
from django.db import models

from apps.registry.models import RegistrationBase, RegistrationStatus


class EventStatus(models.TextChoices):
    UPCOMING = "UPCOMING"
    ONGOING = "ONGOING"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class Event(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    title = models.CharField(max_length=255)
    description = models.TextField(blank=True, default="")
    event_date = models.DateTimeField()
    end_date = models.DateTimeField(null=True, blank=True)
    location = models.CharField(max_length=255, blank=True, default="")
    max_participants = models.PositiveIntegerField(null=True, blank=True)
    current_participants = models.PositiveIntegerField(default=0)
    status = models.CharField(
        max_length=20, choices=EventStatus.choices, default=EventStatus.UPCOMING
    )
    image_url = models.URLField(max_length=500, blank=True, default="")
    registration_required = models.BooleanField(default=False)
    created_by = models.ForeignKey(
        "users.User",
        on_delete=models.SET_NULL,
        null=True,
        related_name="created_events",
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "events"
        ordering = ["event_date"]
        indexes = [
            models.Index(fields=["status"], name="idx_event_status"),
            models.Index(fields=["event_date"], name="idx_event_date"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(current_participants__gte=0),
                name="event_occupancy_non_negative",
            ),
            models.CheckConstraint(
                condition=models.Q(max_participants__isnull=True)
                | models.Q(max_participants__gte=1),
                name="event_capacity_positive",
            ),
            models.CheckConstraint(
                condition=models.Q(max_participants__isnull=True)
                | models.Q(current_participants__lte=models.F("max_participants")),
                name="event_occupancy_within_capacity",
            ),
        ]

    def __str__(self):
        return self.title


class EventRegistration(RegistrationBase):
    event = models.ForeignKey(
        Event, on_delete=models.CASCADE, related_name="registrations"
    )

    class Meta(RegistrationBase.Meta):
        db_table = "event_registrations"
        constraints = [
            models.UniqueConstraint(
                fields=["event", "user"],
                condition=~models.Q(status=RegistrationStatus.CANCELLED),
                name="uniq_active_event_registration",
            ),
        ]
        indexes = [
            models.Index(fields=["event", "status"], name="idx_event_reg_status"),
        ]

    def __str__(self):
        return f"{self.user_id} -> {self.event_id} ({self.status})"
