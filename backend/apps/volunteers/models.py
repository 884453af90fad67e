"""
VolunteerOpportunity and VolunteerRegistration models.

current_volunteers is the occupancy counter, bounded by max_volunteers when
that is set.
"""

import uuid
from django.db import models

from apps.registry.models import RegistrationBase, RegistrationStatus


class VolunteerStatus(models.TextChoices):
    ACTIVE = "ACTIVE"
    FILLED = "FILLED"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class VolunteerOpportunity(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    title = models.CharField(max_length=255)
    description = models.TextField(blank=True, default="")
    requirements = models.TextField(blank=True, default="")
    location = models.CharField(max_length=255, blank=True, default="")
    date_time = models.DateTimeField(null=True, blank=True)
    duration_hours = models.PositiveIntegerField(null=True, blank=True)
    max_volunteers = models.PositiveIntegerField(null=True, blank=True)
    current_volunteers = models.PositiveIntegerField(default=0)
    status = models.CharField(
        max_length=20, choices=VolunteerStatus.choices, default=VolunteerStatus.ACTIVE
    )
    created_by = models.ForeignKey(
        "users.User",
        on_delete=models.SET_NULL,
        null=True,
        related_name="created_opportunities",
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "volunteer_opportunities"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["status"], name="idx_opportunity_status"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(current_volunteers__gte=0),
                name="opportunity_occupancy_non_negative",
            ),
            models.CheckConstraint(
                condition=models.Q(max_volunteers__isnull=True)
                | models.Q(max_volunteers__gte=1),
                name="opportunity_capacity_positive",
            ),
            models.CheckConstraint(
                condition=models.Q(max_volunteers__isnull=True)
                | models.Q(current_volunteers__lte=models.F("max_volunteers")),
                name="opportunity_occupancy_within_capacity",
            ),
        ]

    def __str__(self):
        return self.title


class VolunteerRegistration(RegistrationBase):
    opportunity = models.ForeignKey(
        VolunteerOpportunity, on_delete=models.CASCADE, related_name="registrations"
    )

    class Meta(RegistrationBase.Meta):
        db_table = "volunteer_registrations"
        constraints = [
            models.UniqueConstraint(
                fields=["opportunity", "user"],
                condition=~models.Q(status=RegistrationStatus.CANCELLED),
                name="uniq_active_volunteer_registration",
            ),
        ]
        indexes = [
            models.Index(
                fields=["opportunity", "status"], name="idx_volunteer_reg_status"
            ),
        ]

    def __str__(self):
        return f"{self.user_id} -> {self.opportunity_id} ({self.status})"
