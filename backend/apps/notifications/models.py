"""
Notification model - per-user messages about things that happened to them.
"""

import uuid
from django.db import models


class NotificationType(models.TextChoices):
    REGISTRATION_CONFIRMED = "REGISTRATION_CONFIRMED"
    REGISTRATION_STATUS_CHANGED = "REGISTRATION_STATUS_CHANGED"
    REGISTRATION_CANCELLED = "REGISTRATION_CANCELLED"
    GENERAL = "GENERAL"


class Notification(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey(
        "users.User",
        on_delete=models.CASCADE,
        related_name="notifications",
    )
    message = models.CharField(max_length=500)
    type = models.CharField(
        max_length=50,
        choices=NotificationType.choices,
        default=NotificationType.GENERAL,
    )
    related_entity_id = models.CharField(max_length=64, null=True, blank=True)
    is_read = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "notifications"
        indexes = [
            models.Index(fields=["user", "is_read"], name="idx_notification_user_read"),
        ]
        ordering = ["-created_at"]

    def __str__(self):
        return f"{self.type} for {self.user_id}"
