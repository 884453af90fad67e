"""
Discussion and DiscussionReply models.

view_count and reply_count are maintained with F() updates in the service
layer, never by read-modify-write.
"""

import uuid
from django.db import models


class Discussion(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    title = models.CharField(max_length=255)
    content = models.TextField()
    category = models.CharField(max_length=100, blank=True, default="")
    created_by = models.ForeignKey(
        "users.User",
        on_delete=models.SET_NULL,
        null=True,
        related_name="discussions",
    )
    is_pinned = models.BooleanField(default=False)
    is_locked = models.BooleanField(default=False)
    view_count = models.PositiveIntegerField(default=0)
    reply_count = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "discussions"
        ordering = ["-is_pinned", "-created_at"]
        indexes = [
            models.Index(fields=["category"], name="idx_discussion_category"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(reply_count__gte=0),
                name="discussion_reply_count_non_negative",
            ),
        ]

    def __str__(self):
        return self.title


class DiscussionReply(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    discussion = models.ForeignKey(
        Discussion, on_delete=models.CASCADE, related_name="replies"
    )
    content = models.TextField()
    created_by = models.ForeignKey(
        "users.User",
        on_delete=models.SET_NULL,
        null=True,
        related_name="discussion_replies",
    )
    parent_reply = models.ForeignKey(
        "self",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="children",
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "discussion_replies"
        ordering = ["created_at"]

    def __str__(self):
        return f"Reply {self.id} on {self.discussion_id}"
