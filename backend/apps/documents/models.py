"""
Document model - metadata for a blob kept in default_storage.

access_level places the document in the PUBLIC < MEMBER < COMMITTEE < ADMIN
lattice; see core.authorization for who may read which levels.
"""

import uuid
from django.db import models


class DocumentCategory(models.TextChoices):
    GENERAL = "GENERAL"
    MINUTES = "MINUTES"
    POLICY = "POLICY"
    FINANCIAL = "FINANCIAL"
    NEWSLETTER = "NEWSLETTER"
    FORM = "FORM"
    OTHER = "OTHER"


class AccessLevel(models.TextChoices):
    PUBLIC = "PUBLIC"
    MEMBER = "MEMBER"
    COMMITTEE = "COMMITTEE"
    ADMIN = "ADMIN"


class Document(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    title = models.CharField(max_length=255)
    description = models.TextField(blank=True, default="")
    category = models.CharField(
        max_length=20,
        choices=DocumentCategory.choices,
        default=DocumentCategory.GENERAL,
    )
    access_level = models.CharField(
        max_length=20, choices=AccessLevel.choices, default=AccessLevel.PUBLIC
    )
    file_path = models.CharField(max_length=500)
    file_name = models.CharField(max_length=255)
    file_type = models.CharField(max_length=100, blank=True, default="")
    file_size = models.PositiveBigIntegerField(default=0)
    download_count = models.PositiveIntegerField(default=0)
    uploaded_by = models.ForeignKey(
        "users.User",
        on_delete=models.SET_NULL,
        null=True,
        related_name="documents",
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "documents"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["access_level"], name="idx_document_access"),
            models.Index(fields=["category"], name="idx_document_category"),
        ]

    def __str__(self):
        return self.title
