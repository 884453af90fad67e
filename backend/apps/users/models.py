"""
User model for the Community Operations backend.

Fields: id (UUID), email, full_name, role, is_active, password, created_at,
updated_at. Email unique and used to log in. Role choices ADMIN, MEMBER.
"""

import uuid
from django.contrib.auth.models import AbstractBaseUser, BaseUserManager
from django.db import models

from . import services


class Role(models.TextChoices):
    ADMIN = "ADMIN"
    MEMBER = "MEMBER"


class UserManager(BaseUserManager):
    """Custom user manager."""

    def create_user(
        self, email, password=None, full_name=None, role=Role.MEMBER, **extra_fields
    ):
        return services.create_user(
            user_model=self.model,
            email=self.normalize_email(email),
            password=password,
            full_name=full_name,
            role=role,
            using=self._db,
            **extra_fields,
        )

    def create_superuser(self, email, password=None, **extra_fields):
        return services.create_superuser(
            user_model=self.model,
            email=self.normalize_email(email),
            password=password,
            using=self._db,
            **extra_fields,
        )


class User(AbstractBaseUser):
    """Custom User model with UUID primary key and role field."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    email = models.EmailField(max_length=254, unique=True)
    full_name = models.CharField(max_length=255)
    role = models.CharField(max_length=20, choices=Role.choices, default=Role.MEMBER)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    USERNAME_FIELD = "email"
    EMAIL_FIELD = "email"
    REQUIRED_FIELDS = ["full_name"]

    objects = UserManager()

    class Meta:
        db_table = "users"
        constraints = [
            models.CheckConstraint(
                condition=models.Q(role__in=["ADMIN", "MEMBER"]),
                name="valid_role",
            )
        ]

    def __str__(self):
        return self.email
