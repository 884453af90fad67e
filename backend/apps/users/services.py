"""
Service-layer functions for the Users app.

This module exists to keep models passive:
- No business logic in models
- No permission logic in models
- Persistence orchestration (create/save) lives here

Rules:
- Self-registration always yields a MEMBER; only an ADMIN changes roles.
- An admin cannot change their own role or delete their own account.
- Deleting a user releases every active registration slot they hold before the
  row goes, inside the same transaction.
- Role changes and deletions write exactly one audit entry each.
"""

from __future__ import annotations

import logging
from typing import Any, Optional, Type

from django.db import IntegrityError, transaction

from core.authorization import Action, EntityKind, authorize
from core.exceptions import NotFoundError, ValidationError
from core.storage import storage_guard

logger = logging.getLogger(__name__)

ROLES = ("ADMIN", "MEMBER")


def create_user(
    *,
    user_model: Type[Any],
    email: str,
    password: Optional[str] = None,
    full_name: Optional[str] = None,
    role: str = "MEMBER",
    using: Optional[str] = None,
    **extra_fields: Any,
):
    """Create and persist a user."""
    if not email:
        raise ValueError("The email field must be set")

    user = user_model(
        email=email,
        full_name=full_name or email.split("@")[0],
        role=role,
        **extra_fields,
    )
    user.set_password(password)
    if using is None:
        user.save()
    else:
        user.save(using=using)
    return user


def create_superuser(
    *,
    user_model: Type[Any],
    email: str,
    password: Optional[str] = None,
    using: Optional[str] = None,
    **extra_fields: Any,
):
    """Create an administrator account."""
    extra_fields.setdefault("role", "ADMIN")
    return create_user(
        user_model=user_model,
        email=email,
        password=password,
        using=using,
        **extra_fields,
    )


def user_state(user) -> dict:
    """Audit snapshot of a user (never includes the password hash)."""
    return {
        "id": str(user.id),
        "email": user.email,
        "fullName": user.full_name,
        "role": user.role,
        "isActive": user.is_active,
    }


def register_user(email, password, full_name, context=None):
    """
    Self-service sign-up. Always creates a MEMBER.

    Raises:
        ValidationError: Email already in use
    """
    from apps.audit.services import record
    from apps.users.models import User

    email = User.objects.normalize_email(email)
    if User.objects.filter(email__iexact=email).exists():
        raise ValidationError("Email address already in use.", {"email": email})

    try:
        with storage_guard("register_user"), transaction.atomic():
            user = User.objects.create_user(
                email=email, password=password, full_name=full_name
            )
            record(
                event_type="USER_REGISTERED",
                actor_id=user.id,
                entity_type=EntityKind.USER,
                entity_id=user.id,
                new_state=user_state(user),
                context=context,
            )
    except IntegrityError:
        # Lost a race with a concurrent sign-up for the same address.
        raise ValidationError("Email address already in use.", {"email": email})

    logger.info(
        "user_registered",
        extra={"operation": "register_user", "entity_id": str(user.id)},
    )
    return user


def list_users(principal):
    from apps.users.models import User

    authorize(principal, Action.LIST, EntityKind.USER)
    return User.objects.all().order_by("email")


def get_user(principal, user_id):
    from apps.users.models import User

    authorize(principal, Action.READ, EntityKind.USER)
    try:
        return User.objects.get(id=user_id)
    except User.DoesNotExist:
        raise NotFoundError(f"User {user_id} does not exist")


def update_user_role(principal, user_id, role, context=None):
    """
    Change a user's role (ADMIN only).

    The new role applies from the user's next request: the principal is
    rebuilt from the users table every time.

    Raises:
        PermissionDeniedError: Caller is not ADMIN
        NotFoundError: User does not exist
        ValidationError: Unknown role, or an admin changing their own role
    """
    from apps.audit.services import record
    from apps.users.models import User

    authorize(principal, Action.UPDATE_ROLE, EntityKind.USER)

    if role not in ROLES:
        raise ValidationError(f"Invalid role '{role}'", {"role": role})
    if principal.owns(user_id):
        raise ValidationError("Administrators cannot change their own role")

    with storage_guard("update_user_role"), transaction.atomic():
        try:
            user = User.objects.select_for_update().get(id=user_id)
        except User.DoesNotExist:
            raise NotFoundError(f"User {user_id} does not exist")

        previous = user_state(user)
        user.role = role
        user.save(update_fields=["role", "updated_at"])

        record(
            event_type="UPDATE_USER_ROLE",
            actor_id=principal.id,
            entity_type=EntityKind.USER,
            entity_id=user.id,
            previous_state=previous,
            new_state=user_state(user),
            context=context,
        )

    logger.info(
        "user_role_updated",
        extra={
            "operation": "update_user_role",
            "entity_id": str(user.id),
            "role": role,
        },
    )
    return user


def delete_user(principal, user_id, context=None):
    """
    Delete a user account (ADMIN only).

    Raises:
        PermissionDeniedError: Caller is not ADMIN
        NotFoundError: User does not exist
        ValidationError: An admin deleting their own account
    """
    from apps.audit.services import record
    from apps.events.services import event_registry
    from apps.users.models import User
    from apps.volunteers.services import volunteer_registry

    authorize(principal, Action.DELETE, EntityKind.USER)

    if principal.owns(user_id):
        raise ValidationError("Administrators cannot delete their own account")

    with storage_guard("delete_user"), transaction.atomic():
        if not User.objects.filter(id=user_id).exists():
            raise NotFoundError(f"User {user_id} does not exist")

        # Subject rows before the user row, same order as register().
        released = event_registry.release_all_for_user(user_id)
        released += volunteer_registry.release_all_for_user(user_id)

        try:
            user = User.objects.select_for_update().get(id=user_id)
        except User.DoesNotExist:
            raise NotFoundError(f"User {user_id} does not exist")

        # Registrations committed between the first pass and the user lock.
        released += event_registry.release_all_for_user(user.id)
        released += volunteer_registry.release_all_for_user(user.id)

        previous = user_state(user)
        user.delete()

        record(
            event_type="DELETE_USER",
            actor_id=principal.id,
            entity_type=EntityKind.USER,
            entity_id=user_id,
            previous_state=previous,
            new_state=None,
            context=context,
        )

    logger.info(
        "user_deleted",
        extra={
            "operation": "delete_user",
            "entity_id": str(user_id),
            "released_registrations": released,
        },
    )


def user_counts():
    from apps.users.models import User

    return {
        "totalUsers": User.objects.count(),
        "activeUsers": User.objects.filter(is_active=True).count(),
        "adminUsers": User.objects.filter(role="ADMIN").count(),
        "memberUsers": User.objects.filter(role="MEMBER").count(),
    }
