"""
Notification emitter and inbox operations.

Rules:
- notify() sends after the surrounding transaction commits; a failure to
  store a notification is logged and never affects the caller.
- A notification belonging to someone else is reported as not found.
"""

import logging

from django.db import transaction

from apps.notifications.models import Notification, NotificationType
from core.authorization import Action, EntityKind, authorize
from core.exceptions import NotFoundError
from core.storage import storage_guard

logger = logging.getLogger(__name__)


def notify(user_id, message, type=NotificationType.GENERAL, related_entity_id=None):
    """Schedule a notification for user_id once the current transaction commits."""

    def _send():
        try:
            Notification.objects.create(
                user_id=user_id,
                message=message,
                type=type,
                related_entity_id=(
                    str(related_entity_id) if related_entity_id is not None else None
                ),
            )
        except Exception:
            logger.exception(
                "notification_failed",
                extra={"user_id": str(user_id), "type": type},
            )

    transaction.on_commit(_send)


def list_notifications(principal, unread_only=False):
    authorize(principal, Action.READ, EntityKind.NOTIFICATION)
    queryset = Notification.objects.filter(user_id=principal.id)
    if unread_only:
        queryset = queryset.filter(is_read=False)
    return queryset.order_by("-created_at")


def unread_count(principal):
    authorize(principal, Action.READ, EntityKind.NOTIFICATION)
    return Notification.objects.filter(user_id=principal.id, is_read=False).count()


def _get_own(principal, notification_id, lock=False):
    queryset = Notification.objects.all()
    if lock:
        queryset = queryset.select_for_update()
    try:
        notification = queryset.get(id=notification_id)
    except Notification.DoesNotExist:
        raise NotFoundError(f"Notification {notification_id} does not exist")
    if not principal.owns(notification.user_id):
        raise NotFoundError(f"Notification {notification_id} does not exist")
    return notification


def mark_read(principal, notification_id):
    authorize(principal, Action.READ, EntityKind.NOTIFICATION)
    with storage_guard("mark_notification_read"), transaction.atomic():
        notification = _get_own(principal, notification_id, lock=True)
        if not notification.is_read:
            notification.is_read = True
            notification.save(update_fields=["is_read"])
    return notification


def mark_all_read(principal):
    authorize(principal, Action.READ, EntityKind.NOTIFICATION)
    with storage_guard("mark_all_notifications_read"):
        return Notification.objects.filter(
            user_id=principal.id, is_read=False
        ).update(is_read=True)


def delete_notification(principal, notification_id):
    authorize(principal, Action.READ, EntityKind.NOTIFICATION)
    with storage_guard("delete_notification"), transaction.atomic():
        notification = _get_own(principal, notification_id, lock=True)
        notification.delete()
