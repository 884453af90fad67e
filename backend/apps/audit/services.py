"""
Audit service - creates immutable audit log entries.

Rules:
- All audit entries are append-only. No updates or deletions.
- record() defers the write until the surrounding transaction commits, so an
  audit row exists only for a committed change.
- A failed audit write is logged and never undoes the business change.
- Snapshots are stored as canonical JSON (sorted keys); a snapshot that cannot
  be serialized is stored as null with a warning.
"""

import json
import logging

from django.core.serializers.json import DjangoJSONEncoder
from django.db import transaction

from apps.audit.context import AuditContext
from apps.audit.models import AuditLog

logger = logging.getLogger(__name__)


def snapshot(value):
    """Canonicalize a state snapshot into plain JSON data, or None."""
    if value is None:
        return None
    try:
        return json.loads(json.dumps(value, cls=DjangoJSONEncoder, sort_keys=True))
    except (TypeError, ValueError):
        logger.warning(
            "audit_snapshot_unserializable",
            extra={"value_type": type(value).__name__},
        )
        return None


def create_audit_entry(
    event_type,
    actor_id,
    entity_type,
    entity_id,
    previous_state=None,
    new_state=None,
    context=None,
):
    """
    Create an audit log entry immediately.

    Args:
        event_type: Event classification (e.g. 'EVENT_REGISTERED')
        actor_id: User identifier (None for system events)
        entity_type: Type of affected entity (e.g. 'Event')
        entity_id: Identifier of affected entity
        previous_state: State before change (optional)
        new_state: State after change (optional)
        context: AuditContext with origin metadata (optional)

    Returns:
        AuditLog: Created audit log entry
    """
    from apps.users.models import User

    context = context or AuditContext.system()

    actor = None
    if actor_id:
        # Actor may have been deleted since; the entry is still written.
        actor = User.objects.filter(id=actor_id).first()

    return AuditLog.objects.create(
        event_type=event_type,
        actor=actor,
        entity_type=entity_type,
        entity_id=str(entity_id),
        previous_state=snapshot(previous_state),
        new_state=snapshot(new_state),
        ip_address=context.ip_address,
        user_agent=context.user_agent,
        request_id=context.request_id,
    )


def record(
    event_type,
    actor_id,
    entity_type,
    entity_id,
    previous_state=None,
    new_state=None,
    context=None,
):
    """
    Schedule an audit entry for after the current transaction commits.

    Snapshots are canonicalized now, while the caller's values are current.
    Outside a transaction the entry is written immediately.
    """
    previous = snapshot(previous_state)
    new = snapshot(new_state)

    def _write():
        try:
            with transaction.atomic():
                create_audit_entry(
                    event_type=event_type,
                    actor_id=actor_id,
                    entity_type=entity_type,
                    entity_id=entity_id,
                    previous_state=previous,
                    new_state=new,
                    context=context,
                )
        except Exception:
            logger.exception(
                "audit_write_failed",
                extra={
                    "event_type": event_type,
                    "entity_type": entity_type,
                    "entity_id": str(entity_id),
                },
            )

    transaction.on_commit(_write)


def query_audit_log(
    principal,
    entity_type=None,
    entity_id=None,
    actor_id=None,
    event_type=None,
    from_date=None,
    to_date=None,
):
    """
    Return audit entries matching the filters, newest first (ADMIN only).

    Raises:
        AuthenticationRequiredError / PermissionDeniedError: Caller is not ADMIN
    """
    from core.authorization import Action, EntityKind, authorize

    authorize(principal, Action.READ, EntityKind.AUDIT_LOG)

    queryset = AuditLog.objects.select_related("actor")
    if entity_type:
        queryset = queryset.filter(entity_type=entity_type)
    if entity_id:
        queryset = queryset.filter(entity_id=str(entity_id))
    if actor_id:
        queryset = queryset.filter(actor_id=actor_id)
    if event_type:
        queryset = queryset.filter(event_type=event_type)
    if from_date:
        queryset = queryset.filter(occurred_at__gte=from_date)
    if to_date:
        queryset = queryset.filter(occurred_at__lte=to_date)

    return queryset.order_by("-occurred_at")
