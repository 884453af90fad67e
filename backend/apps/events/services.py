"""
Event services - all mutations flow through this layer.

Rules:
- All mutations wrapped in transaction.atomic
- Use select_for_update for row-level locking
- Any member may create an event; only ADMIN may update or delete one
- Capacity edits are checked against current occupancy under the row lock
- Registration goes through the shared capacity-bounded registry
- Create audit entries for all mutations
- No direct model.save() from views
"""

import logging

from django.db import transaction

from apps.audit.services import record
from apps.events.models import Event, EventRegistration, EventStatus
from apps.registry.engine import CapacityBoundedRegistry, RegistrySpec
from apps.registry.state_machine import EVENT_REGISTRATION_TRANSITIONS
from core.authorization import Action, EntityKind, authorize
from core.exceptions import NotFoundError, ValidationError
from core.storage import storage_guard

logger = logging.getLogger(__name__)

OPEN_STATUSES = (EventStatus.UPCOMING, EventStatus.ONGOING)

UPDATABLE_FIELDS = (
    "title",
    "description",
    "event_date",
    "end_date",
    "location",
    "max_participants",
    "status",
    "image_url",
    "registration_required",
)

event_registry = CapacityBoundedRegistry(
    RegistrySpec(
        subject_model=Event,
        registration_model=EventRegistration,
        subject_field="event",
        capacity_field="max_participants",
        occupancy_field="current_participants",
        open_statuses=OPEN_STATUSES,
        subject_kind=EntityKind.EVENT,
        registration_kind=EntityKind.EVENT_REGISTRATION,
        transitions=EVENT_REGISTRATION_TRANSITIONS,
        audit_prefix="EVENT",
        label="Event",
    )
)


def event_state(event):
    return {
        "id": str(event.id),
        "title": event.title,
        "description": event.description,
        "eventDate": event.event_date,
        "endDate": event.end_date,
        "location": event.location,
        "maxParticipants": event.max_participants,
        "currentParticipants": event.current_participants,
        "status": event.status,
        "imageUrl": event.image_url,
        "registrationRequired": event.registration_required,
        "createdBy": str(event.created_by_id) if event.created_by_id else None,
    }


def _validate_dates(event_date, end_date):
    if end_date is not None and event_date is not None and end_date < event_date:
        raise ValidationError(
            "endDate must not be before eventDate",
            {"eventDate": event_date, "endDate": end_date},
        )


def _validate_capacity(max_participants, current_participants=0):
    if max_participants is None:
        return
    if max_participants < 1:
        raise ValidationError(
            "maxParticipants must be at least 1",
            {"maxParticipants": max_participants},
        )
    if max_participants < current_participants:
        raise ValidationError(
            "maxParticipants cannot be lower than current participants",
            {
                "maxParticipants": max_participants,
                "currentParticipants": current_participants,
            },
        )


def create_event(principal, data, context=None):
    """
    Create a new Event with status UPCOMING (unless given).

    Args:
        principal: Caller
        data: Validated fields (snake_case model field names)
        context: AuditContext

    Returns:
        Event: Created event

    Raises:
        ValidationError: Capacity below 1 or end before start
    """
    authorize(principal, Action.CREATE, EntityKind.EVENT)

    if not data.get("title", "").strip():
        raise ValidationError("Title must be non-empty")
    _validate_dates(data.get("event_date"), data.get("end_date"))
    _validate_capacity(data.get("max_participants"))

    with storage_guard("create_event"), transaction.atomic():
        event = Event.objects.create(
            created_by_id=principal.id,
            **{k: v for k, v in data.items() if k in UPDATABLE_FIELDS},
        )
        record(
            event_type="EVENT_CREATED",
            actor_id=principal.id,
            entity_type=EntityKind.EVENT,
            entity_id=event.id,
            previous_state=None,
            new_state=event_state(event),
            context=context,
        )

    logger.info(
        "event_created",
        extra={"operation": "create_event", "entity_id": str(event.id)},
    )
    return event


def list_events(principal, title=None, location=None, status=None):
    authorize(principal, Action.READ, EntityKind.EVENT)
    queryset = Event.objects.all()
    if title:
        queryset = queryset.filter(title__icontains=title)
    if location:
        queryset = queryset.filter(location__icontains=location)
    if status:
        if status not in EventStatus.values:
            raise ValidationError(f"Invalid status '{status}'", {"status": status})
        queryset = queryset.filter(status=status)
    return queryset.order_by("event_date")


def get_event(principal, event_id):
    authorize(principal, Action.READ, EntityKind.EVENT)
    try:
        return Event.objects.get(id=event_id)
    except Event.DoesNotExist:
        raise NotFoundError(f"Event {event_id} does not exist")


def update_event(principal, event_id, data, context=None):
    """
    Partially update an event (ADMIN only).

    Raises:
        NotFoundError: Event does not exist
        PermissionDeniedError: Caller is not ADMIN
        ValidationError: Capacity below 1 or below current occupancy
    """
    with storage_guard("update_event"), transaction.atomic():
        try:
            event = Event.objects.select_for_update().get(id=event_id)
        except Event.DoesNotExist:
            raise NotFoundError(f"Event {event_id} does not exist")

        authorize(
            principal,
            Action.UPDATE,
            EntityKind.EVENT,
            is_owner=principal.owns(event.created_by_id),
        )

        if "title" in data and not data["title"].strip():
            raise ValidationError("Title must be non-empty")
        if "max_participants" in data:
            _validate_capacity(data["max_participants"], event.current_participants)
        _validate_dates(
            data.get("event_date", event.event_date),
            data.get("end_date", event.end_date),
        )

        previous = event_state(event)
        changed = []
        for field in UPDATABLE_FIELDS:
            if field in data:
                setattr(event, field, data[field])
                changed.append(field)

        if changed:
            event.save(update_fields=changed + ["updated_at"])

        record(
            event_type="EVENT_UPDATED",
            actor_id=principal.id,
            entity_type=EntityKind.EVENT,
            entity_id=event.id,
            previous_state=previous,
            new_state=event_state(event),
            context=context,
        )

    logger.info(
        "event_updated",
        extra={
            "operation": "update_event",
            "entity_id": str(event.id),
            "fields": changed,
        },
    )
    return event


def delete_event(principal, event_id, context=None):
    """
    Delete an event and its registrations (ADMIN only).

    Raises:
        NotFoundError: Event does not exist
        PermissionDeniedError: Caller is not ADMIN
    """
    with storage_guard("delete_event"), transaction.atomic():
        try:
            event = Event.objects.select_for_update().get(id=event_id)
        except Event.DoesNotExist:
            raise NotFoundError(f"Event {event_id} does not exist")

        authorize(
            principal,
            Action.DELETE,
            EntityKind.EVENT,
            is_owner=principal.owns(event.created_by_id),
        )

        previous = event_state(event)
        event.delete()

        record(
            event_type="EVENT_DELETED",
            actor_id=principal.id,
            entity_type=EntityKind.EVENT,
            entity_id=event_id,
            previous_state=previous,
            new_state=None,
            context=context,
        )

    logger.info(
        "event_deleted",
        extra={"operation": "delete_event", "entity_id": str(event_id)},
    )


def register_for_event(principal, event_id, notes="", context=None):
    return event_registry.register(event_id, principal, notes=notes, context=context)


def unregister_from_event(principal, event_id, context=None):
    return event_registry.unregister(event_id, principal, context=context)


def update_registration_status(
    principal, registration_id, status, notes=None, context=None
):
    return event_registry.update_status(
        registration_id, status, principal, notes=notes, context=context
    )


def get_participants(principal, event_id, include_cancelled=False):
    return event_registry.participants(
        event_id, principal, include_cancelled=include_cancelled
    )


def my_registrations(principal, include_cancelled=False):
    return event_registry.registrations_for_user(
        principal, include_cancelled=include_cancelled
    )


def event_counts():
    return {
        "totalEvents": Event.objects.count(),
        "upcomingEvents": Event.objects.filter(status=EventStatus.UPCOMING).count(),
        "completedEvents": Event.objects.filter(status=EventStatus.COMPLETED).count(),
    }
