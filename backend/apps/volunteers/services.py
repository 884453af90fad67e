"""
Volunteer opportunity services - all mutations flow through this layer.

Rules:
- All mutations wrapped in transaction.atomic
- Only ACTIVE opportunities accept volunteers
- Only ADMIN may update or delete an opportunity
- The opportunity's creator (or ADMIN) sees its registrations and moves them
  between statuses
- Capacity edits are checked against current volunteers under the row lock
- Create audit entries for all mutations
"""

import logging

from django.db import transaction

from apps.audit.services import record
from apps.registry.engine import CapacityBoundedRegistry, RegistrySpec
from apps.registry.state_machine import VOLUNTEER_REGISTRATION_TRANSITIONS
from apps.volunteers.models import (
    VolunteerOpportunity,
    VolunteerRegistration,
    VolunteerStatus,
)
from core.authorization import Action, EntityKind, authorize
from core.exceptions import NotFoundError, ValidationError
from core.storage import storage_guard

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = (
    "title",
    "description",
    "requirements",
    "location",
    "date_time",
    "duration_hours",
    "max_volunteers",
    "status",
)

volunteer_registry = CapacityBoundedRegistry(
    RegistrySpec(
        subject_model=VolunteerOpportunity,
        registration_model=VolunteerRegistration,
        subject_field="opportunity",
        capacity_field="max_volunteers",
        occupancy_field="current_volunteers",
        open_statuses=(VolunteerStatus.ACTIVE,),
        subject_kind=EntityKind.VOLUNTEER_OPPORTUNITY,
        registration_kind=EntityKind.VOLUNTEER_REGISTRATION,
        transitions=VOLUNTEER_REGISTRATION_TRANSITIONS,
        audit_prefix="VOLUNTEER",
        label="Opportunity",
    )
)


def opportunity_state(opportunity):
    return {
        "id": str(opportunity.id),
        "title": opportunity.title,
        "description": opportunity.description,
        "requirements": opportunity.requirements,
        "location": opportunity.location,
        "dateTime": opportunity.date_time,
        "durationHours": opportunity.duration_hours,
        "maxVolunteers": opportunity.max_volunteers,
        "currentVolunteers": opportunity.current_volunteers,
        "status": opportunity.status,
        "createdBy": (
            str(opportunity.created_by_id) if opportunity.created_by_id else None
        ),
    }


def _check_capacity(max_volunteers, current_volunteers=0):
    if max_volunteers is None:
        return
    if max_volunteers < 1:
        raise ValidationError(
            "maxVolunteers must be at least 1", {"maxVolunteers": max_volunteers}
        )
    if max_volunteers < current_volunteers:
        raise ValidationError(
            "maxVolunteers cannot be lower than current volunteers",
            {
                "maxVolunteers": max_volunteers,
                "currentVolunteers": current_volunteers,
            },
        )


def _lock_opportunity(opportunity_id):
    try:
        return VolunteerOpportunity.objects.select_for_update().get(id=opportunity_id)
    except VolunteerOpportunity.DoesNotExist:
        raise NotFoundError(f"Opportunity {opportunity_id} does not exist")


def create_opportunity(principal, data, context=None):
    """
    Create a volunteer opportunity, ACTIVE unless a status is given.

    Raises:
        ValidationError: Empty title or capacity below 1
    """
    authorize(principal, Action.CREATE, EntityKind.VOLUNTEER_OPPORTUNITY)

    if not data.get("title", "").strip():
        raise ValidationError("Title must be non-empty")
    _check_capacity(data.get("max_volunteers"))

    with storage_guard("create_opportunity"), transaction.atomic():
        opportunity = VolunteerOpportunity.objects.create(
            created_by_id=principal.id,
            **{k: v for k, v in data.items() if k in UPDATABLE_FIELDS},
        )
        record(
            event_type="OPPORTUNITY_CREATED",
            actor_id=principal.id,
            entity_type=EntityKind.VOLUNTEER_OPPORTUNITY,
            entity_id=opportunity.id,
            new_state=opportunity_state(opportunity),
            context=context,
        )

    logger.info(
        "opportunity_created",
        extra={"operation": "create_opportunity", "entity_id": str(opportunity.id)},
    )
    return opportunity


def list_opportunities(principal, title=None, location=None, status=None):
    authorize(principal, Action.READ, EntityKind.VOLUNTEER_OPPORTUNITY)
    queryset = VolunteerOpportunity.objects.all()
    if title:
        queryset = queryset.filter(title__icontains=title)
    if location:
        queryset = queryset.filter(location__icontains=location)
    if status:
        if status not in VolunteerStatus.values:
            raise ValidationError(f"Invalid status '{status}'", {"status": status})
        queryset = queryset.filter(status=status)
    return queryset.order_by("-created_at")


def get_opportunity(principal, opportunity_id):
    authorize(principal, Action.READ, EntityKind.VOLUNTEER_OPPORTUNITY)
    try:
        return VolunteerOpportunity.objects.get(id=opportunity_id)
    except VolunteerOpportunity.DoesNotExist:
        raise NotFoundError(f"Opportunity {opportunity_id} does not exist")


def update_opportunity(principal, opportunity_id, data, context=None):
    """
    Partially update an opportunity (ADMIN only).

    Raises:
        NotFoundError: Opportunity does not exist
        PermissionDeniedError: Caller is not ADMIN
        ValidationError: Capacity below 1 or below current volunteers
    """
    with storage_guard("update_opportunity"), transaction.atomic():
        opportunity = _lock_opportunity(opportunity_id)
        authorize(
            principal,
            Action.UPDATE,
            EntityKind.VOLUNTEER_OPPORTUNITY,
            is_owner=principal.owns(opportunity.created_by_id),
        )

        if "title" in data and not data["title"].strip():
            raise ValidationError("Title must be non-empty")
        if "max_volunteers" in data:
            _check_capacity(data["max_volunteers"], opportunity.current_volunteers)

        previous = opportunity_state(opportunity)
        changed = [field for field in UPDATABLE_FIELDS if field in data]
        for field in changed:
            setattr(opportunity, field, data[field])
        if changed:
            opportunity.save(update_fields=changed + ["updated_at"])

        record(
            event_type="OPPORTUNITY_UPDATED",
            actor_id=principal.id,
            entity_type=EntityKind.VOLUNTEER_OPPORTUNITY,
            entity_id=opportunity.id,
            previous_state=previous,
            new_state=opportunity_state(opportunity),
            context=context,
        )

    logger.info(
        "opportunity_updated",
        extra={
            "operation": "update_opportunity",
            "entity_id": str(opportunity.id),
            "fields": changed,
        },
    )
    return opportunity


def delete_opportunity(principal, opportunity_id, context=None):
    with storage_guard("delete_opportunity"), transaction.atomic():
        opportunity = _lock_opportunity(opportunity_id)
        authorize(
            principal,
            Action.DELETE,
            EntityKind.VOLUNTEER_OPPORTUNITY,
            is_owner=principal.owns(opportunity.created_by_id),
        )

        previous = opportunity_state(opportunity)
        opportunity.delete()

        record(
            event_type="OPPORTUNITY_DELETED",
            actor_id=principal.id,
            entity_type=EntityKind.VOLUNTEER_OPPORTUNITY,
            entity_id=opportunity_id,
            previous_state=previous,
            context=context,
        )

    logger.info(
        "opportunity_deleted",
        extra={"operation": "delete_opportunity", "entity_id": str(opportunity_id)},
    )


def register_for_opportunity(principal, opportunity_id, notes="", context=None):
    return volunteer_registry.register(
        opportunity_id, principal, notes=notes, context=context
    )


def unregister_from_opportunity(principal, opportunity_id, context=None):
    return volunteer_registry.unregister(opportunity_id, principal, context=context)


def opportunity_registrations(principal, opportunity_id, include_cancelled=False):
    return volunteer_registry.participants(
        opportunity_id, principal, include_cancelled=include_cancelled
    )


def my_registrations(principal, include_cancelled=False):
    return volunteer_registry.registrations_for_user(
        principal, include_cancelled=include_cancelled
    )


def update_registration_status(
    principal, registration_id, status, notes=None, context=None
):
    return volunteer_registry.update_status(
        registration_id, status, principal, notes=notes, context=context
    )


def opportunity_counts():
    return {
        "totalVolunteerOpportunities": VolunteerOpportunity.objects.count(),
        "activeVolunteerOpportunities": VolunteerOpportunity.objects.filter(
            status=VolunteerStatus.ACTIVE
        ).count(),
    }
