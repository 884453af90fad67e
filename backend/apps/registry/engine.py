"""
Capacity-bounded registration engine shared by events and volunteer
opportunities.

Rules:
- All mutations wrapped in transaction.atomic
- Lock order is always subject row first, then registration row. Inserting a
  registration key-share locks the user row, so account deletion also locks
  subjects before the user
- Occupancy only moves through conditional UPDATE statements:
    admit:   SET occupancy = occupancy + 1
             WHERE id = ? AND (capacity IS NULL OR occupancy < capacity)
    release: SET occupancy = occupancy - 1 WHERE id = ? AND occupancy > 0
  Zero affected rows means the subject is full (admit) or the counter is out
  of step with the registrations (release).
- The counter change and the registration row commit or roll back together
- Exactly one audit entry per successful mutation, written after commit
"""

import logging
from dataclasses import dataclass

from django.db import IntegrityError, transaction
from django.db.models import Count, F, Q
from django.utils import timezone

from apps.audit.context import AuditContext
from apps.audit.services import record
from apps.notifications.models import NotificationType
from apps.notifications.services import notify
from apps.registry.models import RegistrationStatus
from apps.registry.state_machine import validate_transition
from core.authorization import Action, authorize
from core.exceptions import (
    AlreadyRegisteredError,
    CapacityExceededError,
    IntegrityViolationError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
)
from core.storage import storage_guard

logger = logging.getLogger(__name__)

CANCELLED = RegistrationStatus.CANCELLED


@dataclass(frozen=True)
class RegistrySpec:
    """Describes one kind of registrable subject and its registrations."""

    subject_model: type
    registration_model: type
    subject_field: str
    capacity_field: str
    occupancy_field: str
    open_statuses: tuple
    subject_kind: str
    registration_kind: str
    transitions: dict
    audit_prefix: str
    label: str
    owner_field: str = "created_by_id"


class CapacityBoundedRegistry:
    def __init__(self, spec):
        self.spec = spec

    # ------------------------------------------------------------------
    # Snapshots
    # ------------------------------------------------------------------

    def subject_state(self, subject):
        return {
            "id": str(subject.pk),
            "status": subject.status,
            "capacity": getattr(subject, self.spec.capacity_field),
            "occupancy": getattr(subject, self.spec.occupancy_field),
        }

    def registration_state(self, registration, subject=None):
        state = {
            "id": str(registration.pk),
            "subjectId": str(getattr(registration, f"{self.spec.subject_field}_id")),
            "userId": str(registration.user_id),
            "status": registration.status,
            "notes": registration.notes,
            "registeredAt": registration.registered_at,
            "cancelledAt": registration.cancelled_at,
        }
        if subject is not None:
            state["occupancy"] = getattr(subject, self.spec.occupancy_field)
        return state

    # ------------------------------------------------------------------
    # Row access
    # ------------------------------------------------------------------

    def _lock_subject(self, subject_id):
        model = self.spec.subject_model
        try:
            return model.objects.select_for_update().get(pk=subject_id)
        except model.DoesNotExist:
            raise NotFoundError(f"{self.spec.label} {subject_id} does not exist")

    def _get_subject(self, subject_id):
        model = self.spec.subject_model
        try:
            return model.objects.get(pk=subject_id)
        except model.DoesNotExist:
            raise NotFoundError(f"{self.spec.label} {subject_id} does not exist")

    def _registrations(self):
        return self.spec.registration_model.objects

    def _active_for(self, subject_id, user_id):
        return self._registrations().filter(
            **{f"{self.spec.subject_field}_id": subject_id, "user_id": user_id}
        ).exclude(status=CANCELLED)

    def _is_owner(self, principal, subject):
        return principal.owns(getattr(subject, self.spec.owner_field))

    # ------------------------------------------------------------------
    # Counter moves
    # ------------------------------------------------------------------

    def _admit(self, subject):
        """Conditionally take one slot. Returns rows affected (0 or 1)."""
        capacity = self.spec.capacity_field
        occupancy = self.spec.occupancy_field
        has_room = Q(**{f"{capacity}__isnull": True}) | Q(
            **{f"{occupancy}__lt": F(capacity)}
        )
        return (
            self.spec.subject_model.objects.filter(pk=subject.pk)
            .filter(has_room)
            .update(**{occupancy: F(occupancy) + 1})
        )

    def _release(self, subject, operation):
        """Give one slot back; a counter already at zero is an integrity fault."""
        occupancy = self.spec.occupancy_field
        released = (
            self.spec.subject_model.objects.filter(
                pk=subject.pk, **{f"{occupancy}__gt": 0}
            ).update(**{occupancy: F(occupancy) - 1})
        )
        if released == 0:
            logger.error(
                "occupancy_underflow",
                extra={
                    "operation": operation,
                    "entity_type": self.spec.subject_kind,
                    "entity_id": str(subject.pk),
                },
            )
            raise IntegrityViolationError(
                f"{self.spec.label} occupancy is already zero",
                {"subjectId": str(subject.pk)},
            )

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def register(self, subject_id, principal, notes="", context=None):
        """
        Register the caller for a subject.

        Returns:
            The created registration

        Raises:
            NotFoundError: Subject does not exist
            InvalidStateError: Subject is not open for registration
            AlreadyRegisteredError: Caller already holds an active registration
            CapacityExceededError: No slot left
        """
        spec = self.spec
        authorize(principal, Action.REGISTER, spec.subject_kind)
        operation = f"{spec.audit_prefix.lower()}_register"

        with storage_guard(operation), transaction.atomic():
            subject = self._lock_subject(subject_id)

            if subject.status not in spec.open_statuses:
                raise InvalidStateError(
                    f"{spec.label} is not open for registration",
                    {
                        "subjectId": str(subject.pk),
                        "status": subject.status,
                        "openStatuses": list(spec.open_statuses),
                    },
                )

            if self._active_for(subject.pk, principal.id).exists():
                raise AlreadyRegisteredError(
                    f"User already registered for this {spec.label.lower()}.",
                    {"subjectId": str(subject.pk)},
                )

            if self._admit(subject) == 0:
                raise CapacityExceededError(
                    f"{spec.label} is full.",
                    {
                        "subjectId": str(subject.pk),
                        "capacity": getattr(subject, spec.capacity_field),
                    },
                )

            try:
                with transaction.atomic():
                    registration = spec.registration_model.objects.create(
                        **{
                            f"{spec.subject_field}_id": subject.pk,
                            "user_id": principal.id,
                            "status": RegistrationStatus.REGISTERED,
                            "notes": notes or "",
                        }
                    )
            except IntegrityError:
                # Partial unique index: a concurrent registration won. The
                # outer block rolls the slot back.
                raise AlreadyRegisteredError(
                    f"User already registered for this {spec.label.lower()}.",
                    {"subjectId": str(subject.pk)},
                )

            subject.refresh_from_db(fields=[spec.occupancy_field])

            record(
                event_type=f"{spec.audit_prefix}_REGISTERED",
                actor_id=principal.id,
                entity_type=spec.registration_kind,
                entity_id=registration.pk,
                previous_state=None,
                new_state=self.registration_state(registration, subject),
                context=context,
            )
            notify(
                principal.id,
                f"You are registered for {subject.title}.",
                NotificationType.REGISTRATION_CONFIRMED,
                subject.pk,
            )

        logger.info(
            "registration_created",
            extra={
                "operation": operation,
                "entity_id": str(registration.pk),
                "subject_id": str(subject.pk),
                "occupancy": getattr(subject, spec.occupancy_field),
            },
        )
        return registration

    def unregister(self, subject_id, principal, context=None):
        """
        Cancel the caller's active registration and release its slot.

        Raises:
            NotFoundError: Subject missing, or caller has no active registration
            IntegrityViolationError: Occupancy was already zero
        """
        spec = self.spec
        authorize(principal, Action.UNREGISTER, spec.subject_kind)
        operation = f"{spec.audit_prefix.lower()}_unregister"

        with storage_guard(operation), transaction.atomic():
            subject = self._lock_subject(subject_id)

            registration = (
                self._active_for(subject.pk, principal.id).select_for_update().first()
            )
            if registration is None:
                raise NotFoundError(
                    f"No active registration for this {spec.label.lower()}",
                    {"subjectId": str(subject.pk)},
                )

            previous = self.registration_state(registration, subject)
            self._release(subject, operation)

            registration.status = CANCELLED
            registration.cancelled_at = timezone.now()
            registration.save(update_fields=["status", "cancelled_at", "updated_at"])
            subject.refresh_from_db(fields=[spec.occupancy_field])

            record(
                event_type=f"{spec.audit_prefix}_UNREGISTERED",
                actor_id=principal.id,
                entity_type=spec.registration_kind,
                entity_id=registration.pk,
                previous_state=previous,
                new_state=self.registration_state(registration, subject),
                context=context,
            )

        logger.info(
            "registration_cancelled",
            extra={
                "operation": operation,
                "entity_id": str(registration.pk),
                "subject_id": str(subject.pk),
                "occupancy": getattr(subject, spec.occupancy_field),
            },
        )
        return registration

    def update_status(self, registration_id, new_status, principal, notes=None, context=None):
        """
        Move a registration to another status (subject owner or ADMIN).

        Moving to CANCELLED releases the slot; other moves leave occupancy alone.

        Raises:
            NotFoundError: Registration does not exist
            PermissionDeniedError: Caller neither owns the subject nor is ADMIN
            InvalidStateError: Transition not allowed (CANCELLED is terminal)
            ValidationError: Unknown status
        """
        spec = self.spec
        operation = f"{spec.audit_prefix.lower()}_update_status"

        if new_status not in RegistrationStatus.values:
            raise ValidationError(
                f"Invalid registration status '{new_status}'",
                {"status": new_status, "allowed": list(RegistrationStatus.values)},
            )

        with storage_guard(operation), transaction.atomic():
            registrations = self._registrations()
            try:
                subject_id = registrations.values_list(
                    f"{spec.subject_field}_id", flat=True
                ).get(pk=registration_id)
            except spec.registration_model.DoesNotExist:
                raise NotFoundError(f"Registration {registration_id} does not exist")

            subject = self._lock_subject(subject_id)
            authorize(
                principal,
                Action.UPDATE_STATUS,
                spec.registration_kind,
                is_owner=self._is_owner(principal, subject),
            )
            registration = registrations.select_for_update().get(pk=registration_id)

            validate_transition(
                spec.transitions,
                spec.registration_kind,
                registration.status,
                new_status,
            )

            previous = self.registration_state(registration, subject)
            status_changed = registration.status != new_status

            if new_status == CANCELLED:
                self._release(subject, operation)
                registration.cancelled_at = timezone.now()

            registration.status = new_status
            if notes is not None:
                registration.notes = notes
            registration.save(
                update_fields=["status", "notes", "cancelled_at", "updated_at"]
            )
            subject.refresh_from_db(fields=[spec.occupancy_field])

            record(
                event_type=f"{spec.audit_prefix}_REGISTRATION_STATUS_UPDATED",
                actor_id=principal.id,
                entity_type=spec.registration_kind,
                entity_id=registration.pk,
                previous_state=previous,
                new_state=self.registration_state(registration, subject),
                context=context,
            )
            if status_changed:
                notify(
                    registration.user_id,
                    f"Your registration for {subject.title} is now {new_status}.",
                    (
                        NotificationType.REGISTRATION_CANCELLED
                        if new_status == CANCELLED
                        else NotificationType.REGISTRATION_STATUS_CHANGED
                    ),
                    subject.pk,
                )

        logger.info(
            "registration_status_updated",
            extra={
                "operation": operation,
                "entity_id": str(registration.pk),
                "from_status": previous["status"],
                "to_status": new_status,
            },
        )
        return registration

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def participants(self, subject_id, principal, include_cancelled=False):
        """Registrations for a subject, active ones unless include_cancelled."""
        spec = self.spec
        subject = self._get_subject(subject_id)
        authorize(
            principal,
            Action.LIST_PARTICIPANTS,
            spec.subject_kind,
            is_owner=self._is_owner(principal, subject),
        )
        queryset = self._registrations().filter(
            **{f"{spec.subject_field}_id": subject.pk}
        ).select_related("user")
        if not include_cancelled:
            queryset = queryset.exclude(status=CANCELLED)
        return queryset.order_by("registered_at")

    def registrations_for_user(self, principal, include_cancelled=False):
        authorize(principal, Action.READ, self.spec.subject_kind)
        queryset = self._registrations().filter(user_id=principal.id).select_related(
            self.spec.subject_field
        )
        if not include_cancelled:
            queryset = queryset.exclude(status=CANCELLED)
        return queryset.order_by("-registered_at")

    # ------------------------------------------------------------------
    # Maintenance
    # ------------------------------------------------------------------

    def release_all_for_user(self, user_id):
        """
        Cancel every active registration held by user_id and free the slots.

        Must run inside the caller's transaction (account deletion).
        Returns the number of registrations released.
        """
        spec = self.spec
        subject_ids = sorted(
            set(
                self._registrations()
                .filter(user_id=user_id)
                .exclude(status=CANCELLED)
                .values_list(f"{spec.subject_field}_id", flat=True)
            ),
            key=str,
        )
        for subject_id in subject_ids:
            subject = self._lock_subject(subject_id)
            self._release(subject, "release_all_for_user")

        now = timezone.now()
        self._registrations().filter(user_id=user_id).exclude(status=CANCELLED).update(
            status=CANCELLED, cancelled_at=now, updated_at=now
        )
        return len(subject_ids)

    def find_discrepancies(self):
        """
        Subjects whose stored occupancy disagrees with their active registrations.

        Returns:
            list[dict]: subjectId, occupancy, activeCount, capacity
        """
        spec = self.spec
        active = Count("registrations", filter=~Q(registrations__status=CANCELLED))
        rows = spec.subject_model.objects.annotate(active_count=active).order_by("pk")

        discrepancies = []
        for subject in rows:
            occupancy = getattr(subject, spec.occupancy_field)
            capacity = getattr(subject, spec.capacity_field)
            over_capacity = capacity is not None and subject.active_count > capacity
            if occupancy != subject.active_count or over_capacity:
                discrepancies.append(
                    {
                        "subjectId": str(subject.pk),
                        "occupancy": occupancy,
                        "activeCount": subject.active_count,
                        "capacity": capacity,
                        "overCapacity": over_capacity,
                    }
                )
        return discrepancies

    def repair(self, subject_id, context=None):
        """
        Reset occupancy to the active-registration count under the row lock.

        Returns:
            dict | None: Before/after counts, or None if nothing needed fixing

        Raises:
            IntegrityViolationError: Active registrations exceed capacity
        """
        spec = self.spec
        with storage_guard("reconcile_occupancy"), transaction.atomic():
            subject = self._lock_subject(subject_id)
            active_count = self._registrations().filter(
                **{f"{spec.subject_field}_id": subject.pk}
            ).exclude(status=CANCELLED).count()

            occupancy = getattr(subject, spec.occupancy_field)
            capacity = getattr(subject, spec.capacity_field)

            if capacity is not None and active_count > capacity:
                raise IntegrityViolationError(
                    f"{spec.label} has more active registrations than capacity",
                    {
                        "subjectId": str(subject.pk),
                        "activeCount": active_count,
                        "capacity": capacity,
                    },
                )
            if occupancy == active_count:
                return None

            previous = self.subject_state(subject)
            spec.subject_model.objects.filter(pk=subject.pk).update(
                **{spec.occupancy_field: active_count}
            )
            subject.refresh_from_db(fields=[spec.occupancy_field])

            record(
                event_type="OCCUPANCY_RECONCILED",
                actor_id=None,
                entity_type=spec.subject_kind,
                entity_id=subject.pk,
                previous_state=previous,
                new_state=self.subject_state(subject),
                context=context or AuditContext.system(),
            )

        logger.warning(
            "occupancy_reconciled",
            extra={
                "operation": "reconcile_occupancy",
                "entity_id": str(subject_id),
                "from_occupancy": occupancy,
                "to_occupancy": active_count,
            },
        )
        return {"subjectId": str(subject_id), "from": occupancy, "to": active_count}
