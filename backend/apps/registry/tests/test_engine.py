"""
Capacity-bounded registry, exercised through the event registry.

Covers admission up to capacity, duplicate registration, release floor,
status transitions with slot release, ownership checks, audit and logging.
"""

from datetime import datetime, timezone

from django.test import TestCase

from apps.audit.models import AuditLog
from apps.events.models import Event, EventRegistration, EventStatus
from apps.events.services import event_registry
from apps.notifications.models import Notification, NotificationType
from apps.registry.models import RegistrationStatus
from apps.users.models import User
from core.exceptions import (
    AlreadyRegisteredError,
    AuthenticationRequiredError,
    CapacityExceededError,
    IntegrityViolationError,
    InvalidStateError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from core.principal import Principal


def make_user(email, role="MEMBER"):
    user = User.objects.create_user(
        email=email, password="testpass123", full_name=email.split("@")[0], role=role
    )
    return user, Principal.from_user(user)


class RegistryTestCase(TestCase):
    def setUp(self):
        self.organizer, self.organizer_p = make_user("organizer@example.com")
        self.admin, self.admin_p = make_user("admin@example.com", role="ADMIN")
        self.alice, self.alice_p = make_user("alice@example.com")
        self.bob, self.bob_p = make_user("bob@example.com")
        self.carol, self.carol_p = make_user("carol@example.com")
        self.event = Event.objects.create(
            title="Food drive",
            event_date=datetime(2030, 3, 1, 9, tzinfo=timezone.utc),
            max_participants=2,
            created_by=self.organizer,
        )

    def occupancy(self):
        self.event.refresh_from_db()
        return self.event.current_participants


class AdmissionTests(RegistryTestCase):
    def test_register_takes_a_slot(self):
        registration = event_registry.register(self.event.id, self.alice_p, notes="vegan")
        self.assertEqual(registration.status, RegistrationStatus.REGISTERED)
        self.assertEqual(registration.notes, "vegan")
        self.assertEqual(self.occupancy(), 1)

    def test_capacity_is_a_hard_ceiling(self):
        event_registry.register(self.event.id, self.alice_p)
        event_registry.register(self.event.id, self.bob_p)

        with self.assertRaises(CapacityExceededError) as ctx:
            event_registry.register(self.event.id, self.carol_p)

        self.assertEqual(ctx.exception.details["capacity"], 2)
        self.assertEqual(self.occupancy(), 2)
        self.assertFalse(
            EventRegistration.objects.filter(event=self.event, user=self.carol).exists()
        )

    def test_unlimited_capacity(self):
        self.event.max_participants = None
        self.event.save()
        for principal in (self.alice_p, self.bob_p, self.carol_p):
            event_registry.register(self.event.id, principal)
        self.assertEqual(self.occupancy(), 3)

    def test_double_registration_rejected(self):
        event_registry.register(self.event.id, self.alice_p)
        with self.assertRaises(AlreadyRegisteredError) as ctx:
            event_registry.register(self.event.id, self.alice_p)
        self.assertEqual(ctx.exception.code, "ALREADY_REGISTERED")
        self.assertEqual(self.occupancy(), 1)

    def test_closed_event_rejects_registration(self):
        self.event.status = EventStatus.COMPLETED
        self.event.save()
        with self.assertRaises(InvalidStateError):
            event_registry.register(self.event.id, self.alice_p)
        self.assertEqual(self.occupancy(), 0)

    def test_ongoing_event_accepts_registration(self):
        self.event.status = EventStatus.ONGOING
        self.event.save()
        event_registry.register(self.event.id, self.alice_p)
        self.assertEqual(self.occupancy(), 1)

    def test_missing_event(self):
        import uuid

        with self.assertRaises(NotFoundError):
            event_registry.register(uuid.uuid4(), self.alice_p)

    def test_anonymous_cannot_register(self):
        with self.assertRaises(AuthenticationRequiredError):
            event_registry.register(self.event.id, Principal.anonymous())


class ReleaseTests(RegistryTestCase):
    def test_unregister_frees_the_slot(self):
        event_registry.register(self.event.id, self.alice_p)
        event_registry.register(self.event.id, self.bob_p)

        registration = event_registry.unregister(self.event.id, self.alice_p)

        self.assertEqual(registration.status, RegistrationStatus.CANCELLED)
        self.assertIsNotNone(registration.cancelled_at)
        self.assertEqual(self.occupancy(), 1)
        event_registry.register(self.event.id, self.carol_p)
        self.assertEqual(self.occupancy(), 2)

    def test_reregister_after_unregister_creates_new_row(self):
        event_registry.register(self.event.id, self.alice_p)
        event_registry.unregister(self.event.id, self.alice_p)
        event_registry.register(self.event.id, self.alice_p)

        rows = EventRegistration.objects.filter(event=self.event, user=self.alice)
        self.assertEqual(rows.count(), 2)
        self.assertEqual(rows.exclude(status=RegistrationStatus.CANCELLED).count(), 1)
        self.assertEqual(self.occupancy(), 1)

    def test_unregister_without_registration(self):
        with self.assertRaises(NotFoundError):
            event_registry.unregister(self.event.id, self.alice_p)

    def test_release_never_goes_below_zero(self):
        registration = event_registry.register(self.event.id, self.alice_p)
        Event.objects.filter(id=self.event.id).update(current_participants=0)

        with self.assertLogs("apps.registry.engine", level="ERROR") as logs:
            with self.assertRaises(IntegrityViolationError):
                event_registry.unregister(self.event.id, self.alice_p)

        self.assertIn("occupancy_underflow", logs.output[0])
        registration.refresh_from_db()
        self.assertEqual(registration.status, RegistrationStatus.REGISTERED)
        self.assertEqual(self.occupancy(), 0)


class StatusUpdateTests(RegistryTestCase):
    def setUp(self):
        super().setUp()
        self.registration = event_registry.register(self.event.id, self.alice_p)

    def test_owner_confirms(self):
        updated = event_registry.update_status(
            self.registration.id, "CONFIRMED", self.organizer_p, notes="see you"
        )
        self.assertEqual(updated.status, RegistrationStatus.CONFIRMED)
        self.assertEqual(updated.notes, "see you")
        self.assertEqual(self.occupancy(), 1)

    def test_waitlisted_still_holds_a_slot(self):
        event_registry.update_status(self.registration.id, "WAITLISTED", self.admin_p)
        self.assertEqual(self.occupancy(), 1)

    def test_cancel_releases_slot_and_is_terminal(self):
        event_registry.update_status(self.registration.id, "CANCELLED", self.admin_p)
        self.assertEqual(self.occupancy(), 0)

        with self.assertRaises(InvalidStateError):
            event_registry.update_status(
                self.registration.id, "REGISTERED", self.admin_p
            )
        self.assertEqual(self.occupancy(), 0)

    def test_disallowed_transition(self):
        event_registry.update_status(self.registration.id, "CONFIRMED", self.admin_p)
        with self.assertRaises(InvalidStateError):
            event_registry.update_status(
                self.registration.id, "WAITLISTED", self.admin_p
            )

    def test_non_owner_member_forbidden(self):
        with self.assertRaises(PermissionDeniedError):
            event_registry.update_status(
                self.registration.id, "CONFIRMED", self.bob_p
            )
        self.registration.refresh_from_db()
        self.assertEqual(self.registration.status, RegistrationStatus.REGISTERED)

    def test_registrant_cannot_confirm_self(self):
        with self.assertRaises(PermissionDeniedError):
            event_registry.update_status(
                self.registration.id, "CONFIRMED", self.alice_p
            )

    def test_unknown_status(self):
        with self.assertRaises(ValidationError):
            event_registry.update_status(self.registration.id, "PAID", self.admin_p)

    def test_missing_registration(self):
        import uuid

        with self.assertRaises(NotFoundError):
            event_registry.update_status(uuid.uuid4(), "CONFIRMED", self.admin_p)


class ParticipantListTests(RegistryTestCase):
    def setUp(self):
        super().setUp()
        event_registry.register(self.event.id, self.alice_p)
        event_registry.register(self.event.id, self.bob_p)
        event_registry.unregister(self.event.id, self.bob_p)

    def test_active_only_by_default(self):
        rows = event_registry.participants(self.event.id, self.carol_p)
        self.assertEqual([r.user_id for r in rows], [self.alice.id])

    def test_include_cancelled(self):
        rows = event_registry.participants(
            self.event.id, self.carol_p, include_cancelled=True
        )
        self.assertEqual(rows.count(), 2)

    def test_registrations_for_user(self):
        self.assertEqual(event_registry.registrations_for_user(self.bob_p).count(), 0)
        self.assertEqual(
            event_registry.registrations_for_user(
                self.bob_p, include_cancelled=True
            ).count(),
            1,
        )


class SideEffectTests(RegistryTestCase):
    def test_register_audits_once_and_notifies(self):
        with self.captureOnCommitCallbacks(execute=True):
            registration = event_registry.register(self.event.id, self.alice_p)

        entry = AuditLog.objects.get()
        self.assertEqual(entry.event_type, "EVENT_REGISTERED")
        self.assertEqual(entry.entity_type, "EventRegistration")
        self.assertEqual(entry.entity_id, str(registration.id))
        self.assertEqual(entry.actor_id, self.alice.id)
        self.assertEqual(entry.new_state["occupancy"], 1)

        notification = Notification.objects.get(user=self.alice)
        self.assertEqual(notification.type, NotificationType.REGISTRATION_CONFIRMED)
        self.assertEqual(notification.related_entity_id, str(self.event.id))

    def test_rejected_registration_leaves_no_trace(self):
        event_registry.register(self.event.id, self.bob_p)
        event_registry.register(self.event.id, self.carol_p)
        with self.captureOnCommitCallbacks(execute=True):
            with self.assertRaises(CapacityExceededError):
                event_registry.register(self.event.id, self.alice_p)
        self.assertEqual(AuditLog.objects.count(), 0)
        self.assertFalse(Notification.objects.filter(user=self.alice).exists())

    def test_status_change_notifies_registrant(self):
        registration = event_registry.register(self.event.id, self.alice_p)
        with self.captureOnCommitCallbacks(execute=True):
            event_registry.update_status(registration.id, "CONFIRMED", self.admin_p)

        entry = AuditLog.objects.get(event_type="EVENT_REGISTRATION_STATUS_UPDATED")
        self.assertEqual(entry.previous_state["status"], "REGISTERED")
        self.assertEqual(entry.new_state["status"], "CONFIRMED")
        self.assertTrue(
            Notification.objects.filter(
                user=self.alice,
                type=NotificationType.REGISTRATION_STATUS_CHANGED,
            ).exists()
        )

    def test_register_emits_structured_log(self):
        with self.assertLogs("apps.registry.engine", level="INFO") as logs:
            registration = event_registry.register(self.event.id, self.alice_p)

        record = next(r for r in logs.records if r.getMessage() == "registration_created")
        self.assertEqual(record.operation, "event_register")
        self.assertEqual(record.entity_id, str(registration.id))
        self.assertEqual(record.occupancy, 1)


class ReconciliationTests(RegistryTestCase):
    def test_find_and_repair_drift(self):
        event_registry.register(self.event.id, self.alice_p)
        Event.objects.filter(id=self.event.id).update(current_participants=2)

        drift = event_registry.find_discrepancies()
        self.assertEqual(len(drift), 1)
        self.assertEqual(drift[0]["activeCount"], 1)

        with self.captureOnCommitCallbacks(execute=True):
            result = event_registry.repair(self.event.id)

        self.assertEqual(result, {"subjectId": str(self.event.id), "from": 2, "to": 1})
        self.assertEqual(self.occupancy(), 1)
        entry = AuditLog.objects.get(event_type="OCCUPANCY_RECONCILED")
        self.assertIsNone(entry.actor_id)
        self.assertEqual(event_registry.find_discrepancies(), [])

    def test_repair_noop_when_consistent(self):
        event_registry.register(self.event.id, self.alice_p)
        self.assertIsNone(event_registry.repair(self.event.id))
