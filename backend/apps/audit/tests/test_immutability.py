import uuid

from django.test import TestCase

from apps.audit.models import AuditLog
from apps.users.models import User


class AuditLogImmutabilityTests(TestCase):
    def setUp(self):
        self.user = User.objects.create_user(
            email="audit-test@example.com",
            password="password123",
            full_name="Audit Test",
        )

        self.log = AuditLog.objects.create(
            event_type="TEST_EVENT",
            actor=self.user,
            entity_type="Event",
            entity_id=str(uuid.uuid4()),
            request_id="test-request-id",
        )

    def test_bulk_update_is_blocked(self):
        with self.assertRaises(ValueError):
            AuditLog.objects.filter(pk=self.log.pk).update(event_type="MODIFIED")

    def test_bulk_delete_is_blocked(self):
        with self.assertRaises(ValueError):
            AuditLog.objects.filter(pk=self.log.pk).delete()

    def test_instance_resave_is_blocked(self):
        self.log.event_type = "MODIFIED"
        with self.assertRaises(ValueError):
            self.log.save()
        self.log.refresh_from_db()
        self.assertEqual(self.log.event_type, "TEST_EVENT")

    def test_instance_delete_is_blocked(self):
        with self.assertRaises(ValueError):
            self.log.delete()
        self.assertTrue(AuditLog.objects.filter(pk=self.log.pk).exists())

    def test_deleting_actor_keeps_entry(self):
        self.user.delete()
        self.log.refresh_from_db()
        self.assertIsNone(self.log.actor_id)
        self.assertEqual(self.log.event_type, "TEST_EVENT")
