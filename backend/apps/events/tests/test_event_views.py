"""
API coverage for /api/v1/events: CRUD, registration, participants, statuses.
"""

from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from apps.audit.models import AuditLog
from apps.events.models import Event
from apps.users.models import User


def _user(email, role="MEMBER"):
    return User.objects.create_user(
        email=email, password="testpass123", full_name=email.split("@")[0], role=role
    )


class EventTestBase(APITestCase):
    def setUp(self):
        self.admin = _user("admin@example.com", role="ADMIN")
        self.member = _user("member@example.com")
        self.other = _user("other@example.com")
        self.client.force_authenticate(self.member)

    def create_event(self, **overrides):
        payload = {
            "title": "Community picnic",
            "eventDate": "2030-07-04T12:00:00Z",
            "location": "Riverside park",
            "maxParticipants": 2,
        }
        payload.update(overrides)
        response = self.client.post(
            reverse("events:list-or-create-events"), payload, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.json())
        return response.json()["data"]


class EventCrudTests(EventTestBase):
    def test_member_creates_event(self):
        with self.captureOnCommitCallbacks(execute=True):
            data = self.create_event()
        self.assertEqual(data["status"], "UPCOMING")
        self.assertEqual(data["currentParticipants"], 0)
        self.assertEqual(data["createdBy"], str(self.member.id))
        self.assertTrue(
            AuditLog.objects.filter(
                event_type="EVENT_CREATED", entity_id=data["id"]
            ).exists()
        )

    def test_create_validation(self):
        url = reverse("events:list-or-create-events")
        response = self.client.post(url, {"title": "No date"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.json()["error"]["code"], "VALIDATION_ERROR")

    def test_capacity_must_be_positive(self):
        url = reverse("events:list-or-create-events")
        response = self.client.post(
            url,
            {"title": "Zero", "eventDate": "2030-01-01T00:00:00Z", "maxParticipants": 0},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_end_before_start_rejected(self):
        url = reverse("events:list-or-create-events")
        response = self.client.post(
            url,
            {
                "title": "Backwards",
                "eventDate": "2030-01-02T00:00:00Z",
                "endDate": "2030-01-01T00:00:00Z",
            },
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_list_and_filter(self):
        self.create_event(title="Garden day", location="North plot")
        self.create_event(title="Chess night", location="Library")
        url = reverse("events:list-or-create-events")

        response = self.client.get(url)
        self.assertEqual(response.json()["count"], 2)

        response = self.client.get(url, {"title": "garden"})
        self.assertEqual(response.json()["count"], 1)
        self.assertEqual(response.json()["results"][0]["title"], "Garden day")

        response = self.client.get(url, {"status": "BOGUS"})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_member_cannot_update_even_own_event(self):
        event = self.create_event()
        url = reverse("events:event-detail", args=[event["id"]])
        response = self.client.patch(url, {"title": "Renamed"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_admin_updates_and_deletes(self):
        event = self.create_event()
        url = reverse("events:event-detail", args=[event["id"]])
        self.client.force_authenticate(self.admin)

        response = self.client.patch(url, {"maxParticipants": 5}, format="json")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.json()["data"]["maxParticipants"], 5)

        response = self.client.delete(url)
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(Event.objects.filter(id=event["id"]).exists())

    def test_capacity_cannot_drop_below_occupancy(self):
        event = self.create_event()
        self.client.post(reverse("events:register", args=[event["id"]]), {}, format="json")
        self.client.force_authenticate(self.other)
        self.client.post(reverse("events:register", args=[event["id"]]), {}, format="json")

        self.client.force_authenticate(self.admin)
        response = self.client.patch(
            reverse("events:event-detail", args=[event["id"]]),
            {"maxParticipants": 1},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_missing_event_404(self):
        import uuid

        response = self.client.get(reverse("events:event-detail", args=[uuid.uuid4()]))
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.json()["error"]["code"], "NOT_FOUND")

    def test_anonymous_unauthorized(self):
        self.client.force_authenticate(None)
        response = self.client.get(reverse("events:list-or-create-events"))
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)


class EventRegistrationViewTests(EventTestBase):
    def setUp(self):
        super().setUp()
        self.client.force_authenticate(self.admin)
        self.event = self.create_event(maxParticipants=1)
        self.client.force_authenticate(self.member)

    def test_register_and_conflicts(self):
        url = reverse("events:register", args=[self.event["id"]])

        response = self.client.post(url, {"notes": "bringing salad"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.json()["data"]["status"], "REGISTERED")

        response = self.client.post(url, {}, format="json")
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.json()["error"]["code"], "ALREADY_REGISTERED")

        self.client.force_authenticate(self.other)
        response = self.client.post(url, {}, format="json")
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.json()["error"]["code"], "CAPACITY_EXCEEDED")

    def test_unregister(self):
        self.client.post(reverse("events:register", args=[self.event["id"]]), {}, format="json")
        response = self.client.delete(
            reverse("events:unregister", args=[self.event["id"]])
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.json()["data"]["status"], "CANCELLED")

        detail = self.client.get(reverse("events:event-detail", args=[self.event["id"]]))
        self.assertEqual(detail.json()["data"]["currentParticipants"], 0)

    def test_unregister_without_registration_404(self):
        response = self.client.post(
            reverse("events:unregister", args=[self.event["id"]])
        )
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_participants_and_my_registrations(self):
        self.client.post(reverse("events:register", args=[self.event["id"]]), {}, format="json")

        response = self.client.get(reverse("events:participants", args=[self.event["id"]]))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.json()["count"], 1)
        self.assertEqual(response.json()["results"][0]["userId"], str(self.member.id))

        response = self.client.get(reverse("events:my-registrations"))
        self.assertEqual(response.json()["count"], 1)
        self.assertEqual(response.json()["results"][0]["eventTitle"], "Community picnic")

    def test_status_update_by_admin_and_not_by_registrant(self):
        response = self.client.post(
            reverse("events:register", args=[self.event["id"]]), {}, format="json"
        )
        registration_id = response.json()["data"]["id"]
        url = reverse("events:registration-status", args=[registration_id])

        response = self.client.put(url, {"status": "CONFIRMED"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

        self.client.force_authenticate(self.admin)
        response = self.client.put(url, {"status": "CONFIRMED"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.json()["data"]["status"], "CONFIRMED")

        response = self.client.put(url, {"status": "WAITLISTED"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.json()["error"]["code"], "INVALID_STATE")

    def test_invalid_status_value(self):
        response = self.client.post(
            reverse("events:register", args=[self.event["id"]]), {}, format="json"
        )
        self.client.force_authenticate(self.admin)
        response = self.client.put(
            reverse("events:registration-status", args=[response.json()["data"]["id"]]),
            {"status": "PAID"},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
