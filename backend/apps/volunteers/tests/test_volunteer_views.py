"""
API coverage for /api/v1/volunteers: opportunities and volunteer sign-ups.
"""

import uuid

from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from apps.users.models import User
from apps.volunteers.models import VolunteerOpportunity


def _user(email, role="MEMBER"):
    return User.objects.create_user(
        email=email, password="testpass123", full_name=email.split("@")[0], role=role
    )


class VolunteerViewTests(APITestCase):
    def setUp(self):
        self.admin = _user("admin@example.com", role="ADMIN")
        self.coordinator = _user("coordinator@example.com")
        self.volunteer = _user("volunteer@example.com")
        self.bystander = _user("bystander@example.com")

        self.client.force_authenticate(self.coordinator)
        response = self.client.post(
            reverse("volunteers:list-or-create"),
            {
                "title": "Soup kitchen shift",
                "requirements": "Food handler card",
                "dateTime": "2030-11-20T17:00:00Z",
                "durationHours": 3,
                "maxVolunteers": 1,
            },
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.json())
        self.opportunity = response.json()["data"]
        self.client.force_authenticate(self.volunteer)

    def _register(self):
        return self.client.post(
            reverse("volunteers:register", args=[self.opportunity["id"]]),
            {"notes": "evenings only"},
            format="json",
        )

    def test_created_active_with_zero_volunteers(self):
        self.assertEqual(self.opportunity["status"], "ACTIVE")
        self.assertEqual(self.opportunity["currentVolunteers"], 0)
        self.assertEqual(self.opportunity["durationHours"], 3)

    def test_signup_and_capacity(self):
        response = self._register()
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.json()["data"]["opportunityTitle"], "Soup kitchen shift")

        self.client.force_authenticate(self.bystander)
        response = self._register()
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.json()["error"]["code"], "CAPACITY_EXCEEDED")

    def test_inactive_opportunity_rejects_signup(self):
        VolunteerOpportunity.objects.filter(id=self.opportunity["id"]).update(
            status="FILLED"
        )
        response = self._register()
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.json()["error"]["code"], "INVALID_STATE")

    def test_unregister_releases_slot(self):
        self._register()
        response = self.client.post(
            reverse("volunteers:unregister", args=[self.opportunity["id"]])
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)

        self.client.force_authenticate(self.bystander)
        self.assertEqual(self._register().status_code, status.HTTP_201_CREATED)

    def test_registrations_visible_to_creator_only(self):
        self._register()
        url = reverse("volunteers:opportunity-registrations", args=[self.opportunity["id"]])

        self.client.force_authenticate(self.bystander)
        self.assertEqual(self.client.get(url).status_code, status.HTTP_403_FORBIDDEN)

        self.client.force_authenticate(self.coordinator)
        response = self.client.get(url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.json()["count"], 1)

        self.client.force_authenticate(self.admin)
        self.assertEqual(self.client.get(url).status_code, status.HTTP_200_OK)

    def test_creator_moves_registration_status(self):
        registration_id = self._register().json()["data"]["id"]
        url = reverse("volunteers:registration-status", args=[registration_id])

        self.client.force_authenticate(self.coordinator)
        response = self.client.patch(url, {"status": "CONFIRMED"}, format="json")
        self.assertEqual(response.json()["data"]["status"], "CONFIRMED")

        response = self.client.patch(url, {"status": "REGISTERED"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_200_OK)

        response = self.client.patch(url, {"status": "CANCELLED"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        detail = self.client.get(
            reverse("volunteers:opportunity-detail", args=[self.opportunity["id"]])
        )
        self.assertEqual(detail.json()["data"]["currentVolunteers"], 0)

        response = self.client.patch(url, {"status": "CONFIRMED"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)

    def test_my_registrations(self):
        self._register()
        response = self.client.get(reverse("volunteers:my-registrations"))
        self.assertEqual(response.json()["count"], 1)

    def test_only_admin_edits_opportunity(self):
        url = reverse("volunteers:opportunity-detail", args=[self.opportunity["id"]])

        self.client.force_authenticate(self.coordinator)
        response = self.client.patch(url, {"maxVolunteers": 4}, format="json")
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

        self.client.force_authenticate(self.admin)
        response = self.client.patch(url, {"maxVolunteers": 4}, format="json")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.json()["data"]["maxVolunteers"], 4)

        response = self.client.delete(url)
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)

    def test_list_filters(self):
        url = reverse("volunteers:list-or-create")
        self.assertEqual(self.client.get(url, {"title": "soup"}).json()["count"], 1)
        self.assertEqual(self.client.get(url, {"status": "FILLED"}).json()["count"], 0)
        self.assertEqual(
            self.client.get(url, {"status": "nope"}).status_code,
            status.HTTP_400_BAD_REQUEST,
        )

    def test_missing_opportunity(self):
        response = self.client.get(
            reverse("volunteers:opportunity-detail", args=[uuid.uuid4()])
        )
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
