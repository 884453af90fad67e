"""
Discussion board: authorship, moderation, locking, reply counters.
"""

import uuid

from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from apps.audit.models import AuditLog
from apps.discussions.models import Discussion, DiscussionReply
from apps.users.models import User


def _user(email, role="MEMBER"):
    return User.objects.create_user(
        email=email, password="testpass123", full_name=email.split("@")[0], role=role
    )


class DiscussionViewTests(APITestCase):
    def setUp(self):
        self.admin = _user("admin@example.com", role="ADMIN")
        self.author = _user("author@example.com")
        self.reader = _user("reader@example.com")
        self.client.force_authenticate(self.author)
        response = self.client.post(
            reverse("discussions:list-or-create"),
            {"title": "Parking on Elm St", "content": "Thoughts?", "category": "Streets"},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.json())
        self.discussion = response.json()["data"]
        self.detail_url = reverse(
            "discussions:discussion-detail", args=[self.discussion["id"]]
        )
        self.replies_url = reverse("discussions:replies", args=[self.discussion["id"]])

    def _reply(self, content="Agreed", **extra):
        return self.client.post(
            self.replies_url, {"content": content, **extra}, format="json"
        )

    def test_member_cannot_pin_on_create(self):
        response = self.client.post(
            reverse("discussions:list-or-create"),
            {"title": "Look at me", "content": "Pinned!", "isPinned": True},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_get_counts_views(self):
        self.client.get(self.detail_url)
        response = self.client.get(self.detail_url)
        self.assertEqual(response.json()["data"]["viewCount"], 2)

    def test_list_pinned_first(self):
        self.client.force_authenticate(self.admin)
        response = self.client.post(
            reverse("discussions:list-or-create"),
            {"title": "Rules", "content": "Be kind", "isPinned": True},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        listing = self.client.get(reverse("discussions:list-or-create")).json()
        self.assertEqual(listing["results"][0]["title"], "Rules")

        filtered = self.client.get(
            reverse("discussions:list-or-create"), {"category": "streets"}
        ).json()
        self.assertEqual(filtered["count"], 1)

    def test_author_edits_other_member_cannot(self):
        response = self.client.patch(self.detail_url, {"title": "Parking (updated)"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_200_OK)

        self.client.force_authenticate(self.reader)
        response = self.client.patch(self.detail_url, {"title": "Hijacked"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        response = self.client.delete(self.detail_url)
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_author_cannot_lock_admin_can(self):
        response = self.client.patch(self.detail_url, {"isLocked": True}, format="json")
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

        self.client.force_authenticate(self.admin)
        response = self.client.patch(self.detail_url, {"isLocked": True}, format="json")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.json()["data"]["isLocked"])

    def test_locked_discussion_rejects_replies(self):
        Discussion.objects.filter(id=self.discussion["id"]).update(is_locked=True)
        self.client.force_authenticate(self.reader)
        response = self._reply()
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.json()["error"]["code"], "INVALID_STATE")
        self.assertEqual(DiscussionReply.objects.count(), 0)

    def test_reply_counter_tracks_replies(self):
        self.client.force_authenticate(self.reader)
        first = self._reply().json()["data"]
        nested = self._reply("Me too", parentReplyId=first["id"]).json()["data"]
        self.assertEqual(nested["parentReplyId"], first["id"])

        discussion = Discussion.objects.get(id=self.discussion["id"])
        self.assertEqual(discussion.reply_count, 2)

        response = self.client.delete(reverse("discussions:reply-detail", args=[first["id"]]))
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        discussion.refresh_from_db()
        self.assertEqual(discussion.reply_count, 1)

        listing = self.client.get(self.replies_url).json()
        self.assertEqual(listing["count"], 1)
        self.assertIsNone(listing["results"][0]["parentReplyId"])

    def test_parent_reply_from_other_discussion(self):
        other = Discussion.objects.create(title="Other", content="x", created_by=self.author)
        foreign = DiscussionReply.objects.create(
            discussion=other, content="elsewhere", created_by=self.author
        )
        response = self._reply(parentReplyId=str(foreign.id))
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_reply_owner_rules(self):
        self.client.force_authenticate(self.reader)
        reply = self._reply().json()["data"]
        url = reverse("discussions:reply-detail", args=[reply["id"]])

        self.client.force_authenticate(self.author)
        response = self.client.put(url, {"content": "edited by someone else"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

        self.client.force_authenticate(self.reader)
        response = self.client.put(url, {"content": "edited"}, format="json")
        self.assertEqual(response.json()["data"]["content"], "edited")

        self.client.force_authenticate(self.admin)
        self.assertEqual(self.client.delete(url).status_code, status.HTTP_204_NO_CONTENT)

    def test_reply_count_underflow_detected(self):
        self.client.force_authenticate(self.reader)
        reply = self._reply().json()["data"]
        Discussion.objects.filter(id=self.discussion["id"]).update(reply_count=0)

        with self.assertLogs("apps.discussions.services", level="ERROR"):
            response = self.client.delete(
                reverse("discussions:reply-detail", args=[reply["id"]])
            )
        self.assertEqual(response.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.assertEqual(response.json()["error"]["code"], "INTEGRITY_VIOLATION")
        self.assertTrue(DiscussionReply.objects.filter(id=reply["id"]).exists())

    def test_delete_discussion_audited(self):
        with self.captureOnCommitCallbacks(execute=True):
            response = self.client.delete(self.detail_url)
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertTrue(
            AuditLog.objects.filter(
                event_type="DISCUSSION_DELETED", entity_id=self.discussion["id"]
            ).exists()
        )

    def test_missing_discussion(self):
        response = self.client.get(
            reverse("discussions:discussion-detail", args=[uuid.uuid4()])
        )
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
