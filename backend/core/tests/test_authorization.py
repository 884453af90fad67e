"""
Authorization matrix: pure decision table and the raising wrapper.
"""

from django.test import SimpleTestCase

from core.authorization import (
    ALLOW,
    DENY,
    MATRIX,
    Action,
    EntityKind,
    accessible_levels,
    authorize,
    can_read_level,
    decide,
)
from core.exceptions import AuthenticationRequiredError, PermissionDeniedError
from core.principal import ROLE_ADMIN, ROLE_ANONYMOUS, ROLE_MEMBER, Principal


class DecideTests(SimpleTestCase):
    def test_admin_allowed_on_every_listed_pair(self):
        for entity_kind, actions in MATRIX.items():
            for action in actions:
                with self.subTest(entity=entity_kind, action=action):
                    self.assertEqual(
                        decide(action, entity_kind, ROLE_ADMIN), ALLOW
                    )

    def test_unlisted_pair_denied_even_for_admin(self):
        self.assertEqual(
            decide(Action.REGISTER, EntityKind.DOCUMENT, ROLE_ADMIN), DENY
        )
        self.assertEqual(decide("unknown", EntityKind.EVENT, ROLE_ADMIN), DENY)

    def test_member_policies(self):
        self.assertEqual(decide(Action.CREATE, EntityKind.EVENT, ROLE_MEMBER), ALLOW)
        self.assertEqual(
            decide(Action.REGISTER, EntityKind.EVENT, ROLE_MEMBER), ALLOW
        )
        self.assertEqual(decide(Action.UPDATE, EntityKind.EVENT, ROLE_MEMBER), DENY)
        self.assertEqual(decide(Action.DELETE, EntityKind.EVENT, ROLE_MEMBER), DENY)

    def test_owner_policy_requires_ownership(self):
        self.assertEqual(
            decide(Action.UPDATE, EntityKind.DISCUSSION, ROLE_MEMBER, is_owner=False),
            DENY,
        )
        self.assertEqual(
            decide(Action.UPDATE, EntityKind.DISCUSSION, ROLE_MEMBER, is_owner=True),
            ALLOW,
        )
        self.assertEqual(
            decide(
                Action.LIST_PARTICIPANTS,
                EntityKind.VOLUNTEER_OPPORTUNITY,
                ROLE_MEMBER,
                is_owner=True,
            ),
            ALLOW,
        )

    def test_anonymous_only_gets_public(self):
        self.assertEqual(
            decide(Action.READ, EntityKind.DOCUMENT, ROLE_ANONYMOUS), ALLOW
        )
        self.assertEqual(decide(Action.READ, EntityKind.EVENT, ROLE_ANONYMOUS), DENY)
        self.assertEqual(
            decide(Action.UPDATE, EntityKind.DISCUSSION, ROLE_ANONYMOUS, is_owner=True),
            DENY,
        )

    def test_admin_only_kinds(self):
        for kind, action in (
            (EntityKind.AUDIT_LOG, Action.READ),
            (EntityKind.USER, Action.UPDATE_ROLE),
            (EntityKind.DASHBOARD, Action.READ),
        ):
            with self.subTest(kind=kind):
                self.assertEqual(decide(action, kind, ROLE_MEMBER, is_owner=True), DENY)


class AuthorizeTests(SimpleTestCase):
    def setUp(self):
        self.member = Principal(id="m-1", role=ROLE_MEMBER)

    def test_anonymous_raises_authentication_required(self):
        with self.assertRaises(AuthenticationRequiredError):
            authorize(Principal.anonymous(), Action.READ, EntityKind.EVENT)

    def test_member_denied_raises_forbidden_with_details(self):
        with self.assertRaises(PermissionDeniedError) as ctx:
            authorize(self.member, Action.DELETE, EntityKind.EVENT)
        self.assertEqual(ctx.exception.code, "FORBIDDEN")
        self.assertEqual(ctx.exception.details["entityType"], EntityKind.EVENT)

    def test_allowed_returns_none(self):
        self.assertIsNone(authorize(self.member, Action.READ, EntityKind.EVENT))


class AccessLevelTests(SimpleTestCase):
    def test_levels_per_role(self):
        self.assertEqual(accessible_levels(ROLE_ANONYMOUS), ["PUBLIC"])
        self.assertEqual(accessible_levels(ROLE_MEMBER), ["PUBLIC", "MEMBER"])
        self.assertEqual(
            accessible_levels(ROLE_ADMIN), ["PUBLIC", "MEMBER", "COMMITTEE", "ADMIN"]
        )

    def test_unknown_role_gets_public(self):
        self.assertEqual(accessible_levels("GUEST"), ["PUBLIC"])

    def test_member_cannot_read_committee(self):
        self.assertFalse(can_read_level(ROLE_MEMBER, "COMMITTEE"))
        self.assertTrue(can_read_level(ROLE_ADMIN, "COMMITTEE"))

    def test_returned_list_is_a_copy(self):
        levels = accessible_levels(ROLE_MEMBER)
        levels.append("ADMIN")
        self.assertEqual(accessible_levels(ROLE_MEMBER), ["PUBLIC", "MEMBER"])
