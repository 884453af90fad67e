"""
Authorization matrix.

One declarative table decides whether a caller with a given role may perform
an action on an entity kind, given whether they own the entity. Services call
authorize() before every mutating or access-sensitive read.

Policy per (entity kind, action):
    PUBLIC  - anyone, including anonymous callers
    MEMBER  - any authenticated member
    OWNER   - the member who owns the entity
    ADMIN   - administrators only

Administrators are allowed everything. Pairs missing from the table are denied.
"""

from core.exceptions import AuthenticationRequiredError, PermissionDeniedError
from core.principal import ROLE_ADMIN, ROLE_ANONYMOUS, ROLE_MEMBER

ALLOW = "ALLOW"
DENY = "DENY"

PUBLIC = "PUBLIC"
MEMBER = "MEMBER"
OWNER = "OWNER"
ADMIN = "ADMIN"


class EntityKind:
    EVENT = "Event"
    EVENT_REGISTRATION = "EventRegistration"
    VOLUNTEER_OPPORTUNITY = "VolunteerOpportunity"
    VOLUNTEER_REGISTRATION = "VolunteerRegistration"
    DISCUSSION = "Discussion"
    DISCUSSION_REPLY = "DiscussionReply"
    DOCUMENT = "Document"
    USER = "User"
    AUDIT_LOG = "AuditLog"
    NOTIFICATION = "Notification"
    DASHBOARD = "Dashboard"


class Action:
    CREATE = "create"
    READ = "read"
    LIST = "list"
    UPDATE = "update"
    DELETE = "delete"
    REGISTER = "register"
    UNREGISTER = "unregister"
    LIST_PARTICIPANTS = "list_participants"
    UPDATE_STATUS = "update_status"
    UPDATE_ROLE = "update_role"


MATRIX = {
    EntityKind.EVENT: {
        Action.CREATE: MEMBER,
        Action.READ: MEMBER,
        Action.UPDATE: ADMIN,
        Action.DELETE: ADMIN,
        Action.REGISTER: MEMBER,
        Action.UNREGISTER: MEMBER,
        Action.LIST_PARTICIPANTS: MEMBER,
    },
    EntityKind.EVENT_REGISTRATION: {
        Action.UPDATE_STATUS: OWNER,
    },
    EntityKind.VOLUNTEER_OPPORTUNITY: {
        Action.CREATE: MEMBER,
        Action.READ: MEMBER,
        Action.UPDATE: ADMIN,
        Action.DELETE: ADMIN,
        Action.REGISTER: MEMBER,
        Action.UNREGISTER: MEMBER,
        Action.LIST_PARTICIPANTS: OWNER,
    },
    EntityKind.VOLUNTEER_REGISTRATION: {
        Action.UPDATE_STATUS: OWNER,
    },
    EntityKind.DISCUSSION: {
        Action.CREATE: MEMBER,
        Action.READ: MEMBER,
        Action.UPDATE: OWNER,
        Action.DELETE: OWNER,
    },
    EntityKind.DISCUSSION_REPLY: {
        Action.CREATE: MEMBER,
        Action.READ: MEMBER,
        Action.UPDATE: OWNER,
        Action.DELETE: OWNER,
    },
    EntityKind.DOCUMENT: {
        Action.READ: PUBLIC,
        Action.CREATE: MEMBER,
        Action.UPDATE: OWNER,
        Action.DELETE: OWNER,
    },
    EntityKind.NOTIFICATION: {
        Action.READ: MEMBER,
    },
    EntityKind.USER: {
        Action.READ: ADMIN,
        Action.LIST: ADMIN,
        Action.UPDATE_ROLE: ADMIN,
        Action.DELETE: ADMIN,
    },
    EntityKind.AUDIT_LOG: {
        Action.READ: ADMIN,
    },
    EntityKind.DASHBOARD: {
        Action.READ: ADMIN,
    },
}


def policy_for(action, entity_kind):
    """Return the policy for (action, entity_kind), or None if unlisted."""
    return MATRIX.get(entity_kind, {}).get(action)


def decide(action, entity_kind, caller_role, is_owner=False):
    """
    Pure decision function.

    Args:
        action: Action name (see Action)
        entity_kind: Entity kind (see EntityKind)
        caller_role: ADMIN, MEMBER or ANONYMOUS
        is_owner: Whether the caller created/owns the entity

    Returns:
        str: ALLOW or DENY
    """
    policy = policy_for(action, entity_kind)
    if policy is None:
        return DENY

    if caller_role == ROLE_ADMIN:
        return ALLOW

    if policy == PUBLIC:
        return ALLOW

    if caller_role != ROLE_MEMBER:
        return DENY

    if policy == MEMBER:
        return ALLOW
    if policy == OWNER and is_owner:
        return ALLOW

    return DENY


def authorize(principal, action, entity_kind, is_owner=False):
    """
    Raise unless the principal may perform the action.

    Raises:
        AuthenticationRequiredError: Anonymous caller on a non-public action
        PermissionDeniedError: Identified caller lacks role/ownership
    """
    if decide(action, entity_kind, principal.role, is_owner) == ALLOW:
        return

    if principal.role == ROLE_ANONYMOUS:
        raise AuthenticationRequiredError()

    raise PermissionDeniedError(
        f"You do not have permission to {action.replace('_', ' ')} this "
        f"{entity_kind}",
        {"action": action, "entityType": entity_kind},
    )


# Document access-level lattice: PUBLIC < MEMBER < COMMITTEE < ADMIN
LEVEL_PUBLIC = "PUBLIC"
LEVEL_MEMBER = "MEMBER"
LEVEL_COMMITTEE = "COMMITTEE"
LEVEL_ADMIN = "ADMIN"

ACCESS_LEVELS = [LEVEL_PUBLIC, LEVEL_MEMBER, LEVEL_COMMITTEE, LEVEL_ADMIN]

ROLE_ACCESSIBLE_LEVELS = {
    ROLE_ADMIN: ACCESS_LEVELS,
    ROLE_MEMBER: [LEVEL_PUBLIC, LEVEL_MEMBER],
    ROLE_ANONYMOUS: [LEVEL_PUBLIC],
}


def accessible_levels(role):
    """Levels a role may read. Unknown roles get PUBLIC only."""
    return list(ROLE_ACCESSIBLE_LEVELS.get(role, [LEVEL_PUBLIC]))


def can_read_level(role, level):
    return level in accessible_levels(role)
