"""
Principal - who is calling, for the duration of one request.

Built from the User row the authentication layer loaded for this request.
Never cached across requests: a role change takes effect on the next request.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

ROLE_ADMIN = "ADMIN"
ROLE_MEMBER = "MEMBER"
ROLE_ANONYMOUS = "ANONYMOUS"


@dataclass(frozen=True)
class Principal:
    id: Optional[Any]
    role: str
    email: str = ""
    display_name: str = ""

    @classmethod
    def anonymous(cls) -> "Principal":
        return cls(id=None, role=ROLE_ANONYMOUS)

    @classmethod
    def from_user(cls, user: Any) -> "Principal":
        """Build a principal from a User (or AnonymousUser / None)."""
        if user is None or not getattr(user, "is_authenticated", False):
            return cls.anonymous()
        if not getattr(user, "is_active", True):
            return cls.anonymous()
        return cls(
            id=user.id,
            role=user.role,
            email=user.email,
            display_name=user.full_name,
        )

    @classmethod
    def from_request(cls, request: Any) -> "Principal":
        return cls.from_user(getattr(request, "user", None))

    @property
    def is_authenticated(self) -> bool:
        return self.id is not None

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN

    def owns(self, owner_id: Any) -> bool:
        """True when this caller is the given owner id."""
        if not self.is_authenticated or owner_id is None:
            return False
        return str(owner_id) == str(self.id)
