"""
Origin metadata for audit records.

Views build an AuditContext from the incoming request and hand it to the
service layer explicitly; services never reach for the request themselves.
System actions (management commands) use AuditContext.system().
"""

from dataclasses import dataclass
from typing import Optional

from django.core.exceptions import ValidationError
from django.core.validators import validate_ipv46_address

MAX_USER_AGENT_LENGTH = 512


def _valid_ip(value):
    """Header values land in an inet column; anything unparseable is dropped."""
    if not value:
        return None
    try:
        validate_ipv46_address(value)
    except ValidationError:
        return None
    return value


@dataclass(frozen=True)
class AuditContext:
    ip_address: Optional[str] = None
    user_agent: str = ""
    request_id: Optional[str] = None

    @classmethod
    def system(cls):
        return cls()

    @classmethod
    def from_request(cls, request):
        meta = request.META
        forwarded = meta.get("HTTP_X_FORWARDED_FOR", "")
        ip_address = _valid_ip(forwarded.split(",")[0].strip()) if forwarded else None
        if ip_address is None:
            ip_address = _valid_ip(meta.get("REMOTE_ADDR"))

        return cls(
            ip_address=ip_address,
            user_agent=meta.get("HTTP_USER_AGENT", "")[:MAX_USER_AGENT_LENGTH],
            request_id=getattr(request, "request_id", None),
        )
