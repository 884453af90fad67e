"""
Audit log views - query audit log entries.

Read-only - audit logs are append-only. ADMIN only.
"""

from uuid import UUID

from django.utils.dateparse import parse_datetime
from rest_framework.decorators import api_view, permission_classes

from apps.audit import services
from apps.audit.serializers import AuditLogSerializer
from core.authorization import EntityKind
from core.exceptions import ValidationError
from core.pagination import paginated_response
from core.permissions import IsMember
from core.principal import Principal

VALID_ENTITY_TYPES = {
    value
    for name, value in vars(EntityKind).items()
    if not name.startswith("_")
}


def _parse_uuid(value, param):
    try:
        return UUID(value)
    except ValueError:
        raise ValidationError(f"Invalid {param} format", {param: value})


def _parse_date(value, param):
    try:
        parsed = parse_datetime(value)
    except ValueError:
        parsed = None
    if parsed is None:
        raise ValidationError(
            f"Invalid {param} format (use ISO 8601)", {param: value}
        )
    return parsed


@api_view(["GET"])
@permission_classes([IsMember])
def query_audit_log(request):
    """
    GET /api/v1/audit

    Query audit log entries with optional filters:
    entityType, entityId, actorId, action, fromDate, toDate.
    """
    params = request.query_params

    entity_type = params.get("entityType")
    if entity_type and entity_type not in VALID_ENTITY_TYPES:
        raise ValidationError("Invalid entityType", {"entityType": entity_type})

    actor_id = params.get("actorId")
    from_date = params.get("fromDate")
    to_date = params.get("toDate")

    queryset = services.query_audit_log(
        Principal.from_request(request),
        entity_type=entity_type,
        entity_id=params.get("entityId"),
        actor_id=_parse_uuid(actor_id, "actorId") if actor_id else None,
        event_type=params.get("action"),
        from_date=_parse_date(from_date, "fromDate") if from_date else None,
        to_date=_parse_date(to_date, "toDate") if to_date else None,
    )

    return paginated_response(request, queryset, AuditLogSerializer)
