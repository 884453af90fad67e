"""
Event views: CRUD, registration, participants.

Views translate HTTP to service calls; every rule lives in apps.events.services.
"""

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response

from apps.audit.context import AuditContext
from apps.events import services
from apps.events.serializers import (
    EventRegistrationSerializer,
    EventSerializer,
    EventWriteSerializer,
    RegisterSerializer,
    RegistrationStatusSerializer,
)
from core.pagination import paginated_response
from core.permissions import IsMember
from core.principal import Principal


def _flag(request, name):
    return request.query_params.get(name, "").lower() in ("1", "true")


@api_view(["GET", "POST"])
@permission_classes([IsMember])
def list_or_create_events(request):
    """
    GET /api/v1/events?title=&location=&status=
    POST /api/v1/events
    """
    principal = Principal.from_request(request)

    if request.method == "GET":
        queryset = services.list_events(
            principal,
            title=request.query_params.get("title"),
            location=request.query_params.get("location"),
            status=request.query_params.get("status"),
        )
        return paginated_response(request, queryset, EventSerializer)

    serializer = EventWriteSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    event = services.create_event(
        principal,
        serializer.validated_data,
        context=AuditContext.from_request(request),
    )
    return Response(
        {"data": EventSerializer(event).data}, status=status.HTTP_201_CREATED
    )


@api_view(["GET", "PUT", "PATCH", "DELETE"])
@permission_classes([IsMember])
def event_detail(request, eventId):
    """
    GET/PUT/PATCH/DELETE /api/v1/events/{eventId}
    """
    principal = Principal.from_request(request)

    if request.method == "GET":
        event = services.get_event(principal, eventId)
        return Response({"data": EventSerializer(event).data})

    if request.method == "DELETE":
        services.delete_event(
            principal, eventId, context=AuditContext.from_request(request)
        )
        return Response(status=status.HTTP_204_NO_CONTENT)

    serializer = EventWriteSerializer(data=request.data, partial=True)
    serializer.is_valid(raise_exception=True)
    event = services.update_event(
        principal,
        eventId,
        serializer.validated_data,
        context=AuditContext.from_request(request),
    )
    return Response({"data": EventSerializer(event).data})


@api_view(["POST"])
@permission_classes([IsMember])
def register(request, eventId):
    """
    POST /api/v1/events/{eventId}/register
    """
    serializer = RegisterSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    registration = services.register_for_event(
        Principal.from_request(request),
        eventId,
        notes=serializer.validated_data["notes"],
        context=AuditContext.from_request(request),
    )
    return Response(
        {"data": EventRegistrationSerializer(registration).data},
        status=status.HTTP_201_CREATED,
    )


@api_view(["POST", "DELETE"])
@permission_classes([IsMember])
def unregister(request, eventId):
    """
    POST|DELETE /api/v1/events/{eventId}/unregister
    """
    registration = services.unregister_from_event(
        Principal.from_request(request),
        eventId,
        context=AuditContext.from_request(request),
    )
    return Response({"data": EventRegistrationSerializer(registration).data})


@api_view(["GET"])
@permission_classes([IsMember])
def participants(request, eventId):
    """
    GET /api/v1/events/{eventId}/participants?includeCancelled=true
    """
    queryset = services.get_participants(
        Principal.from_request(request),
        eventId,
        include_cancelled=_flag(request, "includeCancelled"),
    )
    return paginated_response(request, queryset, EventRegistrationSerializer)


@api_view(["GET"])
@permission_classes([IsMember])
def my_registrations(request):
    """
    GET /api/v1/events/registrations/me
    """
    queryset = services.my_registrations(
        Principal.from_request(request),
        include_cancelled=_flag(request, "includeCancelled"),
    )
    return paginated_response(request, queryset, EventRegistrationSerializer)


@api_view(["PUT", "PATCH"])
@permission_classes([IsMember])
def update_registration_status(request, registrationId):
    """
    PUT /api/v1/events/registrations/{registrationId}/status
    """
    serializer = RegistrationStatusSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    registration = services.update_registration_status(
        Principal.from_request(request),
        registrationId,
        serializer.validated_data["status"],
        notes=serializer.validated_data.get("notes"),
        context=AuditContext.from_request(request),
    )
    return Response({"data": EventRegistrationSerializer(registration).data})
