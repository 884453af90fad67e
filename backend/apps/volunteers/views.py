"""
Volunteer views: opportunities, sign-up, registrations.
"""

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response

from apps.audit.context import AuditContext
from apps.volunteers import services
from apps.volunteers.serializers import (
    OpportunitySerializer,
    OpportunityWriteSerializer,
    VolunteerRegistrationSerializer,
    VolunteerSignupSerializer,
    VolunteerStatusSerializer,
)
from core.pagination import paginated_response
from core.permissions import IsMember
from core.principal import Principal


@api_view(["GET", "POST"])
@permission_classes([IsMember])
def list_or_create_opportunities(request):
    """
    GET /api/v1/volunteers?title=&location=&status=
    POST /api/v1/volunteers
    """
    principal = Principal.from_request(request)

    if request.method == "GET":
        queryset = services.list_opportunities(
            principal,
            title=request.query_params.get("title"),
            location=request.query_params.get("location"),
            status=request.query_params.get("status"),
        )
        return paginated_response(request, queryset, OpportunitySerializer)

    serializer = OpportunityWriteSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    opportunity = services.create_opportunity(
        principal,
        serializer.validated_data,
        context=AuditContext.from_request(request),
    )
    return Response(
        {"data": OpportunitySerializer(opportunity).data},
        status=status.HTTP_201_CREATED,
    )


@api_view(["GET", "PUT", "PATCH", "DELETE"])
@permission_classes([IsMember])
def opportunity_detail(request, opportunityId):
    """
    GET/PUT/PATCH/DELETE /api/v1/volunteers/{opportunityId}
    """
    principal = Principal.from_request(request)

    if request.method == "GET":
        opportunity = services.get_opportunity(principal, opportunityId)
        return Response({"data": OpportunitySerializer(opportunity).data})

    if request.method == "DELETE":
        services.delete_opportunity(
            principal, opportunityId, context=AuditContext.from_request(request)
        )
        return Response(status=status.HTTP_204_NO_CONTENT)

    serializer = OpportunityWriteSerializer(data=request.data, partial=True)
    serializer.is_valid(raise_exception=True)
    opportunity = services.update_opportunity(
        principal,
        opportunityId,
        serializer.validated_data,
        context=AuditContext.from_request(request),
    )
    return Response({"data": OpportunitySerializer(opportunity).data})


@api_view(["POST"])
@permission_classes([IsMember])
def register(request, opportunityId):
    """
    POST /api/v1/volunteers/{opportunityId}/register
    """
    serializer = VolunteerSignupSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    registration = services.register_for_opportunity(
        Principal.from_request(request),
        opportunityId,
        notes=serializer.validated_data["notes"],
        context=AuditContext.from_request(request),
    )
    return Response(
        {"data": VolunteerRegistrationSerializer(registration).data},
        status=status.HTTP_201_CREATED,
    )


@api_view(["POST", "DELETE"])
@permission_classes([IsMember])
def unregister(request, opportunityId):
    """
    POST|DELETE /api/v1/volunteers/{opportunityId}/unregister
    """
    registration = services.unregister_from_opportunity(
        Principal.from_request(request),
        opportunityId,
        context=AuditContext.from_request(request),
    )
    return Response({"data": VolunteerRegistrationSerializer(registration).data})


@api_view(["GET"])
@permission_classes([IsMember])
def opportunity_registrations(request, opportunityId):
    """
    GET /api/v1/volunteers/{opportunityId}/registrations
    """
    include_cancelled = request.query_params.get("includeCancelled", "").lower() in (
        "1",
        "true",
    )
    queryset = services.opportunity_registrations(
        Principal.from_request(request),
        opportunityId,
        include_cancelled=include_cancelled,
    )
    return paginated_response(request, queryset, VolunteerRegistrationSerializer)


@api_view(["GET"])
@permission_classes([IsMember])
def my_registrations(request):
    """
    GET /api/v1/volunteers/registrations/me
    """
    queryset = services.my_registrations(Principal.from_request(request))
    return paginated_response(request, queryset, VolunteerRegistrationSerializer)


@api_view(["PUT", "PATCH"])
@permission_classes([IsMember])
def update_registration_status(request, registrationId):
    """
    PUT /api/v1/volunteers/registrations/{registrationId}/status
    """
    serializer = VolunteerStatusSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    registration = services.update_registration_status(
        Principal.from_request(request),
        registrationId,
        serializer.validated_data["status"],
        notes=serializer.validated_data.get("notes"),
        context=AuditContext.from_request(request),
    )
    return Response({"data": VolunteerRegistrationSerializer(registration).data})
