"""
User views: current user, and admin user management.

Admin endpoints are gated by the authorization matrix in the service layer.
"""

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response

from apps.audit.context import AuditContext
from apps.users import services
from apps.users.serializers import (
    UpdateUserRoleSerializer,
    UserAdminSerializer,
    UserSerializer,
)
from core.pagination import paginated_response
from core.permissions import IsMember
from core.principal import Principal


@api_view(["GET"])
@permission_classes([IsMember])
def get_current_user(request):
    """
    GET /api/v1/users/me

    Get current authenticated user.
    """
    serializer = UserSerializer(request.user)
    return Response({"data": serializer.data}, status=status.HTTP_200_OK)


@api_view(["GET"])
@permission_classes([IsMember])
def list_users(request):
    """
    GET /api/v1/admin/users
    """
    users = services.list_users(Principal.from_request(request))
    return paginated_response(request, users, UserAdminSerializer)


@api_view(["GET", "DELETE"])
@permission_classes([IsMember])
def user_detail(request, userId):
    """
    GET /api/v1/admin/users/{userId}
    DELETE /api/v1/admin/users/{userId}
    """
    principal = Principal.from_request(request)

    if request.method == "GET":
        user = services.get_user(principal, userId)
        return Response({"data": UserAdminSerializer(user).data})

    services.delete_user(principal, userId, context=AuditContext.from_request(request))
    return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(["PUT", "PATCH"])
@permission_classes([IsMember])
def update_user_role(request, userId):
    """
    PUT /api/v1/admin/users/{userId}/role
    """
    serializer = UpdateUserRoleSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    user = services.update_user_role(
        Principal.from_request(request),
        userId,
        serializer.validated_data["role"],
        context=AuditContext.from_request(request),
    )
    return Response({"data": UserAdminSerializer(user).data})
