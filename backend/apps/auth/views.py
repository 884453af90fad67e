"""
Authentication views: register, login, logout.

No domain logic - authentication only.
"""

import logging

from django.contrib.auth import authenticate
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.tokens import RefreshToken

from apps.audit.context import AuditContext
from apps.auth.serializers import LoginSerializer, LogoutSerializer, RegisterSerializer
from apps.users import services as user_services
from apps.users.serializers import UserSerializer
from core.exceptions import AuthenticationRequiredError, ValidationError
from core.permissions import IsMember

logger = logging.getLogger(__name__)


def _token_payload(user):
    refresh = RefreshToken.for_user(user)
    return {
        "token": str(refresh.access_token),
        "refreshToken": str(refresh),
        "user": UserSerializer(user).data,
    }


@api_view(["POST"])
@permission_classes([AllowAny])
def register(request):
    """
    POST /api/v1/auth/register

    Create a MEMBER account and return JWT tokens for it.
    """
    serializer = RegisterSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    user = user_services.register_user(
        email=serializer.validated_data["email"],
        password=serializer.validated_data["password"],
        full_name=serializer.validated_data["full_name"],
        context=AuditContext.from_request(request),
    )
    return Response({"data": _token_payload(user)}, status=status.HTTP_201_CREATED)


@api_view(["POST"])
@permission_classes([AllowAny])
def login(request):
    """
    POST /api/v1/auth/login

    Authenticate user and return JWT tokens.
    """
    serializer = LoginSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    user = authenticate(
        request=request,
        username=serializer.validated_data["email"],
        password=serializer.validated_data["password"],
    )
    if user is None:
        logger.info("login_failed", extra={"operation": "login"})
        raise AuthenticationRequiredError("Invalid credentials")

    return Response({"data": _token_payload(user)}, status=status.HTTP_200_OK)


@api_view(["POST"])
@permission_classes([IsMember])
def logout(request):
    """
    POST /api/v1/auth/logout

    Invalidate (blacklist) the supplied refresh token.
    """
    serializer = LogoutSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    try:
        token = RefreshToken(serializer.validated_data["refresh_token"])
        if str(token.get("user_id")) != str(request.user.id):
            raise ValidationError("Refresh token does not belong to caller")
        token.blacklist()
    except TokenError as exc:
        raise ValidationError("Invalid or expired refresh token", {"reason": str(exc)})

    return Response({"data": {"success": True}}, status=status.HTTP_200_OK)
