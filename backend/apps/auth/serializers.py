"""
Serializers for authentication endpoints.
"""

from django.contrib.auth.password_validation import validate_password
from rest_framework import serializers


class LoginSerializer(serializers.Serializer):
    """Serializer for login request."""

    email = serializers.EmailField(required=True)
    password = serializers.CharField(required=True, write_only=True)


class RegisterSerializer(serializers.Serializer):
    """Serializer for self-service sign-up."""

    email = serializers.EmailField(required=True, max_length=254)
    password = serializers.CharField(required=True, write_only=True)
    fullName = serializers.CharField(
        required=True, max_length=255, source="full_name"
    )

    def validate_password(self, value):
        validate_password(value)
        return value


class LogoutSerializer(serializers.Serializer):
    """Serializer for logout request."""

    refreshToken = serializers.CharField(required=True, source="refresh_token")
