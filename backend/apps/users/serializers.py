"""
Serializers for User model.

No business logic in serializers - validation only.
"""

from rest_framework import serializers
from apps.users.models import User, Role


class UserSerializer(serializers.ModelSerializer):
    """Serializer for User model."""

    id = serializers.UUIDField(read_only=True)
    fullName = serializers.CharField(source="full_name", read_only=True)
    role = serializers.ChoiceField(choices=Role.choices, read_only=True)

    class Meta:
        model = User
        fields = ["id", "email", "fullName", "role"]


class UserAdminSerializer(serializers.ModelSerializer):
    """Serializer for admin user listing/detail."""

    id = serializers.UUIDField(read_only=True)
    fullName = serializers.CharField(source="full_name", read_only=True)
    isActive = serializers.BooleanField(source="is_active", read_only=True)
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)
    updatedAt = serializers.DateTimeField(source="updated_at", read_only=True)

    class Meta:
        model = User
        fields = [
            "id",
            "email",
            "fullName",
            "role",
            "isActive",
            "createdAt",
            "updatedAt",
        ]


class UpdateUserRoleSerializer(serializers.Serializer):
    role = serializers.ChoiceField(choices=Role.choices, required=True)
