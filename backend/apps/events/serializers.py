"""
Serializers for events and event registrations.

No business logic in serializers - validation only.
"""

from rest_framework import serializers

from apps.events.models import Event, EventRegistration, EventStatus
from apps.registry.models import RegistrationStatus


class EventSerializer(serializers.ModelSerializer):
    eventDate = serializers.DateTimeField(source="event_date", read_only=True)
    endDate = serializers.DateTimeField(source="end_date", read_only=True)
    maxParticipants = serializers.IntegerField(
        source="max_participants", read_only=True, allow_null=True
    )
    currentParticipants = serializers.IntegerField(
        source="current_participants", read_only=True
    )
    imageUrl = serializers.CharField(source="image_url", read_only=True)
    registrationRequired = serializers.BooleanField(
        source="registration_required", read_only=True
    )
    createdBy = serializers.UUIDField(
        source="created_by_id", read_only=True, allow_null=True
    )
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)
    updatedAt = serializers.DateTimeField(source="updated_at", read_only=True)

    class Meta:
        model = Event
        fields = [
            "id",
            "title",
            "description",
            "eventDate",
            "endDate",
            "location",
            "maxParticipants",
            "currentParticipants",
            "status",
            "imageUrl",
            "registrationRequired",
            "createdBy",
            "createdAt",
            "updatedAt",
        ]


class EventWriteSerializer(serializers.Serializer):
    """Create/update payload. Partial updates use partial=True."""

    title = serializers.CharField(max_length=255)
    description = serializers.CharField(required=False, allow_blank=True)
    eventDate = serializers.DateTimeField(source="event_date")
    endDate = serializers.DateTimeField(
        source="end_date", required=False, allow_null=True
    )
    location = serializers.CharField(
        max_length=255, required=False, allow_blank=True
    )
    maxParticipants = serializers.IntegerField(
        source="max_participants", required=False, allow_null=True
    )
    status = serializers.ChoiceField(choices=EventStatus.choices, required=False)
    imageUrl = serializers.URLField(
        source="image_url", max_length=500, required=False, allow_blank=True
    )
    registrationRequired = serializers.BooleanField(
        source="registration_required", required=False
    )


class EventRegistrationSerializer(serializers.ModelSerializer):
    eventId = serializers.UUIDField(source="event_id", read_only=True)
    eventTitle = serializers.CharField(source="event.title", read_only=True)
    userId = serializers.UUIDField(source="user_id", read_only=True)
    userName = serializers.CharField(source="user.full_name", read_only=True)
    registeredAt = serializers.DateTimeField(source="registered_at", read_only=True)
    updatedAt = serializers.DateTimeField(source="updated_at", read_only=True)
    cancelledAt = serializers.DateTimeField(source="cancelled_at", read_only=True)

    class Meta:
        model = EventRegistration
        fields = [
            "id",
            "eventId",
            "eventTitle",
            "userId",
            "userName",
            "status",
            "notes",
            "registeredAt",
            "updatedAt",
            "cancelledAt",
        ]


class RegisterSerializer(serializers.Serializer):
    notes = serializers.CharField(required=False, allow_blank=True, default="")


class RegistrationStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=RegistrationStatus.choices)
    notes = serializers.CharField(required=False, allow_blank=True)
