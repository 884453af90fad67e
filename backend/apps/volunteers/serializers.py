"""
Serializers for volunteer opportunities and registrations.
"""

from rest_framework import serializers

from apps.registry.models import RegistrationStatus
from apps.volunteers.models import (
    VolunteerOpportunity,
    VolunteerRegistration,
    VolunteerStatus,
)


class OpportunitySerializer(serializers.ModelSerializer):
    dateTime = serializers.DateTimeField(source="date_time", read_only=True)
    durationHours = serializers.IntegerField(
        source="duration_hours", read_only=True, allow_null=True
    )
    maxVolunteers = serializers.IntegerField(
        source="max_volunteers", read_only=True, allow_null=True
    )
    currentVolunteers = serializers.IntegerField(
        source="current_volunteers", read_only=True
    )
    createdBy = serializers.UUIDField(
        source="created_by_id", read_only=True, allow_null=True
    )
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)
    updatedAt = serializers.DateTimeField(source="updated_at", read_only=True)

    class Meta:
        model = VolunteerOpportunity
        fields = [
            "id",
            "title",
            "description",
            "requirements",
            "location",
            "dateTime",
            "durationHours",
            "maxVolunteers",
            "currentVolunteers",
            "status",
            "createdBy",
            "createdAt",
            "updatedAt",
        ]


class OpportunityWriteSerializer(serializers.Serializer):
    title = serializers.CharField(max_length=255)
    description = serializers.CharField(required=False, allow_blank=True)
    requirements = serializers.CharField(required=False, allow_blank=True)
    location = serializers.CharField(
        max_length=255, required=False, allow_blank=True
    )
    dateTime = serializers.DateTimeField(
        source="date_time", required=False, allow_null=True
    )
    durationHours = serializers.IntegerField(
        source="duration_hours", required=False, allow_null=True, min_value=0
    )
    maxVolunteers = serializers.IntegerField(
        source="max_volunteers", required=False, allow_null=True
    )
    status = serializers.ChoiceField(choices=VolunteerStatus.choices, required=False)


class VolunteerRegistrationSerializer(serializers.ModelSerializer):
    opportunityId = serializers.UUIDField(source="opportunity_id", read_only=True)
    opportunityTitle = serializers.CharField(
        source="opportunity.title", read_only=True
    )
    userId = serializers.UUIDField(source="user_id", read_only=True)
    userName = serializers.CharField(source="user.full_name", read_only=True)
    registeredAt = serializers.DateTimeField(source="registered_at", read_only=True)
    updatedAt = serializers.DateTimeField(source="updated_at", read_only=True)
    cancelledAt = serializers.DateTimeField(source="cancelled_at", read_only=True)

    class Meta:
        model = VolunteerRegistration
        fields = [
            "id",
            "opportunityId",
            "opportunityTitle",
            "userId",
            "userName",
            "status",
            "notes",
            "registeredAt",
            "updatedAt",
            "cancelledAt",
        ]


class VolunteerSignupSerializer(serializers.Serializer):
    notes = serializers.CharField(required=False, allow_blank=True, default="")


class VolunteerStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=RegistrationStatus.choices)
    notes = serializers.CharField(required=False, allow_blank=True)
