from rest_framework import serializers

from apps.notifications.models import Notification


class NotificationSerializer(serializers.ModelSerializer):
    userId = serializers.UUIDField(source="user_id", read_only=True)
    relatedEntityId = serializers.CharField(
        source="related_entity_id", read_only=True, allow_null=True
    )
    isRead = serializers.BooleanField(source="is_read", read_only=True)
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)

    class Meta:
        model = Notification
        fields = [
            "id",
            "userId",
            "message",
            "type",
            "relatedEntityId",
            "isRead",
            "createdAt",
        ]
