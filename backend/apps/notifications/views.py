"""
Notification views: the caller's own inbox only.
"""

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response

from apps.notifications import services
from apps.notifications.serializers import NotificationSerializer
from core.pagination import paginated_response
from core.permissions import IsMember
from core.principal import Principal


@api_view(["GET"])
@permission_classes([IsMember])
def list_notifications(request):
    """
    GET /api/v1/notifications?unread=true
    """
    unread_only = request.query_params.get("unread", "").lower() in ("1", "true")
    queryset = services.list_notifications(
        Principal.from_request(request), unread_only=unread_only
    )
    return paginated_response(request, queryset, NotificationSerializer)


@api_view(["GET"])
@permission_classes([IsMember])
def unread_count(request):
    """
    GET /api/v1/notifications/unread-count
    """
    count = services.unread_count(Principal.from_request(request))
    return Response({"data": {"count": count}})


@api_view(["POST"])
@permission_classes([IsMember])
def mark_all_read(request):
    """
    POST /api/v1/notifications/read-all
    """
    updated = services.mark_all_read(Principal.from_request(request))
    return Response({"data": {"updated": updated}})


@api_view(["POST"])
@permission_classes([IsMember])
def mark_read(request, notificationId):
    """
    POST /api/v1/notifications/{notificationId}/read
    """
    notification = services.mark_read(Principal.from_request(request), notificationId)
    return Response({"data": NotificationSerializer(notification).data})


@api_view(["DELETE"])
@permission_classes([IsMember])
def delete_notification(request, notificationId):
    """
    DELETE /api/v1/notifications/{notificationId}
    """
    services.delete_notification(Principal.from_request(request), notificationId)
    return Response(status=status.HTTP_204_NO_CONTENT)
