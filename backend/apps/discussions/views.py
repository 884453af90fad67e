"""
Discussion views: threads and replies.
"""

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response

from apps.audit.context import AuditContext
from apps.discussions import services
from apps.discussions.serializers import (
    DiscussionSerializer,
    DiscussionWriteSerializer,
    ReplySerializer,
    ReplyWriteSerializer,
)
from core.pagination import paginated_response
from core.permissions import IsMember
from core.principal import Principal


@api_view(["GET", "POST"])
@permission_classes([IsMember])
def list_or_create_discussions(request):
    """
    GET /api/v1/discussions?title=&category=
    POST /api/v1/discussions
    """
    principal = Principal.from_request(request)

    if request.method == "GET":
        queryset = services.list_discussions(
            principal,
            title=request.query_params.get("title"),
            category=request.query_params.get("category"),
        ).select_related("created_by")
        return paginated_response(request, queryset, DiscussionSerializer)

    serializer = DiscussionWriteSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    discussion = services.create_discussion(
        principal,
        serializer.validated_data,
        context=AuditContext.from_request(request),
    )
    return Response(
        {"data": DiscussionSerializer(discussion).data},
        status=status.HTTP_201_CREATED,
    )


@api_view(["GET", "PUT", "PATCH", "DELETE"])
@permission_classes([IsMember])
def discussion_detail(request, discussionId):
    """
    GET/PUT/PATCH/DELETE /api/v1/discussions/{discussionId}
    """
    principal = Principal.from_request(request)

    if request.method == "GET":
        discussion = services.get_discussion(principal, discussionId)
        return Response({"data": DiscussionSerializer(discussion).data})

    if request.method == "DELETE":
        services.delete_discussion(
            principal, discussionId, context=AuditContext.from_request(request)
        )
        return Response(status=status.HTTP_204_NO_CONTENT)

    serializer = DiscussionWriteSerializer(data=request.data, partial=True)
    serializer.is_valid(raise_exception=True)
    discussion = services.update_discussion(
        principal,
        discussionId,
        serializer.validated_data,
        context=AuditContext.from_request(request),
    )
    return Response({"data": DiscussionSerializer(discussion).data})


@api_view(["GET", "POST"])
@permission_classes([IsMember])
def list_or_add_replies(request, discussionId):
    """
    GET /api/v1/discussions/{discussionId}/replies
    POST /api/v1/discussions/{discussionId}/replies
    """
    principal = Principal.from_request(request)

    if request.method == "GET":
        queryset = services.list_replies(principal, discussionId)
        return paginated_response(request, queryset, ReplySerializer)

    serializer = ReplyWriteSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    reply = services.add_reply(
        principal,
        discussionId,
        serializer.validated_data["content"],
        parent_reply_id=serializer.validated_data.get("parent_reply_id"),
        context=AuditContext.from_request(request),
    )
    return Response(
        {"data": ReplySerializer(reply).data}, status=status.HTTP_201_CREATED
    )


@api_view(["PUT", "PATCH", "DELETE"])
@permission_classes([IsMember])
def reply_detail(request, replyId):
    """
    PUT/PATCH/DELETE /api/v1/discussions/replies/{replyId}
    """
    principal = Principal.from_request(request)

    if request.method == "DELETE":
        services.delete_reply(
            principal, replyId, context=AuditContext.from_request(request)
        )
        return Response(status=status.HTTP_204_NO_CONTENT)

    serializer = ReplyWriteSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    reply = services.update_reply(
        principal,
        replyId,
        serializer.validated_data["content"],
        context=AuditContext.from_request(request),
    )
    return Response({"data": ReplySerializer(reply).data})
