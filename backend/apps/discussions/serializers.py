from rest_framework import serializers

from apps.discussions.models import Discussion, DiscussionReply


class DiscussionSerializer(serializers.ModelSerializer):
    createdBy = serializers.UUIDField(
        source="created_by_id", read_only=True, allow_null=True
    )
    authorName = serializers.CharField(
        source="created_by.full_name", read_only=True, default=None
    )
    isPinned = serializers.BooleanField(source="is_pinned", read_only=True)
    isLocked = serializers.BooleanField(source="is_locked", read_only=True)
    viewCount = serializers.IntegerField(source="view_count", read_only=True)
    replyCount = serializers.IntegerField(source="reply_count", read_only=True)
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)
    updatedAt = serializers.DateTimeField(source="updated_at", read_only=True)

    class Meta:
        model = Discussion
        fields = [
            "id",
            "title",
            "content",
            "category",
            "createdBy",
            "authorName",
            "isPinned",
            "isLocked",
            "viewCount",
            "replyCount",
            "createdAt",
            "updatedAt",
        ]


class DiscussionWriteSerializer(serializers.Serializer):
    title = serializers.CharField(max_length=255)
    content = serializers.CharField()
    category = serializers.CharField(max_length=100, required=False, allow_blank=True)
    isPinned = serializers.BooleanField(source="is_pinned", required=False)
    isLocked = serializers.BooleanField(source="is_locked", required=False)


class ReplySerializer(serializers.ModelSerializer):
    discussionId = serializers.UUIDField(source="discussion_id", read_only=True)
    parentReplyId = serializers.UUIDField(
        source="parent_reply_id", read_only=True, allow_null=True
    )
    createdBy = serializers.UUIDField(
        source="created_by_id", read_only=True, allow_null=True
    )
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)
    updatedAt = serializers.DateTimeField(source="updated_at", read_only=True)

    class Meta:
        model = DiscussionReply
        fields = [
            "id",
            "discussionId",
            "parentReplyId",
            "content",
            "createdBy",
            "createdAt",
            "updatedAt",
        ]


class ReplyWriteSerializer(serializers.Serializer):
    content = serializers.CharField()
    parentReplyId = serializers.UUIDField(
        source="parent_reply_id", required=False, allow_null=True
    )
