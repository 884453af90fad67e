"""
Discussion services - all mutations flow through this layer.

Rules:
- Any member may start a discussion or reply; the author (or ADMIN) edits or
  deletes it
- Pinning and locking are moderation and reserved to ADMIN
- A locked discussion accepts no new replies
- view_count and reply_count only move through F() updates
- Create audit entries for all mutations
"""

import logging

from django.db import transaction
from django.db.models import F

from apps.audit.services import record
from apps.discussions.models import Discussion, DiscussionReply
from core.authorization import Action, EntityKind, authorize
from core.exceptions import (
    IntegrityViolationError,
    InvalidStateError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from core.storage import storage_guard

logger = logging.getLogger(__name__)

AUTHOR_FIELDS = ("title", "content", "category")
MODERATION_FIELDS = ("is_pinned", "is_locked")


def discussion_state(discussion):
    return {
        "id": str(discussion.id),
        "title": discussion.title,
        "content": discussion.content,
        "category": discussion.category,
        "isPinned": discussion.is_pinned,
        "isLocked": discussion.is_locked,
        "replyCount": discussion.reply_count,
        "createdBy": (
            str(discussion.created_by_id) if discussion.created_by_id else None
        ),
    }


def reply_state(reply):
    return {
        "id": str(reply.id),
        "discussionId": str(reply.discussion_id),
        "parentReplyId": str(reply.parent_reply_id) if reply.parent_reply_id else None,
        "content": reply.content,
        "createdBy": str(reply.created_by_id) if reply.created_by_id else None,
    }


def _lock_discussion(discussion_id):
    try:
        return Discussion.objects.select_for_update().get(id=discussion_id)
    except Discussion.DoesNotExist:
        raise NotFoundError(f"Discussion {discussion_id} does not exist")


def _require_non_blank(data, field, label):
    if field in data and not (data[field] or "").strip():
        raise ValidationError(f"{label} must be non-empty")


def create_discussion(principal, data, context=None):
    authorize(principal, Action.CREATE, EntityKind.DISCUSSION)
    _require_non_blank(data, "title", "Title")
    _require_non_blank(data, "content", "Content")

    if any(data.get(field) for field in MODERATION_FIELDS) and not principal.is_admin:
        raise PermissionDeniedError("Only administrators can pin or lock discussions")

    with storage_guard("create_discussion"), transaction.atomic():
        discussion = Discussion.objects.create(
            created_by_id=principal.id,
            **{
                k: v
                for k, v in data.items()
                if k in AUTHOR_FIELDS + MODERATION_FIELDS
            },
        )
        record(
            event_type="DISCUSSION_CREATED",
            actor_id=principal.id,
            entity_type=EntityKind.DISCUSSION,
            entity_id=discussion.id,
            new_state=discussion_state(discussion),
            context=context,
        )

    logger.info(
        "discussion_created",
        extra={"operation": "create_discussion", "entity_id": str(discussion.id)},
    )
    return discussion


def list_discussions(principal, title=None, category=None):
    authorize(principal, Action.READ, EntityKind.DISCUSSION)
    queryset = Discussion.objects.all()
    if title:
        queryset = queryset.filter(title__icontains=title)
    if category:
        queryset = queryset.filter(category__iexact=category)
    return queryset.order_by("-is_pinned", "-created_at")


def get_discussion(principal, discussion_id):
    """Fetch a discussion, counting the view."""
    authorize(principal, Action.READ, EntityKind.DISCUSSION)
    with storage_guard("get_discussion"):
        viewed = Discussion.objects.filter(id=discussion_id).update(
            view_count=F("view_count") + 1
        )
        if viewed == 0:
            raise NotFoundError(f"Discussion {discussion_id} does not exist")
        return Discussion.objects.get(id=discussion_id)


def update_discussion(principal, discussion_id, data, context=None):
    """
    Update a discussion (author or ADMIN; pin/lock ADMIN only).

    Raises:
        NotFoundError: Discussion does not exist
        PermissionDeniedError: Not the author, or non-admin pin/lock
    """
    with storage_guard("update_discussion"), transaction.atomic():
        discussion = _lock_discussion(discussion_id)
        authorize(
            principal,
            Action.UPDATE,
            EntityKind.DISCUSSION,
            is_owner=principal.owns(discussion.created_by_id),
        )
        if any(field in data for field in MODERATION_FIELDS) and not principal.is_admin:
            raise PermissionDeniedError(
                "Only administrators can pin or lock discussions"
            )
        _require_non_blank(data, "title", "Title")
        _require_non_blank(data, "content", "Content")

        previous = discussion_state(discussion)
        changed = [f for f in AUTHOR_FIELDS + MODERATION_FIELDS if f in data]
        for field in changed:
            setattr(discussion, field, data[field])
        if changed:
            discussion.save(update_fields=changed + ["updated_at"])

        record(
            event_type="DISCUSSION_UPDATED",
            actor_id=principal.id,
            entity_type=EntityKind.DISCUSSION,
            entity_id=discussion.id,
            previous_state=previous,
            new_state=discussion_state(discussion),
            context=context,
        )

    return discussion


def delete_discussion(principal, discussion_id, context=None):
    with storage_guard("delete_discussion"), transaction.atomic():
        discussion = _lock_discussion(discussion_id)
        authorize(
            principal,
            Action.DELETE,
            EntityKind.DISCUSSION,
            is_owner=principal.owns(discussion.created_by_id),
        )
        previous = discussion_state(discussion)
        discussion.delete()

        record(
            event_type="DISCUSSION_DELETED",
            actor_id=principal.id,
            entity_type=EntityKind.DISCUSSION,
            entity_id=discussion_id,
            previous_state=previous,
            context=context,
        )

    logger.info(
        "discussion_deleted",
        extra={"operation": "delete_discussion", "entity_id": str(discussion_id)},
    )


def add_reply(principal, discussion_id, content, parent_reply_id=None, context=None):
    """
    Reply to a discussion.

    Raises:
        NotFoundError: Discussion (or parent reply) does not exist
        InvalidStateError: Discussion is locked
        ValidationError: Parent reply belongs to another discussion
    """
    authorize(principal, Action.CREATE, EntityKind.DISCUSSION_REPLY)
    if not (content or "").strip():
        raise ValidationError("Content must be non-empty")

    with storage_guard("add_reply"), transaction.atomic():
        discussion = _lock_discussion(discussion_id)
        if discussion.is_locked:
            raise InvalidStateError(
                "Discussion is locked",
                {"discussionId": str(discussion.id)},
            )

        if parent_reply_id is not None:
            try:
                parent = DiscussionReply.objects.get(id=parent_reply_id)
            except DiscussionReply.DoesNotExist:
                raise NotFoundError(f"Reply {parent_reply_id} does not exist")
            if parent.discussion_id != discussion.id:
                raise ValidationError(
                    "Parent reply belongs to a different discussion",
                    {"parentReplyId": str(parent_reply_id)},
                )

        reply = DiscussionReply.objects.create(
            discussion=discussion,
            content=content,
            created_by_id=principal.id,
            parent_reply_id=parent_reply_id,
        )
        Discussion.objects.filter(id=discussion.id).update(
            reply_count=F("reply_count") + 1
        )

        record(
            event_type="REPLY_CREATED",
            actor_id=principal.id,
            entity_type=EntityKind.DISCUSSION_REPLY,
            entity_id=reply.id,
            new_state=reply_state(reply),
            context=context,
        )

    return reply


def list_replies(principal, discussion_id):
    authorize(principal, Action.READ, EntityKind.DISCUSSION_REPLY)
    if not Discussion.objects.filter(id=discussion_id).exists():
        raise NotFoundError(f"Discussion {discussion_id} does not exist")
    return DiscussionReply.objects.filter(discussion_id=discussion_id).order_by(
        "created_at"
    )


def _get_reply(reply_id):
    try:
        return DiscussionReply.objects.get(id=reply_id)
    except DiscussionReply.DoesNotExist:
        raise NotFoundError(f"Reply {reply_id} does not exist")


def update_reply(principal, reply_id, content, context=None):
    if not (content or "").strip():
        raise ValidationError("Content must be non-empty")

    with storage_guard("update_reply"), transaction.atomic():
        discussion_id = _get_reply(reply_id).discussion_id
        _lock_discussion(discussion_id)
        reply = DiscussionReply.objects.select_for_update().get(id=reply_id)
        authorize(
            principal,
            Action.UPDATE,
            EntityKind.DISCUSSION_REPLY,
            is_owner=principal.owns(reply.created_by_id),
        )

        previous = reply_state(reply)
        reply.content = content
        reply.save(update_fields=["content", "updated_at"])

        record(
            event_type="REPLY_UPDATED",
            actor_id=principal.id,
            entity_type=EntityKind.DISCUSSION_REPLY,
            entity_id=reply.id,
            previous_state=previous,
            new_state=reply_state(reply),
            context=context,
        )

    return reply


def delete_reply(principal, reply_id, context=None):
    """
    Delete a reply and decrement the discussion's reply_count.

    Raises:
        IntegrityViolationError: reply_count already zero
    """
    with storage_guard("delete_reply"), transaction.atomic():
        discussion = _lock_discussion(_get_reply(reply_id).discussion_id)
        reply = DiscussionReply.objects.select_for_update().get(id=reply_id)
        authorize(
            principal,
            Action.DELETE,
            EntityKind.DISCUSSION_REPLY,
            is_owner=principal.owns(reply.created_by_id),
        )

        previous = reply_state(reply)
        reply.delete()

        decremented = Discussion.objects.filter(
            id=discussion.id, reply_count__gt=0
        ).update(reply_count=F("reply_count") - 1)
        if decremented == 0:
            logger.error(
                "reply_count_underflow",
                extra={
                    "operation": "delete_reply",
                    "entity_id": str(discussion.id),
                },
            )
            raise IntegrityViolationError(
                "Discussion reply count is already zero",
                {"discussionId": str(discussion.id)},
            )

        record(
            event_type="REPLY_DELETED",
            actor_id=principal.id,
            entity_type=EntityKind.DISCUSSION_REPLY,
            entity_id=reply_id,
            previous_state=previous,
            context=context,
        )


def discussion_counts():
    return {"totalDiscussions": Discussion.objects.count()}
