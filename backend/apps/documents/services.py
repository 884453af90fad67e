"""
Document services - metadata in the database, blobs in default_storage.

Rules:
- A caller only ever sees documents whose access level is in their readable
  set; anything else is reported as not found, never as forbidden
- A member cannot upload or re-level a document above the levels they read
- The uploader (or ADMIN) edits and deletes a document
- Blobs are written before the row is inserted and removed after the row
  deletion commits
- Reading metadata never changes state; downloads count through an F() update
- Create audit entries for all mutations
"""

import logging
import posixpath
import uuid

from django.conf import settings
from django.core.files.storage import default_storage
from django.db import transaction
from django.db.models import F

from apps.audit.services import record
from apps.documents.models import AccessLevel, Document, DocumentCategory
from core.authorization import Action, EntityKind, accessible_levels, authorize
from core.exceptions import NotFoundError, ValidationError
from core.storage import storage_guard

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = ("title", "description", "category", "access_level")


def document_state(document):
    return {
        "id": str(document.id),
        "title": document.title,
        "description": document.description,
        "category": document.category,
        "accessLevel": document.access_level,
        "fileName": document.file_name,
        "fileType": document.file_type,
        "fileSize": document.file_size,
        "uploadedBy": (
            str(document.uploaded_by_id) if document.uploaded_by_id else None
        ),
    }


def _not_found():
    return NotFoundError("Document not found")


def _visible(principal):
    return Document.objects.filter(access_level__in=accessible_levels(principal.role))


def _check_level_allowed(principal, level):
    if level not in accessible_levels(principal.role):
        raise ValidationError(
            f"You cannot assign access level {level}",
            {"accessLevel": level, "allowed": accessible_levels(principal.role)},
        )


def _blob_name(file_name):
    return posixpath.join("documents", uuid.uuid4().hex, posixpath.basename(file_name))


def _delete_blob(name):
    try:
        default_storage.delete(name)
    except OSError:
        logger.exception("document_blob_delete_failed", extra={"file_path": name})


def upload_document(principal, data, uploaded_file, context=None):
    """
    Store a document blob and its metadata.

    Args:
        principal: Caller
        data: Validated title, description, category, access_level
        uploaded_file: Django UploadedFile (required)
        context: AuditContext

    Raises:
        ValidationError: Missing/oversized file or access level above caller's
    """
    authorize(principal, Action.CREATE, EntityKind.DOCUMENT)

    if uploaded_file is None:
        raise ValidationError("A file is required", {"file": "required"})
    if uploaded_file.size > settings.DOCUMENT_MAX_UPLOAD_BYTES:
        raise ValidationError(
            "File is too large",
            {
                "fileSize": uploaded_file.size,
                "maxBytes": settings.DOCUMENT_MAX_UPLOAD_BYTES,
            },
        )
    if not (data.get("title") or "").strip():
        raise ValidationError("Title must be non-empty")

    level = data.get("access_level", AccessLevel.PUBLIC)
    _check_level_allowed(principal, level)

    stored_name = default_storage.save(_blob_name(uploaded_file.name), uploaded_file)

    try:
        with storage_guard("upload_document"), transaction.atomic():
            document = Document.objects.create(
                title=data["title"],
                description=data.get("description", ""),
                category=data.get("category", DocumentCategory.GENERAL),
                access_level=level,
                file_path=stored_name,
                file_name=posixpath.basename(uploaded_file.name),
                file_type=getattr(uploaded_file, "content_type", "") or "",
                file_size=uploaded_file.size,
                uploaded_by_id=principal.id,
            )
            record(
                event_type="DOCUMENT_UPLOADED",
                actor_id=principal.id,
                entity_type=EntityKind.DOCUMENT,
                entity_id=document.id,
                new_state=document_state(document),
                context=context,
            )
    except Exception:
        _delete_blob(stored_name)
        raise

    logger.info(
        "document_uploaded",
        extra={"operation": "upload_document", "entity_id": str(document.id)},
    )
    return document


def list_documents(principal, title=None, category=None):
    authorize(principal, Action.READ, EntityKind.DOCUMENT)
    queryset = _visible(principal)
    if title:
        queryset = queryset.filter(title__icontains=title)
    if category:
        if category not in DocumentCategory.values:
            raise ValidationError(
                f"Invalid category '{category}'", {"category": category}
            )
        queryset = queryset.filter(category=category)
    return queryset.order_by("-created_at")


def get_document(principal, document_id):
    """Metadata only. Unreadable and missing documents look the same."""
    authorize(principal, Action.READ, EntityKind.DOCUMENT)
    try:
        return _visible(principal).get(id=document_id)
    except Document.DoesNotExist:
        raise _not_found()


def _lock_visible(principal, document_id):
    try:
        return _visible(principal).select_for_update().get(id=document_id)
    except Document.DoesNotExist:
        raise _not_found()


def update_document(principal, document_id, data, context=None):
    """
    Update document metadata (uploader or ADMIN).

    Raises:
        NotFoundError: Missing or unreadable for the caller
        PermissionDeniedError: Not the uploader
        ValidationError: New access level above the caller's
    """
    with storage_guard("update_document"), transaction.atomic():
        document = _lock_visible(principal, document_id)
        authorize(
            principal,
            Action.UPDATE,
            EntityKind.DOCUMENT,
            is_owner=principal.owns(document.uploaded_by_id),
        )
        if "access_level" in data:
            _check_level_allowed(principal, data["access_level"])
        if "title" in data and not (data["title"] or "").strip():
            raise ValidationError("Title must be non-empty")

        previous = document_state(document)
        changed = [field for field in UPDATABLE_FIELDS if field in data]
        for field in changed:
            setattr(document, field, data[field])
        if changed:
            document.save(update_fields=changed + ["updated_at"])

        record(
            event_type="DOCUMENT_UPDATED",
            actor_id=principal.id,
            entity_type=EntityKind.DOCUMENT,
            entity_id=document.id,
            previous_state=previous,
            new_state=document_state(document),
            context=context,
        )

    return document


def delete_document(principal, document_id, context=None):
    with storage_guard("delete_document"), transaction.atomic():
        document = _lock_visible(principal, document_id)
        authorize(
            principal,
            Action.DELETE,
            EntityKind.DOCUMENT,
            is_owner=principal.owns(document.uploaded_by_id),
        )

        previous = document_state(document)
        file_path = document.file_path
        document.delete()

        record(
            event_type="DOCUMENT_DELETED",
            actor_id=principal.id,
            entity_type=EntityKind.DOCUMENT,
            entity_id=document_id,
            previous_state=previous,
            context=context,
        )
        transaction.on_commit(lambda: _delete_blob(file_path))

    logger.info(
        "document_deleted",
        extra={"operation": "delete_document", "entity_id": str(document_id)},
    )


def download_document(principal, document_id):
    """
    Open a document's blob for streaming and count the download.

    Returns:
        tuple: (Document, open file object)

    Raises:
        NotFoundError: Missing, unreadable, or blob gone from storage
    """
    document = get_document(principal, document_id)

    if not default_storage.exists(document.file_path):
        logger.warning(
            "document_blob_missing",
            extra={"entity_id": str(document.id), "file_path": document.file_path},
        )
        raise NotFoundError("Document file not found")

    handle = default_storage.open(document.file_path, "rb")
    try:
        with storage_guard("download_document"):
            Document.objects.filter(id=document.id).update(
                download_count=F("download_count") + 1
            )
    except Exception:
        handle.close()
        raise
    return document, handle


def categories():
    return [{"value": value, "label": label} for value, label in DocumentCategory.choices]


def document_counts():
    return {
        "totalDocuments": Document.objects.count(),
        "publicDocuments": Document.objects.filter(
            access_level=AccessLevel.PUBLIC
        ).count(),
        "memberDocuments": Document.objects.filter(
            access_level=AccessLevel.MEMBER
        ).count(),
    }
