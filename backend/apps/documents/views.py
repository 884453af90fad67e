"""
Document views: upload, browse, download.

Anonymous callers may browse and download PUBLIC documents.
"""

from django.http import FileResponse
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response

from apps.audit.context import AuditContext
from apps.documents import services
from apps.documents.serializers import DocumentSerializer, DocumentWriteSerializer
from core.pagination import paginated_response
from core.permissions import IsMemberOrPublicRead
from core.principal import Principal


@api_view(["GET", "POST"])
@permission_classes([IsMemberOrPublicRead])
def list_or_upload_documents(request):
    """
    GET /api/v1/documents?title=&category=
    POST /api/v1/documents (multipart: file + metadata)
    """
    principal = Principal.from_request(request)

    if request.method == "GET":
        queryset = services.list_documents(
            principal,
            title=request.query_params.get("title"),
            category=request.query_params.get("category"),
        )
        return paginated_response(request, queryset, DocumentSerializer)

    serializer = DocumentWriteSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    document = services.upload_document(
        principal,
        serializer.validated_data,
        request.FILES.get("file"),
        context=AuditContext.from_request(request),
    )
    return Response(
        {"data": DocumentSerializer(document).data}, status=status.HTTP_201_CREATED
    )


@api_view(["GET", "PUT", "PATCH", "DELETE"])
@permission_classes([IsMemberOrPublicRead])
def document_detail(request, documentId):
    """
    GET/PUT/PATCH/DELETE /api/v1/documents/{documentId}
    """
    principal = Principal.from_request(request)

    if request.method == "GET":
        document = services.get_document(principal, documentId)
        return Response({"data": DocumentSerializer(document).data})

    if request.method == "DELETE":
        services.delete_document(
            principal, documentId, context=AuditContext.from_request(request)
        )
        return Response(status=status.HTTP_204_NO_CONTENT)

    serializer = DocumentWriteSerializer(data=request.data, partial=True)
    serializer.is_valid(raise_exception=True)
    document = services.update_document(
        principal,
        documentId,
        serializer.validated_data,
        context=AuditContext.from_request(request),
    )
    return Response({"data": DocumentSerializer(document).data})


@api_view(["GET"])
@permission_classes([IsMemberOrPublicRead])
def download_document(request, documentId):
    """
    GET /api/v1/documents/{documentId}/download
    """
    document, handle = services.download_document(
        Principal.from_request(request), documentId
    )
    return FileResponse(
        handle,
        as_attachment=True,
        filename=document.file_name,
        content_type=document.file_type or "application/octet-stream",
    )


@api_view(["GET"])
@permission_classes([IsMemberOrPublicRead])
def list_categories(request):
    """
    GET /api/v1/documents/categories
    """
    return Response({"data": services.categories()})
