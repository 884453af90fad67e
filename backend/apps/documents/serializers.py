from rest_framework import serializers

from apps.documents.models import AccessLevel, Document, DocumentCategory


class DocumentSerializer(serializers.ModelSerializer):
    accessLevel = serializers.CharField(source="access_level", read_only=True)
    fileName = serializers.CharField(source="file_name", read_only=True)
    fileType = serializers.CharField(source="file_type", read_only=True)
    fileSize = serializers.IntegerField(source="file_size", read_only=True)
    downloadCount = serializers.IntegerField(source="download_count", read_only=True)
    uploadedBy = serializers.UUIDField(
        source="uploaded_by_id", read_only=True, allow_null=True
    )
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)
    updatedAt = serializers.DateTimeField(source="updated_at", read_only=True)

    class Meta:
        model = Document
        fields = [
            "id",
            "title",
            "description",
            "category",
            "accessLevel",
            "fileName",
            "fileType",
            "fileSize",
            "downloadCount",
            "uploadedBy",
            "createdAt",
            "updatedAt",
        ]


class DocumentWriteSerializer(serializers.Serializer):
    title = serializers.CharField(max_length=255)
    description = serializers.CharField(required=False, allow_blank=True)
    category = serializers.ChoiceField(
        choices=DocumentCategory.choices, required=False
    )
    accessLevel = serializers.ChoiceField(
        source="access_level", choices=AccessLevel.choices, required=False
    )
