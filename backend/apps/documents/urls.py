from django.urls import path
from apps.documents import views

app_name = "documents"

urlpatterns = [
    path("", views.list_or_upload_documents, name="list-or-upload"),
    path("categories", views.list_categories, name="categories"),
    path("<uuid:documentId>", views.document_detail, name="document-detail"),
    path("<uuid:documentId>/download", views.download_document, name="download"),
]
