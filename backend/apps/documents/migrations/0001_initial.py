import uuid
from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Document",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4,
                        editable=False,
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                ("title", models.CharField(max_length=255)),
                ("description", models.TextField(blank=True, default="")),
                (
                    "category",
                    models.CharField(
                        choices=[
                            ("GENERAL", "General"),
                            ("MINUTES", "Minutes"),
                            ("POLICY", "Policy"),
                            ("FINANCIAL", "Financial"),
                            ("NEWSLETTER", "Newsletter"),
                            ("FORM", "Form"),
                            ("OTHER", "Other"),
                        ],
                        default="GENERAL",
                        max_length=20,
                    ),
                ),
                (
                    "access_level",
                    models.CharField(
                        choices=[
                            ("PUBLIC", "Public"),
                            ("MEMBER", "Member"),
                            ("COMMITTEE", "Committee"),
                            ("ADMIN", "Admin"),
                        ],
                        default="PUBLIC",
                        max_length=20,
                    ),
                ),
                ("file_path", models.CharField(max_length=500)),
                ("file_name", models.CharField(max_length=255)),
                (
                    "file_type",
                    models.CharField(blank=True, default="", max_length=100),
                ),
                ("file_size", models.PositiveBigIntegerField(default=0)),
                ("download_count", models.PositiveIntegerField(default=0)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "uploaded_by",
                    models.ForeignKey(
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="documents",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "db_table": "documents",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(
                        fields=["access_level"], name="idx_document_access"
                    ),
                    models.Index(fields=["category"], name="idx_document_category"),
                ],
            },
        ),
    ]
