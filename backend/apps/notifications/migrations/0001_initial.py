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
            name="Notification",
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
                ("message", models.CharField(max_length=500)),
                (
                    "type",
                    models.CharField(
                        choices=[
                            ("REGISTRATION_CONFIRMED", "Registration Confirmed"),
                            (
                                "REGISTRATION_STATUS_CHANGED",
                                "Registration Status Changed",
                            ),
                            ("REGISTRATION_CANCELLED", "Registration Cancelled"),
                            ("GENERAL", "General"),
                        ],
                        default="GENERAL",
                        max_length=50,
                    ),
                ),
                (
                    "related_entity_id",
                    models.CharField(blank=True, max_length=64, null=True),
                ),
                ("is_read", models.BooleanField(default=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "user",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="notifications",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "db_table": "notifications",
                "ordering": ["-created_at"],
            },
        ),
        migrations.AddIndex(
            model_name="notification",
            index=models.Index(
                fields=["user", "is_read"], name="idx_notification_user_read"
            ),
        ),
    ]
