# Volunteer opportunities and registrations, with occupancy check constraints
# and a partial unique index on active (opportunity, user) pairs.

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
            name="VolunteerOpportunity",
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
                ("requirements", models.TextField(blank=True, default="")),
                (
                    "location",
                    models.CharField(blank=True, default="", max_length=255),
                ),
                ("date_time", models.DateTimeField(blank=True, null=True)),
                (
                    "duration_hours",
                    models.PositiveIntegerField(blank=True, null=True),
                ),
                (
                    "max_volunteers",
                    models.PositiveIntegerField(blank=True, null=True),
                ),
                ("current_volunteers", models.PositiveIntegerField(default=0)),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("ACTIVE", "Active"),
                            ("FILLED", "Filled"),
                            ("COMPLETED", "Completed"),
                            ("CANCELLED", "Cancelled"),
                        ],
                        default="ACTIVE",
                        max_length=20,
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "created_by",
                    models.ForeignKey(
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="created_opportunities",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "db_table": "volunteer_opportunities",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["status"], name="idx_opportunity_status"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(current_volunteers__gte=0),
                        name="opportunity_occupancy_non_negative",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(max_volunteers__isnull=True)
                        | models.Q(max_volunteers__gte=1),
                        name="opportunity_capacity_positive",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(max_volunteers__isnull=True)
                        | models.Q(
                            current_volunteers__lte=models.F("max_volunteers")
                        ),
                        name="opportunity_occupancy_within_capacity",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="VolunteerRegistration",
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
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("REGISTERED", "Registered"),
                            ("CONFIRMED", "Confirmed"),
                            ("CANCELLED", "Cancelled"),
                            ("WAITLISTED", "Waitlisted"),
                        ],
                        default="REGISTERED",
                        max_length=20,
                    ),
                ),
                ("notes", models.TextField(blank=True, default="")),
                ("registered_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("cancelled_at", models.DateTimeField(blank=True, null=True)),
                (
                    "opportunity",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="registrations",
                        to="volunteers.volunteeropportunity",
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="volunteerregistrations",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "db_table": "volunteer_registrations",
                "ordering": ["registered_at"],
                "abstract": False,
                "indexes": [
                    models.Index(
                        fields=["opportunity", "status"],
                        name="idx_volunteer_reg_status",
                    ),
                ],
                "constraints": [
                    models.UniqueConstraint(
                        condition=models.Q(("status", "CANCELLED"), _negated=True),
                        fields=("opportunity", "user"),
                        name="uniq_active_volunteer_registration",
                    ),
                ],
            },
        ),
    ]
