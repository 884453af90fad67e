# Events and event registrations, with occupancy check constraints and a
# partial unique index on active (event, user) pairs.

import uuid
from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion


REGISTRATION_STATUS_CHOICES = [
    ("REGISTERED", "Registered"),
    ("CONFIRMED", "Confirmed"),
    ("CANCELLED", "Cancelled"),
    ("WAITLISTED", "Waitlisted"),
]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Event",
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
                ("event_date", models.DateTimeField()),
                ("end_date", models.DateTimeField(blank=True, null=True)),
                (
                    "location",
                    models.CharField(blank=True, default="", max_length=255),
                ),
                (
                    "max_participants",
                    models.PositiveIntegerField(blank=True, null=True),
                ),
                ("current_participants", models.PositiveIntegerField(default=0)),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("UPCOMING", "Upcoming"),
                            ("ONGOING", "Ongoing"),
                            ("COMPLETED", "Completed"),
                            ("CANCELLED", "Cancelled"),
                        ],
                        default="UPCOMING",
                        max_length=20,
                    ),
                ),
                (
                    "image_url",
                    models.URLField(blank=True, default="", max_length=500),
                ),
                ("registration_required", models.BooleanField(default=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "created_by",
                    models.ForeignKey(
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="created_events",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "db_table": "events",
                "ordering": ["event_date"],
                "indexes": [
                    models.Index(fields=["status"], name="idx_event_status"),
                    models.Index(fields=["event_date"], name="idx_event_date"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(current_participants__gte=0),
                        name="event_occupancy_non_negative",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(max_participants__isnull=True)
                        | models.Q(max_participants__gte=1),
                        name="event_capacity_positive",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(max_participants__isnull=True)
                        | models.Q(
                            current_participants__lte=models.F("max_participants")
                        ),
                        name="event_occupancy_within_capacity",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="EventRegistration",
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
                        choices=REGISTRATION_STATUS_CHOICES,
                        default="REGISTERED",
                        max_length=20,
                    ),
                ),
                ("notes", models.TextField(blank=True, default="")),
                ("registered_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("cancelled_at", models.DateTimeField(blank=True, null=True)),
                (
                    "event",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="registrations",
                        to="events.event",
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="eventregistrations",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "db_table": "event_registrations",
                "ordering": ["registered_at"],
                "abstract": False,
                "indexes": [
                    models.Index(
                        fields=["event", "status"], name="idx_event_reg_status"
                    ),
                ],
                "constraints": [
                    models.UniqueConstraint(
                        condition=models.Q(("status", "CANCELLED"), _negated=True),
                        fields=("event", "user"),
                        name="uniq_active_event_registration",
                    ),
                ],
            },
        ),
    ]
