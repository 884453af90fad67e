"""
URL routing for event endpoints.
"""

from django.urls import path
from apps.events import views

app_name = "events"

urlpatterns = [
    path("", views.list_or_create_events, name="list-or-create-events"),
    path("registrations/me", views.my_registrations, name="my-registrations"),
    path(
        "registrations/<uuid:registrationId>/status",
        views.update_registration_status,
        name="registration-status",
    ),
    path("<uuid:eventId>", views.event_detail, name="event-detail"),
    path("<uuid:eventId>/register", views.register, name="register"),
    path("<uuid:eventId>/unregister", views.unregister, name="unregister"),
    path("<uuid:eventId>/participants", views.participants, name="participants"),
]
