"""
URL routing for volunteer endpoints.
"""

from django.urls import path
from apps.volunteers import views

app_name = "volunteers"

urlpatterns = [
    path("", views.list_or_create_opportunities, name="list-or-create"),
    path("registrations/me", views.my_registrations, name="my-registrations"),
    path(
        "registrations/<uuid:registrationId>/status",
        views.update_registration_status,
        name="registration-status",
    ),
    path("<uuid:opportunityId>", views.opportunity_detail, name="opportunity-detail"),
    path("<uuid:opportunityId>/register", views.register, name="register"),
    path("<uuid:opportunityId>/unregister", views.unregister, name="unregister"),
    path(
        "<uuid:opportunityId>/registrations",
        views.opportunity_registrations,
        name="opportunity-registrations",
    ),
]
