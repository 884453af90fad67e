from django.urls import include, path

urlpatterns = [
    path("api/health/", include("health.urls")),
    # API v1 (base path: /api/v1)
    path("api/v1/auth/", include("apps.auth.urls")),
    path("api/v1/users/", include("apps.users.urls")),
    path("api/v1/admin/", include("apps.users.admin_urls")),
    path("api/v1/audit/", include("apps.audit.urls")),
    path("api/v1/events/", include("apps.events.urls")),
    path("api/v1/volunteers/", include("apps.volunteers.urls")),
    path("api/v1/discussions/", include("apps.discussions.urls")),
    path("api/v1/documents/", include("apps.documents.urls")),
    path("api/v1/notifications/", include("apps.notifications.urls")),
]
