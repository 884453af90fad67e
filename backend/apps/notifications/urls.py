from django.urls import path
from apps.notifications import views

app_name = "notifications"

urlpatterns = [
    path("", views.list_notifications, name="list-notifications"),
    path("unread-count", views.unread_count, name="unread-count"),
    path("read-all", views.mark_all_read, name="mark-all-read"),
    path("<uuid:notificationId>/read", views.mark_read, name="mark-read"),
    path(
        "<uuid:notificationId>",
        views.delete_notification,
        name="delete-notification",
    ),
]
