"""
URL routing for administrative endpoints (/api/v1/admin/...).
"""

from django.urls import path

from apps.dashboard import views as dashboard_views
from apps.users import views

app_name = "administration"

urlpatterns = [
    path("users", views.list_users, name="list-users"),
    path("users/<uuid:userId>", views.user_detail, name="user-detail"),
    path("users/<uuid:userId>/role", views.update_user_role, name="user-role"),
    path("dashboard", dashboard_views.get_dashboard, name="dashboard"),
]
