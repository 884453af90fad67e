from django.urls import path
from apps.discussions import views

app_name = "discussions"

urlpatterns = [
    path("", views.list_or_create_discussions, name="list-or-create"),
    path("replies/<uuid:replyId>", views.reply_detail, name="reply-detail"),
    path("<uuid:discussionId>", views.discussion_detail, name="discussion-detail"),
    path(
        "<uuid:discussionId>/replies",
        views.list_or_add_replies,
        name="replies",
    ),
]
