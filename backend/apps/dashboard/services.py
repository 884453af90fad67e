"""
Administrative dashboard counts.
"""

from apps.discussions.services import discussion_counts
from apps.documents.services import document_counts
from apps.events.services import event_counts
from apps.users.services import user_counts
from apps.volunteers.services import opportunity_counts
from core.authorization import Action, EntityKind, authorize


def dashboard_stats(principal):
    authorize(principal, Action.READ, EntityKind.DASHBOARD)

    stats = {}
    stats.update(user_counts())
    stats.update(event_counts())
    stats.update(discussion_counts())
    stats.update(opportunity_counts())
    stats.update(document_counts())
    return stats
