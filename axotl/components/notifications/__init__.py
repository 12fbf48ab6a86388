"""
Notifications component - in-app notifications for comments, favorites and reviews.
"""

from .component import NotificationDispatcher
from .models import (
    APPROVED_TEMPLATE,
    COMMENT_TEMPLATE,
    FAVORITE_TEMPLATE,
    REJECTED_TEMPLATE,
    ListNotificationsInput,
    NotificationPage,
    NotifyInput,
    Pagination,
)

__all__ = [
    "NotificationDispatcher",
    # Models
    "NotifyInput",
    "ListNotificationsInput",
    "NotificationPage",
    "Pagination",
    # Templates
    "COMMENT_TEMPLATE",
    "FAVORITE_TEMPLATE",
    "APPROVED_TEMPLATE",
    "REJECTED_TEMPLATE",
]
