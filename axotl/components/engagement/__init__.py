"""
Engagement component - favorites and comments.
"""

from .component import EngagementService
from .models import AddCommentInput, FavoriteToggleResult

__all__ = [
    "EngagementService",
    "AddCommentInput",
    "FavoriteToggleResult",
]
