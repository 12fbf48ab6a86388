"""
Publications component - drafts, submission, review and soft deletion.
"""

from .component import PublicationLifecycleManager
from .models import (
    AddImageInput,
    CreatePublicationInput,
    PublicationFields,
    ReviewDecisionInput,
    SubmitForReviewInput,
    UpdatePublicationInput,
    UpsertDraftInput,
    UpsertDraftOutput,
)

__all__ = [
    "PublicationLifecycleManager",
    # Models
    "PublicationFields",
    "CreatePublicationInput",
    "UpsertDraftInput",
    "UpsertDraftOutput",
    "SubmitForReviewInput",
    "UpdatePublicationInput",
    "ReviewDecisionInput",
    "AddImageInput",
]
