from typing import Any

from fastapi import APIRouter, Depends

from axotl.api.deps import get_identity, get_lifecycle
from axotl.api.schemas import ReviewRequest, envelope
from axotl.components.auth import Identity
from axotl.components.publications import PublicationLifecycleManager, ReviewDecisionInput

router = APIRouter()


@router.get("/publications/pending")
def list_pending(
    identity: Identity = Depends(get_identity),
    lifecycle: PublicationLifecycleManager = Depends(get_lifecycle),
) -> dict[str, Any]:
    items = lifecycle.list_pending_review(identity.user_id)
    return envelope("Publicaciones en revisión", [p.model_dump(mode="json") for p in items])


@router.post("/publications/{publication_id}/review")
def review_publication(
    publication_id: int,
    body: ReviewRequest,
    identity: Identity = Depends(get_identity),
    lifecycle: PublicationLifecycleManager = Depends(get_lifecycle),
) -> dict[str, Any]:
    publication = lifecycle.review(
        ReviewDecisionInput(
            reviewer_id=identity.user_id,
            publication_id=publication_id,
            decision=body.decision,
            review_comment=body.review_comment,
        )
    )
    return envelope("Publicación revisada exitosamente", publication.model_dump(mode="json"))
