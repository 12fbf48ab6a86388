from typing import Any

from fastapi import APIRouter, Depends, status

from axotl.api.deps import get_engagement, get_identity
from axotl.api.schemas import CommentCreateRequest, envelope
from axotl.components.auth import Identity
from axotl.components.engagement import AddCommentInput, EngagementService

router = APIRouter()


# --- Favorites ---
@router.post("/publications/{publication_id}/favorite")
def toggle_favorite(
    publication_id: int,
    identity: Identity = Depends(get_identity),
    engagement: EngagementService = Depends(get_engagement),
) -> dict[str, Any]:
    result = engagement.toggle_favorite(identity.user_id, publication_id)
    message = "Publicación marcada como favorita" if result.is_favorite else "Favorito eliminado"
    return envelope(
        message, {"isFavorite": result.is_favorite, "totalFavorites": result.total_favorites}
    )


@router.get("/publications/{publication_id}/favorite")
def favorite_status(
    publication_id: int,
    identity: Identity = Depends(get_identity),
    engagement: EngagementService = Depends(get_engagement),
) -> dict[str, Any]:
    return envelope(
        "Estado de favorito",
        {
            "isFavorite": engagement.is_favorite(identity.user_id, publication_id),
            "totalFavorites": engagement.favorite_count(publication_id),
        },
    )


# --- Comments ---
@router.get("/publications/{publication_id}/comments")
def list_comments(
    publication_id: int,
    engagement: EngagementService = Depends(get_engagement),
) -> dict[str, Any]:
    comments = engagement.list_comments(publication_id)
    return envelope("Comentarios obtenidos", [c.model_dump(mode="json") for c in comments])


@router.post("/publications/{publication_id}/comments", status_code=status.HTTP_201_CREATED)
def add_comment(
    publication_id: int,
    body: CommentCreateRequest,
    identity: Identity = Depends(get_identity),
    engagement: EngagementService = Depends(get_engagement),
) -> dict[str, Any]:
    comment = engagement.add_comment(
        AddCommentInput(
            author_id=identity.user_id, publication_id=publication_id, content=body.content
        )
    )
    return envelope("Comentario creado exitosamente", comment.model_dump(mode="json"))


@router.delete("/comments/{comment_id}")
def delete_comment(
    comment_id: int,
    identity: Identity = Depends(get_identity),
    engagement: EngagementService = Depends(get_engagement),
) -> dict[str, Any]:
    engagement.delete_comment(identity.user_id, comment_id)
    return envelope("Comentario eliminado exitosamente")
