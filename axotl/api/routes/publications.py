from typing import Any

from fastapi import APIRouter, Depends, Query

from axotl.api.deps import get_lifecycle
from axotl.api.schemas import envelope
from axotl.components.publications import PublicationLifecycleManager

router = APIRouter()


@router.get("/recent")
def list_recent(
    limit: int = Query(default=10, ge=1, le=100),
    lifecycle: PublicationLifecycleManager = Depends(get_lifecycle),
) -> dict[str, Any]:
    items = lifecycle.list_recent(limit)
    return envelope(
        "Publicaciones obtenidas exitosamente", [p.model_dump(mode="json") for p in items]
    )


@router.get("/types")
def list_types(
    lifecycle: PublicationLifecycleManager = Depends(get_lifecycle),
) -> dict[str, Any]:
    return envelope(
        "Tipos de publicación", [t.model_dump(mode="json") for t in lifecycle.list_types()]
    )


@router.get("/{publication_id}")
def get_publication(
    publication_id: int,
    lifecycle: PublicationLifecycleManager = Depends(get_lifecycle),
) -> dict[str, Any]:
    view = lifecycle.get_public(publication_id)
    return envelope("Publicación obtenida exitosamente", view.model_dump(mode="json"))


@router.get("/{publication_id}/images")
def list_images(
    publication_id: int,
    lifecycle: PublicationLifecycleManager = Depends(get_lifecycle),
) -> dict[str, Any]:
    lifecycle.get_public(publication_id)
    images = lifecycle.list_images(publication_id)
    return envelope("Imágenes obtenidas", [i.model_dump(mode="json") for i in images])
