from fastapi import APIRouter, Depends, Query
from fastapi.responses import StreamingResponse

from axotl.api.deps import get_renderer
from axotl.components.render import DocumentRenderer, RenderDocumentInput

router = APIRouter()


@router.get("/{publication_id}")
def download_publication(
    publication_id: int,
    view: bool = Query(default=False, description="Show inline instead of downloading"),
    renderer: DocumentRenderer = Depends(get_renderer),
) -> StreamingResponse:
    document = renderer.render(RenderDocumentInput(publication_id=publication_id, view=view))
    return StreamingResponse(
        document.chunks,
        media_type=document.media_type,
        headers={"Content-Disposition": document.content_disposition},
    )
