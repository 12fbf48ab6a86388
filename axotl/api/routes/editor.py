"""
Author-facing publication endpoints.

Writes are multipart forms so the cover image travels with the fields.
Omitted fields keep their stored value.
"""

from typing import Any

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status

from axotl.api.deps import get_identity, get_lifecycle
from axotl.api.schemas import envelope, read_upload
from axotl.components.auth import Identity
from axotl.components.publications import (
    AddImageInput,
    CreatePublicationInput,
    PublicationFields,
    PublicationLifecycleManager,
    SubmitForReviewInput,
    UpdatePublicationInput,
    UpsertDraftInput,
)
from axotl.domain.entities import PublicationState
from axotl.domain.errors import ValidationError

router = APIRouter()


def _fields(
    title: str | None = Form(default=None),
    summary: str | None = Form(default=None),
    content: str | None = Form(default=None),
    references: str | None = Form(default=None),
    is_private: bool | None = Form(default=None),
) -> PublicationFields:
    return PublicationFields(
        title=title,
        summary=summary,
        content=content,
        references=references,
        is_private=is_private,
    )


# --- Writes ---
@router.post("/publications", status_code=status.HTTP_201_CREATED)
def create_publication(
    fields: PublicationFields = Depends(_fields),
    type_id: int | None = Form(default=None),
    submit: bool = Form(default=False),
    cover_image: UploadFile | None = File(default=None),
    identity: Identity = Depends(get_identity),
    lifecycle: PublicationLifecycleManager = Depends(get_lifecycle),
) -> dict[str, Any]:
    publication = lifecycle.create(
        CreatePublicationInput(
            owner_id=identity.user_id,
            type_id=type_id,
            fields=fields,
            submit=submit,
            cover=read_upload(cover_image),
        )
    )
    return envelope("Publicación creada exitosamente", publication.model_dump(mode="json"))


@router.post("/drafts")
def upsert_draft(
    fields: PublicationFields = Depends(_fields),
    type_id: int | None = Form(default=None),
    draft_id: int | None = Form(default=None),
    cover_image: UploadFile | None = File(default=None),
    identity: Identity = Depends(get_identity),
    lifecycle: PublicationLifecycleManager = Depends(get_lifecycle),
) -> dict[str, Any]:
    result = lifecycle.upsert_draft(
        UpsertDraftInput(
            caller_id=identity.user_id,
            type_id=type_id,
            fields=fields,
            draft_id=draft_id,
            cover=read_upload(cover_image),
        )
    )
    message = "Borrador creado exitosamente" if result.created else "Borrador guardado exitosamente"
    data = result.publication.model_dump(mode="json")
    data["created"] = result.created
    return envelope(message, data)


@router.post("/publications/{publication_id}/submit")
def submit_for_review(
    publication_id: int,
    fields: PublicationFields = Depends(_fields),
    type_id: int | None = Form(default=None),
    cover_image: UploadFile | None = File(default=None),
    identity: Identity = Depends(get_identity),
    lifecycle: PublicationLifecycleManager = Depends(get_lifecycle),
) -> dict[str, Any]:
    publication = lifecycle.submit_for_review(
        SubmitForReviewInput(
            caller_id=identity.user_id,
            publication_id=publication_id,
            fields=fields,
            type_id=type_id,
            cover=read_upload(cover_image),
        )
    )
    return envelope("Publicación enviada a revisión", publication.model_dump(mode="json"))


@router.put("/publications/{publication_id}")
def update_publication(
    publication_id: int,
    fields: PublicationFields = Depends(_fields),
    type_id: int | None = Form(default=None),
    state: PublicationState | None = Form(default=None),
    cover_image: UploadFile | None = File(default=None),
    identity: Identity = Depends(get_identity),
    lifecycle: PublicationLifecycleManager = Depends(get_lifecycle),
) -> dict[str, Any]:
    publication = lifecycle.update(
        UpdatePublicationInput(
            caller_id=identity.user_id,
            publication_id=publication_id,
            type_id=type_id,
            fields=fields,
            state=state,
            cover=read_upload(cover_image),
        )
    )
    return envelope("Publicación actualizada exitosamente", publication.model_dump(mode="json"))


@router.delete("/publications/{publication_id}")
def delete_publication(
    publication_id: int,
    identity: Identity = Depends(get_identity),
    lifecycle: PublicationLifecycleManager = Depends(get_lifecycle),
) -> dict[str, Any]:
    lifecycle.soft_delete(identity.user_id, publication_id)
    return envelope("Publicación eliminada exitosamente")


# --- Reads ---
@router.get("/publications")
def list_own_publications(
    state: PublicationState | None = Query(default=None),
    identity: Identity = Depends(get_identity),
    lifecycle: PublicationLifecycleManager = Depends(get_lifecycle),
) -> dict[str, Any]:
    items = lifecycle.list_for_owner(identity.user_id, state)
    return envelope("Publicaciones obtenidas exitosamente", [p.model_dump(mode="json") for p in items])


@router.get("/publications/{publication_id}")
def get_publication(
    publication_id: int,
    identity: Identity = Depends(get_identity),
    lifecycle: PublicationLifecycleManager = Depends(get_lifecycle),
) -> dict[str, Any]:
    view = lifecycle.get_for_editor(identity.user_id, publication_id)
    return envelope("Publicación obtenida exitosamente", view.model_dump(mode="json"))


@router.get("/next-id")
def next_publication_id(
    identity: Identity = Depends(get_identity),
    lifecycle: PublicationLifecycleManager = Depends(get_lifecycle),
) -> dict[str, Any]:
    return envelope("Siguiente identificador", {"nextId": lifecycle.next_publication_id()})


# --- Body images ---
@router.post("/publications/{publication_id}/images", status_code=status.HTTP_201_CREATED)
def add_image(
    publication_id: int,
    image: UploadFile = File(...),
    description: str = Form(default=""),
    identity: Identity = Depends(get_identity),
    lifecycle: PublicationLifecycleManager = Depends(get_lifecycle),
) -> dict[str, Any]:
    upload = read_upload(image)
    if upload is None:
        raise ValidationError("Se requiere una imagen", field="image")
    stored = lifecycle.add_image(
        AddImageInput(
            caller_id=identity.user_id,
            publication_id=publication_id,
            image=upload,
            description=description,
        )
    )
    return envelope("Imagen agregada exitosamente", stored.model_dump(mode="json"))


@router.delete("/publications/{publication_id}/images/{image_id}")
def delete_image(
    publication_id: int,
    image_id: int,
    identity: Identity = Depends(get_identity),
    lifecycle: PublicationLifecycleManager = Depends(get_lifecycle),
) -> dict[str, Any]:
    lifecycle.delete_image(identity.user_id, publication_id, image_id)
    return envelope("Imagen eliminada exitosamente")
