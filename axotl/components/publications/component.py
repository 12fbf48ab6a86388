"""
Publication component - lifecycle of a publication from draft to decision.

Invariants:
- Only transitions in the state table are accepted; owner and reviewer
  transitions are kept apart.
- A draft is always private.
- The owner never changes after creation.
- Multi-step writes run in one gateway transaction. A cover file written
  for a failed write is removed; a superseded cover is removed only after
  the commit, and failing to remove it never fails the request.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any, TypeVar, cast

from axotl.components.notifications import NotificationDispatcher
from axotl.domain.entities import (
    Publication,
    PublicationImage,
    PublicationState,
    PublicationType,
    PublicationView,
    ReviewDecision,
)
from axotl.domain.errors import (
    AxotlError,
    ForbiddenError,
    InternalError,
    InvalidTransitionError,
    NotFoundError,
    ValidationError,
)
from axotl.domain.policy import PolicyEngine
from axotl.domain.state import check_transition, is_publicly_visible, transition
from axotl.domain.uploads import UploadedFile
from axotl.rules.models import ImagesRules
from axotl.services.images import ImageUploadService

from .models import (
    AddImageInput,
    CreatePublicationInput,
    ReviewDecisionInput,
    SubmitForReviewInput,
    UpdatePublicationInput,
    UpsertDraftInput,
    UpsertDraftOutput,
)
from .ports import (
    ClockPort,
    GatewayPort,
    PublicationImageRepoPort,
    PublicationRepoPort,
    PublicationTypeRepoPort,
    RoleCapabilityPort,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

REVIEW_CAPABILITY = "publications:review"
READ_ANY_CAPABILITY = "publications:read_any"

COVER_FOLDER = "portadas"
BODY_IMAGE_FOLDER = "publicaciones"


class PublicationLifecycleManager:
    def __init__(
        self,
        gateway: GatewayPort,
        publications: PublicationRepoPort,
        types: PublicationTypeRepoPort,
        images: PublicationImageRepoPort,
        uploads: ImageUploadService,
        notifier: NotificationDispatcher,
        roles: RoleCapabilityPort,
        policy: PolicyEngine,
        images_rules: ImagesRules,
        clock: ClockPort,
    ):
        self.gateway = gateway
        self.publications = publications
        self.types = types
        self.images = images
        self.uploads = uploads
        self.notifier = notifier
        self.roles = roles
        self.policy = policy
        self.images_rules = images_rules
        self.clock = clock

    # --- Writes ---

    def create(self, inp: CreatePublicationInput) -> Publication:
        """Create a draft, or a submission already under review when inp.submit is set."""
        type_id = self._require_type(inp.type_id)
        state: PublicationState = "en_revision" if inp.submit else "borrador"
        is_private = self._resolve_privacy(state, inp.fields.is_private, current=True)
        new_cover = self._store_cover(inp.cover)

        now = self.clock.now()
        data: dict[str, Any] = {**inp.fields.updates(), "is_private": is_private}
        publication = Publication(
            owner_id=inp.owner_id,
            type_id=type_id,
            state=state,
            cover_image_path=new_cover,
            created_at=now,
            updated_at=now,
            **data,
        )

        created = self._commit(lambda: (self.publications.insert(publication), None), new_cover)
        logger.info("Publication %s created by user %s as %s", created.id, inp.owner_id, state)
        return created

    def upsert_draft(self, inp: UpsertDraftInput) -> UpsertDraftOutput:
        """
        Save a draft.

        Without a draft_id the server assigns one. With a draft_id greater
        than the current maximum id a new row is inserted under that id;
        otherwise the caller's existing draft with that id is updated.
        The max read and the write share one write transaction.
        """
        type_id = self._require_type(inp.type_id)
        self._resolve_privacy("borrador", inp.fields.is_private, current=True)
        new_cover = self._store_cover(inp.cover)

        def write() -> tuple[UpsertDraftOutput, str | None]:
            now = self.clock.now()
            last_id = self.publications.max_id() or 0
            if inp.draft_id is None or inp.draft_id > last_id:
                data: dict[str, Any] = {**inp.fields.updates(), "is_private": True}
                draft = Publication(
                    id=inp.draft_id,
                    owner_id=inp.caller_id,
                    type_id=type_id,
                    state="borrador",
                    cover_image_path=new_cover,
                    created_at=now,
                    updated_at=now,
                    **data,
                )
                return UpsertDraftOutput(self.publications.insert(draft), created=True), None

            existing = self.publications.get_by_id(inp.draft_id)
            if (
                existing is None
                or existing.deleted
                or existing.state != "borrador"
                or not self.policy.owns(inp.caller_id, existing)
            ):
                raise NotFoundError(
                    "Borrador no encontrado o no pertenece al usuario", code="draft_not_found"
                )

            updates: dict[str, Any] = {**inp.fields.updates(), "type_id": type_id}
            if new_cover:
                updates["cover_image_path"] = new_cover
            updated = existing.model_copy(update=updates)
            if updated != existing:
                updated = updated.model_copy(update={"updated_at": now})
                self.publications.update(updated)
            superseded = existing.cover_image_path if new_cover else None
            return UpsertDraftOutput(updated, created=False), superseded

        result = self._commit(write, new_cover)
        logger.info(
            "Draft %s %s by user %s",
            result.publication.id,
            "created" if result.created else "saved",
            inp.caller_id,
        )
        return result

    def submit_for_review(self, inp: SubmitForReviewInput) -> Publication:
        existing = self._owned(inp.caller_id, inp.publication_id)
        if existing.state not in ("borrador", "rechazado"):
            raise InvalidTransitionError(
                existing.state, "en_revision", "only drafts or rejected publications can be submitted"
            )
        check_transition(existing.state, "en_revision", "owner")
        type_id = self._require_type(inp.type_id) if inp.type_id is not None else existing.type_id

        self._require_cover(inp.cover, existing)
        new_cover = self._store_cover(inp.cover)

        def write() -> tuple[Publication, str | None]:
            updates: dict[str, Any] = {**inp.fields.updates(), "type_id": type_id}
            if new_cover:
                updates["cover_image_path"] = new_cover
            submitted = transition(
                existing.model_copy(update=updates), "en_revision", self.clock.now(), "owner"
            )
            self.publications.update(submitted)
            return submitted, existing.cover_image_path if new_cover else None

        submitted = self._commit(write, new_cover)
        logger.info("Publication %s submitted for review", submitted.id)
        return submitted

    def update(self, inp: UpdatePublicationInput) -> Publication:
        type_id = self._require_type(inp.type_id)
        existing = self._owned(inp.caller_id, inp.publication_id)

        target: PublicationState = inp.state or existing.state
        check_transition(existing.state, target, "owner")
        if target == "en_revision" and target != existing.state:
            self._require_cover(inp.cover, existing)
        is_private = self._resolve_privacy(target, inp.fields.is_private, existing.is_private)
        new_cover = self._store_cover(inp.cover)

        def write() -> tuple[Publication, str | None]:
            now = self.clock.now()
            updates: dict[str, Any] = {
                **inp.fields.updates(),
                "type_id": type_id,
                "is_private": is_private,
                "updated_at": now,
            }
            if new_cover:
                updates["cover_image_path"] = new_cover
            updated = existing.model_copy(update=updates)
            if target != existing.state:
                updated = transition(updated, target, now, "owner")
            self.publications.update(updated)
            return updated, existing.cover_image_path if new_cover else None

        updated = self._commit(write, new_cover)
        logger.info("Publication %s updated by owner", updated.id)
        return updated

    def review(self, inp: ReviewDecisionInput) -> Publication:
        """Approve or reject a publication under review and notify its owner."""
        if inp.decision not in ("publicado", "rechazado"):
            raise ValidationError(
                "La decisión debe ser 'publicado' o 'rechazado'",
                field="decision",
                code="invalid_decision",
            )
        decision = cast(ReviewDecision, inp.decision)

        if not self.roles.has_role(inp.reviewer_id, self.policy.roles_for(REVIEW_CAPABILITY)):
            raise ForbiddenError("No tienes permiso para revisar publicaciones")

        existing = self._live(inp.publication_id)
        if existing.state != "en_revision":
            raise InvalidTransitionError(
                existing.state, decision, "only publications under review can be decided"
            )

        def write() -> tuple[Publication, str | None]:
            reviewed = transition(existing, decision, self.clock.now(), "reviewer").model_copy(
                update={"review_comment": inp.review_comment, "reviewer_id": inp.reviewer_id}
            )
            self.publications.update(reviewed)
            self.notifier.notify_review_decision(existing.id or 0, inp.reviewer_id, decision)
            return reviewed, None

        reviewed = self._commit(write, None)
        logger.info(
            "Publication %s %s by reviewer %s", reviewed.id, decision, inp.reviewer_id
        )
        return reviewed

    def soft_delete(self, caller_id: int, publication_id: int) -> Publication:
        existing = self._owned(caller_id, publication_id)
        now = self.clock.now()
        deleted = existing.model_copy(update={"deleted": True, "deleted_at": now, "updated_at": now})
        self.publications.update(deleted)
        logger.info("Publication %s soft-deleted by owner", publication_id)
        return deleted

    # --- Body images ---

    def add_image(self, inp: AddImageInput) -> PublicationImage:
        self._owned(inp.caller_id, inp.publication_id)
        path = self.uploads.store(inp.image, self.images_rules.body, BODY_IMAGE_FOLDER)
        image = PublicationImage(
            publication_id=inp.publication_id, url=path, description=inp.description
        )
        return self._commit(lambda: (self.images.add(image), None), path)

    def delete_image(self, caller_id: int, publication_id: int, image_id: int) -> None:
        self._owned(caller_id, publication_id)
        image = self.images.get(publication_id, image_id)
        if image is None:
            raise NotFoundError("Imagen no encontrada", code="image_not_found")
        self.images.delete(image_id)
        self.uploads.discard(image.url)

    def list_images(self, publication_id: int) -> list[PublicationImage]:
        return self.images.list_for_publication(publication_id)

    # --- Reads ---

    def get_public(self, publication_id: int) -> PublicationView:
        view = self.publications.get_view(publication_id, public_only=True)
        if view is None:
            raise NotFoundError("Publicación no encontrada", code="publication_not_found")
        return view

    def list_recent(self, limit: int = 10) -> list[PublicationView]:
        return self.publications.list_public(limit)

    def list_published_by_owner(self, owner_id: int) -> list[Publication]:
        return [
            p
            for p in self.publications.list_by_owner(owner_id, "publicado")
            if is_publicly_visible(p)
        ]

    def list_for_owner(
        self, caller_id: int, state: PublicationState | None = None
    ) -> list[Publication]:
        return self.publications.list_by_owner(caller_id, state)

    def get_for_editor(self, caller_id: int, publication_id: int) -> PublicationView:
        """Owner or reviewer view; ignores is_private but never shows deleted rows."""
        view = self.publications.get_view(publication_id, public_only=False)
        if view is None:
            raise NotFoundError("Publicación no encontrada", code="publication_not_found")
        if not self.policy.owns(caller_id, view) and not self.roles.has_role(
            caller_id, self.policy.roles_for(READ_ANY_CAPABILITY)
        ):
            raise ForbiddenError("No tienes permiso para ver esta publicación")
        return view

    def list_pending_review(self, caller_id: int) -> list[PublicationView]:
        if not self.roles.has_role(caller_id, self.policy.roles_for(REVIEW_CAPABILITY)):
            raise ForbiddenError("No tienes permiso para revisar publicaciones")
        return self.publications.list_by_state("en_revision")

    def list_types(self) -> list[PublicationType]:
        return self.types.list_all()

    def next_publication_id(self) -> int:
        return (self.publications.max_id() or 0) + 1

    # --- Helpers ---

    def _require_type(self, type_id: int | None) -> int:
        if type_id is None:
            raise ValidationError(
                "El campo id_tipo es obligatorio", field="type_id", code="missing_type"
            )
        if self.types.get_by_id(type_id) is None:
            raise ValidationError(
                f"Tipo de publicación {type_id} no existe", field="type_id", code="unknown_type"
            )
        return type_id

    @staticmethod
    def _resolve_privacy(state: PublicationState, requested: bool | None, current: bool) -> bool:
        if state == "borrador":
            if requested is False:
                raise ValidationError(
                    "Un borrador siempre es privado",
                    field="is_private",
                    code="draft_must_be_private",
                )
            return True
        return current if requested is None else requested

    def _live(self, publication_id: int) -> Publication:
        publication = self.publications.get_by_id(publication_id)
        if publication is None or publication.deleted:
            raise NotFoundError("Publicación no encontrada", code="publication_not_found")
        return publication

    def _owned(self, caller_id: int, publication_id: int) -> Publication:
        publication = self._live(publication_id)
        if not self.policy.owns(caller_id, publication):
            raise ForbiddenError("No tienes permiso para modificar esta publicación")
        return publication

    @staticmethod
    def _require_cover(upload: UploadedFile | None, existing: Publication) -> None:
        if upload is None and not existing.cover_image_path:
            raise ValidationError(
                "Se requiere una imagen de portada",
                field="cover_image",
                code="cover_image_required",
            )

    def _store_cover(self, upload: UploadedFile | None) -> str | None:
        if upload is None:
            return None
        return self.uploads.store(
            upload, self.images_rules.cover, COVER_FOLDER, field="cover_image"
        )

    def _commit(self, write: Callable[[], tuple[T, str | None]], new_file: str | None) -> T:
        """
        Run write() in one transaction.

        write returns (result, superseded_file). On failure new_file is
        removed; on success superseded_file is removed.
        """
        try:
            with self.gateway.transaction():
                result, superseded = write()
        except AxotlError:
            self.uploads.discard(new_file)
            raise
        except Exception as e:
            self.uploads.discard(new_file)
            logger.exception("Publication write failed, transaction rolled back")
            raise InternalError("No se pudo completar la operación", detail=str(e)) from e

        if superseded and superseded != new_file:
            self.uploads.discard(superseded)
        return result
