from typing import Any

from fastapi import APIRouter, Depends, File, UploadFile

from axotl.api.deps import get_account_service, get_identity, get_lifecycle
from axotl.api.schemas import ProfileUpdateRequest, RoleChangeRequest, envelope, read_upload
from axotl.components.auth import (
    AccountService,
    ChangeRoleInput,
    Identity,
    UpdateProfileInput,
    UpdateProfilePhotoInput,
)
from axotl.components.publications import PublicationLifecycleManager
from axotl.domain.errors import ValidationError

router = APIRouter()


@router.get("/{user_id}")
def get_user_profile(
    user_id: int,
    accounts: AccountService = Depends(get_account_service),
    lifecycle: PublicationLifecycleManager = Depends(get_lifecycle),
) -> dict[str, Any]:
    """Public profile with the user's published publications."""
    user = accounts.get_user(user_id)
    data = user.model_dump(mode="json", exclude={"email"})
    data["publications"] = [
        p.model_dump(mode="json") for p in lifecycle.list_published_by_owner(user_id)
    ]
    return envelope("Perfil obtenido exitosamente", data)


@router.put("/{user_id}/profile")
def update_profile(
    user_id: int,
    body: ProfileUpdateRequest,
    identity: Identity = Depends(get_identity),
    accounts: AccountService = Depends(get_account_service),
) -> dict[str, Any]:
    user = accounts.update_profile(
        UpdateProfileInput(
            caller_id=identity.user_id, user_id=user_id, name=body.name, title=body.title
        )
    )
    return envelope("Perfil actualizado exitosamente", user.model_dump(mode="json"))


@router.put("/{user_id}/photo")
def update_profile_photo(
    user_id: int,
    photo: UploadFile = File(...),
    identity: Identity = Depends(get_identity),
    accounts: AccountService = Depends(get_account_service),
) -> dict[str, Any]:
    upload = read_upload(photo)
    if upload is None:
        raise ValidationError("Se requiere una imagen", field="profile_photo")
    user = accounts.update_profile_photo(
        UpdateProfilePhotoInput(caller_id=identity.user_id, user_id=user_id, photo=upload)
    )
    return envelope("Foto de perfil actualizada", user.model_dump(mode="json"))


@router.put("/{user_id}/role")
def change_role(
    user_id: int,
    body: RoleChangeRequest,
    identity: Identity = Depends(get_identity),
    accounts: AccountService = Depends(get_account_service),
) -> dict[str, Any]:
    user = accounts.change_role(
        ChangeRoleInput(admin_id=identity.user_id, user_id=user_id, role=body.role)
    )
    return envelope("Rol actualizado exitosamente", user.model_dump(mode="json"))
