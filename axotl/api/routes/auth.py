from typing import Any

from fastapi import APIRouter, Depends, Response, status

from axotl.api.deps import get_account_service, get_identity
from axotl.api.schemas import LoginRequest, RegisterRequest, envelope
from axotl.components.auth import AccountService, AuthOutput, Identity, LoginInput, RegisterInput

router = APIRouter()


def _auth_payload(response: Response, out: AuthOutput, max_age: int) -> dict[str, Any]:
    response.set_cookie(
        key="access_token",
        value=f"Bearer {out.token}",
        httponly=True,
        max_age=max_age,
        samesite="lax",
        secure=False,  # Set to True for HTTPS prod
    )
    return {
        "user": out.user.model_dump(mode="json"),
        "access_token": out.token,
        "token_type": "bearer",
    }


@router.post("/register", status_code=status.HTTP_201_CREATED)
def register(
    body: RegisterRequest,
    response: Response,
    accounts: AccountService = Depends(get_account_service),
) -> dict[str, Any]:
    out = accounts.register(RegisterInput(email=body.email, password=body.password))
    ttl = accounts.rules.token_ttl_minutes * 60
    return envelope("Usuario registrado exitosamente", _auth_payload(response, out, ttl))


@router.post("/login")
def login(
    body: LoginRequest,
    response: Response,
    accounts: AccountService = Depends(get_account_service),
) -> dict[str, Any]:
    out = accounts.login(LoginInput(email=body.email, password=body.password))
    ttl = accounts.rules.token_ttl_minutes * 60
    return envelope("Inicio de sesión exitoso", _auth_payload(response, out, ttl))


@router.post("/logout")
def logout(response: Response) -> dict[str, Any]:
    response.delete_cookie(key="access_token")
    return envelope("Sesión cerrada")


@router.get("/me")
def read_me(
    identity: Identity = Depends(get_identity),
    accounts: AccountService = Depends(get_account_service),
) -> dict[str, Any]:
    user = accounts.get_user(identity.user_id)
    return envelope("Usuario actual", user.model_dump(mode="json"))
