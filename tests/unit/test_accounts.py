"""
Accounts with real password hashing and tokens.
"""

import io

import pytest
from PIL import Image

from axotl.components.auth import LoginInput, RegisterInput, UpdateProfilePhotoInput
from axotl.domain.errors import AuthError, ConflictError


def test_register_login_authenticate(accounts, user_repo):
    registered = accounts.register(RegisterInput(email="a@b.com", password="Abcdef12"))
    stored = user_repo.get_by_email("a@b.com")
    assert stored.password_hash != "Abcdef12"
    assert registered.user.name == "a"

    logged_in = accounts.login(LoginInput(email="a@b.com", password="Abcdef12"))
    identity = accounts.authenticate(logged_in.token)
    assert identity.user_id == registered.user.id
    assert identity.role == "registrado"


def test_wrong_password(accounts):
    accounts.register(RegisterInput(email="a@b.com", password="Abcdef12"))
    with pytest.raises(AuthError):
        accounts.login(LoginInput(email="a@b.com", password="Abcdef13"))


def test_duplicate_email(accounts):
    accounts.register(RegisterInput(email="a@b.com", password="Abcdef12"))
    with pytest.raises(ConflictError):
        accounts.register(RegisterInput(email="a@b.com", password="Abcdef12"))


def test_seeded_user_without_real_hash_cannot_log_in(accounts, make_user):
    make_user(email="seed@example.com")
    with pytest.raises(AuthError):
        accounts.login(LoginInput(email="seed@example.com", password="Abcdef12"))


def test_profile_photo_is_square(accounts, user_repo, jpeg_upload, filestore):
    user = accounts.register(RegisterInput(email="a@b.com", password="Abcdef12")).user
    updated = accounts.update_profile_photo(UpdateProfilePhotoInput(user.id, user.id, jpeg_upload))

    assert user_repo.get_by_id(user.id).profile_photo == updated.profile_photo
    assert Image.open(io.BytesIO(filestore.get(updated.profile_photo))).size == (500, 500)
