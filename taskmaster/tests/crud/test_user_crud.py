#tests/crud/test_user_crud.py
import pytest
from sqlalchemy.orm import Session

from taskmaster.core import security
from taskmaster.core.exceptions import ConflictError, UserNotFound, ValidationError
from taskmaster.crud.user import (
    authenticate_user,
    change_password,
    create_user,
    deactivate_user,
    get_user_by_email,
    get_user_or_404,
    get_users,
    update_profile,
)
from taskmaster.initial_data import create_initial_admin_user
from taskmaster.core.settings import settings
from taskmaster.models.user import User as UserModel


def test_create_user_normalizes_email_and_hashes_password(db: Session):
    user = create_user(db, {
        "first_name": "Dana",
        "last_name": "Doe",
        "email": "  Dana@Example.COM ",
        "password": "secret123",
    })
    assert user.email == "dana@example.com"
    assert user.password_hash != "secret123"
    assert security.verify_password("secret123", user.password_hash)
    assert user.role == "user"
    assert user.is_active
    assert user.full_name == "Dana Doe"

def test_duplicate_email_conflict(db: Session, alice: UserModel):
    with pytest.raises(ConflictError) as exc:
        create_user(db, {"first_name": "A", "last_name": "B", "email": "ALICE@example.com", "password": "x" * 8})
    assert exc.value.message == "email already exists"

def test_authenticate(db: Session, alice: UserModel):
    assert authenticate_user(db, "alice@example.com", "password123").id == alice.id
    assert authenticate_user(db, "Alice@Example.com", "password123").id == alice.id
    assert authenticate_user(db, "alice@example.com", "wrong") is None
    assert authenticate_user(db, "ghost@example.com", "password123") is None

def test_change_password(db: Session, alice: UserModel):
    with pytest.raises(ValidationError):
        change_password(db, alice, "wrong", "newpassword")
    change_password(db, alice, "password123", "newpassword")
    assert authenticate_user(db, "alice@example.com", "newpassword") is not None
    assert authenticate_user(db, "alice@example.com", "password123") is None

def test_update_profile(db: Session, alice: UserModel):
    user = update_profile(db, alice, {"first_name": " Alicia ", "bio": "Hi", "avatar": None})
    assert user.first_name == "Alicia"
    assert user.last_name == "Anders"
    assert user.bio == "Hi"
    assert user.avatar is None

def test_deactivated_users_are_hidden(db: Session, alice: UserModel, bob: UserModel):
    deactivate_user(db, bob.id)
    users, total = get_users(db)
    assert total == 1 and users[0].id == alice.id
    with pytest.raises(UserNotFound):
        get_user_or_404(db, bob.id, active_only=True)
    assert get_user_or_404(db, bob.id).is_active is False

def test_search_users(db: Session, alice: UserModel, bob: UserModel):
    users, total = get_users(db, search="brown")
    assert total == 1 and users[0].id == bob.id

def test_initial_admin_is_created_once(db: Session, monkeypatch):
    monkeypatch.setattr(settings, "FIRST_ADMIN_EMAIL", "root@example.com")
    monkeypatch.setattr(settings, "FIRST_ADMIN_PASSWORD", "rootpassword")

    create_initial_admin_user(db)
    create_initial_admin_user(db)

    admin = get_user_by_email(db, "root@example.com")
    assert admin is not None and admin.is_admin
    assert db.query(UserModel).count() == 1

def test_initial_admin_skipped_without_settings(db: Session, monkeypatch):
    monkeypatch.setattr(settings, "FIRST_ADMIN_EMAIL", None)
    create_initial_admin_user(db)
    assert db.query(UserModel).count() == 0
