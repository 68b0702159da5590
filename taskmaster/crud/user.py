# taskmaster/crud/user.py
from datetime import datetime, timezone
from typing import List, Optional, Tuple
import logging

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from taskmaster.core.exceptions import ConflictError, UserNotFound, ValidationError
from taskmaster.core.security import get_password_hash, verify_password
from taskmaster.models.user import User

logger = logging.getLogger("TaskMaster.Users")

def normalize_email(email: str) -> str:
    return email.strip().lower()

def create_user(db: Session, data: dict) -> User:
    """
    Регистрирует пользователя. Дубликат email -> ConflictError("email").
    """
    email = normalize_email(data["email"])
    if get_user_by_email(db, email):
        raise ConflictError("email")
    user = User(
        first_name=data["first_name"].strip(),
        last_name=data["last_name"].strip(),
        email=email,
        password_hash=get_password_hash(data["password"]),
        role=data.get("role", "user"),
        is_active=data.get("is_active", True),
        bio=data.get("bio") or "",
        avatar=data.get("avatar"),
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError as e:
        # Параллельная регистрация с тем же email
        db.rollback()
        logger.warning(f"Integrity error while creating user {email}: {e}")
        raise ConflictError("email")
    db.refresh(user)
    logger.info(f"Created user {user.id} ({user.email})")
    return user

def get_user(db: Session, user_id: int) -> Optional[User]:
    return db.query(User).filter(User.id == user_id).first()

def get_user_or_404(db: Session, user_id: int, active_only: bool = False) -> User:
    user = get_user(db, user_id)
    if user is None or (active_only and not user.is_active):
        raise UserNotFound()
    return user

def get_user_by_email(db: Session, email: str) -> Optional[User]:
    return db.query(User).filter(User.email == normalize_email(email)).first()

def authenticate_user(db: Session, email: str, password: str) -> Optional[User]:
    user = get_user_by_email(db, email)
    if not user or not verify_password(password, user.password_hash):
        return None
    return user

def set_last_login(db: Session, user: User) -> User:
    user.last_login_at = datetime.now(timezone.utc)
    db.commit()
    return user

def get_users(db: Session, search: Optional[str] = None, skip: int = 0, limit: int = 20) -> Tuple[List[User], int]:
    """
    Активные пользователи с поиском по имени/email. Возвращает (страница, всего).
    """
    query = db.query(User).filter(User.is_active.is_(True))
    if search:
        val = f"%{search.strip()}%"
        query = query.filter(or_(
            User.first_name.ilike(val),
            User.last_name.ilike(val),
            User.email.ilike(val),
        ))
    total = query.count()
    users = query.order_by(User.created_at.desc(), User.id.desc()).offset(skip).limit(limit).all()
    return users, total

def update_profile(db: Session, user: User, data: dict) -> User:
    for field in ("first_name", "last_name"):
        if data.get(field):
            setattr(user, field, data[field].strip())
    for field in ("bio", "avatar"):
        if field in data:
            setattr(user, field, data[field] if data[field] is not None else ("" if field == "bio" else None))
    db.commit()
    db.refresh(user)
    logger.info(f"Updated profile of user {user.id}")
    return user

def change_password(db: Session, user: User, current_password: str, new_password: str) -> User:
    if not verify_password(current_password, user.password_hash):
        raise ValidationError("Current password is incorrect")
    user.password_hash = get_password_hash(new_password)
    db.commit()
    logger.info(f"Password changed for user {user.id}")
    return user

def deactivate_user(db: Session, user_id: int) -> User:
    """Soft-деактивация: пользователь остаётся в БД, но не может войти."""
    user = get_user_or_404(db, user_id)
    user.is_active = False
    db.commit()
    db.refresh(user)
    logger.info(f"Deactivated user {user_id}")
    return user
