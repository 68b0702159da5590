#taskmaster/api/user.py
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import Optional

from taskmaster.core.pagination import PageParams, get_page_params
from taskmaster.crud.user import deactivate_user, get_user_or_404, get_users
from taskmaster.dependencies import get_admin_user, get_current_active_user, get_db
from taskmaster.models.user import User as UserModel
from taskmaster.schemas.user import UserList, UserRead, UserResponse

router = APIRouter(prefix="/users", tags=["Users"])

@router.get("/", response_model=UserList)
def list_users(
    search: Optional[str] = Query(None, description="Поиск по имени или email"),
    page: PageParams = Depends(get_page_params),
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(get_current_active_user),
):
    """
    Список активных пользователей (для выбора исполнителя, приглашений).
    """
    users, total = get_users(db, search=search, skip=page.skip, limit=page.limit)
    return {"users": users, "pagination": page.meta(total)}

@router.get("/{user_id}", response_model=UserRead)
def read_user(
    user_id: int,
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(get_current_active_user),
):
    return get_user_or_404(db, user_id, active_only=not current_user.is_admin)

@router.delete("/{user_id}", response_model=UserResponse)
def deactivate(
    user_id: int,
    db: Session = Depends(get_db),
    admin: UserModel = Depends(get_admin_user),
):
    """
    Деактивировать пользователя (только admin). Удаления нет.
    """
    user = deactivate_user(db, user_id)
    return UserResponse(message="User deactivated", user=UserRead.model_validate(user))
