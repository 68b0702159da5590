#taskmaster/schemas/user.py
from pydantic import BaseModel, ConfigDict, Field, EmailStr, constr
from typing import Optional, List
from datetime import datetime

from taskmaster.schemas.response import Pagination

class UserPublic(BaseModel):
    """
    UserPublic — короткая карточка пользователя (вложенная в задачи, команды, комментарии).
    """
    id: int
    first_name: str
    last_name: str
    full_name: str
    email: str
    avatar: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)

class UserRegister(BaseModel):
    """
    UserRegister — регистрация нового пользователя.
    """
    first_name: constr(strip_whitespace=True, min_length=1, max_length=50) = Field(..., examples=["John"])
    last_name: constr(strip_whitespace=True, min_length=1, max_length=50) = Field(..., examples=["Doe"])
    email: EmailStr = Field(..., examples=["john.doe@example.com"], description="Email пользователя (уникальный)")
    password: constr(min_length=6, max_length=128) = Field(..., examples=["StrongPassw0rd!"], description="Пароль")

class UserRead(UserPublic):
    """
    UserRead — полная схема пользователя (response).
    """
    bio: str = ""
    role: str = Field(..., examples=["user"], description="Роль на платформе: user / admin")
    is_active: bool
    last_login_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

class ProfileUpdate(BaseModel):
    """
    ProfileUpdate — обновление собственного профиля (все поля опциональны).
    """
    first_name: Optional[constr(strip_whitespace=True, min_length=1, max_length=50)] = None
    last_name: Optional[constr(strip_whitespace=True, min_length=1, max_length=50)] = None
    bio: Optional[constr(max_length=500)] = None
    avatar: Optional[str] = None

class PasswordChange(BaseModel):
    current_password: str = Field(..., min_length=1)
    new_password: constr(min_length=6, max_length=128)

class UserList(BaseModel):
    users: List[UserRead]
    pagination: Pagination

class UserResponse(BaseModel):
    message: Optional[str] = None
    user: UserRead
