#taskmaster/api/auth.py
from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session
from taskmaster.schemas.auth import LoginResponse
from taskmaster.schemas.user import PasswordChange, ProfileUpdate, UserRead, UserRegister, UserResponse
from taskmaster.schemas.response import MessageResponse
from taskmaster.crud.user import (
    authenticate_user,
    change_password,
    create_user,
    set_last_login,
    update_profile,
)
from taskmaster.core.security import create_user_token
from taskmaster.dependencies import get_db, get_current_active_user
from taskmaster.core.settings import settings
from taskmaster.models.user import User as UserModel
import logging

router = APIRouter(prefix="/auth", tags=["Auth"])
logger = logging.getLogger("TaskMaster.Auth")

ACCESS_TOKEN_EXPIRE_MINUTES = settings.ACCESS_TOKEN_EXPIRE_MINUTES

def _token_response(user: UserModel, message: str) -> LoginResponse:
    token, _ = create_user_token(user.id)
    return LoginResponse(
        message=message,
        access_token=token,
        token_type="bearer",
        expires_in=ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        user=UserRead.model_validate(user),
    )

@router.post("/register", response_model=LoginResponse, status_code=status.HTTP_201_CREATED)
def register(data: UserRegister, db: Session = Depends(get_db)):
    """
    Регистрация. Дубликат email -> 400 "email already exists".
    """
    user = create_user(db, data.model_dump())
    return _token_response(user, "User registered successfully")

@router.post("/login", response_model=LoginResponse, status_code=status.HTTP_200_OK)
def login(
    form_data: OAuth2PasswordRequestForm = Depends(),
    db: Session = Depends(get_db),
):
    """
    Логин по email (поле username формы) + password.
    """
    user = authenticate_user(db, form_data.username, form_data.password)
    if not user or not user.is_active:
        logger.warning(f"Failed login attempt for {form_data.username}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
    set_last_login(db, user)
    return _token_response(user, "Login successful")

@router.get("/profile", response_model=UserRead)
def get_profile(current_user: UserModel = Depends(get_current_active_user)):
    """
    Получить данные текущего пользователя.
    """
    return current_user

@router.put("/profile", response_model=UserResponse)
def update_my_profile(
    data: ProfileUpdate,
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(get_current_active_user),
):
    user = update_profile(db, current_user, data.model_dump(exclude_unset=True))
    return UserResponse(message="Profile updated", user=UserRead.model_validate(user))

@router.put("/password", response_model=MessageResponse)
def change_my_password(
    data: PasswordChange,
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(get_current_active_user),
):
    change_password(db, current_user, data.current_password, data.new_password)
    return MessageResponse(message="Password changed successfully")

@router.post("/logout", response_model=MessageResponse)
def logout(current_user: UserModel = Depends(get_current_active_user)):
    """
    Токены stateless: клиент просто забывает токен.
    """
    logger.info(f"User {current_user.id} logged out")
    return MessageResponse(message="Logged out successfully")
