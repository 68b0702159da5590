# taskmaster/dependencies.py

from typing import Callable, Generator
from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.orm import Session
from taskmaster.core.security import oauth2_scheme, user_id_from_token
from taskmaster.core.exceptions import ForbiddenError
from taskmaster.models.user import User
from taskmaster.database import SessionLocal
from taskmaster.crud.user import get_user
from taskmaster.realtime.rooms import RoomManager
from taskmaster.services.ai_assistant import AIAssistant
from taskmaster.services.file_storage import LocalFileStorage

def get_db() -> Generator[Session, None, None]:
    """
    Создает и возвращает сессию базы данных, гарантирует закрытие после использования.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

def get_session_factory() -> Callable[[], Session]:
    """
    Фабрика сессий для долгоживущих соединений (WebSocket): каждая проверка
    открывает свою короткую сессию и закрывает её сразу после запроса.
    """
    return SessionLocal

def get_current_user(
    token: str = Depends(oauth2_scheme),
    db: Session = Depends(get_db)
) -> User:
    """
    Декодирует JWT-токен, получает пользователя из базы, если токен валиден.
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    user_id = user_id_from_token(token)
    if user_id is None:
        raise credentials_exception
    user = get_user(db, user_id)
    if user is None:
        raise credentials_exception
    return user

def get_current_active_user(
    current_user: User = Depends(get_current_user)
) -> User:
    """
    Проверяет, что пользователь активен. Деактивированный токен эквивалентен невалидному.
    """
    if not current_user.is_active:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Account is deactivated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return current_user

def get_admin_user(current_user: User = Depends(get_current_active_user)) -> User:
    if not current_user.is_admin:
        raise ForbiddenError("Admin access required")
    return current_user

# Долгоживущие объекты процесса: создаются в main.py и лежат в app.state

def get_rooms(request: Request) -> RoomManager:
    return request.app.state.rooms

def get_ai_assistant(request: Request) -> AIAssistant:
    return request.app.state.ai_assistant

def get_file_storage(request: Request) -> LocalFileStorage:
    return request.app.state.file_storage
