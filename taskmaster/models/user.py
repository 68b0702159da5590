#taskmaster/models/user.py
from datetime import datetime
from sqlalchemy import (
    Column, Integer, String, Boolean, DateTime, func
)
from taskmaster.models.base import Base

class User(Base):
    """
    User — аккаунт пользователя: роль (user/admin), soft-деактивация, last_login.
    Никогда не удаляется физически.
    """
    __tablename__ = "users"

    id: int = Column(Integer, primary_key=True, index=True)
    first_name: str = Column(String(50), nullable=False, doc="Имя")
    last_name: str = Column(String(50), nullable=False, doc="Фамилия")
    email: str = Column(String(255), unique=True, nullable=False, index=True, doc="Email (lower-case)")
    password_hash: str = Column(String(255), nullable=False, doc="Хэш пароля (никогда не хранить сырой пароль!)")
    avatar: str = Column(String(255), nullable=True, doc="URL аватара")
    bio: str = Column(String(500), nullable=False, default="", doc="О себе")
    role: str = Column(String(16), nullable=False, default="user", doc="Роль: user / admin")
    is_active: bool = Column(Boolean, default=True, nullable=False, doc="Аккаунт активен")
    last_login_at: datetime = Column(DateTime(timezone=True), nullable=True, doc="Последний вход")
    created_at: datetime = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, doc="Дата создания")
    updated_at: datetime = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False, doc="Дата обновления")

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"

    def __repr__(self):
        return f"<User(id={self.id}, email='{self.email}', role={self.role})>"
