#taskmaster/models/team.py
from datetime import datetime
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, func, Boolean
from sqlalchemy.orm import relationship
from taskmaster.models.base import Base

class Team(Base):
    """
    Team — команда пользователей. Ровно один владелец (owner_id), который не меняется.
    Участники и приглашения удаляются вместе с командой.
    """
    __tablename__ = "teams"

    id: int = Column(Integer, primary_key=True)
    name: str = Column(String(100), nullable=False, index=True, doc="Название команды")
    description: str = Column(String(1000), nullable=False, default="", doc="Описание")
    avatar: str = Column(String(255), nullable=True, doc="URL аватара")
    owner_id: int = Column(Integer, ForeignKey("users.id"), nullable=False, index=True, doc="ID владельца")
    is_active: bool = Column(Boolean, default=True, nullable=False, doc="Команда активна")
    created_at: datetime = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, doc="Дата создания")
    updated_at: datetime = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False, doc="Дата обновления")

    owner = relationship("User")
    members = relationship("TeamMember", back_populates="team", cascade="all, delete-orphan")
    invitations = relationship("TeamInvitation", back_populates="team", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<Team(id={self.id}, name='{self.name}', owner_id={self.owner_id})>"
