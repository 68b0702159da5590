#taskmaster/models/team_member.py
from datetime import datetime
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, UniqueConstraint, func
from sqlalchemy.orm import relationship
from taskmaster.models.base import Base

class TeamMember(Base):
    """
    TeamMember — членство (team, user, role). Не более одной строки на пару (team, user):
    уникальный индекс — единственный авторитетный страж от гонок.
    """
    __tablename__ = "team_members"

    id: int = Column(Integer, primary_key=True)
    team_id: int = Column(Integer, ForeignKey("teams.id", ondelete="CASCADE"), nullable=False, doc="ID команды")
    user_id: int = Column(Integer, ForeignKey("users.id"), nullable=False, index=True, doc="ID пользователя")
    role: str = Column(String(16), nullable=False, default="member", doc="Роль: owner / admin / member")
    created_at: datetime = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, doc="Дата вступления")
    updated_at: datetime = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    team = relationship("Team", back_populates="members")
    user = relationship("User")

    __table_args__ = (
        UniqueConstraint("team_id", "user_id", name="uq_team_members_team_user"),
    )

    def __repr__(self):
        return f"<TeamMember(team_id={self.team_id}, user_id={self.user_id}, role={self.role})>"
