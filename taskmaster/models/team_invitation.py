#taskmaster/models/team_invitation.py
from datetime import datetime
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Index, func
from sqlalchemy.orm import relationship
from taskmaster.models.base import Base

class TeamInvitation(Base):
    """
    TeamInvitation — одноразовый токен приглашения с ограниченным сроком жизни.
    accepted_at IS NULL — токен можно использовать; после принятия строка не меняется.
    """
    __tablename__ = "team_invitations"

    id: int = Column(Integer, primary_key=True)
    team_id: int = Column(Integer, ForeignKey("teams.id", ondelete="CASCADE"), nullable=False, doc="ID команды")
    email: str = Column(String(255), nullable=False, doc="Email приглашённого (lower-case)")
    role: str = Column(String(16), nullable=False, default="member", doc="Роль после вступления: admin / member")
    token: str = Column(String(128), nullable=False, unique=True, doc="Токен приглашения")
    invited_by_id: int = Column(Integer, ForeignKey("users.id"), nullable=False, doc="Кто пригласил")
    expires_at: datetime = Column(DateTime(timezone=True), nullable=False, doc="Срок действия")
    accepted_at: datetime = Column(DateTime(timezone=True), nullable=True, doc="Когда принято")
    created_at: datetime = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at: datetime = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    team = relationship("Team", back_populates="invitations")
    invited_by = relationship("User")

    __table_args__ = (
        Index("ix_team_invitations_team_email", "team_id", "email"),
        Index("ix_team_invitations_expires_at", "expires_at"),
    )

    def __repr__(self):
        return (
            f"<TeamInvitation(id={self.id}, team_id={self.team_id}, email='{self.email}', "
            f"role={self.role}, accepted_at={self.accepted_at})>"
        )
