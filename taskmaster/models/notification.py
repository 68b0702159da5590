#taskmaster/models/notification.py
from datetime import datetime
from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, Index, func
from sqlalchemy.orm import relationship
from taskmaster.models.base import Base

class Notification(Base):
    """
    Notification — уведомление пользователю. Создаётся только как побочный эффект доменных событий.
    """
    __tablename__ = "notifications"

    id: int = Column(Integer, primary_key=True)
    recipient_id: int = Column(Integer, ForeignKey("users.id"), nullable=False, doc="Получатель")
    sender_id: int = Column(Integer, ForeignKey("users.id"), nullable=True, doc="Отправитель")
    type: str = Column(String(32), nullable=False, doc="Тип уведомления")
    title: str = Column(String(200), nullable=False)
    message: str = Column(String(1000), nullable=False)
    resource_type: str = Column(String(16), nullable=True, doc="task / team / comment")
    resource_id: int = Column(Integer, nullable=True)
    is_read: bool = Column(Boolean, default=False, nullable=False)
    read_at: datetime = Column(DateTime(timezone=True), nullable=True)
    created_at: datetime = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    sender = relationship("User", foreign_keys=[sender_id])

    __table_args__ = (
        Index("ix_notifications_recipient_read_created", "recipient_id", "is_read", "created_at"),
    )

    def __repr__(self):
        return f"<Notification(id={self.id}, recipient_id={self.recipient_id}, type={self.type}, is_read={self.is_read})>"
