#taskmaster/models/task.py
from datetime import datetime, timezone
from sqlalchemy import (
    Column, Integer, String, DateTime, ForeignKey, JSON, Boolean, Index, func
)
from sqlalchemy.orm import relationship
from taskmaster.models.base import Base

class Task(Base):
    """
    Task — задача. creator_id неизменен; completed_at != NULL тогда и только тогда,
    когда status == "completed" (поддерживается при каждой записи статуса в crud).
    """
    __tablename__ = "tasks"

    id: int = Column(Integer, primary_key=True, autoincrement=True)
    title: str = Column(String(200), nullable=False, doc="Название задачи")
    description: str = Column(String(5000), nullable=False, default="", doc="Описание")
    status: str = Column(String(24), nullable=False, default="open", doc="Статус: open, in-progress, review, completed")
    priority: str = Column(String(16), nullable=False, default="medium", doc="Приоритет: low, medium, high, urgent")
    due_date: datetime = Column(DateTime(timezone=True), nullable=True, doc="Дедлайн")
    completed_at: datetime = Column(DateTime(timezone=True), nullable=True, doc="Когда завершена")
    creator_id: int = Column(Integer, ForeignKey("users.id"), nullable=False, doc="Автор задачи")
    assignee_id: int = Column(Integer, ForeignKey("users.id"), nullable=True, doc="Исполнитель")
    team_id: int = Column(Integer, ForeignKey("teams.id", ondelete="SET NULL"), nullable=True, index=True, doc="Команда")
    tags: list = Column(JSON, nullable=False, default=lambda: [], doc="Теги задачи")
    is_archived: bool = Column(Boolean, default=False, nullable=False, doc="В архиве")
    created_at: datetime = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, doc="Дата создания")
    updated_at: datetime = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False, doc="Дата изменения")

    creator = relationship("User", foreign_keys=[creator_id])
    assignee = relationship("User", foreign_keys=[assignee_id])
    team = relationship("Team")

    __table_args__ = (
        Index("ix_tasks_creator_status", "creator_id", "status"),
        Index("ix_tasks_assignee_status", "assignee_id", "status"),
    )

    @property
    def is_overdue(self) -> bool:
        if not self.due_date or self.status == "completed":
            return False
        due = self.due_date
        if due.tzinfo is None:
            # SQLite отдаёт naive datetime, всё хранится в UTC
            due = due.replace(tzinfo=timezone.utc)
        return datetime.now(timezone.utc) > due

    def __repr__(self):
        return (
            f"<Task(id={self.id}, title='{self.title}', status={self.status}, "
            f"creator_id={self.creator_id}, assignee_id={self.assignee_id}, team_id={self.team_id})>"
        )
