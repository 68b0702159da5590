#taskmaster/models/comment.py
from datetime import datetime
from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, Index, func
from sqlalchemy.orm import relationship
from taskmaster.models.base import Base

class Comment(Base):
    """
    Comment — комментарий к задаче. Один уровень вложенности (parent_id),
    soft-delete через is_deleted: текст сохраняется, в списках не показывается.
    """
    __tablename__ = "comments"

    id: int = Column(Integer, primary_key=True)
    content: str = Column(String(2000), nullable=False, doc="Текст")
    task_id: int = Column(Integer, ForeignKey("tasks.id", ondelete="CASCADE"), nullable=False, doc="Задача")
    author_id: int = Column(Integer, ForeignKey("users.id"), nullable=False, doc="Автор")
    parent_id: int = Column(Integer, ForeignKey("comments.id"), nullable=True, index=True, doc="Родительский комментарий")
    is_edited: bool = Column(Boolean, default=False, nullable=False)
    is_deleted: bool = Column(Boolean, default=False, nullable=False, doc="Soft-delete")
    deleted_at: datetime = Column(DateTime(timezone=True), nullable=True)
    created_at: datetime = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at: datetime = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    author = relationship("User")

    __table_args__ = (
        Index("ix_comments_task_created", "task_id", "created_at"),
    )

    def __repr__(self):
        return f"<Comment(id={self.id}, task_id={self.task_id}, author_id={self.author_id}, parent_id={self.parent_id})>"
