#taskmaster/models/attachment.py
from datetime import datetime
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, func
from sqlalchemy.orm import relationship
from taskmaster.models.base import Base

class Attachment(Base):
    """
    Attachment — файл, привязанный к задаче и/или комментарию. Сам blob лежит в файловом хранилище.
    """
    __tablename__ = "attachments"

    id: int = Column(Integer, primary_key=True)
    filename: str = Column(String(255), nullable=False, doc="Имя файла в хранилище")
    original_name: str = Column(String(255), nullable=False, doc="Исходное имя файла")
    mime_type: str = Column(String(128), nullable=False)
    size: int = Column(Integer, nullable=False, doc="Размер в байтах")
    path: str = Column(String(512), nullable=False, doc="Путь в хранилище")
    task_id: int = Column(Integer, ForeignKey("tasks.id", ondelete="CASCADE"), nullable=True, index=True)
    comment_id: int = Column(Integer, ForeignKey("comments.id", ondelete="CASCADE"), nullable=True, index=True)
    uploaded_by_id: int = Column(Integer, ForeignKey("users.id"), nullable=False)
    created_at: datetime = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    uploaded_by = relationship("User")

    def __repr__(self):
        return f"<Attachment(id={self.id}, original_name='{self.original_name}', task_id={self.task_id})>"
