# taskmaster/crud/attachment.py
from typing import List, Optional
import logging

from sqlalchemy.orm import Session

from taskmaster.core import permissions
from taskmaster.core.exceptions import AttachmentNotFound, CommentNotFound, TaskNotFound, ValidationError
from taskmaster.models.attachment import Attachment
from taskmaster.models.comment import Comment
from taskmaster.models.task import Task

logger = logging.getLogger("TaskMaster.Attachments")

def check_targets(db: Session, task_id: Optional[int], comment_id: Optional[int]) -> None:
    """
    Файл привязывается хотя бы к задаче или комментарию, и они должны существовать.
    """
    if task_id is None and comment_id is None:
        raise ValidationError(
            "Attachment must belong to a task or a comment",
            errors=[{"field": "task_id", "message": "task_id or comment_id is required"}],
        )
    if task_id is not None and db.query(Task.id).filter(Task.id == task_id).first() is None:
        raise TaskNotFound()
    if comment_id is not None and db.query(Comment.id).filter(
        Comment.id == comment_id, Comment.is_deleted.is_(False)
    ).first() is None:
        raise CommentNotFound()

def get_attachment_task_id(db: Session, attachment: Attachment) -> Optional[int]:
    """
    Задача, видимость которой определяет доступ к файлу: своя или задача комментария.
    Удалённый комментарий не скрывает связь с задачей.
    """
    if attachment.task_id is not None:
        return attachment.task_id
    if attachment.comment_id is None:
        return None
    row = db.query(Comment.task_id).filter(Comment.id == attachment.comment_id).first()
    return row[0] if row else None

def create_attachment(db: Session, data: dict) -> Attachment:
    attachment = Attachment(
        filename=data["filename"],
        original_name=data["original_name"],
        mime_type=data["mime_type"],
        size=data["size"],
        path=data["path"],
        task_id=data.get("task_id"),
        comment_id=data.get("comment_id"),
        uploaded_by_id=data["uploaded_by_id"],
    )
    db.add(attachment)
    db.commit()
    db.refresh(attachment)
    logger.info(f"Stored attachment {attachment.id} ({attachment.original_name}, {attachment.size} bytes)")
    return attachment

def get_attachment(db: Session, attachment_id: int) -> Attachment:
    attachment = db.query(Attachment).filter(Attachment.id == attachment_id).first()
    if not attachment:
        raise AttachmentNotFound()
    return attachment

def get_task_attachments(db: Session, task_id: int) -> List[Attachment]:
    return db.query(Attachment).filter(Attachment.task_id == task_id).order_by(
        Attachment.created_at.desc(), Attachment.id.desc()
    ).all()

def delete_attachment(db: Session, attachment: Attachment, user_id: int) -> str:
    """
    Удалить запись о вложении (только загрузивший). Возвращает путь к файлу.
    """
    permissions.ensure_can_delete_attachment(attachment, user_id)
    path = attachment.path
    db.delete(attachment)
    db.commit()
    logger.info(f"Attachment {attachment.id} deleted by user {user_id}")
    return path
