# taskmaster/crud/comment.py
from datetime import datetime, timezone
from typing import Dict, List, Optional, Tuple
import logging

from sqlalchemy.orm import Session

from taskmaster.core import permissions
from taskmaster.core.exceptions import CommentNotFound, ValidationError
from taskmaster.models.comment import Comment
from taskmaster.models.task import Task

logger = logging.getLogger("TaskMaster.Comments")

def _clean_content(content: Optional[str]) -> str:
    text = (content or "").strip()
    if not text:
        raise ValidationError("Comment content is required", errors=[{"field": "content", "message": "Content is required"}])
    return text

def create_comment(db: Session, task: Task, author_id: int, content: str, parent_id: Optional[int] = None) -> Comment:
    """
    Добавить комментарий к задаче. Ответ допускается только на корневой
    комментарий той же задачи (один уровень вложенности).
    """
    text = _clean_content(content)
    if parent_id is not None:
        parent = db.query(Comment).filter(Comment.id == parent_id, Comment.is_deleted.is_(False)).first()
        if parent is None or parent.task_id != task.id:
            raise CommentNotFound("Parent comment not found")
        if parent.parent_id is not None:
            raise ValidationError("Replies can only be added to top-level comments",
                                  errors=[{"field": "parent_id", "message": "Nested replies are not allowed"}])
    comment = Comment(
        content=text,
        task_id=task.id,
        author_id=author_id,
        parent_id=parent_id,
        is_edited=False,
        is_deleted=False,
    )
    db.add(comment)
    db.commit()
    db.refresh(comment)
    logger.info(f"User {author_id} commented on task {task.id} (comment {comment.id})")
    return comment

def get_comment(db: Session, comment_id: int) -> Comment:
    comment = db.query(Comment).filter(Comment.id == comment_id, Comment.is_deleted.is_(False)).first()
    if not comment:
        raise CommentNotFound()
    return comment

def get_task_comments(db: Session, task_id: int, skip: int = 0, limit: int = 20) -> Tuple[List[Comment], Dict[int, List[Comment]], int]:
    """
    Корневые комментарии задачи (новые сверху) и ответы на них (по порядку).
    Возвращает (комментарии, {parent_id: ответы}, всего корневых).
    """
    query = db.query(Comment).filter(
        Comment.task_id == task_id,
        Comment.is_deleted.is_(False),
        Comment.parent_id.is_(None),
    )
    total = query.count()
    comments = query.order_by(Comment.created_at.desc(), Comment.id.desc()).offset(skip).limit(limit).all()

    replies: Dict[int, List[Comment]] = {c.id: [] for c in comments}
    if comments:
        rows = db.query(Comment).filter(
            Comment.parent_id.in_(list(replies)),
            Comment.is_deleted.is_(False),
        ).order_by(Comment.created_at.asc(), Comment.id.asc()).all()
        for reply in rows:
            replies[reply.parent_id].append(reply)
    return comments, replies, total

def update_comment(db: Session, comment: Comment, user_id: int, content: str) -> Comment:
    permissions.ensure_can_edit_comment(comment, user_id)
    comment.content = _clean_content(content)
    comment.is_edited = True
    comment.updated_at = datetime.now(timezone.utc)
    db.commit()
    db.refresh(comment)
    logger.info(f"Comment {comment.id} edited by user {user_id}")
    return comment

def delete_comment(db: Session, comment: Comment, user_id: int) -> Comment:
    """Soft-delete: текст остаётся в БД, из выдачи комментарий пропадает."""
    permissions.ensure_can_edit_comment(comment, user_id)
    comment.is_deleted = True
    comment.deleted_at = datetime.now(timezone.utc)
    db.commit()
    logger.info(f"Comment {comment.id} deleted by user {user_id}")
    return comment
