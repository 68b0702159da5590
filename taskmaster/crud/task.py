#taskmaster/crud/task.py
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple
import logging

from sqlalchemy import or_
from sqlalchemy.orm import Session

from taskmaster.core import permissions
from taskmaster.core.constants import TASK_SORT_FIELDS, TaskStatus
from taskmaster.core.exceptions import TaskNotFound, UserNotFound, ValidationError
from taskmaster.crud.membership import list_user_team_ids, role_of
from taskmaster.crud.team import get_team
from taskmaster.models.attachment import Attachment
from taskmaster.models.comment import Comment
from taskmaster.models.task import Task
from taskmaster.models.user import User

logger = logging.getLogger("TaskMaster.Tasks")

UPDATABLE_FIELDS = (
    "title", "description", "status", "priority", "due_date",
    "assignee_id", "team_id", "tags", "is_archived",
)
NULLABLE_FIELDS = ("due_date", "assignee_id", "team_id")

def apply_status(task: Task, status: str) -> None:
    """
    Единственная точка записи статуса: completed_at != NULL <=> status == completed.
    Повторная запись completed не сбрасывает исходное время завершения.
    """
    if status not in TaskStatus.ALL:
        raise ValidationError(f"Invalid status: {status}", errors=[{"field": "status", "message": "Invalid status"}])
    if status == TaskStatus.COMPLETED:
        if task.status != TaskStatus.COMPLETED or task.completed_at is None:
            task.completed_at = datetime.now(timezone.utc)
    else:
        task.completed_at = None
    task.status = status

def _check_references(db: Session, data: dict, actor: User) -> None:
    """
    Исполнитель должен существовать и быть активным; команда должна существовать,
    а автор изменения состоять в ней.
    """
    assignee_id = data.get("assignee_id")
    if assignee_id is not None:
        assignee = db.query(User).filter(User.id == assignee_id).first()
        if assignee is None or not assignee.is_active:
            raise UserNotFound("Assignee not found")
    team_id = data.get("team_id")
    if team_id is not None:
        get_team(db, team_id)
        permissions.ensure_member(role_of(db, team_id, actor.id))

def create_task(db: Session, data: dict, creator: User) -> Task:
    """
    Создать задачу. Автор — текущий пользователь, не меняется никогда.
    """
    title = (data.get("title") or "").strip()
    if not title:
        raise ValidationError("Title is required", errors=[{"field": "title", "message": "Title is required"}])
    _check_references(db, data, creator)

    task = Task(
        title=title,
        description=(data.get("description") or "").strip(),
        priority=data.get("priority") or "medium",
        due_date=data.get("due_date"),
        creator_id=creator.id,
        assignee_id=data.get("assignee_id"),
        team_id=data.get("team_id"),
        tags=data.get("tags") or [],
        is_archived=False,
    )
    apply_status(task, data.get("status") or TaskStatus.OPEN)
    db.add(task)
    db.commit()
    db.refresh(task)
    logger.info(f"Created task {task.id} by user {creator.id}")
    return task

def get_task(db: Session, task_id: int) -> Task:
    task = db.query(Task).filter(Task.id == task_id).first()
    if not task:
        raise TaskNotFound()
    return task

def get_visible_task(db: Session, task_id: int, user: User) -> Task:
    """
    Задача, которую пользователь вправе видеть: автор, исполнитель, участник команды или admin.
    """
    task = get_task(db, task_id)
    permissions.ensure_can_view_task(task, user.id, list_user_team_ids(db, user.id), user.is_admin)
    return task

def _visible_query(db: Session, user: User):
    query = db.query(Task)
    if user.is_admin:
        return query
    team_ids = list_user_team_ids(db, user.id)
    conditions = [Task.creator_id == user.id, Task.assignee_id == user.id]
    if team_ids:
        conditions.append(Task.team_id.in_(team_ids))
    return query.filter(or_(*conditions))

def get_tasks(
    db: Session,
    user: User,
    filters: Optional[Dict[str, Any]] = None,
    sort_by: str = "created_at",
    order: str = "desc",
    skip: int = 0,
    limit: int = 20,
) -> Tuple[List[Task], int]:
    """
    Список задач, видимых пользователю, с фильтрами и сортировкой.
    """
    filters = filters or {}
    query = _visible_query(db, user).filter(Task.is_archived.is_(False))

    if filters.get("status"):
        query = query.filter(Task.status == filters["status"])
    if filters.get("priority"):
        query = query.filter(Task.priority == filters["priority"])
    if filters.get("assignee_id") is not None:
        query = query.filter(Task.assignee_id == filters["assignee_id"])
    if filters.get("team_id") is not None:
        query = query.filter(Task.team_id == filters["team_id"])
    if filters.get("assigned_to_me"):
        query = query.filter(Task.assignee_id == user.id)
    if filters.get("created_by_me"):
        query = query.filter(Task.creator_id == user.id)
    if filters.get("search"):
        val = f"%{filters['search']}%"
        query = query.filter(Task.title.ilike(val) | Task.description.ilike(val))

    if sort_by not in TASK_SORT_FIELDS:
        raise ValidationError(f"Cannot sort by '{sort_by}'", errors=[{"field": "sort_by", "message": "Unsupported sort field"}])
    column = getattr(Task, sort_by)
    query = query.order_by(column.asc() if order == "asc" else column.desc(), Task.id.desc())

    total = query.count()
    return query.offset(skip).limit(limit).all(), total

def get_my_tasks(db: Session, user: User, status: Optional[str] = None, skip: int = 0, limit: int = 20) -> Tuple[List[Task], int]:
    query = db.query(Task).filter(Task.assignee_id == user.id, Task.is_archived.is_(False))
    if status:
        query = query.filter(Task.status == status)
    total = query.count()
    # Сначала ближайшие дедлайны, задачи без дедлайна — в конце
    tasks = (
        query.order_by(Task.due_date.is_(None), Task.due_date.asc(), Task.created_at.desc(), Task.id.desc())
        .offset(skip).limit(limit).all()
    )
    return tasks, total

def update_task(db: Session, task: Task, data: dict, actor: User) -> Task:
    """
    Обновить задачу. Поля со значением None игнорируются, кроме due_date/assignee_id/team_id
    (для них None означает «снять»). Статус пишется через apply_status.
    """
    changes = {k: v for k, v in data.items() if k in UPDATABLE_FIELDS and (v is not None or k in NULLABLE_FIELDS)}
    refs = {k: changes[k] for k in ("assignee_id", "team_id") if changes.get(k) is not None and changes[k] != getattr(task, k)}
    _check_references(db, refs, actor)

    if "title" in changes:
        title = changes["title"].strip()
        if not title:
            raise ValidationError("Title is required", errors=[{"field": "title", "message": "Title is required"}])
        changes["title"] = title

    for field, value in changes.items():
        if field == "status":
            apply_status(task, value)
        else:
            setattr(task, field, value)
    task.updated_at = datetime.now(timezone.utc)
    db.commit()
    db.refresh(task)
    if changes:
        logger.info(f"Updated task {task.id} fields: {sorted(changes)}")
    else:
        logger.info(f"Update called but no changes for task {task.id}")
    return task

def complete_task(db: Session, task: Task) -> Task:
    apply_status(task, TaskStatus.COMPLETED)
    task.updated_at = datetime.now(timezone.utc)
    db.commit()
    db.refresh(task)
    logger.info(f"Task {task.id} marked as complete")
    return task

def delete_task(db: Session, task: Task) -> List[str]:
    """
    Удалить задачу вместе с комментариями и вложениями.
    Возвращает пути файлов вложений — их удаляет файловое хранилище.
    """
    task_id = task.id
    attachments = db.query(Attachment).filter(Attachment.task_id == task_id).all()
    paths = [a.path for a in attachments]
    comment_ids = [row[0] for row in db.query(Comment.id).filter(Comment.task_id == task_id).all()]
    if comment_ids:
        comment_attachments = db.query(Attachment).filter(Attachment.comment_id.in_(comment_ids)).all()
        paths.extend(a.path for a in comment_attachments if a.path not in paths)
        db.query(Attachment).filter(Attachment.comment_id.in_(comment_ids)).delete(synchronize_session=False)
    db.query(Attachment).filter(Attachment.task_id == task_id).delete(synchronize_session=False)
    # сначала ответы, потом корневые комментарии
    db.query(Comment).filter(Comment.task_id == task_id, Comment.parent_id.isnot(None)).delete(synchronize_session=False)
    db.query(Comment).filter(Comment.task_id == task_id).delete(synchronize_session=False)
    db.delete(task)
    db.commit()
    logger.info(f"Deleted task {task_id} ({len(paths)} attachment files)")
    return paths
