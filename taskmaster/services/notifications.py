# taskmaster/services/notifications.py
"""
Уведомления как побочный эффект доменных событий.

Ошибка записи уведомления логируется и откатывается, но никогда не роняет
исходный запрос: к этому моменту основная операция уже закоммичена.
"""
from typing import Optional
import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from taskmaster.core.constants import NotificationType, ResourceType
from taskmaster.crud.notification import create_notification
from taskmaster.models.comment import Comment
from taskmaster.models.notification import Notification
from taskmaster.models.task import Task
from taskmaster.models.team import Team
from taskmaster.models.user import User
from taskmaster.realtime import events
from taskmaster.realtime.rooms import RoomManager

logger = logging.getLogger("TaskMaster.Notifications")

def notify(
    db: Session,
    rooms: RoomManager,
    recipient_id: int,
    type: str,
    title: str,
    message: str,
    sender_id: Optional[int] = None,
    resource_type: Optional[str] = None,
    resource_id: Optional[int] = None,
) -> Optional[Notification]:
    try:
        notification = create_notification(
            db,
            recipient_id=recipient_id,
            type=type,
            title=title,
            message=message,
            sender_id=sender_id,
            resource_type=resource_type,
            resource_id=resource_id,
        )
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to store {type} notification for user {recipient_id}: {e}", exc_info=True)
        return None
    events.notification_created(rooms, notification)
    return notification

def notify_task_assigned(db: Session, rooms: RoomManager, task: Task, assigner_id: int) -> Optional[Notification]:
    if task.assignee_id is None or task.assignee_id == assigner_id:
        return None
    return notify(
        db, rooms,
        recipient_id=task.assignee_id,
        sender_id=assigner_id,
        type=NotificationType.TASK_ASSIGNED,
        title="Task Assigned",
        message=f"You have been assigned to task: {task.title}",
        resource_type=ResourceType.TASK,
        resource_id=task.id,
    )

def notify_task_completed(db: Session, rooms: RoomManager, task: Task, actor_id: int) -> Optional[Notification]:
    # Автору задачи, если завершил кто-то другой
    if task.creator_id == actor_id:
        return None
    return notify(
        db, rooms,
        recipient_id=task.creator_id,
        sender_id=actor_id,
        type=NotificationType.TASK_COMPLETED,
        title="Task Completed",
        message=f"Task \"{task.title}\" has been completed",
        resource_type=ResourceType.TASK,
        resource_id=task.id,
    )

def notify_task_commented(db: Session, rooms: RoomManager, task: Task, comment: Comment, author_id: int) -> int:
    """
    Автору и исполнителю задачи, кроме автора комментария. Возвращает число созданных уведомлений.
    """
    recipients = []
    for user_id in (task.creator_id, task.assignee_id):
        if user_id is not None and user_id != author_id and user_id not in recipients:
            recipients.append(user_id)
    created = 0
    for recipient_id in recipients:
        if notify(
            db, rooms,
            recipient_id=recipient_id,
            sender_id=author_id,
            type=NotificationType.TASK_COMMENTED,
            title="New Comment",
            message=f"New comment on task: {task.title}",
            resource_type=ResourceType.TASK,
            resource_id=task.id,
        ) is not None:
            created += 1
    return created

def notify_team_joined(db: Session, rooms: RoomManager, team: Team, user: User, inviter_id: int) -> Optional[Notification]:
    if inviter_id == user.id:
        return None
    return notify(
        db, rooms,
        recipient_id=inviter_id,
        sender_id=user.id,
        type=NotificationType.TEAM_JOINED,
        title="Invitation Accepted",
        message=f"{user.full_name} joined team {team.name}",
        resource_type=ResourceType.TEAM,
        resource_id=team.id,
    )

def notify_removed_from_team(db: Session, rooms: RoomManager, team: Team, user_id: int, actor_id: int) -> Optional[Notification]:
    return notify(
        db, rooms,
        recipient_id=user_id,
        sender_id=actor_id,
        type=NotificationType.TEAM_REMOVED,
        title="Removed from Team",
        message=f"You have been removed from team {team.name}",
        resource_type=ResourceType.TEAM,
        resource_id=team.id,
    )
