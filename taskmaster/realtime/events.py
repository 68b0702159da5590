# taskmaster/realtime/events.py
"""
Доменные события -> комнаты.

Вызываются после успешного commit. Полезная нагрузка сериализуется в JSON-совместимый
dict здесь же, чтобы соединения получали готовые данные.
"""
from typing import Optional

from taskmaster.core.constants import TaskStatus
from taskmaster.models.comment import Comment
from taskmaster.models.notification import Notification
from taskmaster.models.task import Task
from taskmaster.models.user import User
from taskmaster.realtime.rooms import RoomManager, task_room, team_room, user_room
from taskmaster.schemas.comment import CommentRead
from taskmaster.schemas.notification import NotificationRead
from taskmaster.schemas.task import TaskRead
from taskmaster.schemas.user import UserPublic

TASK_ASSIGNED = "task:assigned"
TASK_UPDATED = "task:updated"
TASK_COMPLETED = "task:completed"
COMMENT_CREATED = "comment:created"
COMMENT_UPDATED = "comment:updated"
COMMENT_DELETED = "comment:deleted"
TEAM_MEMBER_JOINED = "team:member-joined"
TEAM_MEMBER_REMOVED = "team:member-removed"
NOTIFICATION_NEW = "notification:new"


def _task_payload(task: Task) -> dict:
    return {"task": TaskRead.model_validate(task).model_dump(mode="json")}

def task_created(rooms: RoomManager, task: Task, actor_id: int) -> None:
    if task.assignee_id is not None and task.assignee_id != actor_id:
        rooms.publish(user_room(task.assignee_id), TASK_ASSIGNED, _task_payload(task))

def task_updated(
    rooms: RoomManager,
    task: Task,
    actor_id: int,
    previous_assignee_id: Optional[int],
    previous_status: str,
) -> None:
    """
    task:updated в комнату задачи; task:assigned новому исполнителю (если это не автор изменения);
    task:completed при переходе в completed.
    """
    payload = _task_payload(task)
    rooms.publish(task_room(task.id), TASK_UPDATED, payload)
    if (
        task.assignee_id is not None
        and task.assignee_id != previous_assignee_id
        and task.assignee_id != actor_id
    ):
        rooms.publish(user_room(task.assignee_id), TASK_ASSIGNED, payload)
    if task.status == TaskStatus.COMPLETED and previous_status != TaskStatus.COMPLETED:
        rooms.publish(task_room(task.id), TASK_COMPLETED, payload)

def task_completed(rooms: RoomManager, task: Task) -> None:
    rooms.publish(task_room(task.id), TASK_COMPLETED, _task_payload(task))

def comment_created(rooms: RoomManager, comment: Comment) -> None:
    data = {"comment": CommentRead.model_validate(comment).model_dump(mode="json")}
    rooms.publish(task_room(comment.task_id), COMMENT_CREATED, data)

def comment_updated(rooms: RoomManager, comment: Comment) -> None:
    data = {"comment": CommentRead.model_validate(comment).model_dump(mode="json")}
    rooms.publish(task_room(comment.task_id), COMMENT_UPDATED, data)

def comment_deleted(rooms: RoomManager, comment: Comment) -> None:
    rooms.publish(task_room(comment.task_id), COMMENT_DELETED, {"comment_id": comment.id})

def member_joined(rooms: RoomManager, team_id: int, user: User, role: str) -> None:
    rooms.publish(team_room(team_id), TEAM_MEMBER_JOINED, {
        "team_id": team_id,
        "role": role,
        "user": UserPublic.model_validate(user).model_dump(mode="json"),
    })

def member_removed(rooms: RoomManager, team_id: int, user_id: int) -> None:
    rooms.publish(team_room(team_id), TEAM_MEMBER_REMOVED, {"team_id": team_id, "user_id": user_id})

def notification_created(rooms: RoomManager, notification: Notification) -> None:
    data = {"notification": NotificationRead.model_validate(notification).model_dump(mode="json")}
    rooms.publish(user_room(notification.recipient_id), NOTIFICATION_NEW, data)
