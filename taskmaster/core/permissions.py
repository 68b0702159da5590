# taskmaster/core/permissions.py
"""
Предикаты авторизации.

Каждая функция зависит только от уже загруженного состояния (модели, роль
участника) и id вызывающего пользователя. Проверки выполняются до любой
мутации; ``ensure_*`` варианты бросают ``ForbiddenError``/``OwnerActionError``.
"""
from typing import Iterable, Optional

from taskmaster.core.constants import TeamRole
from taskmaster.core.exceptions import ForbiddenError, OwnerActionError
from taskmaster.models.attachment import Attachment
from taskmaster.models.comment import Comment
from taskmaster.models.task import Task
from taskmaster.models.team import Team


# ==== Teams ====

def is_member(role: Optional[str]) -> bool:
    return role is not None

def can_manage_team(role: Optional[str]) -> bool:
    """Обновление команды, приглашения, удаление участников: owner или admin."""
    return role in TeamRole.MANAGERS

def is_team_owner(team: Team, user_id: int) -> bool:
    """Сверяется с полем Team.owner_id, а не с ролью в TeamMember."""
    return team.owner_id == user_id

def can_remove_member(target_role: Optional[str]) -> bool:
    return target_role != TeamRole.OWNER

def ensure_member(role: Optional[str], message: str = "Not a member of this team") -> None:
    if not is_member(role):
        raise ForbiddenError(message)

def ensure_can_manage_team(role: Optional[str], message: str = "Not authorized") -> None:
    if not can_manage_team(role):
        raise ForbiddenError(message)

def ensure_team_owner(team: Team, user_id: int, message: str = "Only owner can delete team") -> None:
    if not is_team_owner(team, user_id):
        raise ForbiddenError(message)

def ensure_can_remove_member(target_role: Optional[str]) -> None:
    if not can_remove_member(target_role):
        raise OwnerActionError("Cannot remove team owner")

def ensure_can_leave(team: Team, user_id: int) -> None:
    # Передача владения не реализована
    if is_team_owner(team, user_id):
        raise OwnerActionError("Owner cannot leave team. Transfer ownership or delete team.")

# ==== Tasks ====

def can_view_task(task: Task, user_id: int, team_ids: Iterable[int] = (), is_admin: bool = False) -> bool:
    if is_admin:
        return True
    if task.creator_id == user_id or task.assignee_id == user_id:
        return True
    return task.team_id is not None and task.team_id in set(team_ids)

def can_update_task(task: Task, user_id: int) -> bool:
    return task.creator_id == user_id or task.assignee_id == user_id

def can_delete_task(task: Task, user_id: int) -> bool:
    return task.creator_id == user_id

def ensure_can_view_task(task: Task, user_id: int, team_ids: Iterable[int] = (), is_admin: bool = False) -> None:
    if not can_view_task(task, user_id, team_ids, is_admin):
        raise ForbiddenError("Not authorized to view this task")

def ensure_can_update_task(task: Task, user_id: int) -> None:
    if not can_update_task(task, user_id):
        raise ForbiddenError("Not authorized to update this task")

def ensure_can_delete_task(task: Task, user_id: int) -> None:
    if not can_delete_task(task, user_id):
        raise ForbiddenError("Not authorized to delete this task")

# ==== Comments / attachments ====

def can_edit_comment(comment: Comment, user_id: int) -> bool:
    return comment.author_id == user_id

def ensure_can_edit_comment(comment: Comment, user_id: int) -> None:
    if not can_edit_comment(comment, user_id):
        raise ForbiddenError("Not authorized")

def can_delete_attachment(attachment: Attachment, user_id: int) -> bool:
    return attachment.uploaded_by_id == user_id

def ensure_can_delete_attachment(attachment: Attachment, user_id: int) -> None:
    if not can_delete_attachment(attachment, user_id):
        raise ForbiddenError("Not authorized")
