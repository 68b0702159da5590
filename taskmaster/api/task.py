#taskmaster/api/task.py
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import Literal, Optional

from taskmaster.core import permissions
from taskmaster.core.constants import TaskStatus
from taskmaster.core.pagination import PageParams, get_page_params
from taskmaster.crud.task import (
    complete_task,
    create_task,
    delete_task,
    get_my_tasks,
    get_task,
    get_tasks,
    get_visible_task,
    update_task,
)
from taskmaster.dependencies import get_current_active_user, get_db, get_file_storage, get_rooms
from taskmaster.models.user import User as UserModel
from taskmaster.realtime import events
from taskmaster.realtime.rooms import RoomManager
from taskmaster.schemas.response import MessageResponse
from taskmaster.schemas.task import (
    TaskCreate,
    TaskList,
    TaskPriorityLiteral,
    TaskResponse,
    TaskStatusLiteral,
    TaskUpdate,
)
from taskmaster.services import notifications
from taskmaster.services.file_storage import LocalFileStorage

router = APIRouter(prefix="/tasks", tags=["Tasks"])

@router.post("/", response_model=TaskResponse, status_code=status.HTTP_201_CREATED)
def create_new_task(
    data: TaskCreate,
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(get_current_active_user),
    rooms: RoomManager = Depends(get_rooms),
):
    """
    Создать новую задачу. Назначение другому пользователю -> task:assigned + уведомление.
    """
    task = create_task(db, data.model_dump(), creator=current_user)
    events.task_created(rooms, task, actor_id=current_user.id)
    notifications.notify_task_assigned(db, rooms, task, assigner_id=current_user.id)
    return {"message": "Task created", "task": task}

@router.get("/", response_model=TaskList)
def list_tasks(
    task_status: Optional[TaskStatusLiteral] = Query(None, alias="status"),
    priority: Optional[TaskPriorityLiteral] = Query(None),
    assignee_id: Optional[int] = Query(None),
    team_id: Optional[int] = Query(None),
    assigned_to_me: bool = Query(False),
    created_by_me: bool = Query(False),
    search: Optional[str] = Query(None),
    sort_by: str = Query("created_at"),
    order: Literal["asc", "desc"] = Query("desc"),
    page: PageParams = Depends(get_page_params),
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(get_current_active_user),
):
    """
    Получить список видимых задач с фильтрацией, поиском и сортировкой.
    """
    filters = {
        "status": task_status,
        "priority": priority,
        "assignee_id": assignee_id,
        "team_id": team_id,
        "assigned_to_me": assigned_to_me,
        "created_by_me": created_by_me,
        "search": search,
    }
    filters = {k: v for k, v in filters.items() if v is not None}
    tasks, total = get_tasks(
        db, current_user, filters=filters, sort_by=sort_by, order=order,
        skip=page.skip, limit=page.limit,
    )
    return {"tasks": tasks, "pagination": page.meta(total)}

@router.get("/my-tasks", response_model=TaskList)
def list_my_tasks(
    task_status: Optional[TaskStatusLiteral] = Query(None, alias="status"),
    page: PageParams = Depends(get_page_params),
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(get_current_active_user),
):
    """
    Задачи, назначенные на текущего пользователя (ближайший дедлайн первым).
    """
    tasks, total = get_my_tasks(db, current_user, status=task_status, skip=page.skip, limit=page.limit)
    return {"tasks": tasks, "pagination": page.meta(total)}

@router.get("/{task_id}", response_model=TaskResponse)
def get_one_task(
    task_id: int,
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(get_current_active_user),
):
    """
    Получить задачу по ID.
    """
    return {"task": get_visible_task(db, task_id, current_user)}

@router.put("/{task_id}", response_model=TaskResponse)
def update_one_task(
    task_id: int,
    data: TaskUpdate,
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(get_current_active_user),
    rooms: RoomManager = Depends(get_rooms),
):
    """
    Обновить задачу (автор или исполнитель).
    """
    task = get_task(db, task_id)
    permissions.ensure_can_update_task(task, current_user.id)
    previous_assignee_id, previous_status = task.assignee_id, task.status

    task = update_task(db, task, data.model_dump(exclude_unset=True), actor=current_user)

    events.task_updated(rooms, task, current_user.id, previous_assignee_id, previous_status)
    if task.assignee_id != previous_assignee_id:
        notifications.notify_task_assigned(db, rooms, task, assigner_id=current_user.id)
    if task.status == TaskStatus.COMPLETED and previous_status != TaskStatus.COMPLETED:
        notifications.notify_task_completed(db, rooms, task, actor_id=current_user.id)
    return {"message": "Task updated", "task": task}

@router.delete("/{task_id}", response_model=MessageResponse)
def delete_one_task(
    task_id: int,
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(get_current_active_user),
    storage: LocalFileStorage = Depends(get_file_storage),
):
    """
    Удалить задачу (только автор) вместе с комментариями и файлами вложений.
    """
    task = get_task(db, task_id)
    permissions.ensure_can_delete_task(task, current_user.id)
    paths = delete_task(db, task)
    for path in paths:
        storage.delete(path)
    return MessageResponse(message="Task deleted")

@router.patch("/{task_id}/complete", response_model=TaskResponse)
def mark_complete(
    task_id: int,
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(get_current_active_user),
    rooms: RoomManager = Depends(get_rooms),
):
    """
    Отметить задачу выполненной (автор или исполнитель).
    """
    task = get_task(db, task_id)
    permissions.ensure_can_update_task(task, current_user.id)
    already_completed = task.status == TaskStatus.COMPLETED
    task = complete_task(db, task)
    events.task_completed(rooms, task)
    if not already_completed:
        notifications.notify_task_completed(db, rooms, task, actor_id=current_user.id)
    return {"message": "Task marked as complete", "task": task}
