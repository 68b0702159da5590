#taskmaster/schemas/task.py
from pydantic import BaseModel, ConfigDict, Field, constr
from typing import Optional, List, Literal
from datetime import datetime

from taskmaster.schemas.response import Pagination
from taskmaster.schemas.user import UserPublic

TaskStatusLiteral = Literal["open", "in-progress", "review", "completed"]
TaskPriorityLiteral = Literal["low", "medium", "high", "urgent"]

class TaskBase(BaseModel):
    """
    TaskBase — базовая схема задачи (используется для create/read).
    """
    title: constr(strip_whitespace=True, min_length=1, max_length=200) = Field(..., examples=["Implement login page"], description="Название задачи")
    description: Optional[constr(max_length=5000)] = Field("", examples=["Detailed description"], description="Описание задачи")
    status: TaskStatusLiteral = Field("open", description="Статус: open, in-progress, review, completed")
    priority: TaskPriorityLiteral = Field("medium", description="Приоритет: low, medium, high, urgent")
    due_date: Optional[datetime] = Field(None, examples=["2024-12-31T18:00:00Z"], description="Дедлайн")
    tags: List[str] = Field(default_factory=list, description="Теги задачи")

class TaskCreate(TaskBase):
    """
    TaskCreate — создание новой задачи.
    """
    assignee_id: Optional[int] = Field(None, examples=[2], description="ID исполнителя")
    team_id: Optional[int] = Field(None, examples=[1], description="ID команды")

class TaskUpdate(BaseModel):
    """
    TaskUpdate — обновление задачи (все поля опциональны).
    Явный null в assignee_id / team_id / due_date снимает значение.
    """
    title: Optional[constr(strip_whitespace=True, min_length=1, max_length=200)] = None
    description: Optional[constr(max_length=5000)] = None
    status: Optional[TaskStatusLiteral] = None
    priority: Optional[TaskPriorityLiteral] = None
    due_date: Optional[datetime] = None
    assignee_id: Optional[int] = None
    team_id: Optional[int] = None
    tags: Optional[List[str]] = None
    is_archived: Optional[bool] = None

class TaskRead(TaskBase):
    """
    TaskRead — полная схема задачи для ответа (response).
    """
    id: int
    creator_id: int
    assignee_id: Optional[int] = None
    team_id: Optional[int] = None
    creator: Optional[UserPublic] = None
    assignee: Optional[UserPublic] = None
    completed_at: Optional[datetime] = None
    is_archived: bool = False
    is_overdue: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

class TaskResponse(BaseModel):
    message: Optional[str] = None
    task: TaskRead

class TaskList(BaseModel):
    tasks: List[TaskRead]
    pagination: Pagination
