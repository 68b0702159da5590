#taskmaster/schemas/comment.py
from pydantic import BaseModel, ConfigDict, Field, constr
from typing import List, Optional
from datetime import datetime

from taskmaster.schemas.response import Pagination
from taskmaster.schemas.user import UserPublic

class CommentCreate(BaseModel):
    content: constr(strip_whitespace=True, min_length=1, max_length=2000) = Field(..., examples=["Looks good to me"])
    parent_id: Optional[int] = Field(None, description="ID корневого комментария, если это ответ")

class CommentUpdate(BaseModel):
    content: constr(strip_whitespace=True, min_length=1, max_length=2000)

class CommentRead(BaseModel):
    """
    CommentRead — комментарий к задаче (response).
    """
    id: int
    content: str
    task_id: int
    author_id: int
    parent_id: Optional[int] = None
    author: Optional[UserPublic] = None
    is_edited: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

class CommentThread(CommentRead):
    replies: List[CommentRead] = Field(default_factory=list)

class CommentResponse(BaseModel):
    message: Optional[str] = None
    comment: CommentRead

class CommentList(BaseModel):
    comments: List[CommentThread]
    pagination: Pagination
