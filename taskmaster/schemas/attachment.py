#taskmaster/schemas/attachment.py
from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional
from datetime import datetime

from taskmaster.schemas.user import UserPublic

class AttachmentRead(BaseModel):
    """
    AttachmentRead — файл, привязанный к задаче и/или комментарию.
    Путь в хранилище наружу не отдаётся.
    """
    id: int
    filename: str = Field(..., description="Имя файла в хранилище")
    original_name: str = Field(..., examples=["report.pdf"], description="Исходное имя файла")
    mime_type: str = Field(..., examples=["application/pdf"])
    size: int = Field(..., examples=[102400], description="Размер файла в байтах")
    task_id: Optional[int] = None
    comment_id: Optional[int] = None
    uploaded_by_id: int
    uploaded_by: Optional[UserPublic] = None
    created_at: Optional[datetime] = Field(None, description="Дата/время загрузки")

    model_config = ConfigDict(from_attributes=True)

class AttachmentResponse(BaseModel):
    message: Optional[str] = None
    attachment: AttachmentRead

class AttachmentList(BaseModel):
    attachments: List[AttachmentRead]
