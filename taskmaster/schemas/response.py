#taskmaster/schemas/response.py
from pydantic import BaseModel, Field
from typing import List, Optional

class Pagination(BaseModel):
    """
    Pagination — метаданные страницы списка.
    """
    page: int = Field(..., examples=[1], description="Номер страницы (с 1)")
    limit: int = Field(..., examples=[20], description="Размер страницы")
    total: int = Field(..., examples=[42], description="Всего элементов")
    pages: int = Field(..., examples=[3], description="Всего страниц")

class FieldError(BaseModel):
    field: str
    message: str

class ErrorResponse(BaseModel):
    """
    ErrorResponse — тело ответа с ошибкой.
    """
    detail: str = Field(..., examples=["Task not found"], description="Сообщение об ошибке")
    errors: Optional[List[FieldError]] = Field(None, description="Ошибки по полям (для 400)")

class MessageResponse(BaseModel):
    """
    MessageResponse — простое сообщение для подтверждения действия.
    """
    message: str = Field(..., examples=["Action completed successfully"], description="Текстовое сообщение")
