#taskmaster/schemas/ai.py
from pydantic import BaseModel, Field, constr
from typing import List, Optional

class GenerateDescriptionRequest(BaseModel):
    title: constr(strip_whitespace=True, min_length=1, max_length=200) = Field(..., examples=["Set up CI pipeline"])
    context: Optional[constr(strip_whitespace=True, max_length=2000)] = Field(None, description="Дополнительный контекст для модели")

class GenerateDescriptionResponse(BaseModel):
    description: str

class SummarizeTaskRequest(BaseModel):
    title: constr(strip_whitespace=True, min_length=1, max_length=200)
    description: Optional[str] = None
    comments: List[str] = Field(default_factory=list)

class SummarizeTaskResponse(BaseModel):
    summary: str
