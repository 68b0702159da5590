#taskmaster/api/ai.py
from fastapi import APIRouter, Depends

from taskmaster.dependencies import get_ai_assistant, get_current_active_user
from taskmaster.models.user import User as UserModel
from taskmaster.schemas.ai import (
    GenerateDescriptionRequest,
    GenerateDescriptionResponse,
    SummarizeTaskRequest,
    SummarizeTaskResponse,
)
from taskmaster.services.ai_assistant import AIAssistant

router = APIRouter(prefix="/ai", tags=["AI"])

@router.post("/generate-description", response_model=GenerateDescriptionResponse)
async def generate_description(
    data: GenerateDescriptionRequest,
    assistant: AIAssistant = Depends(get_ai_assistant),
    current_user: UserModel = Depends(get_current_active_user),
):
    """
    Сгенерировать описание задачи по названию. Без API-ключа -> 400.
    """
    description = await assistant.generate_description(data.title, data.context)
    return {"description": description}

@router.post("/summarize-task", response_model=SummarizeTaskResponse)
async def summarize_task(
    data: SummarizeTaskRequest,
    assistant: AIAssistant = Depends(get_ai_assistant),
    current_user: UserModel = Depends(get_current_active_user),
):
    summary = await assistant.summarize(data.title, data.description, data.comments)
    return {"summary": summary}
