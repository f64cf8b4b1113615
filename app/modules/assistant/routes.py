from fastapi import APIRouter, Depends, HTTPException
from app.database.supabase_client import get_service_supabase
from app.modules.assistant.llm import ChatModelClient, AssistantError, AssistantConfigurationError, get_chat_model_client
from app.modules.assistant.schemas import ChatRequest, ChatResponse, EnhanceRequest, EnhanceResponse
from app.modules.assistant.service import AssistantService
from app.modules.tasks.routes import get_task_service
from app.modules.tasks.service import TaskService
from app.core.dependencies import get_verified_user
from supabase import Client
from typing import Dict

router = APIRouter(prefix="/assistant", tags=["assistant"])


def get_assistant_service(
    supabase: Client = Depends(get_service_supabase),
    task_service: TaskService = Depends(get_task_service),
    llm: ChatModelClient = Depends(get_chat_model_client)
) -> AssistantService:
    return AssistantService(supabase, task_service, llm)


def _raise_for_assistant_error(e: AssistantError):
    if isinstance(e, AssistantConfigurationError):
        raise HTTPException(status_code=503, detail=str(e))
    raise HTTPException(status_code=502, detail=str(e))


@router.post("/chat", response_model=ChatResponse)
async def chat(
    request: ChatRequest,
    user_data: Dict = Depends(get_verified_user),
    service: AssistantService = Depends(get_assistant_service)
):
    """
    Chat about your projects. Recognises "create task ... in <project>" and
    "mark <task> as <status>" style commands and runs them; anything else is
    answered by the AI model using your projects as context.
    """
    try:
        return service.chat(
            user_data["id"],
            request.message,
            [m.model_dump() for m in request.history]
        )
    except AssistantError as e:
        _raise_for_assistant_error(e)


@router.post("/enhance", response_model=EnhanceResponse)
async def enhance_description(
    request: EnhanceRequest,
    user_data: Dict = Depends(get_verified_user),
    service: AssistantService = Depends(get_assistant_service)
):
    """Rewrite a task description to be concise and professional"""
    try:
        return service.enhance(request.text)
    except AssistantError as e:
        _raise_for_assistant_error(e)
