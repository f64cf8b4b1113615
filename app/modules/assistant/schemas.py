from pydantic import BaseModel, Field
from typing import List, Optional, Literal


class ChatMessage(BaseModel):
    role: Literal["user", "assistant"]
    content: str


class ChatRequest(BaseModel):
    message: str = Field(..., min_length=1, max_length=4000)
    history: List[ChatMessage] = Field(default_factory=list, max_length=50)


class ChatResponse(BaseModel):
    reply: str
    action: Literal["create_task", "update_status", "answer"] = "answer"
    task_id: Optional[str] = None
    project_id: Optional[str] = None


class EnhanceRequest(BaseModel):
    text: str = Field(..., min_length=1, max_length=5000)


class EnhanceResponse(BaseModel):
    text: str
