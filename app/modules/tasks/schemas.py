from pydantic import BaseModel, Field, field_validator
from typing import Optional, Literal
from datetime import datetime, date

TaskStatus = Literal["todo", "in_progress", "review", "done"]
TaskPriority = Literal["low", "medium", "high"]


class TaskCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=500)
    description: Optional[str] = None
    status: TaskStatus = "todo"
    priority: TaskPriority = "medium"
    assignee_id: Optional[str] = None
    due_date: Optional[date] = None


class TaskUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=500)
    description: Optional[str] = None
    priority: Optional[TaskPriority] = None
    due_date: Optional[date] = None

    @field_validator("title", "priority")
    @classmethod
    def reject_null(cls, value):
        # description and due_date may be cleared; these columns are NOT NULL
        if value is None:
            raise ValueError("may be omitted but not null")
        return value


class TaskStatusUpdate(BaseModel):
    status: TaskStatus


class TaskAssigneeUpdate(BaseModel):
    assignee_id: str


class TaskUpdateCreate(BaseModel):
    text: str = Field(..., max_length=5000)


class AssigneeProfile(BaseModel):
    id: str
    full_name: Optional[str] = None
    avatar_url: Optional[str] = None


class TaskResponse(BaseModel):
    id: str
    project_id: str
    title: str
    description: Optional[str] = None
    status: str
    priority: str
    assignee_id: Optional[str] = None
    due_date: Optional[date] = None
    created_by: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None
    assignee: Optional[AssigneeProfile] = None
    project_name: Optional[str] = None

    class Config:
        from_attributes = True
