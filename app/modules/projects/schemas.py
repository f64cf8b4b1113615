from pydantic import BaseModel, Field, field_validator
from typing import Optional, Literal
from datetime import datetime, date

ProjectStatus = Literal["planning", "in_progress", "in_review", "completed"]


class ProjectCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    status: ProjectStatus = "planning"
    due_date: Optional[date] = None


class ProjectUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    status: Optional[ProjectStatus] = None
    due_date: Optional[date] = None

    @field_validator("name", "status")
    @classmethod
    def reject_null(cls, value):
        if value is None:
            raise ValueError("may be omitted but not null")
        return value


class ProjectResponse(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    status: str
    progress: int = 0
    color: Optional[str] = None
    due_date: Optional[date] = None
    created_by: str
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ProjectListItem(ProjectResponse):
    tasks_count: int = 0
    role: Optional[str] = None


class ProjectProgressResponse(BaseModel):
    project_id: str
    progress: int
