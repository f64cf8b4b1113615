from pydantic import BaseModel
from typing import List, Optional


class ProjectHit(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    color: Optional[str] = None


class TaskHit(BaseModel):
    id: str
    project_id: str
    title: str
    description: Optional[str] = None
    status: str
    project_name: Optional[str] = None


class SearchResponse(BaseModel):
    query: str
    projects: List[ProjectHit] = []
    tasks: List[TaskHit] = []
