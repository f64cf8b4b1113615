from pydantic import BaseModel, Field
from typing import List, Optional
from app.modules.tasks.schemas import TaskResponse


class BoardColumn(BaseModel):
    id: str
    title: str
    tasks: List[TaskResponse] = []


class BoardResponse(BaseModel):
    project_id: str
    columns: List[BoardColumn]


class DragLocation(BaseModel):
    column_id: str
    index: int = Field(..., ge=0)


class BoardMoveRequest(BaseModel):
    task_id: str
    source: DragLocation
    destination: Optional[DragLocation] = None


class BoardMoveResponse(BaseModel):
    moved: bool
    status_changed: bool
    board: BoardResponse
