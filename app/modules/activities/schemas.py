from pydantic import BaseModel
from typing import Optional, Literal
from datetime import datetime

ActivityType = Literal["task_update", "comment", "member_join", "project_update", "document_upload"]


class ActivityResponse(BaseModel):
    id: str
    project_id: str
    task_id: Optional[str] = None
    user_id: str
    type: ActivityType
    description: str
    created_at: datetime
    user_full_name: Optional[str] = None

    class Config:
        from_attributes = True
