from pydantic import BaseModel
from typing import Optional
from datetime import datetime


class InviteResponse(BaseModel):
    id: str
    project_id: str
    token: str
    expires_at: datetime
    invite_url: str


class InvitePreview(BaseModel):
    project_id: str
    project_name: str
    project_description: str = ""
    creator_name: str
    expires_at: Optional[datetime] = None
    already_member: bool = False


class InviteAcceptResponse(BaseModel):
    project_id: str
    project_name: str
    already_member: bool = False
    message: str
