from pydantic import BaseModel
from typing import Optional, Literal
from datetime import datetime

ProjectRole = Literal["owner", "member", "viewer"]


class MemberProfile(BaseModel):
    id: str
    full_name: Optional[str] = None
    email: Optional[str] = None
    avatar_url: Optional[str] = None


class MemberResponse(BaseModel):
    project_id: str
    user_id: str
    role: ProjectRole
    created_at: Optional[datetime] = None
    user: Optional[MemberProfile] = None

    class Config:
        from_attributes = True


class MemberRoleUpdate(BaseModel):
    role: ProjectRole
