from pydantic import BaseModel, Field
from typing import Optional, Literal
from datetime import datetime


class UserUpdate(BaseModel):
    full_name: Optional[str] = Field(None, min_length=1)
    avatar_url: Optional[str] = None


class UserResponse(BaseModel):
    id: str
    email: Optional[str] = None
    full_name: Optional[str] = None
    avatar_url: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class SkillCreate(BaseModel):
    skill_name: str = Field(..., min_length=1)
    proficiency: Optional[Literal["beginner", "intermediate", "advanced", "expert"]] = None


class SkillResponse(BaseModel):
    id: str
    user_id: str
    skill_name: str
    proficiency: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
