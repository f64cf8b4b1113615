from fastapi import APIRouter, Depends
from app.database.supabase_client import get_service_supabase
from app.modules.users.schemas import UserUpdate, UserResponse, SkillCreate, SkillResponse
from app.modules.users.service import UserService
from app.core.dependencies import get_current_user_id
from supabase import Client
from typing import List, Dict

router = APIRouter(prefix="/users", tags=["users"])


def get_user_service(supabase: Client = Depends(get_service_supabase)) -> UserService:
    return UserService(supabase)


@router.get("/me", response_model=UserResponse)
async def get_my_profile(
    user_data: Dict = Depends(get_current_user_id),
    service: UserService = Depends(get_user_service)
):
    """Get the current user's profile"""
    return service.get_user_by_id(user_data["id"])


@router.put("/me", response_model=UserResponse)
async def update_my_profile(
    profile: UserUpdate,
    user_data: Dict = Depends(get_current_user_id),
    service: UserService = Depends(get_user_service)
):
    """Update the current user's profile (settings page)"""
    return service.update_user(user_data["id"], profile)


@router.get("/me/skills", response_model=List[SkillResponse])
async def list_my_skills(
    user_data: Dict = Depends(get_current_user_id),
    service: UserService = Depends(get_user_service)
):
    return service.list_skills(user_data["id"])


@router.post("/me/skills", response_model=SkillResponse, status_code=201)
async def add_my_skill(
    skill: SkillCreate,
    user_data: Dict = Depends(get_current_user_id),
    service: UserService = Depends(get_user_service)
):
    return service.add_skill(user_data["id"], skill)


@router.delete("/me/skills/{skill_id}", status_code=204)
async def remove_my_skill(
    skill_id: str,
    user_data: Dict = Depends(get_current_user_id),
    service: UserService = Depends(get_user_service)
):
    service.remove_skill(user_data["id"], skill_id)
    return None
