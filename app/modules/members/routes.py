from fastapi import APIRouter, Depends
from app.database.supabase_client import get_service_supabase
from app.modules.members.schemas import MemberResponse, MemberRoleUpdate
from app.modules.members.service import MemberService
from app.core.dependencies import get_verified_user, check_project_access, check_project_owner
from supabase import Client
from typing import List, Dict

router = APIRouter(prefix="/projects/{project_id}/members", tags=["members"])


def get_member_service(supabase: Client = Depends(get_service_supabase)) -> MemberService:
    return MemberService(supabase)


@router.get("", response_model=List[MemberResponse])
async def list_members(
    project_id: str,
    user_data: Dict = Depends(get_verified_user),
    service: MemberService = Depends(get_member_service),
    supabase: Client = Depends(get_service_supabase)
):
    """List project members with their profiles (members only)"""
    check_project_access(project_id, user_data, supabase)
    return service.list_members(project_id)


@router.put("/{user_id}", response_model=MemberResponse)
async def update_member_role(
    project_id: str,
    user_id: str,
    role_data: MemberRoleUpdate,
    user_data: Dict = Depends(get_verified_user),
    service: MemberService = Depends(get_member_service),
    supabase: Client = Depends(get_service_supabase)
):
    """Change a member's role (owner only)"""
    check_project_owner(project_id, user_data, supabase)
    return service.update_role(project_id, user_id, role_data.role)


@router.delete("/{user_id}", status_code=204)
async def remove_member(
    project_id: str,
    user_id: str,
    user_data: Dict = Depends(get_verified_user),
    service: MemberService = Depends(get_member_service),
    supabase: Client = Depends(get_service_supabase)
):
    """Remove a member (owner only), or leave the project when removing yourself"""
    if user_id == user_data["id"]:
        check_project_access(project_id, user_data, supabase)
    else:
        check_project_owner(project_id, user_data, supabase)
    service.remove_member(project_id, user_id)
    return None
