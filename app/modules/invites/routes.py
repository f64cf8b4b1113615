from fastapi import APIRouter, Depends
from app.database.supabase_client import get_service_supabase
from app.modules.invites.schemas import InviteResponse, InvitePreview, InviteAcceptResponse
from app.modules.invites.service import InviteService
from app.core.dependencies import get_verified_user, check_project_access
from supabase import Client
from typing import Dict

router = APIRouter(tags=["invites"])


def get_invite_service(supabase: Client = Depends(get_service_supabase)) -> InviteService:
    return InviteService(supabase)


@router.post("/projects/{project_id}/invites", response_model=InviteResponse, status_code=201)
async def create_invite(
    project_id: str,
    user_data: Dict = Depends(get_verified_user),
    service: InviteService = Depends(get_invite_service),
    supabase: Client = Depends(get_service_supabase)
):
    """Generate an invite link valid for seven days (members only)"""
    check_project_access(project_id, user_data, supabase)
    return service.create_invite(project_id)


@router.get("/invites/{token}", response_model=InvitePreview)
async def preview_invite(
    token: str,
    user_data: Dict = Depends(get_verified_user),
    service: InviteService = Depends(get_invite_service)
):
    """Show which project an invite link points to"""
    return service.preview_invite(token, user_data["id"])


@router.post("/invites/{token}/accept", response_model=InviteAcceptResponse)
async def accept_invite(
    token: str,
    user_data: Dict = Depends(get_verified_user),
    service: InviteService = Depends(get_invite_service)
):
    """Accept an invite and join the project as a member"""
    return service.accept_invite(token, user_data["id"])
