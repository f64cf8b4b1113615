from fastapi import APIRouter, Depends, Query
from app.database.supabase_client import get_service_supabase
from app.modules.activities.schemas import ActivityResponse
from app.modules.activities.service import ActivityService
from app.core.dependencies import get_verified_user, check_project_access
from supabase import Client
from typing import List, Dict

router = APIRouter(prefix="/projects/{project_id}/activities", tags=["activities"])


def get_activity_service(supabase: Client = Depends(get_service_supabase)) -> ActivityService:
    return ActivityService(supabase)


@router.get("", response_model=List[ActivityResponse])
async def list_project_activities(
    project_id: str,
    limit: int = Query(20, ge=1, le=100),
    user_data: Dict = Depends(get_verified_user),
    service: ActivityService = Depends(get_activity_service),
    supabase: Client = Depends(get_service_supabase)
):
    """List the project's activity feed, newest first (members only)"""
    check_project_access(project_id, user_data, supabase)
    return service.list_for_project(project_id, limit)
