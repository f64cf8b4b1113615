from fastapi import APIRouter, Depends
from app.database.supabase_client import get_service_supabase
from app.modules.analytics.schemas import ProjectAnalyticsResponse
from app.modules.analytics.service import AnalyticsService
from app.core.dependencies import get_verified_user, check_project_access
from supabase import Client
from typing import Dict, Literal

router = APIRouter(prefix="/projects/{project_id}/analytics", tags=["analytics"])


def get_analytics_service(supabase: Client = Depends(get_service_supabase)) -> AnalyticsService:
    return AnalyticsService(supabase)


@router.get("", response_model=ProjectAnalyticsResponse)
async def get_project_analytics(
    project_id: str,
    view: Literal["all", "open"] = "open",
    user_data: Dict = Depends(get_verified_user),
    service: AnalyticsService = Depends(get_analytics_service),
    supabase: Client = Depends(get_service_supabase)
):
    """
    Charts data for the project analytics page (members only).
    `view=open` leaves done tasks out of the priority distribution.
    """
    check_project_access(project_id, user_data, supabase)
    return service.get_project_analytics(project_id, open_only=view == "open")
