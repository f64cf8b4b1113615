from fastapi import APIRouter, Depends, Query
from app.database.supabase_client import get_service_supabase
from app.modules.search.schemas import SearchResponse
from app.modules.search.service import SearchService
from app.core.dependencies import get_verified_user
from supabase import Client
from typing import Dict

router = APIRouter(prefix="/search", tags=["search"])


def get_search_service(supabase: Client = Depends(get_service_supabase)) -> SearchService:
    return SearchService(supabase)


@router.get("", response_model=SearchResponse)
async def search(
    q: str = Query("", max_length=200),
    user_data: Dict = Depends(get_verified_user),
    service: SearchService = Depends(get_search_service)
):
    """Search projects and tasks the user can see"""
    return service.search(q, user_data["id"])
