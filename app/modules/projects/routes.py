from fastapi import APIRouter, Depends, Query
from app.database.supabase_client import get_service_supabase
from app.modules.projects.schemas import (
    ProjectCreate, ProjectUpdate, ProjectResponse, ProjectListItem, ProjectProgressResponse
)
from app.modules.projects.service import ProjectService
from app.core.dependencies import (
    get_verified_user, check_project_access, check_project_editor, check_project_owner, user_display
)
from supabase import Client
from typing import List, Dict

router = APIRouter(prefix="/projects", tags=["projects"])


def get_project_service(supabase: Client = Depends(get_service_supabase)) -> ProjectService:
    return ProjectService(supabase)


@router.post("", response_model=ProjectResponse, status_code=201)
async def create_project(
    project_data: ProjectCreate,
    user_data: Dict = Depends(get_verified_user),
    service: ProjectService = Depends(get_project_service)
):
    """Create a new project; the creator becomes its owner"""
    return service.create_project(project_data, user_data["id"])


@router.get("", response_model=List[ProjectListItem])
async def list_projects(
    user_data: Dict = Depends(get_verified_user),
    service: ProjectService = Depends(get_project_service)
):
    """List projects the user is a member of or created"""
    return service.list_projects(user_data["id"])


@router.get("/recent", response_model=List[ProjectResponse])
async def list_recent_projects(
    limit: int = Query(5, ge=1, le=20),
    user_data: Dict = Depends(get_verified_user),
    service: ProjectService = Depends(get_project_service)
):
    """Projects the user opened most recently"""
    return service.list_recent_projects(user_data["id"], limit)


@router.get("/{project_id}", response_model=ProjectResponse)
async def get_project(
    project_id: str,
    user_data: Dict = Depends(get_verified_user),
    service: ProjectService = Depends(get_project_service),
    supabase: Client = Depends(get_service_supabase)
):
    """Get project by ID (members only)"""
    check_project_access(project_id, user_data, supabase)
    return service.view_project(project_id, user_data["id"])


@router.put("/{project_id}", response_model=ProjectResponse)
async def update_project(
    project_id: str,
    project_data: ProjectUpdate,
    user_data: Dict = Depends(get_verified_user),
    service: ProjectService = Depends(get_project_service),
    supabase: Client = Depends(get_service_supabase)
):
    """Update project (owner only)"""
    check_project_owner(project_id, user_data, supabase)
    return service.update_project(project_id, project_data, user_data["id"], user_display(user_data))


@router.delete("/{project_id}", status_code=204)
async def delete_project(
    project_id: str,
    user_data: Dict = Depends(get_verified_user),
    service: ProjectService = Depends(get_project_service),
    supabase: Client = Depends(get_service_supabase)
):
    """Delete project (owner only)"""
    check_project_owner(project_id, user_data, supabase)
    service.delete_project(project_id)
    return None


@router.post("/{project_id}/progress", response_model=ProjectProgressResponse)
async def recalculate_project_progress(
    project_id: str,
    user_data: Dict = Depends(get_verified_user),
    service: ProjectService = Depends(get_project_service),
    supabase: Client = Depends(get_service_supabase)
):
    """Recompute the project's completion percentage from its tasks"""
    check_project_editor(project_id, user_data, supabase)
    return ProjectProgressResponse(project_id=project_id, progress=service.recalculate_progress(project_id))
