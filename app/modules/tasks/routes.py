from fastapi import APIRouter, BackgroundTasks, Depends, Query
from app.database.supabase_client import get_service_supabase
from app.modules.tasks.schemas import (
    TaskCreate, TaskUpdate, TaskStatusUpdate, TaskAssigneeUpdate, TaskUpdateCreate, TaskResponse
)
from app.modules.tasks.service import TaskService
from app.modules.activities.schemas import ActivityResponse
from app.core.dependencies import (
    get_verified_user, check_project_access, check_project_editor, get_task_project_id
)
from app.core.email import get_email_client
from supabase import Client
from typing import List, Dict, Optional

router = APIRouter(tags=["tasks"])


def get_task_service(
    background_tasks: BackgroundTasks,
    supabase: Client = Depends(get_service_supabase)
) -> TaskService:
    return TaskService(supabase, email_client=get_email_client(), background_tasks=background_tasks)


@router.post("/projects/{project_id}/tasks", response_model=TaskResponse, status_code=201)
async def create_task(
    project_id: str,
    task_data: TaskCreate,
    user_data: Dict = Depends(get_verified_user),
    service: TaskService = Depends(get_task_service),
    supabase: Client = Depends(get_service_supabase)
):
    """Create a task in the project (owners and members)"""
    check_project_editor(project_id, user_data, supabase)
    return service.create_task(project_id, task_data, user_data["id"])


@router.get("/projects/{project_id}/tasks", response_model=List[TaskResponse])
async def list_tasks(
    project_id: str,
    status: Optional[str] = None,
    user_data: Dict = Depends(get_verified_user),
    service: TaskService = Depends(get_task_service),
    supabase: Client = Depends(get_service_supabase)
):
    """List the project's tasks (members only)"""
    check_project_access(project_id, user_data, supabase)
    return service.list_tasks(project_id, status)


@router.get("/tasks/me/pending", response_model=List[TaskResponse])
async def list_my_pending_tasks(
    limit: int = Query(3, ge=1, le=50),
    user_data: Dict = Depends(get_verified_user),
    service: TaskService = Depends(get_task_service)
):
    """To-do tasks assigned to the current user"""
    return service.list_my_pending(user_data["id"], limit)


@router.get("/tasks/{task_id}", response_model=TaskResponse)
async def get_task(
    task_id: str,
    user_data: Dict = Depends(get_verified_user),
    service: TaskService = Depends(get_task_service),
    supabase: Client = Depends(get_service_supabase)
):
    """Get a task with its assignee (members only)"""
    check_project_access(get_task_project_id(task_id, supabase), user_data, supabase)
    return service.get_task(task_id)


@router.put("/tasks/{task_id}", response_model=TaskResponse)
async def update_task(
    task_id: str,
    task_data: TaskUpdate,
    user_data: Dict = Depends(get_verified_user),
    service: TaskService = Depends(get_task_service),
    supabase: Client = Depends(get_service_supabase)
):
    """Update task details (owners and members)"""
    check_project_editor(get_task_project_id(task_id, supabase), user_data, supabase)
    return service.update_task(task_id, task_data, user_data["id"])


@router.put("/tasks/{task_id}/status", response_model=TaskResponse)
async def change_task_status(
    task_id: str,
    status_data: TaskStatusUpdate,
    user_data: Dict = Depends(get_verified_user),
    service: TaskService = Depends(get_task_service),
    supabase: Client = Depends(get_service_supabase)
):
    """Change task status (owners and members)"""
    check_project_editor(get_task_project_id(task_id, supabase), user_data, supabase)
    return service.change_status(task_id, status_data.status, user_data["id"])


@router.put("/tasks/{task_id}/assignee", response_model=TaskResponse)
async def change_task_assignee(
    task_id: str,
    assignee_data: TaskAssigneeUpdate,
    user_data: Dict = Depends(get_verified_user),
    service: TaskService = Depends(get_task_service),
    supabase: Client = Depends(get_service_supabase)
):
    """Assign the task to another project member (owners and members)"""
    check_project_editor(get_task_project_id(task_id, supabase), user_data, supabase)
    return service.change_assignee(task_id, assignee_data.assignee_id, user_data["id"])


@router.get("/tasks/{task_id}/updates", response_model=List[ActivityResponse])
async def list_task_updates(
    task_id: str,
    user_data: Dict = Depends(get_verified_user),
    service: TaskService = Depends(get_task_service),
    supabase: Client = Depends(get_service_supabase)
):
    """Task history, newest first (members only)"""
    check_project_access(get_task_project_id(task_id, supabase), user_data, supabase)
    return service.list_updates(task_id)


@router.post("/tasks/{task_id}/updates", status_code=201)
async def add_task_update(
    task_id: str,
    update_data: TaskUpdateCreate,
    user_data: Dict = Depends(get_verified_user),
    service: TaskService = Depends(get_task_service),
    supabase: Client = Depends(get_service_supabase)
):
    """Post a progress update on the task (owners and members)"""
    check_project_editor(get_task_project_id(task_id, supabase), user_data, supabase)
    return service.add_update(task_id, update_data.text, user_data["id"])


@router.delete("/tasks/{task_id}", status_code=204)
async def delete_task(
    task_id: str,
    user_data: Dict = Depends(get_verified_user),
    service: TaskService = Depends(get_task_service),
    supabase: Client = Depends(get_service_supabase)
):
    """Delete a task and its history (owners and members)"""
    check_project_editor(get_task_project_id(task_id, supabase), user_data, supabase)
    service.delete_task(task_id, user_data["id"])
    return None
