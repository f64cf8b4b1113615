from fastapi import APIRouter, Depends, HTTPException
from app.database.supabase_client import get_service_supabase
from app.modules.board.schemas import BoardResponse, BoardMoveRequest, BoardMoveResponse
from app.modules.board.service import BoardService, BoardMoveError
from app.modules.tasks.routes import get_task_service
from app.modules.tasks.service import TaskService
from app.core.dependencies import get_verified_user, check_project_access, check_project_editor
from supabase import Client
from typing import Dict

router = APIRouter(prefix="/projects/{project_id}/board", tags=["board"])


def get_board_service(task_service: TaskService = Depends(get_task_service)) -> BoardService:
    return BoardService(task_service)


@router.get("", response_model=BoardResponse)
async def get_board(
    project_id: str,
    user_data: Dict = Depends(get_verified_user),
    service: BoardService = Depends(get_board_service),
    supabase: Client = Depends(get_service_supabase)
):
    """Kanban columns with the project's tasks (members only)"""
    check_project_access(project_id, user_data, supabase)
    return service.get_board(project_id)


@router.post("/moves", response_model=BoardMoveResponse)
async def move_task(
    project_id: str,
    move: BoardMoveRequest,
    user_data: Dict = Depends(get_verified_user),
    service: BoardService = Depends(get_board_service),
    supabase: Client = Depends(get_service_supabase)
):
    """Apply a drag-and-drop move; a column change updates the task status (owners and members)"""
    check_project_editor(project_id, user_data, supabase)
    try:
        return service.move_task(project_id, move, user_data["id"])
    except BoardMoveError as e:
        raise HTTPException(status_code=400, detail=str(e))
