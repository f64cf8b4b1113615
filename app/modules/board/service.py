"""
Kanban board: tasks grouped into status columns, and drag-and-drop moves.

Columns are fixed and ordered. A move between columns persists the task's new
status; reordering inside a column only affects the board returned for that
request since tasks have no stored position.
"""
import copy
import logging
from typing import Any, Dict, List, Optional, Tuple

from app.modules.board.schemas import BoardColumn, BoardResponse, BoardMoveRequest, BoardMoveResponse
from app.modules.tasks.service import TaskService

logger = logging.getLogger(__name__)

COLUMNS = [
    ("todo", "To Do"),
    ("in_progress", "In Progress"),
    ("review", "Review"),
    ("done", "Done"),
]
COLUMN_IDS = [column_id for column_id, _ in COLUMNS]


class BoardMoveError(ValueError):
    pass


def build_board(tasks: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Group tasks into the fixed columns, keeping their order. Unknown statuses are left out."""
    columns = [{"id": column_id, "title": title, "tasks": []} for column_id, title in COLUMNS]
    by_id = {column["id"]: column for column in columns}
    for task in tasks:
        column = by_id.get(task.get("status"))
        if column is None:
            logger.debug(f"Task {task.get('id')} has unknown status {task.get('status')!r}, not placed")
            continue
        column["tasks"].append(task)
    return columns


def apply_move(
    columns: List[Dict[str, Any]],
    task_id: str,
    source: Dict[str, Any],
    destination: Optional[Dict[str, Any]]
) -> Tuple[List[Dict[str, Any]], Optional[str]]:
    """
    Apply a drag result to the board.

    Returns the new columns and the task's new status, or None when the
    status did not change. Dropping outside the board or onto the same place
    returns the board unchanged.
    """
    if destination is None:
        return columns, None
    if source["column_id"] == destination["column_id"] and source["index"] == destination["index"]:
        return columns, None

    by_id = {column["id"]: column for column in columns}
    if source["column_id"] not in by_id:
        raise BoardMoveError(f"Unknown column: {source['column_id']}")
    if destination["column_id"] not in by_id:
        raise BoardMoveError(f"Unknown column: {destination['column_id']}")

    new_columns = copy.deepcopy(columns)
    new_by_id = {column["id"]: column for column in new_columns}
    source_tasks = new_by_id[source["column_id"]]["tasks"]

    positions = [i for i, task in enumerate(source_tasks) if task["id"] == task_id]
    if not positions:
        raise BoardMoveError("Task is not in the source column")
    task = source_tasks.pop(positions[0])

    destination_tasks = new_by_id[destination["column_id"]]["tasks"]
    index = min(destination["index"], len(destination_tasks))

    if source["column_id"] == destination["column_id"]:
        destination_tasks.insert(index, task)
        return new_columns, None

    task["status"] = destination["column_id"]
    destination_tasks.insert(index, task)
    return new_columns, destination["column_id"]


class BoardService:
    def __init__(self, task_service: TaskService):
        self.task_service = task_service

    def _load_columns(self, project_id: str) -> List[Dict[str, Any]]:
        tasks = self.task_service.list_tasks(project_id)
        return build_board([t.model_dump() for t in tasks])

    @staticmethod
    def _to_response(project_id: str, columns: List[Dict[str, Any]]) -> BoardResponse:
        return BoardResponse(project_id=project_id, columns=[BoardColumn(**c) for c in columns])

    def get_board(self, project_id: str) -> BoardResponse:
        return self._to_response(project_id, self._load_columns(project_id))

    def move_task(self, project_id: str, move: BoardMoveRequest, user_id: str) -> BoardMoveResponse:
        columns = self._load_columns(project_id)
        destination = move.destination.model_dump() if move.destination else None
        new_columns, new_status = apply_move(columns, move.task_id, move.source.model_dump(), destination)

        if new_status is not None:
            self.task_service.change_status(move.task_id, new_status, user_id)
            logger.info(f"Task {move.task_id} moved to {new_status} on board of project {project_id}")

        return BoardMoveResponse(
            moved=new_columns is not columns,
            status_changed=new_status is not None,
            board=self._to_response(project_id, new_columns)
        )
