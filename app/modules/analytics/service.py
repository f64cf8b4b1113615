"""
Project analytics computed in Python from task and activity rows.

The functions take plain dicts as returned by Supabase (tasks carry an
optional embedded `assignee` with `full_name`/`avatar_url`) so they can be
tested without a database.
"""
import logging
from collections import OrderedDict
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List

from supabase import Client
from fastapi import HTTPException

from app.modules.analytics.schemas import ProjectAnalyticsResponse
from app.modules.projects.service import calculate_progress
from app.modules.tasks.service import TaskService

logger = logging.getLogger(__name__)

STATUSES = ["todo", "in_progress", "review", "done"]
PRIORITIES = ["high", "medium", "low"]
UNASSIGNED = "Unassigned"


def percentage(part: int, whole: int) -> int:
    """Whole-number percentage, rounded half up; 0 when `whole` is 0."""
    if not whole:
        return 0
    return int(part / whole * 100 + 0.5)


def _assignee_name(task: Dict[str, Any]) -> str:
    assignee = task.get("assignee") or {}
    return assignee.get("full_name") or UNASSIGNED


def summarize(tasks: List[Dict[str, Any]]) -> Dict[str, Any]:
    by_status = {status: 0 for status in STATUSES}
    by_priority = {priority: 0 for priority in PRIORITIES}
    assignees = set()
    for task in tasks:
        if task.get("status") in by_status:
            by_status[task["status"]] += 1
        if task.get("priority") in by_priority:
            by_priority[task["priority"]] += 1
        if task.get("assignee_id"):
            assignees.add(task["assignee_id"])
    return {
        "total": len(tasks),
        "by_status": by_status,
        "by_priority": by_priority,
        "completion_percentage": calculate_progress(t.get("status") for t in tasks),
        "assignee_count": len(assignees),
    }


def user_distribution(tasks: Iterable[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Per-assignee status counts, busiest first."""
    users: Dict[str, Dict[str, Any]] = OrderedDict()
    for task in tasks:
        name = _assignee_name(task)
        entry = users.setdefault(name, {"name": name, "todo": 0, "in_progress": 0, "review": 0, "done": 0, "total": 0})
        if task.get("status") in STATUSES:
            entry[task["status"]] += 1
        entry["total"] += 1
    return sorted(users.values(), key=lambda u: u["total"], reverse=True)


def priority_distribution(tasks: Iterable[Dict[str, Any]], open_only: bool = False) -> List[Dict[str, Any]]:
    """Per-assignee priority counts and their share of the assignee's tasks."""
    users: Dict[str, Dict[str, Any]] = OrderedDict()
    for task in tasks:
        if open_only and task.get("status") == "done":
            continue
        name = _assignee_name(task)
        entry = users.get(name)
        if entry is None:
            entry = users[name] = {
                "user": name,
                "avatar_url": (task.get("assignee") or {}).get("avatar_url"),
                "total": 0, "high": 0, "medium": 0, "low": 0,
            }
        if task.get("priority") in PRIORITIES:
            entry[task["priority"]] += 1
        entry["total"] += 1

    for entry in users.values():
        for priority in PRIORITIES:
            entry[f"{priority}_percentage"] = percentage(entry[priority], entry["total"])
    return sorted(users.values(), key=lambda u: u["total"], reverse=True)


def timeline(tasks: Iterable[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Tasks with a due date grouped by status, each group in date order. Empty groups are dropped."""
    groups: Dict[str, List[Dict[str, Any]]] = OrderedDict((status, []) for status in STATUSES)
    for task in tasks:
        if not task.get("due_date"):
            continue
        groups.setdefault(task.get("status") or "unknown", []).append({
            "task_id": task["id"],
            "date": str(task["due_date"])[:10],
            "title": task["title"],
        })
    return [
        {"status": status, "tasks": sorted(points, key=lambda p: p["date"])}
        for status, points in groups.items()
        if points
    ]


def _day(value: Any) -> str:
    if isinstance(value, datetime):
        moment = value
    else:
        moment = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    if moment.tzinfo is not None:
        moment = moment.astimezone(timezone.utc)
    return moment.date().isoformat()


def activity_series(activities: Iterable[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Number of activities per UTC calendar day, oldest first."""
    counts: Dict[str, int] = {}
    for activity in activities:
        if not activity.get("created_at"):
            continue
        day = _day(activity["created_at"])
        counts[day] = counts.get(day, 0) + 1
    return [{"date": day, "count": counts[day]} for day in sorted(counts)]


class AnalyticsService:
    def __init__(self, supabase: Client, task_service: TaskService = None):
        self.supabase = supabase
        self.task_service = task_service or TaskService(supabase)

    def get_project_analytics(self, project_id: str, open_only: bool = False) -> ProjectAnalyticsResponse:
        tasks = [t.model_dump() for t in self.task_service.list_tasks(project_id)]
        try:
            result = self.supabase.table("activities")\
                .select("created_at")\
                .eq("project_id", project_id)\
                .order("created_at")\
                .execute()
            activities = result.data or []
        except Exception as e:
            logger.error(f"Error loading activities for analytics of project {project_id}: {e}")
            raise HTTPException(status_code=500, detail=str(e))

        return ProjectAnalyticsResponse(
            project_id=project_id,
            summary=summarize(tasks),
            user_distribution=user_distribution(tasks),
            priority_distribution=priority_distribution(tasks, open_only=open_only),
            timeline=timeline(tasks),
            activity_series=activity_series(activities)
        )
