import logging
from supabase import Client
from app.modules.activities.schemas import ActivityResponse
from typing import List, Optional, Dict, Any
from fastapi import HTTPException

logger = logging.getLogger(__name__)

ACTIVITY_TYPES = ("task_update", "comment", "member_join", "project_update", "document_upload")


def _flatten_user(row: Dict[str, Any]) -> Dict[str, Any]:
    """Move the embedded users(full_name) join onto the row."""
    row = dict(row)
    user = row.pop("users", None) or {}
    row["user_full_name"] = user.get("full_name")
    return row


class ActivityService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def record(
        self,
        project_id: str,
        user_id: str,
        activity_type: str,
        description: str,
        task_id: Optional[str] = None
    ) -> Optional[Dict[str, Any]]:
        """Append an activity row. Failures are logged and never raised."""
        if activity_type not in ACTIVITY_TYPES:
            logger.error(f"Unknown activity type '{activity_type}'")
            return None
        try:
            result = self.supabase.table("activities").insert({
                "project_id": project_id,
                "task_id": task_id,
                "user_id": user_id,
                "type": activity_type,
                "description": description
            }).execute()
            return result.data[0] if result.data else None
        except Exception as e:
            logger.error(f"Error recording {activity_type} activity for project {project_id}: {e}")
            return None

    def list_for_project(self, project_id: str, limit: int = 20) -> List[ActivityResponse]:
        """List a project's activities, newest first"""
        try:
            result = self.supabase.table("activities")\
                .select("*, users(full_name)")\
                .eq("project_id", project_id)\
                .order("created_at", desc=True)\
                .limit(limit)\
                .execute()
            return [ActivityResponse(**_flatten_user(a)) for a in (result.data or [])]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def list_for_task(self, task_id: str, types: Optional[List[str]] = None) -> List[ActivityResponse]:
        """List a task's activities, newest first, optionally filtered by type"""
        try:
            query = self.supabase.table("activities")\
                .select("*, users(full_name)")\
                .eq("task_id", task_id)
            if types:
                query = query.in_("type", types)
            result = query.order("created_at", desc=True).execute()
            return [ActivityResponse(**_flatten_user(a)) for a in (result.data or [])]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def list_recent_for_projects(self, project_ids: List[str], limit: int = 5) -> List[Dict[str, Any]]:
        """Raw newest activities across several projects (assistant context)"""
        if not project_ids:
            return []
        try:
            result = self.supabase.table("activities")\
                .select("*")\
                .in_("project_id", project_ids)\
                .order("created_at", desc=True)\
                .limit(limit)\
                .execute()
            return result.data or []
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
