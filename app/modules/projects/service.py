import logging
import random
from datetime import datetime, timezone
from supabase import Client
from app.modules.projects.schemas import ProjectCreate, ProjectUpdate, ProjectResponse, ProjectListItem
from app.modules.activities.service import ActivityService
from typing import List, Iterable, Optional
from fastapi import HTTPException

logger = logging.getLogger(__name__)

PROJECT_COLORS = ["#8B5CF6", "#67E3F9", "#FF8A65"]


def calculate_progress(statuses: Iterable[str]) -> int:
    """Percentage of tasks in `done`, rounded half up; 0 for a project without tasks."""
    statuses = list(statuses)
    if not statuses:
        return 0
    done = sum(1 for s in statuses if s == "done")
    return int(done / len(statuses) * 100 + 0.5)


class ProjectService:
    def __init__(self, supabase: Client):
        self.supabase = supabase
        self.activities = ActivityService(supabase)

    def create_project(self, project_data: ProjectCreate, user_id: str) -> ProjectResponse:
        """Create a project and its owner membership through the database function"""
        try:
            payload = project_data.model_dump(mode="json")
            payload.update({
                "progress": 0,
                "color": random.choice(PROJECT_COLORS),
                "created_by": user_id
            })
            result = self.supabase.rpc("create_project_with_owner", {
                "project_data": payload,
                "owner_id": user_id
            }).execute()

            row = result.data[0] if isinstance(result.data, list) and result.data else result.data
            if not row:
                raise HTTPException(status_code=500, detail="Failed to create project")

            logger.info(f"Project {row['id']} created by {user_id}")
            return ProjectResponse(**row)
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error creating project: {e}")
            raise HTTPException(status_code=500, detail=str(e))

    def get_project_by_id(self, project_id: str) -> ProjectResponse:
        """Get project by ID"""
        try:
            result = self.supabase.table("projects")\
                .select("*")\
                .eq("id", project_id)\
                .limit(1)\
                .execute()

            if not result.data:
                raise HTTPException(status_code=404, detail="Project not found")

            return ProjectResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def view_project(self, project_id: str, user_id: str) -> ProjectResponse:
        """Get a project and remember that the user opened it"""
        project = self.get_project_by_id(project_id)
        try:
            self.supabase.table("project_views").insert({
                "project_id": project_id,
                "user_id": user_id,
                "viewed_at": datetime.now(timezone.utc).isoformat()
            }).execute()
        except Exception as e:
            logger.warning(f"Could not record view of project {project_id}: {e}")
        return project

    def list_projects(self, user_id: str) -> List[ProjectListItem]:
        """Projects the user is a member of or created, newest first, with task counts"""
        try:
            members_result = self.supabase.table("project_members")\
                .select("project_id, role")\
                .eq("user_id", user_id)\
                .execute()
            roles = {m["project_id"]: m["role"] for m in (members_result.data or [])}

            created_result = self.supabase.table("projects")\
                .select("id")\
                .eq("created_by", user_id)\
                .execute()
            project_ids = set(roles) | {p["id"] for p in (created_result.data or [])}

            if not project_ids:
                return []

            projects_result = self.supabase.table("projects")\
                .select("*")\
                .in_("id", list(project_ids))\
                .order("created_at", desc=True)\
                .execute()

            tasks_result = self.supabase.table("tasks")\
                .select("project_id")\
                .in_("project_id", list(project_ids))\
                .execute()
            counts = {}
            for task in tasks_result.data or []:
                counts[task["project_id"]] = counts.get(task["project_id"], 0) + 1

            return [
                ProjectListItem(**p, tasks_count=counts.get(p["id"], 0), role=roles.get(p["id"]))
                for p in (projects_result.data or [])
            ]
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def list_recent_projects(self, user_id: str, limit: int = 5) -> List[ProjectResponse]:
        """Projects the user opened most recently, most recent first, one entry per project"""
        try:
            views_result = self.supabase.table("project_views")\
                .select("project_id, viewed_at")\
                .eq("user_id", user_id)\
                .order("viewed_at", desc=True)\
                .limit(limit * 10)\
                .execute()

            ordered_ids: List[str] = []
            for view in views_result.data or []:
                if view["project_id"] not in ordered_ids:
                    ordered_ids.append(view["project_id"])
                if len(ordered_ids) == limit:
                    break

            if not ordered_ids:
                return []

            members_result = self.supabase.table("project_members")\
                .select("project_id")\
                .eq("user_id", user_id)\
                .in_("project_id", ordered_ids)\
                .execute()
            visible = {m["project_id"] for m in (members_result.data or [])}

            projects_result = self.supabase.table("projects")\
                .select("*")\
                .in_("id", [pid for pid in ordered_ids if pid in visible])\
                .execute()
            by_id = {p["id"]: p for p in (projects_result.data or [])}

            return [ProjectResponse(**by_id[pid]) for pid in ordered_ids if pid in by_id]
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def update_project(self, project_id: str, project_data: ProjectUpdate, user_id: str, actor_name: str) -> ProjectResponse:
        """Update project details and log a project_update activity"""
        try:
            update_data = project_data.model_dump(mode="json", exclude_unset=True)
            if not update_data:
                return self.get_project_by_id(project_id)

            update_data["updated_at"] = datetime.now(timezone.utc).isoformat()

            result = self.supabase.table("projects")\
                .update(update_data)\
                .eq("id", project_id)\
                .execute()

            if not result.data:
                raise HTTPException(status_code=404, detail="Project not found")

            self.activities.record(
                project_id, user_id, "project_update", f"{actor_name} updated the project details"
            )
            return ProjectResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def delete_project(self, project_id: str) -> bool:
        """Delete a project; members, tasks and activities cascade in the database"""
        try:
            result = self.supabase.table("projects")\
                .delete()\
                .eq("id", project_id)\
                .execute()

            if not result.data:
                raise HTTPException(status_code=404, detail="Project not found")

            logger.info(f"Project {project_id} deleted")
            return True
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def recalculate_progress(self, project_id: str) -> int:
        """Store round(done / total * 100) on the project and return it"""
        try:
            tasks_result = self.supabase.table("tasks")\
                .select("status")\
                .eq("project_id", project_id)\
                .execute()
            progress = calculate_progress(t["status"] for t in (tasks_result.data or []))

            self.supabase.table("projects")\
                .update({"progress": progress})\
                .eq("id", project_id)\
                .execute()
            return progress
        except Exception as e:
            logger.error(f"Error recalculating progress for project {project_id}: {e}")
            raise HTTPException(status_code=500, detail=str(e))

    def get_project_name(self, project_id: str, default: Optional[str] = None) -> Optional[str]:
        try:
            result = self.supabase.table("projects")\
                .select("name")\
                .eq("id", project_id)\
                .limit(1)\
                .execute()
            if result.data:
                return result.data[0]["name"]
        except Exception as e:
            logger.warning(f"Could not load name of project {project_id}: {e}")
        return default
