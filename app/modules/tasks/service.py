import logging
from datetime import datetime, timezone
from supabase import Client
from fastapi import BackgroundTasks, HTTPException
from app.modules.tasks.schemas import TaskCreate, TaskUpdate, TaskResponse
from app.modules.activities.schemas import ActivityResponse
from app.modules.activities.service import ActivityService
from app.modules.projects.service import ProjectService
from app.core.dependencies import get_project_role, get_user_full_name
from app.core.email import BrevoEmailClient, EmailError, TaskEmailData
from typing import List, Dict, Any, Optional

logger = logging.getLogger(__name__)

UPDATE_ACTIVITY_TYPES = ["task_update", "comment"]


def format_status(status: str) -> str:
    """in_progress -> In Progress"""
    return " ".join(word.capitalize() for word in status.split("_"))


def resolve_user_email(supabase: Client, user_id: str) -> Optional[str]:
    """Email address of an auth user via the get_user_email database function."""
    try:
        result = supabase.rpc("get_user_email", {"user_id": user_id}).execute()
        if isinstance(result.data, str) and result.data:
            return result.data
    except Exception as e:
        logger.warning(f"get_user_email failed for {user_id}: {e}")

    result = supabase.table("users")\
        .select("email")\
        .eq("id", user_id)\
        .limit(1)\
        .execute()
    if result.data and result.data[0].get("email"):
        return result.data[0]["email"]
    return None


def send_task_notification(
    supabase: Client,
    email_client: BrevoEmailClient,
    recipient_id: str,
    task_email: TaskEmailData
) -> bool:
    """Email a task notification. Runs after the response, so failures are only logged."""
    try:
        email = resolve_user_email(supabase, recipient_id)
        if not email:
            logger.warning(f"No email address for user {recipient_id}, skipping task notification")
            return False
        name = get_user_full_name(recipient_id, supabase, default=email.split("@")[0])
        email_client.send_task_notification(email, name.split(" ")[0], task_email)
        return True
    except EmailError as e:
        logger.error(f"Failed to send task notification to {recipient_id}: {e}")
    except Exception as e:
        logger.error(f"Error preparing task notification for {recipient_id}: {e}")
    return False


class TaskService:
    def __init__(
        self,
        supabase: Client,
        email_client: Optional[BrevoEmailClient] = None,
        background_tasks: Optional[BackgroundTasks] = None
    ):
        self.supabase = supabase
        self.email_client = email_client or BrevoEmailClient()
        self.background_tasks = background_tasks
        self.activities = ActivityService(supabase)
        self.projects = ProjectService(supabase)

    def _get_task_row(self, task_id: str) -> Dict[str, Any]:
        result = self.supabase.table("tasks")\
            .select("*")\
            .eq("id", task_id)\
            .limit(1)\
            .execute()
        if not result.data:
            raise HTTPException(status_code=404, detail="Task not found")
        return result.data[0]

    def _attach_assignees(self, tasks: List[Dict[str, Any]]) -> List[TaskResponse]:
        assignee_ids = list({t["assignee_id"] for t in tasks if t.get("assignee_id")})
        profiles = {}
        if assignee_ids:
            users_result = self.supabase.table("users")\
                .select("id, full_name, avatar_url")\
                .in_("id", assignee_ids)\
                .execute()
            profiles = {u["id"]: u for u in (users_result.data or [])}
        return [TaskResponse(**t, assignee=profiles.get(t.get("assignee_id"))) for t in tasks]

    def _require_project_member(self, project_id: str, user_id: str) -> None:
        if get_project_role(project_id, user_id, self.supabase) is None:
            raise HTTPException(status_code=400, detail="Assignee must be a member of this project")

    def _refresh_progress(self, project_id: str) -> None:
        try:
            self.projects.recalculate_progress(project_id)
        except HTTPException as e:
            logger.error(f"Progress not updated for project {project_id}: {e.detail}")

    def _notify(self, task: Dict[str, Any], action: str, actor_id: str, update_text: Optional[str] = None) -> None:
        """Queue an email to the assignee unless they made the change themselves"""
        assignee_id = task.get("assignee_id")
        if not assignee_id or assignee_id == actor_id or self.background_tasks is None:
            return
        project_name = self.projects.get_project_name(task["project_id"], default="your project")
        task_email = TaskEmailData(
            task_title=task["title"],
            project_name=project_name,
            action=action,
            priority=task.get("priority"),
            status=format_status(task["status"]) if task.get("status") else None,
            update_text=update_text,
            due_date=task.get("due_date")
        )
        self.background_tasks.add_task(
            send_task_notification, self.supabase, self.email_client, assignee_id, task_email
        )

    def create_task(self, project_id: str, task_data: TaskCreate, user_id: str) -> TaskResponse:
        """Create a task; the assignee defaults to the creator"""
        try:
            assignee_id = task_data.assignee_id or user_id
            if assignee_id != user_id:
                self._require_project_member(project_id, assignee_id)

            now = datetime.now(timezone.utc).isoformat()
            payload = task_data.model_dump(mode="json")
            payload.update({
                "project_id": project_id,
                "assignee_id": assignee_id,
                "created_by": user_id,
                "created_at": now,
                "updated_at": now
            })
            result = self.supabase.table("tasks").insert(payload).execute()

            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to create task")

            task = result.data[0]
            actor_name = get_user_full_name(user_id, self.supabase)
            self.activities.record(
                project_id, user_id, "task_update", f"{actor_name} created task: {task['title']}", task_id=task["id"]
            )
            self._refresh_progress(project_id)
            self._notify(task, "created", user_id)
            logger.info(f"Task {task['id']} created in project {project_id}")
            return self._attach_assignees([task])[0]
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error creating task: {e}")
            raise HTTPException(status_code=500, detail=str(e))

    def get_task(self, task_id: str) -> TaskResponse:
        """Get a task with its assignee profile"""
        try:
            return self._attach_assignees([self._get_task_row(task_id)])[0]
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def list_tasks(self, project_id: str, status: Optional[str] = None) -> List[TaskResponse]:
        """List a project's tasks, newest first"""
        try:
            query = self.supabase.table("tasks")\
                .select("*")\
                .eq("project_id", project_id)
            if status:
                query = query.eq("status", status)
            result = query.order("created_at", desc=True).execute()
            return self._attach_assignees(result.data or [])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def list_my_pending(self, user_id: str, limit: int = 3) -> List[TaskResponse]:
        """Newest to-do tasks assigned to the user, with their project names"""
        try:
            result = self.supabase.table("tasks")\
                .select("*")\
                .eq("assignee_id", user_id)\
                .eq("status", "todo")\
                .order("created_at", desc=True)\
                .limit(limit)\
                .execute()
            tasks = result.data or []
            if not tasks:
                return []

            projects_result = self.supabase.table("projects")\
                .select("id, name")\
                .in_("id", list({t["project_id"] for t in tasks}))\
                .execute()
            names = {p["id"]: p["name"] for p in (projects_result.data or [])}

            responses = self._attach_assignees(tasks)
            for response in responses:
                response.project_name = names.get(response.project_id)
            return responses
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def update_task(self, task_id: str, task_data: TaskUpdate, user_id: str) -> TaskResponse:
        """Update title, description, priority or due date"""
        try:
            current = self._get_task_row(task_id)
            update_data = task_data.model_dump(mode="json", exclude_unset=True)
            if not update_data:
                return self._attach_assignees([current])[0]

            update_data["updated_at"] = datetime.now(timezone.utc).isoformat()
            result = self.supabase.table("tasks")\
                .update(update_data)\
                .eq("id", task_id)\
                .execute()

            if not result.data:
                raise HTTPException(status_code=404, detail="Task not found")

            task = result.data[0]
            if "priority" in update_data and update_data["priority"] != current.get("priority"):
                self._notify(task, "priority_changed", user_id)
            else:
                self._notify(task, "updated", user_id)
            return self._attach_assignees([task])[0]
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def change_status(self, task_id: str, status: str, user_id: str) -> TaskResponse:
        """Move a task to another status, log it and refresh project progress"""
        try:
            current = self._get_task_row(task_id)
            if current["status"] == status:
                return self._attach_assignees([current])[0]

            result = self.supabase.table("tasks")\
                .update({"status": status, "updated_at": datetime.now(timezone.utc).isoformat()})\
                .eq("id", task_id)\
                .execute()

            if not result.data:
                raise HTTPException(status_code=404, detail="Task not found")

            task = result.data[0]
            actor_name = get_user_full_name(user_id, self.supabase)
            self.activities.record(
                task["project_id"], user_id, "task_update",
                f"{actor_name} updated status to {format_status(status)}", task_id=task_id
            )
            self._refresh_progress(task["project_id"])
            self._notify(task, "status_changed", user_id)
            return self._attach_assignees([task])[0]
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def change_assignee(self, task_id: str, assignee_id: str, user_id: str) -> TaskResponse:
        """Reassign a task to another project member"""
        try:
            current = self._get_task_row(task_id)
            self._require_project_member(current["project_id"], assignee_id)

            result = self.supabase.table("tasks")\
                .update({"assignee_id": assignee_id, "updated_at": datetime.now(timezone.utc).isoformat()})\
                .eq("id", task_id)\
                .execute()

            if not result.data:
                raise HTTPException(status_code=404, detail="Task not found")

            task = result.data[0]
            actor_name = get_user_full_name(user_id, self.supabase)
            assignee_name = get_user_full_name(assignee_id, self.supabase, default="Unknown User")
            self.activities.record(
                task["project_id"], user_id, "task_update",
                f"{actor_name} assigned task to {assignee_name}", task_id=task_id
            )
            self._notify(task, "updated", user_id, update_text=f"{actor_name} assigned this task to you")
            return self._attach_assignees([task])[0]
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def add_update(self, task_id: str, text: str, user_id: str) -> Dict[str, Any]:
        """Post a free-text progress update on a task"""
        if not text or not text.strip():
            raise HTTPException(status_code=400, detail="Update text cannot be empty")
        try:
            task = self._get_task_row(task_id)
            actor_name = get_user_full_name(user_id, self.supabase)
            result = self.supabase.table("activities").insert({
                "project_id": task["project_id"],
                "task_id": task_id,
                "user_id": user_id,
                "type": "task_update",
                "description": f"{actor_name}: {text.strip()}"
            }).execute()

            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to add update")

            self._notify(task, "updated", user_id, update_text=text.strip())
            return result.data[0]
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def list_updates(self, task_id: str) -> List[ActivityResponse]:
        """Updates and comments on a task, newest first"""
        return self.activities.list_for_task(task_id, UPDATE_ACTIVITY_TYPES)

    def delete_task(self, task_id: str, user_id: str) -> bool:
        """Delete a task's activities, then the task itself"""
        try:
            task = self._get_task_row(task_id)

            self.supabase.table("activities")\
                .delete()\
                .eq("task_id", task_id)\
                .execute()

            self.supabase.table("tasks")\
                .delete()\
                .eq("id", task_id)\
                .execute()

            actor_name = get_user_full_name(user_id, self.supabase)
            self.activities.record(
                task["project_id"], user_id, "task_update", f"{actor_name} deleted task: {task['title']}"
            )
            self._refresh_progress(task["project_id"])
            logger.info(f"Task {task_id} deleted by {user_id}")
            return True
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
