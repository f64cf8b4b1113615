import logging
from supabase import Client
from fastapi import HTTPException
from app.modules.assistant import parser
from app.modules.assistant.llm import ChatModelClient
from app.modules.assistant.prompts import build_chat_prompt, ENHANCE_SYSTEM_PROMPT
from app.modules.assistant.schemas import ChatResponse, EnhanceResponse
from app.modules.activities.service import ActivityService
from app.modules.tasks.schemas import TaskCreate
from app.modules.tasks.service import TaskService
from app.core.dependencies import EDITOR_ROLES
from typing import List, Dict, Any

logger = logging.getLogger(__name__)

NO_PROJECTS_REPLY = "You don't have access to any projects. Please join a project first."
ACTIVITY_CONTEXT_SIZE = 5


class AssistantService:
    def __init__(self, supabase: Client, task_service: TaskService, llm: ChatModelClient):
        self.supabase = supabase
        self.task_service = task_service
        self.llm = llm
        self.activities = ActivityService(supabase)

    def _load_context(self, user_id: str) -> Dict[str, Any]:
        """The user's projects with their tasks and task comments, plus roles"""
        try:
            members_result = self.supabase.table("project_members")\
                .select("project_id, role")\
                .eq("user_id", user_id)\
                .execute()
            roles = {m["project_id"]: m["role"] for m in (members_result.data or [])}
            if not roles:
                return {"projects": [], "tasks": [], "roles": {}}

            projects_result = self.supabase.table("projects")\
                .select("id, name, description")\
                .in_("id", list(roles))\
                .execute()
            tasks_result = self.supabase.table("tasks")\
                .select("id, title, description, status, priority, due_date, project_id")\
                .in_("project_id", list(roles))\
                .execute()
            tasks = tasks_result.data or []

            comments: Dict[str, List[Dict[str, Any]]] = {}
            if tasks:
                activities_result = self.supabase.table("activities")\
                    .select("id, description, created_at, type, task_id")\
                    .in_("task_id", [t["id"] for t in tasks])\
                    .in_("type", ["task_update", "comment"])\
                    .order("created_at", desc=True)\
                    .execute()
                for activity in activities_result.data or []:
                    comments.setdefault(activity["task_id"], []).append({
                        "description": activity["description"],
                        "created_at": activity["created_at"],
                        "type": activity["type"],
                    })
        except Exception as e:
            logger.error(f"Error fetching assistant context for {user_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to fetch project data")

        projects = []
        for project in projects_result.data or []:
            projects.append({
                **project,
                "tasks": [
                    {**t, "comments": comments.get(t["id"], [])}
                    for t in tasks if t["project_id"] == project["id"]
                ],
            })
        return {"projects": projects, "tasks": tasks, "roles": roles}

    def _create_task(self, command: parser.CreateTaskCommand, context: Dict[str, Any], user_id: str) -> ChatResponse:
        projects = context["projects"]
        if not projects:
            return ChatResponse(reply=NO_PROJECTS_REPLY)

        project = parser.find_project(command.project, projects)
        if project is None:
            return ChatResponse(reply=(
                f'I couldn\'t find a project similar to "{command.project}". '
                f"Your available projects are: {parser.project_list_text(projects)}. "
                "Please try again with one of these project names."
            ))
        if context["roles"].get(project["id"]) not in EDITOR_ROLES:
            return ChatResponse(reply=f"You can view the {project['name']} project but not add tasks to it.")

        task = self.task_service.create_task(
            project["id"],
            TaskCreate(title=command.title, description=command.description, priority=command.priority),
            user_id
        )
        suffix = f" with {command.priority} priority" if command.priority != "medium" else ""
        return ChatResponse(
            reply=f'Great! I\'ve added "{command.title}" to the {project["name"]} project{suffix}.',
            action="create_task",
            task_id=task.id,
            project_id=project["id"]
        )

    def _update_status(self, command: parser.StatusUpdateCommand, context: Dict[str, Any], user_id: str) -> ChatResponse:
        if not context["projects"]:
            return ChatResponse(reply=NO_PROJECTS_REPLY)

        status = parser.normalize_status(command.status_term)
        if status is None:
            return ChatResponse(reply=parser.unknown_status_message(command.status_term))

        task = parser.find_task(command.task_title, context["tasks"])
        if task is None:
            return ChatResponse(
                reply=f'I couldn\'t find a task with a title similar to "{command.task_title}" in your projects.'
            )
        if context["roles"].get(task["project_id"]) not in EDITOR_ROLES:
            return ChatResponse(reply=f'You don\'t have permission to change "{task["title"]}".')

        self.task_service.change_status(task["id"], status, user_id)
        return ChatResponse(
            reply=f'I\'ve updated "{command.task_title}" to {status}.',
            action="update_status",
            task_id=task["id"],
            project_id=task["project_id"]
        )

    def chat(self, user_id: str, message: str, history: List[Dict[str, Any]]) -> ChatResponse:
        """Run a create-task or status command when one is recognised, otherwise ask the model"""
        context = self._load_context(user_id)

        create_command = parser.parse_create_task(message)
        if create_command:
            logger.info(f"Assistant create-task request from {user_id}: {create_command}")
            return self._create_task(create_command, context, user_id)

        status_command = parser.parse_status_update(message, history)
        if status_command:
            logger.info(f"Assistant status request from {user_id}: {status_command}")
            return self._update_status(status_command, context, user_id)

        activities = self.activities.list_recent_for_projects(list(context["roles"]), ACTIVITY_CONTEXT_SIZE)
        prompt = build_chat_prompt(context["projects"], activities, history, message)
        reply = self.llm.complete([{"role": "user", "content": prompt}])
        return ChatResponse(reply=reply)

    def enhance(self, text: str) -> EnhanceResponse:
        """Rewrite a task description to be concise and professional"""
        reply = self.llm.complete(
            [
                {"role": "system", "content": ENHANCE_SYSTEM_PROMPT},
                {"role": "user", "content": text},
            ],
            temperature=1.0
        )
        return EnhanceResponse(text=reply)
