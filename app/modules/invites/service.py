import logging
import uuid
from datetime import datetime, timedelta, timezone
from supabase import Client
from app.modules.invites.schemas import InviteResponse, InvitePreview, InviteAcceptResponse
from app.modules.activities.service import ActivityService
from app.core.dependencies import get_project_role, get_user_full_name
from app.config import settings
from typing import Dict, Any, Optional
from fastapi import HTTPException

logger = logging.getLogger(__name__)


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Parse a Postgres timestamp string; naive values are taken as UTC."""
    if not value:
        return None
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def build_invite_url(project_id: str, token: str) -> str:
    return f"{settings.app_url.rstrip('/')}/join/{project_id}?token={token}"


class InviteService:
    def __init__(self, supabase: Client):
        self.supabase = supabase
        self.activities = ActivityService(supabase)

    def create_invite(self, project_id: str) -> InviteResponse:
        """Create a time-limited invite link for the project"""
        try:
            now = datetime.now(timezone.utc)
            expires_at = now + timedelta(days=settings.invite_ttl_days)
            token = str(uuid.uuid4())

            result = self.supabase.table("project_invites").insert({
                "project_id": project_id,
                "token": token,
                "created_at": now.isoformat(),
                "expires_at": expires_at.isoformat()
            }).execute()

            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to create invite link")

            invite = result.data[0]
            logger.info(f"Invite created for project {project_id}")
            return InviteResponse(
                id=invite["id"],
                project_id=project_id,
                token=token,
                expires_at=parse_timestamp(invite.get("expires_at")) or expires_at,
                invite_url=build_invite_url(project_id, token)
            )
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error creating invite: {e}")
            raise HTTPException(status_code=500, detail="Failed to create invite link")

    def _get_valid_invite(self, token: str) -> Dict[str, Any]:
        try:
            result = self.supabase.table("project_invites")\
                .select("*")\
                .eq("token", token)\
                .limit(1)\
                .execute()
        except Exception as e:
            logger.error(f"Invite fetch error: {e}")
            raise HTTPException(status_code=404, detail="Invalid or expired invitation")

        if not result.data:
            raise HTTPException(status_code=404, detail="Invalid or expired invitation")

        invite = result.data[0]
        expires_at = parse_timestamp(invite.get("expires_at"))
        if expires_at and expires_at < datetime.now(timezone.utc):
            raise HTTPException(status_code=410, detail="This invitation has expired")
        return invite

    def _get_project(self, project_id: str) -> Dict[str, Any]:
        result = self.supabase.table("projects")\
            .select("id, name, description, created_by")\
            .eq("id", project_id)\
            .limit(1)\
            .execute()
        if not result.data:
            raise HTTPException(status_code=404, detail="Error fetching project details")
        return result.data[0]

    def preview_invite(self, token: str, user_id: str) -> InvitePreview:
        """Describe the project behind an invite without joining it"""
        try:
            invite = self._get_valid_invite(token)
            project = self._get_project(invite["project_id"])

            creator_name = "A team member"
            if project.get("created_by"):
                creator_name = get_user_full_name(project["created_by"], self.supabase, default=creator_name)

            return InvitePreview(
                project_id=invite["project_id"],
                project_name=project["name"],
                project_description=project.get("description") or "",
                creator_name=creator_name,
                expires_at=parse_timestamp(invite.get("expires_at")),
                already_member=get_project_role(invite["project_id"], user_id, self.supabase) is not None
            )
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def accept_invite(self, token: str, user_id: str) -> InviteAcceptResponse:
        """Join the invite's project as a member"""
        try:
            invite = self._get_valid_invite(token)
            project_id = invite["project_id"]
            project = self._get_project(project_id)

            if get_project_role(project_id, user_id, self.supabase) is not None:
                return InviteAcceptResponse(
                    project_id=project_id,
                    project_name=project["name"],
                    already_member=True,
                    message=f"You are already a member of {project['name']}"
                )

            try:
                self.supabase.table("project_members").insert({
                    "project_id": project_id,
                    "user_id": user_id,
                    "role": "member"
                }).execute()
            except Exception as e:
                logger.error(f"Error adding member: {e}")
                raise HTTPException(status_code=500, detail="Failed to join project")

            self.activities.record(project_id, user_id, "member_join", "joined the project")
            logger.info(f"User {user_id} joined project {project_id}")
            return InviteAcceptResponse(
                project_id=project_id,
                project_name=project["name"],
                message=f"Successfully joined {project['name']}"
            )
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
