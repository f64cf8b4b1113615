"""
Core dependencies for route protection and project access checks
"""

from fastapi import Depends, HTTPException, Security, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from app.database.supabase_client import get_supabase, get_service_supabase
from app.modules.auth.service import AuthService
from app.core.email import BrevoEmailClient, get_email_client
from supabase import Client
from typing import Dict, Any, Iterable, List, Optional
import logging

logger = logging.getLogger(__name__)

security = HTTPBearer()

PROJECT_ROLES = ("owner", "member", "viewer")
EDITOR_ROLES = ("owner", "member")


def get_auth_service(
    supabase: Client = Depends(get_supabase),
    admin: Client = Depends(get_service_supabase),
    email_client: BrevoEmailClient = Depends(get_email_client)
) -> AuthService:
    return AuthService(supabase, admin=admin, email_client=email_client)


def get_current_token(
    credentials: HTTPAuthorizationCredentials = Security(security)
) -> str:
    """Extract JWT token from Authorization header"""
    return credentials.credentials


def get_current_user_id(
    token: str = Depends(get_current_token),
    auth_service: AuthService = Depends(get_auth_service)
) -> dict:
    """Extract current user info from JWT token"""
    return auth_service.get_current_user(token)


def is_email_verified(user_data: dict) -> bool:
    """Email verification is tracked in user_metadata, set by the verify-code flow."""
    return (user_data.get("user_metadata") or {}).get("email_verified") is True


def get_verified_user(user_data: dict = Depends(get_current_user_id)) -> dict:
    """Current user, rejected with 403 until the email verification code was confirmed."""
    if not is_email_verified(user_data):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Email address has not been verified"
        )
    return user_data


def get_member_project_ids(user_id: str, supabase: Client) -> List[str]:
    """Return project_ids from project_members for the user."""
    try:
        result = supabase.table("project_members")\
            .select("project_id")\
            .eq("user_id", user_id)\
            .execute()
        return [m["project_id"] for m in (result.data or [])]
    except Exception as e:
        logger.error(f"Error getting member project ids: {e}")
        raise HTTPException(status_code=500, detail="Failed to load project memberships")


def get_project_role(project_id: str, user_id: str, supabase: Client) -> Optional[str]:
    """Return the caller's role in the project, or None when not a member."""
    result = supabase.table("project_members")\
        .select("role")\
        .eq("project_id", project_id)\
        .eq("user_id", user_id)\
        .limit(1)\
        .execute()
    if not result.data:
        return None
    return result.data[0].get("role")


def check_project_access(
    project_id: str,
    user_data: dict,
    supabase: Client,
    roles: Optional[Iterable[str]] = None
) -> str:
    """Check that the user belongs to the project (optionally with one of `roles`). Returns the role."""
    role = get_project_role(project_id, user_data["id"], supabase)
    if role is None:
        project_result = supabase.table("projects")\
            .select("id")\
            .eq("id", project_id)\
            .limit(1)\
            .execute()
        if not project_result.data:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Project not found"
            )
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You must be a member of this project"
        )
    if roles is not None and role not in roles:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"This action requires one of the roles: {', '.join(roles)}"
        )
    return role


def check_project_editor(project_id: str, user_data: dict, supabase: Client) -> str:
    """Owners and members may change tasks and documents; viewers may not."""
    return check_project_access(project_id, user_data, supabase, roles=EDITOR_ROLES)


def check_project_owner(project_id: str, user_data: dict, supabase: Client) -> str:
    return check_project_access(project_id, user_data, supabase, roles=("owner",))


def get_task_project_id(task_id: str, supabase: Client) -> str:
    """Resolve the project a task belongs to, 404 when the task is missing."""
    result = supabase.table("tasks")\
        .select("project_id")\
        .eq("id", task_id)\
        .limit(1)\
        .execute()
    if not result.data:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Task not found")
    return result.data[0]["project_id"]


def get_user_full_name(user_id: str, supabase: Client, default: str = "Someone") -> str:
    """Display name from the public users table, used in activity descriptions."""
    try:
        result = supabase.table("users")\
            .select("full_name")\
            .eq("id", user_id)\
            .limit(1)\
            .execute()
        if result.data and result.data[0].get("full_name"):
            return result.data[0]["full_name"]
    except Exception as e:
        logger.warning(f"Could not load name for user {user_id}: {e}")
    return default


def user_display(user_data: Dict[str, Any]) -> str:
    """Name from token metadata, falling back to the email local part."""
    metadata = user_data.get("user_metadata") or {}
    if metadata.get("full_name"):
        return metadata["full_name"]
    email = user_data.get("email") or ""
    return email.split("@")[0] or "Someone"
