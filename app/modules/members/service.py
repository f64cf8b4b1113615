import logging
from supabase import Client
from app.modules.members.schemas import MemberResponse
from typing import List, Dict, Any
from fastapi import HTTPException

logger = logging.getLogger(__name__)


class MemberService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def list_members(self, project_id: str) -> List[MemberResponse]:
        """List a project's members with their profiles"""
        try:
            result = self.supabase.table("project_members")\
                .select("*")\
                .eq("project_id", project_id)\
                .order("created_at")\
                .execute()
            members = result.data or []
            if not members:
                return []

            users_result = self.supabase.table("users")\
                .select("id, full_name, email, avatar_url")\
                .in_("id", [m["user_id"] for m in members])\
                .execute()
            profiles = {u["id"]: u for u in (users_result.data or [])}

            return [
                MemberResponse(
                    **m,
                    user=profiles.get(m["user_id"]) or {"id": m["user_id"], "full_name": "Unknown User"}
                )
                for m in members
            ]
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def _get_member(self, project_id: str, user_id: str) -> Dict[str, Any]:
        result = self.supabase.table("project_members")\
            .select("*")\
            .eq("project_id", project_id)\
            .eq("user_id", user_id)\
            .limit(1)\
            .execute()
        if not result.data:
            raise HTTPException(status_code=404, detail="Member not found")
        return result.data[0]

    def _count_owners(self, project_id: str) -> int:
        result = self.supabase.table("project_members")\
            .select("user_id")\
            .eq("project_id", project_id)\
            .eq("role", "owner")\
            .execute()
        return len(result.data or [])

    def update_role(self, project_id: str, user_id: str, role: str) -> MemberResponse:
        """Change a member's role; the last owner cannot be demoted"""
        try:
            member = self._get_member(project_id, user_id)
            if member["role"] == role:
                return MemberResponse(**member)

            if member["role"] == "owner" and self._count_owners(project_id) <= 1:
                raise HTTPException(status_code=400, detail="Cannot remove the last owner")

            result = self.supabase.table("project_members")\
                .update({"role": role})\
                .eq("project_id", project_id)\
                .eq("user_id", user_id)\
                .execute()

            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to update member role")

            logger.info(f"Role of {user_id} in project {project_id} changed to {role}")
            return MemberResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def remove_member(self, project_id: str, user_id: str) -> bool:
        """Remove a member; the last owner cannot leave"""
        try:
            member = self._get_member(project_id, user_id)
            if member["role"] == "owner" and self._count_owners(project_id) <= 1:
                raise HTTPException(status_code=400, detail="Cannot remove the last owner")

            self.supabase.table("project_members")\
                .delete()\
                .eq("project_id", project_id)\
                .eq("user_id", user_id)\
                .execute()

            logger.info(f"User {user_id} removed from project {project_id}")
            return True
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
