from supabase import Client
from app.modules.users.schemas import UserUpdate, UserResponse, SkillCreate, SkillResponse
from typing import List
from fastapi import HTTPException
from datetime import datetime, timezone


class UserService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def get_user_by_id(self, user_id: str) -> UserResponse:
        """Get user profile by ID"""
        try:
            result = self.supabase.table("users")\
                .select("*")\
                .eq("id", user_id)\
                .limit(1)\
                .execute()

            if not result.data:
                raise HTTPException(status_code=404, detail="User not found")

            return UserResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def update_user(self, user_id: str, user_data: UserUpdate) -> UserResponse:
        """Update user profile"""
        try:
            update_data = {"updated_at": datetime.now(timezone.utc).isoformat()}
            if user_data.full_name is not None:
                update_data["full_name"] = user_data.full_name
            if user_data.avatar_url is not None:
                update_data["avatar_url"] = user_data.avatar_url

            result = self.supabase.table("users")\
                .update(update_data)\
                .eq("id", user_id)\
                .execute()

            if not result.data:
                raise HTTPException(status_code=404, detail="User not found")

            return UserResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def list_skills(self, user_id: str) -> List[SkillResponse]:
        """List a user's skills, oldest first"""
        try:
            result = self.supabase.table("user_skills")\
                .select("*")\
                .eq("user_id", user_id)\
                .order("created_at")\
                .execute()
            return [SkillResponse(**skill) for skill in result.data]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def add_skill(self, user_id: str, skill_data: SkillCreate) -> SkillResponse:
        """Add a skill to the user's profile"""
        try:
            existing = self.supabase.table("user_skills")\
                .select("id")\
                .eq("user_id", user_id)\
                .ilike("skill_name", skill_data.skill_name)\
                .execute()
            if existing.data:
                raise HTTPException(status_code=400, detail="Skill already added")

            result = self.supabase.table("user_skills").insert({
                "user_id": user_id,
                "skill_name": skill_data.skill_name,
                "proficiency": skill_data.proficiency
            }).execute()

            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to add skill")

            return SkillResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def remove_skill(self, user_id: str, skill_id: str) -> bool:
        """Remove one of the user's skills"""
        try:
            result = self.supabase.table("user_skills")\
                .delete()\
                .eq("id", skill_id)\
                .eq("user_id", user_id)\
                .execute()

            if not result.data:
                raise HTTPException(status_code=404, detail="Skill not found")
            return True
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
