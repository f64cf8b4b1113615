import logging
import re
from supabase import Client
from app.modules.search.schemas import SearchResponse, ProjectHit, TaskHit
from app.core.dependencies import get_member_project_ids
from fastapi import HTTPException

logger = logging.getLogger(__name__)

RESULT_LIMIT = 5
# Characters with meaning inside a PostgREST or() filter or an ilike pattern
_FILTER_CHARS = re.compile(r"[,()%*\\\"]")


def clean_search_term(query: str) -> str:
    return _FILTER_CHARS.sub(" ", query or "").strip()


class SearchService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def search(self, query: str, user_id: str, limit: int = RESULT_LIMIT) -> SearchResponse:
        """Case-insensitive match on project names/descriptions and task titles/descriptions in the user's projects"""
        term = clean_search_term(query)
        if not term:
            return SearchResponse(query=query or "")

        project_ids = get_member_project_ids(user_id, self.supabase)
        if not project_ids:
            return SearchResponse(query=query)

        try:
            projects_result = self.supabase.table("projects")\
                .select("id, name, description, color")\
                .in_("id", project_ids)\
                .or_(f"name.ilike.%{term}%,description.ilike.%{term}%")\
                .limit(limit)\
                .execute()

            tasks_result = self.supabase.table("tasks")\
                .select("id, project_id, title, description, status")\
                .in_("project_id", project_ids)\
                .or_(f"title.ilike.%{term}%,description.ilike.%{term}%")\
                .limit(limit)\
                .execute()
        except Exception as e:
            logger.error(f"Search error: {e}")
            raise HTTPException(status_code=500, detail=str(e))

        tasks = tasks_result.data or []
        names = {}
        if tasks:
            names_result = self.supabase.table("projects")\
                .select("id, name")\
                .in_("id", list({t["project_id"] for t in tasks}))\
                .execute()
            names = {p["id"]: p["name"] for p in (names_result.data or [])}

        return SearchResponse(
            query=query,
            projects=[ProjectHit(**p) for p in (projects_result.data or [])],
            tasks=[TaskHit(**t, project_name=names.get(t["project_id"])) for t in tasks]
        )
