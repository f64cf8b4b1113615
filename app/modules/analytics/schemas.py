from pydantic import BaseModel
from typing import Dict, List, Optional


class AnalyticsSummary(BaseModel):
    total: int
    by_status: Dict[str, int]
    by_priority: Dict[str, int]
    completion_percentage: int
    assignee_count: int


class UserStatusCounts(BaseModel):
    name: str
    todo: int = 0
    in_progress: int = 0
    review: int = 0
    done: int = 0
    total: int = 0


class UserPriorityCounts(BaseModel):
    user: str
    avatar_url: Optional[str] = None
    total: int = 0
    high: int = 0
    medium: int = 0
    low: int = 0
    high_percentage: int = 0
    medium_percentage: int = 0
    low_percentage: int = 0


class TimelinePoint(BaseModel):
    task_id: str
    date: str
    title: str


class TimelineGroup(BaseModel):
    status: str
    tasks: List[TimelinePoint]


class ActivityPoint(BaseModel):
    date: str
    count: int


class ProjectAnalyticsResponse(BaseModel):
    project_id: str
    summary: AnalyticsSummary
    user_distribution: List[UserStatusCounts]
    priority_distribution: List[UserPriorityCounts]
    timeline: List[TimelineGroup]
    activity_series: List[ActivityPoint]
