import json
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

ENHANCE_SYSTEM_PROMPT = (
    "Neaten and rewrite the following task description to be concise, clear, and professional. "
    "Keep the original meaning, but remove filler words or messy phrasing. "
    "Respond with only the improved text."
)

GUIDELINES = """Guidelines for your response:
1. Be friendly and conversational, but concise
2. Use natural, casual language
3. Format dates in a natural way (e.g., "due next Friday" or "due in 2 days")
4. If you see a request to update a task status, even if it's misspelled (like "tasl"), try to understand the intent
5. Recognize variations of status updates like "mark as done", "complete", "finish", etc.
6. For task creation, suggest using formats like:
   - "add task 'task name' to 'project name'"
   - "create task 'task name' in 'project name' with description 'description'"
7. Keep responses to 1-2 short sentences
8. Don't be overly formal or robotic
9. Maintain context from previous messages to understand follow-up questions
10. If a task or project was mentioned in previous messages, use that context for follow-up questions
11. Reference project descriptions and task details when relevant to the conversation
12. Consider recent activity updates when providing context-aware responses
13. Include task descriptions and comments in your responses when they're relevant to the user's question
14. When asked about a specific task, include its description and any recent comments
15. Only provide information about tasks from projects the user is a member of
16. If a user asks about task context, include both the task description and any comments or updates"""

HISTORY_SIZE = 5


def _parse(value: Any) -> datetime:
    if isinstance(value, datetime):
        moment = value
    else:
        moment = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment


def time_ago(value: Any, now: Optional[datetime] = None) -> str:
    """Rough distance like '5 minutes ago' or 'about 2 hours ago'"""
    now = now or datetime.now(timezone.utc)
    seconds = max(0, int((now - _parse(value)).total_seconds()))
    minutes = seconds // 60
    if minutes < 1:
        return "less than a minute ago"
    if minutes < 60:
        return f"{minutes} minute{'s' if minutes != 1 else ''} ago"
    hours = minutes // 60
    if hours < 24:
        return f"about {hours} hour{'s' if hours != 1 else ''} ago"
    days = hours // 24
    if days < 30:
        return f"{days} day{'s' if days != 1 else ''} ago"
    months = days // 30
    if months < 12:
        return f"about {months} month{'s' if months != 1 else ''} ago"
    years = days // 365
    return f"about {years} year{'s' if years != 1 else ''} ago"


def format_activities(activities: List[Dict[str, Any]], now: Optional[datetime] = None) -> str:
    if not activities:
        return "No recent activities"
    return "\n".join(
        f"{a['type']}: {a['description']} ({time_ago(a['created_at'], now)})" for a in activities
    )


def format_history(history: List[Dict[str, Any]]) -> str:
    return "\n".join(f"{m['role']}: {m['content']}" for m in history[-HISTORY_SIZE:])


def build_chat_prompt(
    projects: List[Dict[str, Any]],
    activities: List[Dict[str, Any]],
    history: List[Dict[str, Any]],
    message: str,
    now: Optional[datetime] = None
) -> str:
    """Prompt with the user's projects, tasks and comments, recent activity and the conversation so far"""
    context = json.dumps(projects, indent=2, default=str)
    return (
        "You are a friendly and helpful project management assistant. "
        "Here's the current state of projects and tasks:\n\n"
        f"{context}\n\n"
        f"Recent activities:\n{format_activities(activities, now)}\n\n"
        f"Recent conversation history:\n{format_history(history)}\n\n"
        f"Current user question: {message}\n\n"
        f"{GUIDELINES}"
    )
