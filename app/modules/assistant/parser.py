"""
Command recognition for the assistant chat.

Two families of commands are recognised with ordered regular expressions,
first match wins: creating a task in a project, and changing a task's
status. Anything else is answered by the language model.
"""
import re
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional

_Q = r"""['"]?"""

# (pattern, project named before the title)
CREATE_TASK_PATTERNS = [
    # create a task in <project> called <title> [with ...]
    (re.compile(
        rf"(?:create|add)\s+(?:a\s+)?(?:new\s+)?task\s+(?:in|to)\s+(?:the\s+)?{_Q}(.+?)(?:\s+project)?{_Q}"
        rf"\s+(?:called|named|titled)\s+{_Q}(.+?){_Q}(?:\s+with\s+(.+))?$", re.IGNORECASE), True),
    # create a task called <title> in <project> [with ...]
    (re.compile(
        rf"(?:create|add)\s+(?:a\s+)?(?:new\s+)?task\s+(?:called|named|titled)\s+{_Q}(.+?){_Q}"
        rf"\s+(?:in|to)\s+(?:the\s+)?{_Q}(.+?)(?:\s+project)?{_Q}(?:\s+with\s+(.+))?$", re.IGNORECASE), False),
    # create task <title> in <project> [with ...]
    (re.compile(
        rf"(?:create|add)\s+(?:a\s+)?(?:new\s+)?task\s+{_Q}(.+?){_Q}"
        rf"\s+(?:in|to)\s+(?:the\s+)?{_Q}(.+?)(?:\s+project)?{_Q}(?:\s+with\s+(.+))?$", re.IGNORECASE), False),
    # add <title> to <project> [with ...]
    (re.compile(
        rf"(?:add|create)\s+{_Q}(.+?){_Q}"
        rf"\s+(?:to|in)\s+(?:the\s+)?{_Q}(.+?)(?:\s+project)?{_Q}(?:\s+with\s+(.+))?$", re.IGNORECASE), False),
    # i need a new task <title> for <project>
    (re.compile(
        rf"(?:i\s+need|i\s+want|please\s+create|please\s+add)\s+(?:a\s+)?(?:new\s+)?task\s+{_Q}(.+?){_Q}"
        rf"\s+(?:in|to|for)\s+(?:the\s+)?{_Q}(.+?)(?:\s+project)?{_Q}(?:\s+with\s+(.+))?$", re.IGNORECASE), False),
    # make a task called <title> for <project>
    (re.compile(
        rf"(?:make|create|setup)\s+(?:a\s+)?(?:new\s+)?task\s+(?:called|named|titled)\s+{_Q}(.+?){_Q}"
        rf"\s+(?:for|in|to)\s+(?:the\s+)?{_Q}(.+?)(?:\s+project)?{_Q}(?:\s+with\s+(.+))?$", re.IGNORECASE), False),
    # can you add <title> to <project>
    (re.compile(
        rf"(?:can\s+you|could\s+you|would\s+you)?\s*(?:please\s+)?(?:add|create)\s+(?:a\s+)?(?:new\s+)?(?:task\s+)?{_Q}(.+?){_Q}"
        rf"\s+(?:to|in|for)\s+(?:the\s+)?{_Q}(.+?)(?:\s+project)?{_Q}(?:\s+with\s+(.+))?$", re.IGNORECASE), False),
]

TITLE_AND_STATUS = "title_and_status"
STATUS_ONLY = "status_only"
COMPLETE = "complete"

STATUS_UPDATE_PATTERNS = [
    # mark <task> as <status>
    (re.compile(
        rf"(?:mark|set|change|update)\s+(?:the\s+)?(?:task\s+)?{_Q}(.+?){_Q}\s+(?:as|to)\s+(.+)", re.IGNORECASE),
     TITLE_AND_STATUS),
    # mark as <status>, task taken from the previous message
    (re.compile(r"(?:mark|set|change|update)\s+(?:as|to)\s+(.+)", re.IGNORECASE), STATUS_ONLY),
    # complete <task>
    (re.compile(rf"(?:complete|finish|done with)\s+(?:the\s+)?(?:task\s+)?{_Q}(.+?){_Q}$", re.IGNORECASE), COMPLETE),
    # mark <task> complete
    (re.compile(
        rf"(?:mark|set)\s+(?:the\s+)?(?:task\s+)?{_Q}(.+?){_Q}\s+(?:as\s+)?(?:complete|done)$", re.IGNORECASE),
     COMPLETE),
    # move <task> to <status>
    (re.compile(
        rf"(?:move|transition|change)\s+(?:the\s+)?(?:task\s+)?{_Q}(.+?){_Q}\s+(?:to|into)\s+(.+)", re.IGNORECASE),
     TITLE_AND_STATUS),
    # update <task> status to <status>
    (re.compile(
        rf"(?:update|change|set)\s+(?:the\s+)?(?:status\s+(?:of\s+)?)?(?:task\s+)?{_Q}(.+?){_Q}\s+(?:to|as)\s+(.+)",
        re.IGNORECASE),
     TITLE_AND_STATUS),
    # can you mark <task> as <status>
    (re.compile(
        rf"(?:can\s+you|could\s+you|would\s+you)?\s*(?:please\s+)?(?:mark|set|change)\s+(?:the\s+)?(?:task\s+)?{_Q}(.+?){_Q}"
        rf"\s+(?:as|to)\s+(.+)", re.IGNORECASE),
     TITLE_AND_STATUS),
    # i want to move <task> to <status>
    (re.compile(
        rf"(?:i\s+want\s+to|i\s+need\s+to|please)\s+(?:move|change|update|mark)\s+(?:the\s+)?(?:task\s+)?{_Q}(.+?){_Q}"
        rf"\s+(?:to|as)\s+(.+)", re.IGNORECASE),
     TITLE_AND_STATUS),
]

PREVIOUS_TASK_PATTERN = re.compile(
    rf"(?:task|write|create)\s+(?:task\s+)?{_Q}(.+?){_Q}(?:\s+(?:in|to|for)\s+.+)?$", re.IGNORECASE)
PRIORITY_PATTERN = re.compile(r"(high|medium|low)\s+priority", re.IGNORECASE)
PRIORITY_SPLIT = re.compile(r"(?:high|medium|low)\s+priority", re.IGNORECASE)

STATUS_TERMS = {
    "todo": "todo",
    "to do": "todo",
    "to-do": "todo",
    "not started": "todo",
    "new": "todo",
    "backlog": "todo",
    "planning": "todo",
    "in progress": "in_progress",
    "in-progress": "in_progress",
    "working": "in_progress",
    "started": "in_progress",
    "ongoing": "in_progress",
    "underway": "in_progress",
    "processing": "in_progress",
    "wip": "in_progress",
    "doing": "in_progress",
    "review": "review",
    "in review": "review",
    "under review": "review",
    "done": "done",
    "completed": "done",
    "complete": "done",
    "finished": "done",
    "closed": "done",
    "resolved": "done",
    "ready": "done",
    "finalized": "done",
}


@dataclass
class CreateTaskCommand:
    title: str
    project: str
    priority: str = "medium"
    description: str = ""


@dataclass
class StatusUpdateCommand:
    task_title: str
    status_term: str


def strip_quotes(value: str) -> str:
    return re.sub(r"""^['"]|['"]$""", "", value.strip()).strip()


def _parse_attributes(text: str):
    """'with high priority and <description>' -> (priority, description)"""
    priority = "medium"
    match = PRIORITY_PATTERN.search(text)
    if match:
        priority = match.group(1).lower()
    parts = [p.strip(" ,.") for p in PRIORITY_SPLIT.split(text)]
    parts = [p for p in parts if p]
    description = " ".join(parts)
    description = re.sub(r"^(?:and\s+)?(?:(?:a\s+)?description\s*:?\s*)?", "", description, flags=re.IGNORECASE)
    return priority, strip_quotes(description)


def parse_create_task(message: str) -> Optional[CreateTaskCommand]:
    """Recognise a create-task request. Returns None when no pattern matches."""
    message = message.strip()
    for pattern, project_first in CREATE_TASK_PATTERNS:
        match = pattern.search(message)
        if not match:
            continue
        first, second = strip_quotes(match.group(1)), strip_quotes(match.group(2))
        project, title = (first, second) if project_first else (second, first)
        if not title or not project:
            return None
        priority, description = ("medium", "")
        if match.group(3):
            priority, description = _parse_attributes(match.group(3))
        return CreateTaskCommand(title=title, project=project, priority=priority, description=description)
    return None


def _previous_user_message(history: Iterable[Dict[str, Any]]) -> Optional[str]:
    for entry in reversed(list(history or [])):
        if entry.get("role") == "user":
            return entry.get("content")
    return None


def parse_status_update(message: str, history: Iterable[Dict[str, Any]] = ()) -> Optional[StatusUpdateCommand]:
    """Recognise a status change request. `history` holds earlier messages, oldest first."""
    message = message.strip()
    for pattern, kind in STATUS_UPDATE_PATTERNS:
        match = pattern.search(message)
        if not match:
            continue
        if kind == TITLE_AND_STATUS:
            title, term = strip_quotes(match.group(1)), match.group(2)
        elif kind == COMPLETE:
            title, term = strip_quotes(match.group(1)), "done"
        else:
            term, title = match.group(1), ""
            previous = _previous_user_message(history)
            if previous:
                task_match = PREVIOUS_TASK_PATTERN.search(previous.strip())
                if task_match:
                    title = strip_quotes(task_match.group(1))
        if not title:
            return None
        return StatusUpdateCommand(task_title=title, status_term=term.strip().lower())
    return None


def normalize_status(term: str) -> Optional[str]:
    """Map a natural-language status to a task status, or None when unknown."""
    cleaned = strip_quotes((term or "").strip().lower().rstrip(".!?"))
    return STATUS_TERMS.get(cleaned)


def unknown_status_message(term: str) -> str:
    return (
        f'Sorry, I couldn\'t understand the status "{term}". '
        'You can use terms like "todo", "in progress", or "done".'
    )


def closest_task(search: str, tasks: List[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """
    Closest title by word overlap, lower score is better.

    Titles sharing no substring with the search score their length
    difference instead. Nothing scoring 50 or more is returned.
    """
    best, best_score = None, float("inf")
    search_lower = search.lower()
    search_words = search_lower.split()
    for task in tasks:
        title = task["title"].lower()
        if search_lower not in title and title not in search_lower:
            score = abs(len(title) - len(search_lower))
        else:
            title_words = title.split()
            matched = sum(1 for word in search_words if word in title_words)
            score = (len(search_words) - matched) * 10
        if score < best_score:
            best, best_score = task, score
    return best if best_score < 50 else None


def find_task(search: str, tasks: List[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """Exact title, then case-insensitive substring, then closest_task."""
    exact = [t for t in tasks if t["title"] == search]
    if exact:
        return exact[0]
    contains = [t for t in tasks if search.lower() in t["title"].lower()]
    if contains:
        return contains[0]
    return closest_task(search, tasks)


def find_project(search: str, projects: List[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """
    Name equal to, starting with or ending with the search (case-insensitive),
    closest length first. Otherwise the best word overlap of at least 40%.
    """
    search_lower = search.lower()
    candidates = [
        p for p in projects
        if p["name"].lower() == search_lower
        or p["name"].lower().startswith(search_lower)
        or p["name"].lower().endswith(search_lower)
    ]
    if candidates:
        return sorted(candidates, key=lambda p: abs(len(p["name"]) - len(search)))[0]

    search_words = search_lower.split()
    if not search_words:
        return None
    best, best_score = None, 0.0
    for project in projects:
        project_words = project["name"].lower().split()
        matched = 0
        for word in search_words:
            if any(pw in word or word in pw for pw in project_words):
                matched += 1
        score = matched / len(search_words) * 100
        if score > best_score:
            best, best_score = project, score
    return best if best_score >= 40 else None


def project_list_text(projects: List[Dict[str, Any]]) -> str:
    return ", ".join(f'"{p["name"]}"' for p in sorted(projects, key=lambda p: p["name"]))
