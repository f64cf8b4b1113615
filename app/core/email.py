"""Transactional email through the Brevo SMTP API."""
import html
import logging
from dataclasses import dataclass
from typing import Optional

import httpx

from app.config import settings

logger = logging.getLogger(__name__)

_HEADER = (
    '<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">'
    '<div style="background-color: #8b5cf6; padding: 20px; text-align: center;">'
    '<h1 style="color: white; margin: 0;">{brand}</h1>'
    "</div>"
    '<div style="padding: 20px; border: 1px solid #e2e8f0; border-top: none;">'
)
_FOOTER = "<p>Thanks,<br>The {brand} Team</p></div></div>"
_BOX_STYLE = (
    "background-color: #f7fafc; border: 1px solid #e2e8f0; border-radius: 5px; "
    "padding: 15px; margin: 20px 0;"
)

TASK_SUBJECTS = {
    "created": "New Task: {title}",
    "updated": "Task Updated: {title}",
    "priority_changed": "Task Priority Changed: {title}",
    "status_changed": "Task Status Updated: {title}",
}


class EmailError(Exception):
    pass


class EmailConfigurationError(EmailError):
    pass


class EmailDeliveryError(EmailError):
    pass


@dataclass
class TaskEmailData:
    task_title: str
    project_name: str
    action: str  # created | updated | priority_changed | status_changed
    priority: Optional[str] = None
    status: Optional[str] = None
    update_text: Optional[str] = None
    assignee_name: Optional[str] = None
    due_date: Optional[str] = None


def task_email_subject(task: TaskEmailData) -> str:
    template = TASK_SUBJECTS.get(task.action, "Task Notification: {title}")
    return template.format(title=task.task_title)


def render_verification_email(first_name: str, code: str) -> str:
    brand = html.escape(settings.email_sender_name)
    ttl = settings.verification_code_ttl_minutes
    return (
        _HEADER.format(brand=brand)
        + "<h2>Verify your email address</h2>"
        + f"<p>Hi {html.escape(first_name)},</p>"
        + f"<p>Thank you for creating an account with {brand}. Please enter the verification code "
        "below to complete your registration:</p>"
        + f'<div style="{_BOX_STYLE} text-align: center;">'
        + f'<span style="font-size: 24px; font-weight: bold; letter-spacing: 5px;">{html.escape(code)}</span>'
        + "</div>"
        + f"<p>This code will expire in {ttl} minutes.</p>"
        + f"<p>If you didn't create an account with {brand}, please ignore this email.</p>"
        + _FOOTER.format(brand=brand)
    )


def render_task_email(first_name: str, task: TaskEmailData) -> str:
    brand = html.escape(settings.email_sender_name)
    details = [
        ("Priority", task.priority),
        ("Status", task.status),
        ("Assignee", task.assignee_name),
        ("Due Date", task.due_date),
        ("Update", task.update_text),
    ]
    rows = "".join(
        f"<p><strong>{label}:</strong> {html.escape(value)}</p>" for label, value in details if value
    )
    action = task.action.replace("_", " ")
    return (
        _HEADER.format(brand=brand)
        + f"<h2>{html.escape(task_email_subject(task))}</h2>"
        + f"<p>Hi {html.escape(first_name)},</p>"
        + f'<p>A task has been {html.escape(action)} in the project "{html.escape(task.project_name)}":</p>'
        + f'<div style="{_BOX_STYLE}">'
        + f'<h3 style="margin-top: 0;">{html.escape(task.task_title)}</h3>'
        + rows
        + "</div>"
        + f"<p>You can view the task in {brand}.</p>"
        + _FOOTER.format(brand=brand)
    )


class BrevoEmailClient:
    def __init__(self, api_key: Optional[str] = None, http_client: Optional[httpx.Client] = None):
        self.api_key = api_key if api_key is not None else settings.brevo_api_key
        self._http = http_client

    def send(self, to_email: str, to_name: str, subject: str, html_content: str) -> dict:
        """POST one message to Brevo. Raises EmailError subclasses on failure."""
        if not self.api_key:
            logger.error("Brevo API key is not configured")
            raise EmailConfigurationError("Email service configuration error")
        payload = {
            "sender": {
                "name": settings.email_sender_name,
                "email": settings.email_sender_address,
            },
            "to": [{"email": to_email, "name": to_name}],
            "subject": subject,
            "htmlContent": html_content,
        }
        headers = {
            "accept": "application/json",
            "api-key": self.api_key,
            "content-type": "application/json",
        }
        http = self._http or httpx.Client(timeout=settings.email_timeout_seconds)
        try:
            response = http.post(settings.brevo_api_url, json=payload, headers=headers)
        except httpx.HTTPError as e:
            logger.error(f"Brevo request failed: {e}")
            raise EmailDeliveryError("Failed to send email") from e
        finally:
            if self._http is None:
                http.close()
        if response.status_code >= 400:
            logger.error(f"Brevo API error {response.status_code}: {response.text}")
            raise EmailDeliveryError("Failed to send email")
        logger.info(f"Email '{subject}' sent to {to_email}")
        return response.json() if response.content else {}

    def send_verification_email(self, email: str, first_name: str, code: str) -> dict:
        return self.send(email, first_name, "Verify your email address", render_verification_email(first_name, code))

    def send_task_notification(self, email: str, name: str, task: TaskEmailData) -> dict:
        return self.send(email, name, task_email_subject(task), render_task_email(name, task))


def get_email_client() -> BrevoEmailClient:
    return BrevoEmailClient()
