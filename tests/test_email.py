import json

import httpx
import pytest

from app.config import settings
from app.core.email import (
    BrevoEmailClient,
    EmailConfigurationError,
    EmailDeliveryError,
    TaskEmailData,
    render_task_email,
    render_verification_email,
    task_email_subject,
)


def _task(action="created", **kwargs):
    return TaskEmailData(task_title="Design landing page", project_name="Website Redesign", action=action, **kwargs)


class TestRendering:
    def test_subjects(self):
        assert task_email_subject(_task("created")) == "New Task: Design landing page"
        assert task_email_subject(_task("updated")) == "Task Updated: Design landing page"
        assert task_email_subject(_task("priority_changed")) == "Task Priority Changed: Design landing page"
        assert task_email_subject(_task("status_changed")) == "Task Status Updated: Design landing page"
        assert task_email_subject(_task("archived")) == "Task Notification: Design landing page"

    def test_verification_email_contains_code(self):
        body = render_verification_email("Mark", "123456")
        assert "123456" in body
        assert "Hi Mark," in body
        assert f"expire in {settings.verification_code_ttl_minutes} minutes" in body

    def test_task_email_escapes_user_content(self):
        body = render_task_email("Mark", TaskEmailData(
            task_title="<script>alert(1)</script>",
            project_name="Website Redesign",
            action="updated",
            update_text="Fixed & shipped",
        ))
        assert "<script>" not in body
        assert "&lt;script&gt;" in body
        assert "Fixed &amp; shipped" in body

    def test_task_email_lists_only_present_details(self):
        body = render_task_email("Mark", _task("status_changed", status="In Progress"))
        assert "<strong>Status:</strong> In Progress" in body
        assert "Priority:" not in body
        assert "status changed" in body


class TestBrevoEmailClient:
    def test_send_posts_to_brevo(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["api_key"] = request.headers["api-key"]
            seen["payload"] = json.loads(request.content)
            return httpx.Response(201, json={"messageId": "msg-1"})

        http = httpx.Client(transport=httpx.MockTransport(handler))
        client = BrevoEmailClient(api_key="test-key", http_client=http)
        result = client.send_task_notification("mark@example.com", "Mark", _task("created", priority="high"))

        assert result == {"messageId": "msg-1"}
        assert seen["url"] == settings.brevo_api_url
        assert seen["api_key"] == "test-key"
        assert seen["payload"]["to"] == [{"email": "mark@example.com", "name": "Mark"}]
        assert seen["payload"]["subject"] == "New Task: Design landing page"
        assert seen["payload"]["sender"]["email"] == settings.email_sender_address

    def test_error_status_raises(self):
        http = httpx.Client(transport=httpx.MockTransport(lambda request: httpx.Response(500, text="boom")))
        client = BrevoEmailClient(api_key="test-key", http_client=http)
        with pytest.raises(EmailDeliveryError):
            client.send_verification_email("mark@example.com", "Mark", "123456")

    def test_transport_error_raises(self):
        def handler(request):
            raise httpx.ConnectError("unreachable", request=request)

        http = httpx.Client(transport=httpx.MockTransport(handler))
        client = BrevoEmailClient(api_key="test-key", http_client=http)
        with pytest.raises(EmailDeliveryError):
            client.send("mark@example.com", "Mark", "Hello", "<p>Hi</p>")

    def test_missing_api_key(self):
        client = BrevoEmailClient(api_key="")
        with pytest.raises(EmailConfigurationError):
            client.send("mark@example.com", "Mark", "Hello", "<p>Hi</p>")
