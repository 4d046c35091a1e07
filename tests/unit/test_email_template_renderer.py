"""Tests for EmailTemplateRenderer (task notification subjects and bodies)."""

import pytest

from app.infrastructure.services.email_template_renderer import EmailTemplateRenderer

CONTEXT = {
    "assignee_name": "Ada Lovelace",
    "task_title": "Write launch notes",
    "project_name": "Apollo",
    "due_date": "6/10/2026",
    "origin": "https://pm.example.com",
}


def test_task_assigned_subject_and_body() -> None:
    subject, body = EmailTemplateRenderer().render("task_assigned", CONTEXT)
    assert subject == "New Task Assignment in Apollo"
    assert "Hi Ada Lovelace" in body
    assert "<strong>Write launch notes</strong>" in body
    assert "<strong>6/10/2026</strong>" in body
    assert '<a href="https://pm.example.com">View Task</a>' in body


def test_task_reminder_subject_and_body() -> None:
    subject, body = EmailTemplateRenderer().render("task_reminder", CONTEXT)
    assert subject == "Reminder for Apollo"
    assert "friendly reminder" in body
    assert "is due today (6/10/2026)" in body
    assert "complete it on time" in body


def test_body_escapes_html_but_subject_does_not() -> None:
    """User text is escaped in the HTML body; the subject header is plain text."""
    context = {**CONTEXT, "task_title": "<script>x</script>", "project_name": "R&D"}
    subject, body = EmailTemplateRenderer().render("task_assigned", context)
    assert subject == "New Task Assignment in R&D"
    assert "<script>" not in body
    assert "&lt;script&gt;" in body
    assert "R&amp;D" in body


def test_custom_templates_replace_defaults() -> None:
    renderer = EmailTemplateRenderer({"ping": ("Ping {{ project_name }}", "Body")})
    assert renderer.render("ping", CONTEXT) == ("Ping Apollo", "Body")
    with pytest.raises(KeyError):
        renderer.render("task_assigned", CONTEXT)


def test_unknown_template_key_raises() -> None:
    with pytest.raises(KeyError, match="Unknown email template"):
        EmailTemplateRenderer().render("task_overdue", CONTEXT)
