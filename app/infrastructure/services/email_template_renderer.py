"""Task notification email templates: template key → subject/body (Jinja)."""

from __future__ import annotations

from typing import Any

from jinja2 import Environment, Template

# In-repo template definitions: key → (subject_template, body_template)
# Context: assignee_name, task_title, project_name, due_date (formatted), origin
_DEFAULT_TEMPLATES: dict[str, tuple[str, str]] = {
    "task_assigned": (
        "New Task Assignment in {{ project_name }}",
        "Hi {{ assignee_name }},<br/><br/>"
        'You have been assigned a new task "<strong>{{ task_title }}</strong>" '
        'in the project "<strong>{{ project_name }}</strong>".<br/><br/>'
        "Due date: <strong>{{ due_date }}</strong><br/><br/>"
        '<a href="{{ origin }}">View Task</a><br/><br/>'
        "Best regards,<br/>Project Management Team",
    ),
    "task_reminder": (
        "Reminder for {{ project_name }}",
        "Hi {{ assignee_name }},<br/><br/>"
        'This is a friendly reminder that the task "<strong>{{ task_title }}</strong>" '
        'in the project "<strong>{{ project_name }}</strong>" is due today '
        "({{ due_date }}).<br/><br/>"
        "Please make sure to complete it on time.<br/><br/>"
        '<a href="{{ origin }}">View Task</a><br/><br/>'
        "Best regards,<br/>Project Management Team",
    ),
}


class EmailTemplateRenderer:
    """Renders subject and body for task notification emails from a template key."""

    def __init__(
        self,
        templates: dict[str, tuple[str, str]] | None = None,
    ) -> None:
        """Initialize with optional template dict; falls back to _DEFAULT_TEMPLATES."""
        self._templates = templates or _DEFAULT_TEMPLATES
        # Bodies are HTML so user values are escaped; subjects are plain-text headers.
        self._subject_env = Environment(autoescape=False)
        self._body_env = Environment(autoescape=True)
        self._compiled: dict[str, tuple[Template, Template]] = {}
        for key, (sub_str, body_str) in self._templates.items():
            self._compiled[key] = (
                self._subject_env.from_string(sub_str),
                self._body_env.from_string(body_str),
            )

    def render(self, template_key: str, context: dict[str, Any]) -> tuple[str, str]:
        """Render subject and body for the template key. Raises KeyError if key unknown."""
        if template_key not in self._compiled:
            raise KeyError(f"Unknown email template: {template_key}")
        subject_tpl, body_tpl = self._compiled[template_key]
        subject = subject_tpl.render(**context)
        body = body_tpl.render(**context)
        return subject, body
