"""Service interfaces (ports) for the application layer.

Protocols define contracts for the notifier, email templates and the
durable workflow engine's step controller (DIP).
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from datetime import datetime
from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from app.application.dtos.workflow import WorkflowEvent


class INotificationService(Protocol):
    """Protocol for sending email notifications."""

    async def send(self, to: str, subject: str, body: str) -> bool:
        """Send one email. Return True on success, False when the transport failed."""


class IEmailTemplateRenderer(Protocol):
    """Protocol for rendering email subject and body from a template key."""

    def render(self, template_key: str, context: dict[str, Any]) -> tuple[str, str]:
        """Return (subject, body). Raises KeyError for an unknown template key."""


class IStepController(Protocol):
    """Per-run step controller handed to workflow handlers by the engine.

    Steps are memoized by name within a run: once a step has completed,
    later replays of the handler get its stored result without running it
    again.
    """

    async def run_once(
        self, name: str, fn: Callable[[], Awaitable[Any]]
    ) -> Any:
        """Run fn at most once for this run and return its JSON-safe result."""

    async def sleep_until(self, name: str, until: datetime) -> None:
        """Durably suspend the run until the given timestamp."""

    @property
    def final_attempt(self) -> bool:
        """True when a retriable failure now would fail the run instead of retrying it."""


WorkflowHandler = Callable[["WorkflowEvent", IStepController], Awaitable[Any]]
