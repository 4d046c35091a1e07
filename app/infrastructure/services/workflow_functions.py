"""Registers the application's workflow functions on a WorkflowEngine.

Composition only: each factory binds SQLAlchemy repositories to the run's
session and hands them to the application-layer handler.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, timedelta, tzinfo

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.application.interfaces.services import (
    IEmailTemplateRenderer,
    INotificationService,
    WorkflowHandler,
)
from app.application.workflows.identity_sync import (
    SYNC_FUNCTIONS,
    IdentitySyncHandlers,
    SyncMethod,
)
from app.application.workflows.task_assignment import (
    EVENT_NAME as TASK_ASSIGNED_EVENT,
    FUNCTION_ID as TASK_ASSIGNMENT_FUNCTION,
    TaskAssignmentWorkflow,
)
from app.core.config import Settings
from app.infrastructure.persistence.database import get_session_factory
from app.infrastructure.persistence.repositories import (
    TaskRepository,
    UserRepository,
    WorkspaceMemberRepository,
    WorkspaceRepository,
)
from app.infrastructure.services.email_template_renderer import EmailTemplateRenderer
from app.infrastructure.services.notification_service import create_notification_service
from app.infrastructure.services.workflow_engine import HandlerFactory, WorkflowEngine
from app.shared.utils.datetime import utc_now


def _identity_factory(method: SyncMethod) -> HandlerFactory:
    def factory(session: AsyncSession) -> WorkflowHandler:
        handlers = IdentitySyncHandlers(
            UserRepository(session),
            WorkspaceRepository(session),
            WorkspaceMemberRepository(session),
        )
        return handlers.handler(method)

    return factory


def register_workflow_functions(
    engine: WorkflowEngine,
    notifier: INotificationService,
    renderer: IEmailTemplateRenderer,
    *,
    tz: tzinfo,
    clock: Callable[[], datetime] = utc_now,
) -> None:
    """Register the identity-sync functions and the task-assignment workflow."""
    for fn in SYNC_FUNCTIONS:
        engine.register(fn.function_id, fn.event_name, _identity_factory(fn.method))

    def task_assignment(session: AsyncSession) -> WorkflowHandler:
        return TaskAssignmentWorkflow(
            TaskRepository(session), notifier, renderer, tz=tz, clock=clock
        )

    engine.register(TASK_ASSIGNMENT_FUNCTION, TASK_ASSIGNED_EVENT, task_assignment)


def create_workflow_engine(
    settings: Settings,
    *,
    session_factory: async_sessionmaker[AsyncSession] | None = None,
    notifier: INotificationService | None = None,
    clock: Callable[[], datetime] = utc_now,
) -> WorkflowEngine:
    """Build an engine from settings with every workflow function registered."""
    engine = WorkflowEngine(
        session_factory or get_session_factory(),
        clock=clock,
        max_attempts=settings.workflow_max_attempts,
        retry_delay=timedelta(seconds=settings.workflow_retry_delay_seconds),
        lease=timedelta(seconds=settings.workflow_lease_seconds),
    )
    register_workflow_functions(
        engine,
        notifier or create_notification_service(settings),
        EmailTemplateRenderer(),
        tz=settings.reminder_tz,
        clock=clock,
    )
    return engine
