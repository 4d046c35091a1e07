"""Infrastructure implementations of application service interfaces."""

from app.infrastructure.services.email_template_renderer import EmailTemplateRenderer
from app.infrastructure.services.notification_service import (
    LogOnlyNotificationService,
    SmtpNotificationService,
    create_notification_service,
)
from app.infrastructure.services.workflow_engine import StepController, WorkflowEngine
from app.infrastructure.services.workflow_functions import (
    create_workflow_engine,
    register_workflow_functions,
)
from app.infrastructure.services.workflow_worker import WorkflowWorker

__all__ = [
    "EmailTemplateRenderer",
    "LogOnlyNotificationService",
    "SmtpNotificationService",
    "StepController",
    "WorkflowEngine",
    "WorkflowWorker",
    "create_notification_service",
    "create_workflow_engine",
    "register_workflow_functions",
]
