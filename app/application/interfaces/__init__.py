"""Application interfaces (ports): repository and service protocols.

Define contracts for infrastructure implementations (DIP).
No runtime imports from app.infrastructure.
"""

from app.application.interfaces.repositories import (
    ITaskRepository,
    IUserRepository,
    IWorkspaceMemberRepository,
    IWorkspaceRepository,
)
from app.application.interfaces.services import (
    IEmailTemplateRenderer,
    INotificationService,
    IStepController,
    WorkflowHandler,
)

__all__ = [
    "IEmailTemplateRenderer",
    "INotificationService",
    "IStepController",
    "ITaskRepository",
    "IUserRepository",
    "IWorkspaceMemberRepository",
    "IWorkspaceRepository",
    "WorkflowHandler",
]
