"""Domain layer: enums and exceptions.

No dependencies on infrastructure or presentation. Used by application
and infrastructure layers.
"""

from app.domain.enums import TaskStatus, WorkspaceRole
from app.domain.exceptions import (
    DuplicateStepException,
    NotificationFailureException,
    ProjectManagementException,
    ResourceNotFoundException,
    SqlNotConfiguredException,
    TaskNotFoundException,
    TransientDatastoreException,
    ValidationException,
    WorkflowNotFoundException,
)

__all__ = [
    # Enums
    "TaskStatus",
    "WorkspaceRole",
    # Exceptions
    "DuplicateStepException",
    "NotificationFailureException",
    "ProjectManagementException",
    "ResourceNotFoundException",
    "SqlNotConfiguredException",
    "TaskNotFoundException",
    "TransientDatastoreException",
    "ValidationException",
    "WorkflowNotFoundException",
]
