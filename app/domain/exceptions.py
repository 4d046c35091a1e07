"""Domain exceptions for the project management relay.

Defines domain-level exceptions that represent business rule violations
and workflow failures. These exceptions are independent of infrastructure
concerns. The presentation layer maps them to HTTP responses in exception
handlers; the workflow engine uses ``retriable`` to decide between a
step retry and a terminal failure.
"""

from typing import Any


class ProjectManagementException(Exception):
    """Base exception for all application errors.

    Attributes:
        message: Human-readable error description.
        error_code: Machine-readable error code.
        details: Additional error context (e.g. field, resource_id).
        retriable: Whether the workflow engine may retry the failing run.
    """

    retriable: bool = False

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error description.
            error_code: Optional machine-readable code; defaults to class name.
            details: Optional dict of extra context.
        """
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON error body used by the HTTP exception handler."""
        return {
            "error": self.error_code,
            "message": self.message,
            "details": self.details,
        }


class ValidationException(ProjectManagementException):
    """Raised when input validation fails (e.g. malformed event payload)."""

    def __init__(self, message: str, field: str | None = None) -> None:
        details = {"field": field} if field else {}
        super().__init__(message, "VALIDATION_ERROR", details)


class ResourceNotFoundException(ProjectManagementException):
    """Raised when a requested resource is not found."""

    def __init__(self, resource_type: str, resource_id: str) -> None:
        """Initialize with resource type and id.

        Args:
            resource_type: Type of resource (e.g. 'user', 'workspace').
            resource_id: The ID that was not found.
        """
        super().__init__(
            f"{resource_type} not found: {resource_id}",
            "RESOURCE_NOT_FOUND",
            {"resource_type": resource_type, "resource_id": resource_id},
        )


class TaskNotFoundException(ResourceNotFoundException):
    """Raised when a task referenced by a trigger event does not exist."""

    def __init__(self, task_id: str) -> None:
        super().__init__("task", task_id)


class NotificationFailureException(ProjectManagementException):
    """Raised when the email transport reports a failed send."""

    retriable = True

    def __init__(self, recipient: str, subject: str) -> None:
        super().__init__(
            f"Failed to send notification to {recipient}",
            "NOTIFICATION_FAILURE",
            {"recipient": recipient, "subject": subject},
        )


class TransientDatastoreException(ProjectManagementException):
    """Raised when the datastore is temporarily unavailable (connection, timeout)."""

    retriable = True

    def __init__(self, operation: str, reason: str) -> None:
        super().__init__(
            f"Datastore operation '{operation}' failed: {reason}",
            "TRANSIENT_DATASTORE_ERROR",
            {"operation": operation},
        )


class WorkflowNotFoundException(ProjectManagementException):
    """Raised when a workflow run id is unknown."""

    def __init__(self, run_id: str) -> None:
        super().__init__(
            f"Workflow run not found: {run_id}",
            "WORKFLOW_RUN_NOT_FOUND",
            {"run_id": run_id},
        )


class DuplicateStepException(ProjectManagementException):
    """Raised when a workflow handler uses the same step name twice in one run."""

    def __init__(self, run_id: str, step_name: str) -> None:
        super().__init__(
            f"Step '{step_name}' used more than once in run {run_id}",
            "DUPLICATE_STEP",
            {"run_id": run_id, "step_name": step_name},
        )


class SqlNotConfiguredException(ProjectManagementException):
    """Raised when an operation requires the SQL database but it is not configured."""

    def __init__(self) -> None:
        super().__init__(
            message="This operation requires a SQL database that is not configured.",
            error_code="SERVICE_UNAVAILABLE",
        )
