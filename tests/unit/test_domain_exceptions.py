"""Tests for domain exceptions (error_code, message, details, retriable)."""

import pytest

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


def test_base_exception_default_error_code() -> None:
    """Base exception uses class name as error_code when not provided."""
    exc = ProjectManagementException("Something failed")
    assert exc.message == "Something failed"
    assert exc.error_code == "ProjectManagementException"
    assert exc.details == {}
    assert exc.retriable is False


def test_base_exception_custom_error_code_and_details() -> None:
    """Base exception accepts custom error_code and details."""
    exc = ProjectManagementException("Oops", error_code="CUSTOM", details={"key": "value"})
    assert exc.to_dict() == {"error": "CUSTOM", "message": "Oops", "details": {"key": "value"}}


def test_validation_exception() -> None:
    """ValidationException sets VALIDATION_ERROR and optional field in details."""
    exc = ValidationException("Invalid format", field="taskId")
    assert exc.error_code == "VALIDATION_ERROR"
    assert exc.details == {"field": "taskId"}
    assert ValidationException("Invalid").details == {}


def test_resource_not_found_exception() -> None:
    """ResourceNotFoundException includes resource_type and resource_id."""
    exc = ResourceNotFoundException("user", "user_123")
    assert exc.message == "user not found: user_123"
    assert exc.error_code == "RESOURCE_NOT_FOUND"
    assert exc.details == {"resource_type": "user", "resource_id": "user_123"}


def test_task_not_found_is_a_resource_not_found() -> None:
    exc = TaskNotFoundException("task_9")
    assert isinstance(exc, ResourceNotFoundException)
    assert exc.details["resource_type"] == "task"
    assert exc.retriable is False


def test_notification_failure_is_retriable() -> None:
    exc = NotificationFailureException("ada@example.com", "Reminder for Apollo")
    assert exc.retriable is True
    assert exc.error_code == "NOTIFICATION_FAILURE"
    assert exc.message == "Failed to send notification to ada@example.com"
    assert exc.details == {"recipient": "ada@example.com", "subject": "Reminder for Apollo"}


def test_transient_datastore_is_retriable() -> None:
    exc = TransientDatastoreException("get_details", "connection reset")
    assert exc.retriable is True
    assert exc.error_code == "TRANSIENT_DATASTORE_ERROR"
    assert "connection reset" in exc.message


@pytest.mark.parametrize(
    ("exc", "code"),
    [
        (WorkflowNotFoundException("run_1"), "WORKFLOW_RUN_NOT_FOUND"),
        (DuplicateStepException("run_1", "fetch-task"), "DUPLICATE_STEP"),
        (SqlNotConfiguredException(), "SERVICE_UNAVAILABLE"),
    ],
)
def test_non_retriable_error_codes(exc: ProjectManagementException, code: str) -> None:
    assert exc.error_code == code
    assert exc.retriable is False
