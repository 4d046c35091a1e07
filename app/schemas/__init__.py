"""Pydantic request/response schemas for the API."""

from app.schemas.clerk import ClerkWebhookPayload
from app.schemas.event import EventAcceptedResponse, EventSendRequest
from app.schemas.health import HealthResponse, ReadinessErrorResponse, ReadinessResponse
from app.schemas.workflow import WorkflowRunResponse, WorkflowStepResponse

__all__ = [
    "ClerkWebhookPayload",
    "EventAcceptedResponse",
    "EventSendRequest",
    "HealthResponse",
    "ReadinessErrorResponse",
    "ReadinessResponse",
    "WorkflowRunResponse",
    "WorkflowStepResponse",
]
