"""Event ingress API schemas."""

from typing import Any

from pydantic import BaseModel, Field


class EventSendRequest(BaseModel):
    """Request body for POST /events: an event for the workflow engine."""

    name: str = Field(..., min_length=1, max_length=255, examples=["app/task.assigned"])
    data: dict[str, Any] = Field(default_factory=dict)
    id: str | None = Field(
        default=None,
        min_length=1,
        max_length=255,
        description="Delivery id; re-sending the same id does not start new runs",
    )


class EventAcceptedResponse(BaseModel):
    """Response for POST /events and the Clerk webhook (202)."""

    ids: list[str] = Field(default_factory=list, description="Workflow run ids")
