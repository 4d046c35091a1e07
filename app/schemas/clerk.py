"""Clerk webhook payload schema (Svix envelope)."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ClerkWebhookPayload(BaseModel):
    """Body of a Clerk webhook delivery, e.g. {"type": "user.created", "data": {...}}."""

    model_config = ConfigDict(extra="ignore")

    type: str = Field(..., min_length=1, max_length=128)
    data: dict[str, Any] = Field(default_factory=dict)
