"""Shared utilities: enums, telemetry, and cross-cutting helpers.

Used by domain, application, and infrastructure. No business logic.
"""

from app.shared.enums import StepKind, WorkflowRunStatus
from app.shared.utils import (
    ensure_utc,
    generate_cuid,
    stable_id,
    utc_now,
)

__all__ = [
    "StepKind",
    "WorkflowRunStatus",
    "generate_cuid",
    "stable_id",
    "utc_now",
    "ensure_utc",
]
