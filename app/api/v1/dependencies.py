"""Presentation-layer dependency injection (composition root).

Provides FastAPI Depends() for the workflow engine and worker. The engine
is built in the application lifespan; when the app runs without lifespan
(e.g. an ASGI test transport) it is built on first use from settings.
Routes depend only on these dependencies, not on infra directly.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request

from app.core.config import get_settings
from app.infrastructure.services.workflow_engine import WorkflowEngine
from app.infrastructure.services.workflow_functions import create_workflow_engine
from app.infrastructure.services.workflow_worker import WorkflowWorker


def get_workflow_engine(request: Request) -> WorkflowEngine:
    """Return the app's workflow engine (building it on first use)."""
    engine = getattr(request.app.state, "workflow_engine", None)
    if engine is None:
        engine = create_workflow_engine(get_settings())
        request.app.state.workflow_engine = engine
    return engine


def get_workflow_worker(request: Request) -> WorkflowWorker | None:
    """Return the running worker, or None when the worker is disabled."""
    return getattr(request.app.state, "workflow_worker", None)


WorkflowEngineDep = Annotated[WorkflowEngine, Depends(get_workflow_engine)]
WorkflowWorkerDep = Annotated[WorkflowWorker | None, Depends(get_workflow_worker)]
