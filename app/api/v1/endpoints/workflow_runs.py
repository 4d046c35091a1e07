"""Workflow run inspection."""

from dataclasses import asdict

from fastapi import APIRouter

from app.api.v1.dependencies import WorkflowEngineDep
from app.schemas.workflow import WorkflowRunResponse

router = APIRouter()


@router.get("/{run_id}", response_model=WorkflowRunResponse)
async def get_workflow_run(run_id: str, engine: WorkflowEngineDep) -> WorkflowRunResponse:
    """Return status, step pointer and completed steps of a run (404 if unknown)."""
    run = await engine.get_run(run_id)
    return WorkflowRunResponse.model_validate(asdict(run))
