"""Event ingress: hands application events to the durable workflow engine."""

from fastapi import APIRouter, Request

from app.api.v1.dependencies import WorkflowEngineDep, WorkflowWorkerDep
from app.application.dtos.workflow import WorkflowEvent
from app.core.limiter import limit_writes
from app.schemas.event import EventAcceptedResponse, EventSendRequest

router = APIRouter()


@router.post("", response_model=EventAcceptedResponse, status_code=202)
@limit_writes
async def send_event(
    request: Request,
    body: EventSendRequest,
    engine: WorkflowEngineDep,
    worker: WorkflowWorkerDep,
) -> EventAcceptedResponse:
    """Start one run per workflow function listening to the event.

    Returns the run ids immediately; runs execute in the background worker.
    """
    run_ids = await engine.send(WorkflowEvent(name=body.name, data=body.data, id=body.id))
    if worker is not None and run_ids:
        worker.wake()
    return EventAcceptedResponse(ids=run_ids)
