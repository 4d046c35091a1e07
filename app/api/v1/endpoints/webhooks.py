"""Identity-provider webhooks. Clerk deliveries are signed by Svix."""

from fastapi import APIRouter, HTTPException, Request
from pydantic import ValidationError

from app.api.v1.dependencies import WorkflowEngineDep, WorkflowWorkerDep
from app.application.dtos.workflow import WorkflowEvent
from app.core.config import get_settings
from app.core.limiter import limit_webhooks
from app.infrastructure.security.webhook_signature import verify_svix_signature
from app.schemas.clerk import ClerkWebhookPayload
from app.schemas.event import EventAcceptedResponse
from app.shared.telemetry.logging import get_logger

logger = get_logger(__name__)

router = APIRouter()

CLERK_EVENT_PREFIX = "clerk/"


@router.post("/clerk", response_model=EventAcceptedResponse, status_code=202)
@limit_webhooks
async def clerk_webhook(
    request: Request,
    engine: WorkflowEngineDep,
    worker: WorkflowWorkerDep,
) -> EventAcceptedResponse:
    """Verify a Clerk webhook and send it to the engine as ``clerk/<type>``.

    CLERK_WEBHOOK_SECRET must be set. The Svix message id becomes the event
    id, so a redelivered webhook does not start a second run.
    """
    body = await request.body()
    settings = get_settings()
    if not settings.clerk_webhook_secret:
        raise HTTPException(
            status_code=503,
            detail="Clerk webhook is not configured (CLERK_WEBHOOK_SECRET is not set).",
        )
    msg_id = request.headers.get("svix-id")
    if not verify_svix_signature(
        settings.clerk_webhook_secret.get_secret_value(),
        msg_id,
        request.headers.get("svix-timestamp"),
        request.headers.get("svix-signature"),
        body,
    ):
        logger.warning("Rejected Clerk webhook with invalid signature (svix-id=%s)", msg_id)
        raise HTTPException(status_code=401, detail="Invalid or missing webhook signature")
    try:
        payload = ClerkWebhookPayload.model_validate_json(body)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail="Malformed webhook payload") from e

    event_name = f"{CLERK_EVENT_PREFIX}{payload.type}"
    run_ids = await engine.send(WorkflowEvent(name=event_name, data=payload.data, id=msg_id))
    logger.info("Clerk webhook %s (svix-id=%s) started %d runs", event_name, msg_id, len(run_ids))
    if worker is not None and run_ids:
        worker.wake()
    return EventAcceptedResponse(ids=run_ids)
