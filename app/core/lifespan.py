"""Application lifespan: startup and shutdown.

Single place for all startup/shutdown logic (SRP). Used by main.py;
no business logic here, only wiring of infrastructure (logging,
telemetry, workflow engine and worker, DB engine dispose).
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from app.core.config import get_settings
from app.shared.telemetry.logging import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def create_lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Run startup then yield; on exit run shutdown.

    Startup order: logging, telemetry (if enabled), workflow engine,
    workflow worker (if enabled). Shutdown order: worker stop, telemetry
    shutdown, SQL engine dispose.
    """
    settings = get_settings()
    setup_logging()

    # ---- Startup ----
    if settings.telemetry_enabled:
        from app.shared.telemetry.telemetry import TelemetryConfig, set_telemetry

        telemetry = TelemetryConfig(
            service_name=settings.app_name,
            service_version=settings.app_version,
            enabled=True,
            environment=settings.telemetry_environment,
            worker_enabled=settings.workflow_worker_enabled,
            max_attempts=settings.workflow_max_attempts,
            reminder_timezone=settings.reminder_timezone,
        )
        telemetry.setup_telemetry(
            exporter_type=settings.telemetry_exporter,
            otlp_endpoint=settings.telemetry_otlp_endpoint,
            sample_rate=settings.telemetry_sample_rate,
        )
        set_telemetry(telemetry)
        telemetry.instrument_fastapi(app)

        from app.infrastructure.persistence import database

        database._ensure_engine()
        if database.engine is not None:
            telemetry.instrument_sqlalchemy(database.engine)
        logger.info("Telemetry initialized")

    from app.infrastructure.services.workflow_functions import create_workflow_engine
    from app.infrastructure.services.workflow_worker import WorkflowWorker

    if getattr(app.state, "workflow_engine", None) is None:
        app.state.workflow_engine = create_workflow_engine(settings)
    logger.info(
        "Workflow engine ready (%d functions)", len(app.state.workflow_engine.functions)
    )

    if settings.workflow_worker_enabled:
        worker = WorkflowWorker(
            app.state.workflow_engine,
            poll_interval=settings.workflow_poll_interval_seconds,
            batch_size=settings.workflow_batch_size,
        )
        worker.start()
        app.state.workflow_worker = worker
    else:
        app.state.workflow_worker = None

    yield

    # ---- Shutdown ----
    worker = getattr(app.state, "workflow_worker", None)
    if worker is not None:
        await worker.stop()
        app.state.workflow_worker = None

    from app.shared.telemetry.telemetry import get_telemetry, set_telemetry

    telemetry_instance = get_telemetry()
    if telemetry_instance is not None:
        telemetry_instance.shutdown()
        set_telemetry(None)

    from app.infrastructure.persistence.database import dispose_engine

    await dispose_engine()
