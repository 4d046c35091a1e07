"""Seed a demo user, workspace, project and task, then assign the task.

Creates (if missing) user ``user_demo``, workspace ``org_demo`` and a
project with one task due in N days (default 1), and sends
``app/task.assigned`` for it through the workflow engine. With the log-only
email backend the assignment email shows up in the server log once the
worker picks the run up.

Usage:
    python -m scripts.seed_dev_data [days_until_due] [assignee_email]

Requires: DATABASE_URL and a migrated database (alembic upgrade head).
"""

from __future__ import annotations

import asyncio
import sys
from datetime import timedelta

from app.application.dtos.workflow import WorkflowEvent
from app.core.config import get_settings
from app.infrastructure.persistence.database import dispose_engine, get_session_factory
from app.infrastructure.persistence.repositories import (
    ProjectRepository,
    TaskRepository,
    UserRepository,
    WorkspaceRepository,
)
from app.infrastructure.services.workflow_functions import create_workflow_engine
from app.shared.utils.datetime import utc_now

DEMO_USER_ID = "user_demo"
DEMO_WORKSPACE_ID = "org_demo"
DEMO_ORIGIN = "http://localhost:3000"


async def seed(days_until_due: int, email: str) -> None:
    factory = get_session_factory()
    async with factory() as session:
        users = UserRepository(session)
        if await users.get_user(DEMO_USER_ID) is None:
            await users.create_user(DEMO_USER_ID, email, "Demo User", None)
        workspaces = WorkspaceRepository(session)
        if await workspaces.get_workspace(DEMO_WORKSPACE_ID) is None:
            await workspaces.create_workspace(
                DEMO_WORKSPACE_ID, "Demo Workspace", "demo", DEMO_USER_ID, None
            )
        project_id = await ProjectRepository(session).create_project(
            DEMO_WORKSPACE_ID, "Demo Project"
        )
        task_id = await TaskRepository(session).create_task(
            project_id,
            "Try the reminder workflow",
            utc_now() + timedelta(days=days_until_due),
            assignee_id=DEMO_USER_ID,
        )
        await session.commit()
    print(f"Created task {task_id} (due in {days_until_due} days) in project {project_id}")

    engine = create_workflow_engine(get_settings(), session_factory=factory)
    run_ids = await engine.send(
        WorkflowEvent(
            name="app/task.assigned",
            data={"taskId": task_id, "origin": DEMO_ORIGIN},
        )
    )
    print(f"Queued workflow runs: {', '.join(run_ids)}")


async def main() -> None:
    days = int(sys.argv[1]) if len(sys.argv) > 1 else 1
    email = sys.argv[2] if len(sys.argv) > 2 else "demo@example.com"
    try:
        await seed(days, email)
    finally:
        await dispose_engine()


if __name__ == "__main__":
    asyncio.run(main())
