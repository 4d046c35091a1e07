"""Pytest configuration and fixtures for the project management relay.

Tests run against an in-memory SQLite database (aiosqlite) created from the
ORM metadata; no external services are needed. Environment is set before
any app module is imported so Settings pick it up.
"""

import os

os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["WORKFLOW_WORKER_ENABLED"] = "false"
os.environ["EMAIL_BACKEND"] = "log"
os.environ.pop("CLERK_WEBHOOK_SECRET", None)

from dataclasses import dataclass, field  # noqa: E402
from datetime import UTC, datetime, timedelta  # noqa: E402

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker  # noqa: E402

from app.core.config import get_settings  # noqa: E402

get_settings.cache_clear()

from app.infrastructure.persistence import database, models  # noqa: E402,F401
from app.infrastructure.persistence.database import (  # noqa: E402
    Base,
    dispose_engine,
    get_session_factory,
)
from app.infrastructure.persistence.repositories import (  # noqa: E402
    ProjectRepository,
    TaskRepository,
    UserRepository,
    WorkspaceRepository,
)
from app.infrastructure.services.workflow_engine import WorkflowEngine  # noqa: E402
from app.infrastructure.services.workflow_functions import (  # noqa: E402
    create_workflow_engine,
)
from app.main import app  # noqa: E402


class FakeClock:
    """Controllable UTC clock for the engine and workflows."""

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta: timedelta) -> None:
        self.now = self.now + delta

    def set(self, now: datetime) -> None:
        self.now = now


@dataclass
class RecordingNotifier:
    """INotificationService that records sends; results pops scripted outcomes."""

    sent: list[tuple[str, str, str]] = field(default_factory=list)
    results: list[bool] = field(default_factory=list)

    async def send(self, to: str, subject: str, body: str) -> bool:
        self.sent.append((to, subject, body))
        if self.results:
            return self.results.pop(0)
        return True

    def subjects(self) -> list[str]:
        return [subject for _, subject, _ in self.sent]


@dataclass
class Seed:
    """Ids of a user, workspace and project created for a test."""

    user_id: str
    user_email: str
    workspace_id: str
    project_id: str


# Monday 2026-06-08 09:00 UTC
START = datetime(2026, 6, 8, 9, 0, tzinfo=UTC)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(START)


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
async def session_factory() -> async_sessionmaker[AsyncSession]:
    """Fresh in-memory database with all tables; disposed after the test."""
    factory = get_session_factory()
    async with database.engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield factory
    await dispose_engine()


@pytest.fixture
async def db_session(session_factory: async_sessionmaker[AsyncSession]) -> AsyncSession:
    """Database session for repository tests. Rolls back after test."""
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
async def workflow_engine(
    session_factory: async_sessionmaker[AsyncSession],
    notifier: RecordingNotifier,
    clock: FakeClock,
) -> WorkflowEngine:
    """Engine with every workflow function registered, a recording notifier and fake clock."""
    return create_workflow_engine(
        get_settings(),
        session_factory=session_factory,
        notifier=notifier,
        clock=clock,
    )


@pytest.fixture
async def seed(session_factory: async_sessionmaker[AsyncSession]) -> Seed:
    """A user who owns a workspace with one project."""
    async with session_factory() as session:
        await UserRepository(session).create_user(
            "user_ada", "ada@example.com", "Ada Lovelace", None
        )
        await WorkspaceRepository(session).create_workspace(
            "org_acme", "Acme", "acme", "user_ada", None
        )
        project_id = await ProjectRepository(session).create_project("org_acme", "Apollo")
        await session.commit()
    return Seed("user_ada", "ada@example.com", "org_acme", project_id)


@pytest.fixture
def make_task(session_factory: async_sessionmaker[AsyncSession], seed: Seed):
    """Async factory: insert a task in the seeded project and return its id."""

    async def create(
        due_date: datetime,
        *,
        title: str = "Write launch notes",
        assigned: bool = True,
    ) -> str:
        async with session_factory() as session:
            task_id = await TaskRepository(session).create_task(
                seed.project_id,
                title,
                due_date,
                assignee_id=seed.user_id if assigned else None,
            )
            await session.commit()
        return task_id

    return create


@pytest.fixture
async def client(workflow_engine: WorkflowEngine) -> AsyncClient:
    """Async HTTP client against the FastAPI app (ASGI), wired to the test engine."""
    app.state.workflow_engine = workflow_engine
    app.state.workflow_worker = None
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.state.workflow_engine = None
