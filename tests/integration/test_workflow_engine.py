"""Integration tests for the durable workflow engine (SQLite, fake clock).

Handlers here are small test functions registered on a bare engine so the
engine's guarantees are checked independently of the business workflows.
"""

from datetime import timedelta

import pytest
from sqlalchemy import func, select

from app.application.dtos.workflow import WorkflowEvent
from app.domain.exceptions import NotificationFailureException, WorkflowNotFoundException
from app.infrastructure.persistence.models.workflow import WorkflowRun
from app.infrastructure.persistence.repositories import (
    UserRepository,
    WorkflowRunRepository,
)
from app.infrastructure.services.workflow_engine import WorkflowEngine


@pytest.fixture
def make_engine(session_factory, clock):
    def build() -> WorkflowEngine:
        return WorkflowEngine(
            session_factory,
            clock=clock,
            max_attempts=3,
            retry_delay=timedelta(seconds=60),
            lease=timedelta(seconds=300),
        )

    return build


def counting_handler(calls: list[str], wake_at):
    """Two run steps around a sleep; each step records that it ran."""

    def factory(session):
        async def handler(event, step):
            async def record(name):
                calls.append(name)
                return len(calls)

            first = await step.run_once("first", lambda: record("first"))
            await step.sleep_until("nap", wake_at)
            second = await step.run_once("second", lambda: record("second"))
            return {"first": first, "second": second, "payload": event.data}

        return handler

    return factory


async def test_sleep_persists_and_resumes_without_repeating_steps(make_engine, clock) -> None:
    calls: list[str] = []
    wake_at = clock() + timedelta(hours=1)
    engine = make_engine()
    engine.register("demo", "test/started", counting_handler(calls, wake_at))

    [run_id] = await engine.send(WorkflowEvent("test/started", {"n": 1}, id="evt-1"))
    assert await engine.run_due() == 1

    run = await engine.get_run(run_id)
    assert run.status == "sleeping"
    assert run.current_step == "nap"
    assert run.wake_at == wake_at
    assert [s.name for s in run.steps] == ["first"]

    clock.advance(timedelta(minutes=30))
    assert await engine.run_due() == 0

    clock.advance(timedelta(minutes=31))
    # A new engine instance stands in for a process restart.
    restarted = make_engine()
    restarted.register("demo", "test/started", counting_handler(calls, wake_at))
    assert await restarted.run_due() == 1

    run = await restarted.get_run(run_id)
    assert run.status == "completed"
    assert calls == ["first", "second"]
    assert run.output == {"first": 1, "second": 2, "payload": {"n": 1}}
    assert {s.name: s.kind for s in run.steps} == {
        "first": "run",
        "nap": "sleep",
        "second": "run",
    }
    assert run.completed_at == clock()


async def test_sleep_in_the_past_returns_immediately(make_engine, clock) -> None:
    calls: list[str] = []
    engine = make_engine()
    engine.register("demo", "test/started", counting_handler(calls, clock() - timedelta(days=1)))

    [run_id] = await engine.send(WorkflowEvent("test/started", id="evt-1"))
    await engine.run_due()

    run = await engine.get_run(run_id)
    assert run.status == "completed"
    assert calls == ["first", "second"]
    nap = next(s for s in run.steps if s.name == "nap")
    assert nap.kind == "sleep"
    assert nap.output == {"until": (clock() - timedelta(days=1)).isoformat()}


async def test_step_output_is_json_normalized(make_engine) -> None:
    def factory(session):
        async def handler(event, step):
            async def pair():
                return (1, 2)

            return await step.run_once("pair", pair)

        return handler

    engine = make_engine()
    engine.register("demo", "test/started", factory)
    [run_id] = await engine.send(WorkflowEvent("test/started", id="evt-1"))
    await engine.run_due()

    run = await engine.get_run(run_id)
    assert run.output == [1, 2]
    assert run.steps[0].output == [1, 2]


async def test_same_event_id_does_not_start_second_run(make_engine, session_factory) -> None:
    engine = make_engine()
    engine.register("demo", "test/started", counting_handler([], None))

    first = await engine.send(WorkflowEvent("test/started", {"n": 1}, id="evt-1"))
    second = await engine.send(WorkflowEvent("test/started", {"n": 2}, id="evt-1"))

    assert first == second
    async with session_factory() as session:
        count = await session.scalar(select(func.count()).select_from(WorkflowRun))
    assert count == 1


async def test_event_without_id_gets_a_fresh_one(make_engine) -> None:
    engine = make_engine()
    engine.register("demo", "test/started", counting_handler([], None))

    first = await engine.send(WorkflowEvent("test/started"))
    second = await engine.send(WorkflowEvent("test/started"))

    assert first != second


async def test_event_fans_out_to_every_listening_function(make_engine) -> None:
    engine = make_engine()
    engine.register("one", "test/started", counting_handler([], None))
    engine.register("two", "test/started", counting_handler([], None))
    engine.register("other", "test/other", counting_handler([], None))

    run_ids = await engine.send(WorkflowEvent("test/started", id="evt-1"))

    assert len(run_ids) == 2
    functions = {(await engine.get_run(r)).function_id for r in run_ids}
    assert functions == {"one", "two"}


async def test_event_without_listeners_starts_nothing(make_engine) -> None:
    assert await make_engine().send(WorkflowEvent("test/nobody", id="evt-1")) == []


def test_registering_same_function_twice_is_rejected(make_engine) -> None:
    engine = make_engine()
    engine.register("demo", "test/started", counting_handler([], None))
    with pytest.raises(ValueError, match="already registered"):
        engine.register("demo", "test/other", counting_handler([], None))


async def test_unknown_run_id_raises_not_found(make_engine) -> None:
    with pytest.raises(WorkflowNotFoundException):
        await make_engine().get_run("missing")


async def test_retriable_failure_is_retried_then_fails(make_engine, clock) -> None:
    attempts: list[int] = []

    def factory(session):
        async def handler(event, step):
            async def send():
                attempts.append(1)
                raise NotificationFailureException("ada@example.com", "Hi")

            return await step.run_once("send", send)

        return handler

    engine = make_engine()
    engine.register("demo", "test/started", factory)
    [run_id] = await engine.send(WorkflowEvent("test/started", id="evt-1"))

    await engine.run_due()
    run = await engine.get_run(run_id)
    assert run.status == "queued"
    assert run.attempts == 1
    assert run.wake_at == clock() + timedelta(seconds=60)
    assert run.current_step == "send"
    assert run.error_message == "Failed to send notification to ada@example.com"

    assert await engine.run_due() == 0
    clock.advance(timedelta(seconds=60))
    await engine.run_due()
    clock.advance(timedelta(seconds=60))
    await engine.run_due()

    run = await engine.get_run(run_id)
    assert len(attempts) == 3
    assert run.status == "failed"
    assert run.attempts == 3
    assert run.current_step == "send"
    assert run.wake_at is None
    clock.advance(timedelta(hours=1))
    assert await engine.run_due() == 0


async def test_retry_that_succeeds_completes_the_run(make_engine, clock) -> None:
    outcomes = [False, True]

    def factory(session):
        async def handler(event, step):
            async def send():
                if not outcomes.pop(0):
                    raise NotificationFailureException("ada@example.com", "Hi")
                return {"sent": True}

            return await step.run_once("send", send)

        return handler

    engine = make_engine()
    engine.register("demo", "test/started", factory)
    [run_id] = await engine.send(WorkflowEvent("test/started", id="evt-1"))

    await engine.run_due()
    clock.advance(timedelta(seconds=60))
    await engine.run_due()

    run = await engine.get_run(run_id)
    assert run.status == "completed"
    assert run.output == {"sent": True}
    assert run.attempts == 0
    assert run.error_message is None


async def test_non_retriable_failure_fails_immediately(make_engine) -> None:
    def factory(session):
        async def handler(event, step):
            async def explode():
                raise ValueError("boom")

            await step.run_once("explode", explode)

        return handler

    engine = make_engine()
    engine.register("demo", "test/started", factory)
    [run_id] = await engine.send(WorkflowEvent("test/started", id="evt-1"))
    await engine.run_due()

    run = await engine.get_run(run_id)
    assert run.status == "failed"
    assert run.attempts == 1
    assert run.error_message == "boom"
    assert run.current_step == "explode"


async def test_failed_step_writes_are_rolled_back(make_engine, session_factory) -> None:
    def factory(session):
        users = UserRepository(session)

        async def handler(event, step):
            async def kept():
                await users.create_user("user_kept", "kept@example.com", "Kept", None)
                return "ok"

            async def discarded():
                await users.create_user("user_lost", "lost@example.com", "Lost", None)
                raise RuntimeError("after write")

            await step.run_once("kept", kept)
            await step.run_once("discarded", discarded)

        return handler

    engine = make_engine()
    engine.register("demo", "test/started", factory)
    [run_id] = await engine.send(WorkflowEvent("test/started", id="evt-1"))
    await engine.run_due()

    async with session_factory() as session:
        users = UserRepository(session)
        assert await users.get_user("user_kept") is not None
        assert await users.get_user("user_lost") is None
    run = await engine.get_run(run_id)
    assert run.status == "failed"
    assert [s.name for s in run.steps] == ["kept"]


async def test_duplicate_step_name_fails_the_run(make_engine) -> None:
    def factory(session):
        async def handler(event, step):
            async def noop():
                return None

            await step.run_once("same", noop)
            await step.run_once("same", noop)

        return handler

    engine = make_engine()
    engine.register("demo", "test/started", factory)
    [run_id] = await engine.send(WorkflowEvent("test/started", id="evt-1"))
    await engine.run_due()

    run = await engine.get_run(run_id)
    assert run.status == "failed"
    assert "used more than once" in run.error_message
    assert run.attempts == 1


async def test_run_of_unregistered_function_fails(make_engine) -> None:
    engine = make_engine()
    engine.register("demo", "test/started", counting_handler([], None))
    [run_id] = await engine.send(WorkflowEvent("test/started", id="evt-1"))

    other = make_engine()
    assert await other.run_due() == 1

    run = await other.get_run(run_id)
    assert run.status == "failed"
    assert run.error_message == "Unknown workflow function: demo"


async def test_only_one_claim_wins(make_engine, session_factory, clock) -> None:
    engine = make_engine()
    engine.register("demo", "test/started", counting_handler([], None))
    [run_id] = await engine.send(WorkflowEvent("test/started", id="evt-1"))
    lease_until = clock() + timedelta(minutes=5)

    async with session_factory() as session:
        assert await WorkflowRunRepository(session).claim(run_id, clock(), lease_until)
        await session.commit()
    async with session_factory() as session:
        assert not await WorkflowRunRepository(session).claim(run_id, clock(), lease_until)

    assert await engine.execute(run_id) is None


async def test_expired_lease_makes_running_run_due_again(
    make_engine, session_factory, clock
) -> None:
    """A worker that died mid-run leaves a running row; it is picked up after the lease."""
    calls: list[str] = []
    engine = make_engine()
    engine.register("demo", "test/started", counting_handler(calls, clock()))
    [run_id] = await engine.send(WorkflowEvent("test/started", id="evt-1"))

    async with session_factory() as session:
        repo = WorkflowRunRepository(session)
        assert await repo.claim(run_id, clock(), clock() + timedelta(minutes=5))
        await session.commit()

    assert await engine.run_due() == 0
    clock.advance(timedelta(minutes=5))
    assert await engine.run_due() == 1

    run = await engine.get_run(run_id)
    assert run.status == "completed"
    assert calls == ["first", "second"]
