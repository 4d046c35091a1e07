"""Repository tests against SQLite: task reads and workflow run bookkeeping."""

from datetime import UTC, datetime, timedelta, timezone

from app.domain.enums import TaskStatus
from app.infrastructure.persistence.repositories import (
    TaskRepository,
    WorkflowRunRepository,
)
from app.shared.enums import StepKind

T0 = datetime(2026, 6, 8, 9, 0, tzinfo=UTC)


async def test_get_details_joins_assignee_and_project(db_session, seed, make_task) -> None:
    task_id = await make_task(T0 + timedelta(days=2), title="Ship it")

    details = await TaskRepository(db_session).get_details(task_id)

    assert details is not None
    assert details.title == "Ship it"
    assert details.status == TaskStatus.TODO.value
    assert details.due_date == T0 + timedelta(days=2)
    assert details.due_date.tzinfo is not None
    assert details.project.name == "Apollo"
    assert details.assignee is not None
    assert details.assignee.email == seed.user_email
    assert details.assignee.name == "Ada Lovelace"


async def test_due_date_with_offset_is_stored_as_utc(db_session, make_task) -> None:
    eastern = timezone(timedelta(hours=-4))
    task_id = await make_task(datetime(2026, 6, 10, 20, 30, tzinfo=eastern))

    details = await TaskRepository(db_session).get_details(task_id)

    assert details is not None
    assert details.due_date == datetime(2026, 6, 11, 0, 30, tzinfo=UTC)
    assert details.due_date.utcoffset() == timedelta(0)


async def test_get_details_unassigned_and_missing(db_session, make_task) -> None:
    task_id = await make_task(T0, assigned=False)
    tasks = TaskRepository(db_session)

    details = await tasks.get_details(task_id)
    assert details is not None
    assert details.assignee is None
    assert await tasks.get_details("task_missing") is None


async def test_set_status_is_visible_to_fresh_reads(session_factory, make_task) -> None:
    task_id = await make_task(T0)
    async with session_factory() as session:
        tasks = TaskRepository(session)
        await tasks.get_details(task_id)
        await tasks.set_status(task_id, TaskStatus.DONE)
        await session.commit()
        details = await tasks.get_details(task_id)
    assert details is not None
    assert details.is_done


async def create_run(repo: WorkflowRunRepository, run_id: str, wake_at: datetime) -> bool:
    return await repo.create_if_absent(
        run_id,
        function_id="demo",
        event_name="test/started",
        event_id=run_id,
        event_data={"n": 1},
        wake_at=wake_at,
    )


async def test_create_if_absent_only_creates_once(db_session) -> None:
    repo = WorkflowRunRepository(db_session)
    assert await create_run(repo, "run_1", T0)
    assert not await create_run(repo, "run_1", T0)


async def test_list_due_ids_orders_by_wake_time_and_skips_future(db_session) -> None:
    repo = WorkflowRunRepository(db_session)
    await create_run(repo, "run_late", T0 - timedelta(minutes=1))
    await create_run(repo, "run_early", T0 - timedelta(hours=1))
    await create_run(repo, "run_future", T0 + timedelta(minutes=1))

    assert await repo.list_due_ids(T0, limit=10) == ["run_early", "run_late"]
    assert await repo.list_due_ids(T0, limit=1) == ["run_early"]


async def test_claim_sets_running_with_lease(db_session) -> None:
    repo = WorkflowRunRepository(db_session)
    await create_run(repo, "run_1", T0)

    assert await repo.claim("run_1", T0, T0 + timedelta(minutes=5))
    run = await repo.load_for_execution("run_1")
    assert run is not None
    assert run.status == "running"
    assert run.attempts == 0
    assert not await repo.claim("run_1", T0 + timedelta(minutes=1), T0 + timedelta(minutes=6))
    assert await repo.claim("run_1", T0 + timedelta(minutes=5), T0 + timedelta(minutes=10))


async def test_record_step_and_get_result(db_session) -> None:
    repo = WorkflowRunRepository(db_session)
    await create_run(repo, "run_1", T0)
    await repo.record_step("run_1", "fetch", StepKind.RUN, {"ok": True}, T0)
    await repo.record_step("run_1", "nap", StepKind.SLEEP, {"until": "x"}, T0 + timedelta(seconds=1))

    result = await repo.get_result("run_1")

    assert result is not None
    assert result.status == "queued"
    assert result.wake_at == T0
    assert [(s.name, s.kind, s.output) for s in result.steps] == [
        ("fetch", "run", {"ok": True}),
        ("nap", "sleep", {"until": "x"}),
    ]
    assert await repo.get_result("run_missing") is None
