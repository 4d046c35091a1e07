"""Tests for the background WorkflowWorker loop (engine mocked)."""

import asyncio
from unittest.mock import AsyncMock, MagicMock

from app.infrastructure.services.workflow_worker import WorkflowWorker


def make_engine(*results) -> MagicMock:
    engine = MagicMock()
    engine.run_due = AsyncMock(side_effect=list(results) if results else None, return_value=0)
    return engine


async def test_run_once_returns_executed_count() -> None:
    engine = make_engine(3)
    worker = WorkflowWorker(engine, batch_size=10)

    assert await worker.run_once() == 3
    engine.run_due.assert_awaited_once_with(10)


async def test_run_once_logs_and_swallows_engine_errors() -> None:
    engine = make_engine(RuntimeError("database down"))
    worker = WorkflowWorker(engine)

    assert await worker.run_once() == 0


async def test_start_polls_and_stop_cancels() -> None:
    engine = MagicMock()
    engine.run_due = AsyncMock(return_value=0)
    worker = WorkflowWorker(engine, poll_interval=0.01)

    worker.start()
    assert worker.running
    await asyncio.sleep(0.05)
    await worker.stop()

    assert not worker.running
    assert engine.run_due.await_count >= 2


async def test_wake_triggers_pass_before_poll_interval() -> None:
    engine = MagicMock()
    engine.run_due = AsyncMock(return_value=0)
    worker = WorkflowWorker(engine, poll_interval=60)

    worker.start()
    await asyncio.sleep(0.01)
    assert engine.run_due.await_count == 1
    worker.wake()
    await asyncio.sleep(0.01)
    await worker.stop()

    assert engine.run_due.await_count == 2


async def test_full_batch_runs_again_without_waiting() -> None:
    engine = MagicMock()
    engine.run_due = AsyncMock(side_effect=[2, 2, 0, 0, 0])
    worker = WorkflowWorker(engine, poll_interval=60, batch_size=2)

    worker.start()
    await asyncio.sleep(0.01)
    await worker.stop()

    assert engine.run_due.await_count == 3


async def test_start_is_idempotent_and_stop_without_start_is_noop() -> None:
    engine = MagicMock()
    engine.run_due = AsyncMock(return_value=0)
    worker = WorkflowWorker(engine, poll_interval=60)
    await worker.stop()

    worker.start()
    first = worker._task
    worker.start()
    assert worker._task is first
    await worker.stop()
