"""Task-assignment notification workflow.

On ``app/task.assigned`` the assignee gets an email right away. Unless the
task is due today, the run then sleeps durably until the due date, reads
the task again and sends a reminder only if the task still exists and is
not DONE.

Branching is an explicit state machine (ReminderState) with pure
transition functions; every side effect runs inside a named engine step,
so a replay after a restart or a sleep never repeats it.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, tzinfo
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from app.application.dtos.task import Assignee, TaskDetails
from app.application.dtos.workflow import WorkflowEvent
from app.application.interfaces.repositories import ITaskRepository
from app.application.interfaces.services import (
    IEmailTemplateRenderer,
    INotificationService,
    IStepController,
)
from app.domain.exceptions import (
    NotificationFailureException,
    TaskNotFoundException,
    ValidationException,
)
from app.shared.telemetry.logging import get_logger
from app.shared.utils.datetime import (
    format_short_date,
    is_same_calendar_day,
    parse_iso_datetime,
    utc_now,
)

logger = get_logger(__name__)

FUNCTION_ID = "send-task-assignment-email"
EVENT_NAME = "app/task.assigned"

STEP_FETCH_TASK = "fetch-task"
STEP_SEND_ASSIGNMENT = "send-task-assignment-email"
STEP_WAIT_FOR_DUE_DATE = "wait-for-the-due-date"
STEP_RECHECK_TASK = "check-if-task-is-completed"
STEP_SEND_REMINDER = "send-task-reminder-email"


class ReminderState(str, Enum):
    """Where a task-assignment run is in its lifecycle."""

    NOTIFY_ASSIGNEE = "NOTIFY_ASSIGNEE"
    AWAIT_DUE_DATE = "AWAIT_DUE_DATE"
    RECHECK_TASK = "RECHECK_TASK"
    SEND_REMINDER = "SEND_REMINDER"
    FINISHED = "FINISHED"


def after_assignment(due_date: datetime, now: datetime, tz: tzinfo) -> ReminderState:
    """FINISHED when the task is due today in tz (time of day ignored), else AWAIT_DUE_DATE."""
    if is_same_calendar_day(due_date, now, tz):
        return ReminderState.FINISHED
    return ReminderState.AWAIT_DUE_DATE


def after_recheck(task: TaskDetails | None) -> ReminderState:
    """FINISHED when the task is gone, DONE or unassigned; else SEND_REMINDER."""
    if task is None or task.is_done or task.assignee is None:
        return ReminderState.FINISHED
    return ReminderState.SEND_REMINDER


class TaskAssignedPayload(BaseModel):
    """Trigger payload of app/task.assigned."""

    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    task_id: str = Field(alias="taskId", min_length=1)
    origin: str


def parse_payload(data: dict[str, Any]) -> TaskAssignedPayload:
    """Validate the trigger payload; raise ValidationException when malformed."""
    try:
        return TaskAssignedPayload.model_validate(data)
    except ValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(p) for p in first.get("loc", ())) or None
        raise ValidationException(
            f"Invalid {EVENT_NAME} payload: {first.get('msg')}", field=field
        ) from e


class TaskAssignmentWorkflow:
    """Handler for the send-task-assignment-email function.

    One instance serves one execution of one run; the engine builds it
    with repositories bound to the run's session.
    """

    def __init__(
        self,
        tasks: ITaskRepository,
        notifier: INotificationService,
        renderer: IEmailTemplateRenderer,
        *,
        tz: tzinfo,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.tasks = tasks
        self.notifier = notifier
        self.renderer = renderer
        self.tz = tz
        self._clock = clock

    async def __call__(self, event: WorkflowEvent, step: IStepController) -> dict[str, Any]:
        payload = parse_payload(event.data)
        state = ReminderState.NOTIFY_ASSIGNEE

        fetched = await step.run_once(STEP_FETCH_TASK, lambda: self._fetch_task(payload.task_id))
        task = TaskDetails.from_dict(fetched["task"])
        # "Today" is the day the task was first fetched, so replays decide the same way.
        fetched_at = parse_iso_datetime(fetched["fetched_at"])

        await step.run_once(
            STEP_SEND_ASSIGNMENT,
            lambda: self._send_assignment(task, payload.origin, final=step.final_attempt),
        )

        state = after_assignment(task.due_date, fetched_at, self.tz)
        if state is ReminderState.FINISHED:
            logger.info("Task %s is due today; no reminder scheduled", task.id)
            return self._result(state, reminder_sent=False)

        await step.sleep_until(STEP_WAIT_FOR_DUE_DATE, task.due_date)
        state = ReminderState.RECHECK_TASK

        current_raw = await step.run_once(STEP_RECHECK_TASK, lambda: self._recheck_task(task.id))
        current = TaskDetails.from_dict(current_raw) if current_raw else None
        state = after_recheck(current)
        if state is ReminderState.FINISHED or current is None or current.assignee is None:
            if current is None:
                logger.info("Task %s was deleted before its due date; no reminder", task.id)
            elif current.is_done:
                logger.info("Task %s is already done; no reminder", task.id)
            else:
                logger.info("Task %s has no assignee at due date; no reminder", task.id)
            return self._result(ReminderState.FINISHED, reminder_sent=False)

        assignee = current.assignee
        await step.run_once(
            STEP_SEND_REMINDER,
            lambda: self._send_reminder(current, assignee, payload.origin),
        )
        return self._result(ReminderState.FINISHED, reminder_sent=True)

    async def _fetch_task(self, task_id: str) -> dict[str, Any]:
        task = await self.tasks.get_details(task_id)
        if task is None:
            raise TaskNotFoundException(task_id)
        return {"task": task.to_dict(), "fetched_at": self._clock().isoformat()}

    async def _recheck_task(self, task_id: str) -> dict[str, Any] | None:
        task = await self.tasks.get_details(task_id)
        return task.to_dict() if task else None

    def _context(self, task: TaskDetails, assignee: Assignee, origin: str) -> dict[str, Any]:
        return {
            "assignee_name": assignee.name,
            "task_title": task.title,
            "project_name": task.project.name,
            "due_date": format_short_date(task.due_date, self.tz),
            "origin": origin,
        }

    async def _send_assignment(
        self, task: TaskDetails, origin: str, *, final: bool
    ) -> dict[str, Any]:
        assignee = task.assignee
        if assignee is None:
            logger.warning("Task %s has no assignee; skipping assignment email", task.id)
            return {"sent": False, "reason": "no assignee"}
        subject, body = self.renderer.render(
            "task_assigned", self._context(task, assignee, origin)
        )
        if await self.notifier.send(assignee.email, subject, body):
            return {"sent": True}
        if not final:
            raise NotificationFailureException(assignee.email, subject)
        # Out of retries: the run goes on to schedule the reminder.
        logger.error("Assignment email for task %s to %s failed", task.id, assignee.email)
        return {"sent": False}

    async def _send_reminder(
        self, task: TaskDetails, assignee: Assignee, origin: str
    ) -> dict[str, Any]:
        subject, body = self.renderer.render(
            "task_reminder", self._context(task, assignee, origin)
        )
        if not await self.notifier.send(assignee.email, subject, body):
            raise NotificationFailureException(assignee.email, subject)
        logger.info("Reminder for task %s sent to %s", task.id, assignee.email)
        return {"sent": True}

    @staticmethod
    def _result(state: ReminderState, *, reminder_sent: bool) -> dict[str, Any]:
        return {"state": state.value, "reminder_sent": reminder_sent}
