"""Ready-task selection with simulated-time lookahead."""

from __future__ import annotations

import logging
from typing import Sequence

from dispatch_core.errors import NoMoreWorkError
from dispatch_core.ledger.constraints import ConstraintLedger
from dispatch_core.ledger.lifecycle import OFFERABLE_STATES, apply_transition
from dispatch_core.ledger.running import RunningTaskTracker
from dispatch_core.models import ELIGIBLE, PENDING, Task
from dispatch_core.utils import INF

logger = logging.getLogger(__name__)


class ReadyJobSelector:
    def __init__(self, ledger: ConstraintLedger, tracker: RunningTaskTracker, *, stalled_is_error: bool = False):
        self._ledger = ledger
        self._tracker = tracker
        self._stalled_is_error = stalled_is_error

    def eligible_now(self, pending: Sequence[Task], time: float) -> list[Task]:
        """Pending tasks submitted by `time` whose job constraints allow them to start.

        Order follows `pending`. Returned tasks are marked eligible.
        """
        ready = [
            task
            for task in pending
            if task.status in OFFERABLE_STATES
            and task.submission_time <= time
            and self._ledger.can_run(task.job_id, task.task_id)
        ]
        for task in ready:
            if task.status == PENDING:
                apply_transition(task, ELIGIBLE)
        return ready

    def next_available(self, pending: Sequence[Task], time: float) -> tuple[float, list[Task]]:
        """Advance simulated time until some pending task is eligible.

        Returns `(effective_time, ready)` with `effective_time >= time`. Tasks
        finishing by the effective time are released from the tracker and
        ledger. Raises NoMoreWorkError when nothing is pending or running.
        When work remains but no future event is known (running tasks without
        a finish time, or tasks blocked only by job constraints) the selection
        is stalled and `(time, [])` is returned unless stalls are configured
        as errors.
        """
        pending = [t for t in pending if t.status in OFFERABLE_STATES]
        current = time
        self._tracker.release_finished(current)
        while True:
            ready = self.eligible_now(pending, current)
            if ready:
                return current, ready

            if not pending and len(self._tracker) == 0:
                raise NoMoreWorkError(time=current)

            next_time = self._next_event_time(pending, self._tracker.running, current)
            if next_time == INF:
                return self._stalled(pending, current)

            current = next_time
            self._tracker.release_finished(current)

    def peek_next_available(self, pending: Sequence[Task], time: float) -> tuple[float, list[Task]]:
        """Same answer as `next_available`, but nothing is released or marked.

        Completions up to each candidate time are applied to a scratch copy of
        the running sets, so the ledger keeps describing the current clock.
        """
        pending = [t for t in pending if t.status in OFFERABLE_STATES]
        in_flight = self._tracker.running
        current = time
        while True:
            still_running = [t for t in in_flight if not (t.has_finish_time and t.finish_time <= current)]
            released = [t for t in in_flight if t not in still_running]
            ready = [
                t
                for t in pending
                if t.submission_time <= current and self._can_run_after(t, released)
            ]
            if ready:
                return current, ready

            if not pending and not still_running:
                raise NoMoreWorkError(time=current)

            next_time = self._next_event_time(pending, still_running, current)
            if next_time == INF:
                return self._stalled(pending, current)
            current = next_time

    def _can_run_after(self, task: Task, released: Sequence[Task]) -> bool:
        gone = {t.task_id for t in released if t.job_id == task.job_id}
        return self._ledger.can_run(task.job_id, task.task_id, without=gone)

    @staticmethod
    def _next_event_time(pending: Sequence[Task], running: Sequence[Task], current: float) -> float:
        next_finish = min((t.finish_time for t in running if t.has_finish_time and t.finish_time > current), default=INF)
        next_submission = min((t.submission_time for t in pending if t.submission_time > current), default=INF)
        return min(next_finish, next_submission)

    def _stalled(self, pending: Sequence[Task], current: float) -> tuple[float, list[Task]]:
        logger.info(
            "selection_stalled",
            extra={"event": "selection_stalled", "sim_time": current, "code": "STALLED"},
        )
        if self._stalled_is_error:
            raise NoMoreWorkError(
                f"No future completion or submission can make {len(pending)} pending task(s) eligible",
                time=current,
            )
        return current, []
