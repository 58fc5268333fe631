"""Global list of in-flight tasks.

The tracker holds references to tasks owned by the simulation. A task enters
on dispatch and leaves once the simulated clock has reached its finish time,
at which point its job's running set in the ledger is updated too.
"""

from __future__ import annotations

import logging

from dispatch_core.ledger.constraints import ConstraintLedger
from dispatch_core.ledger.lifecycle import FINISHED, RUNNING, apply_transition
from dispatch_core.models import Task
from dispatch_core.utils import INF, SimulationClock

logger = logging.getLogger(__name__)


class RunningTaskTracker:
    def __init__(self, ledger: ConstraintLedger, clock: SimulationClock):
        self._ledger = ledger
        self._clock = clock
        self._running: list[Task] = []

    def __len__(self) -> int:
        return len(self._running)

    def __contains__(self, task: object) -> bool:
        return any(t is task for t in self._running)

    @property
    def running(self) -> list[Task]:
        return list(self._running)

    def add(self, task: Task) -> None:
        # Ledger first: an unknown job must not leave a half-registered task behind.
        self._ledger.add_running(task)
        task.start_time = self._clock.now()
        apply_transition(task, RUNNING)
        self._running.append(task)

    def release_finished(self, current_time: float) -> list[Task]:
        """Remove and return every task whose finish time is at or before `current_time`."""
        finished = [t for t in self._running if t.has_finish_time and t.finish_time <= current_time]
        if not finished:
            return []

        for task in finished:
            self._ledger.remove_running(task)
            apply_transition(task, FINISHED)
            logger.debug(
                "task_released",
                extra={"event": "task_released", "job_id": task.job_id, "task_id": task.task_id, "sim_time": current_time},
            )
        self._running = [t for t in self._running if not (t.has_finish_time and t.finish_time <= current_time)]
        return finished

    def next_finish_time(self, after: float | None = None) -> float:
        """Earliest known finish time among running tasks (strictly after `after` if given), else INF."""
        candidates = [
            t.finish_time
            for t in self._running
            if t.has_finish_time and (after is None or t.finish_time > after)
        ]
        return min(candidates, default=INF)
