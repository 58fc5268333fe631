"""Task lifecycle state machine.

Canonical lifecycle:
pending -> eligible -> running -> finished

Notes:
- `eligible` is assigned by the ready selector; an eligible task that is not
  placed in a pass stays eligible.
- `running` and `finished` are owned by the running-task tracker.
- The Task record outlives `finished` for result reporting.
"""

from __future__ import annotations

from dispatch_core.errors import TaskStateConflictError
from dispatch_core.models import ELIGIBLE, FINISHED, PENDING, RUNNING, Task

# States a task can be offered for dispatch from.
OFFERABLE_STATES = frozenset({PENDING, ELIGIBLE})

_TERMINAL_STATES = {FINISHED}

# Allowed transitions excluding no-op transitions.
_ALLOWED: dict[str, set[str]] = {
    PENDING: {ELIGIBLE, RUNNING},
    ELIGIBLE: {RUNNING},
    RUNNING: {FINISHED},
    FINISHED: set(),
}


def is_terminal(state: str) -> bool:
    return state in _TERMINAL_STATES


def apply_transition(task: Task, new_state: str) -> Task:
    """Move a task to `new_state` in place and return it."""
    current_state = task.status

    if new_state == current_state:
        return task

    if is_terminal(current_state):
        raise TaskStateConflictError(
            f"Task {task.task_id} is terminal; cannot transition from {current_state} to {new_state}",
            task_id=task.task_id,
        )

    allowed = _ALLOWED.get(current_state)
    if allowed is None or new_state not in allowed:
        raise TaskStateConflictError(
            f"Invalid task state transition for task {task.task_id}: {current_state} -> {new_state}",
            task_id=task.task_id,
        )

    task.status = new_state
    return task
