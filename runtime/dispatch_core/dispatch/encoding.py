"""Fixed-shape numeric encoding of ready tasks and resources for the oracle.

Layout:
    [n_ready, n_resources]
    + max_ready_tasks * [task_id, job_id, length, submission_time]
    + max_resources   * [resource_id, busy, mips, pes, ram]

Unused slots are zero. Values are truncated to int.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from dispatch_core.models import Resource, Task

TASK_FIELDS = 4
RESOURCE_FIELDS = 5


@dataclass(frozen=True)
class StateEncoder:
    max_ready_tasks: int = 32
    max_resources: int = 16

    def __post_init__(self) -> None:
        if self.max_ready_tasks <= 0 or self.max_resources <= 0:
            raise ValueError("encoder slot counts must be positive")

    @property
    def size(self) -> int:
        return 2 + self.max_ready_tasks * TASK_FIELDS + self.max_resources * RESOURCE_FIELDS

    def encode(self, ready: Sequence[Task], resources: Sequence[Resource]) -> list[int]:
        ready = list(ready)[: self.max_ready_tasks]
        resources = list(resources)[: self.max_resources]

        state = [len(ready), len(resources)]
        for task in ready:
            state.extend([task.task_id, task.job_id, int(task.length), int(task.submission_time)])
        state.extend([0] * ((self.max_ready_tasks - len(ready)) * TASK_FIELDS))

        for res in resources:
            state.extend([res.resource_id, 0 if res.is_idle else 1, int(res.mips), int(res.pes), int(res.ram)])
        state.extend([0] * ((self.max_resources - len(resources)) * RESOURCE_FIELDS))
        return state
