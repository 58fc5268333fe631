"""Per-job concurrency constraints and the running-task ledger.

A job declares:
- `max_parallel`: how many of its tasks may execute at once.
- `parallel_groups`: a whitelist of co-running sets. All tasks of a job that
  run concurrently must fit inside a single declared group.

The ledger answers "may task T of job J start now" and records which tasks of
each job are currently running. It is mutated only by the scheduling thread.
"""

from __future__ import annotations

import json
import logging
from typing import AbstractSet, Any, Sequence

from dispatch_core.errors import MalformedConstraintError, UnknownJobError
from dispatch_core.models import Job, Task
from dispatch_core.utils import is_strict_int

logger = logging.getLogger(__name__)


def parse_parallel_groups(raw: str | Sequence[Sequence[int]], *, job_id: int | None = None) -> list[frozenset[int]]:
    """Parse `[[1,2],[2,3,4]]` (text or already-decoded lists) into task id sets."""
    if isinstance(raw, str):
        try:
            decoded: Any = json.loads(raw)
        except ValueError as e:
            raise MalformedConstraintError(f"parallel groups are not a bracketed list: {raw!r}", job_id=job_id) from e
    else:
        decoded = raw

    if not isinstance(decoded, (list, tuple)) or not decoded:
        raise MalformedConstraintError("parallel groups must be a non-empty list of groups", job_id=job_id, details=raw)

    groups: list[frozenset[int]] = []
    for idx, group in enumerate(decoded):
        if not isinstance(group, (list, tuple)) or not group:
            raise MalformedConstraintError(f"parallel group {idx} must be a non-empty list", job_id=job_id, details=raw)
        if not all(is_strict_int(t) for t in group):
            raise MalformedConstraintError(f"parallel group {idx} contains non-integer task ids", job_id=job_id, details=raw)
        groups.append(frozenset(group))
    return groups


def parse_max_parallel(raw: str | int, *, job_id: int | None = None) -> int:
    if isinstance(raw, bool):
        raise MalformedConstraintError("max parallel tasks must be an integer", job_id=job_id, details=raw)
    if isinstance(raw, str):
        try:
            value = int(raw.strip())
        except ValueError as e:
            raise MalformedConstraintError(f"max parallel tasks is not an integer: {raw!r}", job_id=job_id) from e
    elif isinstance(raw, int):
        value = raw
    else:
        raise MalformedConstraintError("max parallel tasks must be an integer", job_id=job_id, details=raw)
    if value <= 0:
        raise MalformedConstraintError(f"max parallel tasks must be positive (got {value})", job_id=job_id)
    return value


class ConstraintLedger:
    def __init__(self) -> None:
        self._jobs: dict[int, Job] = {}

    def create_job(self, job_id: int, max_parallel: str | int, parallel_groups: str | Sequence[Sequence[int]]) -> Job:
        """Register a job. Nothing is stored unless both constraints parse."""
        limit = parse_max_parallel(max_parallel, job_id=job_id)
        groups = parse_parallel_groups(parallel_groups, job_id=job_id)
        job = Job(job_id=job_id, max_parallel=limit, parallel_groups=groups)
        self._jobs[job_id] = job
        logger.debug("job_registered", extra={"event": "job_registered", "job_id": job_id})
        return job

    def has_job(self, job_id: int) -> bool:
        return job_id in self._jobs

    def get_job(self, job_id: int) -> Job:
        try:
            return self._jobs[job_id]
        except KeyError:
            raise UnknownJobError(job_id) from None

    def jobs(self) -> list[Job]:
        return list(self._jobs.values())

    def can_run(self, job_id: int, task_id: int, *, without: AbstractSet[int] = frozenset()) -> bool:
        """`without` names running tasks to treat as already finished (lookahead)."""
        job = self.get_job(job_id)
        candidate = (job.running - without) | {task_id}
        if len(candidate) > job.max_parallel:
            return False
        return any(candidate <= group for group in job.parallel_groups)

    def add_running(self, task: Task) -> None:
        # Callers check can_run first; the ledger does not re-validate.
        self.get_job(task.job_id).running.add(task.task_id)

    def remove_running(self, task: Task) -> None:
        self.get_job(task.job_id).running.discard(task.task_id)

    def running_tasks(self, job_id: int) -> frozenset[int]:
        return frozenset(self.get_job(job_id).running)
