"""Core scheduling error types.

Fatal errors abort the simulation run with a diagnostic naming the violated
invariant. `PlacementInvariantViolation` is the one soft failure: the dispatch
loop logs it and skips the task for the current pass.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable


class DispatchCoreError(Exception):
    """Base class for scheduling core errors."""


class MalformedConstraintError(DispatchCoreError):
    def __init__(self, message: str, job_id: int | None = None, details: Any | None = None):
        self.job_id = job_id
        self.details = details
        prefix = f"job {job_id}: " if job_id is not None else ""
        super().__init__(prefix + message)


class UnknownJobError(DispatchCoreError):
    def __init__(self, job_id: Any):
        self.job_id = job_id
        super().__init__(f"Job not registered with the constraint ledger: {job_id}")


class OracleUnavailableError(DispatchCoreError):
    def __init__(self, message: str, operation: str, details: Any | None = None):
        self.operation = operation
        self.details = details
        super().__init__(f"oracle {operation} failed: {message}")


class OracleResponseError(OracleUnavailableError):
    """The oracle answered, but not with something the contract allows."""


class PlacementInvariantViolation(DispatchCoreError):
    def __init__(self, task_id: int, action: int):
        self.task_id = task_id
        self.action = action
        self.code = "NO_IDLE_RESOURCE"
        super().__init__(f"Oracle selected task {task_id} (action={action}) but no idle resource was found")


class NoMoreWorkError(DispatchCoreError):
    def __init__(self, message: str = "No pending or running tasks remain", time: float | None = None):
        self.time = time
        super().__init__(message)


class TaskStateConflictError(DispatchCoreError):
    def __init__(self, message: str, task_id: int | None = None):
        self.task_id = task_id
        super().__init__(message)


class ConfigError(DispatchCoreError):
    def __init__(self, message: str, details: Any | None = None):
        self.details = details
        super().__init__(message)


@dataclass(frozen=True)
class SchemaViolation:
    path: str
    message: str


class WorkloadValidationError(DispatchCoreError):
    def __init__(self, kind: str, violations: Iterable[SchemaViolation]):
        self.kind = kind
        self.violations = list(violations)
        super().__init__(f"{kind} failed schema validation ({len(self.violations)} violation(s))")
