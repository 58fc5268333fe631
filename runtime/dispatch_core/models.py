"""Scheduling data model: jobs, tasks and compute resources.

Tasks are owned by the simulation's job list. The ledger and tracker only hold
references to them.
"""

from __future__ import annotations

from dataclasses import dataclass, field

UNSET_TIME = -1.0

IDLE = "idle"
BUSY = "busy"

# Task lifecycle states; transitions live in ledger/lifecycle.py.
PENDING = "pending"
ELIGIBLE = "eligible"
RUNNING = "running"
FINISHED = "finished"


@dataclass
class Job:
    job_id: int
    max_parallel: int
    parallel_groups: list[frozenset[int]]
    running: set[int] = field(default_factory=set)


@dataclass(eq=False)
class Task:
    task_id: int
    job_id: int
    submission_time: float = 0.0
    length: int = 0
    start_time: float = UNSET_TIME
    # Written by the simulation engine's completion event; the core only reads it.
    finish_time: float = UNSET_TIME
    resource_id: int | None = None
    status: str = PENDING

    @property
    def has_finish_time(self) -> bool:
        return self.finish_time != UNSET_TIME


@dataclass(eq=False)
class Resource:
    resource_id: int
    mips: int = 1000
    pes: int = 1
    ram: int = 0
    mobile: bool = False
    state: str = IDLE
    task: Task | None = None

    @property
    def is_idle(self) -> bool:
        return self.state == IDLE
