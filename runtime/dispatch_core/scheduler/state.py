"""Explicitly constructed scheduler state.

Everything a scheduling call mutates lives here, so independent simulations can
share a process and tests start from a clean slate.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from dispatch_core.ledger.constraints import ConstraintLedger
from dispatch_core.ledger.running import RunningTaskTracker
from dispatch_core.ledger.selector import ReadyJobSelector
from dispatch_core.models import Resource
from dispatch_core.placement.placer import ResourcePlacer
from dispatch_core.utils import SimulationClock


@dataclass
class SchedulerState:
    clock: SimulationClock
    ledger: ConstraintLedger
    tracker: RunningTaskTracker
    selector: ReadyJobSelector
    placer: ResourcePlacer
    last_dispatched_task_id: int | None = None


def build_scheduler_state(
    resources: Iterable[Resource],
    clock: SimulationClock,
    *,
    ledger: ConstraintLedger | None = None,
    stalled_is_error: bool = False,
) -> SchedulerState:
    ledger = ledger or ConstraintLedger()
    tracker = RunningTaskTracker(ledger, clock)
    return SchedulerState(
        clock=clock,
        ledger=ledger,
        tracker=tracker,
        selector=ReadyJobSelector(ledger, tracker, stalled_is_error=stalled_is_error),
        placer=ResourcePlacer(resources),
    )
