"""Scheduler entry point for the simulation engine.

This module keeps the core modular:
- The simulation engine owns time and calls `run()` once per scheduling event.
- The dispatch loop drains all currently placeable work and returns.
- The engine's completion handler sets `finish_time` and calls `task_completed`.

Invocation must be single-threaded; the scheduler does not lock.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Sequence

from dispatch_core.config.settings import SchedulerConfig
from dispatch_core.dispatch.encoding import StateEncoder
from dispatch_core.dispatch.loop import DispatchLoop, DispatchResult
from dispatch_core.dispatch.reward import RewardModel, negative_runtime_reward
from dispatch_core.ledger.constraints import ConstraintLedger
from dispatch_core.models import Resource, Task
from dispatch_core.oracle.http_client import HttpOracleClient
from dispatch_core.oracle.interfaces import DecisionOracle
from dispatch_core.scheduler.state import SchedulerState, build_scheduler_state
from dispatch_core.utils import SimulationClock

logger = logging.getLogger(__name__)


@dataclass
class Scheduler:
    state: SchedulerState
    loop: DispatchLoop

    @classmethod
    def create(
        cls,
        *,
        resources: Iterable[Resource],
        clock: SimulationClock,
        oracle: DecisionOracle,
        encoder: StateEncoder | None = None,
        reward_model: RewardModel = negative_runtime_reward,
        stalled_is_error: bool = False,
        ledger: ConstraintLedger | None = None,
    ) -> "Scheduler":
        state = build_scheduler_state(resources, clock, ledger=ledger, stalled_is_error=stalled_is_error)
        return cls(state=state, loop=DispatchLoop(state, oracle, encoder=encoder, reward_model=reward_model))

    @classmethod
    def from_config(
        cls,
        config: SchedulerConfig,
        *,
        resources: Iterable[Resource],
        clock: SimulationClock,
        oracle: DecisionOracle | None = None,
        reward_model: RewardModel = negative_runtime_reward,
        ledger: ConstraintLedger | None = None,
    ) -> "Scheduler":
        """Without an explicit oracle, the configured HTTP oracle is used."""
        if oracle is None:
            oracle = HttpOracleClient.from_config(config.oracle)
        encoder = StateEncoder(
            max_ready_tasks=config.encoding.max_ready_tasks,
            max_resources=config.encoding.max_resources,
        )
        return cls.create(
            resources=resources,
            clock=clock,
            oracle=oracle,
            encoder=encoder,
            reward_model=reward_model,
            stalled_is_error=config.flags.stalled_is_error,
            ledger=ledger,
        )

    def run(self, pending: Sequence[Task]) -> DispatchResult:
        result = self.loop.run(pending)
        logger.info(
            "scheduling_pass_done placed=%d skipped=%d",
            len(result.placed),
            len(result.skipped),
            extra={"event": "scheduling_pass_done", "sim_time": self.state.clock.now()},
        )
        return result

    def next_available(self, pending: Sequence[Task]) -> tuple[float, list[Task]]:
        """When the engine should next call `run()`, and which tasks will be ready then.

        Read-only: the ledger and tracker keep describing the current clock.
        """
        return self.state.selector.peek_next_available(pending, self.state.clock.now())

    def task_completed(self, task: Task) -> None:
        """Completion-event hook: frees the task's resource and releases finished tasks."""
        resource = self.state.placer.release(task)
        self.state.tracker.release_finished(self.state.clock.now())
        logger.info(
            "task_completed",
            extra={
                "event": "task_completed",
                "job_id": task.job_id,
                "task_id": task.task_id,
                "resource_id": resource.resource_id if resource is not None else None,
                "sim_time": task.finish_time,
            },
        )

    def take_scheduled(self) -> list[Task]:
        return self.state.placer.take_scheduled()
