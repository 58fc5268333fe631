"""Online dispatch loop.

One `run()` per scheduling event, single-threaded. Each cycle:

    READY -> ENCODING -> AWAITING_DECISION -> PLACED | EXHAUSTED

READY releases tasks finished at the current clock and selects the ready set.
ENCODING builds the fixed-shape state vector. AWAITING_DECISION asks the oracle
for an action; -1 means no resource can take any ready task (EXHAUSTED, not an
error). PLACED claims the first idle resource, records the task as running,
reports its reward and sends the retrain signal for the previous dispatch.

Retraining lags by exactly one cycle: the retrain call made while placing task
T(n) references T(n-1), together with the state vector observed in T(n)'s
cycle. Only one pending id is ever carried, across `run()` calls too.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Sequence

from dispatch_core.dispatch.encoding import StateEncoder
from dispatch_core.dispatch.reward import RewardModel, negative_runtime_reward
from dispatch_core.errors import OracleResponseError, PlacementInvariantViolation, TaskStateConflictError
from dispatch_core.ledger.lifecycle import OFFERABLE_STATES
from dispatch_core.models import Task
from dispatch_core.oracle.interfaces import NO_FEASIBLE_PLACEMENT, DecisionOracle
from dispatch_core.scheduler.state import SchedulerState

logger = logging.getLogger(__name__)

READY = "ready"
ENCODING = "encoding"
AWAITING_DECISION = "awaiting_decision"
PLACED = "placed"
EXHAUSTED = "exhausted"


@dataclass
class DispatchResult:
    placed: list[Task] = field(default_factory=list)
    skipped: list[Task] = field(default_factory=list)
    cycles: int = 0
    final_state: str = READY


class DispatchLoop:
    def __init__(
        self,
        state: SchedulerState,
        oracle: DecisionOracle,
        *,
        encoder: StateEncoder | None = None,
        reward_model: RewardModel = negative_runtime_reward,
    ):
        self._state = state
        self._oracle = oracle
        self._encoder = encoder or StateEncoder()
        self._reward = reward_model
        self.phase = READY

    def run(self, pending: Sequence[Task]) -> DispatchResult:
        """Drain all currently placeable work from `pending`.

        Placed tasks are appended to the placer's scheduled list; `pending`
        itself is not mutated. Oracle failures propagate.
        """
        state = self._state
        now = state.clock.now()
        result = DispatchResult()

        state.tracker.release_finished(now)
        # Running and finished tasks the engine still lists are never offered;
        # tasks placed or skipped in this pass are dropped as the loop goes.
        remaining = [t for t in pending if t.status in OFFERABLE_STATES and t not in state.tracker]
        self.phase = READY

        while True:
            ready = state.selector.eligible_now(remaining, now)[: self._encoder.max_ready_tasks]
            if not ready:
                break

            self.phase = ENCODING
            vector = self._encoder.encode(ready, state.placer.placeable_resources())

            self.phase = AWAITING_DECISION
            action = self._oracle.decide({"time": now, "ready": len(ready)}, vector)
            logger.info("decision_received", extra={"event": "decision_received", "action": action, "sim_time": now})
            if action == NO_FEASIBLE_PLACEMENT:
                break
            if not 0 <= action < len(ready):
                raise OracleResponseError(
                    f"action {action} outside ready list of {len(ready)}", operation="decide", details=action
                )

            task = ready[action]
            remaining = [t for t in remaining if t is not task]
            result.cycles += 1

            self.phase = PLACED
            try:
                self._place(task, action, vector)
            except PlacementInvariantViolation as e:
                logger.warning(
                    "placement_skipped",
                    extra={"event": "placement_skipped", "task_id": task.task_id, "job_id": task.job_id, "code": e.code},
                )
                result.skipped.append(task)
                continue
            result.placed.append(task)
            self.phase = READY

        self.phase = EXHAUSTED
        result.final_state = EXHAUSTED
        return result

    def _place(self, task: Task, action: int, vector: list[int]) -> None:
        state = self._state
        # Checked before the claim so a rejected task never holds a resource.
        if task.status not in OFFERABLE_STATES:
            raise TaskStateConflictError(
                f"Task {task.task_id} cannot be dispatched from state {task.status}", task_id=task.task_id
            )
        resource = state.placer.place_first_idle(task)
        if resource is None:
            raise PlacementInvariantViolation(task.task_id, action)

        state.tracker.add(task)
        reward = self._reward(task, resource)
        logger.info(
            "task_dispatched",
            extra={
                "event": "task_dispatched",
                "job_id": task.job_id,
                "task_id": task.task_id,
                "resource_id": resource.resource_id,
                "reward": reward,
                "sim_time": task.start_time,
            },
        )

        self._oracle.report_reward(task.task_id, reward)
        if state.last_dispatched_task_id is not None:
            self._oracle.retrain(state.last_dispatched_task_id, vector)
        state.last_dispatched_task_id = task.task_id
