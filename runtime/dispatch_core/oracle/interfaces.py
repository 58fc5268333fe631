"""Transport-agnostic decision oracle interface.

The oracle is an external policy (learned or heuristic). These calls are
blocking round-trips. A failed call is a hard error; implementations must raise
OracleUnavailableError rather than retry or drop the message.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Sequence

NO_FEASIBLE_PLACEMENT = -1


class DecisionOracle(ABC):
    @abstractmethod
    def decide(self, context: dict[str, Any] | None, state: Sequence[int]) -> int:
        """Return an index into the current ready list, or -1 for no feasible placement."""

    @abstractmethod
    def report_reward(self, task_id: int, reward: float) -> None:
        """Record the reward earned by dispatching `task_id`."""

    @abstractmethod
    def retrain(self, previous_task_id: int, state: Sequence[int]) -> None:
        """Update the policy with the state observed one cycle after `previous_task_id` was dispatched."""
