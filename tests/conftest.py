from __future__ import annotations

from typing import Any, Iterable, Sequence

import pytest

from dispatch_core.models import Resource
from dispatch_core.oracle.interfaces import DecisionOracle
from dispatch_core.utils import ManualClock


class ScriptedOracle(DecisionOracle):
    """Replays a fixed list of actions and records every call in order."""

    def __init__(self, actions: Iterable[int] = ()):
        self.actions = list(actions)
        self.calls: list[tuple[Any, ...]] = []

    def decide(self, context: dict[str, Any] | None, state: Sequence[int]) -> int:
        self.calls.append(("decide", context, list(state)))
        if not self.actions:
            return -1
        return self.actions.pop(0)

    def report_reward(self, task_id: int, reward: float) -> None:
        self.calls.append(("reward", task_id, reward))

    def retrain(self, previous_task_id: int, state: Sequence[int]) -> None:
        self.calls.append(("retrain", previous_task_id, list(state)))

    def calls_named(self, name: str) -> list[tuple[Any, ...]]:
        return [c for c in self.calls if c[0] == name]


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture
def make_resources():
    def _make(n: int, **kwargs: Any) -> list[Resource]:
        return [Resource(resource_id=i, **kwargs) for i in range(n)]

    return _make


@pytest.fixture
def oracle() -> ScriptedOracle:
    return ScriptedOracle()
