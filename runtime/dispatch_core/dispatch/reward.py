"""Reward models: deterministic functions of a placed task and its resource."""

from __future__ import annotations

from typing import Callable

from dispatch_core.models import Resource, Task

RewardModel = Callable[[Task, Resource], float]


def negative_runtime_reward(task: Task, resource: Resource) -> float:
    """Shorter estimated runtime on the chosen resource earns a higher reward."""
    capacity = resource.mips * resource.pes
    if capacity <= 0:
        return -float(task.length)
    return -(task.length / capacity)
