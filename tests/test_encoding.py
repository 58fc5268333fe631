from __future__ import annotations

import pytest

from dispatch_core.dispatch.encoding import StateEncoder
from dispatch_core.dispatch.reward import negative_runtime_reward
from dispatch_core.models import BUSY, Resource, Task


def test_layout_and_padding():
    encoder = StateEncoder(max_ready_tasks=2, max_resources=2)
    ready = [Task(5, 3, submission_time=1.7, length=400)]
    resources = [Resource(0, mips=1000, pes=2, ram=64, state=BUSY)]

    state = encoder.encode(ready, resources)

    assert len(state) == encoder.size == 2 + 2 * 4 + 2 * 5
    assert state[:2] == [1, 1]
    assert state[2:6] == [5, 3, 400, 1]
    assert state[6:10] == [0, 0, 0, 0]
    assert state[10:15] == [0, 1, 1000, 2, 64]
    assert state[15:] == [0] * 5
    assert all(isinstance(v, int) for v in state)


def test_extra_tasks_are_truncated():
    encoder = StateEncoder(max_ready_tasks=1, max_resources=1)
    state = encoder.encode([Task(1, 1), Task(2, 1)], [Resource(0)])
    assert state[0] == 1
    assert len(state) == encoder.size


def test_slot_counts_must_be_positive():
    with pytest.raises(ValueError):
        StateEncoder(max_ready_tasks=0)


def test_negative_runtime_reward_prefers_faster_resources():
    task = Task(1, 1, length=1000)
    slow = negative_runtime_reward(task, Resource(0, mips=500, pes=1))
    fast = negative_runtime_reward(task, Resource(1, mips=1000, pes=2))
    assert slow == -2.0
    assert fast == -0.5
    assert negative_runtime_reward(task, Resource(2, mips=0)) == -1000.0
