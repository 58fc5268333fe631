from __future__ import annotations

import pytest

from dispatch_core.errors import DispatchCoreError
from dispatch_core.ledger.constraints import ConstraintLedger
from dispatch_core.ledger.running import RunningTaskTracker
from dispatch_core.models import BUSY, IDLE, Resource, Task
from dispatch_core.placement.placer import ResourcePlacer


def test_places_on_first_idle_in_registration_order(make_resources):
    resources = make_resources(3)
    resources[0].state = BUSY
    placer = ResourcePlacer(resources)
    task = Task(1, 1)

    chosen = placer.place_first_idle(task)

    assert chosen is resources[1]
    assert chosen.state == BUSY
    assert chosen.task is task
    assert task.resource_id == 1
    assert placer.scheduled == [task]


def test_returns_none_when_everything_is_busy(make_resources):
    placer = ResourcePlacer(make_resources(1))
    assert placer.place_first_idle(Task(1, 1)) is not None
    assert placer.place_first_idle(Task(2, 1)) is None
    assert len(placer.scheduled) == 1


def test_mobile_resources_are_never_used():
    placer = ResourcePlacer([Resource(0, mobile=True), Resource(1)])
    assert placer.place_first_idle(Task(1, 1)).resource_id == 1
    assert placer.place_first_idle(Task(2, 1)) is None
    assert [r.resource_id for r in placer.placeable_resources()] == [1]


def test_duplicate_resource_ids_rejected():
    with pytest.raises(DispatchCoreError):
        ResourcePlacer([Resource(0), Resource(0)])


def test_place_then_release_round_trip(make_resources, clock):
    ledger = ConstraintLedger()
    ledger.create_job(1, "1", "[[1]]")
    tracker = RunningTaskTracker(ledger, clock)
    placer = ResourcePlacer(make_resources(1))
    task = Task(1, 1)

    resource = placer.place_first_idle(task)
    tracker.add(task)
    assert resource.state == BUSY

    task.finish_time = 3.0
    clock.advance_to(3.0)
    assert placer.release(task) is resource
    tracker.release_finished(clock.now())

    assert resource.state == IDLE
    assert resource.task is None
    assert task not in tracker
    # Releasing again is a no-op.
    assert placer.release(task) is None


def test_no_idle_resource_is_ever_bound(make_resources):
    placer = ResourcePlacer(make_resources(2))
    tasks = [Task(i, 1) for i in range(4)]
    for task in tasks:
        placer.place_first_idle(task)
        for r in placer.resources:
            assert (r.state == IDLE) == (r.task is None)


def test_take_scheduled_drains(make_resources):
    placer = ResourcePlacer(make_resources(2))
    a, b = Task(1, 1), Task(2, 1)
    placer.place_first_idle(a)
    placer.place_first_idle(b)
    assert placer.take_scheduled() == [a, b]
    assert placer.scheduled == []
