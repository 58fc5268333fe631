from __future__ import annotations

import pytest

from dispatch_core.errors import NoMoreWorkError
from dispatch_core.ledger.constraints import ConstraintLedger
from dispatch_core.ledger.running import RunningTaskTracker
from dispatch_core.ledger.selector import ReadyJobSelector
from dispatch_core.models import FINISHED, RUNNING, Task


def _selector(clock, *, stalled_is_error=False):
    ledger = ConstraintLedger()
    tracker = RunningTaskTracker(ledger, clock)
    return ledger, tracker, ReadyJobSelector(ledger, tracker, stalled_is_error=stalled_is_error)


def test_eligible_now_keeps_pending_order(clock):
    ledger, _, selector = _selector(clock)
    ledger.create_job(1, "3", "[[1,2,3]]")
    ledger.create_job(2, "1", "[[1]]")
    pending = [Task(3, 1), Task(1, 2), Task(1, 1, submission_time=9.0), Task(2, 1)]

    ready = selector.eligible_now(pending, 0.0)

    assert ready == [pending[0], pending[1], pending[3]]
    assert all(t.status == "eligible" for t in ready)
    assert pending[2].status == "pending"


def test_eligible_now_respects_ledger(clock):
    ledger, tracker, selector = _selector(clock)
    ledger.create_job(1, "2", "[[1,2],[3]]")
    tracker.add(Task(1, 1))
    pending = [Task(2, 1), Task(3, 1)]

    assert selector.eligible_now(pending, 0.0) == [pending[0]]


def test_next_available_returns_immediately_when_ready(clock):
    ledger, _, selector = _selector(clock)
    ledger.create_job(1, "1", "[[1]]")
    pending = [Task(1, 1, submission_time=2.0)]

    assert selector.next_available(pending, 2.0) == (2.0, pending)


def test_next_available_advances_to_earlier_submission(clock):
    ledger, tracker, selector = _selector(clock)
    ledger.create_job(1, "1", "[[1]]")
    ledger.create_job(2, "1", "[[1]]")
    running = Task(1, 1)
    tracker.add(running)
    running.finish_time = 5.0
    pending = [Task(1, 2, submission_time=3.0)]

    time, ready = selector.next_available(pending, 0.0)

    assert time == 3.0
    assert ready == pending
    # Not finished yet at t=3.
    assert running in tracker


def test_next_available_advances_to_completion_that_unblocks(clock):
    ledger, tracker, selector = _selector(clock)
    ledger.create_job(1, "1", "[[1],[2]]")
    running = Task(1, 1)
    tracker.add(running)
    running.finish_time = 5.0
    pending = [Task(2, 1, submission_time=3.0)]

    time, ready = selector.next_available(pending, 0.0)

    assert time == 5.0
    assert ready == pending
    assert running not in tracker
    assert running.status == "finished"


def test_next_available_is_monotonic(clock):
    ledger, tracker, selector = _selector(clock)
    ledger.create_job(1, "1", "[[1],[2],[3]]")
    first = Task(1, 1)
    tracker.add(first)
    first.finish_time = 1.0
    pending = [Task(2, 1, submission_time=0.5), Task(3, 1, submission_time=4.0)]

    for start in (0.0, 0.25, 2.0, 10.0):
        time, _ = selector.next_available(pending, start)
        assert time >= start


def test_next_available_no_work_raises(clock):
    _, _, selector = _selector(clock)
    with pytest.raises(NoMoreWorkError):
        selector.next_available([], 0.0)


def test_next_available_drains_running_then_raises(clock):
    ledger, tracker, selector = _selector(clock)
    ledger.create_job(1, "1", "[[1]]")
    task = Task(1, 1)
    tracker.add(task)
    task.finish_time = 2.0

    with pytest.raises(NoMoreWorkError) as exc:
        selector.next_available([], 0.0)
    assert exc.value.time == 2.0
    assert len(tracker) == 0


def test_next_available_stalled_returns_empty(clock):
    ledger, tracker, selector = _selector(clock)
    ledger.create_job(1, "1", "[[1],[2]]")
    tracker.add(Task(1, 1))
    pending = [Task(2, 1)]

    assert selector.next_available(pending, 1.0) == (1.0, [])


def test_next_available_stalled_can_be_an_error(clock):
    ledger, tracker, selector = _selector(clock, stalled_is_error=True)
    ledger.create_job(1, "1", "[[1],[2]]")
    tracker.add(Task(1, 1))

    with pytest.raises(NoMoreWorkError):
        selector.next_available([Task(2, 1)], 1.0)


def test_eligible_now_skips_running_and_finished_tasks(clock):
    ledger, tracker, selector = _selector(clock)
    ledger.create_job(1, "3", "[[1,2,3]]")
    running = Task(1, 1)
    tracker.add(running)
    done = Task(2, 1, status=FINISHED)
    waiting = Task(3, 1)

    assert selector.eligible_now([running, done, waiting], 0.0) == [waiting]
    assert running.status == RUNNING
    assert done.status == FINISHED


def test_peek_does_not_release_or_mark(clock):
    ledger, tracker, selector = _selector(clock)
    ledger.create_job(1, "1", "[[1],[2]]")
    running = Task(1, 1)
    tracker.add(running)
    running.finish_time = 5.0
    pending = [Task(2, 1)]

    assert selector.peek_next_available(pending, 1.0) == (5.0, pending)
    assert running in tracker
    assert running.status == RUNNING
    assert ledger.running_tasks(1) == frozenset({1})
    assert pending[0].status == "pending"
    assert not ledger.can_run(1, 2)


def test_peek_agrees_with_next_available(clock):
    ledger, tracker, selector = _selector(clock)
    ledger.create_job(1, "2", "[[1,2],[3]]")
    first, second = Task(1, 1), Task(2, 1)
    tracker.add(first)
    tracker.add(second)
    first.finish_time = 2.0
    second.finish_time = 4.0
    pending = [Task(3, 1, submission_time=1.0)]

    peeked = selector.peek_next_available(pending, 0.0)
    assert peeked == (4.0, pending)
    assert len(tracker) == 2

    assert selector.next_available(pending, 0.0) == peeked
    assert len(tracker) == 0


def test_peek_drains_running_then_raises_without_releasing(clock):
    ledger, tracker, selector = _selector(clock)
    ledger.create_job(1, "1", "[[1]]")
    task = Task(1, 1)
    tracker.add(task)
    task.finish_time = 2.0

    with pytest.raises(NoMoreWorkError) as exc:
        selector.peek_next_available([], 0.0)
    assert exc.value.time == 2.0
    assert task in tracker


def test_peek_stalled_returns_empty(clock):
    ledger, tracker, selector = _selector(clock)
    ledger.create_job(1, "1", "[[1],[2]]")
    tracker.add(Task(1, 1))

    assert selector.peek_next_available([Task(2, 1)], 1.0) == (1.0, [])
