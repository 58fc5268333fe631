"""First-idle resource placement.

Resources are scanned in registration order. Claiming a resource (idle -> busy)
and binding the task happen in one step, so a resource is never observed idle
while bound to a task. Mobile resources are never placement targets.
"""

from __future__ import annotations

import logging
from typing import Iterable

from dispatch_core.errors import DispatchCoreError
from dispatch_core.models import BUSY, IDLE, Resource, Task

logger = logging.getLogger(__name__)


class ResourcePlacer:
    def __init__(self, resources: Iterable[Resource]):
        self._resources = list(resources)
        ids = [r.resource_id for r in self._resources]
        if len(ids) != len(set(ids)):
            raise DispatchCoreError(f"Duplicate resource ids: {ids}")
        self._by_id = {r.resource_id: r for r in self._resources}
        # Consumed (and drained) by the simulation engine.
        self.scheduled: list[Task] = []

    @property
    def resources(self) -> list[Resource]:
        return list(self._resources)

    def placeable_resources(self) -> list[Resource]:
        return [r for r in self._resources if not r.mobile]

    def get(self, resource_id: int) -> Resource:
        return self._by_id[resource_id]

    def place_first_idle(self, task: Task) -> Resource | None:
        for resource in self.placeable_resources():
            if resource.state == IDLE:
                resource.state = BUSY
                resource.task = task
                task.resource_id = resource.resource_id
                self.scheduled.append(task)
                logger.debug(
                    "resource_claimed",
                    extra={"event": "resource_claimed", "task_id": task.task_id, "resource_id": resource.resource_id},
                )
                return resource
        return None

    def release(self, task: Task) -> Resource | None:
        """Completion path: the busy -> idle transition is what enables future placement."""
        if task.resource_id is None:
            return None
        resource = self._by_id.get(task.resource_id)
        if resource is None or resource.task is not task:
            return None
        resource.task = None
        resource.state = IDLE
        return resource

    def take_scheduled(self) -> list[Task]:
        out, self.scheduled = self.scheduled, []
        return out
