"""Small utility helpers used across the scheduling core."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Protocol

# Sentinel for "no known future completion".
INF = math.inf


class SimulationClock(Protocol):
    def now(self) -> float:
        ...


@dataclass
class ManualClock:
    """Settable clock for tests and offline tooling. The core never advances it."""

    time: float = 0.0

    def now(self) -> float:
        return self.time

    def advance_to(self, time: float) -> None:
        if time < self.time:
            raise ValueError(f"clock cannot move backwards ({self.time} -> {time})")
        self.time = time


def is_strict_int(v: Any) -> bool:
    # bool is an int subclass; True must not pass as task id 1.
    return isinstance(v, int) and not isinstance(v, bool)
