"""Process wiring: config files -> logging -> workload -> Scheduler.

Fails closed: any missing or invalid config, logging or workload file aborts
startup before a scheduler exists.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from dispatch_core.config.logging import apply_logging_config
from dispatch_core.config.settings import SchedulerConfig, default_config_paths, load_scheduler_config
from dispatch_core.ledger.constraints import ConstraintLedger
from dispatch_core.oracle.interfaces import DecisionOracle
from dispatch_core.scheduler.runner import Scheduler
from dispatch_core.utils import ManualClock, SimulationClock
from dispatch_core.workload.loader import Workload, load_configured_workload

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SchedulerComponents:
    config: SchedulerConfig
    workload: Workload
    scheduler: Scheduler


def build_components(
    workload_path: Path,
    *,
    clock: SimulationClock | None = None,
    oracle: DecisionOracle | None = None,
) -> SchedulerComponents:
    """Build a ready-to-run scheduler from the default (or env-overridden) config files.

    Without an oracle, the HTTP client configured under `oracle:` is used.
    """
    scheduler_cfg_path, logging_cfg_path = default_config_paths()
    config = load_scheduler_config(scheduler_cfg_path)

    apply_logging_config(logging_cfg_path)

    ledger = ConstraintLedger()
    workload = load_configured_workload(workload_path, ledger, config)
    scheduler = Scheduler.from_config(
        config,
        resources=workload.resources,
        clock=clock or ManualClock(),
        oracle=oracle,
        ledger=ledger,
    )
    logger.info(
        "scheduler_started",
        extra={"event": "scheduler_started", "sim_time": scheduler.state.clock.now()},
    )
    return SchedulerComponents(config=config, workload=workload, scheduler=scheduler)
