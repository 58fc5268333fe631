#!/usr/bin/env python3
from __future__ import annotations

import os
import sys
from pathlib import Path


def _repo_root() -> Path:
    return Path(__file__).resolve().parents[2]


def main(argv: list[str]) -> int:
    repo = _repo_root()
    sys.path.insert(0, str(repo / "runtime"))

    from dispatch_core.config.settings import load_scheduler_config
    from dispatch_core.errors import DispatchCoreError, WorkloadValidationError
    from dispatch_core.ledger.constraints import ConstraintLedger
    from dispatch_core.workload.loader import load_configured_workload

    path = Path(argv[1]) if len(argv) > 1 else repo / "runtime" / "workloads" / "sample.workload.yaml"
    config_path = Path(os.environ.get("DISPATCH_CORE_CONFIG") or repo / "runtime" / "config" / "scheduler.yaml")
    ledger = ConstraintLedger()
    try:
        config = load_scheduler_config(config_path)
        workload = load_configured_workload(path, ledger, config)
    except WorkloadValidationError as e:
        print("workload_validation=FAIL")
        for v in e.violations:
            print(f"violation path={v.path} message={v.message}")
        return 1
    except DispatchCoreError as e:
        print("workload_validation=FAIL")
        print(f"reason={e}")
        return 1

    print(f"workload={workload.name} jobs={len(workload.jobs)} tasks={len(workload.tasks)} resources={len(workload.resources)}")
    for job in workload.jobs:
        groups = [sorted(g) for g in job.parallel_groups]
        print(f"job={job.job_id} max_parallel={job.max_parallel} parallel_groups={groups}")
    placeable = sum(1 for r in workload.resources if not r.mobile)
    print(f"placeable_resources={placeable}")
    print("workload_validation=PASS")
    return 0


if __name__ == "__main__":
    raise SystemExit(main(sys.argv))
