"""Workload document loader (YAML -> jobs, tasks and resources).

Jobs are registered with the constraint ledger only after every job in the
document has parsed, so a malformed definition aborts loading with nothing
registered.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from dispatch_core.config.settings import SchedulerConfig
from dispatch_core.errors import ConfigError, MalformedConstraintError
from dispatch_core.ledger.constraints import ConstraintLedger, parse_max_parallel, parse_parallel_groups
from dispatch_core.models import Job, Resource, Task
from dispatch_core.workload.schema_validator import WorkloadSchemaValidator

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Workload:
    name: str
    jobs: list[Job]
    tasks: list[Task]
    resources: list[Resource]


def load_yaml_document(path: Path) -> dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Failed to read workload YAML: {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"Invalid YAML root object in {path} (expected object)")
    return data


def build_workload(document: dict[str, Any], ledger: ConstraintLedger, *, validator: WorkloadSchemaValidator) -> Workload:
    validator.validate(document)

    parsed: list[tuple[int, int, list[frozenset[int]]]] = []
    seen_jobs: set[int] = set()
    for job_raw in document["jobs"]:
        job_id = job_raw["job_id"]
        if job_id in seen_jobs or ledger.has_job(job_id):
            raise MalformedConstraintError("duplicate job id", job_id=job_id)
        seen_jobs.add(job_id)
        limit = parse_max_parallel(job_raw["max_parallel_executable_tasks"], job_id=job_id)
        groups = parse_parallel_groups(job_raw["tasks_which_can_run_in_parallel"], job_id=job_id)
        parsed.append((job_id, limit, groups))

    tasks: list[Task] = []
    for job_raw in document["jobs"]:
        for task_raw in job_raw["tasks"]:
            tasks.append(
                Task(
                    task_id=task_raw["task_id"],
                    job_id=job_raw["job_id"],
                    submission_time=float(task_raw.get("submission_time", 0.0)),
                    length=int(task_raw.get("length", 0)),
                )
            )

    resources = [
        Resource(
            resource_id=r["resource_id"],
            mips=int(r.get("mips", 1000)),
            pes=int(r.get("pes", 1)),
            ram=int(r.get("ram", 0)),
            mobile=bool(r.get("mobile", False)),
        )
        for r in document["resources"]
    ]

    # Every constraint parsed above; registration cannot fail part-way now.
    jobs = [ledger.create_job(job_id, limit, [sorted(g) for g in groups]) for job_id, limit, groups in parsed]

    name = str(document.get("name", "workload"))
    logger.info(
        "workload_loaded jobs=%d tasks=%d resources=%d",
        len(jobs),
        len(tasks),
        len(resources),
        extra={"event": "workload_loaded"},
    )
    return Workload(name=name, jobs=jobs, tasks=tasks, resources=resources)


def load_workload(path: Path, ledger: ConstraintLedger, *, validator: WorkloadSchemaValidator | None = None) -> Workload:
    validator = validator or WorkloadSchemaValidator.load()
    return build_workload(load_yaml_document(path), ledger, validator=validator)


def load_configured_workload(path: Path, ledger: ConstraintLedger, config: SchedulerConfig) -> Workload:
    """Load a workload against the schema named by `workload.schema` in scheduler.yaml."""
    validator = WorkloadSchemaValidator.load(config.workload_schema_path)
    return load_workload(path, ledger, validator=validator)
