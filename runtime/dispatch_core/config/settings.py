"""Configuration loader for the scheduling core.

Rules:
- Fail closed when config is missing or invalid.
- Relative paths in scheduler.yaml are resolved relative to scheduler.yaml's directory.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from dispatch_core.errors import ConfigError


@dataclass(frozen=True)
class OracleConfig:
    base_url: str
    timeout_seconds: float


@dataclass(frozen=True)
class EncodingConfig:
    max_ready_tasks: int
    max_resources: int


@dataclass(frozen=True)
class SchedulerFlags:
    stalled_is_error: bool


@dataclass(frozen=True)
class SchedulerConfig:
    oracle: OracleConfig
    encoding: EncodingConfig
    flags: SchedulerFlags
    workload_schema_path: Path
    config_dir: Path


def _load_yaml(path: Path) -> dict[str, Any]:
    if not path.exists():
        raise ConfigError(f"Missing required config file: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise ConfigError(f"Failed to parse YAML: {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"Invalid YAML root object in config file: {path}")
    return data


def _resolve_path(base_dir: Path, raw: str) -> Path:
    p = Path(raw)
    if p.is_absolute():
        return p
    return (base_dir / p).resolve()


def _positive_int(raw: Any, name: str) -> int:
    try:
        value = int(raw)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"{name} must be an integer (got {raw!r})") from e
    if value <= 0:
        raise ConfigError(f"{name} must be positive (got {value})")
    return value


def load_scheduler_config(config_path: Path) -> SchedulerConfig:
    cfg_dir = config_path.parent.resolve()
    raw = _load_yaml(config_path)

    oracle_raw = raw.get("oracle", {}) or {}
    encoding_raw = raw.get("encoding", {}) or {}
    scheduler_raw = raw.get("scheduler", {}) or {}
    workload_raw = raw.get("workload", {}) or {}

    try:
        timeout = float(oracle_raw.get("timeout_seconds", 30.0))
    except (TypeError, ValueError) as e:
        raise ConfigError(f"oracle.timeout_seconds must be a number (got {oracle_raw.get('timeout_seconds')!r})") from e
    if timeout <= 0:
        raise ConfigError(f"oracle.timeout_seconds must be positive (got {timeout})")

    oracle = OracleConfig(
        base_url=str(oracle_raw.get("base_url", "http://127.0.0.1:5000")),
        timeout_seconds=timeout,
    )

    encoding = EncodingConfig(
        max_ready_tasks=_positive_int(encoding_raw.get("max_ready_tasks", 32), "encoding.max_ready_tasks"),
        max_resources=_positive_int(encoding_raw.get("max_resources", 16), "encoding.max_resources"),
    )

    flags = SchedulerFlags(stalled_is_error=bool(scheduler_raw.get("stalled_is_error", False)))

    schema_path = _resolve_path(cfg_dir, str(workload_raw.get("schema", "../schemas/workload.schema.yaml")))

    return SchedulerConfig(
        oracle=oracle,
        encoding=encoding,
        flags=flags,
        workload_schema_path=schema_path,
        config_dir=cfg_dir,
    )


def _env_path(name: str) -> Path | None:
    v = os.environ.get(name)
    if not v:
        return None
    return Path(v)


def default_config_paths() -> tuple[Path, Path]:
    # Default to paths relative to the working directory (runtime/).
    scheduler_path = _env_path("DISPATCH_CORE_CONFIG") or Path.cwd() / "config" / "scheduler.yaml"
    logging_path = _env_path("DISPATCH_CORE_LOGGING_CONFIG") or Path.cwd() / "config" / "logging.yaml"
    return scheduler_path, logging_path
