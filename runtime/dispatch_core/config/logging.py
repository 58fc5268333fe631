"""Logging helpers.

The scheduler logs one JSON object per record so dispatch decisions can be
replayed against the oracle's training log.
"""

from __future__ import annotations

import json
import logging
import logging.config
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import yaml

from dispatch_core.errors import ConfigError

_STRUCTURED_EXTRAS = ("job_id", "task_id", "resource_id", "event", "code", "action", "reward", "sim_time")


class JSONFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        base: dict[str, Any] = {
            "ts": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }

        for k in _STRUCTURED_EXTRAS:
            v = getattr(record, k, None)
            if v is not None:
                base[k] = v

        if record.exc_info:
            base["exc_info"] = self.formatException(record.exc_info)

        return json.dumps(base, ensure_ascii=True, sort_keys=True, default=str)


def load_logging_config(path: Path) -> dict[str, Any]:
    if not path.exists():
        raise ConfigError(f"Missing logging config file: {path}")
    raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    if not isinstance(raw, dict):
        raise ConfigError(f"Invalid logging config YAML root object: {path}")
    return raw


def apply_logging_config(path: Path) -> None:
    logging.config.dictConfig(load_logging_config(path))
