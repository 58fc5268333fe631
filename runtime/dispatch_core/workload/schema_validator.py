"""JSON Schema validation for workload documents.

Schemas are authored as YAML but are valid JSON Schema Draft 2020-12
documents. Validation errors are surfaced with stable JSON Pointer-like paths.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Iterable

import yaml
from jsonschema import Draft202012Validator, FormatChecker
from jsonschema.exceptions import SchemaError

from dispatch_core.errors import ConfigError, SchemaViolation, WorkloadValidationError

DEFAULT_SCHEMA_PATH = Path(__file__).resolve().parents[2] / "schemas" / "workload.schema.yaml"


def _escape_json_pointer_token(token: str) -> str:
    # RFC 6901 escaping.
    return token.replace("~", "~0").replace("/", "~1")


def _json_pointer(path: Iterable[Any]) -> str:
    parts: list[str] = []
    for p in path:
        if isinstance(p, int):
            parts.append(str(p))
        else:
            parts.append(_escape_json_pointer_token(str(p)))
    return "/" + "/".join(parts) if parts else "/"


class WorkloadSchemaValidator:
    """Validates workload documents against one canonical schema."""

    kind = "Workload"

    def __init__(self, schema: dict[str, Any], source_path: Path | None = None):
        try:
            Draft202012Validator.check_schema(schema)
        except SchemaError as e:
            raise ConfigError(f"Invalid workload schema {source_path}: {e.message}") from e
        self.source_path = source_path
        self._validator = Draft202012Validator(schema, format_checker=FormatChecker())

    @classmethod
    def load(cls, schema_path: Path = DEFAULT_SCHEMA_PATH) -> "WorkloadSchemaValidator":
        schema_path = schema_path.resolve()
        if not schema_path.exists():
            raise ConfigError(f"Workload schema not found: {schema_path}")
        try:
            raw = yaml.safe_load(schema_path.read_text(encoding="utf-8"))
        except yaml.YAMLError as e:
            raise ConfigError(f"Failed to parse YAML: {schema_path}: {e}") from e
        if not isinstance(raw, dict):
            raise ConfigError(f"Expected YAML object at root: {schema_path}")
        return cls(raw, source_path=schema_path)

    def validate(self, document: Any) -> None:
        violations = [
            SchemaViolation(path=_json_pointer(err.absolute_path), message=err.message)
            for err in self._validator.iter_errors(document)
        ]
        if violations:
            # Stable order: helps tests and makes errors easier to scan.
            violations.sort(key=lambda v: (v.path, v.message))
            raise WorkloadValidationError(kind=self.kind, violations=violations)
