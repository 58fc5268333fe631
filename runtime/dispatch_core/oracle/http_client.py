"""HTTP/JSON client for a remote decision oracle."""

from __future__ import annotations

import logging
from typing import Any, Sequence

import httpx

from dispatch_core.config.settings import OracleConfig
from dispatch_core.errors import OracleResponseError, OracleUnavailableError
from dispatch_core.oracle.interfaces import DecisionOracle
from dispatch_core.utils import is_strict_int

logger = logging.getLogger(__name__)


class HttpOracleClient(DecisionOracle):
    """Speaks the gateway contract served by `oracle.server.create_oracle_app`.

    `client` may be any `httpx.Client` (including FastAPI's TestClient).
    """

    def __init__(self, client: httpx.Client):
        self._client = client

    @classmethod
    def from_config(cls, config: OracleConfig) -> "HttpOracleClient":
        return cls(httpx.Client(base_url=config.base_url, timeout=config.timeout_seconds))

    def close(self) -> None:
        self._client.close()

    def _post(self, operation: str, path: str, payload: dict[str, Any]) -> dict[str, Any]:
        try:
            resp = self._client.post(path, json=payload)
            resp.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise OracleUnavailableError(
                f"HTTP {e.response.status_code}", operation=operation, details=e.response.text
            ) from e
        except httpx.HTTPError as e:
            raise OracleUnavailableError(f"{type(e).__name__}: {e}", operation=operation) from e

        try:
            body = resp.json()
        except ValueError as e:
            raise OracleResponseError("response is not JSON", operation=operation, details=resp.text) from e
        if not isinstance(body, dict):
            raise OracleResponseError("response root must be an object", operation=operation, details=body)
        return body

    def decide(self, context: dict[str, Any] | None, state: Sequence[int]) -> int:
        body = self._post("decide", "/decide", {"context": context, "state": list(state)})
        action = body.get("action")
        if not is_strict_int(action):
            raise OracleResponseError("decide response has no integer 'action'", operation="decide", details=body)
        return action

    def report_reward(self, task_id: int, reward: float) -> None:
        self._post("report_reward", "/reward", {"task_id": task_id, "reward": reward})

    def retrain(self, previous_task_id: int, state: Sequence[int]) -> None:
        self._post("retrain", "/retrain", {"task_id": previous_task_id, "state": list(state)})
