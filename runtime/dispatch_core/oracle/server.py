"""FastAPI gateway serving a DecisionOracle over the HTTP/JSON wire contract.

The gateway carries no policy of its own: the policy process constructs its
DecisionOracle implementation and hands it to `create_oracle_app`.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import Body, FastAPI, HTTPException
from fastapi.responses import JSONResponse

from dispatch_core.errors import DispatchCoreError, OracleUnavailableError
from dispatch_core.oracle.interfaces import DecisionOracle
from dispatch_core.utils import is_strict_int

logger = logging.getLogger(__name__)


def _error_payload(err: Exception) -> dict[str, Any]:
    if isinstance(err, OracleUnavailableError):
        return {"error": "ORACLE_UNAVAILABLE", "operation": err.operation, "message": str(err)}
    if isinstance(err, DispatchCoreError):
        return {"error": "SCHEDULING_ERROR", "type": type(err).__name__, "message": str(err)}
    return {"error": "INTERNAL", "message": str(err)}


def _require_task_id(body: dict[str, Any]) -> int:
    task_id = body.get("task_id")
    if not is_strict_int(task_id):
        raise HTTPException(status_code=400, detail="'task_id' must be an integer")
    return task_id


def _require_state(body: dict[str, Any]) -> list[int]:
    state = body.get("state")
    if not isinstance(state, list) or not all(is_strict_int(v) for v in state):
        raise HTTPException(status_code=400, detail="'state' must be a list of integers")
    return state


def create_oracle_app(oracle: DecisionOracle) -> FastAPI:
    app = FastAPI(title="Dispatch Decision Oracle Gateway", version="0.1.0")
    app.state.oracle = oracle

    @app.exception_handler(OracleUnavailableError)
    def _oracle_unavailable_handler(_req, exc: OracleUnavailableError):
        return JSONResponse(status_code=503, content=_error_payload(exc))

    @app.exception_handler(DispatchCoreError)
    def _core_error_handler(_req, exc: DispatchCoreError):
        return JSONResponse(status_code=400, content=_error_payload(exc))

    @app.exception_handler(Exception)
    def _unhandled_handler(_req, exc: Exception):
        logger.exception("unhandled_error", extra={"event": "unhandled_error"})
        return JSONResponse(status_code=500, content=_error_payload(exc))

    @app.get("/health")
    def health() -> dict[str, Any]:
        return {"status": "ok", "oracle": type(app.state.oracle).__name__}

    @app.post("/decide")
    def decide(body: dict[str, Any] = Body(...)) -> dict[str, Any]:
        context = body.get("context")
        if context is not None and not isinstance(context, dict):
            raise HTTPException(status_code=400, detail="'context' must be an object or null")
        action = app.state.oracle.decide(context, _require_state(body))
        return {"action": int(action)}

    @app.post("/reward")
    def reward(body: dict[str, Any] = Body(...)) -> dict[str, Any]:
        value = body.get("reward")
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise HTTPException(status_code=400, detail="'reward' must be a number")
        app.state.oracle.report_reward(_require_task_id(body), float(value))
        return {"status": "ok"}

    @app.post("/retrain")
    def retrain(body: dict[str, Any] = Body(...)) -> dict[str, Any]:
        app.state.oracle.retrain(_require_task_id(body), _require_state(body))
        return {"status": "ok"}

    return app
