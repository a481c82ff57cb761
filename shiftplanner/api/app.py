"""FastAPI application exposing planning generation over HTTP."""

from __future__ import annotations

import os
from typing import Any, Dict

from fastapi import Body, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from shiftplanner.config import PlannerConfig, load_config
from shiftplanner.engine.orchestrator import build_week_planning
from shiftplanner.errors import PlanningError, PlanningValidationError
from shiftplanner.services.validation import parse_planning_request

SERVICE_NAME = "shiftplanner"
CONFIG_ENV = "SHIFTPLANNER_CONFIG"


def _failure(status_code: int, message: str, **extra: Any) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "message": message, **extra})


def create_app(cfg: PlannerConfig | None = None) -> FastAPI:
    """
    Build the HTTP application.

    Args:
        cfg: PlannerConfig (default: loaded from $SHIFTPLANNER_CONFIG, else built-in defaults)

    Returns:
        FastAPI instance
    """
    if cfg is None:
        cfg = load_config(os.environ.get(CONFIG_ENV) or None)

    app = FastAPI(title="Shift Planner API", version="0.1")
    app.state.config = cfg

    @app.exception_handler(PlanningValidationError)
    async def _invalid_request(_: Request, exc: PlanningValidationError) -> JSONResponse:
        print(f"[WARN] Rejected planning request: {len(exc.issues)} issue(s)")
        return _failure(400, exc.message, issues=[i.to_dict() for i in exc.issues])

    @app.exception_handler(RequestValidationError)
    async def _unreadable_body(_: Request, exc: RequestValidationError) -> JSONResponse:
        issues = [
            {
                "field": ".".join(str(p) for p in err.get("loc", ()) if p != "body") or "body",
                "message": err.get("msg", "Invalid request body"),
                "code": err.get("type", "invalid_body"),
            }
            for err in exc.errors()
        ]
        return _failure(400, "Invalid planning generation parameters", issues=issues)

    @app.exception_handler(PlanningError)
    async def _planning_failed(_: Request, exc: PlanningError) -> JSONResponse:
        print(f"[ERROR] Planning generation failed: {exc}")
        extra = {"error": str(exc)} if app.state.config.debug else {}
        return _failure(500, "Planning generation failed", **extra)

    @app.exception_handler(Exception)
    async def _unexpected(_: Request, exc: Exception) -> JSONResponse:
        print(f"[ERROR] Unexpected error during planning generation: {exc!r}")
        extra = {"error": str(exc)} if app.state.config.debug else {}
        return _failure(500, "Internal server error", **extra)

    @app.get("/")
    def health() -> Dict[str, Any]:
        return {"ok": True, "service": SERVICE_NAME}

    @app.post("/schedules/auto-generate")
    def auto_generate(body: Any = Body(default=None)) -> Dict[str, Any]:
        config: PlannerConfig = app.state.config
        request = parse_planning_request(body, config)
        result = build_week_planning(request, config)
        return result.to_response()

    return app


app = create_app()
