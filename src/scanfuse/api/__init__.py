"""FastAPI application factory for scanfuse."""

from __future__ import annotations

import logging
import os
from pathlib import Path

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from scanfuse.api.routers import health, report
from scanfuse.defaults import DEFAULT_ARTIFACTS_DIR, SCANFUSE_VERSION
from scanfuse.observability import add_observability_middleware

log = logging.getLogger("scanfuse.api")


def create_app(artifacts_dir: str | Path = "") -> FastAPI:
    """Build and return a configured FastAPI application."""
    app = FastAPI(
        title="scanfuse",
        description="Security scan aggregation and scoring",
        version=SCANFUSE_VERSION,
    )
    app.state.artifacts_dir = str(artifacts_dir) if artifacts_dir else os.environ.get(
        "SCANFUSE_ARTIFACTS_DIR", DEFAULT_ARTIFACTS_DIR
    )

    # ---------------------------------------------------------------
    # Exception handlers: {"error": "..."} bodies
    # ---------------------------------------------------------------

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.detail},
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        if errors:
            first = errors[0]
            loc = ".".join(str(l) for l in first.get("loc", []))
            msg = first.get("msg", "Invalid input")
            detail = f"{loc}: {msg}" if loc else msg
        else:
            detail = "Invalid JSON body"
        return JSONResponse(
            status_code=400,
            content={"error": detail},
        )

    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception):
        log.exception("Unhandled exception on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=500,
            content={"error": str(exc)},
        )

    add_observability_middleware(app)

    app.include_router(health.router)
    app.include_router(report.router)

    return app
