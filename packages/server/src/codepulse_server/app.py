"""HTTP surface for the review and fix pipelines.

Every response uses one envelope:
    {"success": true,  "data": ..., "timestamp": <ms>}
    {"success": false, "error": "...", "timestamp": <ms>}

Handlers are plain ``def`` functions, so FastAPI runs each request on its
worker thread pool and model/search calls block only that request.
"""

from __future__ import annotations

import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from codepulse_core.errors import CodePulseError
from codepulse_core.fixes.pipeline import FixRequest
from codepulse_core.models import FixIssue, now_ms
from codepulse_server.schemas import FixRequestIn, ReviewRequest
from codepulse_server.services import Services

logger = logging.getLogger(__name__)


def _ok(data) -> dict:
    return {"success": True, "data": data, "timestamp": now_ms()}


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "error": message, "timestamp": now_ms()},
    )


def create_app(services: Services) -> FastAPI:
    started = time.time()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        services.cache.start()
        try:
            yield
        finally:
            services.cache.stop()

    app = FastAPI(title="CodePulse", lifespan=lifespan)
    app.state.services = services

    @app.exception_handler(CodePulseError)
    async def _codepulse_error(request: Request, exc: CodePulseError):
        logger.warning("%s %s failed: %s: %s", request.method, request.url.path, type(exc).__name__, exc)
        return _error(exc.status_code, str(exc))

    @app.exception_handler(RequestValidationError)
    async def _request_invalid(request: Request, exc: RequestValidationError):
        fields = ", ".join(".".join(str(p) for p in err["loc"][1:]) or "body" for err in exc.errors())
        return _error(400, f"Invalid request payload: {fields}")

    @app.exception_handler(StarletteHTTPException)
    async def _http_error(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 404:
            return _error(404, "Not found")
        return _error(exc.status_code, str(exc.detail))

    @app.exception_handler(Exception)
    async def _unhandled(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return _error(500, "Internal server error")

    @app.middleware("http")
    async def _log_requests(request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        logger.info(
            "%s %s - %d [%dms]",
            request.method,
            request.url.path,
            response.status_code,
            (time.perf_counter() - start) * 1000,
        )
        return response

    @app.post("/api/review")
    def review(body: ReviewRequest):
        result = services.engine.review(body.diff, language=body.language, context=body.context)
        logger.info("Review completed: %d issue(s), cached: %s", len(result.issues), result.cached)
        return _ok(result.to_dict())

    @app.post("/api/fix")
    def fix(body: FixRequestIn):
        code_fix = services.pipeline.run(
            FixRequest(
                token=body.token,
                owner=body.owner,
                repo=body.repo,
                file_path=body.file_path,
                original_code=body.original_code,
                issues=[FixIssue(description=i.description, suggestion=i.suggestion, line=i.line) for i in body.issues],
            )
        )
        return _ok(code_fix.to_dict())

    @app.get("/api/cache-stats")
    def cache_stats():
        return _ok(services.cache.stats().to_dict())

    @app.get("/api/metrics")
    def metrics():
        return _ok(services.accountant.snapshot().to_dict())

    @app.get("/api/health")
    def health():
        return _ok(
            {
                "status": "healthy",
                "uptimeMs": int((time.time() - started) * 1000),
                "cache": services.cache.stats().to_dict(),
                "metrics": services.accountant.snapshot().to_dict(),
            }
        )

    return app
