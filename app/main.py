"""FastAPI entrypoint for the code assessment runner."""

from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

import os
import re
import uuid
import logging
from datetime import datetime, timezone
from time import perf_counter
from typing import Any, Dict

from app.Core.config import get_settings
from app.features.compile.endpoints import router as compile_router
from app.features.grading.endpoints import router as grading_router
from app.features.judge0.endpoints import router as judge0_router

_settings = get_settings()
logging.basicConfig(
    level=logging.DEBUG if _settings.debug else logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(title=_settings.app_name)
_START_TIME = datetime.now(timezone.utc)


# ------------------------
# CORS Setup
# ------------------------
def _split_env_csv(name: str, default: str = ""):
    raw = os.getenv(name, default)
    return [o.strip().rstrip("/") for o in raw.split(",") if o.strip()]


_FRONTEND_ORIGINS = _split_env_csv(
    "ALLOW_ORIGINS",
    "http://localhost:5173,http://localhost:3000,http://127.0.0.1:5173,http://127.0.0.1:3000",
)

_CORS_ORIGIN_REGEX = re.compile(r"https?://(localhost|127\.0\.0\.1)(:\d+)?", re.I)

app.add_middleware(
    CORSMiddleware,
    allow_origins=_FRONTEND_ORIGINS,
    allow_origin_regex=_CORS_ORIGIN_REGEX.pattern,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ------------------------
# Custom Middlewares
# ------------------------
@app.middleware("http")
async def request_id_middleware(request: Request, call_next):
    incoming = request.headers.get("X-Request-Id") or request.headers.get("X-Request-ID")
    req_id = incoming or str(uuid.uuid4())
    request.state.request_id = req_id
    logger = logging.getLogger("request")
    logger.info("request.start", extra={"request_id": req_id, "path": request.url.path, "method": request.method})
    response = await call_next(request)
    response.headers["X-Request-Id"] = req_id
    logger.info("request.end", extra={"request_id": req_id, "path": request.url.path, "status_code": response.status_code})
    return response


@app.middleware("http")
async def timing_middleware(request: Request, call_next):
    t0 = perf_counter()
    resp = await call_next(request)
    dt = int((perf_counter() - t0) * 1000)
    logging.getLogger("timing").info("%s %s %dms %s", request.method, request.url.path, dt, resp.status_code)
    return resp


# ------------------------
# Routers
# ------------------------
app.include_router(compile_router)
app.include_router(grading_router)
app.include_router(judge0_router)


# ------------------------
# Meta endpoints
# ------------------------
@app.get("/", tags=["meta"], summary="API Root")
async def root():
    return {
        "name": _settings.app_name,
        "status": "ok",
        "docs": "/docs",
        "health": "/healthz"
    }


@app.get("/healthz", tags=["meta"], summary="Liveness / readiness probe")
async def healthz() -> Dict[str, Any]:
    now = datetime.now(timezone.utc)
    uptime_seconds = (now - _START_TIME).total_seconds()
    judge0_ready = bool(getattr(_settings, "judge0_api_url", None))
    store_ready = _settings.question_store == "memory" or bool(_settings.supabase_url and _settings.supabase_key)

    return {
        "status": "ok" if judge0_ready and store_ready else "degraded",
        "time_utc": now.isoformat(),
        "uptime_seconds": round(uptime_seconds, 2),
        "version": os.getenv("APP_VERSION", "dev"),
        "environment": "debug" if _settings.debug else "prod",
        "components": {
            "judge0": "configured" if judge0_ready else "missing-config",
            "question_store": _settings.question_store if store_ready else "missing-config",
        },
        "limits": {
            "poll_interval_s": _settings.judge0_poll_interval_s,
            "max_poll_attempts": _settings.judge0_max_poll_attempts,
            "case_concurrency": _settings.judge0_case_concurrency,
            "per_case_timeout_s": _settings.per_case_timeout_s,
            "request_deadline_s": _settings.compile_request_deadline_s,
        },
    }
