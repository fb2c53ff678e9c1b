"""FastAPI entrypoint for the no-due clearance backend."""

from __future__ import annotations

import logging
import time
import uuid
from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from nodex.common.handlers import setup_error_handlers
from nodex.core.config import get_settings
from nodex.features.notifications.endpoints import router as notifications_router
from nodex.features.workflow.endpoints import router as applications_router

_settings = get_settings()
logging.basicConfig(
    level=getattr(logging, _settings.log_level, logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(title=_settings.app_name, debug=_settings.debug)
_START_TIME = datetime.now(timezone.utc)


# ------------------------
# CORS Setup
# ------------------------
app.add_middleware(
    CORSMiddleware,
    allow_origins=_settings.allow_origins,
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
    t0 = time.perf_counter()
    response = await call_next(request)
    response.headers["X-Request-Id"] = req_id
    logger.info(
        "%s %s %dms %s request_id=%s",
        request.method,
        request.url.path,
        int((time.perf_counter() - t0) * 1000),
        response.status_code,
        req_id,
    )
    return response


setup_error_handlers(app)

# ------------------------
# Routers
# ------------------------
app.include_router(applications_router)
app.include_router(notifications_router)


# ------------------------
# Meta endpoints
# ------------------------
@app.get("/", tags=["meta"], summary="API Root")
async def root():
    return {
        "name": _settings.app_name,
        "status": "ok",
        "docs": "/docs",
        "health": "/healthz",
    }


@app.get("/healthz", tags=["meta"], summary="Liveness probe")
async def healthz() -> Dict[str, Any]:
    now = datetime.now(timezone.utc)
    return {
        "status": "ok",
        "time": now.isoformat(),
        "uptime_seconds": round((now - _START_TIME).total_seconds(), 1),
        "routes": len(app.routes),
    }
