# Copyright (C) 2024 StageDesk Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""StageDesk Server - Main FastAPI application."""

import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from stagedesk_server import __version__
from stagedesk_server.api.errors import register_error_handlers
from stagedesk_server.config import settings
from stagedesk_server.database import init_db
from stagedesk_server.routers import announcements, artists, dashboard, events
from stagedesk_server.admin import views as admin_views

logger = logging.getLogger(__name__)


def _get_cors_origins() -> list[str]:
    raw = (settings.cors_origins or "*").strip()
    if raw == "*":
        return ["*"]
    return [o.strip() for o in raw.split(",") if o.strip()]


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    await init_db()
    if settings.storage_backend == "local":
        settings.media_path.mkdir(parents=True, exist_ok=True)
    logger.info("StageDesk Server started (storage=%s)", settings.storage_backend)
    yield
    # shutdown


app = FastAPI(
    title="StageDesk Server",
    description="Internal management API for artists, events and announcements",
    version=__version__,
    lifespan=lifespan,
    docs_url="/api/docs",
    redoc_url="/api/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=_get_cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_error_handlers(app)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log method, path, status, and duration for each request (no body)."""
    start = time.perf_counter()
    response = await call_next(request)
    duration_ms = (time.perf_counter() - start) * 1000
    logger.info("%s %s %s %.1fms", request.method, request.url.path, response.status_code, duration_ms)
    return response

# API v1
app.include_router(artists.router, prefix="/api/v1")
app.include_router(events.router, prefix="/api/v1")
app.include_router(announcements.router, prefix="/api/v1")
app.include_router(dashboard.router, prefix="/api/v1")
app.include_router(admin_views.router)

# Locally stored images
if settings.storage_backend == "local":
    app.mount(
        settings.media_url,
        StaticFiles(directory=str(settings.media_path), check_dir=False),
        name="media",
    )


@app.get("/")
async def root():
    """Health check / API info."""
    return {
        "name": "StageDesk Server",
        "version": __version__,
        "api": "/api/v1",
        "docs": "/api/docs",
    }


@app.get("/api/v1/health")
async def health():
    """Health check for load balancers."""
    return {"status": "ok"}


@app.get("/status")
async def status_check():
    """Plain liveness probe."""
    return {"status": "ok"}
