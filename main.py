"""
POSTURECOACH Backend API
Squat and desk posture feedback from body landmarks

FastAPI application entry point. Video analysis and live frames are
processed on worker thread pools so the event loop stays responsive.
"""

import logging
import sys
import time
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse
from fastapi.staticfiles import StaticFiles
from starlette.middleware.base import BaseHTTPMiddleware

from core.config import settings
from shared.utils import LOG_DATE_FORMAT, LOG_FORMAT, level_from_name, setup_logger

LOG_LEVEL = level_from_name(settings.LOG_LEVEL)

# ============================================
# Configure Root Logger First
# ============================================
logging.basicConfig(
    level=LOG_LEVEL,
    format=LOG_FORMAT,
    datefmt=LOG_DATE_FORMAT,
    handlers=[logging.StreamHandler(sys.stdout)]
)

from core.threading import frame_worker_pool, video_worker_pool
from posture_service.models import get_pose_detector, release_pose_detector
from posture_service.router import router as posture_router

logger = setup_logger("posturecoach.main", level=LOG_LEVEL)
request_logger = setup_logger("posturecoach.requests", level=LOG_LEVEL)

# Polled by monitors; logged at debug only
QUIET_PATHS = {"/api/health"}


# ============================================
# Request Logging Middleware
# ============================================

def status_emoji(status_code: int) -> str:
    if status_code < 300:
        return "✅"
    if status_code < 400:
        return "↪️"
    if status_code < 500:
        return "⚠️"
    return "❌"


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log each HTTP request with its status and duration."""

    async def dispatch(self, request: Request, call_next):
        started = time.perf_counter()
        path = request.url.path
        log = request_logger.debug if path in QUIET_PATHS else request_logger.info

        try:
            response = await call_next(request)
        except Exception as e:
            elapsed_ms = (time.perf_counter() - started) * 1000
            request_logger.exception(
                f"💥 {request.method} {path} → {type(e).__name__}: {e} ({elapsed_ms:.1f}ms)"
            )
            raise

        elapsed_ms = (time.perf_counter() - started) * 1000
        response.headers["X-Process-Time-Ms"] = f"{elapsed_ms:.1f}"

        client_ip = request.client.host if request.client else "unknown"
        log(
            f"{status_emoji(response.status_code)} {request.method} {path} → "
            f"{response.status_code} ({elapsed_ms:.1f}ms) from {client_ip}"
        )
        return response


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager for startup/shutdown."""
    # ===== STARTUP =====
    logger.info(f"🚀 {settings.APP_NAME} API starting up...")
    logger.info(f"🧍 Pose detector backend: {settings.POSE_DETECTOR}")
    logger.info("🔌 Real-time analysis socket at /api/ws/analyze")

    yield

    # ===== SHUTDOWN =====
    logger.info(f"👋 {settings.APP_NAME} API shutting down...")

    release_pose_detector()
    video_worker_pool.shutdown(wait=True)
    frame_worker_pool.shutdown(wait=True)

    logger.info("✅ Shutdown complete")


app = FastAPI(
    title=f"{settings.APP_NAME} API",
    description="Squat and desk posture analysis",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)
app.add_middleware(RequestLoggingMiddleware)

app.include_router(posture_router, prefix="/api", tags=["Posture Service"])


@app.get("/api/stats")
async def get_stats():
    """Worker pool and detector statistics."""
    return {
        "pose_detector": get_pose_detector().name(),
        "video_pool": video_worker_pool.get_stats(),
        "frame_pool": frame_worker_pool.get_stats(),
    }


# Serve the built client in production
if settings.SERVE_CLIENT_BUILD:
    client_build = (Path(__file__).parent / settings.CLIENT_BUILD_DIR).resolve()
    app.mount("/static", StaticFiles(directory=str(client_build / "static"), check_dir=False), name="static")

    @app.get("/{full_path:path}", include_in_schema=False)
    async def serve_client(full_path: str):
        """Client-side routes all resolve to index.html."""
        return FileResponse(client_build / "index.html")


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("main:app", host="0.0.0.0", port=5000, reload=settings.DEBUG)
