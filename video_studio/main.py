"""
FastAPI application entry point.

Run with: uvicorn video_studio.main:app --reload
"""

from contextlib import asynccontextmanager
import uuid

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from video_studio import __version__
from video_studio.api.dependencies import get_shared_orchestrator
from video_studio.api.exception_handlers import setup_exception_handlers
from video_studio.api.routes import backends, conversation, health
from video_studio.core.config import settings
from video_studio.core.logging import bind_context, clear_context, configure_logging, get_logger

# Configure logging before anything else
configure_logging()
log = get_logger(__name__)


# =============================================================================
# Correlation ID Middleware
# =============================================================================


class CorrelationIDMiddleware(BaseHTTPMiddleware):
    """
    Middleware that adds a unique correlation ID to each request.

    - Generates a UUID4 request_id for each incoming request
    - Binds it to structlog context for all logs in that request
    - Adds X-Request-ID header to responses
    """

    async def dispatch(self, request: Request, call_next):
        """Process request and add correlation ID."""
        request_id = str(uuid.uuid4())
        bind_context(request_id=request_id)

        try:
            response = await call_next(request)
            response.headers["X-Request-ID"] = request_id
            return response
        finally:
            clear_context()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    Builds the shared orchestrator at startup so configuration errors fail
    fast, and lets background turns finish on shutdown.
    """
    log.info("application_starting", debug=settings.debug)

    orchestrator = get_shared_orchestrator()

    log.info(
        "application_started",
        backend_profile=orchestrator.backend_profile,
        backends=[p.id for p in orchestrator.backend_profiles()],
    )

    yield

    log.info("application_shutting_down", in_flight=orchestrator.in_flight)
    await orchestrator.wait_idle()


app = FastAPI(
    title="Video Studio",
    description="Chat-driven video generation assistant",
    version=__version__,
    lifespan=lifespan,
    debug=settings.debug,
)

# CORS middleware for development
if settings.debug:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

app.add_middleware(CorrelationIDMiddleware)

setup_exception_handlers(app)

app.include_router(health.router, tags=["system"])
app.include_router(conversation.router)
app.include_router(backends.router)


@app.get("/")
async def root():
    """Root endpoint with basic info."""
    return {"name": "Video Studio", "version": __version__, "status": "running"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "video_studio.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )
