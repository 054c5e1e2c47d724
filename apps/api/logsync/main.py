"""
LogSync - FastAPI Application

HTTP surface for folder and upload ingestion.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi.errors import RateLimitExceeded

from . import __version__
from .core.config import settings
from .core.logging import setup_logging, get_logger
from .core.rate_limit import limiter, rate_limit_exceeded_handler
from .parsers.registry import get_default_registry
from .routes import health_router, ingest_router

# Setup logging
setup_logging(settings.log_level)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    logger.info("Starting LogSync...")
    logger.info(f"Rate limiting enabled: {settings.rate_limit_enabled}")
    logger.info(f"Loaded {len(get_default_registry())} log formats")

    yield

    logger.info("Shutdown complete")


# Create FastAPI app
app = FastAPI(
    title="LogSync",
    description="Log ingestion with automatic format detection and archive support",
    version=__version__,
    lifespan=lifespan,
)

# Add rate limiter to app state
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)

# Parse CORS origins from settings
cors_origins = [origin.strip() for origin in settings.cors_origins.split(",") if origin.strip()]

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
    expose_headers=["X-RateLimit-Limit", "X-RateLimit-Remaining", "Retry-After"],
    max_age=3600,
)

app.include_router(health_router)
app.include_router(ingest_router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "logsync.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=True,
        timeout_keep_alive=65,
    )
