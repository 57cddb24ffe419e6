"""Main FastAPI application."""

import logging
import time
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text
from sqlalchemy.orm import Session

from . import __version__
from .api import items_router, versions_router, options_router
from .core.config import settings, ConfigurationError, Environment
from .core.logging_config import redact, setup_logging
from .database import engine, get_db, init_db, DATABASE_URL
from .exceptions import PostVersionError
from .middleware.exception_handler import post_version_exception_handler
from .middleware.request_context import RequestContextMiddleware
from .models import Item, SNAPSHOT_TYPE

# Setup logging first
setup_logging(log_level=settings.log_level, log_format=settings.log_format)
logger = logging.getLogger(__name__)


def _validate_database_connection() -> None:
    """Test that the database is reachable. Exits with a clear message on failure."""
    masked = redact(DATABASE_URL)
    logger.info(f"Connecting to database: {masked}")

    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        logger.info("Database connection verified")
    except Exception as e:
        if DATABASE_URL.startswith("postgresql"):
            logger.critical(
                "Cannot connect to PostgreSQL.\n"
                f"  DATABASE_URL: {masked}\n"
                "  Possible fixes:\n"
                "    1. Verify PostgreSQL is running: pg_isready -h <host> -p <port>\n"
                "    2. Check DATABASE_URL in .env or environment variables\n"
                f"  Error: {e}"
            )
        else:
            logger.critical(
                "SQLite database error.\n"
                f"  DATABASE_URL: {masked}\n"
                "  Check that the directory exists and is writable.\n"
                f"  Error: {e}"
            )
        raise SystemExit(1) from e


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup / shutdown lifecycle for the post-version API."""
    logger.info(f"Environment: {settings.environment.value}")
    try:
        settings.validate_production_config()
    except ConfigurationError as e:
        logger.critical(f"STARTUP BLOCKED: {e}")
        raise SystemExit(1) from e

    _validate_database_connection()
    init_db()

    if settings.environment == Environment.DEVELOPMENT and not settings.get_versioned_types():
        logger.warning(
            "VERSIONED_TYPES is empty: no item type is versioned until options are stored "
            "(PUT /api/options)."
        )

    yield  # App runs here


# Create FastAPI app
app = FastAPI(
    title="post-version API",
    description=(
        "Version control for content items: numbered versions, published and "
        "hidden snapshots, and an unreleased state for work in progress."
    ),
    version=__version__,
    lifespan=lifespan,
)

# Middleware stack (outermost first; CORS wraps request context).
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_cors_origins(),
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE"],
    allow_headers=["Content-Type", "X-Request-ID"],
)
app.add_middleware(RequestContextMiddleware)

# Register exception handlers
app.add_exception_handler(PostVersionError, post_version_exception_handler)

db_type = "PostgreSQL" if DATABASE_URL.startswith("postgresql") else "SQLite"
logger.info(
    "post-version API configured | env=%s | db=%s | versioned=%s",
    settings.environment.value,
    db_type,
    ",".join(settings.get_versioned_types()) or "-",
)

# Include routers
app.include_router(items_router)
app.include_router(versions_router)
app.include_router(options_router)


@app.get("/")
def root():
    """Root endpoint."""
    return {
        "name": "post-version API",
        "version": __version__,
        "status": "running"
    }


_startup_time = time.monotonic()


@app.get("/health")
def health_check(db: Session = Depends(get_db)):
    """Health check endpoint returning database status, uptime, and item count.

    Never raises; returns degraded status on DB failure so load balancers
    can still probe without receiving 5xx.
    """
    db_status = "ok"
    item_count = 0
    try:
        db.execute(text("SELECT 1"))
        item_count = db.query(Item).filter(Item.item_type != SNAPSHOT_TYPE).count()
    except Exception:
        logger.exception("Health check database probe failed")
        db_status = "error"

    return {
        "status": "healthy" if db_status == "ok" else "degraded",
        "db": db_status,
        "uptime_seconds": round(time.monotonic() - _startup_time),
        "version": __version__,
        "item_count": item_count,
    }
