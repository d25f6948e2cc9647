"""
Client Lifecycle Engine - FastAPI Application Entry Point

Coaching platform automation core: achievement evaluation, the timed
onboarding workflow (due sweep + manual trigger) and reviewed card release.
Every entry point is an HTTP-triggered function accepting and returning JSON.

Serverless deployment:
  - No threading (synchronous DB init on cold start)
  - The due sweep is invoked by an external cron trigger
"""

import logging
import sys
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from lifecycle_engine.config import settings
from lifecycle_engine.database import init_db, SessionLocal

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(levelname)-7s | %(name)s | %(message)s",
    stream=sys.stdout,
)
logger = logging.getLogger("lifecycle_engine")

# Track DB readiness
_db_ready = False


def _run_seed_if_empty():
    """Seed the achievement catalog if not already present."""
    from lifecycle_engine.models import Achievement
    from lifecycle_engine.seed_data import seed_achievements

    db = SessionLocal()
    try:
        count = db.query(Achievement).count()
        if count == 0:
            logger.info("No achievements found. Seeding catalog...")
            seed_achievements(db)
        else:
            logger.info(f"Database has {count} achievements. Skipping seed.")
    except Exception as e:
        logger.error(f"Seeding error: {e}")
        db.rollback()
    finally:
        db.close()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup and shutdown lifecycle."""
    global _db_ready

    logger.info("=" * 60)
    logger.info(f"  {settings.APP_NAME} v{settings.APP_VERSION}")
    logger.info(f"  Database: {'PostgreSQL' if settings.is_postgres else 'SQLite'}")
    logger.info("=" * 60)

    try:
        init_db()
        if settings.SEED_ACHIEVEMENTS:
            _run_seed_if_empty()
        _db_ready = True
        logger.info("DB init complete.")
    except Exception as e:
        logger.error(f"DB init failed: {e}")
        _db_ready = False

    yield

    logger.info("Shutting down...")


# ---------------------------------------------------------------------------
# Create FastAPI application
# ---------------------------------------------------------------------------
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description=(
        "Client lifecycle automation: achievement evaluation, onboarding "
        "workflow scheduling and reviewed card release."
    ),
    lifespan=lifespan,
)

# ---------------------------------------------------------------------------
# CORS Middleware
# ---------------------------------------------------------------------------
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ---------------------------------------------------------------------------
# Include all route routers under /api/v1
# ---------------------------------------------------------------------------
from lifecycle_engine.routes import (  # noqa: E402
    achievements_router,
    workflow_router,
    cards_router,
)

API_PREFIX = "/api/v1"

all_routers = [
    achievements_router,
    workflow_router,
    cards_router,
]

for r in all_routers:
    app.include_router(r, prefix=API_PREFIX)


# ---------------------------------------------------------------------------
# Health check
# ---------------------------------------------------------------------------
@app.get("/", tags=["Health"])
def root():
    return {
        "app": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "status": "running",
        "docs": "/docs",
    }


@app.get("/health", tags=["Health"])
def health_check():
    result = {
        "status": "healthy",
        "database": "ready" if _db_ready else "initializing",
        "database_backend": "postgresql" if settings.is_postgres else "sqlite",
        "version": settings.APP_VERSION,
        "push_enabled": bool(settings.PUSH_NOTIFICATION_URL),
    }

    if _db_ready:
        try:
            from lifecycle_engine.models import Achievement
            db = SessionLocal()
            try:
                result["achievement_count"] = db.query(Achievement).count()
            finally:
                db.close()
        except Exception as e:
            result["achievement_count"] = 0
            result["database"] = f"error: {str(e)}"

    return result
