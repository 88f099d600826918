"""
lightbearer.api.main — FastAPI application entry point
========================================================

Run with::

    uvicorn lightbearer.api.main:app --reload --port 8000
"""

from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

load_dotenv()

from lightbearer.api.auth import router as auth_router  # noqa: E402
from lightbearer.api.deps import get_config, get_engine  # noqa: E402
from lightbearer.api.errors import register_exception_handlers  # noqa: E402
from lightbearer.api.routes.achievements import router as achievements_router  # noqa: E402
from lightbearer.api.routes.admin import router as admin_router  # noqa: E402
from lightbearer.api.routes.builds import router as builds_router  # noqa: E402
from lightbearer.api.routes.catalog import router as catalog_router  # noqa: E402
from lightbearer.api.routes.comments import router as comments_router  # noqa: E402
from lightbearer.api.routes.leaderboard import router as leaderboard_router  # noqa: E402
from lightbearer.api.routes.listings import router as listings_router  # noqa: E402
from lightbearer.api.routes.mods import router as mods_router  # noqa: E402
from lightbearer.api.routes.news import router as news_router  # noqa: E402
from lightbearer.api.routes.tasks import router as tasks_router  # noqa: E402
from lightbearer.api.routes.weapons import router as weapons_router  # noqa: E402

logger = logging.getLogger(__name__)


def _cors_origins() -> list[str]:
    """Resolve allowed CORS origins from env.

    Priority:
      1) CORS_ALLOW_ORIGINS (comma-separated)
      2) FRONTEND_URL (single origin)
    """
    raw = os.getenv("CORS_ALLOW_ORIGINS", "").strip()
    if raw:
        return [origin.strip().rstrip("/") for origin in raw.split(",") if origin.strip()]

    frontend_url = os.getenv("FRONTEND_URL", "").strip()
    if frontend_url:
        return [frontend_url.rstrip("/")]

    return []


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle: warm the DB engine and config."""
    engine = get_engine()
    cfg = get_config()
    logger.info(
        "Lightbearer API started for %s (%s)", cfg.community_name, engine.url.database
    )
    yield
    logger.info("Lightbearer API shutting down")


app = FastAPI(
    title="Lightbearer API",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

# Mount routers
app.include_router(auth_router, prefix="/api")
app.include_router(builds_router, prefix="/api")
app.include_router(comments_router, prefix="/api")
app.include_router(news_router, prefix="/api")
app.include_router(listings_router, prefix="/api")
app.include_router(weapons_router, prefix="/api")
app.include_router(mods_router, prefix="/api")
app.include_router(catalog_router, prefix="/api")
app.include_router(tasks_router, prefix="/api")
app.include_router(admin_router, prefix="/api")
app.include_router(leaderboard_router, prefix="/api")
app.include_router(achievements_router, prefix="/api")


@app.get("/api/health")
def health():
    return {"status": "ok"}
