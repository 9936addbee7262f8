"""
FastAPI web application for the PodcastHub hosting platform.

Serves the JSON API under /api, public RSS feeds and the embeddable
episode player.
"""

import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from src.config import Config
from src.db.factory import create_repository
from src.services.admin_bootstrap import initialize_admin
from src.web.admin_config_routes import router as admin_config_router
from src.web.admin_routes import router as admin_router
from src.web.auth_routes import router as auth_router
from src.web.emergency_routes import router as emergency_router
from src.web.episode_routes import embed_router
from src.web.episode_routes import router as episode_router
from src.web.errors import register_error_handlers
from src.web.invitation_routes import router as invitation_router
from src.web.media_routes import router as media_router
from src.web.playlist_routes import router as playlist_router
from src.web.podcast_routes import router as podcast_router
from src.web.rate_limit import limiter
from src.web.user_routes import router as user_router

# Configure logging
log_level = os.environ.get("LOG_LEVEL", "INFO").upper()
logging.basicConfig(
    level=getattr(logging, log_level, logging.INFO),
    format="%(asctime)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

# Initialize configuration
config = Config()


def _validate_jwt_config():
    """
    Validate JWT configuration at startup.

    In DEV_MODE, allows running without JWT_SECRET_KEY by using an insecure key.
    In production, requires JWT_SECRET_KEY to be set.
    """
    is_dev_mode = os.getenv("DEV_MODE", "").lower() == "true"
    if not config.JWT_SECRET_KEY:
        if is_dev_mode:
            logger.warning(
                "JWT_SECRET_KEY not set - using insecure dev key. "
                "DO NOT use in production!"
            )
            config.JWT_SECRET_KEY = "dev-secret-key-insecure-do-not-use-in-prod"
        else:
            raise RuntimeError(
                "JWT_SECRET_KEY environment variable must be set. "
                "Set DEV_MODE=true to use an insecure dev key for local testing."
            )


_validate_jwt_config()

# Initialize repository for database access
_repository = create_repository(
    config.DATABASE_URL,
    pool_size=config.DB_POOL_SIZE,
    max_overflow=config.DB_MAX_OVERFLOW,
    echo=config.DB_ECHO,
    create_tables=config.DB_CREATE_TABLES,
)


@asynccontextmanager
async def lifespan(_app: FastAPI):
    """
    FastAPI lifespan context manager.

    Ensures an admin account exists on startup and releases database
    connections on shutdown.
    """
    initialize_admin(_repository, config)
    logger.info("Application started")

    yield

    _repository.close()
    logger.info("Application shutdown")


# Initialize FastAPI app
app = FastAPI(
    title="PodcastHub",
    description="Podcast hosting with moderation, playlists and RSS feeds",
    version="1.0.0",
    lifespan=lifespan
)

# Add rate limiter to app state
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

register_error_handlers(app)

# CORS middleware (configurable via environment variable)
allowed_origins = config.WEB_ALLOWED_ORIGINS.split(",") if config.WEB_ALLOWED_ORIGINS != "*" else ["*"]
app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Store config and repository in app state for access in routes
app.state.config = config
app.state.repository = _repository

app.include_router(auth_router)
app.include_router(user_router)
app.include_router(podcast_router)
app.include_router(episode_router)
app.include_router(embed_router)
app.include_router(playlist_router)
app.include_router(invitation_router)
app.include_router(media_router)
app.include_router(admin_router)
app.include_router(admin_config_router)
app.include_router(emergency_router)


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy", "service": "podcasthub"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=config.WEB_PORT)
