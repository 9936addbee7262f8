"""Database factory for creating repository instances.

Automatically detects database type from URL and configures appropriately
for SQLite (local development) or PostgreSQL (production).
"""

import logging
import os
from typing import Optional

from .repository import PodcastHubRepositoryInterface, SQLAlchemyRepository

logger = logging.getLogger(__name__)

# Default database URL for local development
DEFAULT_DATABASE_URL = "sqlite:///./podcasthub.db"


def _describe_url(database_url: str) -> str:
    """Return the URL with any credentials replaced by an ellipsis."""
    if "://" not in database_url:
        return database_url
    db_type = database_url.split("://")[0]
    if "@" in database_url:
        return f"{db_type}://...@{database_url.split('@')[-1]}"
    return database_url


def create_repository(
    database_url: Optional[str] = None,
    pool_size: int = 5,
    max_overflow: int = 10,
    echo: bool = False,
    create_tables: bool = False,
) -> PodcastHubRepositoryInterface:
    """
    Create a repository configured from the provided or discovered database URL.

    If `database_url` is not provided, it is read from the `DATABASE_URL` environment
    variable; if that is unset, a local SQLite default is used. Pool settings apply to
    PostgreSQL and are ignored for SQLite.

    Parameters:
        database_url (Optional[str]): SQLAlchemy database URL to use.
        pool_size (int): Connection pool size for PostgreSQL.
        max_overflow (int): Maximum overflow connections for PostgreSQL.
        echo (bool): If true, enable SQL statement logging.
        create_tables (bool): Create missing tables on startup (tests and local SQLite).

    Returns:
        PodcastHubRepositoryInterface: A repository backed by the resolved database URL.
    """
    if database_url is None:
        database_url = os.getenv("DATABASE_URL", DEFAULT_DATABASE_URL)

    logger.info(f"Creating repository: {_describe_url(database_url)}")

    return SQLAlchemyRepository(
        database_url=database_url,
        pool_size=pool_size,
        max_overflow=max_overflow,
        echo=echo,
        create_tables=create_tables,
    )


def get_database_url_from_config(config) -> str:
    """Resolve the database URL from a config object, the environment, or the default."""
    return getattr(config, "DATABASE_URL", None) or os.getenv(
        "DATABASE_URL", DEFAULT_DATABASE_URL
    )
