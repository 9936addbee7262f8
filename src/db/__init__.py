"""Database module for platform data persistence.

Provides:
- SQLAlchemy ORM models (User, Podcast, Episode, Playlist, ...)
- Repository interface and implementation
- Factory function for creating repositories
"""

from .factory import create_repository, get_database_url_from_config
from .models import (
    Base,
    ContentInvitation,
    DriveConfig,
    EmailConfig,
    Episode,
    MediaAsset,
    Playlist,
    PlaylistEpisode,
    Podcast,
    Subscription,
    User,
)
from .repository import (
    BulkOperationResult,
    PodcastHubRepositoryInterface,
    SQLAlchemyRepository,
)

__all__ = [
    "Base",
    "User",
    "Podcast",
    "Episode",
    "Subscription",
    "ContentInvitation",
    "Playlist",
    "PlaylistEpisode",
    "EmailConfig",
    "DriveConfig",
    "MediaAsset",
    "BulkOperationResult",
    "PodcastHubRepositoryInterface",
    "SQLAlchemyRepository",
    "create_repository",
    "get_database_url_from_config",
]
