"""Repository pattern implementation for platform data persistence.

Provides an abstract interface and SQLAlchemy implementation for database operations.
Supports both SQLite (local development) and PostgreSQL (production).
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy import create_engine, func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload, sessionmaker

from .models import (
    MODERATION_STATUSES,
    USER_ROLES,
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
    utcnow,
)

logger = logging.getLogger(__name__)


def _escape_like_pattern(value: str) -> str:
    """
    Escape special characters for use in SQL LIKE patterns.

    The escape order matters: backslashes must be escaped first since
    they are used as the escape character.
    """
    escaped = value.replace('\\', '\\\\')
    escaped = escaped.replace('%', '\\%')
    escaped = escaped.replace('_', '\\_')
    return escaped


def _unique(ids: Iterable[str]) -> List[str]:
    """Drop duplicate IDs, keeping first-seen order."""
    return list(dict.fromkeys(ids))


@dataclass
class BulkOperationResult:
    """Outcome of a bulk admin operation.

    ``success_ids`` lists the IDs that were changed, ``failed`` holds one
    ``{"id", "reason"}`` entry for every ID that was not.
    """

    success_ids: List[str] = field(default_factory=list)
    failed: List[Dict[str, str]] = field(default_factory=list)

    def fail(self, item_id: str, reason: str) -> None:
        self.failed.append({"id": item_id, "reason": reason})

    def to_dict(self) -> Dict[str, Any]:
        return {"successIds": list(self.success_ids), "failed": list(self.failed)}


class PodcastHubRepositoryInterface(ABC):
    """Abstract interface for platform data persistence.

    Implementations must support both SQLite and PostgreSQL backends.
    Returned ORM objects are detached; relationships that callers need are
    loaded eagerly by the implementation.
    """

    # --- User Operations ---

    @abstractmethod
    def create_user(
        self, username: str, email: str, password_hash: str, **kwargs
    ) -> Optional[User]:
        """
        Create and persist a new user account.

        Parameters:
            username (str): Unique login name.
            email (str): Unique email address.
            password_hash (str): bcrypt hash of the password.
            **kwargs: Additional User attributes (role, bio, requires_approval, ...).

        Returns:
            Optional[User]: The new user, or `None` if the username or email is already taken.
        """
        pass

    @abstractmethod
    def get_user(self, user_id: str) -> Optional[User]:
        pass

    @abstractmethod
    def get_user_by_email(self, email: str) -> Optional[User]:
        pass

    @abstractmethod
    def get_user_by_username(self, username: str) -> Optional[User]:
        pass

    @abstractmethod
    def list_users(self) -> List[User]:
        """Return all users, newest first."""
        pass

    @abstractmethod
    def update_user(self, user_id: str, **kwargs) -> Optional[User]:
        """
        Update attributes of an existing user.

        Returns:
            Optional[User]: The updated user, or `None` if no user with `user_id` exists.
        """
        pass

    @abstractmethod
    def count_admins(self) -> int:
        """Count users with the ADMIN role."""
        pass

    # --- Podcast Operations ---

    @abstractmethod
    def create_podcast(
        self, owner_id: str, title: str, description: str, **kwargs
    ) -> Podcast:
        """
        Create and persist a new podcast owned by `owner_id`.

        Parameters:
            owner_id (str): ID of the creating user.
            title (str): Podcast title.
            description (str): Podcast description.
            **kwargs: Additional Podcast attributes (status, visibility, cover_art_url, ...).

        Returns:
            Podcast: The persisted podcast.
        """
        pass

    @abstractmethod
    def get_podcast(self, podcast_id: str) -> Optional[Podcast]:
        """
        Retrieve a podcast by its identifier, with its owner loaded.

        Returns:
            Podcast if a podcast with the given ID exists, `None` otherwise.
        """
        pass

    @abstractmethod
    def list_podcasts(
        self,
        owner_id: Optional[str] = None,
        status: Optional[str] = None,
        search: Optional[str] = None,
    ) -> List[Podcast]:
        """
        Return podcasts with their owners loaded, newest first.

        Parameters:
            owner_id (Optional[str]): Only podcasts owned by this user.
            status (Optional[str]): Only podcasts in this moderation status.
            search (Optional[str]): Case-insensitive substring match on title or description.
        """
        pass

    @abstractmethod
    def update_podcast(self, podcast_id: str, **kwargs) -> Optional[Podcast]:
        pass

    @abstractmethod
    def update_podcast_status(
        self, podcast_id: str, status: str, admin_id: str
    ) -> Optional[Podcast]:
        """
        Set a podcast's moderation status.

        Approval metadata (`approved_at`, `approved_by`) is stamped only when
        the new status is APPROVED.

        Returns:
            Optional[Podcast]: The updated podcast, or `None` if it does not exist.
        """
        pass

    @abstractmethod
    def delete_podcast(self, podcast_id: str) -> bool:
        """
        Delete a podcast along with its episodes, subscriptions, invitations and media assets.

        Returns:
            bool: `True` if the podcast existed and was deleted, `False` otherwise.
        """
        pass

    @abstractmethod
    def count_episodes(self, podcast_id: str) -> int:
        pass

    # --- Episode Operations ---

    @abstractmethod
    def create_episode(
        self, podcast_id: str, title: str, notes: str, **kwargs
    ) -> Episode:
        pass

    @abstractmethod
    def get_episode(self, episode_id: str) -> Optional[Episode]:
        """Retrieve an episode by ID, with its podcast loaded."""
        pass

    @abstractmethod
    def list_episodes(
        self,
        podcast_id: Optional[str] = None,
        status: Optional[str] = None,
        search: Optional[str] = None,
        owner_id: Optional[str] = None,
    ) -> List[Episode]:
        """
        Return episodes with their podcasts loaded, newest published first.

        Parameters:
            podcast_id (Optional[str]): Only episodes of this podcast.
            owner_id (Optional[str]): Only episodes of podcasts owned by this user.
            status (Optional[str]): Only episodes in this moderation status.
            search (Optional[str]): Case-insensitive match on episode title, notes or podcast title.
        """
        pass

    @abstractmethod
    def update_episode(self, episode_id: str, **kwargs) -> Optional[Episode]:
        pass

    @abstractmethod
    def update_episode_status(
        self, episode_id: str, status: str, admin_id: str
    ) -> Optional[Episode]:
        """Set an episode's moderation status, stamping approval metadata on APPROVED."""
        pass

    @abstractmethod
    def delete_episode(self, episode_id: str) -> bool:
        pass

    @abstractmethod
    def get_episodes_missing_audio_size(self) -> List[Episode]:
        """Episodes with an audio URL whose `audio_file_size` is still unknown."""
        pass

    # --- Subscription Operations ---

    @abstractmethod
    def subscribe(self, user_id: str, podcast_id: str) -> Subscription:
        """Subscribe a user to a podcast. Subscribing twice returns the existing row."""
        pass

    @abstractmethod
    def unsubscribe(self, user_id: str, podcast_id: str) -> bool:
        pass

    @abstractmethod
    def is_subscribed(self, user_id: str, podcast_id: str) -> bool:
        pass

    @abstractmethod
    def get_subscribed_podcast_ids(self, user_id: str) -> List[str]:
        pass

    @abstractmethod
    def get_user_library(self, user_id: str) -> List[Podcast]:
        """Podcasts the user subscribes to, most recent subscription first."""
        pass

    # --- Invitation Operations ---

    @abstractmethod
    def create_invitation(
        self,
        email: str,
        invited_by: str,
        podcast_id: Optional[str] = None,
        episode_id: Optional[str] = None,
        expires_at: Optional[datetime] = None,
    ) -> ContentInvitation:
        """
        Invite an email address to a podcast or an episode.

        Exactly one of `podcast_id` and `episode_id` must be given. When the
        email already belongs to an account, the invitation is linked to it.

        Raises:
            ValueError: If neither or both targets are given.
        """
        pass

    @abstractmethod
    def get_invitation(self, invitation_id: str) -> Optional[ContentInvitation]:
        pass

    @abstractmethod
    def list_podcast_invitations(self, podcast_id: str) -> List[ContentInvitation]:
        pass

    @abstractmethod
    def list_episode_invitations(self, episode_id: str) -> List[ContentInvitation]:
        pass

    @abstractmethod
    def delete_invitation(self, invitation_id: str) -> bool:
        pass

    @abstractmethod
    def has_invitation(
        self,
        user_id: Optional[str],
        email: Optional[str],
        podcast_id: Optional[str] = None,
        episode_id: Optional[str] = None,
    ) -> bool:
        """
        Check for a non-expired invitation to the given podcast or episode.

        An invitation matches when either its linked user or its email address
        matches the caller.
        """
        pass

    # --- Playlist Operations ---

    @abstractmethod
    def create_playlist(
        self,
        user_id: str,
        name: str,
        description: Optional[str] = None,
        is_public: bool = False,
    ) -> Playlist:
        pass

    @abstractmethod
    def get_playlist(self, playlist_id: str) -> Optional[Playlist]:
        pass

    @abstractmethod
    def list_user_playlists(self, user_id: str) -> List[Playlist]:
        """Playlists owned by the user, most recently updated first."""
        pass

    @abstractmethod
    def list_public_playlists(self) -> List[Playlist]:
        pass

    @abstractmethod
    def update_playlist(self, playlist_id: str, **kwargs) -> Optional[Playlist]:
        pass

    @abstractmethod
    def delete_playlist(self, playlist_id: str) -> bool:
        pass

    @abstractmethod
    def add_episode_to_playlist(
        self, playlist_id: str, episode_id: str
    ) -> Optional[PlaylistEpisode]:
        """
        Append an episode at the end of a playlist.

        Returns:
            Optional[PlaylistEpisode]: The new entry, or `None` if the episode is already in the playlist.
        """
        pass

    @abstractmethod
    def remove_episode_from_playlist(self, playlist_id: str, episode_id: str) -> bool:
        pass

    @abstractmethod
    def get_playlist_episodes(self, playlist_id: str) -> List[Episode]:
        """Episodes of a playlist in position order, with their podcasts loaded."""
        pass

    @abstractmethod
    def is_episode_in_playlist(self, playlist_id: str, episode_id: str) -> bool:
        pass

    @abstractmethod
    def reorder_playlist_episodes(self, playlist_id: str, episode_ids: List[str]) -> None:
        """Assign positions 0..n-1 following the order of `episode_ids`."""
        pass

    # --- Platform Configuration ---

    @abstractmethod
    def list_email_configs(self) -> List[EmailConfig]:
        pass

    @abstractmethod
    def get_email_config(self, config_id: str) -> Optional[EmailConfig]:
        pass

    @abstractmethod
    def get_active_email_config(self) -> Optional[EmailConfig]:
        pass

    @abstractmethod
    def create_email_config(self, **kwargs) -> EmailConfig:
        """Create an SMTP configuration. An active one deactivates all others."""
        pass

    @abstractmethod
    def update_email_config(self, config_id: str, **kwargs) -> Optional[EmailConfig]:
        pass

    @abstractmethod
    def activate_email_config(self, config_id: str) -> Optional[EmailConfig]:
        pass

    @abstractmethod
    def delete_email_config(self, config_id: str) -> bool:
        pass

    @abstractmethod
    def list_drive_configs(self) -> List[DriveConfig]:
        pass

    @abstractmethod
    def get_drive_config(self, config_id: str) -> Optional[DriveConfig]:
        pass

    @abstractmethod
    def get_active_drive_config(self) -> Optional[DriveConfig]:
        pass

    @abstractmethod
    def create_drive_config(self, **kwargs) -> DriveConfig:
        """Create a Drive configuration; it always becomes the only active one."""
        pass

    @abstractmethod
    def update_drive_config(self, config_id: str, **kwargs) -> Optional[DriveConfig]:
        pass

    @abstractmethod
    def activate_drive_config(self, config_id: str) -> Optional[DriveConfig]:
        pass

    @abstractmethod
    def delete_drive_config(self, config_id: str) -> bool:
        pass

    # --- Media Assets ---

    @abstractmethod
    def create_media_asset(
        self,
        owner_id: str,
        type: str,
        storage_key: str,
        mime_type: str,
        size_bytes: int,
        **kwargs,
    ) -> MediaAsset:
        pass

    @abstractmethod
    def get_media_asset(self, asset_id: str) -> Optional[MediaAsset]:
        pass

    @abstractmethod
    def delete_media_asset(self, asset_id: str) -> bool:
        pass

    # --- Bulk Operations ---

    @abstractmethod
    def bulk_update_users_role(
        self, ids: List[str], role: str, acting_user_id: Optional[str] = None
    ) -> BulkOperationResult:
        """
        Change the role of several users.

        Missing users fail with "User not found". The acting admin cannot
        demote themselves, and the last remaining admin cannot be demoted.
        """
        pass

    @abstractmethod
    def bulk_update_users_active(
        self, ids: List[str], is_active: bool, acting_user_id: Optional[str] = None
    ) -> BulkOperationResult:
        pass

    @abstractmethod
    def bulk_delete_users(
        self, ids: List[str], acting_user_id: Optional[str] = None
    ) -> BulkOperationResult:
        """
        Delete several users with their subscriptions, playlists and sent invitations.

        Users that still own podcasts are reported as failed.
        """
        pass

    @abstractmethod
    def bulk_update_podcasts_status(
        self, ids: List[str], status: str, admin_id: str
    ) -> BulkOperationResult:
        pass

    @abstractmethod
    def bulk_delete_podcasts(self, ids: List[str]) -> BulkOperationResult:
        pass

    @abstractmethod
    def bulk_update_episodes_status(
        self, ids: List[str], status: str, admin_id: str
    ) -> BulkOperationResult:
        pass

    @abstractmethod
    def bulk_delete_episodes(self, ids: List[str]) -> BulkOperationResult:
        pass

    # --- Statistics ---

    @abstractmethod
    def get_admin_stats(self) -> Dict[str, Any]:
        """
        Return platform-wide counts for the admin dashboard.

        Returns:
            Dict[str, Any]: `users` (total, active, per role), `podcasts` and
            `episodes` (total and per moderation status), `playlists` and
            `subscriptions` totals.
        """
        pass

    # --- Connection Management ---

    @abstractmethod
    def close(self) -> None:
        pass


class SQLAlchemyRepository(PodcastHubRepositoryInterface):
    """SQLAlchemy-based implementation of the platform repository.

    Supports SQLite for local development and PostgreSQL for production.
    """

    def __init__(
        self,
        database_url: str,
        pool_size: int = 5,
        max_overflow: int = 10,
        echo: bool = False,
        create_tables: bool = False,
    ):
        """
        Initialize the repository and configure its SQLAlchemy engine and session factory.

        Parameters:
            database_url (str): SQLAlchemy-compatible database URL.
            pool_size (int): Connection pool size for non-SQLite databases.
            max_overflow (int): Maximum overflow connections for non-SQLite databases.
            echo (bool): If true, enable SQLAlchemy SQL statement logging.
            create_tables (bool): Create missing tables directly instead of relying on Alembic.
        """
        self.database_url = database_url

        # SQLite doesn't support connection pooling
        if database_url.startswith("sqlite"):
            self.engine = create_engine(
                database_url,
                echo=echo,
                connect_args={"check_same_thread": False},
            )
        else:
            self.engine = create_engine(
                database_url,
                pool_size=pool_size,
                max_overflow=max_overflow,
                echo=echo,
            )

        self.SessionLocal = sessionmaker(bind=self.engine, expire_on_commit=False)

        if create_tables:
            Base.metadata.create_all(self.engine)

        logger.info(f"Database initialized: {database_url.split('@')[-1] if '@' in database_url else database_url}")

    def _get_session(self) -> Session:
        return self.SessionLocal()

    # --- User Operations ---

    def create_user(
        self, username: str, email: str, password_hash: str, **kwargs
    ) -> Optional[User]:
        with self._get_session() as session:
            user = User(
                username=username,
                email=email,
                password_hash=password_hash,
                **kwargs,
            )
            session.add(user)
            try:
                session.commit()
            except IntegrityError:
                session.rollback()
                logger.info(f"User already exists: {username} <{email}>")
                return None
            session.refresh(user)
            logger.info(f"Created user: {username} ({user.id})")
            return user

    def get_user(self, user_id: str) -> Optional[User]:
        with self._get_session() as session:
            return session.get(User, user_id)

    def get_user_by_email(self, email: str) -> Optional[User]:
        with self._get_session() as session:
            return session.scalar(select(User).where(User.email == email))

    def get_user_by_username(self, username: str) -> Optional[User]:
        with self._get_session() as session:
            return session.scalar(select(User).where(User.username == username))

    def list_users(self) -> List[User]:
        with self._get_session() as session:
            stmt = select(User).order_by(User.created_at.desc())
            return list(session.scalars(stmt).all())

    def update_user(self, user_id: str, **kwargs) -> Optional[User]:
        """Update a user's attributes."""
        with self._get_session() as session:
            user = session.get(User, user_id)
            if not user:
                return None

            for key, value in kwargs.items():
                if hasattr(user, key):
                    setattr(user, key, value)

            session.commit()
            session.refresh(user)
            logger.debug(f"Updated user {user_id}: {list(kwargs.keys())}")
            return user

    def count_admins(self) -> int:
        with self._get_session() as session:
            stmt = select(func.count(User.id)).where(User.role == "ADMIN")
            return session.scalar(stmt) or 0

    # --- Podcast Operations ---

    def create_podcast(
        self, owner_id: str, title: str, description: str, **kwargs
    ) -> Podcast:
        with self._get_session() as session:
            podcast = Podcast(
                owner_id=owner_id, title=title, description=description, **kwargs
            )
            session.add(podcast)
            session.commit()
            podcast_id = podcast.id
            logger.info(f"Created podcast: {title} ({podcast_id})")
        return self.get_podcast(podcast_id)

    def get_podcast(self, podcast_id: str) -> Optional[Podcast]:
        with self._get_session() as session:
            stmt = (
                select(Podcast)
                .options(joinedload(Podcast.owner))
                .where(Podcast.id == podcast_id)
            )
            return session.scalar(stmt)

    def list_podcasts(
        self,
        owner_id: Optional[str] = None,
        status: Optional[str] = None,
        search: Optional[str] = None,
    ) -> List[Podcast]:
        with self._get_session() as session:
            stmt = select(Podcast).options(joinedload(Podcast.owner))

            if owner_id:
                stmt = stmt.where(Podcast.owner_id == owner_id)
            if status:
                stmt = stmt.where(Podcast.status == status)
            if search:
                # lower() + like() works on both SQLite and PostgreSQL
                pattern = f"%{_escape_like_pattern(search.lower())}%"
                stmt = stmt.where(
                    or_(
                        func.lower(Podcast.title).like(pattern, escape='\\'),
                        func.lower(Podcast.description).like(pattern, escape='\\'),
                    )
                )

            stmt = stmt.order_by(Podcast.created_at.desc())
            return list(session.scalars(stmt).unique().all())

    def update_podcast(self, podcast_id: str, **kwargs) -> Optional[Podcast]:
        """
        Update attributes of an existing podcast.

        Only attributes that exist on the Podcast model are set from `kwargs`.

        Returns:
            Optional[Podcast]: The updated Podcast instance if found, `None` otherwise.
        """
        with self._get_session() as session:
            podcast = session.get(Podcast, podcast_id)
            if not podcast:
                return None
            for key, value in kwargs.items():
                if hasattr(podcast, key):
                    setattr(podcast, key, value)
            session.commit()
            logger.debug(f"Updated podcast {podcast_id}: {list(kwargs.keys())}")
        return self.get_podcast(podcast_id)

    def update_podcast_status(
        self, podcast_id: str, status: str, admin_id: str
    ) -> Optional[Podcast]:
        with self._get_session() as session:
            podcast = session.get(Podcast, podcast_id)
            if not podcast:
                return None
            _apply_status(podcast, status, admin_id)
            session.commit()
            logger.info(f"Podcast {podcast_id} status set to {status} by {admin_id}")
        return self.get_podcast(podcast_id)

    def delete_podcast(self, podcast_id: str) -> bool:
        with self._get_session() as session:
            podcast = session.get(Podcast, podcast_id)
            if not podcast:
                return False
            session.delete(podcast)
            session.commit()
            logger.info(f"Deleted podcast: {podcast.title} ({podcast_id})")
            return True

    def count_episodes(self, podcast_id: str) -> int:
        with self._get_session() as session:
            stmt = select(func.count(Episode.id)).where(Episode.podcast_id == podcast_id)
            return session.scalar(stmt) or 0

    # --- Episode Operations ---

    def create_episode(
        self, podcast_id: str, title: str, notes: str, **kwargs
    ) -> Episode:
        with self._get_session() as session:
            episode = Episode(podcast_id=podcast_id, title=title, notes=notes, **kwargs)
            session.add(episode)
            session.commit()
            episode_id = episode.id
            logger.info(f"Created episode: {title} ({episode_id})")
        return self.get_episode(episode_id)

    def get_episode(self, episode_id: str) -> Optional[Episode]:
        with self._get_session() as session:
            stmt = (
                select(Episode)
                .options(joinedload(Episode.podcast).joinedload(Podcast.owner))
                .where(Episode.id == episode_id)
            )
            return session.scalar(stmt)

    def list_episodes(
        self,
        podcast_id: Optional[str] = None,
        status: Optional[str] = None,
        search: Optional[str] = None,
        owner_id: Optional[str] = None,
    ) -> List[Episode]:
        with self._get_session() as session:
            stmt = (
                select(Episode)
                .join(Podcast, Episode.podcast_id == Podcast.id)
                .options(joinedload(Episode.podcast).joinedload(Podcast.owner))
            )

            if podcast_id:
                stmt = stmt.where(Episode.podcast_id == podcast_id)
            if owner_id:
                stmt = stmt.where(Podcast.owner_id == owner_id)
            if status:
                stmt = stmt.where(Episode.status == status)
            if search:
                pattern = f"%{_escape_like_pattern(search.lower())}%"
                stmt = stmt.where(
                    or_(
                        func.lower(Episode.title).like(pattern, escape='\\'),
                        func.lower(Episode.notes).like(pattern, escape='\\'),
                        func.lower(Podcast.title).like(pattern, escape='\\'),
                    )
                )

            stmt = stmt.order_by(Episode.published_at.desc())
            return list(session.scalars(stmt).unique().all())

    def update_episode(self, episode_id: str, **kwargs) -> Optional[Episode]:
        with self._get_session() as session:
            episode = session.get(Episode, episode_id)
            if not episode:
                return None
            for key, value in kwargs.items():
                if hasattr(episode, key):
                    setattr(episode, key, value)
            session.commit()
            logger.debug(f"Updated episode {episode_id}: {list(kwargs.keys())}")
        return self.get_episode(episode_id)

    def update_episode_status(
        self, episode_id: str, status: str, admin_id: str
    ) -> Optional[Episode]:
        with self._get_session() as session:
            episode = session.get(Episode, episode_id)
            if not episode:
                return None
            _apply_status(episode, status, admin_id)
            session.commit()
            logger.info(f"Episode {episode_id} status set to {status} by {admin_id}")
        return self.get_episode(episode_id)

    def delete_episode(self, episode_id: str) -> bool:
        with self._get_session() as session:
            episode = session.get(Episode, episode_id)
            if not episode:
                return False
            session.delete(episode)
            session.commit()
            logger.info(f"Deleted episode: {episode.title} ({episode_id})")
            return True

    def get_episodes_missing_audio_size(self) -> List[Episode]:
        with self._get_session() as session:
            stmt = (
                select(Episode)
                .where(Episode.audio_file_size.is_(None))
                .where(Episode.audio_url.is_not(None))
                .order_by(Episode.created_at)
            )
            return list(session.scalars(stmt).all())

    # --- Subscription Operations ---

    def subscribe(self, user_id: str, podcast_id: str) -> Subscription:
        with self._get_session() as session:
            existing = session.scalar(
                select(Subscription).where(
                    Subscription.user_id == user_id,
                    Subscription.podcast_id == podcast_id,
                )
            )
            if existing:
                return existing

            subscription = Subscription(user_id=user_id, podcast_id=podcast_id)
            session.add(subscription)
            try:
                session.commit()
            except IntegrityError:
                # Lost a race with a concurrent subscribe for the same pair
                session.rollback()
                return session.scalar(
                    select(Subscription).where(
                        Subscription.user_id == user_id,
                        Subscription.podcast_id == podcast_id,
                    )
                )
            session.refresh(subscription)
            logger.info(f"User {user_id} subscribed to podcast {podcast_id}")
            return subscription

    def unsubscribe(self, user_id: str, podcast_id: str) -> bool:
        with self._get_session() as session:
            subscription = session.scalar(
                select(Subscription).where(
                    Subscription.user_id == user_id,
                    Subscription.podcast_id == podcast_id,
                )
            )
            if not subscription:
                return False

            session.delete(subscription)
            session.commit()
            logger.info(f"User {user_id} unsubscribed from podcast {podcast_id}")
            return True

    def is_subscribed(self, user_id: str, podcast_id: str) -> bool:
        with self._get_session() as session:
            subscription = session.scalar(
                select(Subscription).where(
                    Subscription.user_id == user_id,
                    Subscription.podcast_id == podcast_id,
                )
            )
            return subscription is not None

    def get_subscribed_podcast_ids(self, user_id: str) -> List[str]:
        with self._get_session() as session:
            stmt = select(Subscription.podcast_id).where(Subscription.user_id == user_id)
            return list(session.scalars(stmt).all())

    def get_user_library(self, user_id: str) -> List[Podcast]:
        with self._get_session() as session:
            stmt = (
                select(Podcast)
                .join(Subscription, Podcast.id == Subscription.podcast_id)
                .options(joinedload(Podcast.owner))
                .where(Subscription.user_id == user_id)
                .order_by(Subscription.created_at.desc())
            )
            return list(session.scalars(stmt).unique().all())

    # --- Invitation Operations ---

    def create_invitation(
        self,
        email: str,
        invited_by: str,
        podcast_id: Optional[str] = None,
        episode_id: Optional[str] = None,
        expires_at: Optional[datetime] = None,
    ) -> ContentInvitation:
        if bool(podcast_id) == bool(episode_id):
            raise ValueError("Exactly one of podcast_id or episode_id is required")

        with self._get_session() as session:
            invited_user = session.scalar(
                select(User).where(func.lower(User.email) == email.lower())
            )
            invitation = ContentInvitation(
                email=email,
                user_id=invited_user.id if invited_user else None,
                podcast_id=podcast_id,
                episode_id=episode_id,
                invited_by=invited_by,
                expires_at=expires_at,
            )
            session.add(invitation)
            session.commit()
            session.refresh(invitation)
            logger.info(
                f"User {invited_by} invited {email} to "
                f"{'podcast ' + podcast_id if podcast_id else 'episode ' + episode_id}"
            )
            return invitation

    def get_invitation(self, invitation_id: str) -> Optional[ContentInvitation]:
        with self._get_session() as session:
            return session.get(ContentInvitation, invitation_id)

    def list_podcast_invitations(self, podcast_id: str) -> List[ContentInvitation]:
        with self._get_session() as session:
            stmt = (
                select(ContentInvitation)
                .where(ContentInvitation.podcast_id == podcast_id)
                .order_by(ContentInvitation.created_at.desc())
            )
            return list(session.scalars(stmt).all())

    def list_episode_invitations(self, episode_id: str) -> List[ContentInvitation]:
        with self._get_session() as session:
            stmt = (
                select(ContentInvitation)
                .where(ContentInvitation.episode_id == episode_id)
                .order_by(ContentInvitation.created_at.desc())
            )
            return list(session.scalars(stmt).all())

    def delete_invitation(self, invitation_id: str) -> bool:
        with self._get_session() as session:
            invitation = session.get(ContentInvitation, invitation_id)
            if not invitation:
                return False
            session.delete(invitation)
            session.commit()
            logger.info(f"Deleted invitation {invitation_id}")
            return True

    def has_invitation(
        self,
        user_id: Optional[str],
        email: Optional[str],
        podcast_id: Optional[str] = None,
        episode_id: Optional[str] = None,
    ) -> bool:
        if not user_id and not email:
            return False
        if not podcast_id and not episode_id:
            return False

        matches = []
        if user_id:
            matches.append(ContentInvitation.user_id == user_id)
        if email:
            matches.append(func.lower(ContentInvitation.email) == email.lower())

        with self._get_session() as session:
            stmt = select(ContentInvitation).where(or_(*matches))
            if podcast_id:
                stmt = stmt.where(ContentInvitation.podcast_id == podcast_id)
            else:
                stmt = stmt.where(ContentInvitation.episode_id == episode_id)
            stmt = stmt.where(
                or_(
                    ContentInvitation.expires_at.is_(None),
                    ContentInvitation.expires_at > utcnow(),
                )
            )
            return session.scalar(stmt.limit(1)) is not None

    # --- Playlist Operations ---

    def create_playlist(
        self,
        user_id: str,
        name: str,
        description: Optional[str] = None,
        is_public: bool = False,
    ) -> Playlist:
        with self._get_session() as session:
            playlist = Playlist(
                user_id=user_id,
                name=name,
                description=description,
                is_public=is_public,
            )
            session.add(playlist)
            session.commit()
            session.refresh(playlist)
            logger.info(f"Created playlist: {name} ({playlist.id})")
            return playlist

    def get_playlist(self, playlist_id: str) -> Optional[Playlist]:
        with self._get_session() as session:
            return session.get(Playlist, playlist_id)

    def list_user_playlists(self, user_id: str) -> List[Playlist]:
        with self._get_session() as session:
            stmt = (
                select(Playlist)
                .where(Playlist.user_id == user_id)
                .order_by(Playlist.updated_at.desc())
            )
            return list(session.scalars(stmt).all())

    def list_public_playlists(self) -> List[Playlist]:
        with self._get_session() as session:
            stmt = (
                select(Playlist)
                .where(Playlist.is_public.is_(True))
                .order_by(Playlist.updated_at.desc())
            )
            return list(session.scalars(stmt).all())

    def update_playlist(self, playlist_id: str, **kwargs) -> Optional[Playlist]:
        with self._get_session() as session:
            playlist = session.get(Playlist, playlist_id)
            if not playlist:
                return None
            for key, value in kwargs.items():
                if hasattr(playlist, key):
                    setattr(playlist, key, value)
            playlist.updated_at = utcnow()
            session.commit()
            session.refresh(playlist)
            return playlist

    def delete_playlist(self, playlist_id: str) -> bool:
        with self._get_session() as session:
            playlist = session.get(Playlist, playlist_id)
            if not playlist:
                return False
            session.delete(playlist)
            session.commit()
            logger.info(f"Deleted playlist {playlist_id}")
            return True

    def add_episode_to_playlist(
        self, playlist_id: str, episode_id: str
    ) -> Optional[PlaylistEpisode]:
        with self._get_session() as session:
            playlist = session.get(Playlist, playlist_id)
            if not playlist:
                return None

            max_position = session.scalar(
                select(func.max(PlaylistEpisode.position)).where(
                    PlaylistEpisode.playlist_id == playlist_id
                )
            )
            entry = PlaylistEpisode(
                playlist_id=playlist_id,
                episode_id=episode_id,
                position=0 if max_position is None else max_position + 1,
            )
            session.add(entry)
            playlist.updated_at = utcnow()
            try:
                session.commit()
            except IntegrityError:
                session.rollback()
                logger.debug(f"Episode {episode_id} already in playlist {playlist_id}")
                return None
            session.refresh(entry)
            return entry

    def remove_episode_from_playlist(self, playlist_id: str, episode_id: str) -> bool:
        with self._get_session() as session:
            entry = session.scalar(
                select(PlaylistEpisode).where(
                    PlaylistEpisode.playlist_id == playlist_id,
                    PlaylistEpisode.episode_id == episode_id,
                )
            )
            if not entry:
                return False
            session.delete(entry)
            playlist = session.get(Playlist, playlist_id)
            if playlist:
                playlist.updated_at = utcnow()
            session.commit()
            return True

    def get_playlist_episodes(self, playlist_id: str) -> List[Episode]:
        with self._get_session() as session:
            stmt = (
                select(Episode)
                .join(PlaylistEpisode, PlaylistEpisode.episode_id == Episode.id)
                .options(joinedload(Episode.podcast))
                .where(PlaylistEpisode.playlist_id == playlist_id)
                .order_by(PlaylistEpisode.position)
            )
            return list(session.scalars(stmt).unique().all())

    def is_episode_in_playlist(self, playlist_id: str, episode_id: str) -> bool:
        with self._get_session() as session:
            entry = session.scalar(
                select(PlaylistEpisode).where(
                    PlaylistEpisode.playlist_id == playlist_id,
                    PlaylistEpisode.episode_id == episode_id,
                )
            )
            return entry is not None

    def reorder_playlist_episodes(self, playlist_id: str, episode_ids: List[str]) -> None:
        with self._get_session() as session:
            entries = {
                entry.episode_id: entry
                for entry in session.scalars(
                    select(PlaylistEpisode).where(
                        PlaylistEpisode.playlist_id == playlist_id
                    )
                )
            }
            for position, episode_id in enumerate(episode_ids):
                entry = entries.get(episode_id)
                if entry is not None:
                    entry.position = position
            playlist = session.get(Playlist, playlist_id)
            if playlist:
                playlist.updated_at = utcnow()
            session.commit()

    # --- Platform Configuration ---

    def _deactivate_all(self, session: Session, model, except_id: Optional[str] = None) -> None:
        stmt = select(model).where(model.is_active.is_(True))
        if except_id:
            stmt = stmt.where(model.id != except_id)
        for row in session.scalars(stmt):
            row.is_active = False
            row.updated_at = utcnow()

    def _create_config(self, model, **kwargs):
        with self._get_session() as session:
            row = model(**kwargs)
            if row.is_active is None or row.is_active:
                row.is_active = True
                self._deactivate_all(session, model)
            session.add(row)
            session.commit()
            session.refresh(row)
            logger.info(f"Created {model.__tablename__} {row.id}")
            return row

    def _update_config(self, model, config_id: str, **kwargs):
        with self._get_session() as session:
            row = session.get(model, config_id)
            if not row:
                return None
            for key, value in kwargs.items():
                if hasattr(row, key):
                    setattr(row, key, value)
            if kwargs.get("is_active"):
                self._deactivate_all(session, model, except_id=config_id)
            row.updated_at = utcnow()
            session.commit()
            session.refresh(row)
            return row

    def _activate_config(self, model, config_id: str):
        with self._get_session() as session:
            row = session.get(model, config_id)
            if not row:
                return None
            self._deactivate_all(session, model, except_id=config_id)
            row.is_active = True
            row.updated_at = utcnow()
            session.commit()
            session.refresh(row)
            logger.info(f"Activated {model.__tablename__} {config_id}")
            return row

    def _delete_row(self, model, row_id: str) -> bool:
        with self._get_session() as session:
            row = session.get(model, row_id)
            if not row:
                return False
            session.delete(row)
            session.commit()
            logger.info(f"Deleted {model.__tablename__} {row_id}")
            return True

    def list_email_configs(self) -> List[EmailConfig]:
        with self._get_session() as session:
            stmt = select(EmailConfig).order_by(EmailConfig.created_at.desc())
            return list(session.scalars(stmt).all())

    def get_email_config(self, config_id: str) -> Optional[EmailConfig]:
        with self._get_session() as session:
            return session.get(EmailConfig, config_id)

    def get_active_email_config(self) -> Optional[EmailConfig]:
        with self._get_session() as session:
            stmt = select(EmailConfig).where(EmailConfig.is_active.is_(True)).limit(1)
            return session.scalar(stmt)

    def create_email_config(self, **kwargs) -> EmailConfig:
        return self._create_config(EmailConfig, **kwargs)

    def update_email_config(self, config_id: str, **kwargs) -> Optional[EmailConfig]:
        return self._update_config(EmailConfig, config_id, **kwargs)

    def activate_email_config(self, config_id: str) -> Optional[EmailConfig]:
        return self._activate_config(EmailConfig, config_id)

    def delete_email_config(self, config_id: str) -> bool:
        return self._delete_row(EmailConfig, config_id)

    def list_drive_configs(self) -> List[DriveConfig]:
        with self._get_session() as session:
            stmt = select(DriveConfig).order_by(DriveConfig.created_at.desc())
            return list(session.scalars(stmt).all())

    def get_drive_config(self, config_id: str) -> Optional[DriveConfig]:
        with self._get_session() as session:
            return session.get(DriveConfig, config_id)

    def get_active_drive_config(self) -> Optional[DriveConfig]:
        with self._get_session() as session:
            stmt = select(DriveConfig).where(DriveConfig.is_active.is_(True)).limit(1)
            return session.scalar(stmt)

    def create_drive_config(self, **kwargs) -> DriveConfig:
        kwargs["is_active"] = True
        return self._create_config(DriveConfig, **kwargs)

    def update_drive_config(self, config_id: str, **kwargs) -> Optional[DriveConfig]:
        return self._update_config(DriveConfig, config_id, **kwargs)

    def activate_drive_config(self, config_id: str) -> Optional[DriveConfig]:
        return self._activate_config(DriveConfig, config_id)

    def delete_drive_config(self, config_id: str) -> bool:
        return self._delete_row(DriveConfig, config_id)

    # --- Media Assets ---

    def create_media_asset(
        self,
        owner_id: str,
        type: str,
        storage_key: str,
        mime_type: str,
        size_bytes: int,
        **kwargs,
    ) -> MediaAsset:
        with self._get_session() as session:
            asset = MediaAsset(
                owner_id=owner_id,
                type=type,
                storage_key=storage_key,
                mime_type=mime_type,
                size_bytes=size_bytes,
                **kwargs,
            )
            session.add(asset)
            session.commit()
            session.refresh(asset)
            logger.debug(f"Created media asset {asset.id} ({type})")
            return asset

    def get_media_asset(self, asset_id: str) -> Optional[MediaAsset]:
        with self._get_session() as session:
            return session.get(MediaAsset, asset_id)

    def delete_media_asset(self, asset_id: str) -> bool:
        return self._delete_row(MediaAsset, asset_id)

    # --- Bulk Operations ---

    def bulk_update_users_role(
        self, ids: List[str], role: str, acting_user_id: Optional[str] = None
    ) -> BulkOperationResult:
        if role not in USER_ROLES:
            raise ValueError(f"Invalid role: {role}")

        result = BulkOperationResult()
        with self._get_session() as session:
            admin_count = session.scalar(
                select(func.count(User.id)).where(User.role == "ADMIN")
            ) or 0
            for user_id in _unique(ids):
                user = session.get(User, user_id)
                if not user:
                    result.fail(user_id, "User not found")
                    continue
                if user.role == "ADMIN" and role != "ADMIN":
                    if user_id == acting_user_id:
                        result.fail(user_id, "Cannot demote your own account")
                        continue
                    if admin_count <= 1:
                        result.fail(user_id, "Cannot demote the last admin")
                        continue
                    admin_count -= 1
                elif user.role != "ADMIN" and role == "ADMIN":
                    admin_count += 1
                user.role = role
                result.success_ids.append(user_id)
            session.commit()

        logger.info(f"Bulk role update to {role}: {len(result.success_ids)} ok, {len(result.failed)} failed")
        return result

    def bulk_update_users_active(
        self, ids: List[str], is_active: bool, acting_user_id: Optional[str] = None
    ) -> BulkOperationResult:
        result = BulkOperationResult()
        with self._get_session() as session:
            for user_id in _unique(ids):
                user = session.get(User, user_id)
                if not user:
                    result.fail(user_id, "User not found")
                    continue
                if not is_active and user_id == acting_user_id:
                    result.fail(user_id, "Cannot deactivate your own account")
                    continue
                user.is_active = is_active
                result.success_ids.append(user_id)
            session.commit()

        logger.info(f"Bulk active={is_active}: {len(result.success_ids)} ok, {len(result.failed)} failed")
        return result

    def bulk_delete_users(
        self, ids: List[str], acting_user_id: Optional[str] = None
    ) -> BulkOperationResult:
        result = BulkOperationResult()
        with self._get_session() as session:
            admin_count = session.scalar(
                select(func.count(User.id)).where(User.role == "ADMIN")
            ) or 0
            for user_id in _unique(ids):
                user = session.get(User, user_id)
                if not user:
                    result.fail(user_id, "User not found")
                    continue
                if user_id == acting_user_id:
                    result.fail(user_id, "Cannot delete your own account")
                    continue
                if user.role == "ADMIN" and admin_count <= 1:
                    result.fail(user_id, "Cannot delete the last admin")
                    continue
                owns_podcasts = session.scalar(
                    select(func.count(Podcast.id)).where(Podcast.owner_id == user_id)
                )
                if owns_podcasts:
                    result.fail(user_id, "User owns podcasts")
                    continue
                if user.role == "ADMIN":
                    admin_count -= 1
                session.delete(user)
                result.success_ids.append(user_id)
            session.commit()

        logger.info(f"Bulk user delete: {len(result.success_ids)} ok, {len(result.failed)} failed")
        return result

    def bulk_update_podcasts_status(
        self, ids: List[str], status: str, admin_id: str
    ) -> BulkOperationResult:
        return self._bulk_update_status(Podcast, "Podcast not found", ids, status, admin_id)

    def bulk_delete_podcasts(self, ids: List[str]) -> BulkOperationResult:
        return self._bulk_delete(Podcast, "Podcast not found", ids)

    def bulk_update_episodes_status(
        self, ids: List[str], status: str, admin_id: str
    ) -> BulkOperationResult:
        return self._bulk_update_status(Episode, "Episode not found", ids, status, admin_id)

    def bulk_delete_episodes(self, ids: List[str]) -> BulkOperationResult:
        return self._bulk_delete(Episode, "Episode not found", ids)

    def _bulk_update_status(
        self, model, not_found: str, ids: List[str], status: str, admin_id: str
    ) -> BulkOperationResult:
        if status not in MODERATION_STATUSES:
            raise ValueError(f"Invalid status: {status}")

        result = BulkOperationResult()
        with self._get_session() as session:
            for item_id in _unique(ids):
                item = session.get(model, item_id)
                if not item:
                    result.fail(item_id, not_found)
                    continue
                _apply_status(item, status, admin_id)
                result.success_ids.append(item_id)
            session.commit()

        logger.info(
            f"Bulk {model.__tablename__} status={status} by {admin_id}: "
            f"{len(result.success_ids)} ok, {len(result.failed)} failed"
        )
        return result

    def _bulk_delete(self, model, not_found: str, ids: List[str]) -> BulkOperationResult:
        result = BulkOperationResult()
        with self._get_session() as session:
            for item_id in _unique(ids):
                item = session.get(model, item_id)
                if not item:
                    result.fail(item_id, not_found)
                    continue
                session.delete(item)
                result.success_ids.append(item_id)
            session.commit()

        logger.info(
            f"Bulk {model.__tablename__} delete: "
            f"{len(result.success_ids)} ok, {len(result.failed)} failed"
        )
        return result

    # --- Statistics ---

    def get_admin_stats(self) -> Dict[str, Any]:
        with self._get_session() as session:
            def count(model, *criteria) -> int:
                stmt = select(func.count(model.id))
                if criteria:
                    stmt = stmt.where(*criteria)
                return session.scalar(stmt) or 0

            return {
                "users": {
                    "total": count(User),
                    "active": count(User, User.is_active.is_(True)),
                    "byRole": {role: count(User, User.role == role) for role in USER_ROLES},
                },
                "podcasts": {
                    "total": count(Podcast),
                    "byStatus": {
                        status: count(Podcast, Podcast.status == status)
                        for status in MODERATION_STATUSES
                    },
                },
                "episodes": {
                    "total": count(Episode),
                    "byStatus": {
                        status: count(Episode, Episode.status == status)
                        for status in MODERATION_STATUSES
                    },
                },
                "playlists": count(Playlist),
                "subscriptions": count(Subscription),
            }

    # --- Connection Management ---

    def close(self) -> None:
        """Dispose the SQLAlchemy engine and release pooled connections."""
        self.engine.dispose()


def _apply_status(item, status: str, admin_id: str) -> None:
    item.status = status
    if status == "APPROVED":
        item.approved_at = utcnow()
        item.approved_by = admin_id
