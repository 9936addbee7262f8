"""SQLAlchemy ORM models for the podcast hosting platform."""

import uuid
from datetime import UTC, datetime
from typing import List, Optional

from sqlalchemy import (
    BigInteger,
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

USER_ROLES = ("LISTENER", "CREATOR", "ADMIN")
MODERATION_STATUSES = ("DRAFT", "PENDING_APPROVAL", "APPROVED", "REJECTED")
VISIBILITIES = ("PUBLIC", "UNLISTED", "PRIVATE")
MEDIA_ASSET_TYPES = ("COVER_ART", "EPISODE_AUDIO")
STORAGE_PROVIDERS = ("LOCAL", "GOOGLE_DRIVE")


def utcnow() -> datetime:
    """Current UTC time as a naive datetime, the form stored in the database."""
    return datetime.now(UTC).replace(tzinfo=None)


def _uuid() -> str:
    return str(uuid.uuid4())


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


class User(Base):
    """Platform account.

    Role decides what the account may do: listeners subscribe and build
    playlists, creators publish podcasts, admins moderate everything.
    When ``requires_approval`` is set, new content from this user starts
    in PENDING_APPROVAL instead of APPROVED.
    """

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)

    username: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    email: Mapped[str] = mapped_column(String(320), unique=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[str] = mapped_column(String(32), default="LISTENER", nullable=False)

    # Profile
    bio: Mapped[Optional[str]] = mapped_column(Text)
    avatar_url: Mapped[Optional[str]] = mapped_column(String(2048))
    website: Mapped[Optional[str]] = mapped_column(String(2048))

    # Account flags
    requires_approval: Mapped[bool] = mapped_column(Boolean, default=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    email_verified: Mapped[bool] = mapped_column(Boolean, default=False)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)

    # Relationships
    subscriptions: Mapped[List["Subscription"]] = relationship(
        "Subscription", back_populates="user", cascade="all, delete-orphan"
    )
    playlists: Mapped[List["Playlist"]] = relationship(
        "Playlist", back_populates="user", cascade="all, delete-orphan"
    )
    sent_invitations: Mapped[List["ContentInvitation"]] = relationship(
        "ContentInvitation",
        foreign_keys="ContentInvitation.invited_by",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        Index("ix_users_email", "email"),
        Index("ix_users_role", "role"),
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, username={self.username!r}, role={self.role})>"


class Podcast(Base):
    """A show published by a creator."""

    __tablename__ = "podcasts"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    owner_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id"), nullable=False
    )

    title: Mapped[str] = mapped_column(String(512), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    cover_art_url: Mapped[Optional[str]] = mapped_column(String(2048))
    cover_art_asset_id: Mapped[Optional[str]] = mapped_column(String(36))
    category: Mapped[str] = mapped_column(String(128), default="Technology")
    language: Mapped[str] = mapped_column(String(35), default="es")

    # Moderation
    status: Mapped[str] = mapped_column(String(32), default="APPROVED", nullable=False)
    visibility: Mapped[str] = mapped_column(String(32), default="PUBLIC", nullable=False)
    approved_at: Mapped[Optional[datetime]] = mapped_column(DateTime)
    approved_by: Mapped[Optional[str]] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="SET NULL")
    )

    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)

    # Relationships
    owner: Mapped["User"] = relationship("User", foreign_keys=[owner_id])
    episodes: Mapped[List["Episode"]] = relationship(
        "Episode", back_populates="podcast", cascade="all, delete-orphan"
    )
    subscriptions: Mapped[List["Subscription"]] = relationship(
        "Subscription", back_populates="podcast", cascade="all, delete-orphan"
    )
    invitations: Mapped[List["ContentInvitation"]] = relationship(
        "ContentInvitation",
        foreign_keys="ContentInvitation.podcast_id",
        cascade="all, delete-orphan",
    )
    media_assets: Mapped[List["MediaAsset"]] = relationship(
        "MediaAsset",
        foreign_keys="MediaAsset.podcast_id",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        Index("ix_podcasts_owner_id", "owner_id"),
        Index("ix_podcasts_status", "status"),
    )

    def __repr__(self) -> str:
        return f"<Podcast(id={self.id}, title={self.title!r})>"


class Episode(Base):
    """Episode of a podcast.

    Audio and artwork can come either from a direct URL or from a stored
    media asset. Artwork falls back to the parent podcast when unset.
    """

    __tablename__ = "episodes"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    podcast_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("podcasts.id", ondelete="CASCADE"), nullable=False
    )

    title: Mapped[str] = mapped_column(String(512), nullable=False)
    notes: Mapped[str] = mapped_column(Text, nullable=False)
    cover_art_url: Mapped[Optional[str]] = mapped_column(String(2048))
    cover_art_asset_id: Mapped[Optional[str]] = mapped_column(String(36))

    # Audio
    audio_url: Mapped[Optional[str]] = mapped_column(String(2048))
    audio_asset_id: Mapped[Optional[str]] = mapped_column(String(36))
    audio_file_size: Mapped[Optional[int]] = mapped_column(BigInteger)
    duration: Mapped[int] = mapped_column(Integer, default=0)  # seconds

    # Moderation
    status: Mapped[str] = mapped_column(String(32), default="APPROVED", nullable=False)
    visibility: Mapped[str] = mapped_column(String(32), default="PUBLIC", nullable=False)
    approved_at: Mapped[Optional[datetime]] = mapped_column(DateTime)
    approved_by: Mapped[Optional[str]] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="SET NULL")
    )

    published_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)

    # Relationships
    podcast: Mapped["Podcast"] = relationship("Podcast", back_populates="episodes")
    playlist_entries: Mapped[List["PlaylistEpisode"]] = relationship(
        "PlaylistEpisode", back_populates="episode", cascade="all, delete-orphan"
    )
    invitations: Mapped[List["ContentInvitation"]] = relationship(
        "ContentInvitation",
        foreign_keys="ContentInvitation.episode_id",
        cascade="all, delete-orphan",
    )
    media_assets: Mapped[List["MediaAsset"]] = relationship(
        "MediaAsset",
        foreign_keys="MediaAsset.episode_id",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        Index("ix_episodes_podcast_id", "podcast_id"),
        Index("ix_episodes_status", "status"),
        Index("ix_episodes_published_at", "published_at"),
    )

    def __repr__(self) -> str:
        return f"<Episode(id={self.id}, title={self.title!r})>"


class Subscription(Base):
    """A user following a podcast; at most one row per pair."""

    __tablename__ = "subscriptions"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    user_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    podcast_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("podcasts.id", ondelete="CASCADE"), nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)

    user: Mapped["User"] = relationship("User", back_populates="subscriptions")
    podcast: Mapped["Podcast"] = relationship("Podcast", back_populates="subscriptions")

    __table_args__ = (
        UniqueConstraint("user_id", "podcast_id", name="uq_subscription_user_podcast"),
        Index("ix_subscriptions_user_id", "user_id"),
    )

    def __repr__(self) -> str:
        return f"<Subscription(user_id={self.user_id}, podcast_id={self.podcast_id})>"


class ContentInvitation(Base):
    """Grants an email address access to an unlisted or private podcast or episode.

    Exactly one of ``podcast_id`` and ``episode_id`` is set. ``user_id`` is
    filled in when the invited email already belongs to an account.
    """

    __tablename__ = "content_invitations"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    email: Mapped[str] = mapped_column(String(320), nullable=False)
    user_id: Mapped[Optional[str]] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="SET NULL")
    )
    podcast_id: Mapped[Optional[str]] = mapped_column(
        String(36), ForeignKey("podcasts.id", ondelete="CASCADE")
    )
    episode_id: Mapped[Optional[str]] = mapped_column(
        String(36), ForeignKey("episodes.id", ondelete="CASCADE")
    )
    invited_by: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    expires_at: Mapped[Optional[datetime]] = mapped_column(DateTime)

    __table_args__ = (
        Index("ix_content_invitations_email", "email"),
        Index("ix_content_invitations_podcast_id", "podcast_id"),
        Index("ix_content_invitations_episode_id", "episode_id"),
    )

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        if self.expires_at is None:
            return False
        return self.expires_at <= (now or utcnow())

    def __repr__(self) -> str:
        target = f"podcast_id={self.podcast_id}" if self.podcast_id else f"episode_id={self.episode_id}"
        return f"<ContentInvitation(id={self.id}, email={self.email!r}, {target})>"


class Playlist(Base):
    """User-curated ordered list of episodes."""

    __tablename__ = "playlists"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    user_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(String(1000))
    is_public: Mapped[bool] = mapped_column(Boolean, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)

    user: Mapped["User"] = relationship("User", back_populates="playlists")
    entries: Mapped[List["PlaylistEpisode"]] = relationship(
        "PlaylistEpisode",
        back_populates="playlist",
        cascade="all, delete-orphan",
        order_by="PlaylistEpisode.position",
    )

    __table_args__ = (Index("ix_playlists_user_id", "user_id"),)

    def __repr__(self) -> str:
        return f"<Playlist(id={self.id}, name={self.name!r})>"


class PlaylistEpisode(Base):
    """Position of an episode inside a playlist."""

    __tablename__ = "playlist_episodes"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    playlist_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("playlists.id", ondelete="CASCADE"), nullable=False
    )
    episode_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("episodes.id", ondelete="CASCADE"), nullable=False
    )
    position: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    added_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)

    playlist: Mapped["Playlist"] = relationship("Playlist", back_populates="entries")
    episode: Mapped["Episode"] = relationship("Episode", back_populates="playlist_entries")

    __table_args__ = (
        UniqueConstraint("playlist_id", "episode_id", name="uq_playlist_episode"),
    )

    def __repr__(self) -> str:
        return (
            f"<PlaylistEpisode(playlist_id={self.playlist_id}, "
            f"episode_id={self.episode_id}, position={self.position})>"
        )


class EmailConfig(Base):
    """SMTP settings used for outgoing mail. Only one row is active at a time."""

    __tablename__ = "email_config"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    smtp_host: Mapped[str] = mapped_column(String(255), nullable=False)
    smtp_port: Mapped[int] = mapped_column(Integer, default=587, nullable=False)
    smtp_secure: Mapped[bool] = mapped_column(Boolean, default=False)
    smtp_user: Mapped[str] = mapped_column(String(255), nullable=False)
    smtp_password: Mapped[str] = mapped_column(String(255), nullable=False)
    from_email: Mapped[str] = mapped_column(String(320), nullable=False)
    from_name: Mapped[str] = mapped_column(String(255), default="PodcastHub")
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)

    def __repr__(self) -> str:
        return f"<EmailConfig(id={self.id}, host={self.smtp_host!r}, active={self.is_active})>"


class DriveConfig(Base):
    """Google Drive service account settings for media storage."""

    __tablename__ = "drive_config"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    service_account_email: Mapped[str] = mapped_column(String(320), nullable=False)
    service_account_key: Mapped[str] = mapped_column(Text, nullable=False)  # JSON
    folder_id_images: Mapped[str] = mapped_column(String(255), nullable=False)
    folder_id_audio: Mapped[str] = mapped_column(String(255), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)

    def __repr__(self) -> str:
        return f"<DriveConfig(id={self.id}, email={self.service_account_email!r})>"


class MediaAsset(Base):
    """Stored cover art or episode audio."""

    __tablename__ = "media_assets"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    owner_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    podcast_id: Mapped[Optional[str]] = mapped_column(
        String(36), ForeignKey("podcasts.id", ondelete="CASCADE")
    )
    episode_id: Mapped[Optional[str]] = mapped_column(
        String(36), ForeignKey("episodes.id", ondelete="CASCADE")
    )
    type: Mapped[str] = mapped_column(String(32), nullable=False)
    storage_provider: Mapped[str] = mapped_column(String(32), default="LOCAL")
    storage_key: Mapped[str] = mapped_column(String(1024), nullable=False)
    public_url: Mapped[Optional[str]] = mapped_column(String(2048))
    mime_type: Mapped[str] = mapped_column(String(128), nullable=False)
    size_bytes: Mapped[int] = mapped_column(BigInteger, nullable=False)
    checksum: Mapped[Optional[str]] = mapped_column(String(128))
    visibility: Mapped[str] = mapped_column(String(32), default="PUBLIC")
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)

    __table_args__ = (
        Index("ix_media_assets_owner_id", "owner_id"),
        Index("ix_media_assets_podcast_id", "podcast_id"),
        Index("ix_media_assets_episode_id", "episode_id"),
    )

    def __repr__(self) -> str:
        return f"<MediaAsset(id={self.id}, type={self.type}, key={self.storage_key!r})>"
