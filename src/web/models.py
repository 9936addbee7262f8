"""
Pydantic models for web API request validation.

Request bodies use camelCase keys on the wire; snake_case field names are
accepted too.
"""

import json
import re
import uuid
from datetime import UTC, datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

MAX_BULK_ITEMS = 50

Role = Literal["LISTENER", "CREATOR", "ADMIN"]
ModerationStatus = Literal["DRAFT", "PENDING_APPROVAL", "APPROVED", "REJECTED"]
Visibility = Literal["PUBLIC", "UNLISTED", "PRIVATE"]

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
BCP47_PATTERN = re.compile(r"^[a-zA-Z]{2,3}(-[a-zA-Z0-9]+)*(-[xX]-[a-zA-Z0-9]+)?$")


def _validate_email(value: Optional[str]) -> Optional[str]:
    if value is None:
        return value
    value = value.strip()
    if not EMAIL_PATTERN.match(value):
        raise ValueError("Invalid email address")
    return value


def _validate_url_or_path(value: Optional[str]) -> Optional[str]:
    """Accept absolute http(s) URLs, site-relative paths, empty strings and None."""
    if value is None or value == "" or value.startswith("/"):
        return value
    if not value.lower().startswith(("http://", "https://")):
        raise ValueError("Must be a URL or a path starting with /")
    return value


def _validate_url(value: Optional[str]) -> Optional[str]:
    if value is None or value == "":
        return value
    if not value.lower().startswith(("http://", "https://")):
        raise ValueError("Invalid URL")
    return value


def _reject_null(value):
    """Partial updates may omit a required column but never set it to null."""
    if value is None:
        raise ValueError("cannot be null")
    return value


def _to_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is not None and value.tzinfo is not None:
        return value.astimezone(UTC).replace(tzinfo=None)
    return value


def _validate_uuid(value: Optional[str]) -> Optional[str]:
    if value is None:
        return value
    try:
        uuid.UUID(value)
    except ValueError as e:
        raise ValueError("Invalid ID") from e
    return value


def _validate_service_account_key(value: Optional[str]) -> Optional[str]:
    """The key must be a Google service account JSON document."""
    if value is None:
        return value
    try:
        parsed = json.loads(value)
    except ValueError as e:
        raise ValueError("Invalid service account key JSON") from e
    if not isinstance(parsed, dict) or parsed.get("type") != "service_account":
        raise ValueError("Invalid service account key JSON")
    if not all(parsed.get(key) for key in ("project_id", "private_key", "client_email")):
        raise ValueError("Invalid service account key JSON")
    return value


class ApiModel(BaseModel):
    """Base for request bodies: camelCase aliases, snake_case also accepted."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# --- Auth & Profile ---


class RegisterRequest(ApiModel):
    username: str = Field(..., min_length=3, max_length=64)
    email: str = Field(..., max_length=320)
    password: str = Field(..., min_length=8, description="At least 8 characters")
    role: Literal["LISTENER", "CREATOR"] = "LISTENER"

    @field_validator("email")
    @classmethod
    def check_email(cls, v: str) -> str:
        return _validate_email(v)


class LoginRequest(ApiModel):
    email: str
    password: str = Field(..., min_length=1)

    @field_validator("email")
    @classmethod
    def check_email(cls, v: str) -> str:
        return _validate_email(v)


class ProfileUpdateRequest(ApiModel):
    username: Optional[str] = Field(default=None, min_length=3, max_length=50)
    email: Optional[str] = None
    bio: Optional[str] = Field(default=None, max_length=500)
    avatar_url: Optional[str] = None
    website: Optional[str] = None

    @field_validator("avatar_url", "website")
    @classmethod
    def check_urls(cls, v: Optional[str]) -> Optional[str]:
        return _validate_url(v)

    @field_validator("email")
    @classmethod
    def check_email(cls, v: Optional[str]) -> Optional[str]:
        return _validate_email(v)


class PasswordChangeRequest(ApiModel):
    current_password: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=8, description="At least 8 characters")


# --- Podcasts & Episodes ---


class PodcastCreateRequest(ApiModel):
    """Request model for creating a podcast."""
    title: str = Field(..., min_length=1, max_length=512)
    description: str = Field(..., min_length=1)
    cover_art_url: Optional[str] = None
    cover_art_asset_id: Optional[str] = None
    category: str = Field(default="Technology", min_length=1)
    language: str = Field(default="es", min_length=2)
    visibility: Visibility = "PUBLIC"

    @field_validator("cover_art_url")
    @classmethod
    def check_cover_art_url(cls, v: Optional[str]) -> Optional[str]:
        return _validate_url_or_path(v)

    @field_validator("cover_art_asset_id")
    @classmethod
    def check_asset_id(cls, v: Optional[str]) -> Optional[str]:
        return _validate_uuid(v)

    @field_validator("language")
    @classmethod
    def check_language(cls, v: str) -> str:
        if not BCP47_PATTERN.match(v):
            raise ValueError("Must be a valid BCP-47 language code")
        return v


class PodcastUpdateRequest(PodcastCreateRequest):
    """Partial update; only fields present in the body are applied."""
    title: Optional[str] = Field(default=None, min_length=1, max_length=512)
    description: Optional[str] = Field(default=None, min_length=1)
    category: Optional[str] = Field(default=None, min_length=1)
    language: Optional[str] = Field(default=None, min_length=2)
    visibility: Optional[Visibility] = None

    @field_validator("title", "description", "category", "language", "visibility")
    @classmethod
    def check_not_null(cls, v):
        return _reject_null(v)

    @field_validator("language")
    @classmethod
    def check_language(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not BCP47_PATTERN.match(v):
            raise ValueError("Must be a valid BCP-47 language code")
        return v


class EpisodeCreateRequest(ApiModel):
    """Request model for publishing an episode.

    Audio comes from `audioUrl` or `audioAssetId`. When `audioFileSize` is
    omitted the server looks it up from the audio URL.
    """
    podcast_id: str
    title: str = Field(..., min_length=1, max_length=512)
    notes: str = ""
    published_at: Optional[datetime] = None
    cover_art_url: Optional[str] = None
    cover_art_asset_id: Optional[str] = None
    audio_url: Optional[str] = None
    audio_asset_id: Optional[str] = None
    audio_file_size: Optional[int] = Field(default=None, gt=0)
    duration: int = Field(default=0, ge=0)
    visibility: Visibility = "PUBLIC"

    @field_validator("cover_art_url", "audio_url")
    @classmethod
    def check_urls(cls, v: Optional[str]) -> Optional[str]:
        return _validate_url_or_path(v)

    @field_validator("podcast_id", "cover_art_asset_id", "audio_asset_id")
    @classmethod
    def check_ids(cls, v: Optional[str]) -> Optional[str]:
        return _validate_uuid(v)

    @field_validator("published_at")
    @classmethod
    def normalize_published_at(cls, v: Optional[datetime]) -> Optional[datetime]:
        return _to_naive_utc(v)

    @model_validator(mode="after")
    def check_audio_source(self):
        if not self.audio_url and not self.audio_asset_id:
            raise ValueError("Either audioUrl or audioAssetId is required")
        return self


class EpisodeUpdateRequest(ApiModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=512)
    notes: Optional[str] = None
    cover_art_url: Optional[str] = None
    cover_art_asset_id: Optional[str] = None
    visibility: Optional[Visibility] = None

    @field_validator("title", "notes", "visibility")
    @classmethod
    def check_not_null(cls, v):
        return _reject_null(v)

    @field_validator("cover_art_url")
    @classmethod
    def check_cover_art_url(cls, v: Optional[str]) -> Optional[str]:
        return _validate_url_or_path(v)

    @field_validator("cover_art_asset_id")
    @classmethod
    def check_asset_id(cls, v: Optional[str]) -> Optional[str]:
        return _validate_uuid(v)


class MediaAssetCreateRequest(ApiModel):
    """Metadata for a file already placed in storage."""
    type: Literal["COVER_ART", "EPISODE_AUDIO"]
    storage_provider: Literal["LOCAL", "GOOGLE_DRIVE"] = "LOCAL"
    storage_key: str = Field(..., min_length=1, max_length=1024)
    public_url: Optional[str] = None
    mime_type: str = Field(..., min_length=1, max_length=128)
    size_bytes: int = Field(..., ge=0)
    checksum: Optional[str] = Field(default=None, max_length=128)
    podcast_id: Optional[str] = None
    episode_id: Optional[str] = None
    visibility: Visibility = "PUBLIC"

    @field_validator("public_url")
    @classmethod
    def check_public_url(cls, v: Optional[str]) -> Optional[str]:
        return _validate_url_or_path(v)

    @field_validator("podcast_id", "episode_id")
    @classmethod
    def check_ids(cls, v: Optional[str]) -> Optional[str]:
        return _validate_uuid(v)

    @model_validator(mode="after")
    def check_mime_type(self):
        expected = "image/" if self.type == "COVER_ART" else "audio/"
        if not self.mime_type.startswith(expected):
            raise ValueError(f"mimeType must start with {expected} for {self.type}")
        return self


# --- Playlists ---


class PlaylistCreateRequest(ApiModel):
    name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, max_length=1000)
    is_public: bool = False


class PlaylistUpdateRequest(ApiModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, max_length=1000)
    is_public: Optional[bool] = None

    @field_validator("name", "is_public")
    @classmethod
    def check_not_null(cls, v):
        return _reject_null(v)


class PlaylistAddEpisodeRequest(ApiModel):
    episode_id: Optional[str] = None


class PlaylistReorderRequest(ApiModel):
    episode_ids: List[str]


# --- Invitations ---


class InvitationCreateRequest(ApiModel):
    """Invite an email address to the podcast or episode in the URL."""
    email: str
    expires_at: Optional[datetime] = None

    @field_validator("email")
    @classmethod
    def check_email(cls, v: str) -> str:
        return _validate_email(v)

    @field_validator("expires_at")
    @classmethod
    def normalize_expires_at(cls, v: Optional[datetime]) -> Optional[datetime]:
        return _to_naive_utc(v)


class ContentInvitationCreateRequest(InvitationCreateRequest):
    """Invitation whose target is given in the body; exactly one target is allowed."""
    podcast_id: Optional[str] = None
    episode_id: Optional[str] = None

    @field_validator("podcast_id", "episode_id")
    @classmethod
    def check_ids(cls, v: Optional[str]) -> Optional[str]:
        return _validate_uuid(v)

    @model_validator(mode="after")
    def check_single_target(self):
        if not self.podcast_id and not self.episode_id:
            raise ValueError("Either podcastId or episodeId must be provided")
        if self.podcast_id and self.episode_id:
            raise ValueError("Cannot specify both podcastId and episodeId")
        return self


# --- Admin ---


class UpdateUserRoleRequest(ApiModel):
    role: Role


class UpdateUserApprovalRequest(ApiModel):
    requires_approval: bool


class UpdateUserActiveRequest(ApiModel):
    is_active: bool


class UpdateStatusRequest(ApiModel):
    status: ModerationStatus


class BulkIdsRequest(ApiModel):
    """IDs for a bulk operation: 1 to MAX_BULK_ITEMS UUIDs."""
    ids: List[str]

    @field_validator("ids")
    @classmethod
    def check_ids(cls, v: List[str]) -> List[str]:
        if not v:
            raise ValueError("At least one ID is required")
        if len(v) > MAX_BULK_ITEMS:
            raise ValueError(f"Maximum {MAX_BULK_ITEMS} items per operation")
        for item in v:
            _validate_uuid(item)
        return v


class BulkUpdateRoleRequest(BulkIdsRequest):
    role: Role


class BulkUpdateActiveRequest(BulkIdsRequest):
    is_active: bool


class BulkUpdateStatusRequest(BulkIdsRequest):
    status: ModerationStatus


# --- Platform configuration ---


class EmailConfigCreateRequest(ApiModel):
    smtp_host: str = Field(..., min_length=1)
    smtp_port: int = Field(default=587, ge=1, le=65535)
    smtp_secure: bool = False
    smtp_user: str = Field(..., min_length=1)
    smtp_password: str = Field(..., min_length=1)
    from_email: str
    from_name: str = Field(default="PodcastHub", min_length=1)
    is_active: bool = False

    @field_validator("from_email")
    @classmethod
    def check_email(cls, v: str) -> str:
        return _validate_email(v)


class EmailConfigUpdateRequest(ApiModel):
    smtp_host: Optional[str] = Field(default=None, min_length=1)
    smtp_port: Optional[int] = Field(default=None, ge=1, le=65535)
    smtp_secure: Optional[bool] = None
    smtp_user: Optional[str] = Field(default=None, min_length=1)
    smtp_password: Optional[str] = Field(default=None, min_length=1)
    from_email: Optional[str] = None
    from_name: Optional[str] = Field(default=None, min_length=1)
    is_active: Optional[bool] = None

    @field_validator(
        "smtp_host", "smtp_port", "smtp_secure", "smtp_user",
        "smtp_password", "from_email", "from_name", "is_active",
    )
    @classmethod
    def check_not_null(cls, v):
        return _reject_null(v)

    @field_validator("from_email")
    @classmethod
    def check_email(cls, v: Optional[str]) -> Optional[str]:
        return _validate_email(v)


class DriveConfigCreateRequest(ApiModel):
    service_account_email: str
    service_account_key: str = Field(..., min_length=1)
    folder_id_images: str = Field(..., min_length=1)
    folder_id_audio: str = Field(..., min_length=1)

    @field_validator("service_account_email")
    @classmethod
    def check_email(cls, v: str) -> str:
        return _validate_email(v)

    @field_validator("service_account_key")
    @classmethod
    def check_key(cls, v: str) -> str:
        return _validate_service_account_key(v)


class DriveConfigUpdateRequest(ApiModel):
    """Partial update. Empty strings mean "keep the current value"."""
    service_account_email: Optional[str] = None
    service_account_key: Optional[str] = None
    folder_id_images: Optional[str] = None
    folder_id_audio: Optional[str] = None
    is_active: Optional[bool] = None

    @field_validator("service_account_email")
    @classmethod
    def check_email(cls, v: Optional[str]) -> Optional[str]:
        return _validate_email(v) if v else v

    @field_validator("service_account_key")
    @classmethod
    def check_key(cls, v: Optional[str]) -> Optional[str]:
        return _validate_service_account_key(v) if v else v
