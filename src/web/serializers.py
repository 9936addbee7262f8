"""
JSON serialization of ORM objects for API responses.

Responses use camelCase keys. Secrets never leave the server: password
hashes are dropped, SMTP passwords are masked and Drive keys are reduced
to a presence flag.
"""

from datetime import datetime
from typing import Any, Dict, Optional

from sqlalchemy import inspect

from src.db.models import (
    ContentInvitation,
    DriveConfig,
    EmailConfig,
    Episode,
    MediaAsset,
    Playlist,
    Podcast,
    User,
)

MASKED_SECRET = "********"


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def _loaded(obj: Any, name: str) -> bool:
    """True if a relationship is already loaded, so reading it won't hit the database."""
    return name not in inspect(obj).unloaded


def serialize_user(user: User) -> Dict[str, Any]:
    return {
        "id": user.id,
        "username": user.username,
        "email": user.email,
        "role": user.role,
        "bio": user.bio,
        "avatarUrl": user.avatar_url,
        "website": user.website,
        "requiresApproval": bool(user.requires_approval),
        "isActive": bool(user.is_active),
        "emailVerified": bool(user.email_verified),
        "createdAt": _iso(user.created_at),
    }


def serialize_owner(user: Optional[User]) -> Optional[Dict[str, Any]]:
    if user is None:
        return None
    return {"id": user.id, "username": user.username, "email": user.email}


def serialize_podcast(podcast: Podcast, **extra) -> Dict[str, Any]:
    data = {
        "id": podcast.id,
        "title": podcast.title,
        "description": podcast.description,
        "coverArtUrl": podcast.cover_art_url,
        "coverArtAssetId": podcast.cover_art_asset_id,
        "category": podcast.category,
        "language": podcast.language,
        "status": podcast.status,
        "visibility": podcast.visibility,
        "ownerId": podcast.owner_id,
        "createdAt": _iso(podcast.created_at),
        "approvedAt": _iso(podcast.approved_at),
        "approvedBy": podcast.approved_by,
    }
    if _loaded(podcast, "owner"):
        data["owner"] = serialize_owner(podcast.owner)
    data.update(extra)
    return data


def serialize_episode(episode: Episode, **extra) -> Dict[str, Any]:
    data = {
        "id": episode.id,
        "podcastId": episode.podcast_id,
        "title": episode.title,
        "notes": episode.notes,
        "coverArtUrl": episode.cover_art_url,
        "coverArtAssetId": episode.cover_art_asset_id,
        "audioUrl": episode.audio_url,
        "audioAssetId": episode.audio_asset_id,
        "audioFileSize": episode.audio_file_size,
        "duration": episode.duration,
        "status": episode.status,
        "visibility": episode.visibility,
        "publishedAt": _iso(episode.published_at),
        "createdAt": _iso(episode.created_at),
        "approvedAt": _iso(episode.approved_at),
        "approvedBy": episode.approved_by,
    }
    data.update(extra)
    return data


def serialize_playlist(playlist: Playlist, **extra) -> Dict[str, Any]:
    data = {
        "id": playlist.id,
        "userId": playlist.user_id,
        "name": playlist.name,
        "description": playlist.description,
        "isPublic": bool(playlist.is_public),
        "createdAt": _iso(playlist.created_at),
        "updatedAt": _iso(playlist.updated_at),
    }
    data.update(extra)
    return data


def serialize_invitation(invitation: ContentInvitation) -> Dict[str, Any]:
    return {
        "id": invitation.id,
        "email": invitation.email,
        "userId": invitation.user_id,
        "podcastId": invitation.podcast_id,
        "episodeId": invitation.episode_id,
        "invitedBy": invitation.invited_by,
        "createdAt": _iso(invitation.created_at),
        "expiresAt": _iso(invitation.expires_at),
    }


def serialize_email_config(config: EmailConfig) -> Dict[str, Any]:
    return {
        "id": config.id,
        "smtpHost": config.smtp_host,
        "smtpPort": config.smtp_port,
        "smtpSecure": bool(config.smtp_secure),
        "smtpUser": config.smtp_user,
        "smtpPassword": MASKED_SECRET,
        "fromEmail": config.from_email,
        "fromName": config.from_name,
        "isActive": bool(config.is_active),
        "createdAt": _iso(config.created_at),
        "updatedAt": _iso(config.updated_at),
    }


def serialize_drive_config(config: DriveConfig) -> Dict[str, Any]:
    return {
        "id": config.id,
        "serviceAccountEmail": config.service_account_email,
        "hasServiceAccountKey": bool(config.service_account_key),
        "folderIdImages": config.folder_id_images,
        "folderIdAudio": config.folder_id_audio,
        "isActive": bool(config.is_active),
        "createdAt": _iso(config.created_at),
        "updatedAt": _iso(config.updated_at),
    }


def serialize_media_asset(asset: MediaAsset) -> Dict[str, Any]:
    return {
        "id": asset.id,
        "ownerId": asset.owner_id,
        "podcastId": asset.podcast_id,
        "episodeId": asset.episode_id,
        "type": asset.type,
        "storageProvider": asset.storage_provider,
        "publicUrl": asset.public_url,
        "mimeType": asset.mime_type,
        "sizeBytes": asset.size_bytes,
        "visibility": asset.visibility,
        "createdAt": _iso(asset.created_at),
    }
