"""
Artwork and audio URL resolution.

Episodes may leave their cover art empty and inherit the podcast's.
Audio and cover art may come from a direct URL or from a stored media
asset; a direct URL always wins over the asset.
"""

from typing import Any, Dict, Optional

from src.db.models import Episode, MediaAsset, Podcast
from src.db.repository import PodcastHubRepositoryInterface


def resolve_episode_artwork(episode: Episode, podcast: Podcast) -> Dict[str, Optional[str]]:
    """Effective cover art for an episode, falling back to its podcast's."""
    return {
        "cover_art_url": episode.cover_art_url or podcast.cover_art_url,
        "cover_art_asset_id": episode.cover_art_asset_id or podcast.cover_art_asset_id,
    }


def resolve_episode_audio_url(
    episode: Episode, audio_asset: Optional[MediaAsset] = None
) -> Optional[str]:
    """
    Resolve the playable audio URL of an episode.

    Args:
        episode: The episode.
        audio_asset: The asset referenced by `episode.audio_asset_id`, if loaded.

    Returns:
        The episode's own `audio_url`, else the asset's public URL, else None.
    """
    if episode.audio_url:
        return episode.audio_url
    if episode.audio_asset_id and audio_asset is not None:
        return audio_asset.public_url
    return None


def resolve_podcast_cover_art_url(
    podcast: Podcast, cover_art_asset: Optional[MediaAsset] = None
) -> Optional[str]:
    """Same fallback as `resolve_episode_audio_url`, for podcast cover art."""
    if podcast.cover_art_url:
        return podcast.cover_art_url
    if podcast.cover_art_asset_id and cover_art_asset is not None:
        return cover_art_asset.public_url
    return None


def enrich_episode_with_artwork(
    episode_data: Dict[str, Any], episode: Episode, podcast: Podcast
) -> Dict[str, Any]:
    """Return a copy of a serialized episode with its effective artwork added."""
    artwork = resolve_episode_artwork(episode, podcast)
    return {
        **episode_data,
        "effectiveCoverArtUrl": artwork["cover_art_url"],
        "effectiveCoverArtAssetId": artwork["cover_art_asset_id"],
    }


# Repository-backed variants: load the asset only when the URL is missing.

def episode_audio_url(episode: Episode, repository: PodcastHubRepositoryInterface) -> Optional[str]:
    asset = None
    if episode.audio_asset_id and not episode.audio_url:
        asset = repository.get_media_asset(episode.audio_asset_id)
    return resolve_episode_audio_url(episode, asset)


def podcast_cover_art_url(podcast: Podcast, repository: PodcastHubRepositoryInterface) -> Optional[str]:
    asset = None
    if podcast.cover_art_asset_id and not podcast.cover_art_url:
        asset = repository.get_media_asset(podcast.cover_art_asset_id)
    return resolve_podcast_cover_art_url(podcast, asset)


def episode_cover_art_url(
    episode: Episode, podcast: Podcast, repository: PodcastHubRepositoryInterface
) -> Optional[str]:
    """Effective cover art of an episode as a URL, resolving an asset if needed."""
    artwork = resolve_episode_artwork(episode, podcast)
    if artwork["cover_art_url"]:
        return artwork["cover_art_url"]
    if artwork["cover_art_asset_id"]:
        asset = repository.get_media_asset(artwork["cover_art_asset_id"])
        return asset.public_url if asset else None
    return None
