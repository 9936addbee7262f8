"""API routes for episodes and the embeddable episode player.

Provides endpoints for:
- /api/episodes/{id} - Episode details with share and embed links
- /api/episodes - Publish an episode to one of your podcasts
- /embed/episode/{id} - Minimal HTML player for iframes
"""

import html
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import HTMLResponse

from src.db.models import Episode, Podcast, User, utcnow
from src.db.repository import PodcastHubRepositoryInterface
from src.services.access import can_view_episode, is_owner_or_admin
from src.services.artwork import (
    enrich_episode_with_artwork,
    episode_audio_url,
    episode_cover_art_url,
)
from src.services.audio_size import fetch_audio_file_size_async
from src.services.url_helpers import episode_links, get_episode_canonical_url, get_site_url
from src.web.auth import get_current_user, get_optional_user
from src.web.models import EpisodeCreateRequest, EpisodeUpdateRequest
from src.web.serializers import serialize_episode

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/episodes", tags=["episodes"])
embed_router = APIRouter(tags=["embed"])

NOT_FOUND_PAGE = """<!DOCTYPE html>
<html lang="en">
  <head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>Episode not found</title>
  </head>
  <body style="font-family: sans-serif; text-align: center; padding: 80px 16px; color: #333;">
    <p>Episode not found</p>
  </body>
</html>
"""


def _load_episode(
    repository: PodcastHubRepositoryInterface, episode_id: str
) -> tuple[Optional[Episode], Optional[Podcast]]:
    episode = repository.get_episode(episode_id)
    if not episode:
        return None, None
    return episode, episode.podcast


@router.get("/{episode_id}")
async def get_episode(
    request: Request,
    episode_id: str,
    current_user: Optional[User] = Depends(get_optional_user),
):
    """
    Get an episode with its resolved audio URL, effective artwork and
    share/embed links. Episodes hidden from the caller answer 404.
    """
    repository = request.app.state.repository
    config = request.app.state.config

    episode, podcast = _load_episode(repository, episode_id)
    if not episode or not podcast:
        raise HTTPException(status_code=404, detail="Episode not found")
    if not can_view_episode(episode, podcast, current_user, repository):
        raise HTTPException(status_code=404, detail="Episode not found")

    site_url = get_site_url(request, config.WEB_BASE_URL)
    data = serialize_episode(
        episode,
        audioUrl=episode_audio_url(episode, repository),
        podcast={"id": podcast.id, "title": podcast.title, "ownerId": podcast.owner_id},
        **episode_links(site_url, episode.id, episode.title),
    )
    return enrich_episode_with_artwork(data, episode, podcast)


@router.post("", status_code=201)
async def create_episode(
    request: Request,
    body: EpisodeCreateRequest,
    current_user: User = Depends(get_current_user),
):
    """
    Publish an episode to one of the caller's podcasts.

    When `audioFileSize` is missing it is taken from the audio asset or
    looked up with a HEAD request against the audio URL. The episode is
    approved immediately unless the podcast owner requires approval.
    """
    repository = request.app.state.repository
    config = request.app.state.config

    podcast = repository.get_podcast(body.podcast_id)
    if not podcast:
        raise HTTPException(status_code=404, detail="Podcast not found")
    if podcast.owner_id != current_user.id:
        raise HTTPException(
            status_code=403,
            detail="Forbidden - You can only add episodes to your own podcasts",
        )

    audio_file_size = body.audio_file_size
    if not audio_file_size and body.audio_asset_id and not body.audio_url:
        asset = repository.get_media_asset(body.audio_asset_id)
        if not asset:
            raise HTTPException(status_code=400, detail="Audio asset not found")
        audio_file_size = asset.size_bytes

    if not audio_file_size:
        if not body.audio_url or not body.audio_url.lower().startswith(("http://", "https://")):
            raise HTTPException(
                status_code=400,
                detail="Unable to determine audio file size. Please provide audioFileSize "
                       "or ensure the audio URL returns a Content-Length header.",
            )
        audio_file_size = await fetch_audio_file_size_async(
            body.audio_url, timeout=config.HTTP_TIMEOUT_SECONDS
        )
        if not audio_file_size:
            raise HTTPException(
                status_code=400,
                detail="Unable to determine audio file size. Please provide audioFileSize "
                       "or ensure the audio URL returns a Content-Length header.",
            )
        logger.info(f"Auto-fetched audio file size: {audio_file_size} bytes for {body.audio_url}")

    fields = body.model_dump(exclude={"podcast_id", "title", "notes", "published_at"})
    fields["audio_file_size"] = audio_file_size
    if body.published_at:
        fields["published_at"] = body.published_at

    owner = podcast.owner or repository.get_user(podcast.owner_id)
    if owner is not None and not owner.requires_approval:
        fields.update(status="APPROVED", approved_at=utcnow(), approved_by=podcast.owner_id)
    else:
        fields["status"] = "PENDING_APPROVAL"

    episode = repository.create_episode(
        podcast_id=podcast.id, title=body.title, notes=body.notes, **fields
    )
    logger.info(f"User {current_user.id} created episode {episode.id} ({episode.status})")
    return serialize_episode(episode)


@router.patch("/{episode_id}")
async def update_episode(
    request: Request,
    episode_id: str,
    body: EpisodeUpdateRequest,
    current_user: User = Depends(get_current_user),
):
    """Edit episode metadata. Audio cannot be replaced through this endpoint."""
    repository = request.app.state.repository

    episode, podcast = _load_episode(repository, episode_id)
    if not episode:
        raise HTTPException(status_code=404, detail="Episode not found")
    if not podcast:
        raise HTTPException(status_code=404, detail="Podcast not found")
    if not is_owner_or_admin(podcast, current_user):
        raise HTTPException(
            status_code=403,
            detail="Forbidden - You can only edit episodes from your own podcasts",
        )

    updates = body.model_dump(exclude_unset=True)
    if not updates:
        return serialize_episode(episode)

    updated = repository.update_episode(episode_id, **updates)
    return serialize_episode(updated)


def _render_player(
    episode: Episode,
    podcast: Podcast,
    audio_url: str,
    cover_art_url: str,
    canonical_url: str,
) -> str:
    esc = html.escape
    title = episode.title or "Untitled episode"
    podcast_title = podcast.title or "Podcast"
    description = episode.notes[:200] if episode.notes else title

    image_tags = ""
    artwork = ""
    if cover_art_url:
        image_tags = (
            f'<meta property="og:image" content="{esc(cover_art_url)}">\n'
            f'    <meta name="twitter:image" content="{esc(cover_art_url)}">'
        )
        artwork = f'<img src="{esc(cover_art_url)}" alt="" width="120" height="120">'

    return f"""<!DOCTYPE html>
<html lang="{esc(podcast.language or 'en')}">
  <head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>{esc(title)} - {esc(podcast_title)}</title>
    <meta property="og:type" content="music.song">
    <meta property="og:title" content="{esc(title)}">
    <meta property="og:description" content="{esc(description)}">
    <meta property="og:url" content="{esc(canonical_url)}">
    <meta property="og:audio" content="{esc(audio_url)}">
    <meta name="twitter:card" content="player">
    <meta name="twitter:title" content="{esc(title)}">
    <meta name="twitter:description" content="{esc(description)}">
    {image_tags}
  </head>
  <body style="margin: 0; font-family: sans-serif; display: flex; gap: 16px; padding: 16px;">
    {artwork}
    <div style="flex: 1; min-width: 0;">
      <a href="{esc(canonical_url)}" target="_blank" rel="noopener"><strong>{esc(title)}</strong></a>
      <div>{esc(podcast_title)}</div>
      <audio controls preload="none" src="{esc(audio_url)}" style="width: 100%; margin-top: 12px;"></audio>
    </div>
  </body>
</html>
"""


@embed_router.get("/embed/episode/{episode_id}", response_class=HTMLResponse)
async def embed_episode(
    request: Request,
    episode_id: str,
    current_user: Optional[User] = Depends(get_optional_user),
):
    """
    Public iframe player for an episode.

    Same visibility and moderation checks as the episode API; hidden
    episodes render a not-found page.
    """
    repository = request.app.state.repository
    config = request.app.state.config

    episode, podcast = _load_episode(repository, episode_id)
    if not episode or not podcast:
        return HTMLResponse(NOT_FOUND_PAGE, status_code=404)

    if not can_view_episode(episode, podcast, current_user, repository):
        return HTMLResponse(NOT_FOUND_PAGE, status_code=404)

    site_url = get_site_url(request, config.WEB_BASE_URL)
    page = _render_player(
        episode,
        podcast,
        audio_url=episode_audio_url(episode, repository) or "",
        cover_art_url=episode_cover_art_url(episode, podcast, repository) or "",
        canonical_url=get_episode_canonical_url(site_url, episode.id),
    )
    return HTMLResponse(page)
