"""API routes for browsing, publishing and subscribing to podcasts.

Provides endpoints for:
- Listing and viewing podcasts visible to the caller
- Creating and editing podcasts
- Serving the public RSS feed
- Subscribing and unsubscribing
"""

import logging
from datetime import UTC
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request, Response

from src.db.models import Podcast, User, utcnow
from src.db.repository import PodcastHubRepositoryInterface
from src.services.access import can_view_episode, can_view_podcast, is_owner_or_admin
from src.services.artwork import (
    enrich_episode_with_artwork,
    episode_audio_url,
    episode_cover_art_url,
    podcast_cover_art_url,
)
from src.services.rss_generator import FeedEpisode, generate_error_feed, generate_rss_feed
from src.services.url_helpers import episode_links, get_podcast_rss_url, get_site_url
from src.web.auth import get_current_user, get_optional_user
from src.web.models import PodcastCreateRequest, PodcastUpdateRequest
from src.web.serializers import serialize_episode, serialize_podcast

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/podcasts", tags=["podcasts"])

RSS_MEDIA_TYPE = "application/rss+xml; charset=utf-8"


def _get_podcast_or_404(repository: PodcastHubRepositoryInterface, podcast_id: str) -> Podcast:
    podcast = repository.get_podcast(podcast_id)
    if not podcast:
        raise HTTPException(status_code=404, detail="Podcast not found")
    return podcast


def _epoch_millis(value) -> int:
    return int(value.replace(tzinfo=UTC).timestamp() * 1000)


@router.get("")
async def list_podcasts(
    request: Request,
    current_user: Optional[User] = Depends(get_optional_user),
):
    """
    List podcasts the caller may see.

    Anonymous visitors get approved public podcasts. Logged-in users also
    see podcasts they were invited to and their own drafts, and each
    entry carries `isSubscribed`.
    """
    repository = request.app.state.repository

    visible = [
        podcast for podcast in repository.list_podcasts()
        if can_view_podcast(podcast, current_user, repository)
    ]

    subscribed = set()
    if current_user:
        subscribed = set(repository.get_subscribed_podcast_ids(current_user.id))

    results = []
    for podcast in visible:
        extra = {"coverArtUrl": podcast_cover_art_url(podcast, repository)}
        if current_user:
            extra["isSubscribed"] = podcast.id in subscribed
        results.append(serialize_podcast(podcast, **extra))
    return results


@router.get("/{podcast_id}")
async def get_podcast(
    request: Request,
    podcast_id: str,
    current_user: Optional[User] = Depends(get_optional_user),
):
    """
    Get a podcast with the episodes the caller may see.

    Podcasts hidden from the caller answer 404 rather than 403 so their
    existence is not revealed.
    """
    repository = request.app.state.repository
    config = request.app.state.config

    podcast = _get_podcast_or_404(repository, podcast_id)
    if not can_view_podcast(podcast, current_user, repository):
        raise HTTPException(status_code=404, detail="Podcast not found")

    site_url = get_site_url(request, config.WEB_BASE_URL)
    episodes = []
    for episode in repository.list_episodes(podcast_id=podcast.id):
        if not can_view_episode(episode, podcast, current_user, repository):
            continue
        data = serialize_episode(
            episode,
            audioUrl=episode_audio_url(episode, repository),
            **episode_links(site_url, episode.id, episode.title),
        )
        episodes.append(enrich_episode_with_artwork(data, episode, podcast))

    extra = {
        "coverArtUrl": podcast_cover_art_url(podcast, repository),
        "rssUrl": get_podcast_rss_url(site_url, podcast.id),
        "episodes": episodes,
    }
    if current_user:
        extra["isSubscribed"] = repository.is_subscribed(current_user.id, podcast.id)
    return serialize_podcast(podcast, **extra)


@router.get("/{podcast_id}/rss")
async def get_podcast_rss(request: Request, podcast_id: str):
    """
    Public RSS 2.0 feed of a podcast.

    Only approved podcasts that are not private are published, and only
    their approved public episodes with a playable audio URL.
    """
    repository = request.app.state.repository
    config = request.app.state.config

    podcast = repository.get_podcast(podcast_id)
    if not podcast or podcast.status != "APPROVED" or podcast.visibility == "PRIVATE":
        return Response(
            content=generate_error_feed("Podcast not found"),
            status_code=404,
            media_type="application/xml",
        )

    try:
        feed_episodes = []
        for episode in repository.list_episodes(podcast_id=podcast.id, status="APPROVED"):
            if episode.visibility != "PUBLIC":
                continue
            audio_url = episode_audio_url(episode, repository)
            if not audio_url:
                logger.debug(f"Skipping episode {episode.id} in feed: no audio URL")
                continue
            feed_episodes.append(FeedEpisode(
                episode, audio_url, episode_cover_art_url(episode, podcast, repository)
            ))

        site_url = get_site_url(request, config.WEB_BASE_URL)
        xml = generate_rss_feed(
            podcast,
            podcast.owner,
            feed_episodes,
            feed_url=get_podcast_rss_url(site_url, podcast.id),
            site_url=site_url,
            cover_art_url=podcast_cover_art_url(podcast, repository),
        )
    except Exception as e:
        logger.error(f"Failed to generate RSS feed for podcast {podcast_id}: {e}", exc_info=True)
        return Response(
            content=generate_error_feed("Failed to generate RSS feed"),
            status_code=500,
            media_type="application/xml",
        )

    if feed_episodes:
        version = _epoch_millis(feed_episodes[0].episode.published_at)
    else:
        version = _epoch_millis(podcast.created_at)

    return Response(
        content=xml,
        media_type=RSS_MEDIA_TYPE,
        headers={
            "Cache-Control": "public, max-age=3600",
            "ETag": f'"{podcast.id}-{version}"',
        },
    )


@router.post("", status_code=201)
async def create_podcast(
    request: Request,
    body: PodcastCreateRequest,
    current_user: User = Depends(get_current_user),
):
    """
    Create a podcast owned by the caller.

    Owners who do not require approval publish straight to APPROVED and
    count as their own approver. Everyone else starts in PENDING_APPROVAL.
    """
    repository = request.app.state.repository

    fields = body.model_dump(exclude={"title", "description"})
    if current_user.requires_approval:
        fields["status"] = "PENDING_APPROVAL"
    else:
        fields.update(
            status="APPROVED",
            approved_at=utcnow(),
            approved_by=current_user.id,
        )

    podcast = repository.create_podcast(
        owner_id=current_user.id,
        title=body.title,
        description=body.description,
        **fields,
    )
    logger.info(f"User {current_user.id} created podcast {podcast.id} ({podcast.status})")
    return serialize_podcast(podcast)


@router.patch("/{podcast_id}")
async def update_podcast(
    request: Request,
    podcast_id: str,
    body: PodcastUpdateRequest,
    current_user: User = Depends(get_current_user),
):
    """Edit podcast metadata. Only the owner or an admin may do this."""
    repository = request.app.state.repository

    podcast = _get_podcast_or_404(repository, podcast_id)
    if not is_owner_or_admin(podcast, current_user):
        raise HTTPException(
            status_code=403, detail="Forbidden - You can only edit your own podcasts"
        )

    updates = body.model_dump(exclude_unset=True)
    if not updates:
        return serialize_podcast(podcast)

    updated = repository.update_podcast(podcast_id, **updates)
    return serialize_podcast(updated)


@router.post("/{podcast_id}/subscribe", status_code=201)
async def subscribe(
    request: Request,
    podcast_id: str,
    current_user: User = Depends(get_current_user),
):
    """Subscribe the caller to a podcast. Subscribing twice is not an error."""
    repository = request.app.state.repository

    podcast = _get_podcast_or_404(repository, podcast_id)
    if not can_view_podcast(podcast, current_user, repository):
        raise HTTPException(status_code=404, detail="Podcast not found")

    subscription = repository.subscribe(current_user.id, podcast_id)
    return {
        "id": subscription.id,
        "userId": subscription.user_id,
        "podcastId": subscription.podcast_id,
        "createdAt": subscription.created_at.isoformat() if subscription.created_at else None,
    }


@router.delete("/{podcast_id}/subscribe", status_code=204)
async def unsubscribe(
    request: Request,
    podcast_id: str,
    current_user: User = Depends(get_current_user),
):
    repository = request.app.state.repository
    repository.unsubscribe(current_user.id, podcast_id)
    return Response(status_code=204)

