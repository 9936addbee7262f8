"""API routes for user playlists.

Playlists are owned by one user. Public playlists can be read by anyone;
private playlists answer 404 to everyone but their owner.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request, Response

from src.db.models import Playlist, User
from src.db.repository import PodcastHubRepositoryInterface
from src.services.access import can_view_episode
from src.services.artwork import enrich_episode_with_artwork, episode_audio_url
from src.web.auth import get_current_user, get_optional_user
from src.web.models import (
    PlaylistAddEpisodeRequest,
    PlaylistCreateRequest,
    PlaylistReorderRequest,
    PlaylistUpdateRequest,
)
from src.web.serializers import serialize_episode, serialize_playlist

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/playlists", tags=["playlists"])


def _get_owned_playlist(
    repository: PodcastHubRepositoryInterface, playlist_id: str, user: User
) -> Playlist:
    """Load a playlist for modification: 404 if missing, 403 if not the caller's."""
    playlist = repository.get_playlist(playlist_id)
    if not playlist:
        raise HTTPException(status_code=404, detail="Playlist not found")
    if playlist.user_id != user.id:
        raise HTTPException(status_code=403, detail="Forbidden")
    return playlist


@router.get("")
async def list_my_playlists(
    request: Request,
    current_user: User = Depends(get_current_user),
):
    repository = request.app.state.repository
    return [
        serialize_playlist(playlist)
        for playlist in repository.list_user_playlists(current_user.id)
    ]


@router.get("/public")
async def list_public_playlists(request: Request):
    repository = request.app.state.repository
    return [serialize_playlist(playlist) for playlist in repository.list_public_playlists()]


@router.get("/{playlist_id}")
async def get_playlist(
    request: Request,
    playlist_id: str,
    current_user: Optional[User] = Depends(get_optional_user),
):
    """
    Get a playlist with its episodes in playlist order.

    Episodes the caller may not see are left out.
    """
    repository = request.app.state.repository

    playlist = repository.get_playlist(playlist_id)
    if not playlist:
        raise HTTPException(status_code=404, detail="Playlist not found")
    if not playlist.is_public and (current_user is None or playlist.user_id != current_user.id):
        raise HTTPException(status_code=404, detail="Playlist not found")

    episodes = []
    for episode in repository.get_playlist_episodes(playlist_id):
        if not can_view_episode(episode, episode.podcast, current_user, repository):
            continue
        data = serialize_episode(episode, audioUrl=episode_audio_url(episode, repository))
        episodes.append(enrich_episode_with_artwork(data, episode, episode.podcast))

    return serialize_playlist(playlist, episodes=episodes)


@router.post("", status_code=201)
async def create_playlist(
    request: Request,
    body: PlaylistCreateRequest,
    current_user: User = Depends(get_current_user),
):
    repository = request.app.state.repository
    playlist = repository.create_playlist(
        user_id=current_user.id,
        name=body.name,
        description=body.description,
        is_public=body.is_public,
    )
    return serialize_playlist(playlist)


@router.patch("/{playlist_id}")
async def update_playlist(
    request: Request,
    playlist_id: str,
    body: PlaylistUpdateRequest,
    current_user: User = Depends(get_current_user),
):
    repository = request.app.state.repository
    _get_owned_playlist(repository, playlist_id, current_user)

    updated = repository.update_playlist(playlist_id, **body.model_dump(exclude_unset=True))
    return serialize_playlist(updated)


@router.delete("/{playlist_id}", status_code=204)
async def delete_playlist(
    request: Request,
    playlist_id: str,
    current_user: User = Depends(get_current_user),
):
    repository = request.app.state.repository
    _get_owned_playlist(repository, playlist_id, current_user)

    repository.delete_playlist(playlist_id)
    return Response(status_code=204)


@router.post("/{playlist_id}/episodes", status_code=201)
async def add_episode(
    request: Request,
    playlist_id: str,
    body: PlaylistAddEpisodeRequest,
    current_user: User = Depends(get_current_user),
):
    """
    Append an episode to the end of a playlist.

    Raises:
        HTTPException: 400 without an episode ID, 404 for an unknown
            playlist or episode, 409 if the episode is already listed.
    """
    repository = request.app.state.repository

    if not body.episode_id:
        raise HTTPException(status_code=400, detail="Episode ID is required")

    _get_owned_playlist(repository, playlist_id, current_user)

    episode = repository.get_episode(body.episode_id)
    if not episode or not can_view_episode(episode, episode.podcast, current_user, repository):
        raise HTTPException(status_code=404, detail="Episode not found")

    if repository.is_episode_in_playlist(playlist_id, body.episode_id):
        raise HTTPException(status_code=409, detail="Episode already in playlist")

    entry = repository.add_episode_to_playlist(playlist_id, body.episode_id)
    if entry is None:
        # Lost a race with a concurrent add of the same episode
        raise HTTPException(status_code=409, detail="Episode already in playlist")

    return {
        "id": entry.id,
        "playlistId": entry.playlist_id,
        "episodeId": entry.episode_id,
        "position": entry.position,
        "addedAt": entry.added_at.isoformat() if entry.added_at else None,
    }


@router.delete("/{playlist_id}/episodes/{episode_id}", status_code=204)
async def remove_episode(
    request: Request,
    playlist_id: str,
    episode_id: str,
    current_user: User = Depends(get_current_user),
):
    repository = request.app.state.repository
    _get_owned_playlist(repository, playlist_id, current_user)

    repository.remove_episode_from_playlist(playlist_id, episode_id)
    return Response(status_code=204)


@router.put("/{playlist_id}/reorder", status_code=204)
async def reorder_episodes(
    request: Request,
    playlist_id: str,
    body: PlaylistReorderRequest,
    current_user: User = Depends(get_current_user),
):
    """Set the playlist order. `episodeIds` lists episodes in their new order."""
    repository = request.app.state.repository
    _get_owned_playlist(repository, playlist_id, current_user)

    repository.reorder_playlist_episodes(playlist_id, body.episode_ids)
    return Response(status_code=204)
