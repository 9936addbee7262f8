"""
Admin routes for dashboard stats, user management and content moderation.

All routes require admin authentication via the get_current_admin dependency.
Bulk endpoints accept 1 to 50 IDs and report per-item success and failure.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response

from src.db.models import User
from src.db.repository import BulkOperationResult, PodcastHubRepositoryInterface
from src.services.artwork import episode_audio_url, podcast_cover_art_url
from src.web.auth import get_current_admin
from src.web.models import (
    BulkIdsRequest,
    BulkUpdateActiveRequest,
    BulkUpdateRoleRequest,
    BulkUpdateStatusRequest,
    ModerationStatus,
    UpdateStatusRequest,
    UpdateUserActiveRequest,
    UpdateUserApprovalRequest,
    UpdateUserRoleRequest,
)
from src.web.serializers import serialize_episode, serialize_owner, serialize_podcast, serialize_user

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/admin", tags=["admin"])


def _bulk_response(verb: str, noun: str, result: BulkOperationResult) -> dict:
    return {
        "message": f"{verb} {len(result.success_ids)} {noun}(s)",
        **result.to_dict(),
    }


def _get_user_or_404(repository: PodcastHubRepositoryInterface, user_id: str) -> User:
    user = repository.get_user(user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user


@router.get("/stats")
async def get_admin_stats(
    request: Request,
    current_admin: User = Depends(get_current_admin)
):
    """Counts of users, podcasts, episodes, playlists and subscriptions for the dashboard."""
    repository: PodcastHubRepositoryInterface = request.app.state.repository
    return repository.get_admin_stats()


# --- Users ---


@router.get("/users")
async def list_users(
    request: Request,
    current_admin: User = Depends(get_current_admin)
):
    """List all users, newest first. Password hashes are never returned."""
    repository: PodcastHubRepositoryInterface = request.app.state.repository
    return [serialize_user(user) for user in repository.list_users()]


@router.patch("/users/{user_id}/role")
async def update_user_role(
    request: Request,
    user_id: str,
    body: UpdateUserRoleRequest,
    current_admin: User = Depends(get_current_admin)
):
    """
    Change a user's role.

    The last remaining admin cannot be demoted, to prevent lockout.
    """
    repository: PodcastHubRepositoryInterface = request.app.state.repository

    user = _get_user_or_404(repository, user_id)
    if user.role == "ADMIN" and body.role != "ADMIN" and repository.count_admins() <= 1:
        raise HTTPException(status_code=400, detail="Cannot demote the last admin")

    updated = repository.update_user(user_id, role=body.role)
    logger.info(f"Admin user_id={current_admin.id} set role of user_id={user_id} to {body.role}")
    return serialize_user(updated)


@router.patch("/users/{user_id}/requires-approval")
async def update_user_requires_approval(
    request: Request,
    user_id: str,
    body: UpdateUserApprovalRequest,
    current_admin: User = Depends(get_current_admin)
):
    repository: PodcastHubRepositoryInterface = request.app.state.repository

    _get_user_or_404(repository, user_id)
    updated = repository.update_user(user_id, requires_approval=body.requires_approval)
    logger.info(
        f"Admin user_id={current_admin.id} set requires_approval={body.requires_approval} "
        f"for user_id={user_id}"
    )
    return serialize_user(updated)


@router.patch("/users/{user_id}/active")
async def update_user_active(
    request: Request,
    user_id: str,
    body: UpdateUserActiveRequest,
    current_admin: User = Depends(get_current_admin)
):
    """Activate or deactivate an account. Admins cannot deactivate themselves."""
    repository: PodcastHubRepositoryInterface = request.app.state.repository

    _get_user_or_404(repository, user_id)
    if user_id == current_admin.id and not body.is_active:
        raise HTTPException(status_code=400, detail="Cannot deactivate your own account")

    updated = repository.update_user(user_id, is_active=body.is_active)
    logger.info(f"Admin user_id={current_admin.id} set is_active={body.is_active} for user_id={user_id}")
    return serialize_user(updated)


@router.post("/users/bulk-update-role")
async def bulk_update_users_role(
    request: Request,
    body: BulkUpdateRoleRequest,
    current_admin: User = Depends(get_current_admin)
):
    repository: PodcastHubRepositoryInterface = request.app.state.repository
    result = repository.bulk_update_users_role(body.ids, body.role, acting_user_id=current_admin.id)
    logger.info(f"Admin user_id={current_admin.id} bulk role update to {body.role}")
    return _bulk_response("Updated", "user", result)


@router.post("/users/bulk-update-active")
async def bulk_update_users_active(
    request: Request,
    body: BulkUpdateActiveRequest,
    current_admin: User = Depends(get_current_admin)
):
    repository: PodcastHubRepositoryInterface = request.app.state.repository
    result = repository.bulk_update_users_active(
        body.ids, body.is_active, acting_user_id=current_admin.id
    )
    logger.info(f"Admin user_id={current_admin.id} bulk is_active={body.is_active}")
    return _bulk_response("Updated", "user", result)


@router.post("/users/bulk-delete")
async def bulk_delete_users(
    request: Request,
    body: BulkIdsRequest,
    current_admin: User = Depends(get_current_admin)
):
    repository: PodcastHubRepositoryInterface = request.app.state.repository
    result = repository.bulk_delete_users(body.ids, acting_user_id=current_admin.id)
    logger.info(f"Admin user_id={current_admin.id} bulk deleted {len(result.success_ids)} users")
    return _bulk_response("Deleted", "user", result)


# --- Podcast moderation ---


@router.get("/podcasts")
async def list_podcasts(
    request: Request,
    status: Optional[ModerationStatus] = None,
    owner_id: Optional[str] = Query(default=None, alias="ownerId"),
    search: Optional[str] = None,
    current_admin: User = Depends(get_current_admin)
):
    """List podcasts in every state, optionally filtered by status, owner and search text."""
    repository: PodcastHubRepositoryInterface = request.app.state.repository

    podcasts = repository.list_podcasts(owner_id=owner_id, status=status, search=search)
    return [
        serialize_podcast(
            podcast,
            coverArtUrl=podcast_cover_art_url(podcast, repository),
            episodeCount=repository.count_episodes(podcast.id),
        )
        for podcast in podcasts
    ]


@router.patch("/podcasts/{podcast_id}/status")
async def update_podcast_status(
    request: Request,
    podcast_id: str,
    body: UpdateStatusRequest,
    current_admin: User = Depends(get_current_admin)
):
    repository: PodcastHubRepositoryInterface = request.app.state.repository

    updated = repository.update_podcast_status(podcast_id, body.status, current_admin.id)
    if not updated:
        raise HTTPException(status_code=404, detail="Podcast not found")

    logger.info(f"Admin user_id={current_admin.id} set podcast {podcast_id} status to {body.status}")
    return serialize_podcast(updated)


@router.delete("/podcasts/{podcast_id}", status_code=204)
async def delete_podcast(
    request: Request,
    podcast_id: str,
    current_admin: User = Depends(get_current_admin)
):
    """Delete a podcast with its episodes, subscriptions and invitations."""
    repository: PodcastHubRepositoryInterface = request.app.state.repository

    if not repository.delete_podcast(podcast_id):
        raise HTTPException(status_code=404, detail="Podcast not found")

    logger.info(f"Admin user_id={current_admin.id} deleted podcast {podcast_id}")
    return Response(status_code=204)


@router.post("/podcasts/bulk-update-status")
async def bulk_update_podcasts_status(
    request: Request,
    body: BulkUpdateStatusRequest,
    current_admin: User = Depends(get_current_admin)
):
    repository: PodcastHubRepositoryInterface = request.app.state.repository
    result = repository.bulk_update_podcasts_status(body.ids, body.status, current_admin.id)
    return _bulk_response("Updated", "podcast", result)


@router.post("/podcasts/bulk-delete")
async def bulk_delete_podcasts(
    request: Request,
    body: BulkIdsRequest,
    current_admin: User = Depends(get_current_admin)
):
    repository: PodcastHubRepositoryInterface = request.app.state.repository
    result = repository.bulk_delete_podcasts(body.ids)
    logger.info(f"Admin user_id={current_admin.id} bulk deleted {len(result.success_ids)} podcasts")
    return _bulk_response("Deleted", "podcast", result)


# --- Episode moderation ---


@router.get("/episodes")
async def list_episodes(
    request: Request,
    status: Optional[ModerationStatus] = None,
    podcast_id: Optional[str] = Query(default=None, alias="podcastId"),
    owner_id: Optional[str] = Query(default=None, alias="ownerId"),
    search: Optional[str] = None,
    current_admin: User = Depends(get_current_admin)
):
    """List episodes in every state with their podcast and owner."""
    repository: PodcastHubRepositoryInterface = request.app.state.repository

    episodes = repository.list_episodes(
        podcast_id=podcast_id, status=status, search=search, owner_id=owner_id
    )
    return [
        serialize_episode(
            episode,
            audioUrl=episode_audio_url(episode, repository),
            podcast={
                "id": episode.podcast.id,
                "title": episode.podcast.title,
                "owner": serialize_owner(episode.podcast.owner),
            },
        )
        for episode in episodes
    ]


@router.patch("/episodes/{episode_id}/status")
async def update_episode_status(
    request: Request,
    episode_id: str,
    body: UpdateStatusRequest,
    current_admin: User = Depends(get_current_admin)
):
    repository: PodcastHubRepositoryInterface = request.app.state.repository

    updated = repository.update_episode_status(episode_id, body.status, current_admin.id)
    if not updated:
        raise HTTPException(status_code=404, detail="Episode not found")

    logger.info(f"Admin user_id={current_admin.id} set episode {episode_id} status to {body.status}")
    return serialize_episode(updated)


@router.delete("/episodes/{episode_id}", status_code=204)
async def delete_episode(
    request: Request,
    episode_id: str,
    current_admin: User = Depends(get_current_admin)
):
    repository: PodcastHubRepositoryInterface = request.app.state.repository

    if not repository.delete_episode(episode_id):
        raise HTTPException(status_code=404, detail="Episode not found")

    logger.info(f"Admin user_id={current_admin.id} deleted episode {episode_id}")
    return Response(status_code=204)


@router.post("/episodes/bulk-update-status")
async def bulk_update_episodes_status(
    request: Request,
    body: BulkUpdateStatusRequest,
    current_admin: User = Depends(get_current_admin)
):
    repository: PodcastHubRepositoryInterface = request.app.state.repository
    result = repository.bulk_update_episodes_status(body.ids, body.status, current_admin.id)
    return _bulk_response("Updated", "episode", result)


@router.post("/episodes/bulk-delete")
async def bulk_delete_episodes(
    request: Request,
    body: BulkIdsRequest,
    current_admin: User = Depends(get_current_admin)
):
    repository: PodcastHubRepositoryInterface = request.app.state.repository
    result = repository.bulk_delete_episodes(body.ids)
    logger.info(f"Admin user_id={current_admin.id} bulk deleted {len(result.success_ids)} episodes")
    return _bulk_response("Deleted", "episode", result)
