"""API routes for content invitations.

An invitation lets one email address see an UNLISTED or PRIVATE podcast
or episode. Only the podcast owner or an admin can invite.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request, Response

from src.db.models import Podcast, User
from src.db.repository import PodcastHubRepositoryInterface
from src.services.access import is_owner_or_admin
from src.web.auth import get_current_user, is_admin
from src.web.models import ContentInvitationCreateRequest, InvitationCreateRequest
from src.web.serializers import serialize_invitation

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api", tags=["invitations"])


def _podcast_for_invite(
    repository: PodcastHubRepositoryInterface, podcast_id: str, user: User
) -> Podcast:
    podcast = repository.get_podcast(podcast_id)
    if not podcast:
        raise HTTPException(status_code=404, detail="Podcast not found")
    if not is_owner_or_admin(podcast, user):
        raise HTTPException(
            status_code=403, detail="Forbidden - Only the podcast owner can invite users"
        )
    return podcast


def _podcast_for_episode_invite(
    repository: PodcastHubRepositoryInterface, episode_id: str, user: User
) -> Podcast:
    episode = repository.get_episode(episode_id)
    if not episode:
        raise HTTPException(status_code=404, detail="Episode not found")
    podcast = episode.podcast
    if not podcast:
        raise HTTPException(status_code=404, detail="Podcast not found")
    if not is_owner_or_admin(podcast, user):
        raise HTTPException(
            status_code=403,
            detail="Forbidden - Only the podcast owner can invite users to episodes",
        )
    return podcast


@router.post("/podcasts/{podcast_id}/invitations", status_code=201)
async def invite_to_podcast(
    request: Request,
    podcast_id: str,
    body: InvitationCreateRequest,
    current_user: User = Depends(get_current_user),
):
    repository = request.app.state.repository
    _podcast_for_invite(repository, podcast_id, current_user)

    invitation = repository.create_invitation(
        email=body.email,
        invited_by=current_user.id,
        podcast_id=podcast_id,
        expires_at=body.expires_at,
    )
    return serialize_invitation(invitation)


@router.get("/podcasts/{podcast_id}/invitations")
async def list_podcast_invitations(
    request: Request,
    podcast_id: str,
    current_user: User = Depends(get_current_user),
):
    repository = request.app.state.repository
    _podcast_for_invite(repository, podcast_id, current_user)
    return [serialize_invitation(i) for i in repository.list_podcast_invitations(podcast_id)]


@router.post("/episodes/{episode_id}/invitations", status_code=201)
async def invite_to_episode(
    request: Request,
    episode_id: str,
    body: InvitationCreateRequest,
    current_user: User = Depends(get_current_user),
):
    repository = request.app.state.repository
    _podcast_for_episode_invite(repository, episode_id, current_user)

    invitation = repository.create_invitation(
        email=body.email,
        invited_by=current_user.id,
        episode_id=episode_id,
        expires_at=body.expires_at,
    )
    return serialize_invitation(invitation)


@router.get("/episodes/{episode_id}/invitations")
async def list_episode_invitations(
    request: Request,
    episode_id: str,
    current_user: User = Depends(get_current_user),
):
    repository = request.app.state.repository
    _podcast_for_episode_invite(repository, episode_id, current_user)
    return [serialize_invitation(i) for i in repository.list_episode_invitations(episode_id)]


@router.post("/invitations", status_code=201)
async def create_invitation(
    request: Request,
    body: ContentInvitationCreateRequest,
    current_user: User = Depends(get_current_user),
):
    """Invite to the podcast or the episode named in the body (exactly one of them)."""
    repository = request.app.state.repository

    if body.podcast_id:
        _podcast_for_invite(repository, body.podcast_id, current_user)
    else:
        _podcast_for_episode_invite(repository, body.episode_id, current_user)

    invitation = repository.create_invitation(
        email=body.email,
        invited_by=current_user.id,
        podcast_id=body.podcast_id,
        episode_id=body.episode_id,
        expires_at=body.expires_at,
    )
    return serialize_invitation(invitation)


@router.delete("/invitations/{invitation_id}", status_code=204)
async def delete_invitation(
    request: Request,
    invitation_id: str,
    current_user: User = Depends(get_current_user),
):
    """Revoke an invitation. Only its creator or an admin may do this."""
    repository = request.app.state.repository

    invitation = repository.get_invitation(invitation_id)
    if not invitation:
        raise HTTPException(status_code=404, detail="Invitation not found")
    if invitation.invited_by != current_user.id and not is_admin(current_user):
        raise HTTPException(
            status_code=403,
            detail="Forbidden - You can only delete invitations you created",
        )

    repository.delete_invitation(invitation_id)
    return Response(status_code=204)
