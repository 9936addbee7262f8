"""User routes for the caller's own content, library and profile.

Provides API endpoints for:
- /api/my-podcasts - Podcasts owned by the caller
- /api/library - Podcasts the caller is subscribed to
- /api/profile - View and update the caller's profile and password
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request

from src.db.models import User
from src.services.artwork import podcast_cover_art_url
from src.web.auth import get_current_user, hash_password, verify_password
from src.web.models import PasswordChangeRequest, ProfileUpdateRequest
from src.web.serializers import serialize_podcast, serialize_user

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api", tags=["user"])


@router.get("/my-podcasts")
async def get_my_podcasts(
    request: Request,
    current_user: User = Depends(get_current_user),
):
    """List podcasts owned by the caller in any moderation state, with episode counts."""
    repository = request.app.state.repository

    return [
        serialize_podcast(
            podcast,
            coverArtUrl=podcast_cover_art_url(podcast, repository),
            episodeCount=repository.count_episodes(podcast.id),
        )
        for podcast in repository.list_podcasts(owner_id=current_user.id)
    ]


@router.get("/library")
async def get_library(
    request: Request,
    current_user: User = Depends(get_current_user),
):
    """List podcasts the caller is subscribed to, most recent subscription first."""
    repository = request.app.state.repository

    return [
        serialize_podcast(
            podcast,
            coverArtUrl=podcast_cover_art_url(podcast, repository),
            isSubscribed=True,
        )
        for podcast in repository.get_user_library(current_user.id)
    ]


@router.get("/profile")
async def get_profile(current_user: User = Depends(get_current_user)):
    return serialize_user(current_user)


@router.patch("/profile")
async def update_profile(
    request: Request,
    body: ProfileUpdateRequest,
    current_user: User = Depends(get_current_user),
):
    """
    Update the caller's profile.

    Username and email must stay unique. Empty strings clear the avatar
    and website.
    """
    repository = request.app.state.repository

    updates = body.model_dump(exclude_unset=True)
    if updates.get("username"):
        existing = repository.get_user_by_username(updates["username"])
        if existing and existing.id != current_user.id:
            raise HTTPException(status_code=400, detail="Username already taken")
    if updates.get("email"):
        existing = repository.get_user_by_email(updates["email"])
        if existing and existing.id != current_user.id:
            raise HTTPException(status_code=400, detail="Email already in use")

    # None would violate NOT NULL on username/email
    updates = {
        key: value for key, value in updates.items()
        if value is not None or key not in ("username", "email")
    }
    if not updates:
        return serialize_user(current_user)

    updated = repository.update_user(current_user.id, **updates)
    if not updated:
        raise HTTPException(status_code=404, detail="User not found")

    logger.info(f"User {current_user.id} updated profile: {sorted(updates)}")
    return serialize_user(updated)


@router.patch("/profile/password")
async def change_password(
    request: Request,
    body: PasswordChangeRequest,
    current_user: User = Depends(get_current_user),
):
    """Change the caller's password after checking the current one."""
    repository = request.app.state.repository

    if not verify_password(body.current_password, current_user.password_hash):
        raise HTTPException(status_code=401, detail="Current password is incorrect")

    repository.update_user(current_user.id, password_hash=hash_password(body.new_password))
    logger.info(f"User {current_user.id} changed password")
    return {"message": "Password updated successfully"}
