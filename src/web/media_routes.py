"""API routes for media asset metadata.

Files are placed in storage by the upload pipeline; these endpoints
register, read and remove the metadata that podcasts and episodes
reference through `coverArtAssetId` and `audioAssetId`.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request, Response

from src.db.models import User
from src.web.auth import get_current_user, is_admin
from src.web.models import MediaAssetCreateRequest
from src.web.serializers import serialize_media_asset

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/media-assets", tags=["media"])


@router.post("", status_code=201)
async def create_media_asset(
    request: Request,
    body: MediaAssetCreateRequest,
    current_user: User = Depends(get_current_user),
):
    """Register a stored file. The podcast, when given, must belong to the caller."""
    repository = request.app.state.repository

    if body.podcast_id:
        podcast = repository.get_podcast(body.podcast_id)
        if not podcast:
            raise HTTPException(status_code=404, detail="Podcast not found")
        if podcast.owner_id != current_user.id and not is_admin(current_user):
            raise HTTPException(status_code=403, detail="Forbidden")

    if body.episode_id:
        episode = repository.get_episode(body.episode_id)
        if not episode:
            raise HTTPException(status_code=404, detail="Episode not found")
        if episode.podcast.owner_id != current_user.id and not is_admin(current_user):
            raise HTTPException(status_code=403, detail="Forbidden")

    fields = body.model_dump(exclude={"type", "storage_key", "mime_type", "size_bytes"})
    asset = repository.create_media_asset(
        owner_id=current_user.id,
        type=body.type,
        storage_key=body.storage_key,
        mime_type=body.mime_type,
        size_bytes=body.size_bytes,
        **fields,
    )
    return serialize_media_asset(asset)


@router.get("/{asset_id}")
async def get_media_asset(
    request: Request,
    asset_id: str,
    current_user: User = Depends(get_current_user),
):
    repository = request.app.state.repository

    asset = repository.get_media_asset(asset_id)
    if not asset:
        raise HTTPException(status_code=404, detail="Media asset not found")
    if asset.visibility != "PUBLIC" and asset.owner_id != current_user.id and not is_admin(current_user):
        raise HTTPException(status_code=404, detail="Media asset not found")
    return serialize_media_asset(asset)


@router.delete("/{asset_id}", status_code=204)
async def delete_media_asset(
    request: Request,
    asset_id: str,
    current_user: User = Depends(get_current_user),
):
    repository = request.app.state.repository

    asset = repository.get_media_asset(asset_id)
    if not asset:
        raise HTTPException(status_code=404, detail="Media asset not found")
    if asset.owner_id != current_user.id and not is_admin(current_user):
        raise HTTPException(status_code=403, detail="Forbidden")

    repository.delete_media_asset(asset_id)
    logger.info(f"User {current_user.id} deleted media asset {asset_id}")
    return Response(status_code=204)
