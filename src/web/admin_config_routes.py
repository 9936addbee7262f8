"""
Admin routes for platform configuration: SMTP email settings and Google
Drive storage settings.

At most one configuration of each kind is active. Secrets are write-only:
SMTP passwords come back masked and Drive service account keys are
reported only as present or absent.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request, Response

from src.db.models import User
from src.db.repository import PodcastHubRepositoryInterface
from src.web.auth import get_current_admin
from src.web.models import (
    DriveConfigCreateRequest,
    DriveConfigUpdateRequest,
    EmailConfigCreateRequest,
    EmailConfigUpdateRequest,
)
from src.web.serializers import MASKED_SECRET, serialize_drive_config, serialize_email_config

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/admin", tags=["admin-config"])

EMAIL_NOT_FOUND = "Email configuration not found"
DRIVE_NOT_FOUND = "Google Drive configuration not found"


# --- Email ---


@router.get("/email-config")
async def list_email_configs(
    request: Request,
    current_admin: User = Depends(get_current_admin)
):
    repository: PodcastHubRepositoryInterface = request.app.state.repository
    return [serialize_email_config(c) for c in repository.list_email_configs()]


@router.get("/email-config/active")
async def get_active_email_config(
    request: Request,
    current_admin: User = Depends(get_current_admin)
):
    repository: PodcastHubRepositoryInterface = request.app.state.repository
    config = repository.get_active_email_config()
    if not config:
        raise HTTPException(status_code=404, detail="No active email configuration found")
    return serialize_email_config(config)


@router.post("/email-config", status_code=201)
async def create_email_config(
    request: Request,
    body: EmailConfigCreateRequest,
    current_admin: User = Depends(get_current_admin)
):
    """Store SMTP settings. With `isActive` true, every other config is deactivated."""
    repository: PodcastHubRepositoryInterface = request.app.state.repository
    config = repository.create_email_config(**body.model_dump())
    logger.info(f"Admin user_id={current_admin.id} created email config {config.id}")
    return serialize_email_config(config)


@router.patch("/email-config/{config_id}")
async def update_email_config(
    request: Request,
    config_id: str,
    body: EmailConfigUpdateRequest,
    current_admin: User = Depends(get_current_admin)
):
    """
    Update SMTP settings.

    A password equal to the mask shown in responses means "unchanged",
    so clients can send back what they received.
    """
    repository: PodcastHubRepositoryInterface = request.app.state.repository

    updates = body.model_dump(exclude_unset=True)
    if updates.get("smtp_password") == MASKED_SECRET:
        del updates["smtp_password"]

    config = repository.update_email_config(config_id, **updates)
    if not config:
        raise HTTPException(status_code=404, detail=EMAIL_NOT_FOUND)

    logger.info(f"Admin user_id={current_admin.id} updated email config {config_id}")
    return serialize_email_config(config)


@router.patch("/email-config/{config_id}/activate")
async def activate_email_config(
    request: Request,
    config_id: str,
    current_admin: User = Depends(get_current_admin)
):
    repository: PodcastHubRepositoryInterface = request.app.state.repository
    config = repository.activate_email_config(config_id)
    if not config:
        raise HTTPException(status_code=404, detail=EMAIL_NOT_FOUND)
    logger.info(f"Admin user_id={current_admin.id} activated email config {config_id}")
    return serialize_email_config(config)


@router.delete("/email-config/{config_id}", status_code=204)
async def delete_email_config(
    request: Request,
    config_id: str,
    current_admin: User = Depends(get_current_admin)
):
    repository: PodcastHubRepositoryInterface = request.app.state.repository
    if not repository.delete_email_config(config_id):
        raise HTTPException(status_code=404, detail=EMAIL_NOT_FOUND)
    logger.info(f"Admin user_id={current_admin.id} deleted email config {config_id}")
    return Response(status_code=204)


# --- Google Drive ---


@router.get("/drive-config")
async def list_drive_configs(
    request: Request,
    current_admin: User = Depends(get_current_admin)
):
    repository: PodcastHubRepositoryInterface = request.app.state.repository
    return [serialize_drive_config(c) for c in repository.list_drive_configs()]


@router.get("/drive-config/active")
async def get_active_drive_config(
    request: Request,
    current_admin: User = Depends(get_current_admin)
):
    repository: PodcastHubRepositoryInterface = request.app.state.repository
    config = repository.get_active_drive_config()
    if not config:
        raise HTTPException(status_code=404, detail="No active Google Drive configuration found")
    return serialize_drive_config(config)


@router.post("/drive-config", status_code=201)
async def create_drive_config(
    request: Request,
    body: DriveConfigCreateRequest,
    current_admin: User = Depends(get_current_admin)
):
    """Store Drive settings. A new config always becomes the active one."""
    repository: PodcastHubRepositoryInterface = request.app.state.repository
    config = repository.create_drive_config(**body.model_dump())
    logger.info(f"Admin user_id={current_admin.id} created drive config {config.id}")
    return serialize_drive_config(config)


@router.patch("/drive-config/{config_id}")
async def update_drive_config(
    request: Request,
    config_id: str,
    body: DriveConfigUpdateRequest,
    current_admin: User = Depends(get_current_admin)
):
    """
    Update Drive settings.

    Blank strings are ignored so a form can leave the key field empty to
    keep the stored key. The only active config cannot be deactivated.
    """
    repository: PodcastHubRepositoryInterface = request.app.state.repository

    existing = repository.get_drive_config(config_id)
    if not existing:
        raise HTTPException(status_code=404, detail=DRIVE_NOT_FOUND)

    if body.is_active is False and existing.is_active:
        active = [c for c in repository.list_drive_configs() if c.is_active]
        if len(active) == 1:
            raise HTTPException(
                status_code=400,
                detail="Cannot deactivate the only active Google Drive configuration",
            )

    updates = {
        key: value
        for key, value in body.model_dump(exclude_unset=True).items()
        if value is not None and not (isinstance(value, str) and not value.strip())
    }

    config = repository.update_drive_config(config_id, **updates)
    logger.info(f"Admin user_id={current_admin.id} updated drive config {config_id}")
    return serialize_drive_config(config)


@router.patch("/drive-config/{config_id}/activate")
async def activate_drive_config(
    request: Request,
    config_id: str,
    current_admin: User = Depends(get_current_admin)
):
    repository: PodcastHubRepositoryInterface = request.app.state.repository
    config = repository.activate_drive_config(config_id)
    if not config:
        raise HTTPException(status_code=404, detail=DRIVE_NOT_FOUND)
    logger.info(f"Admin user_id={current_admin.id} activated drive config {config_id}")
    return serialize_drive_config(config)


@router.delete("/drive-config/{config_id}", status_code=204)
async def delete_drive_config(
    request: Request,
    config_id: str,
    current_admin: User = Depends(get_current_admin)
):
    repository: PodcastHubRepositoryInterface = request.app.state.repository
    if not repository.delete_drive_config(config_id):
        raise HTTPException(status_code=404, detail=DRIVE_NOT_FOUND)
    logger.info(f"Admin user_id={current_admin.id} deleted drive config {config_id}")
    return Response(status_code=204)
