"""Emergency admin password reset.

Unauthenticated by necessity: it exists for operators who are locked out.
It only works when ADMIN_PASSWORD is set in the environment, and it only
ever sets the ADMIN_EMAIL account's password to that value.
"""

import logging

from fastapi import APIRouter, HTTPException, Request

from src.services.admin_bootstrap import AdminResetError, reset_admin_password
from src.web.rate_limit import limiter

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/emergency", tags=["emergency"])


@router.post("/reset-admin-password")
@limiter.limit("5/hour")
async def emergency_reset_admin_password(request: Request):
    try:
        return reset_admin_password(request.app.state.repository, request.app.state.config)
    except AdminResetError as e:
        logger.warning(f"Emergency reset refused: {e.message}")
        raise HTTPException(status_code=e.status_code, detail=e.message)
