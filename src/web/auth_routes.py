"""
Authentication routes for password login.

Provides endpoints for:
- /api/auth/register - Create an account and start a session
- /api/auth/login - Verify credentials and set the session cookie
- /api/auth/logout - Clear the session cookie
- /api/auth/me - Get current user info
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request, Response

from src.db.models import User
from src.db.repository import PodcastHubRepositoryInterface
from src.web.auth import (
    SESSION_COOKIE,
    create_access_token,
    get_current_user,
    hash_password,
    verify_password,
)
from src.web.models import LoginRequest, RegisterRequest
from src.web.rate_limit import limiter, login_rate_limit
from src.web.serializers import serialize_user

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/auth", tags=["authentication"])


def _start_session(response: Response, user: User, config) -> None:
    """Issue a JWT for the user and store it in the httponly session cookie."""
    access_token = create_access_token(
        {"sub": user.id, "username": user.username, "role": user.role}, config
    )

    # Validate and compute cookie max_age
    try:
        expiration_days = int(config.JWT_EXPIRATION_DAYS) if config.JWT_EXPIRATION_DAYS else 7
    except (ValueError, TypeError):
        logger.warning(
            f"Invalid JWT_EXPIRATION_DAYS value: {config.JWT_EXPIRATION_DAYS}, using default 7"
        )
        expiration_days = 7

    # Build cookie kwargs, only include domain if set
    cookie_kwargs = {
        "key": SESSION_COOKIE,
        "value": access_token,
        "max_age": expiration_days * 24 * 60 * 60,
        "httponly": True,
        "secure": config.COOKIE_SECURE,
        "samesite": "lax",
    }
    if config.COOKIE_DOMAIN:
        cookie_kwargs["domain"] = config.COOKIE_DOMAIN

    response.set_cookie(**cookie_kwargs)


@router.post("/register", status_code=201)
async def register(request: Request, response: Response, body: RegisterRequest):
    """
    Create a new account and log it in.

    New accounts are listeners or creators; admin rights are granted by an admin.
    """
    config = request.app.state.config
    repository: PodcastHubRepositoryInterface = request.app.state.repository

    if repository.get_user_by_email(body.email):
        raise HTTPException(status_code=400, detail="Email already registered")
    if repository.get_user_by_username(body.username):
        raise HTTPException(status_code=400, detail="Username already taken")

    user = repository.create_user(
        username=body.username,
        email=body.email,
        password_hash=hash_password(body.password),
        role=body.role,
    )
    if not user:
        raise HTTPException(status_code=400, detail="Email or username already in use")

    _start_session(response, user, config)
    logger.info(f"Registered user_id={user.id} role={user.role}")
    return serialize_user(user)


@router.post("/login")
@limiter.limit(login_rate_limit)
async def login(request: Request, response: Response, body: LoginRequest):
    """Verify email and password, then set the session cookie."""
    config = request.app.state.config
    repository: PodcastHubRepositoryInterface = request.app.state.repository

    user = repository.get_user_by_email(body.email)
    if not user or not verify_password(body.password, user.password_hash):
        raise HTTPException(status_code=401, detail="Invalid email or password")
    if not user.is_active:
        raise HTTPException(status_code=403, detail="Forbidden - Account deactivated")

    _start_session(response, user, config)
    logger.info(f"User logged in: user_id={user.id}")
    return serialize_user(user)


@router.post("/logout")
async def logout(request: Request, response: Response):
    """Clear the session cookie."""
    config = request.app.state.config

    # Build delete_cookie kwargs, only include domain if set
    delete_kwargs = {"key": SESSION_COOKIE}
    if config.COOKIE_DOMAIN:
        delete_kwargs["domain"] = config.COOKIE_DOMAIN

    response.delete_cookie(**delete_kwargs)
    return {"message": "Logged out successfully"}


@router.get("/me")
async def get_current_user_info(current_user: User = Depends(get_current_user)):
    """Return the logged-in user's profile. Requires authentication."""
    return serialize_user(current_user)
