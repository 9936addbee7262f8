"""
Authentication module for password login and JWT session management.

This module provides:
- bcrypt password hashing
- JWT token creation and verification
- FastAPI dependencies for route protection
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
from fastapi import Cookie, HTTPException, Request
from jose import JWTError, jwt

from src.config import Config
from src.db.models import User

logger = logging.getLogger(__name__)

SESSION_COOKIE = "podcasthub_session"


def hash_password(password: str) -> str:
    """Hash a plaintext password with bcrypt."""
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """Check a plaintext password against a stored bcrypt hash."""
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # Malformed hash in the database
        logger.warning("Stored password hash could not be parsed")
        return False


def is_admin(user: Optional[User]) -> bool:
    return user is not None and user.role == "ADMIN"


def create_access_token(user_data: dict, config: Config) -> str:
    """
    Create a JWT access token for the authenticated user.

    Args:
        user_data: User information to encode in the token.
            Expected keys: sub (user_id), username, role.
        config: Application configuration with JWT settings.

    Returns:
        str: Encoded JWT token.

    Raises:
        ValueError: If JWT_SECRET_KEY is not configured or algorithm is invalid.
    """
    if not config.JWT_SECRET_KEY:
        raise ValueError("JWT_SECRET_KEY must be configured")

    # Validate algorithm is not 'none' (security vulnerability)
    if config.JWT_ALGORITHM.lower() == "none":
        raise ValueError("JWT algorithm 'none' is not allowed")

    expire = datetime.now(timezone.utc) + timedelta(days=config.JWT_EXPIRATION_DAYS)
    to_encode = {
        **user_data,
        "exp": expire,
        "iat": datetime.now(timezone.utc)
    }
    return jwt.encode(to_encode, config.JWT_SECRET_KEY, algorithm=config.JWT_ALGORITHM)


def verify_token(token: str, config: Config) -> Optional[dict]:
    """
    Verify a JWT token and return its payload.

    Returns:
        Optional[dict]: Token payload if valid, None otherwise.
    """
    try:
        payload = jwt.decode(
            token,
            config.JWT_SECRET_KEY,
            algorithms=[config.JWT_ALGORITHM]
        )
        return payload
    except JWTError as e:
        logger.warning(f"JWT verification failed: {e}")
        return None


def _load_session_user(request: Request, token: Optional[str]) -> Optional[User]:
    """Resolve the session cookie to a database user, or None."""
    if not token:
        return None

    user_data = verify_token(token, request.app.state.config)
    if not user_data:
        return None

    # Validate user_id from token before DB lookup
    user_id = user_data.get("sub")
    if not user_id or not isinstance(user_id, str):
        return None

    return request.app.state.repository.get_user(user_id)


async def get_current_user(
    request: Request,
    podcasthub_session: Optional[str] = Cookie(default=None)
) -> User:
    """
    FastAPI dependency to get the current authenticated user.

    The user is loaded from the database on every request so that role
    changes and deactivation take effect immediately.

    Raises:
        HTTPException: 401 if not authenticated, 403 if the account is deactivated.
    """
    user = _load_session_user(request, podcasthub_session)
    if not user:
        raise HTTPException(status_code=401, detail="Unauthorized - Please login")
    if not user.is_active:
        raise HTTPException(status_code=403, detail="Forbidden - Account deactivated")
    return user


async def get_optional_user(
    request: Request,
    podcasthub_session: Optional[str] = Cookie(default=None)
) -> Optional[User]:
    """
    FastAPI dependency to optionally get the current user.

    Returns None for anonymous visitors and deactivated accounts instead
    of raising. Useful for routes that serve both.
    """
    user = _load_session_user(request, podcasthub_session)
    if user and not user.is_active:
        return None
    return user


async def get_current_admin(
    request: Request,
    podcasthub_session: Optional[str] = Cookie(default=None)
) -> User:
    """
    FastAPI dependency to require admin access.

    Raises:
        HTTPException: 401 if not authenticated or token is invalid.
        HTTPException: 403 if deactivated or not an admin.
    """
    user = await get_current_user(request, podcasthub_session)
    if not is_admin(user):
        raise HTTPException(status_code=403, detail="Forbidden - Admin access required")
    return user
