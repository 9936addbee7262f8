"""
Admin account bootstrap and emergency password reset.

At startup the platform guarantees that at least one admin exists. If an
operator is locked out, the emergency reset sets the admin password back
to the value of ADMIN_PASSWORD.
"""

import logging
import secrets
from typing import Optional

from src.config import Config
from src.db.repository import PodcastHubRepositoryInterface
from src.web.auth import hash_password

logger = logging.getLogger(__name__)

PASSWORD_CHARSET = (
    "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789!@#$%^&*"
)


class AdminResetError(Exception):
    """Emergency reset refused; carries the HTTP status to report."""

    def __init__(self, status_code: int, message: str):
        super().__init__(message)
        self.status_code = status_code
        self.message = message


def generate_secure_password(length: int = 16) -> str:
    return "".join(secrets.choice(PASSWORD_CHARSET) for _ in range(length))


def initialize_admin(
    repository: PodcastHubRepositoryInterface, config: Config
) -> Optional[str]:
    """
    Create the initial admin account when none exists.

    Credentials come from ADMIN_USERNAME, ADMIN_EMAIL and ADMIN_PASSWORD. If
    no password is configured a random one is generated and logged once.

    Returns:
        The generated password, or None if nothing was generated.
    """
    if repository.count_admins() > 0:
        logger.info("Admin user already exists")
        return None

    generated = None
    password = config.ADMIN_PASSWORD
    if not password:
        generated = password = generate_secure_password()

    user = repository.create_user(
        username=config.ADMIN_USERNAME,
        email=config.ADMIN_EMAIL,
        password_hash=hash_password(password),
        role="ADMIN",
        bio="Administrator",
        email_verified=True,
    )
    if user is None:
        logger.error(
            f"Could not create admin user {config.ADMIN_USERNAME} <{config.ADMIN_EMAIL}>: "
            "username or email already taken"
        )
        return None

    logger.info(f"Admin user created: {user.username} <{user.email}>")
    if generated:
        logger.warning(f"Generated admin password: {generated}")
        logger.warning("Save this password securely - it won't be shown again!")
    else:
        logger.info("Admin password was set from ADMIN_PASSWORD")
    return generated


def reset_admin_password(
    repository: PodcastHubRepositoryInterface, config: Config
) -> dict:
    """
    Reset the ADMIN_EMAIL account's password to ADMIN_PASSWORD.

    Raises:
        AdminResetError: 403 when ADMIN_PASSWORD is not set or the account is
            not an admin, 404 when no account has ADMIN_EMAIL.
    """
    if not config.ADMIN_PASSWORD:
        raise AdminResetError(403, "Emergency reset not configured")

    admin = repository.get_user_by_email(config.ADMIN_EMAIL)
    if not admin:
        raise AdminResetError(404, "Admin user not found")
    if admin.role != "ADMIN":
        raise AdminResetError(403, "User is not an admin")

    repository.update_user(admin.id, password_hash=hash_password(config.ADMIN_PASSWORD))
    logger.warning(f"Emergency password reset performed for admin user_id={admin.id}")

    return {
        "message": "Admin password reset successfully",
        "email": admin.email,
        "note": "You can now login with the password from ADMIN_PASSWORD environment variable",
    }
