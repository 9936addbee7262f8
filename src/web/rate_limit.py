"""Shared slowapi limiter for rate-limited endpoints."""

import os

from slowapi import Limiter
from slowapi.util import get_remote_address

limiter = Limiter(
    key_func=get_remote_address,
    enabled=os.getenv("RATE_LIMIT_ENABLED", "true").lower() == "true",
)


def login_rate_limit() -> str:
    return os.getenv("LOGIN_RATE_LIMIT", "10/minute")
