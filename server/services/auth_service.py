"""Admin authentication with signed, expiring JWTs."""

import hmac
import logging
from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt

from config import Config

logger = logging.getLogger(__name__)

ADMIN_ROLE = "admin"


class AdminNotConfiguredError(Exception):
    """No admin password is set, so admin login is disabled."""


def check_admin_password(password: str, configured: str | None = None) -> bool:
    """Compare a submitted password with the configured one in constant time."""
    configured = Config.ADMIN_PASSWORD if configured is None else configured
    if not configured:
        raise AdminNotConfiguredError("Admin password not configured")
    return hmac.compare_digest(password.encode("utf-8"), configured.encode("utf-8"))


def create_admin_token(now: datetime | None = None, ttl: timedelta | None = None) -> str:
    """Issue a signed admin token that expires after the configured TTL."""
    issued_at = now or datetime.now(timezone.utc)
    expires = issued_at + (ttl or timedelta(hours=Config.ADMIN_TOKEN_TTL_HOURS))
    claims = {
        "sub": ADMIN_ROLE,
        "role": ADMIN_ROLE,
        "iat": int(issued_at.timestamp()),
        "exp": int(expires.timestamp()),
    }
    return jwt.encode(claims, Config.ADMIN_TOKEN_SECRET, algorithm=Config.ADMIN_TOKEN_ALGORITHM)


def is_valid_admin_token(token: str | None) -> bool:
    """Check signature, expiry and role of an admin token."""
    if not token:
        return False
    try:
        payload = jwt.decode(token, Config.ADMIN_TOKEN_SECRET, algorithms=[Config.ADMIN_TOKEN_ALGORITHM])
    except JWTError:
        return False
    return payload.get("role") == ADMIN_ROLE
