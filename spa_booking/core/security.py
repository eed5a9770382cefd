import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends, Header
from jose import JWTError, jwt

from spa_booking.core.config import Settings, get_settings
from spa_booking.core.errors import (
    ForbiddenError,
    IncorrectPasswordError,
    InvalidCredentialError,
    MissingCredentialError,
)
from spa_booking.core.logger import logger

ADMIN_ROLE = "admin"


def issue_credential(supplied_password: Optional[str], settings: Settings) -> str:
    """
    Exchange the admin password for a signed token carrying the admin role.
    The token only expires when ADMIN_TOKEN_EXPIRE_MINUTES is configured.
    """
    if not settings.JWT_SECRET:
        logger.error("❌ JWT_SECRET is not set; refusing to issue admin tokens")
        raise IncorrectPasswordError()

    expected = settings.ADMIN_PASSWORD
    if not expected or not supplied_password:
        raise IncorrectPasswordError()
    if not secrets.compare_digest(supplied_password.encode(), expected.encode()):
        logger.warning("🔒 Admin login rejected (incorrect password)")
        raise IncorrectPasswordError()

    claims = {"role": ADMIN_ROLE}
    if settings.ADMIN_TOKEN_EXPIRE_MINUTES:
        expire = datetime.now(timezone.utc) + timedelta(minutes=settings.ADMIN_TOKEN_EXPIRE_MINUTES)
        claims["exp"] = expire

    logger.info("🔑 Admin token issued")
    return jwt.encode(claims, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def extract_bearer_token(authorization: Optional[str]) -> Optional[str]:
    # "Bearer <token>": the scheme word itself is not checked
    if not authorization:
        return None
    parts = authorization.split(" ")
    if len(parts) < 2 or not parts[1]:
        return None
    return parts[1]


def authenticate(authorization: Optional[str], settings: Settings) -> str:
    """
    Verify the bearer token and its role claim.
    Returns the role, or raises MissingCredentialError / InvalidCredentialError / ForbiddenError.
    """
    token = extract_bearer_token(authorization)
    if not token:
        raise MissingCredentialError()

    if not settings.JWT_SECRET:
        # Nothing can be verified without a signing secret
        raise InvalidCredentialError()

    try:
        claims = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
    except JWTError as e:
        logger.warning(f"🔒 JWT verification failed: {e}")
        raise InvalidCredentialError()

    role = claims.get("role")
    if role != ADMIN_ROLE:
        logger.warning(f"🚫 Token with role '{role}' tried to reach an admin route")
        raise ForbiddenError()
    return role


async def require_admin(
    authorization: Optional[str] = Header(None),
    settings: Settings = Depends(get_settings),
) -> str:
    """Dependency guarding every administrative route."""
    return authenticate(authorization, settings)
