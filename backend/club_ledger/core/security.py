"""
Bearer token verification for the admin surface.

Tokens are issued by the club's auth service; this module only verifies them
and attaches the identity ({id, role}) to the request. create_access_token
exists for tooling and tests.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import ExpiredSignatureError, JWTError, jwt

from club_ledger.core.config import get_settings
from club_ledger.core.logging import get_logger

logger = get_logger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class Identity:
    id: int
    role: str


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    settings = get_settings()
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    to_encode["exp"] = expire
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def decode_identity(token: str) -> Identity:
    settings = get_settings()
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except ExpiredSignatureError:
        raise _unauthorized("Session expired. Please login again.")
    except JWTError:
        raise _unauthorized("Invalid authentication token.")

    subject = payload.get("id", payload.get("sub"))
    try:
        user_id = int(subject)
    except (TypeError, ValueError):
        raise _unauthorized("Invalid authentication token.")

    return Identity(id=user_id, role=str(payload.get("role") or ""))


async def get_current_identity(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Identity:
    if credentials is None or not credentials.credentials.strip():
        raise _unauthorized("Authentication token missing.")
    return decode_identity(credentials.credentials.strip())


async def require_admin(identity: Identity = Depends(get_current_identity)) -> Identity:
    if identity.role not in get_settings().ADMIN_ROLES:
        logger.warning("admin_access_denied", user_id=identity.id, role=identity.role)
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required.",
        )
    return identity
