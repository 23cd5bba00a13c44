import logging
from typing import Any, Optional

from fastapi import HTTPException, Request
from jose import JWTError
from jose import jwt as jose_jwt

from . import config

logger = logging.getLogger(__name__)


def verify_session_token(token: str, secret: Optional[str] = None) -> Optional[dict[str, Any]]:
    """
    Verify and decode a session JWT

    Returns:
        Decoded payload if valid, None if invalid or expired
    """
    try:
        return jose_jwt.decode(token, secret or config.JWT_SECRET, algorithms=[config.JWT_ALGORITHM])
    except JWTError as e:
        logger.warning(f"Session token verification failed: {e}")
        return None


async def require_session(request: Request) -> Optional[dict[str, Any]]:
    """Reject API requests that do not carry a valid session cookie"""
    if not config.AUTH_ENABLED:
        return None

    token = request.cookies.get(config.AUTH_COOKIE_NAME)
    if not token:
        logger.warning(f"🚫 No session cookie for {request.method} {request.url.path}")
        raise HTTPException(status_code=401, detail="Not authenticated")

    payload = verify_session_token(token)
    if payload is None:
        raise HTTPException(status_code=401, detail="Session expired")

    return payload
