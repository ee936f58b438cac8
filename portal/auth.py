"""JWT session authentication for the web portal.

The session is a signed JWT carried in an HttpOnly cookie set by the OAuth
callback. API clients may send the same token as ``Authorization: Bearer``.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import jwt
from fastapi import HTTPException, Request, Response

from shared.config import get_settings
from shared.models.user import User

JWT_ALGORITHM = "HS256"


@dataclass
class PortalUser:
    """Authenticated portal user. Injected by require_auth."""

    user_id: uuid.UUID
    username: str
    email: str | None = None
    auth_provider: str = ""


def _require_secret() -> str:
    settings = get_settings()
    if not settings.session_secret:
        raise HTTPException(status_code=503, detail="Portal auth not configured")
    return settings.session_secret


def create_session_token(user: User) -> str:
    """Mint a session JWT for ``user``."""
    settings = get_settings()
    now = datetime.now(timezone.utc)
    payload = {
        "sub": str(user.id),
        "username": user.display_name,
        "email": user.email,
        "auth_provider": user.auth_provider,
        "iat": now,
        "exp": now + timedelta(hours=settings.session_ttl_hours),
    }
    return jwt.encode(payload, _require_secret(), algorithm=JWT_ALGORITHM)


def _decode_token(token: str) -> PortalUser:
    """Decode and validate a JWT, returning a PortalUser."""
    secret = _require_secret()
    try:
        payload = jwt.decode(token, secret, algorithms=[JWT_ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise HTTPException(status_code=401, detail="Session expired")
    except jwt.InvalidTokenError:
        raise HTTPException(status_code=401, detail="Invalid session")

    try:
        user_id = uuid.UUID(payload["sub"])
    except (KeyError, ValueError):
        raise HTTPException(status_code=401, detail="Invalid session")

    return PortalUser(
        user_id=user_id,
        username=payload.get("username", ""),
        email=payload.get("email"),
        auth_provider=payload.get("auth_provider", ""),
    )


async def require_auth(request: Request) -> PortalUser:
    """FastAPI dependency: session cookie first, then a Bearer header."""
    settings = get_settings()
    token = request.cookies.get(settings.session_cookie_name)
    if not token:
        authorization = request.headers.get("authorization", "")
        if authorization.startswith("Bearer "):
            token = authorization[7:]
    if not token:
        raise HTTPException(status_code=401, detail="Unauthorized")
    return _decode_token(token)


def set_session_cookie(response: Response, token: str) -> None:
    settings = get_settings()
    response.set_cookie(
        settings.session_cookie_name,
        token,
        max_age=settings.session_ttl_hours * 3600,
        httponly=True,
        samesite="lax",
        secure=settings.session_cookie_secure,
    )


def clear_session_cookie(response: Response) -> None:
    response.delete_cookie(get_settings().session_cookie_name)
