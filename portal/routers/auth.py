"""OAuth login, logout, and the current-user endpoint."""

from __future__ import annotations

from datetime import datetime, timezone

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import RedirectResponse
from sqlalchemy import select

from portal.auth import (
    PortalUser,
    clear_session_cookie,
    create_session_token,
    require_auth,
    set_session_cookie,
)
from portal.oauth_providers import OAuthProvider, OAuthUserProfile, get_provider
from shared.config import get_settings
from shared.database import get_session_factory
from shared.models.user import User

logger = structlog.get_logger()

router = APIRouter(prefix="/api", tags=["auth"])


def _get_provider() -> OAuthProvider:
    provider = get_provider(get_settings())
    if provider is None:
        raise HTTPException(503, "OAuth login not configured")
    return provider


def format_user(user: User) -> dict:
    return {
        "id": str(user.id),
        "email": user.email,
        "first_name": user.first_name,
        "last_name": user.last_name,
        "profile_image_url": user.profile_image_url,
        "display_name": user.display_name,
        "created_at": user.created_at.isoformat() if user.created_at else None,
    }


async def upsert_user(profile: OAuthUserProfile) -> User:
    """Create the user on first login, refresh identity claims afterwards."""
    factory = get_session_factory()
    async with factory() as session:
        result = await session.execute(
            select(User).where(
                User.auth_provider == profile.provider,
                User.provider_user_id == profile.provider_user_id,
            )
        )
        user = result.scalar_one_or_none()
        if user is None:
            user = User(
                auth_provider=profile.provider,
                provider_user_id=profile.provider_user_id,
            )
            session.add(user)
            logger.info("portal_self_registration", provider=profile.provider)

        user.email = profile.email
        user.first_name = profile.first_name
        user.last_name = profile.last_name
        user.profile_image_url = profile.profile_image_url
        user.updated_at = datetime.now(timezone.utc)
        await session.commit()
    return user


@router.get("/login")
async def login() -> RedirectResponse:
    """Redirect the browser to the configured identity provider."""
    provider = _get_provider()
    return RedirectResponse(provider.get_auth_url(get_settings().oauth_redirect_uri))


@router.get("/callback")
async def oauth_callback(code: str = Query(...)) -> RedirectResponse:
    """Exchange the auth code, upsert the user, and start a session."""
    provider = _get_provider()
    try:
        profile = await provider.exchange_code(code, get_settings().oauth_redirect_uri)
    except ValueError as e:
        raise HTTPException(401, str(e))

    user = await upsert_user(profile)
    response = RedirectResponse("/", status_code=303)
    set_session_cookie(response, create_session_token(user))

    logger.info("portal_login", user_id=str(user.id), provider=profile.provider)
    return response


@router.get("/logout")
async def logout() -> RedirectResponse:
    response = RedirectResponse("/", status_code=303)
    clear_session_cookie(response)
    return response


@router.get("/auth/user")
async def get_current_user(user: PortalUser = Depends(require_auth)) -> dict:
    """Return the stored record of the signed-in user."""
    factory = get_session_factory()
    async with factory() as session:
        record = await session.get(User, user.user_id)
    if record is None:
        raise HTTPException(404, "User not found")
    return format_user(record)
