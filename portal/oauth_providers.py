"""OAuth2 identity providers used for portal login."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from urllib.parse import urlencode

import httpx
import structlog

from shared.config import Settings

logger = structlog.get_logger()

DISCORD_API = "https://discord.com/api/v10"
DISCORD_CDN = "https://cdn.discordapp.com"
GOOGLE_AUTH_URL = "https://accounts.google.com/o/oauth2/v2/auth"
GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"
GOOGLE_USERINFO_URL = "https://www.googleapis.com/oauth2/v3/userinfo"


@dataclass
class OAuthUserProfile:
    """Normalized identity claims from an OAuth provider."""

    provider: str  # "discord" or "google"
    provider_user_id: str
    email: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    profile_image_url: str | None = None


class OAuthProvider(ABC):
    """Abstract OAuth2 provider."""

    def __init__(self, client_id: str, client_secret: str) -> None:
        self.client_id = client_id
        self.client_secret = client_secret

    @property
    @abstractmethod
    def name(self) -> str:
        ...

    @abstractmethod
    def get_auth_url(self, redirect_uri: str) -> str:
        ...

    @abstractmethod
    async def exchange_code(self, code: str, redirect_uri: str) -> OAuthUserProfile:
        ...

    async def _fetch_access_token(
        self, client: httpx.AsyncClient, token_url: str, code: str, redirect_uri: str
    ) -> str:
        token_resp = await client.post(
            token_url,
            data={
                "client_id": self.client_id,
                "client_secret": self.client_secret,
                "grant_type": "authorization_code",
                "code": code,
                "redirect_uri": redirect_uri,
            },
            headers={"Content-Type": "application/x-www-form-urlencoded"},
        )
        if token_resp.status_code != 200:
            logger.warning(
                "oauth_token_exchange_failed",
                provider=self.name,
                status=token_resp.status_code,
                body=token_resp.text,
            )
            raise ValueError(f"{self.name} authentication failed")
        return token_resp.json()["access_token"]


class DiscordOAuthProvider(OAuthProvider):
    """Discord OAuth2 provider."""

    @property
    def name(self) -> str:
        return "discord"

    def get_auth_url(self, redirect_uri: str) -> str:
        params = urlencode(
            {
                "client_id": self.client_id,
                "redirect_uri": redirect_uri,
                "response_type": "code",
                "scope": "identify email",
            }
        )
        return f"{DISCORD_API}/oauth2/authorize?{params}"

    async def exchange_code(self, code: str, redirect_uri: str) -> OAuthUserProfile:
        async with httpx.AsyncClient(timeout=10.0) as client:
            access_token = await self._fetch_access_token(
                client, f"{DISCORD_API}/oauth2/token", code, redirect_uri
            )
            user_resp = await client.get(
                f"{DISCORD_API}/users/@me",
                headers={"Authorization": f"Bearer {access_token}"},
            )
            if user_resp.status_code != 200:
                raise ValueError("Failed to fetch Discord profile")
            discord_user = user_resp.json()

        avatar = discord_user.get("avatar")
        return OAuthUserProfile(
            provider="discord",
            provider_user_id=discord_user["id"],
            email=discord_user.get("email"),
            first_name=discord_user.get("global_name") or discord_user.get("username"),
            profile_image_url=(
                f"{DISCORD_CDN}/avatars/{discord_user['id']}/{avatar}.png" if avatar else None
            ),
        )


class GoogleOAuthProvider(OAuthProvider):
    """Google OAuth2 provider."""

    @property
    def name(self) -> str:
        return "google"

    def get_auth_url(self, redirect_uri: str) -> str:
        params = urlencode(
            {
                "client_id": self.client_id,
                "redirect_uri": redirect_uri,
                "response_type": "code",
                "scope": "openid email profile",
                "prompt": "select_account",
            }
        )
        return f"{GOOGLE_AUTH_URL}?{params}"

    async def exchange_code(self, code: str, redirect_uri: str) -> OAuthUserProfile:
        async with httpx.AsyncClient(timeout=10.0) as client:
            access_token = await self._fetch_access_token(
                client, GOOGLE_TOKEN_URL, code, redirect_uri
            )
            user_resp = await client.get(
                GOOGLE_USERINFO_URL,
                headers={"Authorization": f"Bearer {access_token}"},
            )
            if user_resp.status_code != 200:
                raise ValueError("Failed to fetch Google profile")
            google_user = user_resp.json()

        return OAuthUserProfile(
            provider="google",
            provider_user_id=google_user["sub"],
            email=google_user.get("email"),
            first_name=google_user.get("given_name"),
            last_name=google_user.get("family_name"),
            profile_image_url=google_user.get("picture"),
        )


def get_provider(settings: Settings) -> OAuthProvider | None:
    """Build the configured provider, or None when credentials are missing."""
    if settings.auth_provider == "discord":
        if settings.discord_client_id and settings.discord_client_secret:
            return DiscordOAuthProvider(settings.discord_client_id, settings.discord_client_secret)
        return None
    if settings.google_client_id and settings.google_client_secret:
        return GoogleOAuthProvider(settings.google_client_id, settings.google_client_secret)
    return None
