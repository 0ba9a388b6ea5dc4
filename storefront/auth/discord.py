"""Discord OAuth2 client used to attach a display name and avatar to reviews.

Only the `identify` scope is requested: username, display name and avatar.
No email, no posting rights.
"""

import logging
from dataclasses import dataclass
from urllib.parse import urlencode

import httpx

logger = logging.getLogger(__name__)

DISCORD_API_BASE = "https://discord.com/api"
DISCORD_CDN_BASE = "https://cdn.discordapp.com"
DISCORD_SCOPE = "identify"


class AuthError(Exception):
    """Error talking to the external identity provider."""
    pass


@dataclass
class DiscordProfile:
    """The basic profile returned by /users/@me."""

    id: str
    username: str
    global_name: str | None = None
    avatar_url: str | None = None


class DiscordOAuthClient:
    """Authorization-code flow against Discord's OAuth2 endpoints."""

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        redirect_uri: str,
        http_client: httpx.AsyncClient | None = None,
    ):
        self._client_id = client_id
        self._client_secret = client_secret
        self._redirect_uri = redirect_uri
        self._http = http_client

    @property
    def configured(self) -> bool:
        return bool(self._client_id and self._client_secret)

    def authorize_url(self, state: str) -> str:
        params = {
            "client_id": self._client_id,
            "redirect_uri": self._redirect_uri,
            "response_type": "code",
            "scope": DISCORD_SCOPE,
            "state": state,
        }
        return f"{DISCORD_API_BASE}/oauth2/authorize?{urlencode(params)}"

    async def fetch_profile(self, code: str) -> DiscordProfile:
        """Exchange an authorization code and load the user's profile.

        Raises:
            AuthError: If the code exchange or profile request fails.
        """
        if self._http is not None:
            return await self._fetch_profile(self._http, code)
        async with httpx.AsyncClient(timeout=15.0) as client:
            return await self._fetch_profile(client, code)

    async def _fetch_profile(self, client: httpx.AsyncClient, code: str) -> DiscordProfile:
        try:
            token_response = await client.post(
                f"{DISCORD_API_BASE}/oauth2/token",
                data={
                    "client_id": self._client_id,
                    "client_secret": self._client_secret,
                    "grant_type": "authorization_code",
                    "code": code,
                    "redirect_uri": self._redirect_uri,
                },
                headers={"Content-Type": "application/x-www-form-urlencoded"},
            )
            token_response.raise_for_status()
            access_token = token_response.json()["access_token"]

            user_response = await client.get(
                f"{DISCORD_API_BASE}/users/@me",
                headers={"Authorization": f"Bearer {access_token}"},
            )
            user_response.raise_for_status()
            data = user_response.json()
            user_id = str(data["id"])
        except (httpx.HTTPError, KeyError, ValueError) as e:
            logger.warning(f"Discord OAuth failed: {e}")
            raise AuthError("Discord sign-in failed") from e

        return DiscordProfile(
            id=user_id,
            username=data.get("username", ""),
            global_name=data.get("global_name"),
            avatar_url=_avatar_url(user_id, data.get("avatar")),
        )


def _avatar_url(user_id: str, avatar_hash: str | None) -> str | None:
    if not avatar_hash:
        return None
    return f"{DISCORD_CDN_BASE}/avatars/{user_id}/{avatar_hash}.png"
