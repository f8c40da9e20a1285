from __future__ import annotations

from urllib.parse import urlencode

from adlaunch.config import settings
from adlaunch.db.enums import PlatformEnum
from adlaunch.platforms.base import OAuthProviderClient, TokenSet, require_setting

GOOGLE_AUTHORIZE_URL = "https://accounts.google.com/o/oauth2/v2/auth"
GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"
GOOGLE_REVOKE_URL = "https://oauth2.googleapis.com/revoke"


class GoogleOAuthClient(OAuthProviderClient):
    platform = PlatformEnum.google
    revokes_refresh_token = True

    def authorization_url(self, state: str) -> str:
        query = {
            "client_id": require_setting(settings.GOOGLE_CLIENT_ID, "GOOGLE_CLIENT_ID"),
            "redirect_uri": self.redirect_uri,
            "response_type": "code",
            "scope": settings.GOOGLE_OAUTH_SCOPES.replace(",", " "),
            "state": state,
            # Offline access plus a forced consent screen so Google returns a refresh token.
            "access_type": "offline",
            "prompt": "consent",
        }
        return f"{GOOGLE_AUTHORIZE_URL}?{urlencode(query)}"

    async def exchange_code(self, code: str) -> TokenSet:
        body = await self._request(
            "POST",
            GOOGLE_TOKEN_URL,
            data={
                "code": code,
                "client_id": require_setting(settings.GOOGLE_CLIENT_ID, "GOOGLE_CLIENT_ID"),
                "client_secret": require_setting(settings.GOOGLE_CLIENT_SECRET, "GOOGLE_CLIENT_SECRET"),
                "redirect_uri": self.redirect_uri,
                "grant_type": "authorization_code",
            },
        )
        return self._token_set_from(body, "Google")

    async def revoke_token(self, token: str) -> None:
        await self._send(
            "POST",
            GOOGLE_REVOKE_URL,
            data={"token": token},
            headers={"Content-Type": "application/x-www-form-urlencoded"},
        )
