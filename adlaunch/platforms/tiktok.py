from __future__ import annotations

from typing import Any
from urllib.parse import urlencode

from adlaunch.config import settings
from adlaunch.db.enums import PlatformEnum
from adlaunch.errors import ExternalCallFailedError
from adlaunch.platforms.base import OAuthProviderClient, TokenSet, require_setting

TIKTOK_AUTHORIZE_URL = "https://business-api.tiktok.com/portal/auth"
TIKTOK_API_BASE_URL = "https://business-api.tiktok.com"


class TikTokOAuthClient(OAuthProviderClient):
    """TikTok for Business. Errors come back as HTTP 200 with a non-zero ``code``."""

    platform = PlatformEnum.tiktok

    @property
    def api_url(self) -> str:
        return f"{TIKTOK_API_BASE_URL}/open_api/{settings.TIKTOK_API_VERSION}"

    def authorization_url(self, state: str) -> str:
        query = {
            "app_id": require_setting(settings.TIKTOK_APP_ID, "TIKTOK_APP_ID"),
            "state": state,
            "redirect_uri": self.redirect_uri,
        }
        return f"{TIKTOK_AUTHORIZE_URL}?{urlencode(query)}"

    def _credentials(self) -> dict[str, str]:
        return {
            "app_id": require_setting(settings.TIKTOK_APP_ID, "TIKTOK_APP_ID"),
            "secret": require_setting(settings.TIKTOK_APP_SECRET, "TIKTOK_APP_SECRET"),
        }

    @staticmethod
    def _unwrap(body: dict[str, Any]) -> dict[str, Any]:
        if body.get("code") not in (0, None):
            raise ExternalCallFailedError(
                f"TikTok API error: {body.get('message') or 'unknown error'}",
                error_payload=body,
            )
        data = body.get("data")
        return data if isinstance(data, dict) else {}

    async def exchange_code(self, code: str) -> TokenSet:
        body = await self._request(
            "POST",
            f"{self.api_url}/oauth2/access_token/",
            json={**self._credentials(), "auth_code": code},
        )
        data = self._unwrap(body)
        tokens = self._token_set_from(data, "TikTok")
        advertiser_ids = data.get("advertiser_ids") or []
        scope = data.get("scope")
        return TokenSet(
            access_token=tokens.access_token,
            refresh_token=tokens.refresh_token,
            expires_in=tokens.expires_in,
            scopes=",".join(str(item) for item in scope) if isinstance(scope, list) else tokens.scopes,
            external_account_id=",".join(str(item) for item in advertiser_ids) or None,
        )

    async def revoke_token(self, token: str) -> None:
        body = await self._request(
            "POST",
            f"{self.api_url}/oauth2/revoke_token/",
            json={**self._credentials(), "access_token": token},
        )
        self._unwrap(body)
