from __future__ import annotations

from dataclasses import dataclass
from typing import Optional
from urllib.parse import urlencode

from adlaunch.config import settings
from adlaunch.db.enums import PlatformEnum
from adlaunch.platforms.base import OAuthProviderClient, TokenSet, require_setting


@dataclass(frozen=True)
class FacebookUserInfo:
    id: str
    name: str
    email: Optional[str] = None
    profile_picture: Optional[str] = None


class FacebookOAuthClient(OAuthProviderClient):
    """Meta login for Facebook/Instagram ads, on the Graph API."""

    platform = PlatformEnum.facebook

    @property
    def graph_url(self) -> str:
        return f"{settings.META_GRAPH_API_BASE_URL.rstrip('/')}/{settings.META_GRAPH_API_VERSION}"

    def authorization_url(self, state: str) -> str:
        query = {
            "client_id": require_setting(settings.FACEBOOK_APP_ID, "FACEBOOK_APP_ID"),
            "redirect_uri": self.redirect_uri,
            "state": state,
            "scope": settings.FACEBOOK_OAUTH_SCOPES,
            "response_type": "code",
        }
        return f"https://www.facebook.com/{settings.META_GRAPH_API_VERSION}/dialog/oauth?{urlencode(query)}"

    async def exchange_code(self, code: str) -> TokenSet:
        body = await self._request(
            "GET",
            f"{self.graph_url}/oauth/access_token",
            params={
                "client_id": require_setting(settings.FACEBOOK_APP_ID, "FACEBOOK_APP_ID"),
                "client_secret": require_setting(settings.FACEBOOK_APP_SECRET, "FACEBOOK_APP_SECRET"),
                "redirect_uri": self.redirect_uri,
                "code": code,
            },
        )
        return self._token_set_from(body, "Facebook")

    async def revoke_token(self, token: str) -> None:
        # Meta has no revoke endpoint; dropping the app's permissions invalidates the grant.
        await self._send("DELETE", f"{self.graph_url}/me/permissions", params={"access_token": token})

    async def fetch_user_info(self, access_token: str) -> FacebookUserInfo:
        body = await self._request(
            "GET",
            f"{self.graph_url}/me",
            params={"fields": "id,name,email,picture.type(large)", "access_token": access_token},
        )
        picture = body.get("picture")
        picture_data = picture.get("data") if isinstance(picture, dict) else None
        return FacebookUserInfo(
            id=str(body.get("id") or ""),
            name=body.get("name") or "",
            email=body.get("email"),
            profile_picture=picture_data.get("url") if isinstance(picture_data, dict) else None,
        )
