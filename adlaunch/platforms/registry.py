from __future__ import annotations

from typing import Dict, Optional

import httpx
from fastapi import Depends

from adlaunch.db.enums import PlatformEnum
from adlaunch.errors import NotFoundError
from adlaunch.platforms.base import OAuthProviderClient
from adlaunch.platforms.facebook import FacebookOAuthClient
from adlaunch.platforms.google import GoogleOAuthClient
from adlaunch.platforms.linkedin import LinkedInOAuthClient
from adlaunch.platforms.tiktok import TikTokOAuthClient


class OAuthClientRegistry:
    """Simple registry to resolve OAuth clients by platform."""

    def __init__(self, *, transport: Optional[httpx.AsyncBaseTransport] = None) -> None:
        self._clients: Dict[PlatformEnum, OAuthProviderClient] = {
            PlatformEnum.google: GoogleOAuthClient(transport=transport),
            PlatformEnum.facebook: FacebookOAuthClient(transport=transport),
            PlatformEnum.linkedin: LinkedInOAuthClient(transport=transport),
            PlatformEnum.tiktok: TikTokOAuthClient(transport=transport),
        }

    def get(self, platform: PlatformEnum) -> OAuthProviderClient:
        if platform not in self._clients:
            raise NotFoundError(f"No OAuth client registered for platform {platform}")
        return self._clients[platform]


def get_oauth_registry() -> OAuthClientRegistry:
    return OAuthClientRegistry()


def get_oauth_client(
    platform: PlatformEnum,
    registry: OAuthClientRegistry = Depends(get_oauth_registry),
) -> OAuthProviderClient:
    return registry.get(platform)
