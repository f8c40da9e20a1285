from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional
from urllib.parse import urlencode

import httpx

from adlaunch.config import settings
from adlaunch.db.enums import PlatformEnum
from adlaunch.errors import ExternalCallFailedError
from adlaunch.platforms.base import OAuthProviderClient, PlatformHttpClient, TokenSet, require_setting

logger = logging.getLogger("platforms.linkedin")

LINKEDIN_AUTHORIZE_URL = "https://www.linkedin.com/oauth/v2/authorization"
LINKEDIN_TOKEN_URL = "https://www.linkedin.com/oauth/v2/accessToken"
LINKEDIN_REVOKE_URL = "https://www.linkedin.com/oauth/v2/revoke"
LINKEDIN_REST_URL = "https://api.linkedin.com/rest"


def sponsored_account_urn(account_id: str) -> str:
    return f"urn:li:sponsoredAccount:{account_id}"


def campaign_group_urn(campaign_group_id: str) -> str:
    return f"urn:li:sponsoredCampaignGroup:{campaign_group_id}"


@dataclass(frozen=True)
class LinkedInAdAccount:
    id: str
    name: str
    currency: Optional[str] = None
    status: Optional[str] = None


@dataclass(frozen=True)
class LinkedInCampaignGroup:
    id: str
    name: str
    status: Optional[str] = None


@dataclass(frozen=True)
class LinkedInCampaign:
    id: str
    name: str


class LinkedInOAuthClient(OAuthProviderClient):
    platform = PlatformEnum.linkedin

    def authorization_url(self, state: str) -> str:
        query = {
            "response_type": "code",
            "client_id": require_setting(settings.LINKEDIN_CLIENT_ID, "LINKEDIN_CLIENT_ID"),
            "redirect_uri": self.redirect_uri,
            "state": state,
            "scope": settings.LINKEDIN_OAUTH_SCOPES.replace(",", " "),
        }
        return f"{LINKEDIN_AUTHORIZE_URL}?{urlencode(query)}"

    def _credentials(self) -> dict[str, str]:
        return {
            "client_id": require_setting(settings.LINKEDIN_CLIENT_ID, "LINKEDIN_CLIENT_ID"),
            "client_secret": require_setting(settings.LINKEDIN_CLIENT_SECRET, "LINKEDIN_CLIENT_SECRET"),
        }

    async def exchange_code(self, code: str) -> TokenSet:
        body = await self._request(
            "POST",
            LINKEDIN_TOKEN_URL,
            data={
                "grant_type": "authorization_code",
                "code": code,
                "redirect_uri": self.redirect_uri,
                **self._credentials(),
            },
        )
        return self._token_set_from(body, "LinkedIn")

    async def revoke_token(self, token: str) -> None:
        await self._send("POST", LINKEDIN_REVOKE_URL, data={**self._credentials(), "token": token})


class LinkedInAdsClient(PlatformHttpClient):
    """LinkedIn Marketing API calls made with a member's access token."""

    provider_name = "LinkedIn"

    def __init__(
        self,
        *,
        access_token: str,
        api_version: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: Optional[float] = None,
    ) -> None:
        super().__init__(transport=transport, timeout=timeout)
        self.access_token = access_token
        self.api_version = api_version or settings.LINKEDIN_API_VERSION

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self.access_token}",
            "LinkedIn-Version": self.api_version,
            "X-Restli-Protocol-Version": "2.0.0",
        }

    async def _create(self, path: str, payload: dict[str, Any]) -> str:
        response = await self._send("POST", f"{LINKEDIN_REST_URL}/{path}", json=payload, headers=self._headers())
        created_id = response.headers.get("x-restli-id") or response.headers.get("x-linkedin-id")
        if not created_id and response.content:
            try:
                created_id = str(response.json().get("id") or "")
            except ValueError:
                created_id = ""
        if not created_id:
            raise ExternalCallFailedError(f"LinkedIn did not return an id for {path}")
        # Ids may come back as URNs; keep only the numeric tail.
        return created_id.rsplit(":", 1)[-1]

    @staticmethod
    def _elements(body: dict[str, Any]) -> list[dict[str, Any]]:
        elements = body.get("elements")
        if not isinstance(elements, list):
            raise ExternalCallFailedError("LinkedIn list response is missing elements")
        return [item for item in elements if isinstance(item, dict)]

    async def list_ad_accounts(self) -> list[LinkedInAdAccount]:
        body = await self._request(
            "GET",
            f"{LINKEDIN_REST_URL}/adAccounts",
            params={"q": "search"},
            headers=self._headers(),
        )
        return [
            LinkedInAdAccount(
                id=str(item.get("id")),
                name=item.get("name") or "",
                currency=item.get("currency"),
                status=item.get("status"),
            )
            for item in self._elements(body)
        ]

    async def list_campaign_groups(self, account_id: str) -> list[LinkedInCampaignGroup]:
        body = await self._request(
            "GET",
            f"{LINKEDIN_REST_URL}/adAccounts/{account_id}/adCampaignGroups",
            params={"q": "search"},
            headers=self._headers(),
        )
        return [
            LinkedInCampaignGroup(id=str(item.get("id")), name=item.get("name") or "", status=item.get("status"))
            for item in self._elements(body)
        ]

    async def create_campaign_group(
        self,
        account_id: str,
        *,
        name: str,
        status: str = "ACTIVE",
        run_schedule: Optional[dict[str, int]] = None,
    ) -> LinkedInCampaignGroup:
        payload: dict[str, Any] = {
            "account": sponsored_account_urn(account_id),
            "name": name,
            "status": status,
        }
        if run_schedule:
            payload["runSchedule"] = run_schedule
        group_id = await self._create(f"adAccounts/{account_id}/adCampaignGroups", payload)
        logger.info("Created LinkedIn campaign group", extra={"account_id": account_id, "group_id": group_id})
        return LinkedInCampaignGroup(id=group_id, name=name, status=status)

    async def create_campaign(self, account_id: str, payload: dict[str, Any]) -> LinkedInCampaign:
        campaign_id = await self._create(f"adAccounts/{account_id}/adCampaigns", payload)
        logger.info("Created LinkedIn campaign", extra={"account_id": account_id, "campaign_id": campaign_id})
        return LinkedInCampaign(id=campaign_id, name=str(payload.get("name") or ""))
