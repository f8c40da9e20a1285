from __future__ import annotations

import logging
from datetime import date, datetime, time, timedelta, timezone
from typing import Any, Optional, Protocol

from adlaunch.autopopulate.budget import validate_linkedin_budget
from adlaunch.autopopulate.draft import CampaignDraft
from adlaunch.autopopulate.types import BudgetType, CampaignType
from adlaunch.errors import AdLaunchError, ValidationFailedError
from adlaunch.notifications import Notifier
from adlaunch.platforms.linkedin import (
    LinkedInAdAccount,
    LinkedInCampaign,
    LinkedInCampaignGroup,
    campaign_group_urn,
    sponsored_account_urn,
)

logger = logging.getLogger("linkedin.campaigns")

DEFAULT_LOCALE = ("US", "en")
_UNEXPECTED = "An unexpected error occurred"


class LinkedInAdsApi(Protocol):
    async def list_ad_accounts(self) -> list[LinkedInAdAccount]: ...

    async def list_campaign_groups(self, account_id: str) -> list[LinkedInCampaignGroup]: ...

    async def create_campaign(self, account_id: str, payload: dict[str, Any]) -> LinkedInCampaign: ...


def _error_message(exc: Exception) -> str:
    return str(exc) if isinstance(exc, AdLaunchError) and str(exc) else _UNEXPECTED


class LinkedInCampaignSelection:
    """Cascading ad account -> campaign group selection for one session.

    Changing the account bumps a generation counter; a campaign group response
    is only applied if no newer account selection happened while it was in
    flight.
    """

    def __init__(self, client: LinkedInAdsApi, *, notifier: Optional[Notifier] = None) -> None:
        self.client = client
        self.notifier = notifier if notifier is not None else Notifier()
        self.accounts: list[LinkedInAdAccount] = []
        self.campaign_groups: list[LinkedInCampaignGroup] = []
        self.selected_account = ""
        self.selected_campaign_group = ""
        self.is_loading_accounts = True
        self.is_loading_campaign_groups = False
        self.accounts_error: Optional[str] = None
        self.campaign_groups_error: Optional[str] = None
        self.last_created_campaign: Optional[LinkedInCampaign] = None
        self._generation = 0

    @property
    def generation(self) -> int:
        return self._generation

    async def load_accounts(self) -> None:
        self.is_loading_accounts = True
        self.accounts_error = None
        try:
            self.accounts = await self.client.list_ad_accounts()
        except Exception as exc:
            logger.warning("Error fetching LinkedIn ad accounts", extra={"error": str(exc)})
            self.accounts = []
            self.accounts_error = _error_message(exc)
            self.notifier.error("Failed to fetch LinkedIn ad accounts", self.accounts_error)
        finally:
            self.is_loading_accounts = False

    async def select_account(self, account_id: str) -> None:
        self._generation += 1
        self.selected_account = account_id
        self.selected_campaign_group = ""
        self.campaign_groups = []
        self.campaign_groups_error = None
        if not account_id:
            self.is_loading_campaign_groups = False
            return
        await self._load_campaign_groups(account_id, self._generation)

    async def _load_campaign_groups(self, account_id: str, generation: int) -> None:
        self.is_loading_campaign_groups = True
        try:
            groups = await self.client.list_campaign_groups(account_id)
        except Exception as exc:
            if generation != self._generation:
                return
            logger.warning(
                "Error fetching LinkedIn campaign groups",
                extra={"account_id": account_id, "error": str(exc)},
            )
            self.campaign_groups = []
            self.campaign_groups_error = _error_message(exc)
            self.notifier.error("Failed to fetch LinkedIn campaign groups", self.campaign_groups_error)
        else:
            if generation != self._generation:
                logger.info("Discarding stale campaign group response", extra={"account_id": account_id})
                return
            self.campaign_groups = groups
        finally:
            if generation == self._generation:
                self.is_loading_campaign_groups = False

    def select_campaign_group(self, campaign_group_id: str) -> None:
        self.selected_campaign_group = campaign_group_id

    async def on_campaign_group_created(self, group: LinkedInCampaignGroup) -> None:
        generation = self._generation
        account_id = self.selected_account
        try:
            groups = await self.client.list_campaign_groups(account_id)
        except Exception as exc:
            logger.warning(
                "Error refreshing campaign groups after creation",
                extra={"account_id": account_id, "error": str(exc)},
            )
            self.notifier.error(
                "Failed to refresh campaign groups",
                "Please refresh the page to see the new campaign group",
            )
            return
        if generation != self._generation:
            return
        self.campaign_groups = groups
        self.selected_campaign_group = group.id

    def on_campaign_created(self, campaign: LinkedInCampaign) -> None:
        logger.info("New LinkedIn campaign created", extra={"campaign_id": campaign.id})
        self.last_created_campaign = campaign


def _epoch_millis(day: date, *, end_of_day: bool = False) -> int:
    if end_of_day:
        return _epoch_millis(day + timedelta(days=1)) - 1
    return int(datetime.combine(day, time.min, tzinfo=timezone.utc).timestamp()) * 1000


def _parse_iso_date(value: str, label: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError as exc:
        raise ValidationFailedError(f"{label} must be a YYYY-MM-DD date") from exc


def _budget_amount(draft: CampaignDraft) -> float:
    try:
        amount = float(draft.budget_amount)
    except (TypeError, ValueError) as exc:
        raise ValidationFailedError("Budget amount must be a number") from exc
    if amount <= 0:
        raise ValidationFailedError("Budget amount must be greater than zero")
    return amount


def build_linkedin_campaign_payload(
    draft: CampaignDraft,
    account_id: str,
    campaign_group_id: str,
) -> dict[str, Any]:
    """Translate a campaign draft into a LinkedIn ``adCampaigns`` create body."""
    if not account_id:
        raise ValidationFailedError("An ad account must be selected")
    if not campaign_group_id:
        raise ValidationFailedError("A campaign group must be selected")
    if not draft.name.strip():
        raise ValidationFailedError("Campaign name is required")
    if not draft.start_date:
        raise ValidationFailedError("Start date is required")

    campaign_type = CampaignType(draft.campaign_type)
    budget_type = BudgetType(draft.budget_type)
    amount = _budget_amount(draft)
    validation = validate_linkedin_budget(amount, campaign_type, budget_type, draft.currency)
    if not validation.is_valid:
        raise ValidationFailedError(
            f"Budget below LinkedIn minimums: {draft.currency} {validation.minimum_required:.2f} required"
        )

    start = _parse_iso_date(draft.start_date, "Start date")
    run_schedule = {"start": _epoch_millis(start)}
    if draft.end_date:
        end = _parse_iso_date(draft.end_date, "End date")
        if end < start:
            raise ValidationFailedError("End date must not be before start date")
        run_schedule["end"] = _epoch_millis(end, end_of_day=True)
    elif budget_type == BudgetType.total:
        raise ValidationFailedError("End date is required for a total budget")

    budget_key = "dailyBudget" if budget_type == BudgetType.daily else "totalBudget"
    country = (draft.country or DEFAULT_LOCALE[0]).upper()
    language = (draft.language or DEFAULT_LOCALE[1]).lower()
    return {
        "account": sponsored_account_urn(account_id),
        "campaignGroup": campaign_group_urn(campaign_group_id),
        "name": draft.name.strip(),
        "type": campaign_type.value,
        "costType": "CPM",
        "status": "DRAFT",
        "offsiteDeliveryEnabled": False,
        "locale": {"country": country, "language": language},
        "runSchedule": run_schedule,
        budget_key: {"amount": f"{amount:.2f}", "currencyCode": draft.currency.upper()},
    }


async def submit_linkedin_campaign(
    client: LinkedInAdsApi,
    draft: CampaignDraft,
    *,
    account_id: str,
    campaign_group_id: str,
    notifier: Optional[Notifier] = None,
) -> LinkedInCampaign:
    notifier = notifier if notifier is not None else Notifier()
    payload = build_linkedin_campaign_payload(draft, account_id, campaign_group_id)
    try:
        campaign = await client.create_campaign(account_id, payload)
    except AdLaunchError as exc:
        notifier.error("Failed to create LinkedIn campaign", str(exc))
        raise
    notifier.success("LinkedIn campaign created", campaign.name)
    return campaign
