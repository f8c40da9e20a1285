from __future__ import annotations

from datetime import date, datetime, timezone

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from adlaunch.auth.dependencies import AuthContext, get_current_user
from adlaunch.autopopulate.draft import CampaignDraft
from adlaunch.autopopulate.engine import populate
from adlaunch.db.deps import get_session
from adlaunch.db.enums import PlatformEnum
from adlaunch.errors import ValidationFailedError
from adlaunch.notifications import Notifier
from adlaunch.platforms.linkedin import LinkedInAdsClient
from adlaunch.schemas.common import NotificationOut
from adlaunch.schemas.linkedin import (
    AdAccountOut,
    AutoPopulateRequest,
    AutoPopulateResponse,
    BudgetInfoOut,
    BudgetValidationOut,
    CampaignCreateRequest,
    CampaignGroupCreateRequest,
    CampaignGroupOut,
    CampaignOut,
    OriginalFormDataOut,
    PopulatedFieldsOut,
)
from adlaunch.services.connections import require_connection
from adlaunch.services.linkedin_campaigns import submit_linkedin_campaign

router = APIRouter(prefix="/organizations/{organization_id}/linkedin", tags=["linkedin"])


def get_linkedin_ads_client(
    organization_id: str,
    auth: AuthContext = Depends(get_current_user),
    session: Session = Depends(get_session),
) -> LinkedInAdsClient:
    connection = require_connection(
        session,
        user_id=auth.user_id,
        organization_id=organization_id,
        platform=PlatformEnum.linkedin,
    )
    return LinkedInAdsClient(access_token=connection.access_token)


@router.post("/autopopulate", response_model=AutoPopulateResponse)
def autopopulate(
    organization_id: str,
    payload: AutoPopulateRequest,
    auth: AuthContext = Depends(get_current_user),
) -> AutoPopulateResponse:
    result = populate(payload.formData, payload.campaignType)
    fields = result.fields
    original = result.original
    budget = result.budget
    return AutoPopulateResponse(
        succeeded=result.succeeded,
        fields=PopulatedFieldsOut(
            name=fields.name,
            campaignType=fields.campaign_type,
            budgetType=fields.budget_type,
            budgetAmount=fields.budget_amount,
            currency=fields.currency,
            country=fields.country,
            language=fields.language,
            startDate=fields.start_date,
            endDate=fields.end_date,
            isBudgetTypeLocked=fields.is_budget_type_locked,
            isBudgetAmountLocked=fields.is_budget_amount_locked,
            isStartDateLocked=fields.is_start_date_locked,
            isEndDateLocked=fields.is_end_date_locked,
        ),
        originalFormData=(
            OriginalFormDataOut(
                budgetType=original.budget_type,
                budgetAmount=original.budget_amount,
                startDate=original.start_date,
                endDate=original.end_date,
            )
            if original
            else None
        ),
        budgetInfo=(
            BudgetInfoOut(
                totalBudget=budget.total_budget,
                allocatedBudget=budget.allocated_budget,
                budgetType=budget.budget_type,
                currency=budget.currency,
                isLinkedInPlatform=budget.is_linkedin_platform,
                platformGroups=budget.platform_groups,
                validation=BudgetValidationOut(
                    isValid=budget.validation.is_valid,
                    minimumRequired=budget.validation.minimum_required,
                ),
            )
            if budget
            else None
        ),
        notifications=[NotificationOut.from_notification(item) for item in result.notifications],
    )


@router.get("/ad-accounts", response_model=list[AdAccountOut])
async def list_ad_accounts(client: LinkedInAdsClient = Depends(get_linkedin_ads_client)) -> list[AdAccountOut]:
    accounts = await client.list_ad_accounts()
    return [
        AdAccountOut(id=account.id, name=account.name, currency=account.currency, status=account.status)
        for account in accounts
    ]


@router.get("/ad-accounts/{account_id}/campaign-groups", response_model=list[CampaignGroupOut])
async def list_campaign_groups(
    account_id: str,
    client: LinkedInAdsClient = Depends(get_linkedin_ads_client),
) -> list[CampaignGroupOut]:
    groups = await client.list_campaign_groups(account_id)
    return [CampaignGroupOut(id=group.id, name=group.name, status=group.status) for group in groups]


@router.post(
    "/ad-accounts/{account_id}/campaign-groups",
    response_model=CampaignGroupOut,
    status_code=status.HTTP_201_CREATED,
)
async def create_campaign_group(
    account_id: str,
    payload: CampaignGroupCreateRequest,
    client: LinkedInAdsClient = Depends(get_linkedin_ads_client),
) -> CampaignGroupOut:
    if payload.startDate:
        try:
            start = datetime.combine(date.fromisoformat(payload.startDate), datetime.min.time(), tzinfo=timezone.utc)
        except ValueError as exc:
            raise ValidationFailedError("startDate must be a YYYY-MM-DD date") from exc
    else:
        start = datetime.now(timezone.utc)
    group = await client.create_campaign_group(
        account_id,
        name=payload.name,
        status=payload.status,
        run_schedule={"start": int(start.timestamp() * 1000)},
    )
    return CampaignGroupOut(id=group.id, name=group.name, status=group.status)


@router.post(
    "/ad-accounts/{account_id}/campaigns",
    response_model=CampaignOut,
    status_code=status.HTTP_201_CREATED,
)
async def create_campaign(
    account_id: str,
    payload: CampaignCreateRequest,
    client: LinkedInAdsClient = Depends(get_linkedin_ads_client),
) -> CampaignOut:
    draft = CampaignDraft(
        name=payload.name,
        campaign_type=payload.campaignType,
        budget_type=payload.budgetType,
        budget_amount=payload.budgetAmount,
        currency=payload.currency,
        country=payload.country or "",
        language=payload.language or "",
        start_date=payload.startDate,
        end_date=payload.endDate or "",
    )
    notifier = Notifier()
    campaign = await submit_linkedin_campaign(
        client,
        draft,
        account_id=account_id,
        campaign_group_id=payload.campaignGroupId,
        notifier=notifier,
    )
    return CampaignOut(
        id=campaign.id,
        name=campaign.name,
        notifications=[NotificationOut.from_notification(item) for item in notifier.items],
    )
