from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field

from adlaunch.autopopulate.types import BudgetType, CampaignType, StructuredFormData
from adlaunch.schemas.common import NotificationOut


class AutoPopulateRequest(BaseModel):
    formData: Optional[StructuredFormData] = None
    campaignType: CampaignType = CampaignType.SPONSORED_UPDATES


class PopulatedFieldsOut(BaseModel):
    name: Optional[str] = None
    campaignType: Optional[CampaignType] = None
    budgetType: Optional[BudgetType] = None
    budgetAmount: Optional[str] = None
    currency: Optional[str] = None
    country: Optional[str] = None
    language: Optional[str] = None
    startDate: Optional[str] = None
    endDate: Optional[str] = None
    isBudgetTypeLocked: bool = False
    isBudgetAmountLocked: bool = False
    isStartDateLocked: bool = False
    isEndDateLocked: bool = False


class OriginalFormDataOut(BaseModel):
    budgetType: Optional[BudgetType] = None
    budgetAmount: Optional[str] = None
    startDate: Optional[str] = None
    endDate: Optional[str] = None


class BudgetValidationOut(BaseModel):
    isValid: bool
    minimumRequired: float


class BudgetInfoOut(BaseModel):
    totalBudget: float
    allocatedBudget: float
    budgetType: BudgetType
    currency: str
    isLinkedInPlatform: bool
    platformGroups: int
    validation: BudgetValidationOut


class AutoPopulateResponse(BaseModel):
    succeeded: bool
    fields: PopulatedFieldsOut
    originalFormData: Optional[OriginalFormDataOut] = None
    budgetInfo: Optional[BudgetInfoOut] = None
    notifications: list[NotificationOut] = Field(default_factory=list)


class AdAccountOut(BaseModel):
    id: str
    name: str
    currency: Optional[str] = None
    status: Optional[str] = None


class CampaignGroupOut(BaseModel):
    id: str
    name: str
    status: Optional[str] = None


class CampaignGroupCreateRequest(BaseModel):
    name: str = Field(min_length=1)
    status: str = "ACTIVE"
    startDate: Optional[str] = None


class CampaignCreateRequest(BaseModel):
    campaignGroupId: str
    name: str
    campaignType: CampaignType = CampaignType.SPONSORED_UPDATES
    budgetType: BudgetType = BudgetType.daily
    budgetAmount: str
    currency: str = "USD"
    country: Optional[str] = None
    language: Optional[str] = None
    startDate: str
    endDate: Optional[str] = None


class CampaignOut(BaseModel):
    id: str
    name: str
    notifications: list[NotificationOut] = Field(default_factory=list)
