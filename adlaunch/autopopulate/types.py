from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class CampaignType(str, Enum):
    SPONSORED_UPDATES = "SPONSORED_UPDATES"
    TEXT_AD = "TEXT_AD"
    SPONSORED_INMAILS = "SPONSORED_INMAILS"
    DYNAMIC = "DYNAMIC"


class BudgetType(str, Enum):
    daily = "daily"
    total = "total"


class FormQuestion(BaseModel):
    model_config = ConfigDict(frozen=True)

    question: str
    answer: str = ""


class StructuredFormData(BaseModel):
    """Question/answer pairs extracted from an intake form."""

    model_config = ConfigDict(frozen=True)

    rawText: str = ""
    formData: Optional[list[FormQuestion]] = Field(default=None)


@dataclass(frozen=True)
class BudgetValidation:
    is_valid: bool
    minimum_required: float


@dataclass(frozen=True)
class BudgetSuggestion:
    minimum: float
    suggested: float
    recommended: float


@dataclass(frozen=True)
class BudgetInfo:
    total_budget: float
    allocated_budget: float
    budget_type: BudgetType
    currency: str
    is_linkedin_platform: bool
    platform_groups: int
    validation: BudgetValidation
    platforms: tuple[str, ...] = field(default_factory=tuple)
    currency_detected: bool = False
