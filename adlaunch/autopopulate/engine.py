from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional

from adlaunch.autopopulate.budget import (
    extract_linkedin_budget_from_form,
    get_linkedin_budget_allocation_summary,
    get_linkedin_budget_suggestions,
)
from adlaunch.autopopulate.dates import parse_date_from_form
from adlaunch.autopopulate.form_matching import (
    CAMPAIGN_NAME_SYNONYMS,
    END_DATE_SYNONYMS,
    GEOGRAPHY_SYNONYMS,
    LANGUAGE_SYNONYMS,
    OBJECTIVE_EXCLUDED_SYNONYMS,
    OBJECTIVE_SYNONYMS,
    START_DATE_SYNONYMS,
    find_answer_by_question,
)
from adlaunch.autopopulate.mappings import (
    map_geography_to_country,
    map_language_code,
    map_objective_to_campaign_type,
)
from adlaunch.autopopulate.types import BudgetInfo, BudgetType, CampaignType, StructuredFormData
from adlaunch.notifications import Notification, Notifier

logger = logging.getLogger("autopopulate")


@dataclass
class PopulatedFields:
    name: Optional[str] = None
    campaign_type: Optional[CampaignType] = None
    budget_type: Optional[BudgetType] = None
    budget_amount: Optional[str] = None
    currency: Optional[str] = None
    country: Optional[str] = None
    language: Optional[str] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    is_budget_type_locked: bool = False
    is_budget_amount_locked: bool = False
    is_start_date_locked: bool = False
    is_end_date_locked: bool = False


@dataclass
class OriginalFormData:
    """Snapshot of the machine-filled values that were locked."""

    budget_type: Optional[BudgetType] = None
    budget_amount: Optional[str] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None


@dataclass
class AutoPopulateResult:
    fields: PopulatedFields = field(default_factory=PopulatedFields)
    original: Optional[OriginalFormData] = None
    budget: Optional[BudgetInfo] = None
    notifications: list[Notification] = field(default_factory=list)
    succeeded: bool = False


def format_amount(value: float) -> str:
    """Render an amount without a trailing ``.0`` for whole numbers."""
    if float(value).is_integer():
        return str(int(value))
    return f"{value:.2f}".rstrip("0").rstrip(".")


def _budget_notifications(
    notifier: Notifier, budget: BudgetInfo, campaign_type: CampaignType
) -> None:
    currency = budget.currency
    if not budget.is_linkedin_platform:
        notifier.warning(
            "LinkedIn not mentioned in form platforms",
            "Consider if LinkedIn is the right platform for this campaign",
        )
    elif not budget.validation.is_valid:
        suggestions = get_linkedin_budget_suggestions(campaign_type, budget.budget_type, currency)
        notifier.error(
            "Budget below LinkedIn minimums",
            f"Current: {currency} {budget.allocated_budget:.2f}. "
            f"Minimum: {currency} {format_amount(budget.validation.minimum_required)}. "
            f"Suggested: {currency} {format_amount(suggestions.suggested)}",
        )
    else:
        notifier.success(
            "Budget allocation validated!",
            f"{currency} {budget.allocated_budget:.2f} allocated for LinkedIn ({budget.budget_type.value})",
        )

    if budget.platform_groups > 1:
        notifier.info(
            "Multi-platform budget detected",
            f"Total budget split across {budget.platform_groups} platform groups",
        )


def populate(
    form_data: Optional[StructuredFormData],
    campaign_type: CampaignType = CampaignType.SPONSORED_UPDATES,
    *,
    notifier: Optional[Notifier] = None,
) -> AutoPopulateResult:
    """Fill a LinkedIn campaign draft from intake-form answers.

    Fields are filled one at a time into ``result.fields``. If anything raises
    part way through, the fields filled so far are kept, ``succeeded`` stays
    false and a single "Auto-populate failed" error is reported.
    """
    notifier = notifier if notifier is not None else Notifier()
    result = AutoPopulateResult(notifications=notifier.items)

    if form_data is None or form_data.formData is None:
        notifier.error("No form data available for auto-population")
        return result

    fields = result.fields
    try:
        populated: list[str] = []

        name = find_answer_by_question(form_data, CAMPAIGN_NAME_SYNONYMS)
        if name:
            fields.name = name
            populated.append("Campaign Name")

        resolved_type = CampaignType(campaign_type)
        objective = find_answer_by_question(form_data, OBJECTIVE_SYNONYMS, exclude=OBJECTIVE_EXCLUDED_SYNONYMS)
        if objective:
            mapped_type = map_objective_to_campaign_type(objective)
            if mapped_type is not None:
                fields.campaign_type = mapped_type
                resolved_type = mapped_type
                populated.append("Campaign Type")

        budget = extract_linkedin_budget_from_form(form_data, resolved_type)
        result.budget = budget
        logger.info(
            "LinkedIn campaign budget analysis",
            extra={"summary": get_linkedin_budget_allocation_summary(budget)},
        )
        original = OriginalFormData()

        if budget.total_budget > 0:
            fields.budget_type = budget.budget_type
            fields.is_budget_type_locked = True
            original.budget_type = budget.budget_type
            populated.append("Budget Type")

        if budget.allocated_budget > 0:
            amount = format_amount(budget.allocated_budget)
            fields.budget_amount = amount
            fields.is_budget_amount_locked = True
            original.budget_amount = amount
            populated.append("Budget Amount")

        if budget.total_budget > 0 or budget.currency_detected:
            fields.currency = budget.currency
            populated.append("Currency")

        geography = find_answer_by_question(form_data, GEOGRAPHY_SYNONYMS)
        if geography:
            country = map_geography_to_country(geography)
            if country:
                fields.country = country
                populated.append("Country")

        language_answer = find_answer_by_question(form_data, LANGUAGE_SYNONYMS)
        if language_answer:
            language = map_language_code(language_answer)
            if language:
                fields.language = language
                populated.append("Language")

        start_answer = find_answer_by_question(form_data, START_DATE_SYNONYMS)
        start_date = parse_date_from_form(start_answer) if start_answer else None
        if start_date:
            fields.start_date = start_date
            fields.is_start_date_locked = True
            original.start_date = start_date
            populated.append("Start Date")

        end_answer = find_answer_by_question(form_data, END_DATE_SYNONYMS)
        end_date = parse_date_from_form(end_answer) if end_answer else None
        if end_date:
            fields.end_date = end_date
            fields.is_end_date_locked = True
            original.end_date = end_date
            populated.append("End Date")

        result.original = original

        if budget.total_budget > 0:
            _budget_notifications(notifier, budget, resolved_type)

        if populated:
            notifier.success("Auto-populated successfully!", f"Filled: {', '.join(populated)}")
        else:
            notifier.info(
                "No matching fields found in form data",
                "Form data may not contain the expected campaign information",
            )
        result.succeeded = True
    except Exception:
        logger.exception("Error during auto-populate")
        notifier.error("Auto-populate failed", "An error occurred while processing the form data")

    return result
