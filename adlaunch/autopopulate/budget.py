from __future__ import annotations

import math
import re
from dataclasses import dataclass
from typing import Optional

from adlaunch.autopopulate.form_matching import (
    BUDGET_SYNONYMS,
    CURRENCY_SYNONYMS,
    PLATFORM_SYNONYMS,
    find_answer_by_question,
    find_answers_by_question,
)
from adlaunch.autopopulate.mappings import keywords_in
from adlaunch.autopopulate.types import (
    BudgetInfo,
    BudgetSuggestion,
    BudgetType,
    BudgetValidation,
    CampaignType,
    StructuredFormData,
)
from adlaunch.config import settings

LINKEDIN_PLATFORM = "linkedin"

# A platform group is one ad buying surface; Facebook and Instagram share a
# single Meta budget, YouTube is bought through Google, and so on.
PLATFORM_GROUP_KEYWORDS: dict[str, tuple[str, ...]] = {
    LINKEDIN_PLATFORM: ("linkedin", "linked in"),
    "meta": ("facebook", "meta", "instagram", "fb", "ig"),
    "google": ("google", "youtube", "adwords", "gdn"),
    "tiktok": ("tiktok", "tik tok"),
    "microsoft": ("bing", "microsoft ads", "microsoft advertising"),
    "x": ("twitter",),
    "snapchat": ("snapchat",),
    "pinterest": ("pinterest",),
    "reddit": ("reddit",),
}

DAILY_KEYWORDS = ("daily", "per day", "a day", "each day", "every day", "day budget")
_PER_DAY_RE = re.compile(r"/\s*day\b", re.IGNORECASE)

ISO_CURRENCY_CODES = (
    "USD", "EUR", "GBP", "CAD", "AUD", "NZD", "SGD", "HKD", "JPY", "INR",
    "CHF", "SEK", "NOK", "DKK", "PLN", "BRL", "MXN", "ZAR", "AED",
)
_ISO_CODE_RE = re.compile(r"(?<![A-Za-z])(" + "|".join(ISO_CURRENCY_CODES) + r")(?![A-Za-z])", re.IGNORECASE)
_PREFIXED_DOLLAR_RE = re.compile(r"(?<![A-Za-z])(AU|A|CA|C|NZ|SG|S|HK|US)\$")
_PREFIXED_DOLLAR_CURRENCIES = {
    "AU": "AUD",
    "A": "AUD",
    "CA": "CAD",
    "C": "CAD",
    "NZ": "NZD",
    "SG": "SGD",
    "S": "SGD",
    "HK": "HKD",
    "US": "USD",
}
# Longer phrases first so "canadian dollars" is not read as plain dollars.
CURRENCY_WORDS: tuple[tuple[str, str], ...] = (
    ("canadian dollar", "CAD"),
    ("australian dollar", "AUD"),
    ("new zealand dollar", "NZD"),
    ("singapore dollar", "SGD"),
    ("hong kong dollar", "HKD"),
    ("swiss franc", "CHF"),
    ("dollar", "USD"),
    ("euro", "EUR"),
    ("pound", "GBP"),
    ("sterling", "GBP"),
    ("yen", "JPY"),
    ("rupee", "INR"),
)
CURRENCY_SYMBOLS: tuple[tuple[str, str], ...] = (
    ("€", "EUR"),
    ("£", "GBP"),
    ("¥", "JPY"),
    ("₹", "INR"),
    ("$", "USD"),
)

# Minimum LinkedIn budgets per currency as (daily, total).
_CURRENCY_MINIMUMS: dict[str, tuple[float, float]] = {
    "USD": (10, 100),
    "EUR": (10, 100),
    "GBP": (10, 100),
    "CHF": (10, 100),
    "CAD": (14, 140),
    "AUD": (15, 150),
    "NZD": (17, 170),
    "SGD": (14, 140),
    "HKD": (80, 800),
    "JPY": (1500, 15000),
    "INR": (800, 8000),
    "SEK": (110, 1100),
    "NOK": (110, 1100),
    "DKK": (70, 700),
    "PLN": (40, 400),
    "BRL": (50, 500),
    "MXN": (180, 1800),
    "ZAR": (180, 1800),
    "AED": (37, 370),
}
_CAMPAIGN_TYPE_FACTORS: dict[CampaignType, float] = {
    CampaignType.SPONSORED_UPDATES: 1.0,
    CampaignType.TEXT_AD: 1.0,
    CampaignType.SPONSORED_INMAILS: 1.5,
    CampaignType.DYNAMIC: 2.0,
}

LINKEDIN_MINIMUM_BUDGETS: dict[CampaignType, dict[str, dict[BudgetType, float]]] = {
    campaign_type: {
        currency: {
            BudgetType.daily: daily * factor,
            BudgetType.total: total * factor,
        }
        for currency, (daily, total) in _CURRENCY_MINIMUMS.items()
    }
    for campaign_type, factor in _CAMPAIGN_TYPE_FACTORS.items()
}

_ISO_ALTERNATION = "|".join(ISO_CURRENCY_CODES)
# An ISO code may touch the number on either side ("USD5000", "5,000EUR").
_AMOUNT_RE = re.compile(
    r"(?:" + "|".join(f"(?<={code})" for code in ISO_CURRENCY_CODES) + r"|(?<![\w.]))"
    r"(?P<number>\d{1,3}(?:,\d{3})+(?:\.\d+)?|\d+(?:\.\d+)?)(?!\d|[.,]\d)"
    r"\s*(?P<suffix>thousand|million|mm|k|m)?"
    r"(?:(?=(?:" + _ISO_ALTERNATION + r")(?![a-z]))|(?![a-z]))",
    re.IGNORECASE,
)
_SUFFIX_MULTIPLIERS = {"k": 1_000, "thousand": 1_000, "m": 1_000_000, "mm": 1_000_000, "million": 1_000_000}
_MARKER_AFTER_RE = re.compile(
    r"^\s*(?:" + _ISO_ALTERNATION + r"|dollars?|euros?|pounds?|yen|rupees?)(?![a-z])",
    re.IGNORECASE,
)
_MARKER_BEFORE_RE = re.compile(
    r"(?:[$€£¥₹]|(?<![A-Za-z])(?:" + _ISO_ALTERNATION + r"))\s*$",
    re.IGNORECASE,
)


@dataclass(frozen=True)
class MoneyMention:
    amount: float
    has_currency_marker: bool
    has_suffix: bool


def parse_money_amounts(text: str) -> list[MoneyMention]:
    mentions: list[MoneyMention] = []
    for match in _AMOUNT_RE.finditer(text or ""):
        amount = float(match["number"].replace(",", ""))
        suffix = (match["suffix"] or "").lower()
        if suffix:
            amount *= _SUFFIX_MULTIPLIERS[suffix]
        before = text[max(0, match.start() - 6) : match.start()]
        after = text[match.end() : match.end() + 10]
        marked = bool(_MARKER_BEFORE_RE.search(before) or _MARKER_AFTER_RE.search(after))
        mentions.append(MoneyMention(amount=amount, has_currency_marker=marked, has_suffix=bool(suffix)))
    return mentions


def extract_budget_amount(text: str) -> float:
    """Pick the budget figure from free text; 0.0 when there is none.

    Amounts next to a currency marker win over amounts with a ``k``/``m``
    suffix, which win over bare numbers. The first mention of the strongest
    kind is used.
    """
    mentions = parse_money_amounts(text)
    for predicate in (
        lambda mention: mention.has_currency_marker,
        lambda mention: mention.has_suffix,
        lambda mention: True,
    ):
        for mention in mentions:
            if predicate(mention) and mention.amount > 0:
                return mention.amount
    return 0.0


def detect_budget_type(text: str) -> BudgetType:
    if keywords_in(text, DAILY_KEYWORDS) or _PER_DAY_RE.search(text or ""):
        return BudgetType.daily
    return BudgetType.total


def detect_currency(text: str) -> Optional[str]:
    if not text:
        return None
    code_match = _ISO_CODE_RE.search(text)
    if code_match:
        return code_match.group(1).upper()
    prefixed = _PREFIXED_DOLLAR_RE.search(text)
    if prefixed:
        return _PREFIXED_DOLLAR_CURRENCIES[prefixed.group(1)]
    lowered = text.lower()
    for word, currency in CURRENCY_WORDS:
        if re.search(rf"(?<![a-z]){re.escape(word)}s?(?![a-z])", lowered):
            return currency
    for symbol, currency in CURRENCY_SYMBOLS:
        if symbol in text:
            return currency
    return None


def detect_platforms(text: str) -> tuple[str, ...]:
    return tuple(
        group for group, keywords in PLATFORM_GROUP_KEYWORDS.items() if keywords_in(text, keywords)
    )


def get_minimum_budget(campaign_type: CampaignType, budget_type: BudgetType, currency: str) -> float:
    by_currency = LINKEDIN_MINIMUM_BUDGETS[CampaignType(campaign_type)]
    row = (
        by_currency.get(currency.upper())
        or by_currency.get(settings.DEFAULT_CURRENCY)
        or by_currency["USD"]
    )
    return row[BudgetType(budget_type)]


def get_linkedin_budget_suggestions(
    campaign_type: CampaignType, budget_type: BudgetType, currency: str
) -> BudgetSuggestion:
    minimum = get_minimum_budget(campaign_type, budget_type, currency)
    return BudgetSuggestion(
        minimum=minimum,
        suggested=float(math.ceil(minimum * 1.5)),
        recommended=float(math.ceil(minimum * 3)),
    )


def validate_linkedin_budget(
    amount: float, campaign_type: CampaignType, budget_type: BudgetType, currency: str
) -> BudgetValidation:
    minimum = get_minimum_budget(campaign_type, budget_type, currency)
    return BudgetValidation(is_valid=amount > 0 and amount >= minimum, minimum_required=minimum)


def extract_linkedin_budget_from_form(
    form_data: StructuredFormData,
    campaign_type: CampaignType = CampaignType.SPONSORED_UPDATES,
) -> BudgetInfo:
    budget_text = find_answer_by_question(form_data, BUDGET_SYNONYMS) or ""
    platform_text = " ".join([budget_text, *find_answers_by_question(form_data, PLATFORM_SYNONYMS)])
    currency_text = find_answer_by_question(form_data, CURRENCY_SYNONYMS) or ""

    total_budget = extract_budget_amount(budget_text)
    budget_type = detect_budget_type(budget_text)
    detected_currency = detect_currency(currency_text) or detect_currency(budget_text)
    currency = detected_currency or settings.DEFAULT_CURRENCY

    platforms = detect_platforms(platform_text)
    platform_groups = max(1, len(platforms))
    # A form that names no platform at all is read as a LinkedIn-only budget.
    is_linkedin_platform = not platforms or LINKEDIN_PLATFORM in platforms
    allocated_budget = round(total_budget / platform_groups, 2)

    return BudgetInfo(
        total_budget=total_budget,
        allocated_budget=allocated_budget,
        budget_type=budget_type,
        currency=currency,
        is_linkedin_platform=is_linkedin_platform,
        platform_groups=platform_groups,
        validation=validate_linkedin_budget(allocated_budget, campaign_type, budget_type, currency),
        platforms=platforms,
        currency_detected=detected_currency is not None,
    )


def get_linkedin_budget_allocation_summary(budget_info: BudgetInfo) -> str:
    platforms = ", ".join(budget_info.platforms) or "none mentioned"
    status = "valid" if budget_info.validation.is_valid else "below minimum"
    return (
        f"total={budget_info.currency} {budget_info.total_budget:.2f} ({budget_info.budget_type.value}); "
        f"platforms={platforms}; groups={budget_info.platform_groups}; "
        f"linkedin={budget_info.currency} {budget_info.allocated_budget:.2f}; "
        f"minimum={budget_info.currency} {budget_info.validation.minimum_required:.2f} ({status})"
    )
