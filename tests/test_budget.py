import pytest

from adlaunch.autopopulate.budget import (
    detect_budget_type,
    detect_currency,
    detect_platforms,
    extract_budget_amount,
    extract_linkedin_budget_from_form,
    get_linkedin_budget_allocation_summary,
    get_linkedin_budget_suggestions,
    get_minimum_budget,
    validate_linkedin_budget,
)
from adlaunch.autopopulate.types import BudgetType, CampaignType, FormQuestion, StructuredFormData


def _form(*pairs):
    return StructuredFormData(formData=[FormQuestion(question=q, answer=a) for q, a in pairs])


def test_shared_budget_is_split_equally_between_platform_groups():
    info = extract_linkedin_budget_from_form(_form(("Budget", "$5,000 total for LinkedIn and Facebook")))

    assert info.total_budget == 5000
    assert info.platform_groups == 2
    assert info.allocated_budget == pytest.approx(info.total_budget / 2)
    assert info.budget_type == BudgetType.total
    assert info.currency == "USD"
    assert info.is_linkedin_platform is True
    assert info.validation.is_valid is True


def test_platform_answers_count_towards_platform_groups():
    info = extract_linkedin_budget_from_form(
        _form(
            ("Budget", "$9,000 total"),
            ("Platforms", "LinkedIn, Facebook, Instagram, Google Ads"),
        )
    )

    # Facebook and Instagram share one Meta budget.
    assert info.platforms == ("linkedin", "meta", "google")
    assert info.platform_groups == 3
    assert info.allocated_budget == 3000


def test_form_without_linkedin_is_flagged():
    info = extract_linkedin_budget_from_form(_form(("Budget", "$1,000"), ("Platforms", "Google and TikTok")))

    assert info.is_linkedin_platform is False
    assert info.platform_groups == 2


def test_form_naming_no_platform_is_treated_as_linkedin_only():
    info = extract_linkedin_budget_from_form(_form(("Budget", "$1,000")))

    assert info.is_linkedin_platform is True
    assert info.platform_groups == 1
    assert info.allocated_budget == 1000


def test_budget_below_minimum_fails_validation_with_suggestion_above_minimum():
    info = extract_linkedin_budget_from_form(
        _form(("Budget", "$5 per day")),
        CampaignType.SPONSORED_INMAILS,
    )

    assert info.budget_type == BudgetType.daily
    assert info.validation.is_valid is False
    assert info.validation.minimum_required == 15

    suggestions = get_linkedin_budget_suggestions(CampaignType.SPONSORED_INMAILS, BudgetType.daily, "USD")
    assert suggestions.suggested >= info.validation.minimum_required
    assert suggestions.recommended >= suggestions.suggested


def test_currency_answer_takes_precedence():
    info = extract_linkedin_budget_from_form(_form(("Budget", "$2,000"), ("Currency", "EUR")))

    assert info.currency == "EUR"
    assert info.currency_detected is True


def test_missing_budget_yields_zero_and_default_currency():
    info = extract_linkedin_budget_from_form(_form(("Campaign name", "Launch")))

    assert info.total_budget == 0
    assert info.allocated_budget == 0
    assert info.currency == "USD"
    assert info.currency_detected is False
    assert info.validation.is_valid is False


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("$5,000", 5000),
        ("€12.5k", 12500),
        ("2 million dollars", 2_000_000),
        ("15k", 15000),
        ("Phase 2: $10,000 across 3 channels", 10000),
        ("about 7500", 7500),
        ("no budget yet", 0),
        ("5000USD", 5000),
        ("5,000EUR", 5000),
        ("USD5000", 5000),
        ("1,250.50GBP a day", 1250.5),
    ],
)
def test_extract_budget_amount(text, expected):
    assert extract_budget_amount(text) == expected


def test_detect_budget_type():
    assert detect_budget_type("$100/day") == BudgetType.daily
    assert detect_budget_type("Daily budget of $50") == BudgetType.daily
    assert detect_budget_type("$3000 for the quarter") == BudgetType.total


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("CAD 5000", "CAD"),
        ("A$2,000", "AUD"),
        ("£800", "GBP"),
        ("500 euros", "EUR"),
        ("$500", "USD"),
        ("1000", None),
    ],
)
def test_detect_currency(text, expected):
    assert detect_currency(text) == expected


def test_detect_platforms_groups_aliases():
    assert detect_platforms("YouTube and Google Display") == ("google",)
    assert detect_platforms("nothing here") == ()


def test_minimums_depend_on_campaign_type_and_currency():
    assert get_minimum_budget(CampaignType.SPONSORED_UPDATES, BudgetType.daily, "USD") == 10
    assert get_minimum_budget(CampaignType.DYNAMIC, BudgetType.total, "USD") == 200
    assert get_minimum_budget(CampaignType.SPONSORED_UPDATES, BudgetType.daily, "JPY") == 1500
    # Unknown currencies fall back to the default currency row.
    assert get_minimum_budget(CampaignType.DYNAMIC, BudgetType.daily, "XYZ") == 20


def test_validate_linkedin_budget_requires_positive_amount():
    assert validate_linkedin_budget(0, CampaignType.TEXT_AD, BudgetType.daily, "USD").is_valid is False
    assert validate_linkedin_budget(10, CampaignType.TEXT_AD, BudgetType.daily, "USD").is_valid is True


def test_allocation_summary_mentions_split_and_status():
    info = extract_linkedin_budget_from_form(_form(("Budget", "$5,000 total for LinkedIn and Facebook")))

    summary = get_linkedin_budget_allocation_summary(info)

    assert "groups=2" in summary
    assert "linkedin=USD 2500.00" in summary
    assert "(valid)" in summary


def test_currency_code_attached_to_amount_is_read_in_full():
    info = extract_linkedin_budget_from_form(_form(("Budget", "5000USD total")))

    assert info.total_budget == 5000
    assert info.currency == "USD"
    assert info.budget_type == BudgetType.total
