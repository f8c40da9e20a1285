from adlaunch.autopopulate import engine
from adlaunch.autopopulate.draft import CampaignDraft
from adlaunch.autopopulate.engine import PopulatedFields, populate
from adlaunch.autopopulate.types import BudgetType, CampaignType, FormQuestion, StructuredFormData
from adlaunch.notifications import NotificationLevel, Notifier


def _form(*pairs):
    return StructuredFormData(formData=[FormQuestion(question=q, answer=a) for q, a in pairs])


FULL_FORM = _form(
    ("Campaign Name", "Spring Launch 2025"),
    ("Campaign objective", "Lead generation"),
    ("Total budget", "$5,000 total for LinkedIn and Facebook"),
    ("Target geography", "United Kingdom"),
    ("Language", "English"),
    ("Start date", "March 1, 2025"),
    ("End date", "2025-03-31"),
)


def test_missing_form_entries_emit_single_error_and_fill_nothing():
    for form_data in (StructuredFormData(rawText="pasted text only"), None):
        result = populate(form_data, CampaignType.SPONSORED_UPDATES)

        assert len(result.notifications) == 1
        assert result.notifications[0].level == NotificationLevel.error
        assert result.notifications[0].title == "No form data available for auto-population"
        assert result.fields == PopulatedFields()
        assert result.original is None
        assert result.succeeded is False


def test_full_form_populates_and_locks_fields():
    result = populate(FULL_FORM, CampaignType.SPONSORED_UPDATES)
    fields = result.fields

    assert result.succeeded is True
    assert fields.name == "Spring Launch 2025"
    assert fields.campaign_type == CampaignType.SPONSORED_UPDATES
    assert fields.budget_type == BudgetType.total
    assert fields.budget_amount == "2500"
    assert fields.currency == "USD"
    assert fields.country == "GB"
    assert fields.language == "en"
    assert fields.start_date == "2025-03-01"
    assert fields.end_date == "2025-03-31"
    assert fields.is_budget_type_locked is True
    assert fields.is_budget_amount_locked is True
    assert fields.is_start_date_locked is True
    assert fields.is_end_date_locked is True

    assert result.original.budget_type == BudgetType.total
    assert result.original.budget_amount == "2500"
    assert result.original.start_date == "2025-03-01"
    assert result.original.end_date == "2025-03-31"


def test_notifications_follow_budget_then_summary_order():
    result = populate(FULL_FORM, CampaignType.SPONSORED_UPDATES)

    assert [(item.level, item.title) for item in result.notifications] == [
        (NotificationLevel.success, "Budget allocation validated!"),
        (NotificationLevel.info, "Multi-platform budget detected"),
        (NotificationLevel.success, "Auto-populated successfully!"),
    ]
    assert result.notifications[0].description == "USD 2500.00 allocated for LinkedIn (total)"
    assert result.notifications[1].description == "Total budget split across 2 platform groups"
    assert result.notifications[2].description == (
        "Filled: Campaign Name, Campaign Type, Budget Type, Budget Amount, Currency, "
        "Country, Language, Start Date, End Date"
    )


def test_budget_below_minimum_reports_suggestion():
    result = populate(_form(("Budget", "$5 per day")), CampaignType.SPONSORED_UPDATES)

    errors = [item for item in result.notifications if item.level == NotificationLevel.error]
    assert len(errors) == 1
    assert errors[0].title == "Budget below LinkedIn minimums"
    assert errors[0].description == "Current: USD 5.00. Minimum: USD 10. Suggested: USD 15"
    assert result.fields.budget_type == BudgetType.daily
    assert result.fields.budget_amount == "5"


def test_requested_campaign_type_is_used_when_objective_does_not_map():
    result = populate(
        _form(("Objective", "make people happy"), ("Budget", "$12 daily")),
        CampaignType.DYNAMIC,
    )

    assert result.fields.campaign_type is None
    titles = [item.title for item in result.notifications]
    assert "Budget below LinkedIn minimums" in titles


def test_missing_linkedin_platform_warns():
    notifier = Notifier()
    result = populate(
        _form(("Budget", "$1,000"), ("Platforms", "Google, TikTok")),
        CampaignType.SPONSORED_UPDATES,
        notifier=notifier,
    )

    assert result.notifications is notifier.items
    assert [item.title for item in notifier.items] == [
        "LinkedIn not mentioned in form platforms",
        "Multi-platform budget detected",
        "Auto-populated successfully!",
    ]
    assert notifier.of_level(NotificationLevel.warning)[0].description == (
        "Consider if LinkedIn is the right platform for this campaign"
    )
    assert result.fields.budget_amount == "500"


def test_no_matching_fields_is_informational():
    result = populate(_form(("Favorite color", "Blue")), CampaignType.SPONSORED_UPDATES)

    assert result.succeeded is True
    assert [(item.level, item.title) for item in result.notifications] == [
        (NotificationLevel.info, "No matching fields found in form data"),
    ]
    assert result.fields == PopulatedFields()


def test_unmatched_question_leaves_prior_draft_value():
    draft = CampaignDraft(name="Existing name", country="FR")

    draft.apply(populate(_form(("Favorite color", "Blue")), CampaignType.SPONSORED_UPDATES))

    assert draft.name == "Existing name"
    assert draft.country == "FR"


def test_failure_keeps_partial_fields_and_reports_once(monkeypatch):
    def boom(_text):
        raise ValueError("lookup table broken")

    monkeypatch.setattr(engine, "map_geography_to_country", boom)

    result = populate(
        _form(("Campaign name", "Keep me"), ("Country", "France")),
        CampaignType.SPONSORED_UPDATES,
    )

    assert result.succeeded is False
    assert result.fields.name == "Keep me"
    assert result.fields.country is None
    assert [(item.level, item.title) for item in result.notifications] == [
        (NotificationLevel.error, "Auto-populate failed"),
    ]


def test_audience_question_does_not_shadow_objective():
    form = _form(
        ("Target audience", "CMOs in fintech"),
        ("Campaign objective", "Sponsored InMail outreach"),
    )

    result = populate(form, CampaignType.SPONSORED_UPDATES)

    assert result.fields.campaign_type == CampaignType.SPONSORED_INMAILS
