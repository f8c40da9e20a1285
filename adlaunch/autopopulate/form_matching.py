from __future__ import annotations

import re
from collections.abc import Sequence
from typing import Optional

from adlaunch.autopopulate.types import StructuredFormData

CAMPAIGN_NAME_SYNONYMS = (
    "campaign name",
    "name of campaign",
    "campaign title",
    "ad name",
    "advertisement name",
)
OBJECTIVE_SYNONYMS = (
    "objective",
    "goal",
    "key result",
    "kpi",
    "target",
    "purpose",
)
BUDGET_SYNONYMS = (
    "budget",
    "ad spend",
    "media spend",
    "spend",
    "investment",
)
PLATFORM_SYNONYMS = (
    "platform",
    "platforms",
    "channel",
    "channels",
    "media mix",
)
CURRENCY_SYNONYMS = ("currency",)
GEOGRAPHY_SYNONYMS = (
    "geography",
    "target geography",
    "target geographies",
    "location",
    "country",
    "region",
)
LANGUAGE_SYNONYMS = (
    "language",
    "languages",
    "target language",
    "audience language",
)
START_DATE_SYNONYMS = (
    "start date",
    "campaign start",
    "begin date",
    "launch date",
    "go live date",
)
END_DATE_SYNONYMS = (
    "end date",
    "campaign end",
    "finish date",
    "completion date",
    "close date",
)
# "target" also appears in audience, geography and language questions.
OBJECTIVE_EXCLUDED_SYNONYMS = ("audience", "persona") + GEOGRAPHY_SYNONYMS + LANGUAGE_SYNONYMS

_NON_WORD_RE = re.compile(r"[^0-9a-z]+")


def normalize_question(text: str) -> str:
    """Lower-case and collapse punctuation/whitespace runs to single spaces."""
    return _NON_WORD_RE.sub(" ", text.lower()).strip()


def question_matches(question: str, synonyms: Sequence[str]) -> bool:
    normalized = normalize_question(question)
    if not normalized:
        return False
    return any(normalize_question(synonym) in normalized for synonym in synonyms)


def find_answer_by_question(
    form_data: StructuredFormData,
    synonyms: Sequence[str],
    *,
    exclude: Sequence[str] = (),
) -> Optional[str]:
    """Return the answer of the first form entry whose question mentions a synonym.

    Entries are scanned in form order; within an entry the synonyms are tried
    in the order given. Entries with a blank answer are skipped, as are
    entries whose question also mentions one of ``exclude``.
    """
    for entry in form_data.formData or []:
        answer = (entry.answer or "").strip()
        if not answer:
            continue
        if exclude and question_matches(entry.question, exclude):
            continue
        if question_matches(entry.question, synonyms):
            return answer
    return None


def find_answers_by_question(form_data: StructuredFormData, synonyms: Sequence[str]) -> list[str]:
    return [
        entry.answer.strip()
        for entry in form_data.formData or []
        if (entry.answer or "").strip() and question_matches(entry.question, synonyms)
    ]
