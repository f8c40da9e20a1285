from __future__ import annotations

import re
from collections.abc import Sequence
from typing import Optional

from adlaunch.autopopulate.form_matching import normalize_question
from adlaunch.autopopulate.types import CampaignType

# Checked in order; the first rule with a matching keyword decides.
OBJECTIVE_CAMPAIGN_TYPE_RULES: tuple[tuple[CampaignType, tuple[str, ...]], ...] = (
    (
        CampaignType.SPONSORED_INMAILS,
        ("inmail", "inmails", "message ad", "message ads", "messaging", "conversation ad", "direct message"),
    ),
    (
        CampaignType.DYNAMIC,
        ("dynamic", "follower", "followers", "spotlight", "personalized ad", "personalised ad"),
    ),
    (
        CampaignType.TEXT_AD,
        ("text ad", "text ads", "sidebar", "pay per click", "ppc", "search ad"),
    ),
    (
        CampaignType.SPONSORED_UPDATES,
        (
            "awareness",
            "brand",
            "reach",
            "engagement",
            "video",
            "views",
            "lead",
            "leads",
            "lead generation",
            "website",
            "traffic",
            "visits",
            "conversion",
            "conversions",
            "sponsored content",
            "sponsored update",
            "sign ups",
            "signups",
            "downloads",
        ),
    ),
)

GEOGRAPHY_COUNTRY_CODES: dict[str, str] = {
    "united states of america": "US",
    "united states": "US",
    "usa": "US",
    "u s a": "US",
    "u s": "US",
    "north america": "US",
    "united kingdom": "GB",
    "uk": "GB",
    "u k": "GB",
    "great britain": "GB",
    "britain": "GB",
    "england": "GB",
    "scotland": "GB",
    "wales": "GB",
    "canada": "CA",
    "australia": "AU",
    "new zealand": "NZ",
    "ireland": "IE",
    "germany": "DE",
    "deutschland": "DE",
    "france": "FR",
    "spain": "ES",
    "italy": "IT",
    "netherlands": "NL",
    "holland": "NL",
    "belgium": "BE",
    "switzerland": "CH",
    "austria": "AT",
    "sweden": "SE",
    "norway": "NO",
    "denmark": "DK",
    "finland": "FI",
    "poland": "PL",
    "portugal": "PT",
    "india": "IN",
    "singapore": "SG",
    "japan": "JP",
    "china": "CN",
    "hong kong": "HK",
    "south korea": "KR",
    "korea": "KR",
    "brazil": "BR",
    "mexico": "MX",
    "argentina": "AR",
    "south africa": "ZA",
    "nigeria": "NG",
    "united arab emirates": "AE",
    "uae": "AE",
    "saudi arabia": "SA",
    "israel": "IL",
    "turkey": "TR",
}

LANGUAGE_CODES: dict[str, str] = {
    "english": "en",
    "french": "fr",
    "francais": "fr",
    "german": "de",
    "deutsch": "de",
    "spanish": "es",
    "espanol": "es",
    "italian": "it",
    "portuguese": "pt",
    "dutch": "nl",
    "swedish": "sv",
    "norwegian": "no",
    "danish": "da",
    "finnish": "fi",
    "polish": "pl",
    "turkish": "tr",
    "russian": "ru",
    "arabic": "ar",
    "hebrew": "he",
    "hindi": "hi",
    "japanese": "ja",
    "korean": "ko",
    "chinese": "zh",
    "mandarin": "zh",
    "malay": "ms",
    "indonesian": "in",
    "romanian": "ro",
    "czech": "cs",
}

_KNOWN_COUNTRY_CODES = frozenset(GEOGRAPHY_COUNTRY_CODES.values())
_KNOWN_LANGUAGE_CODES = frozenset(LANGUAGE_CODES.values())


def _contains_phrase(haystack: str, phrase: str) -> bool:
    return re.search(rf"(?<![0-9a-z]){re.escape(phrase)}(?![0-9a-z])", haystack) is not None


def _earliest_alias(text: str, table: dict[str, str]) -> Optional[str]:
    haystack = normalize_question(text)
    best: Optional[tuple[int, int, str]] = None
    for alias, code in table.items():
        match = re.search(rf"(?<![0-9a-z]){re.escape(alias)}(?![0-9a-z])", haystack)
        if match is None:
            continue
        # Earliest mention wins; on a tie the longer alias is more specific.
        candidate = (match.start(), -len(alias), code)
        if best is None or candidate[:2] < best[:2]:
            best = candidate
    return best[2] if best else None


def _bare_code(text: str, known: frozenset[str], *, upper: bool) -> Optional[str]:
    cleaned = text.strip()
    if len(cleaned) != 2 or not cleaned.isalpha():
        return None
    code = cleaned.upper() if upper else cleaned.lower()
    return code if code in known else None


def map_objective_to_campaign_type(text: str) -> Optional[CampaignType]:
    haystack = normalize_question(text)
    if not haystack:
        return None
    for campaign_type, keywords in OBJECTIVE_CAMPAIGN_TYPE_RULES:
        if any(_contains_phrase(haystack, keyword) for keyword in keywords):
            return campaign_type
    return None


def map_geography_to_country(text: str) -> Optional[str]:
    return _bare_code(text, _KNOWN_COUNTRY_CODES, upper=True) or _earliest_alias(text, GEOGRAPHY_COUNTRY_CODES)


def map_language_code(text: str) -> Optional[str]:
    return _bare_code(text, _KNOWN_LANGUAGE_CODES, upper=False) or _earliest_alias(text, LANGUAGE_CODES)


def keywords_in(text: str, keywords: Sequence[str]) -> list[str]:
    haystack = normalize_question(text)
    return [keyword for keyword in keywords if _contains_phrase(haystack, keyword)]
