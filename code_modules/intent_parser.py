"""
Parsing of intent-detection replies.

The reply of the intent model is run through an ordered list of parser
strategies; each returns a ResolvedIntent or None and the first match
wins:

1. StructuredPayloadStrategy - a JSON object following the intent schema
2. DelimitedReplyStrategy - "intent|location" or "intent: location"
3. KeywordScanStrategy - real-estate keywords in the user's own message
4. DefaultGreetingStrategy - always matches with a bare greeting

The keyword helpers are also used to fill filters a successful stage left
out.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Dict, Optional, Sequence

from code_modules.assistant_types import ACTIONS, INTENTS, PROPERTY_TYPES, PriceRange, ResolvedIntent
from code_modules.llm_response_extractor import ResponseFormatError, extract_json

INTENT_ALIASES = {
    "follow-up": "follow_up",
    "followup": "follow_up",
    "follow up": "follow_up",
    "clarify": "clarification",
    "greet": "greeting",
    "hello": "greeting",
    "find": "search",
}

PROPERTY_ALIASES = {
    "apartment": "apartment", "apartments": "apartment", "flat": "apartment", "flats": "apartment",
    "studio": "apartment", "studios": "apartment",
    "house": "house", "houses": "house", "home": "house", "homes": "house", "villa": "house",
    "villas": "house", "duplex": "house", "bungalow": "house", "bungalows": "house",
    "condo": "condo", "condos": "condo", "condominium": "condo", "condominiums": "condo",
    "land": "land", "plot": "land", "plots": "land", "lot": "land", "lots": "land",
}

ACTION_ALIASES = {
    "rent": "rent", "rental": "rent", "rentals": "rent", "renting": "rent", "lease": "rent",
    "buy": "buy", "buying": "buy", "purchase": "buy", "sale": "buy",
}

SEARCH_KEYWORDS = set(PROPERTY_ALIASES) | {
    "rent", "renting", "rental", "lease", "buy", "buying", "purchase", "sale", "property",
    "properties", "listing", "listings", "bedroom", "bedrooms", "bed", "beds", "real estate",
}
ADVICE_KEYWORDS = ("advice", "should i", "tips", "invest", "mortgage", "how do i", "what should")

NULL_WORDS = {"", "none", "null", "n/a", "na", "unknown", "any", "-"}

NUMBER_WORDS = {"one": 1, "two": 2, "three": 3, "four": 4, "five": 5, "six": 6}
NON_PLACE_WORDS = set(PROPERTY_ALIASES) | set(ACTION_ALIASES) | {"a", "an", "my", "your", "this", "that", "it"}

_AMOUNT = r"\$?\s*(\d[\d,]*(?:\.\d+)?)\s*(k|m|million|thousand)?\b"
BETWEEN_RE = re.compile(rf"(?:between|from)\s+{_AMOUNT}\s*(?:and|to|-)\s*{_AMOUNT}", re.IGNORECASE)
MAX_PRICE_RE = re.compile(rf"(?:under|below|less than|up to|at most|max(?:imum)?|cheaper than)\s+{_AMOUNT}", re.IGNORECASE)
MIN_PRICE_RE = re.compile(rf"(?:above|over|more than|at least|min(?:imum)?|starting at)\s+{_AMOUNT}", re.IGNORECASE)
BEDROOM_RE = re.compile(
    r"\b(\d+|one|two|three|four|five|six)\s*-?\s*(?:bed(?:room)?s?|br|bd)\b", re.IGNORECASE
)
LOCATION_RE = re.compile(
    r"\b(?:in|at|near|around)\s+([A-Za-z][A-Za-z .'-]*?)"
    r"(?=\s+(?:in|at|near|around|for|with|under|below|above|over|between|from|to|that|which|and|priced|costing|please)\b|[,.!?;]|$)",
    re.IGNORECASE,
)
DELIMITED_RE = re.compile(
    r"^\s*\**\s*(search|advice|greeting|follow[_ -]?up|clarification)\s*\**\s*(?:[|:]\s*(.*?))?\s*$",
    re.IGNORECASE | re.MULTILINE,
)


def normalize_intent(value: Any) -> Optional[str]:
    if not isinstance(value, str):
        return None
    value = value.strip().lower()
    value = INTENT_ALIASES.get(value, value)
    return value if value in INTENTS else None


def normalize_property_type(value: Any) -> str:
    if not isinstance(value, str):
        return "any"
    value = value.strip().lower()
    value = PROPERTY_ALIASES.get(value, value)
    return value if value in PROPERTY_TYPES else "any"


def normalize_action(value: Any) -> str:
    if not isinstance(value, str):
        return "any"
    value = value.strip().lower()
    value = ACTION_ALIASES.get(value, value)
    return value if value in ACTIONS else "any"


def normalize_location(value: Any) -> Optional[str]:
    if not isinstance(value, str):
        return None
    value = value.strip().strip("\"'.,")
    if value.lower().startswith("the "):
        value = value[4:].strip()
    return None if value.lower() in NULL_WORDS else value


def _to_int(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        # json.loads accepts NaN and Infinity
        try:
            return int(value)
        except (ValueError, OverflowError):
            return None
    if isinstance(value, str):
        amount = parse_amount(value)
        return amount
    return None


def parse_amount(text: str, suffix: Optional[str] = None) -> Optional[int]:
    """Turn "500k", "1.2m" or "$300,000" into an integer amount."""
    if suffix is None:
        match = re.fullmatch(r"\s*" + _AMOUNT + r"\s*", text, re.IGNORECASE)
        if not match:
            return None
        text, suffix = match.group(1), match.group(2)
    try:
        amount = float(text.replace(",", ""))
    except ValueError:
        return None
    suffix = (suffix or "").lower()
    if suffix in ("k", "thousand"):
        amount *= 1_000
    elif suffix in ("m", "million"):
        amount *= 1_000_000
    return int(amount)


def extract_price_range(message: str) -> PriceRange:
    between = BETWEEN_RE.search(message)
    if between:
        low = parse_amount(between.group(1), between.group(2) or "")
        high = parse_amount(between.group(3), between.group(4) or "")
        return PriceRange(min=low, max=high)
    price_range = PriceRange()
    upper = MAX_PRICE_RE.search(message)
    if upper:
        price_range.max = parse_amount(upper.group(1), upper.group(2) or "")
    lower = MIN_PRICE_RE.search(message)
    if lower:
        price_range.min = parse_amount(lower.group(1), lower.group(2) or "")
    return price_range


def extract_bedrooms(message: str) -> Optional[int]:
    match = BEDROOM_RE.search(message)
    if not match:
        return None
    value = match.group(1).lower()
    return NUMBER_WORDS.get(value) or int(value)


def _first_alias(message: str, aliases: Dict[str, str]) -> str:
    for word in re.findall(r"[a-z]+", message.lower()):
        if word in aliases:
            return aliases[word]
    return "any"


def extract_location(message: str) -> Optional[str]:
    """Place name after the last in/at/near/around that is not a property word."""
    location = None
    for match in LOCATION_RE.finditer(message or ""):
        candidate = normalize_location(match.group(1))
        if candidate and candidate.split()[0].lower() not in NON_PLACE_WORDS:
            location = candidate
    return location


def extract_filters(message: str) -> ResolvedIntent:
    """
    Keyword-level filters of a message. The intent is left at its default;
    callers decide it.
    """
    return ResolvedIntent(
        location=extract_location(message),
        property_type=_first_alias(message, PROPERTY_ALIASES),
        price_range=extract_price_range(message),
        bedrooms=extract_bedrooms(message),
        action=_first_alias(message, ACTION_ALIASES),
    )


@dataclass
class ParseOutcome:
    """Winning strategy name and its result."""
    strategy: str
    intent: ResolvedIntent


class StructuredPayloadStrategy:
    name = "structured"

    def parse(self, raw: str, message: str) -> Optional[ResolvedIntent]:
        try:
            data = extract_json(raw)
        except ResponseFormatError:
            return None
        intent = normalize_intent(data.get("intent"))
        if intent is None:
            return None

        price = data.get("priceRange") or data.get("price_range") or {}
        if not isinstance(price, dict):
            price = {}
        return ResolvedIntent(
            intent=intent,
            location=normalize_location(data.get("location")),
            property_type=normalize_property_type(data.get("propertyType", data.get("property_type"))),
            price_range=PriceRange(
                min=_to_int(price.get("min", data.get("minPrice"))),
                max=_to_int(price.get("max", data.get("maxPrice"))),
            ),
            bedrooms=_to_int(data.get("bedrooms")),
            action=normalize_action(data.get("action")),
        )


class DelimitedReplyStrategy:
    """
    Reads `intent|location|property type|action|bedrooms`; every field
    after the intent is optional.
    """
    name = "delimited"

    def parse(self, raw: str, message: str) -> Optional[ResolvedIntent]:
        match = DELIMITED_RE.search(raw or "")
        if not match:
            return None
        fields = [field.strip() for field in (match.group(2) or "").split("|")]
        fields += [None] * (4 - len(fields))
        return ResolvedIntent(
            intent=normalize_intent(match.group(1).replace(" ", "_").replace("-", "_")),
            location=normalize_location(fields[0]),
            property_type=normalize_property_type(fields[1]),
            action=normalize_action(fields[2]),
            bedrooms=_to_int(fields[3]),
        )


class KeywordScanStrategy:
    name = "keywords"

    def parse(self, raw: str, message: str) -> Optional[ResolvedIntent]:
        text = (message or "").lower()
        words = set(re.findall(r"[a-z]+", text))
        if words & SEARCH_KEYWORDS or "real estate" in text:
            filters = extract_filters(message)
            filters.intent = "search"
            return filters
        if any(keyword in text for keyword in ADVICE_KEYWORDS):
            return ResolvedIntent(intent="advice")
        return None


class DefaultGreetingStrategy:
    name = "default"

    def parse(self, raw: str, message: str) -> Optional[ResolvedIntent]:
        return ResolvedIntent(intent="greeting")


DEFAULT_STRATEGIES = (
    StructuredPayloadStrategy(),
    DelimitedReplyStrategy(),
    KeywordScanStrategy(),
    DefaultGreetingStrategy(),
)


def parse_intent(raw: str, message: str, strategies: Sequence = DEFAULT_STRATEGIES) -> ParseOutcome:
    """Run the strategies in order and return the first match."""
    for strategy in strategies:
        result = strategy.parse(raw, message)
        if result is not None:
            return ParseOutcome(strategy=strategy.name, intent=result)
    return ParseOutcome(strategy="default", intent=ResolvedIntent(intent="greeting"))
