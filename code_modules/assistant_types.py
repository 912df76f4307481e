"""
Domain types shared by the assistant pipeline.

Sessions live in the session store; resolved intents and search results
exist for the duration of one request only.
"""
from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional

INTENTS = ("search", "advice", "greeting", "follow_up", "clarification")
SEARCH_INTENTS = ("search", "follow_up")
PROPERTY_TYPES = ("apartment", "house", "condo", "land", "any")
ACTIONS = ("buy", "rent", "any")


@dataclass
class Turn:
    role: str
    text: str


@dataclass
class Preferences:
    """Preferences accumulated over a conversation."""
    property_type: Optional[str] = None
    min_price: Optional[int] = None
    max_price: Optional[int] = None
    bedrooms: Optional[int] = None
    locations: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "propertyType": self.property_type,
            "priceRange": {"min": self.min_price, "max": self.max_price},
            "bedrooms": self.bedrooms,
            "locations": list(self.locations),
        }


@dataclass
class Session:
    session_id: str
    created_at: float
    last_activity: float
    turns: List[Turn] = field(default_factory=list)
    last_intent: Optional[str] = None
    last_location: Optional[str] = None
    preferences: Preferences = field(default_factory=Preferences)


@dataclass
class SessionInfo:
    """Read-only diagnostics snapshot of a session."""
    created_at: float
    last_activity: float
    message_count: int
    preferences: Preferences


@dataclass
class PriceRange:
    min: Optional[int] = None
    max: Optional[int] = None


@dataclass
class ResolvedIntent:
    """
    Intent and filters extracted from one message.

    Every field has a neutral default so downstream stages never see an
    undefined filter.
    """
    intent: str = "greeting"
    location: Optional[str] = None
    property_type: str = "any"
    price_range: PriceRange = field(default_factory=PriceRange)
    bedrooms: Optional[int] = None
    action: str = "any"

    @property
    def is_search(self) -> bool:
        return self.intent in SEARCH_INTENTS

    def filters(self) -> Dict[str, Any]:
        return {
            "location": self.location,
            "property_type": self.property_type,
            "min_price": self.price_range.min,
            "max_price": self.price_range.max,
            "bedrooms": self.bedrooms,
            "action": self.action,
        }

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class ListingSummary:
    id: str
    title: str
    city: Optional[str] = None
    country: Optional[str] = None
    address: Optional[str] = None
    price: Optional[int] = None
    bedroom: Optional[int] = None
    bathroom: Optional[int] = None
    type: Optional[str] = None
    property: Optional[str] = None
    images: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class SearchResult:
    """
    One page of listings. ``count`` is the size of ``posts``, not the
    total number of matches in the store.
    """
    count: int = 0
    posts: List[ListingSummary] = field(default_factory=list)

    @classmethod
    def empty(cls) -> "SearchResult":
        return cls(count=0, posts=[])

    def to_dict(self) -> Dict[str, Any]:
        return {"count": self.count, "posts": [post.to_dict() for post in self.posts]}
