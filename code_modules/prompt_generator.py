"""
Prompt generation utilities for the PrimeNest assistant.

This module builds the two LLM prompts of the assistant pipeline:
- the intent-detection prompt, embedding the previous turn's location
- the grounded reply prompt, embedding the resolved intent, the listings
  found and the conversation so far

Templates are read from the `prompts/` directory and filled with
`str.format`.
"""
from pathlib import Path
from typing import Iterable, Optional

from code_modules.assistant_types import ListingSummary, ResolvedIntent, SearchResult, Turn

PROMPTS_DIR = Path(__file__).resolve().parent.parent / "prompts"

HISTORY_TURNS = 10


def format_price(value: Optional[int]) -> str:
    return f"{value:,}" if value is not None else "-"


def format_listing(index: int, post: ListingSummary) -> str:
    """One listing per line, as shown to the model."""
    place = ", ".join(part for part in (post.address, post.city, post.country) if part)
    rooms = f"{post.bedroom if post.bedroom is not None else '?'} bed / {post.bathroom if post.bathroom is not None else '?'} bath"
    return (
        f"{index}. [{post.id}] {post.title} | {place or 'location n/a'} | "
        f"{post.property or 'property'} for {post.type or 'n/a'} | {rooms} | price {format_price(post.price)}"
    )


def format_history(turns: Iterable[Turn], limit: int = HISTORY_TURNS) -> str:
    turns = list(turns)[-limit:] if limit else list(turns)
    if not turns:
        return "(no previous messages)"
    return "\n".join(f"{turn.role.upper()}: {turn.text}" for turn in turns)


class PromptGenerator:
    """
    Generates the prompts of the intent and reply stages.

    Args:
        prompts_dir (Path): Directory holding the text templates.
    """
    def __init__(self, prompts_dir: Path = PROMPTS_DIR):
        self.prompts_dir = Path(prompts_dir)

    def _template(self, name: str) -> str:
        return (self.prompts_dir / name).read_text(encoding="utf-8")

    def generate_intent_prompt(self, last_location: Optional[str] = None) -> str:
        """
        Build the intent-detection system prompt.

        Args:
            last_location (str, optional): Location resolved on the previous turn.

        Returns:
            str: Prompt asking for a single JSON intent object.
        """
        return self._template("intent_detection.txt").format(last_location=last_location or "none")

    def generate_assistant_prompt(
        self,
        intent: ResolvedIntent,
        search_result: SearchResult,
        history: Iterable[Turn],
    ) -> str:
        """
        Build the grounded reply prompt.

        Args:
            intent (ResolvedIntent): Intent and filters of the current message.
            search_result (SearchResult): Listings found for those filters.
            history (Iterable[Turn]): Session turns, oldest first.

        Returns:
            str: Prompt asking for a JSON object with reply, searchUrl and suggestions.
        """
        listings = "\n".join(
            format_listing(index, post) for index, post in enumerate(search_result.posts, start=1)
        ) or "(no listings)"
        price = intent.price_range
        return self._template("assistant_response.txt").format(
            intent=intent.intent,
            location=intent.location or "-",
            property_type=intent.property_type,
            action=intent.action,
            bedrooms=intent.bedrooms if intent.bedrooms is not None else "-",
            price_range=f"{format_price(price.min)} to {format_price(price.max)}",
            count=search_result.count,
            listings=listings,
            history=format_history(history),
        )
