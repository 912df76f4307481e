"""
Grounded reply generation for the PrimeNest assistant.

The reply model receives the resolved intent, the listings found and the
conversation so far, and must answer with one JSON object. Whatever it
returns, the search URL is decided here: greetings and advice never carry
one, and searches with results get a URL rebuilt from the resolved
filters.
"""
import logging
from typing import Any, Dict, List

from code_modules.assistant_types import ResolvedIntent, SearchResult, Session
from code_modules.llm_response_extractor import LLMResponseExtractor
from code_modules.prompt_generator import PromptGenerator
from code_modules.retry import with_retry
from code_modules.search_url import build_search_url

logger = logging.getLogger(__name__)

MAX_SUGGESTIONS = 3

FALLBACK_REPLY = (
    "Hi! I'm Runo. I'm ready to help you navigate the property market. "
    "What are you looking for?"
)
NO_RESULTS_REPLY = (
    "I couldn't find any listings matching that right now. "
    "Try another area, a wider price range or fewer bedrooms."
)
DEFAULT_SUGGESTIONS = [
    "Show me apartments for rent in Lagos",
    "What should I check before buying a house?",
    "Find 3 bedroom houses under 500k",
]


def _is_empty_search(resolved_intent: ResolvedIntent, search_result: SearchResult) -> bool:
    return resolved_intent.is_search and bool(resolved_intent.location) and search_result.count == 0


def fallback_response(search_result: SearchResult = None, resolved_intent: ResolvedIntent = None) -> Dict[str, Any]:
    """Fixed degraded reply used when generation is unavailable."""
    reply = FALLBACK_REPLY
    if resolved_intent is not None and search_result is not None \
            and _is_empty_search(resolved_intent, search_result):
        reply = NO_RESULTS_REPLY
    return {"reply": reply, "searchUrl": None, "suggestions": list(DEFAULT_SUGGESTIONS)}


def _clean_suggestions(value) -> List[str]:
    if not isinstance(value, list):
        return list(DEFAULT_SUGGESTIONS)
    suggestions = [item.strip() for item in value if isinstance(item, str) and item.strip()]
    return suggestions[:MAX_SUGGESTIONS] or list(DEFAULT_SUGGESTIONS)


def resolve_search_url(resolved_intent: ResolvedIntent, search_result: SearchResult):
    """The URL is never taken from the model."""
    if not resolved_intent.is_search or not resolved_intent.location:
        return None
    if search_result.count == 0:
        return None
    return build_search_url(resolved_intent)


class ResponseGenerator:
    """
    Args:
        llm_client: Object exposing inference_single_input(user_input, system_prompt).
        prompt_generator (PromptGenerator): Builds the reply prompt.
        max_attempts (int): Attempts per generation call.
        base_delay (float): First backoff delay in seconds.
    """

    def __init__(self, llm_client, prompt_generator: PromptGenerator = None, max_attempts: int = 3,
                 base_delay: float = 1.0, sleep=None):
        self.llm_client = llm_client
        self.prompt_generator = prompt_generator or PromptGenerator()
        self.max_attempts = max_attempts
        self.base_delay = base_delay
        self._retry_kwargs = {"sleep": sleep} if sleep else {}

    def generate(self, message: str, session: Session, search_result: SearchResult,
                 resolved_intent: ResolvedIntent) -> Dict[str, Any]:
        """
        Produce {reply, searchUrl, suggestions, preferences}. Never raises;
        upstream or format failures give the fallback reply.
        """
        prompt = self.prompt_generator.generate_assistant_prompt(resolved_intent, search_result, session.turns)

        def generate_reply():
            return self.llm_client.inference_single_input(message, prompt)

        try:
            raw = with_retry(generate_reply, self.max_attempts, self.base_delay, **self._retry_kwargs)
            extractor = LLMResponseExtractor(raw)
        except Exception as e:
            logger.error("Reply generation failed, using fallback: %s", e)
            response = fallback_response(search_result, resolved_intent)
        else:
            reply, suggestions = extractor.get_many(["reply", "suggestions"], {"reply": ""})
            if _is_empty_search(resolved_intent, search_result):
                response = {
                    "reply": NO_RESULTS_REPLY,
                    "searchUrl": None,
                    "suggestions": _clean_suggestions(suggestions),
                }
            elif isinstance(reply, str) and reply.strip():
                response = {
                    "reply": reply.strip(),
                    "searchUrl": resolve_search_url(resolved_intent, search_result),
                    "suggestions": _clean_suggestions(suggestions),
                }
            else:
                logger.warning("Reply payload had no reply text, using fallback")
                response = fallback_response(search_result, resolved_intent)

        response["preferences"] = session.preferences.to_dict()
        return response
