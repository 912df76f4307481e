"""
Intent resolution for the PrimeNest assistant.

Asks the intent model to classify a message, then parses its reply with
the ordered strategies of code_modules.intent_parser. Filters the winning
strategy left empty are taken from a keyword scan of the message, and
follow-ups without a place reuse the session's last location.
"""
import logging

from code_modules.assistant_types import SEARCH_INTENTS, ResolvedIntent, Session
from code_modules.intent_parser import DEFAULT_STRATEGIES, extract_filters, parse_intent
from code_modules.prompt_generator import PromptGenerator
from code_modules.retry import RetryError, with_retry

logger = logging.getLogger(__name__)

CONTEXT_INTENTS = ("follow_up", "clarification")
FILTERED_INTENTS = SEARCH_INTENTS + CONTEXT_INTENTS


class IntentResolutionError(RuntimeError):
    """Raised when the intent model could not be reached."""


class IntentResolver:
    """
    Args:
        llm_client: Object exposing inference_single_input(user_input, system_prompt).
        prompt_generator (PromptGenerator): Builds the intent prompt.
        max_attempts (int): Attempts per intent call.
        base_delay (float): First backoff delay in seconds.
    """

    def __init__(self, llm_client, prompt_generator: PromptGenerator = None, max_attempts: int = 3,
                 base_delay: float = 1.0, strategies=DEFAULT_STRATEGIES, sleep=None):
        self.llm_client = llm_client
        self.prompt_generator = prompt_generator or PromptGenerator()
        self.max_attempts = max_attempts
        self.base_delay = base_delay
        self.strategies = strategies
        self._retry_kwargs = {"sleep": sleep} if sleep else {}

    def resolve(self, message: str, session: Session) -> ResolvedIntent:
        """
        Classify a message into an intent and filters.

        Raises:
            IntentResolutionError: If every attempt of the intent call failed.
        """
        prompt = self.prompt_generator.generate_intent_prompt(session.last_location)

        def detect_intent():
            return self.llm_client.inference_single_input(message, prompt)

        try:
            raw = with_retry(detect_intent, self.max_attempts, self.base_delay, **self._retry_kwargs)
        except RetryError as e:
            raise IntentResolutionError("Intent detection unavailable") from e

        outcome = parse_intent(raw, message, self.strategies)
        intent = self._complete(outcome.intent, message, session)
        logger.info(
            "Resolved intent %s (via %s) location=%r type=%s action=%s bedrooms=%s",
            intent.intent, outcome.strategy, intent.location, intent.property_type,
            intent.action, intent.bedrooms,
        )
        return intent

    @staticmethod
    def _complete(intent: ResolvedIntent, message: str, session: Session) -> ResolvedIntent:
        # Greetings and advice carry no search filters
        if intent.intent not in FILTERED_INTENTS:
            return intent
        keywords = extract_filters(message)
        if intent.location is None:
            intent.location = keywords.location
        if intent.property_type == "any":
            intent.property_type = keywords.property_type
        if intent.action == "any":
            intent.action = keywords.action
        if intent.bedrooms is None:
            intent.bedrooms = keywords.bedrooms
        if intent.price_range.min is None:
            intent.price_range.min = keywords.price_range.min
        if intent.price_range.max is None:
            intent.price_range.max = keywords.price_range.max
        if intent.intent in CONTEXT_INTENTS:
            preferences = session.preferences
            if intent.location is None:
                intent.location = session.last_location
            if intent.property_type == "any" and preferences.property_type:
                intent.property_type = preferences.property_type
            if intent.bedrooms is None:
                intent.bedrooms = preferences.bedrooms
            if intent.price_range.min is None and intent.price_range.max is None:
                intent.price_range.min = preferences.min_price
                intent.price_range.max = preferences.max_price
        return intent
