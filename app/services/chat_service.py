"""
Chat service module for the PrimeNest Real Estate assistant.

This module orchestrates the end-to-end workflow for one assistant message:
- Looks up or creates the conversation session
- Resolves intent and filters with the intent model
- Searches the listing store when the intent asks for it
- Generates a grounded reply and a search URL
- Records the turn and merged preferences in the session

Any failure inside the pipeline degrades to a fixed fallback reply; the
caller always receives a payload it can render.
"""
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional
from uuid import uuid4

from code_modules.assistant_types import Preferences, ResolvedIntent, SearchResult, Turn
from code_modules.listing_search import ListingSearchAdapter
from code_modules.oracle_adb_handler import OracleADBClient
from code_modules.oracle_genai_handler import create_llm_client
from code_modules.prompt_generator import PromptGenerator
from code_modules.session_store import SessionStore
from app.services.intent_resolver import IntentResolver
from app.services.response_generator import ResponseGenerator, fallback_response
from config_loader import AppConfig

logger = logging.getLogger(__name__)

GREETING_REPLY = "Hi! I'm Runo, your PrimeNest assistant. How can I help you find a home today?"


def _isoformat(timestamp: float) -> str:
    return datetime.fromtimestamp(timestamp, tz=timezone.utc).isoformat()


def preferences_from_intent(intent: ResolvedIntent) -> Preferences:
    return Preferences(
        property_type=intent.property_type if intent.property_type != "any" else None,
        min_price=intent.price_range.min,
        max_price=intent.price_range.max,
        bedrooms=intent.bedrooms,
        locations=[intent.location] if intent.location else [],
    )


class ChatService:
    """
    Service layer behind the assistant endpoints.

    Args:
        session_store (SessionStore): Conversation state.
        intent_resolver (IntentResolver): Intent stage.
        listing_search (ListingSearchAdapter): Listing store access.
        response_generator (ResponseGenerator): Reply stage.
    """
    def __init__(self, session_store: SessionStore, intent_resolver: IntentResolver,
                 listing_search: ListingSearchAdapter, response_generator: ResponseGenerator):
        self.session_store = session_store
        self.intent_resolver = intent_resolver
        self.listing_search = listing_search
        self.response_generator = response_generator

    @classmethod
    def from_config(cls, config: AppConfig, session_store: SessionStore) -> "ChatService":
        """
        Build the service with OCI Generative AI clients and the Oracle ADB
        listing store.
        """
        assistant = config.assistant
        prompt_generator = PromptGenerator()
        return cls(
            session_store=session_store,
            intent_resolver=IntentResolver(
                create_llm_client(config.genai, "intent"), prompt_generator,
                assistant.max_attempts, assistant.base_delay,
            ),
            listing_search=ListingSearchAdapter(OracleADBClient(config.adw), assistant.page_size),
            response_generator=ResponseGenerator(
                create_llm_client(config.genai, "response"), prompt_generator,
                assistant.max_attempts, assistant.base_delay,
            ),
        )

    def handle_message(self, message: str, session_id: Optional[str] = None) -> Dict[str, Any]:
        """
        Handle one assistant message end-to-end.

        Args:
            message (str): Non-empty user message.
            session_id (str, optional): Existing session; a new one is created when absent.

        Returns:
            dict: reply, searchUrl, suggestions, preferences and sessionId.
        """
        session_id = session_id or uuid4().hex
        message = message.strip()

        final_response = fallback_response()
        try:
            session = self.session_store.get_or_create(session_id)

            intent = self.intent_resolver.resolve(message, session)

            search_result = SearchResult.empty()
            if intent.is_search:
                search_result = self.listing_search.search(intent.filters())

            final_response = self.response_generator.generate(message, session, search_result, intent)

            self.session_store.update(
                session_id,
                turns=[Turn("user", message), Turn("assistant", final_response["reply"])],
                intent=intent.intent,
                location=intent.location,
                preferences=preferences_from_intent(intent),
            )
            info = self.session_store.describe(session_id)
            if info is not None:
                final_response["preferences"] = info.preferences.to_dict()
        except Exception:
            logger.exception("Assistant pipeline failed for session %s", session_id)
            final_response = fallback_response()

        final_response["sessionId"] = session_id
        return final_response

    def clear_session(self, session_id: Optional[str]) -> Dict[str, Any]:
        if session_id:
            self.session_store.clear(session_id)
        return {"reply": GREETING_REPLY, "searchUrl": None, "suggestions": [], "sessionId": None}

    def describe_session(self, session_id: str) -> Optional[Dict[str, Any]]:
        info = self.session_store.describe(session_id)
        if info is None:
            return None
        return {
            "createdAt": _isoformat(info.created_at),
            "lastActivity": _isoformat(info.last_activity),
            "messageCount": info.message_count,
            "preferences": info.preferences.to_dict(),
        }
