import pytest
from unittest.mock import MagicMock

from app.services.intent_resolver import IntentResolutionError, IntentResolver
from code_modules.assistant_types import Preferences, Session
from code_modules.oracle_genai_handler import LLMInferenceError


@pytest.fixture
def session():
    return Session(session_id="s1", created_at=0.0, last_activity=0.0)


@pytest.fixture
def llm():
    return MagicMock()


@pytest.fixture
def resolver(llm):
    return IntentResolver(llm, max_attempts=3, base_delay=0.01, sleep=MagicMock())


def test_resolve_structured_reply(resolver, llm, session):
    llm.inference_single_input.return_value = (
        '{"intent": "search", "location": "Lagos", "propertyType": "apartment", '
        '"bedrooms": 2, "action": "rent"}'
    )

    intent = resolver.resolve("2 bedroom apartments for rent in Lagos", session)

    assert intent.intent == "search"
    assert intent.location == "Lagos"
    assert intent.bedrooms == 2
    assert intent.action == "rent"
    user_input, prompt = llm.inference_single_input.call_args.args
    assert user_input == "2 bedroom apartments for rent in Lagos"
    assert "Location discussed in the previous turn: none" in prompt


def test_resolve_fills_missing_filters_from_message(resolver, llm, session):
    llm.inference_single_input.return_value = "search|Lagos"

    intent = resolver.resolve("2 bedroom apartments for rent in Lagos under 300k", session)

    assert intent.intent == "search"
    assert intent.location == "Lagos"
    assert intent.bedrooms == 2
    assert intent.action == "rent"
    assert intent.property_type == "apartment"
    assert intent.price_range.max == 300000


def test_follow_up_reuses_session_context(resolver, llm, session):
    session.last_location = "Lekki"
    session.preferences = Preferences(property_type="house", bedrooms=3, min_price=100000, max_price=400000)
    llm.inference_single_input.return_value = '{"intent": "follow_up"}'

    intent = resolver.resolve("any cheaper ones?", session)

    assert intent.location == "Lekki"
    assert intent.property_type == "house"
    assert intent.bedrooms == 3
    assert (intent.price_range.min, intent.price_range.max) == (100000, 400000)
    assert "Location discussed in the previous turn: Lekki" in llm.inference_single_input.call_args.args[1]


def test_search_does_not_inherit_previous_location(resolver, llm, session):
    session.last_location = "Lekki"
    llm.inference_single_input.return_value = '{"intent": "search"}'

    intent = resolver.resolve("show me houses", session)

    assert intent.location is None


def test_unparseable_reply_defaults_to_greeting(resolver, llm, session):
    llm.inference_single_input.return_value = "¯\\_(ツ)_/¯"

    intent = resolver.resolve("hello", session)

    assert intent.intent == "greeting"
    assert intent.location is None
    assert intent.property_type == "any"
    assert intent.action == "any"


def test_transient_failure_is_retried(resolver, llm, session):
    llm.inference_single_input.side_effect = [LLMInferenceError("boom"), '{"intent": "advice"}']

    intent = resolver.resolve("should I buy now?", session)

    assert intent.intent == "advice"
    assert llm.inference_single_input.call_count == 2


def test_exhausted_retries_raise(resolver, llm, session):
    llm.inference_single_input.side_effect = LLMInferenceError("service unavailable")

    with pytest.raises(IntentResolutionError):
        resolver.resolve("hello", session)

    assert llm.inference_single_input.call_count == 3


@pytest.mark.parametrize("reply", ['{"intent": "greeting"}', '{"intent": "advice"}'])
def test_non_search_intents_take_no_filters_from_message(resolver, llm, session, reply):
    llm.inference_single_input.return_value = reply

    intent = resolver.resolve("hi, I live in Abuja and rent a 2 bedroom flat", session)

    assert intent.location is None
    assert intent.bedrooms is None
    assert intent.property_type == "any"
    assert intent.action == "any"
