import json
from urllib.parse import parse_qs, urlparse

import pytest
from unittest.mock import MagicMock

from app.services.response_generator import (
    DEFAULT_SUGGESTIONS,
    FALLBACK_REPLY,
    NO_RESULTS_REPLY,
    ResponseGenerator,
)
from code_modules.assistant_types import ListingSummary, ResolvedIntent, SearchResult, Session
from code_modules.oracle_genai_handler import LLMInferenceError


@pytest.fixture
def session():
    return Session(session_id="s1", created_at=0.0, last_activity=0.0)


@pytest.fixture
def llm():
    return MagicMock()


@pytest.fixture
def generator(llm):
    return ResponseGenerator(llm, max_attempts=2, base_delay=0.01, sleep=MagicMock())


@pytest.fixture
def lagos_results():
    return SearchResult(count=1, posts=[ListingSummary(id="p1", title="Sunny flat", city="Lagos")])


def model_reply(**payload):
    return json.dumps(payload)


@pytest.mark.parametrize("intent_name", ["greeting", "advice"])
def test_search_url_forced_to_null_for_greeting_and_advice(generator, llm, session, lagos_results, intent_name):
    llm.inference_single_input.return_value = model_reply(reply="Hello!", searchUrl="/list?city=Paris")
    intent = ResolvedIntent(intent=intent_name, location="Lagos")

    response = generator.generate("hi", session, lagos_results, intent)

    assert response["reply"] == "Hello!"
    assert response["searchUrl"] is None


def test_search_url_rebuilt_from_filters(generator, llm, session, lagos_results):
    llm.inference_single_input.return_value = model_reply(
        reply="Here is a flat in Lagos.", searchUrl="/list?city=Paris", suggestions=["Cheaper?", 3, ""]
    )
    intent = ResolvedIntent(intent="search", location="Lagos", bedrooms=2, action="rent")

    response = generator.generate("2 bedroom flats for rent in Lagos", session, lagos_results, intent)

    query = parse_qs(urlparse(response["searchUrl"]).query)
    assert query["city"] == ["Lagos"]
    assert query["bedroom"] == ["2"]
    assert query["type"] == ["rent"]
    assert response["suggestions"] == ["Cheaper?"]
    assert response["preferences"]["bedrooms"] is None


def test_reply_embedded_in_prose_is_recovered(generator, llm, session, lagos_results):
    llm.inference_single_input.return_value = 'Sure!\n```json\n{"reply": "Found one."}\n```'
    intent = ResolvedIntent(intent="search", location="Lagos")

    response = generator.generate("flats in Lagos", session, lagos_results, intent)

    assert response["reply"] == "Found one."
    assert response["suggestions"] == DEFAULT_SUGGESTIONS


def test_no_results_reply_and_null_url(generator, llm, session):
    llm.inference_single_input.return_value = model_reply(
        reply="Great news, lots of options!", searchUrl="/list?city=Lagos", suggestions=["Try Lekki"]
    )
    intent = ResolvedIntent(intent="search", location="Lagos", bedrooms=2)

    response = generator.generate("2 bed in Lagos", session, SearchResult.empty(), intent)

    assert response["reply"] == NO_RESULTS_REPLY
    assert response["searchUrl"] is None
    assert response["suggestions"] == ["Try Lekki"]


def test_unparseable_reply_falls_back(generator, llm, session, lagos_results):
    llm.inference_single_input.return_value = "I'd love to help but forgot the format"
    intent = ResolvedIntent(intent="search", location="Lagos")

    response = generator.generate("flats in Lagos", session, lagos_results, intent)

    assert response["reply"] == FALLBACK_REPLY
    assert response["searchUrl"] is None
    assert response["suggestions"] == DEFAULT_SUGGESTIONS


def test_upstream_failure_after_retries_falls_back(generator, llm, session, lagos_results):
    llm.inference_single_input.side_effect = LLMInferenceError("timeout")
    intent = ResolvedIntent(intent="search", location="Lagos")

    response = generator.generate("flats in Lagos", session, lagos_results, intent)

    assert llm.inference_single_input.call_count == 2
    assert response["reply"] == FALLBACK_REPLY
    assert response["searchUrl"] is None
    assert response["suggestions"]


def test_upstream_failure_with_empty_search_uses_no_results_reply(generator, llm, session):
    llm.inference_single_input.side_effect = LLMInferenceError("timeout")
    intent = ResolvedIntent(intent="search", location="Lagos")

    response = generator.generate("flats in Lagos", session, SearchResult.empty(), intent)

    assert response["reply"] == NO_RESULTS_REPLY
    assert response["searchUrl"] is None
