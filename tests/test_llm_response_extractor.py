import pytest
from code_modules.llm_response_extractor import extract_json, LLMResponseExtractor, ResponseFormatError


def test_extract_json_plain_json():
    text = '{"reply": "Hello", "searchUrl": null}'
    result = extract_json(text)
    assert result == {"reply": "Hello", "searchUrl": None}


def test_extract_json_embedded_json():
    text = 'Sure! Here you go: {"intent": "search", "location": "Lagos"} Hope that helps.'
    result = extract_json(text)
    assert result == {"intent": "search", "location": "Lagos"}


def test_extract_json_fenced_json():
    text = """
    ```json
    {
        "reply": "Found 3 flats",
        "suggestions": ["Show cheaper ones"]
    }
    ```
    """
    result = extract_json(text)
    assert result["reply"] == "Found 3 flats"
    assert result["suggestions"] == ["Show cheaper ones"]


def test_extract_json_invalid_json():
    with pytest.raises(ResponseFormatError):
        extract_json("this is not json")


def test_extract_json_rejects_non_object_payload():
    with pytest.raises(ResponseFormatError):
        extract_json('["search", "Lagos"]')


def test_extract_json_none():
    with pytest.raises(ResponseFormatError):
        extract_json(None)


def test_llm_response_extractor_set_and_get():
    extractor = LLMResponseExtractor()
    extractor.set_data('{"reply": "Hi", "count": 2}')

    assert extractor.get("reply") == "Hi"
    assert extractor.get("missing") is None
    assert extractor.get("missing", "default") == "default"


def test_llm_response_extractor_get_many():
    extractor = LLMResponseExtractor('{"a": 1, "b": 2}')

    result = extractor.get_many(["a", "b", "c"], defaults={"c": 3})
    assert result == (1, 2, 3)
