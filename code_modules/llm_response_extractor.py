"""
The following module is used to extract a JSON object from an LLM response
"""
import re
import json
from typing import Dict, Any, Iterable, Optional, Tuple

FENCED_JSON = re.compile(r"```(?:json)?\s*(\{.*?\})\s*```", re.DOTALL)
EMBEDDED_JSON = re.compile(r"\{.*\}", re.DOTALL)


class ResponseFormatError(ValueError):
    """Raised when no JSON object can be recovered from a reply."""


def extract_json(text: str) -> Dict[str, Any]:
    """
    Extract a JSON object from:
    - pure JSON string
    - ```json fenced blocks
    - text containing JSON
    """
    if text is None:
        raise ResponseFormatError("Empty LLM response")
    text = text.strip()

    candidates = [text]
    fenced = FENCED_JSON.search(text)
    if fenced:
        candidates.append(fenced.group(1))
    embedded = EMBEDDED_JSON.search(text)
    if embedded:
        candidates.append(embedded.group(0))

    for candidate in candidates:
        try:
            data = json.loads(candidate)
        except json.JSONDecodeError:
            continue
        if isinstance(data, dict):
            return data

    raise ResponseFormatError(f"No JSON object found in LLM response: {text[:200]!r}")


class LLMResponseExtractor:
    """
    We declare json data with set_data and get single or multiple keys
    """
    def __init__(self, text: Optional[str] = None):
        self.data: Dict[str, Any] = {}
        if text is not None:
            self.set_data(text)

    def set_data(self, text: str):
        self.data = extract_json(text)

    def get(self, key: str, default=None):
        return self.data.get(key, default)

    def get_many(self, fields: Iterable[str], defaults: Optional[Dict[str, Any]] = None) -> Tuple:
        defaults = defaults or {}
        return tuple(self.get(f, defaults.get(f)) for f in fields)
