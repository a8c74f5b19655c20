"""
Response reduction: raw model text -> ScanResult.

The instruction asks for a bare JSON array, but models are not bound by it.
Reduction is a strict parse-then-validate boundary:

1. strip a leading/trailing Markdown code fence if the model added one,
2. parse the remaining text as JSON and require an array,
3. validate each element into a BookDetection. Only a missing or null
   `title` is fatal; other values are coerced to text (a list of authors is
   joined, null filenames are dropped) and absent fields get defaults.

Any failure raises ResponseParseError carrying the unmodified model text.
The model is trusted to have merged duplicates; nothing is re-merged here.
"""

import json
import re
from typing import Any, List

from pydantic import ValidationError

from .errors import ResponseParseError
from .models import BookDetection, ScanResult
from ..utils.log_utils import get_logger

logger = get_logger(__name__)

_OPENING_FENCE = re.compile(r"^```[A-Za-z0-9_-]*[ \t]*\r?\n?")
_CLOSING_FENCE = re.compile(r"\r?\n?```\s*$")


def strip_code_fences(text: str) -> str:
    """Remove a surrounding ``` / ```json fence and outer whitespace."""
    cleaned = text.strip()
    cleaned = _OPENING_FENCE.sub("", cleaned, count=1)
    cleaned = _CLOSING_FENCE.sub("", cleaned, count=1)
    return cleaned.strip()


def parse_json_array(raw: str) -> List[Any]:
    cleaned = strip_code_fences(raw)
    try:
        parsed = json.loads(cleaned)
    except json.JSONDecodeError as err:
        logger.error("Failed to parse JSON response: %s", cleaned)
        raise ResponseParseError(raw, f"Invalid JSON: {err}") from err
    if not isinstance(parsed, list):
        logger.error("Expected a JSON array, got %s", type(parsed).__name__)
        raise ResponseParseError(raw, f"Expected a JSON array, got {type(parsed).__name__}")
    return parsed


def reduce_response(raw: str) -> ScanResult:
    """
    Turn the model's raw answer into a ScanResult.

    Raises:
        ResponseParseError: the text is not a JSON array of book objects.
    """
    if raw is None:
        raise ResponseParseError("", "Empty model response")
    items = parse_json_array(raw)

    books = []
    for position, item in enumerate(items):
        if not isinstance(item, dict):
            raise ResponseParseError(raw, f"Element {position} is not an object")
        try:
            books.append(BookDetection.model_validate(item))
        except ValidationError as err:
            logger.error("Invalid book entry at position %d: %s", position, item)
            raise ResponseParseError(raw, f"Element {position} is not a valid book: {err}") from err

    logger.info("Model reported %d book(s)", len(books))
    return ScanResult(books=tuple(books))
