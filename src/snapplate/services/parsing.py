"""Tolerant parsing of model replies into food items.

Models do not reliably return clean JSON. Replies arrive wrapped in markdown
fences, with trailing commas, with unquoted keys, or surrounded by prose. The
parser tries progressively looser strategies and, when everything fails,
returns a degraded result instead of raising, so a bad reply never turns
into a failed request.
"""

import json
import logging
import math
import re
from collections.abc import Iterator

from snapplate.domain.meals import AnalysisResult, FoodItem

logger = logging.getLogger(__name__)

PARSE_FAILED_NAME = "Food item (parsing failed)"
PARSE_FAILED_ERROR = "Failed to parse AI response"
UNKNOWN_FOOD_NAME = "Unknown food"
DEFAULT_AMOUNT = "serving"
UNKNOWN_AMOUNT = "unknown"
RAW_EXCERPT_CHARS = 500

_FENCE_OPEN = re.compile(r"^```[\w+-]*[ \t]*\r?\n?")
_FENCE_CLOSE = re.compile(r"\r?\n?```\s*$")
_STRING_LITERAL = re.compile(r'"(?:\\.|[^"\\])*"')
_TRAILING_COMMA = re.compile(r",(\s*[}\]])")
_BARE_KEY = re.compile(r"([{,]\s*)(\w+)(\s*):")


def parse_analysis(raw_text: str) -> AnalysisResult:
    """Parse a model reply into food items. Never raises."""
    text = strip_code_fence(raw_text or "").strip()
    parsed = _load_json(text)
    foods = _extract_food_list(parsed)
    if foods is None:
        logger.warning(
            "Could not parse model reply",
            extra={"raw_length": len(raw_text or "")},
        )
        return degraded_result(raw_text)
    return AnalysisResult(foods=[coerce_food_item(entry) for entry in foods])


def degraded_result(raw_text: str | None) -> AnalysisResult:
    """Placeholder result used when the reply could not be parsed."""
    return AnalysisResult(
        foods=[
            FoodItem(
                name=PARSE_FAILED_NAME,
                calories=0.0,
                protein=0.0,
                carbs=0.0,
                fat=0.0,
                amount=UNKNOWN_AMOUNT,
            )
        ],
        error=PARSE_FAILED_ERROR,
        raw_response=(raw_text or "")[:RAW_EXCERPT_CHARS],
    )


def strip_code_fence(text: str) -> str:
    """Remove a leading and trailing markdown code fence, if present."""
    stripped = text.strip()
    if not stripped.startswith("```"):
        return stripped
    stripped = _FENCE_OPEN.sub("", stripped, count=1)
    return _FENCE_CLOSE.sub("", stripped, count=1)


def repair_json(text: str) -> str:
    """Drop trailing commas and quote bare keys outside string literals."""
    parts: list[str] = []
    last = 0
    for match in _STRING_LITERAL.finditer(text):
        parts.append(_repair_segment(text[last : match.start()]))
        parts.append(match.group(0))
        last = match.end()
    parts.append(_repair_segment(text[last:]))
    return "".join(parts)


def first_object_span(text: str) -> str | None:
    """Return the first balanced top-level ``{...}`` span, if any."""
    start: int | None = None
    depth = 0
    in_string = False
    escaped = False
    for index, char in enumerate(text):
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue
        if char == '"':
            if start is not None:
                in_string = True
            continue
        if char == "{":
            if start is None:
                start = index
            depth += 1
        elif char == "}" and start is not None:
            depth -= 1
            if depth == 0:
                return text[start : index + 1]
    return None


def coerce_food_item(entry: object) -> FoodItem:
    """Coerce a loosely typed entry into a FoodItem."""
    if isinstance(entry, str):
        entry = {"name": entry}
    if not isinstance(entry, dict):
        entry = {}
    return FoodItem(
        name=_to_text(entry.get("name"), UNKNOWN_FOOD_NAME),
        calories=to_number(entry.get("calories")),
        protein=to_number(entry.get("protein")),
        carbs=to_number(entry.get("carbs")),
        fat=to_number(entry.get("fat")),
        amount=_to_amount(entry.get("amount")),
    )


def to_number(value: object) -> float:
    """Coerce to a finite, non-negative float; anything else becomes 0."""
    if isinstance(value, bool):
        return 0.0
    try:
        if isinstance(value, int | float):
            number = float(value)
        elif isinstance(value, str):
            number = float(value.strip())
        else:
            return 0.0
    except (ValueError, OverflowError):
        return 0.0
    if not math.isfinite(number) or number < 0:
        return 0.0
    return number


def _load_json(text: str) -> object | None:
    for candidate in _candidates(text):
        try:
            return json.loads(candidate)
        except (json.JSONDecodeError, RecursionError):
            continue
    return None


def _candidates(text: str) -> Iterator[str]:
    yield text
    repaired = repair_json(text)
    if repaired != text:
        yield repaired
    span = first_object_span(text)
    if span is not None:
        yield repair_json(span)


def _extract_food_list(parsed: object) -> list[object] | None:
    if not isinstance(parsed, dict):
        return None
    foods = parsed.get("foods")
    if isinstance(foods, list):
        return foods
    if "food" in parsed:
        food = parsed["food"]
        if isinstance(food, list):
            return food
        return [food]
    return None


def _repair_segment(segment: str) -> str:
    segment = _TRAILING_COMMA.sub(r"\1", segment)
    return _BARE_KEY.sub(r'\1"\2"\3:', segment)


def _to_text(value: object, default: str) -> str:
    if isinstance(value, str) and value.strip():
        return value
    return default


def _to_amount(value: object) -> str:
    if isinstance(value, int | float) and not isinstance(value, bool):
        return str(value)
    return _to_text(value, DEFAULT_AMOUNT)
