"""
Parsing and validation of the raw plan returned by the LLM.

``parse_plan_response`` is the single entry point; the repair heuristics
(fence stripping, payload location) stay private to this module.
"""

import json
import logging
import re
from typing import Any, Optional

from pydantic import ValidationError

from dto.plan import Plan
from planning.errors import InvalidAiResponseError

logger = logging.getLogger(__name__)

_SNIPPET_CHARS = 200

_LEADING_FENCE = re.compile(r"^```[A-Za-z0-9_-]*[ \t]*\n?")
_TRAILING_FENCE = re.compile(r"\n?```$")


def parse_plan_response(raw: str) -> Plan:
    """
    Turn a (possibly messy) LLM response into a ``Plan``.

    Handles markdown fences (```json ... ```) and prose before or after the
    JSON object.  Raises ``InvalidAiResponseError`` with kind ``truncated``,
    ``malformed`` or ``schema_violation``.
    """
    candidate = _strip_fences(raw or "")
    candidate = _extract_json_object(candidate) or candidate

    try:
        parsed = json.loads(candidate)
    except json.JSONDecodeError as exc:
        snippet = candidate[:_SNIPPET_CHARS]
        if not candidate.endswith("}"):
            logger.warning("LLM JSON looks truncated: %s", exc)
            raise InvalidAiResponseError(
                InvalidAiResponseError.TRUNCATED,
                "The AI returned invalid JSON. The response appears to have been "
                "truncated; try a shorter unit or less source content.",
                snippet,
            ) from exc
        logger.warning("Failed to parse LLM JSON: %s", exc)
        raise InvalidAiResponseError(
            InvalidAiResponseError.MALFORMED,
            "The AI returned invalid JSON. Try again.",
            snippet,
        ) from exc

    _check_structure(parsed)

    try:
        return Plan.model_validate(parsed)
    except ValidationError as exc:
        raise InvalidAiResponseError(
            InvalidAiResponseError.SCHEMA_VIOLATION,
            f"The plan does not have the expected structure: {exc.error_count()} error(s)",
        ) from exc


def _strip_fences(text: str) -> str:
    cleaned = text.strip()
    cleaned = _LEADING_FENCE.sub("", cleaned, count=1)
    cleaned = _TRAILING_FENCE.sub("", cleaned, count=1)
    return cleaned.strip()


def _extract_json_object(text: str) -> Optional[str]:
    """
    Return the first ``{ ... }`` span, matching braces by depth and
    ignoring braces inside JSON strings.

    An object that never closes runs to the end of *text*; ``None`` when
    there is no ``{`` at all.
    """
    start = text.find("{")
    if start == -1:
        return None

    depth = 0
    in_string = False
    escaped = False
    for i in range(start, len(text)):
        ch = text[i]
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue
        if ch == '"':
            in_string = True
        elif ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return text[start : i + 1]

    return text[start:]


def _check_structure(parsed: Any) -> None:
    if not isinstance(parsed, dict):
        _schema_violation("The response is not a JSON object")
    metadata = parsed.get("metadata")
    if not isinstance(metadata, dict):
        _schema_violation("The JSON has no 'metadata' object")
    rows = parsed.get("rows")
    if not isinstance(rows, list):
        _schema_violation("The JSON has no 'rows' list")
    if not rows:
        _schema_violation("The plan contains no rows")
    if not all(isinstance(row, dict) for row in rows):
        _schema_violation("Every entry in 'rows' must be an object")


def _schema_violation(message: str) -> None:
    logger.warning("LLM plan rejected: %s", message)
    raise InvalidAiResponseError(InvalidAiResponseError.SCHEMA_VIOLATION, message)
