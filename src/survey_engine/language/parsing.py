"""Helpers for turning raw model output into structured data."""

from __future__ import annotations

import json
import logging
import re
from typing import Any

logger = logging.getLogger(__name__)

_CODE_FENCE_RE = re.compile(r"```[a-zA-Z]*\n?")


def find_json_object(raw: str) -> str | None:
    """Return the first balanced ``{...}`` block of ``raw``, or None.

    Markdown code fences are stripped first.  Braces inside JSON strings are
    tracked so values like ``"a}b"`` do not end the object early.
    """
    text = _CODE_FENCE_RE.sub("", raw)
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
                return text[start:i + 1].strip()
    return None


def parse_extraction(raw: str) -> dict[str, Any] | None:
    """Parse an extraction reply into a key/value mapping.

    Returns None for output that contains no JSON object, does not parse,
    or is not an object.
    """
    candidate = find_json_object(raw)
    if candidate is None:
        logger.warning("No JSON object found in extraction output: %.200s", raw)
        return None
    try:
        parsed = json.loads(candidate)
    except json.JSONDecodeError as exc:
        logger.warning("Unparsable extraction output (%s): %.200s", exc, candidate)
        return None
    if not isinstance(parsed, dict):
        logger.warning("Extraction output is not an object: %.200s", candidate)
        return None
    return parsed
