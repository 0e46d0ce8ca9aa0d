"""
JSON extraction from free-form LLM output.

Finds the first balanced {...} span in a text, skipping braces that
appear inside JSON string literals.
"""

import json
import logging
from typing import Optional

logger = logging.getLogger(__name__)


def find_first_object_span(text: str) -> Optional[str]:
    """
    Return the first balanced brace-delimited substring of `text`.

    Scanning starts at the first "{". Braces inside double-quoted strings
    (with backslash escapes) are ignored. If that opening brace never
    closes, the next "{" is tried.

    Args:
        text: Arbitrary text, possibly with prose around a JSON object

    Returns:
        The span including both braces, or None if no balanced span exists
    """
    if not text:
        return None

    start = text.find("{")
    while start != -1:
        depth = 0
        in_string = False
        escaped = False

        for index in range(start, len(text)):
            char = text[index]
            if in_string:
                if escaped:
                    escaped = False
                elif char == "\\":
                    escaped = True
                elif char == '"':
                    in_string = False
                continue

            if char == '"':
                in_string = True
            elif char == "{":
                depth += 1
            elif char == "}":
                depth -= 1
                if depth == 0:
                    return text[start:index + 1]

        start = text.find("{", start + 1)

    return None


def extract_json_object(text: str) -> Optional[dict]:
    """
    Parse the first balanced JSON object found in `text`.

    Returns:
        The decoded dict, or None if no span is found, it is not valid
        JSON, or it does not decode to an object
    """
    span = find_first_object_span(text)
    if span is None:
        return None

    try:
        data = json.loads(span)
    except (json.JSONDecodeError, RecursionError) as e:
        logger.debug(f"Brace span is not decodable JSON: {type(e).__name__}: {e}")
        return None

    if not isinstance(data, dict):
        return None
    return data


# Design Rationale and Trade-offs:
#
# 1. Why a brace scanner instead of a greedy regex?
#    - A greedy {.*} spans from the first "{" to the last "}" across prose
#    - Braces inside string values do not end the object
#    - Trade-off: Linear scan per candidate start
#
# 2. Why only decode the first balanced span?
#    - The response schema asks for exactly one object
#    - Trade-off: A valid object after an invalid one is ignored
