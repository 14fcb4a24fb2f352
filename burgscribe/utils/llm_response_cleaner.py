"""Locate the JSON payload inside a free-text LLM response."""

from __future__ import annotations

import logging
import re
from typing import Optional, Pattern, Tuple

from burgscribe.exceptions import NoJSONFoundError

logger = logging.getLogger(__name__)

# Ordered; the first pattern that matches wins. Fenced objects are the most
# reliable shape, bare arrays the least.
EXTRACTION_PATTERNS: Tuple[Tuple[str, Pattern[str]], ...] = (
    ("fenced-json-object", re.compile(r"```json\s*(\{[\s\S]*?\})\s*```", re.IGNORECASE)),
    ("fenced-object", re.compile(r"```\s*(\{[\s\S]*?\})\s*```")),
    ("bare-object", re.compile(r"(\{[\s\S]*\})")),
    ("fenced-json-array", re.compile(r"```json\s*(\[[\s\S]*?\])\s*```", re.IGNORECASE)),
    ("fenced-array", re.compile(r"```\s*(\[[\s\S]*?\])\s*```")),
    ("bare-array", re.compile(r"(\[[\s\S]*\])")),
)

_ANY_SPAN_RE = re.compile(r"[{\[][\s\S]*[}\]]")


def match_json_pattern(text: str) -> Optional[Tuple[str, str]]:
    """Return ``(pattern_name, candidate)`` for the first matching pattern."""
    for name, pattern in EXTRACTION_PATTERNS:
        match = pattern.search(text)
        if match and match.group(1):
            return name, match.group(1).strip()
    return None


def extract_json_substring(text: str) -> str:
    """Return the substring of ``text`` most likely to encode a JSON value.

    Raises:
        NoJSONFoundError: if neither a pattern nor a brace/bracket span exists.
    """
    if not text:
        raise NoJSONFoundError("Response text is empty")

    matched = match_json_pattern(text)
    if matched is not None:
        name, candidate = matched
        logger.debug("Pattern %s matched (%s chars)", name, len(candidate))
        return candidate

    logger.warning("No JSON pattern matched; scanning for any brace-delimited span")
    span = _ANY_SPAN_RE.search(text)
    if span is None or not span.group(0).strip():
        raise NoJSONFoundError("No JSON structure found in response")
    return span.group(0).strip()


__all__ = ["EXTRACTION_PATTERNS", "extract_json_substring", "match_json_pattern"]
