"""Tolerant parsing of LLM responses into JSON values.

``parse_json_response`` is the entry point generators use: it extracts the
candidate JSON text, tries every repair pass in order, and falls back to the
emergency extractor for the caller's content kind when all of them fail.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Optional, Union

from burgscribe.exceptions import AllRepairsFailedError
from burgscribe.utils.emergency_extraction import ContentKind, emergency_extract
from burgscribe.utils.enhanced_logging import log_event
from burgscribe.utils.llm_response_cleaner import extract_json_substring
from burgscribe.utils.repair_passes import REPAIR_PASSES

logger = logging.getLogger(__name__)

Caller = Union[ContentKind, str]


def _caller_label(caller: Caller) -> str:
    return caller.value if isinstance(caller, ContentKind) else str(caller)


def is_structured(value: Any) -> bool:
    """Accept keyed maps and sequences; reject scalars and null."""
    return isinstance(value, (dict, list))


def _log_decode_failure(
    log: logging.Logger,
    pass_name: str,
    caller: str,
    processed: str,
    exc: json.JSONDecodeError,
) -> None:
    position = exc.pos
    fields = {
        "caller": caller,
        "repair_pass": pass_name,
        "error": exc.msg,
        "position": position,
        "line": exc.lineno,
        "column": exc.colno,
        "context": processed[max(0, position - 10):position + 10],
    }
    if position < len(processed):
        fields["char"] = processed[position]
        fields["code_point"] = ord(processed[position])
        fields["preceding"] = processed[max(0, position - 5):position]
    log_event(log, logging.WARNING, "Repair pass failed to parse", **fields)


def parse_with_repairs(
    candidate: str,
    caller: Caller,
    *,
    raw_text: Optional[str] = None,
    log: Optional[logging.Logger] = None,
) -> Any:
    """Return the first structured value produced by a repair pass.

    Every pass starts from ``candidate``. ``raw_text`` only feeds the
    diagnostics carried by the raised error.

    Raises:
        AllRepairsFailedError: if no pass yields a map or sequence.
    """
    log = log or logger
    label = _caller_label(caller)

    for repair in REPAIR_PASSES:
        processed = repair.transform(candidate)
        try:
            value = json.loads(processed)
        except json.JSONDecodeError as exc:
            _log_decode_failure(log, repair.name, label, processed, exc)
            continue

        if is_structured(value):
            level = logging.DEBUG if repair.name == "none" else logging.INFO
            log_event(log, level, "Parsed JSON response", caller=label, repair_pass=repair.name)
            return value

        log_event(
            log,
            logging.WARNING,
            "Repair pass produced a non-structured value",
            caller=label,
            repair_pass=repair.name,
            value_type=type(value).__name__,
        )

    raise AllRepairsFailedError(label, raw_text if raw_text is not None else candidate)


def parse_json_response(
    response_text: str,
    caller: Caller,
    *,
    log: Optional[logging.Logger] = None,
) -> Any:
    """Turn a raw LLM response into a JSON map or sequence.

    Raises:
        NoJSONFoundError: when the response contains nothing JSON-shaped.
        AllRepairsFailedError: when every repair pass and the emergency
            extractor failed.
    """
    log = log or logger
    label = _caller_label(caller)
    log.debug("Parsing JSON for %s", label)

    candidate = extract_json_substring(response_text)
    try:
        return parse_with_repairs(candidate, caller, raw_text=response_text, log=log)
    except AllRepairsFailedError as exc:
        recovered = emergency_extract(response_text, caller, log=log)
        if recovered is not None:
            return recovered
        log_event(
            log,
            logging.ERROR,
            "All JSON parsing methods failed",
            caller=label,
            response_length=len(response_text),
            raw_excerpt=exc.raw_excerpt,
            candidate_excerpt=candidate[:100],
        )
        raise


__all__ = ["is_structured", "parse_json_response", "parse_with_repairs"]
