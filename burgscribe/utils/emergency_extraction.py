"""Last-resort field scraping for responses that no repair pass could parse.

Each content kind has one profile: a set of regular expressions tuned to the
field names its prompt asks for. A profile rebuilds a minimal value shaped
like the JSON the generator expected, filling unmatched fields with generic
placeholders. Results are partial by nature and every use is logged.
"""

from __future__ import annotations

import logging
import re
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Union

from burgscribe.utils.enhanced_logging import log_event

logger = logging.getLogger(__name__)


class ContentKind(str, Enum):
    """Identifies which generation task produced a response."""

    EVENTS = "events"
    TAVERNS_BATCH = "taverns_batch"
    TAVERN = "tavern"
    LANDMARK = "landmark"
    LEADER = "leader"
    SHOPS = "shops"

    @classmethod
    def from_label(cls, label: str) -> Optional["ContentKind"]:
        """Resolve a free-form caller label such as ``generateTavernsBatchJSON``.

        Predicates are checked in priority order so that a batch label is not
        mistaken for its single-item counterpart.
        """
        if label in cls._value2member_map_:
            return cls(label)
        normalised = re.sub(r"[\s_\-]", "", label.lower())
        for needle, kind in _LABEL_PREDICATES:
            if needle in normalised:
                return kind
        return None

    @classmethod
    def coerce(cls, caller: Union["ContentKind", str]) -> Optional["ContentKind"]:
        if isinstance(caller, ContentKind):
            return caller
        return cls.from_label(str(caller))


_LABEL_PREDICATES = (
    ("events", ContentKind.EVENTS),
    ("tavernsbatch", ContentKind.TAVERNS_BATCH),
    ("tavern", ContentKind.TAVERN),
    ("landmark", ContentKind.LANDMARK),
    ("leader", ContentKind.LEADER),
    ("shop", ContentKind.SHOPS),
)

_STRING_BODY = r'"((?:[^"\\]|\\.)*)'
_EVENT_RE = re.compile(
    r'"year"\s*:\s*(-?\d+)\s*,?\s*"description"\s*:\s*"((?:[^"\\]|\\.)*)"',
    re.DOTALL,
)
_TAVERN_ENTRY_RE = re.compile(
    r'"type"\s*:\s*"([^"]*)"[\s\S]*?'
    r'"name"\s*:\s*"([^"]*)"[\s\S]*?'
    r'"innkeeper"\s*:\s*"([^"]*)"[\s\S]*?'
    r'"signature"\s*:\s*"([^"]*)"[\s\S]*?'
    r'"description"\s*:\s*"((?:[^"\\]|\\.)*)"'
)
_SHOP_ENTRY_RE = re.compile(
    r'"type"\s*:\s*"([^"]*)"[\s\S]*?'
    r'"name"\s*:\s*"([^"]*)"[\s\S]*?'
    r'"owner"\s*:\s*"([^"]*)"[\s\S]*?'
    r'"description"\s*:\s*"((?:[^"\\]|\\.)*)"'
)


def _clean(value: str) -> str:
    # Inner quotes become apostrophes so the value can be re-serialised safely.
    return value.replace('\\"', "'").replace('"', "'").strip()


def _field(text: str, name: str) -> Optional[str]:
    match = re.search(rf'"{name}"\s*:\s*{_STRING_BODY}', text, re.DOTALL)
    return match.group(1) if match else None


def _extract_events(text: str) -> Optional[Dict[str, Any]]:
    events = [
        {"year": int(match.group(1)), "description": _clean(match.group(2))}
        for match in _EVENT_RE.finditer(text)
    ]
    return {"events": events} if events else None


def _extract_taverns_batch(text: str) -> Optional[Dict[str, Any]]:
    taverns: List[Dict[str, str]] = [
        {
            "type": match.group(1),
            "name": match.group(2),
            "innkeeper": match.group(3),
            "signature": match.group(4),
            "description": _clean(match.group(5)),
        }
        for match in _TAVERN_ENTRY_RE.finditer(text)
    ]
    return {"taverns": taverns} if taverns else None


def _extract_tavern(text: str) -> Optional[Dict[str, Any]]:
    name = _field(text, "name")
    if name is None:
        return None
    innkeeper = _field(text, "innkeeper")
    signature = _field(text, "signature")
    description = _field(text, "description")
    return {
        "tavern": {
            "name": _clean(name) or "The Local Tavern",
            "innkeeper": _clean(innkeeper) if innkeeper else "The Keeper",
            "signature": _clean(signature) if signature else "Local ale and hearty meals",
            "description": _clean(description) if description else "A welcoming establishment where locals gather.",
        }
    }


def _extract_landmark(text: str) -> Optional[Dict[str, Any]]:
    name = _field(text, "name")
    if name is None:
        return None
    description = _field(text, "description")
    return {
        "landmark": {
            "name": _clean(name) or "Ancient Landmark",
            "description": _clean(description) if description else "A notable landmark in the area.",
        }
    }


def _extract_leader(text: str) -> Optional[Dict[str, Any]]:
    name = _field(text, "name")
    if name is None:
        return None
    title = _field(text, "title")
    description = _field(text, "description")
    return {
        "leader": {
            "name": _clean(name) or "Leader",
            "title": _clean(title) if title else "Leader",
            "description": _clean(description) if description else "A respected leader in the community.",
        }
    }


def _extract_shops(text: str) -> Optional[Dict[str, Any]]:
    shops = [
        {
            "type": match.group(1),
            "name": match.group(2),
            "owner": match.group(3),
            "description": _clean(match.group(4)),
        }
        for match in _SHOP_ENTRY_RE.finditer(text)
    ]
    return {"shops": shops} if shops else None


_PROFILES: Dict[ContentKind, Callable[[str], Optional[Dict[str, Any]]]] = {
    ContentKind.EVENTS: _extract_events,
    ContentKind.TAVERNS_BATCH: _extract_taverns_batch,
    ContentKind.TAVERN: _extract_tavern,
    ContentKind.LANDMARK: _extract_landmark,
    ContentKind.LEADER: _extract_leader,
    ContentKind.SHOPS: _extract_shops,
}


def emergency_extract(
    text: str,
    caller: Union[ContentKind, str],
    *,
    log: Optional[logging.Logger] = None,
) -> Optional[Dict[str, Any]]:
    """Scrape a minimal structured value for ``caller`` out of ``text``.

    Returns ``None`` when no profile matches the caller or the profile cannot
    find its required field.
    """
    log = log or logger
    kind = ContentKind.coerce(caller)
    if kind is None:
        log_event(log, logging.WARNING, "No emergency extraction profile for caller", caller=str(caller))
        return None

    result = _PROFILES[kind](text)
    if result is None:
        log_event(log, logging.WARNING, "Emergency extraction found no usable fields", profile=kind.value)
        return None

    log_event(log, logging.WARNING, "Emergency extraction produced partial content", profile=kind.value)
    return result


__all__ = ["ContentKind", "emergency_extract"]
