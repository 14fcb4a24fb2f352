"""Text-to-text repairs for the malformed JSON local models tend to emit.

Every pass is a pure function over the candidate text and is applied to the
extractor's output on its own; passes are never chained. They are listed in
``REPAIR_PASSES`` from least to most destructive.

The string-boundary aware passes walk the text once, tracking whether the
cursor sits inside a double-quoted string and whether the previous character
was an escaping backslash, so content outside string literals is never
rewritten.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, Dict, List, Tuple

_CONTROL_CHAR_RE = re.compile(r"[\x00-\x08\x0B\x0C\x0E-\x1F\x7F-\x9F]")
_LINE_BREAK_RE = re.compile(r"[\r\n\t]+")
_NON_PRINTABLE_RE = re.compile(r"[^\x20-\x7E\t\n\r]")
_BACKSLASH_RUN_RE = re.compile(r"\\+")

_STRING_ESCAPES = {"\n": "\\n", "\r": "\\r", "\t": "\\t"}
_LITERALS = ("true", "false", "null")


@dataclass(frozen=True)
class RepairPass:
    name: str
    transform: Callable[[str], str]


def _next_significant(text: str, index: int) -> int:
    while index < len(text) and text[index].isspace():
        index += 1
    return index


def _closes_string(text: str, index: int) -> bool:
    """Decide whether the quote at ``index`` ends the string it appears in.

    A quote is taken as the closing delimiter when what follows it is
    structural: a colon, a closing brace or bracket, the end of the text, or a
    comma that is itself followed by the start of another value or key.
    """
    nxt = _next_significant(text, index + 1)
    if nxt >= len(text):
        return True
    follower = text[nxt]
    if follower in ":}]":
        return True
    if follower != ",":
        return False
    after = _next_significant(text, nxt + 1)
    if after >= len(text):
        return True
    start = text[after]
    return start in '"{[]}-' or start.isdigit() or text.startswith(_LITERALS, after)


def no_repair(text: str) -> str:
    return text


def escape_stray_quotes(text: str) -> str:
    """Escape unescaped quotes that sit inside a string value.

    ``"The sign reads "Welcome" here"`` becomes
    ``"The sign reads \\"Welcome\\" here"``.
    """
    out: List[str] = []
    in_string = False
    escaped = False
    for index, char in enumerate(text):
        if not in_string:
            if char == '"':
                in_string = True
            out.append(char)
            continue
        if escaped:
            escaped = False
        elif char == "\\":
            escaped = True
        elif char == '"':
            if _closes_string(text, index):
                in_string = False
            else:
                out.append("\\")
        out.append(char)
    return "".join(out)


def _ends_value(char: str) -> bool:
    return bool(char) and (char in '}]"' or char.isalnum())


def insert_missing_commas(text: str) -> str:
    """Insert a comma between two adjacent values that lack a separator.

    Covers ``}\\n{`` between array elements, ``"a" "b"`` and a member value
    running straight into the next key. Only text outside strings is examined.
    """
    out: List[str] = []
    pending_ws: List[str] = []
    in_string = False
    escaped = False
    previous = ""
    for char in text:
        if in_string:
            out.append(char)
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
                previous = char
            continue
        if char.isspace():
            pending_ws.append(char)
            continue
        if char in '{["' and _ends_value(previous):
            out.append(",")
        out.extend(pending_ws)
        pending_ws.clear()
        out.append(char)
        if char == '"':
            in_string = True
        previous = char
    out.extend(pending_ws)
    return "".join(out)


def escape_string_control_whitespace(text: str) -> str:
    """Replace literal newlines, carriage returns and tabs inside strings with escapes."""
    out: List[str] = []
    in_string = False
    escaped = False
    for char in text:
        if not in_string:
            if char == '"':
                in_string = True
            out.append(char)
            continue
        if escaped:
            escaped = False
        elif char == "\\":
            escaped = True
        elif char == '"':
            in_string = False
        elif char in _STRING_ESCAPES:
            out.append(_STRING_ESCAPES[char])
            continue
        out.append(char)
    return "".join(out)


def _typography_table() -> Dict[int, str]:
    table: Dict[int, str] = {}
    for code in (0x2018, 0x2019, 0x201A, 0x201B, 0x2032):
        table[code] = "'"
    for code in (0x201C, 0x201D, 0x201E, 0x201F, 0x2033):
        table[code] = '"'
    for code in range(0x2010, 0x2016):
        table[code] = "-"
    for code in (0x2212, 0xFE58, 0xFE63, 0xFF0D):
        table[code] = "-"
    table[0x2026] = "..."
    for code in (0x00A0, 0x202F, 0x205F, 0x3000, *range(0x2000, 0x200B)):
        table[code] = " "
    for code in (0x200B, 0x200C, 0x200D, 0x2060, 0xFEFF, *range(0x0080, 0x00A0)):
        table[code] = ""
    return table


_TYPOGRAPHY = _typography_table()


def normalize_typography(text: str) -> str:
    """Map smart quotes, dashes, ellipses and odd spaces to plain ASCII."""
    return text.translate(_TYPOGRAPHY)


def strip_control_characters(text: str) -> str:
    """Escape in-string line breaks, then drop the remaining C0/C1 control characters."""
    return _CONTROL_CHAR_RE.sub("", escape_string_control_whitespace(text))


def strip_control_characters_aggressive(text: str) -> str:
    """Drop control characters and flatten every line break or tab to a space.

    In-string line breaks are not preserved.
    """
    return _LINE_BREAK_RE.sub(" ", _CONTROL_CHAR_RE.sub("", text))


def strip_non_printable(text: str) -> str:
    """Keep printable ASCII plus tab, newline and carriage return only.

    Every run of backslashes also collapses to one, including a legitimately
    escaped backslash: ``"C:\\\\mill"`` becomes ``"C:\\mill"``, which no longer
    decodes. This is the last pass and only runs after every gentler one failed.
    """
    printable = _NON_PRINTABLE_RE.sub("", text)
    return _BACKSLASH_RUN_RE.sub(lambda _match: "\\", printable)


REPAIR_PASSES: Tuple[RepairPass, ...] = (
    RepairPass("none", no_repair),
    RepairPass("escape-stray-quotes", escape_stray_quotes),
    RepairPass("insert-missing-commas", insert_missing_commas),
    RepairPass("escape-string-control-whitespace", escape_string_control_whitespace),
    RepairPass("normalize-typography", normalize_typography),
    RepairPass("strip-control-chars", strip_control_characters),
    RepairPass("strip-control-chars-aggressive", strip_control_characters_aggressive),
    RepairPass("strip-non-printable", strip_non_printable),
)


__all__ = [
    "REPAIR_PASSES",
    "RepairPass",
    "escape_string_control_whitespace",
    "escape_stray_quotes",
    "insert_missing_commas",
    "no_repair",
    "normalize_typography",
    "strip_control_characters",
    "strip_control_characters_aggressive",
    "strip_non_printable",
]
