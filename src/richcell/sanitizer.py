"""Allow-list driven HTML filter for rich cell content.

``ALLOWED_TAGS`` documents what the editor surface is expected to emit. The
filter itself does not parse markup; it runs four textual removal passes:

1. ``<script>`` blocks with their bodies,
2. ``<style>`` blocks with their bodies,
3. ``on*=`` event-handler assignments (the value is left in place),
4. ``javascript:`` scheme prefixes.

Block removal runs before handler stripping so that no half-removed tag is
fed to the later passes. A ``<script`` or ``<style`` opener with no closing
tag after it removes everything up to the end of the text.

Every pass is a single left-to-right scan. After each removal the few
characters in front of the cut are scanned again together with what follows,
so a match spliced together by the removal (``<scr<script></script>ipt>``)
goes in the same scan. The whole pipeline repeats until the text stops
changing, which keeps :func:`sanitize` idempotent.

Out of scope: schemes obfuscated with control characters or entities
(``java\\tscript:``, ``&#106;avascript:``) and anything else that needs a
real HTML parser to recognise.
"""
from __future__ import annotations

import re
from typing import Callable, Final, List, Optional, Tuple

ALLOWED_TAGS: Final[frozenset[str]] = frozenset(
    {
        # text blocks
        "p",
        "br",
        "blockquote",
        "h1",
        "h2",
        "h3",
        "h4",
        "h5",
        "h6",
        # inline formatting
        "b",
        "strong",
        "i",
        "em",
        "u",
        "s",
        "code",
        "pre",
        # lists
        "ul",
        "ol",
        "li",
        # links and media
        "a",
        "img",
        # tables
        "table",
        "thead",
        "tbody",
        "tfoot",
        "tr",
        "th",
        "td",
    }
)

# Closed blocks removed by the first two passes. The passes themselves scan
# with the opener and closer patterns below instead.
SCRIPT_BLOCK_PATTERN = re.compile(r"<script\b[^>]*>.*?</script\s*>", re.IGNORECASE | re.DOTALL)
STYLE_BLOCK_PATTERN = re.compile(r"<style\b[^>]*>.*?</style\s*>", re.IGNORECASE | re.DOTALL)
EVENT_HANDLER_PATTERN = re.compile(r"\bon[a-z]+\s*=", re.IGNORECASE)
JAVASCRIPT_SCHEME_PATTERN = re.compile(r"javascript\s*:", re.IGNORECASE)

_SCRIPT_OPEN = re.compile(r"<script\b", re.IGNORECASE)
_SCRIPT_CLOSE = re.compile(r"</script\s*>", re.IGNORECASE)
_STYLE_OPEN = re.compile(r"<style\b", re.IGNORECASE)
_STYLE_CLOSE = re.compile(r"</style\s*>", re.IGNORECASE)

# Characters in front of a cut that are scanned again for handler and scheme
# matches; covers "javascript" or a long handler name plus padding.
_RESCAN_REACH: Final = 32

Span = Tuple[int, int]
Finder = Callable[[str, int], Optional[Span]]


def _block_finder(opener: re.Pattern[str], closer: re.Pattern[str]) -> Finder:
    """Locate the first block at or after ``pos``; unclosed blocks run to the end."""

    def find(text: str, pos: int) -> Optional[Span]:
        found = opener.search(text, pos)
        if found is None:
            return None
        tag_end = text.find(">", found.end())
        if tag_end == -1:
            return found.start(), len(text)
        closing = closer.search(text, tag_end + 1)
        if closing is None:
            return found.start(), len(text)
        return found.start(), closing.end()

    return find


def _pattern_finder(pattern: re.Pattern[str]) -> Finder:
    def find(text: str, pos: int) -> Optional[Span]:
        found = pattern.search(text, pos)
        return None if found is None else found.span()

    return find


_PASSES: Final[tuple[tuple[Finder, int], ...]] = (
    (_block_finder(_SCRIPT_OPEN, _SCRIPT_CLOSE), len("<script") - 1),
    (_block_finder(_STYLE_OPEN, _STYLE_CLOSE), len("<style") - 1),
    (_pattern_finder(EVENT_HANDLER_PATTERN), _RESCAN_REACH),
    (_pattern_finder(JAVASCRIPT_SCHEME_PATTERN), _RESCAN_REACH),
)


def is_allowed_tag(name: str) -> bool:
    """Return ``True`` when *name* belongs to the documented allow-list."""

    if not isinstance(name, str):
        return False
    return name.strip().lower() in ALLOWED_TAGS


def _take_tail(kept: List[str], size: int) -> str:
    parts: List[str] = []
    while kept and size > 0:
        piece = kept.pop()
        if len(piece) > size:
            kept.append(piece[:-size])
            piece = piece[-size:]
        parts.append(piece)
        size -= len(piece)
    return "".join(reversed(parts))


def _strip(text: str, find: Finder, reach: int) -> str:
    kept: List[str] = []
    pos = 0
    while True:
        span = find(text, pos)
        if span is None:
            kept.append(text[pos:])
            return "".join(kept)
        start, end = span
        kept.append(text[pos:start])
        tail = _take_tail(kept, reach + 1)
        if len(tail) > reach:
            # The first character stays kept; it is only there so \b sees its real neighbour.
            kept.append(tail[0])
            pos = 1
        else:
            pos = 0
        text = tail + text[end:]


def _run_passes(text: str) -> str:
    # Block passes first.
    for find, reach in _PASSES:
        text = _strip(text, find, reach)
    return text


def sanitize(value: object) -> str:
    """Return *value* with executable markup removed.

    Never raises. Non-text or empty input yields ``""`` and text without any
    angle bracket is returned unchanged.
    """

    if not isinstance(value, str) or not value:
        return ""
    if "<" not in value and ">" not in value:
        return value
    text = value
    while True:
        cleaned = _run_passes(text)
        if cleaned == text:
            return cleaned
        text = cleaned


__all__ = [
    "ALLOWED_TAGS",
    "EVENT_HANDLER_PATTERN",
    "JAVASCRIPT_SCHEME_PATTERN",
    "SCRIPT_BLOCK_PATTERN",
    "STYLE_BLOCK_PATTERN",
    "is_allowed_tag",
    "sanitize",
]
