"""Text helpers for diagnostic messages."""

from __future__ import annotations

import re
from collections.abc import Iterable

_NUMBER_RE = re.compile(r"\d+")
_STRING_RE = re.compile(r'"[^"]*"')
_SLUG_RE = re.compile(r"[^a-z0-9]")
_WORD_RE = re.compile(r"^\w+$")


def normalize_message(message: str) -> str:
    """Elide literals so messages differing only in names or numbers coincide.

    ``Cannot find module './a'`` and ``Cannot find module './b'`` both become
    ``Cannot find module "STRING"``.
    """
    text = message.replace("'", '"')
    text = _NUMBER_RE.sub("NUMBER", text)
    text = _STRING_RE.sub('"STRING"', text)
    return text.strip()


def slugify(text: str, max_length: int = 50) -> str:
    return _SLUG_RE.sub("_", text.lower())[:max_length]


def contains_marker(text: str, marker: str) -> bool:
    """Whole-word match for identifier markers, substring match otherwise."""
    if _WORD_RE.match(marker):
        return re.search(rf"(?<!\w){re.escape(marker)}(?!\w)", text) is not None
    return marker in text


def contains_any_marker(text: str, markers: Iterable[str]) -> bool:
    return any(contains_marker(text, m) for m in markers)


def count_marker_hits(texts: Iterable[str], markers: Iterable[str]) -> int:
    """Sum over markers of the number of texts mentioning each marker."""
    texts = list(texts)
    return sum(
        1 for marker in markers for text in texts if contains_marker(text, marker)
    )
