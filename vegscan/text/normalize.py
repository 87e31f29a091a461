"""Canonicalize raw ingredient text before tokenization."""

from __future__ import annotations

import re

# Full-width forms U+FF01..U+FF5E map onto ASCII by a fixed offset
_FULLWIDTH_OFFSET = 0xFEE0
_FULLWIDTH_TABLE = {cp: cp - _FULLWIDTH_OFFSET for cp in range(0xFF01, 0xFF5F)}

_DISALLOWED = re.compile(r"[^A-Za-z0-9_\s,，、;；()（）\-\u4e00-\u9fa5]")
_WHITESPACE = re.compile(r"\s+")
_NEWLINES = re.compile(r"[\r\n]+")
# Label delimiters that the allow-list would otherwise prune
_LABEL_DELIMITERS = re.compile(r"[.。．:：]")


def to_half_width(text: str) -> str:
    return text.translate(_FULLWIDTH_TABLE)


def normalize(text: str) -> str:
    """Return the canonical form of ``text``.

    Full-width characters become half-width, letters are lower-cased,
    characters outside the allow-list are dropped and whitespace runs
    collapse to a single space. Non-string input yields ``""``.
    """
    if not text or not isinstance(text, str):
        return ""

    result = to_half_width(text)
    result = result.lower()
    result = _DISALLOWED.sub("", result)
    return _WHITESPACE.sub(" ", result).strip()


def normalize_ingredients(text: str) -> str:
    """Normalize a (possibly multi-line) ingredient list.

    Newlines and label delimiters are turned into commas first so that the
    result is a single comma-delimited stream.
    """
    if not text or not isinstance(text, str):
        return ""

    result = _NEWLINES.sub(",", text)
    result = _LABEL_DELIMITERS.sub(",", result)
    return normalize(result)
