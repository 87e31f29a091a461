"""Remove spacing artifacts that OCR engines insert into CJK text."""

from __future__ import annotations

import re

_CJK = "\u4e00-\u9fa5"
_PUNCT = "，。、：:；！？（）「」『』【】\\-"

_PASSES = [
    # Between CJK characters
    (re.compile(rf"([{_CJK}])\s+([{_CJK}])"), r"\1\2"),
    # Between CJK and punctuation (either side)
    (re.compile(rf"([{_CJK}])\s+([{_PUNCT}])"), r"\1\2"),
    (re.compile(rf"([{_PUNCT}])\s+([{_CJK}])"), r"\1\2"),
    # Around brackets
    (re.compile(rf"([{_CJK}])\s+([()（）])"), r"\1\2"),
    (re.compile(rf"([()（）])\s+([{_CJK}])"), r"\1\2"),
    (re.compile(r"([()（）])\s+([()（）])"), r"\1\2"),
    # Between alphanumerics and CJK
    (re.compile(rf"([a-zA-Z0-9])\s+([{_CJK}])"), r"\1\2"),
    (re.compile(rf"([{_CJK}])\s+([a-zA-Z0-9])"), r"\1\2"),
    (re.compile(r"\s+-\s+"), "-"),
]

_MULTISPACE = re.compile(r"\s{2,}")


def clean_ocr_text(text: str) -> str:
    """Join characters that OCR split apart, line by line.

    Line breaks are kept; they separate ingredients downstream.
    """
    if not text:
        return ""

    cleaned_lines = []
    for line in text.split("\n"):
        result = line
        # Overlapping matches need a few passes to settle
        for _ in range(3):
            for pattern, repl in _PASSES:
                result = pattern.sub(repl, result)
        cleaned_lines.append(_MULTISPACE.sub(" ", result).strip())

    return "\n".join(line for line in cleaned_lines if line)
