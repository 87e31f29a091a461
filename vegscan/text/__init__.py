"""Text canonicalization and tokenization for ingredient lists."""

from .normalize import normalize, normalize_ingredients
from .tokenize import (
    TokenData,
    extract_ecodes,
    extract_parentheses,
    is_ecode,
    tokenize,
    tokenize_with_ecodes,
)

__all__ = [
    "normalize",
    "normalize_ingredients",
    "TokenData",
    "tokenize",
    "tokenize_with_ecodes",
    "extract_parentheses",
    "extract_ecodes",
    "is_ecode",
]
