"""Vegetarian ingredient checker for packaged food labels."""

from .config import VegscanConfig, load_config
from .pipeline import AnalysisResult, analyze, analyze_text
from .rules import (
    ClassificationBucket,
    Explanation,
    MatchResult,
    ReferenceData,
    classify,
    explain,
    generate_summary_text,
    get_final_verdict,
)
from .text import TokenData, normalize_ingredients, tokenize_with_ecodes

__all__ = [
    "AnalysisResult",
    "analyze",
    "analyze_text",
    "ClassificationBucket",
    "Explanation",
    "MatchResult",
    "ReferenceData",
    "classify",
    "explain",
    "generate_summary_text",
    "get_final_verdict",
    "TokenData",
    "normalize_ingredients",
    "tokenize_with_ecodes",
    "VegscanConfig",
    "load_config",
]
