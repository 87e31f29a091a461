"""Rule-based vegetarian classification of tokenized ingredients."""

from .augment import apply_judgments, status_from_judgment
from .classify import (
    DANGER,
    SAFE,
    STATUSES,
    UNKNOWN,
    WARNING,
    ClassificationBucket,
    MatchResult,
    classify,
    get_final_verdict,
    match_ecode,
    match_ingredient,
    similarity,
)
from .explain import Explanation, ItemExplanation, explain, generate_summary_text
from .reference import AdditiveCodeRecord, IngredientRecord, ReferenceData

__all__ = [
    "SAFE",
    "WARNING",
    "DANGER",
    "UNKNOWN",
    "STATUSES",
    "IngredientRecord",
    "AdditiveCodeRecord",
    "ReferenceData",
    "MatchResult",
    "ClassificationBucket",
    "classify",
    "get_final_verdict",
    "match_ecode",
    "match_ingredient",
    "similarity",
    "Explanation",
    "ItemExplanation",
    "explain",
    "generate_summary_text",
    "apply_judgments",
    "status_from_judgment",
]
