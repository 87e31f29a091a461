"""Fold external judgments for unknown ingredients back into a bucket."""

from __future__ import annotations

from dataclasses import replace

from ..judge import IngredientJudgment
from .classify import (
    DANGER,
    SAFE,
    STATUSES,
    WARNING,
    ClassificationBucket,
)
from .reference import IngredientRecord

AI_CONFIDENCE = 0.8
AI_CATEGORY = "AI判斷"


def judgment_key(name: str) -> str:
    return name.strip().lower()


def is_accepted(judgment: IngredientJudgment | None) -> bool:
    return (
        judgment is not None
        and not judgment.fallback
        and judgment.vegetarian is not None
    )


def status_from_judgment(judgment: IngredientJudgment) -> str:
    if judgment.vegetarian is False:
        return DANGER
    if judgment.vegan is not True or judgment.risk in ("medium", "high"):
        return WARNING
    return SAFE


def apply_judgments(
    bucket: ClassificationBucket, judgments: list[IngredientJudgment]
) -> ClassificationBucket:
    """Return a new bucket with accepted judgments moved out of ``unknown``.

    Judgments are matched to unknown inputs by normalized name. Items
    without an accepted judgment stay unknown; the input bucket is left
    as is.
    """
    by_key: dict[str, IngredientJudgment] = {}
    for judgment in judgments:
        if is_accepted(judgment):
            by_key.setdefault(judgment_key(judgment.ingredient), judgment)

    result = ClassificationBucket(
        **{status: list(bucket[status]) for status in STATUSES if status != "unknown"}
    )
    for match in bucket.unknown:
        judgment = by_key.get(judgment_key(match.input))
        if judgment is None:
            result.unknown.append(match)
            continue

        item = IngredientRecord(
            name=match.input,
            vegetarian=judgment.vegetarian,
            vegan=judgment.vegan,
            risk=judgment.risk,
            category=AI_CATEGORY,
            notes=judgment.reason,
            source="ai",
        )
        result[status_from_judgment(judgment)].append(
            replace(
                match,
                matched=True,
                match_type="ai",
                confidence=AI_CONFIDENCE,
                item=item,
            )
        )
    return result
