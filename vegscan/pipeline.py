"""End-to-end analysis: normalize, tokenize, classify, augment, explain."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field

from .db import JudgeCache
from .judge import IngredientJudgment, JudgeBackend
from .rules import (
    ClassificationBucket,
    Explanation,
    ReferenceData,
    apply_judgments,
    classify,
    explain,
    generate_summary_text,
    get_final_verdict,
)
from .text import TokenData, normalize_ingredients, tokenize_with_ecodes

logger = logging.getLogger(__name__)


@dataclass
class AnalysisResult:
    normalized: str
    token_data: TokenData
    bucket: ClassificationBucket
    verdict: str
    explanation: Explanation
    summary: str
    ai_judged: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "normalized": self.normalized,
            "tokens": list(self.token_data.tokens),
            "e_codes": list(self.token_data.e_codes),
            "verdict": self.verdict,
            "summary": self.summary,
            "ai_judged": list(self.ai_judged),
            "explanation": self.explanation.to_dict(),
        }


def _finish(
    normalized: str,
    token_data: TokenData,
    bucket: ClassificationBucket,
    ai_judged: list[str] | None = None,
) -> AnalysisResult:
    verdict = get_final_verdict(bucket)
    explanation = explain(bucket, verdict)
    return AnalysisResult(
        normalized=normalized,
        token_data=token_data,
        bucket=bucket,
        verdict=verdict,
        explanation=explanation,
        summary=generate_summary_text(explanation),
        ai_judged=ai_judged or [],
    )


def analyze_text(
    text: str, *, reference: ReferenceData | None = None
) -> AnalysisResult:
    """Classify ingredient text using the reference tables only."""
    normalized = normalize_ingredients(text)
    token_data = tokenize_with_ecodes(normalized)
    bucket = classify(token_data, reference=reference)
    return _finish(normalized, token_data, bucket)


def _cached(cache: JudgeCache | None, name: str) -> IngredientJudgment | None:
    if cache is None:
        return None
    try:
        return cache.get(name)
    except Exception:
        logger.exception("判斷快取讀取失敗: %s", name)
        return None


def _store(cache: JudgeCache | None, judgments: list[IngredientJudgment]) -> None:
    if cache is None:
        return
    for judgment in judgments:
        if judgment.fallback or judgment.vegetarian is None:
            continue
        try:
            cache.set(judgment.ingredient, judgment)
        except Exception:
            logger.exception("判斷快取寫入失敗: %s", judgment.ingredient)


async def judge_unknowns(
    names: list[str],
    judge: JudgeBackend,
    *,
    cache: JudgeCache | None = None,
    timeout: float = 3.0,
    locale: str = "zh",
) -> list[IngredientJudgment]:
    """Judge names, consulting the cache first.

    A judge that times out or raises contributes nothing; the caller
    keeps those names unknown.
    """
    judgments: list[IngredientJudgment] = []
    pending: list[str] = []
    for name in dict.fromkeys(names):
        hit = _cached(cache, name)
        if hit is not None:
            logger.debug("判斷快取命中: %s", name)
            judgments.append(hit)
        else:
            pending.append(name)

    if not pending:
        return judgments

    try:
        fresh = await asyncio.wait_for(
            judge.judge(pending, locale=locale), timeout=timeout
        )
    except asyncio.TimeoutError:
        logger.warning("AI 判斷逾時 (%.1f 秒)，%d 項成分維持未知", timeout, len(pending))
        return judgments
    except Exception as e:
        logger.warning("AI 判斷失敗，%d 項成分維持未知: %s", len(pending), e)
        return judgments

    _store(cache, fresh)
    return judgments + list(fresh)


async def analyze(
    text: str,
    *,
    judge: JudgeBackend | None = None,
    cache: JudgeCache | None = None,
    timeout: float = 3.0,
    locale: str = "zh",
    reference: ReferenceData | None = None,
) -> AnalysisResult:
    """Classify ingredient text, asking ``judge`` about anything unknown.

    Without a judge this gives the same result as :func:`analyze_text`.
    """
    normalized = normalize_ingredients(text)
    token_data = tokenize_with_ecodes(normalized)
    bucket = classify(token_data, reference=reference)

    unknown = [m.input for m in bucket.unknown]
    if judge is None or not unknown:
        return _finish(normalized, token_data, bucket)

    judgments = await judge_unknowns(
        unknown, judge, cache=cache, timeout=timeout, locale=locale
    )
    augmented = apply_judgments(bucket, judgments)
    ai_judged = [
        m.input
        for _, matches in augmented.items()
        for m in matches
        if m.match_type == "ai"
    ]
    if ai_judged:
        logger.info("AI 判斷了 %d 項未知成分", len(ai_judged))
    return _finish(normalized, token_data, augmented, ai_judged)
