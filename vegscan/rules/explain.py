"""Human-readable explanations for classification results."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field

from .classify import (
    DANGER,
    SAFE,
    STATUSES,
    UNKNOWN,
    WARNING,
    ClassificationBucket,
    MatchResult,
)

_ICONS = {
    SAFE: "✅",
    WARNING: "⚠️",
    DANGER: "❌",
    UNKNOWN: "❓",
}

_TITLES = {
    SAFE: "可食用",
    WARNING: "需確認",
    DANGER: "不可食用",
    UNKNOWN: "未知成分",
}

_DESCRIPTIONS = {
    SAFE: "此產品的成分皆為素食可食用",
    WARNING: "此產品含有需要確認來源的成分，建議進一步查證",
    DANGER: "此產品含有動物來源成分，不適合素食者",
    UNKNOWN: "部分成分無法識別，建議人工確認",
}

_NOT_FOUND_REASON = "此成分不在資料庫中"
_NOT_FOUND_NOTES = "建議手動查證或聯繫製造商確認"
_DEFAULT_CATEGORY = "E添加物"


@dataclass
class ItemExplanation:
    name: str  # original input
    display_name: str
    status: str
    reason: str
    notes: str = ""
    category: str = ""
    vegetarian: bool | None = None
    vegan: bool | None = None
    risk: str | None = None


@dataclass
class Summary:
    total: int = 0
    safe: int = 0
    warning: int = 0
    danger: int = 0
    unknown: int = 0


@dataclass
class Explanation:
    verdict: str
    icon: str
    title: str
    description: str
    details: dict[str, list[ItemExplanation]] = field(
        default_factory=lambda: {status: [] for status in STATUSES}
    )
    summary: Summary = field(default_factory=Summary)

    def to_dict(self) -> dict:
        return asdict(self)


def _reason(match: MatchResult, status: str) -> str:
    """Reason text chosen by the same precedence as the bucket status."""
    item = match.item
    if status == DANGER:
        reason = "含有動物成分，非素食"
    elif status == SAFE:
        reason = "植物來源，素食可食"
    elif item.vegan is False:
        reason = "可能含有蛋奶等動物產品，非純素"
    elif item.risk == "high":
        reason = "可能含有動物來源，需確認製程"
    elif item.risk == "medium":
        reason = "來源不確定，建議確認"
    else:
        reason = "資料不足，建議確認"

    if match.match_type == "fuzzy":
        reason += f" (相似度: {round(match.confidence * 100)}%)"
    return reason


def explain_match(match: MatchResult, status: str) -> ItemExplanation:
    """Explain one bucket entry; ``status`` is the bucket it sits in."""
    if not match.matched or match.item is None:
        return ItemExplanation(
            name=match.input,
            display_name=match.input,
            status=UNKNOWN,
            reason=_NOT_FOUND_REASON,
            notes=_NOT_FOUND_NOTES,
            category="未知",
        )

    item = match.item
    return ItemExplanation(
        name=match.input,
        display_name=item.name or item.name_en or match.input,
        status=status,
        reason=_reason(match, status),
        notes=item.notes,
        category=item.category or _DEFAULT_CATEGORY,
        vegetarian=item.vegetarian,
        vegan=item.vegan,
        risk=item.risk,
    )


def explain(bucket: ClassificationBucket, verdict: str) -> Explanation:
    """Build the display-ready explanation for a classified bucket."""
    explanation = Explanation(
        verdict=verdict,
        icon=_ICONS.get(verdict, _ICONS[UNKNOWN]),
        title=_TITLES.get(verdict, "未知"),
        description=_DESCRIPTIONS.get(verdict, "無法判斷"),
    )

    for status, matches in bucket.items():
        explanation.details[status] = [explain_match(m, status) for m in matches]
        setattr(explanation.summary, status, len(matches))
        explanation.summary.total += len(matches)

    return explanation


def generate_summary_text(explanation: Explanation) -> str:
    """One-line summary; warning and unknown are reported together."""
    summary = explanation.summary
    verdict = explanation.verdict

    if verdict == SAFE:
        return f"✅ 全部 {summary.total} 項成分皆為素食可食用"
    if verdict == DANGER:
        return f"❌ 發現 {summary.danger} 項不可食用成分"
    if verdict == WARNING:
        return f"⚠️ 有 {summary.warning + summary.unknown} 項成分需要確認來源"
    return "❓ 無法判斷"
