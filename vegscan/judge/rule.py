"""Offline keyword rules for judging unknown ingredients."""

from __future__ import annotations

from . import IngredientJudgment, JudgeBackend, fallback_judgment
from .prompt import is_judgeable

# Checked in order; the first matching rule decides
_RULES: list[tuple[tuple[str, ...], bool, bool, str, str]] = [
    # Plant names that contain animal keywords
    (
        ("豆乳", "豆奶", "椰奶", "椰漿", "杏仁奶", "燕麥奶", "肉桂", "肉豆蔻", "牛蒡", "雞豆"),
        True, True, "low", "植物來源，素食可食",
    ),
    (("蛋",), True, False, "low", "含蛋，蛋奶素可食"),
    (
        (
            "肉", "豬", "牛", "雞", "鴨", "鵝", "羊", "魚", "蝦", "蟹", "貝",
            "蠔", "蚵", "魷", "螺", "骨", "膠原", "明膠", "沙茶", "鰹",
        ),
        False, False, "high", "含肉類或海鮮，非素食",
    ),
    (("香料", "調味", "乳化", "香精"), True, True, "medium", "來源不明，需確認"),
    (("奶", "乳", "起司", "芝士", "酪"), True, False, "high", "含乳製品，蛋奶素可食"),
    (("蜂",), True, False, "low", "蜂產品，非純素"),
    (
        (
            "菜", "豆", "米", "麥", "椰", "果", "茶", "菇", "薯", "瓜", "筍",
            "藻", "椒", "薑", "粉", "油",
        ),
        True, True, "low", "植物來源，素食可食",
    ),
]


def judge_by_rules(name: str) -> IngredientJudgment:
    for keywords, vegetarian, vegan, risk, reason in _RULES:
        if any(keyword in name for keyword in keywords):
            return IngredientJudgment(
                ingredient=name,
                vegetarian=vegetarian,
                vegan=vegan,
                risk=risk,
                reason=reason,
            )
    return fallback_judgment(name)


class RuleJudgeBackend(JudgeBackend):
    """Keyword-rule judge that needs no network access."""

    async def judge(
        self, names: list[str], locale: str = "zh"
    ) -> list[IngredientJudgment]:
        return [
            judge_by_rules(name) if is_judgeable(name) else fallback_judgment(name)
            for name in names
        ]
