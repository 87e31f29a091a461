"""Batch judge prompt and response parsing shared by the LLM backends."""

from __future__ import annotations

import json
import logging

from . import IngredientJudgment, fallback_judgment

logger = logging.getLogger(__name__)

_PROMPT_ZH = """\
你是一位專業的食品成分分析師，專門判斷食品成分是否適合素食者食用。

請判斷以下 {count} 個成分：
{items}

判斷標準：
1. vegetarian（蛋奶素）：是否適合蛋奶素食者
   - false：含肉類、海鮮、動物油脂、明膠、葷食調味料（如沙茶、肉鬆、魚露）
   - true：植物來源、礦物質、蛋、奶製品
2. vegan（純素）：是否適合純素食者
   - false：含任何動物來源（包括蛋、奶、蜂蜜）
   - true：完全植物來源或礦物質
3. risk（風險等級）：
   - "low"：明確的植物來源（如玉米、小麥、大豆油）或礦物質（如鹽）
   - "medium"：可能有動物來源或需確認製程（如乳化劑、香料、調味料）
   - "high"：通常含動物成分（如奶精、起司粉）
4. reason：簡短說明判斷理由（15字以內）

請以 JSON 陣列格式回覆（不要包含任何 Markdown 標記），每個物件對應一個成分，順序與輸入相同：
[
  {{"ingredient": "成分名稱", "vegetarian": true, "vegan": true, "risk": "low", "reason": "判斷理由"}}
]
"""

_PROMPT_EN = """\
You are a food ingredient analyst. Decide whether each of these {count} \
ingredients is suitable for vegetarians:
{items}

For each ingredient return:
- vegetarian: suitable for lacto-ovo vegetarians (true/false)
- vegan: free of any animal-derived material (true/false)
- risk: "low", "medium" or "high" chance of hidden animal origin
- reason: a brief explanation (under 50 characters)

Respond with a JSON array only, no Markdown, one object per ingredient in \
input order:
[
  {{"ingredient": "name", "vegetarian": true, "vegan": true, "risk": "low", "reason": "..."}}
]
"""


def build_batch_prompt(names: list[str], locale: str = "zh") -> str:
    items = "\n".join(f"{i}. {name}" for i, name in enumerate(names, start=1))
    template = _PROMPT_ZH if locale == "zh" else _PROMPT_EN
    return template.format(count=len(names), items=items)


def is_judgeable(name) -> bool:
    return isinstance(name, str) and bool(name.strip())


def with_blank_fallbacks(
    names: list[str], judged: list[IngredientJudgment]
) -> list[IngredientJudgment]:
    """Re-insert fallback judgments for blank names, keeping input order.

    ``judged`` holds one judgment per judgeable name, in order.
    """
    remaining = iter(judged)
    return [
        next(remaining) if is_judgeable(name) else fallback_judgment(name)
        for name in names
    ]


def strip_fences(text: str) -> str:
    """Remove surrounding Markdown code fences, if any."""
    cleaned = text.strip()
    if cleaned.startswith("```"):
        lines = cleaned.split("\n")
        lines = [l for l in lines[1:] if not l.strip().startswith("```")]
        cleaned = "\n".join(lines)
    return cleaned.strip()


def _is_valid(item) -> bool:
    return (
        isinstance(item, dict)
        and isinstance(item.get("vegetarian"), bool)
        and isinstance(item.get("vegan"), bool)
        and bool(item.get("risk"))
        and bool(item.get("reason"))
    )


def parse_judgments(text: str, names: list[str]) -> list[IngredientJudgment]:
    """Parse a JSON array response into one judgment per requested name.

    Items are matched by ingredient name first, then by position. Missing
    or malformed items become fallback judgments.
    """
    try:
        parsed = json.loads(strip_fences(text))
    except json.JSONDecodeError:
        logger.warning("判斷結果不是有效的 JSON: %.200s", text)
        return [fallback_judgment(name) for name in names]

    if not isinstance(parsed, list):
        logger.warning("判斷結果不是陣列: %.200s", text)
        return [fallback_judgment(name) for name in names]

    by_name = {
        item["ingredient"].strip(): item
        for item in parsed
        if isinstance(item, dict) and isinstance(item.get("ingredient"), str)
    }

    results: list[IngredientJudgment] = []
    for index, name in enumerate(names):
        item = by_name.get(name.strip())
        if item is None and index < len(parsed):
            item = parsed[index]
        if not _is_valid(item):
            logger.warning("判斷結果格式錯誤: %s -> %r", name, item)
            results.append(fallback_judgment(name))
            continue
        results.append(
            IngredientJudgment(
                ingredient=name,
                vegetarian=item["vegetarian"],
                vegan=item["vegan"],
                risk=item["risk"],
                reason=item["reason"],
            )
        )
    return results
