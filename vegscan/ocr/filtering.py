"""Separate ingredient text from the rest of a scanned label.

An optional Gemini pass extracts the ingredient list; keyword rules take
over whenever it is unavailable, slow, or returns something unusable.
"""

from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass, field

from ..judge.prompt import strip_fences

logger = logging.getLogger(__name__)

NON_INGREDIENT_PREFIXES = (
    "品名", "產品", "商品", "名稱", "成分", "原料", "配料",
    "淨重", "重量", "容量", "內容量",
    "保存期限", "有效日期", "製造日期",
    "製造商", "公司", "廠商", "出品",
    "客服", "電話", "地址", "條碼",
)

# Lines mentioning any of these are dropped by the rule-based filter
NON_INGREDIENT_LINE_KEYWORDS = (
    "公司", "股份", "電話", "客服", "地址", "製造", "出品", "淨重", "保存期限",
)

_FILTER_PROMPT = """\
任務：你會收到一段食品包裝 OCR 辨識結果。請分析並提取「純成分名稱」。

規則：
1. extracted 陣列：只放入「純成分名稱」，例如：水、糖、小麥粉、乳化劑(E471)
2. 不要包含任何前綴文字，例如「品名：」、「成分：」、「原料：」等
3. nonIngredientsExamples 陣列：放入所有非成分資訊，包括品名、淨重、保存期限、
   製造商、地址、客服電話、條碼、營養標示相關文字

請輸出 JSON 結構如下：
{{
  "ingredientsText": "...",
  "extracted": ["..."],
  "nonIngredientsExamples": ["..."]
}}

不要加解釋，不要多餘文字。
輸入內容：
---
{text}
---
"""


@dataclass
class FilterResult:
    ingredients_text: str = ""
    extracted: list[str] = field(default_factory=list)
    non_ingredients: list[str] = field(default_factory=list)
    fallback: bool = False


def has_non_ingredient_prefix(text: str) -> bool:
    if not text or not isinstance(text, str):
        return False
    return any(
        f"{prefix}：" in text or f"{prefix}:" in text or text.startswith(prefix)
        for prefix in NON_INGREDIENT_PREFIXES
    )


def filter_extracted_ingredients(
    extracted: list[str],
) -> tuple[list[str], list[str]]:
    """Split extracted items into (ingredients, non_ingredients)."""
    if not isinstance(extracted, list):
        return [], []

    ingredients: list[str] = []
    non_ingredients: list[str] = []
    for item in extracted:
        if not isinstance(item, str) or not item.strip():
            continue
        if has_non_ingredient_prefix(item):
            non_ingredients.append(item)
        else:
            ingredients.append(item)
    return ingredients, non_ingredients


def rule_based_filter(text: str) -> FilterResult:
    if not text or not text.strip():
        return FilterResult(fallback=True)

    ingredient_lines: list[str] = []
    non_ingredients: list[str] = []
    for line in text.splitlines():
        line = line.strip()
        if not line:
            continue
        if any(keyword in line for keyword in NON_INGREDIENT_LINE_KEYWORDS):
            non_ingredients.append(line)
        else:
            ingredient_lines.append(line)

    return FilterResult(
        ingredients_text="\n".join(ingredient_lines),
        extracted=ingredient_lines,
        non_ingredients=non_ingredients,
        fallback=True,
    )


class GeminiIngredientFilter:
    """Ask a small Gemini model to pull the ingredient list out of label text."""

    def __init__(self, api_key: str = "", model: str = "gemini-2.5-flash-lite") -> None:
        self._api_key = api_key
        self._model = model

    async def filter(self, text: str) -> FilterResult:
        if not text or not text.strip():
            return FilterResult(fallback=True)
        if not self._api_key:
            raise ValueError(
                "Gemini API 金鑰未設定。"
                "請確認設定檔或 GEMINI_API_KEY 環境變數。"
            )

        try:
            import google.generativeai as genai
        except ImportError:
            raise ImportError(
                "google-generativeai SDK is required: pip install google-generativeai"
            ) from None

        genai.configure(api_key=self._api_key)
        model = genai.GenerativeModel(self._model)
        response = await model.generate_content_async(
            _FILTER_PROMPT.format(text=text)
        )
        logger.debug("Gemini 過濾回應: %s", response.text)

        try:
            parsed = json.loads(strip_fences(response.text))
        except json.JSONDecodeError:
            logger.warning("過濾結果不是有效的 JSON: %.200s", response.text)
            return FilterResult(fallback=True)
        if not isinstance(parsed, dict):
            logger.warning("過濾結果不是物件: %.200s", response.text)
            return FilterResult(fallback=True)

        extracted = parsed.get("extracted")
        examples = parsed.get("nonIngredientsExamples")
        ingredients, prefixed = filter_extracted_ingredients(
            extracted if isinstance(extracted, list) else []
        )
        non_ingredients = [e for e in examples if isinstance(e, str)] if isinstance(examples, list) else []
        return FilterResult(
            ingredients_text=parsed.get("ingredientsText") or "",
            extracted=ingredients,
            non_ingredients=non_ingredients + prefixed,
            fallback=bool(parsed.get("_fallback", False)),
        )


async def filter_ocr_text(
    text: str,
    ai_filter: GeminiIngredientFilter | None = None,
    timeout: float = 2.5,
) -> FilterResult:
    """Filter label text, preferring ``ai_filter`` and falling back to rules."""
    if ai_filter is None or not text or not text.strip():
        return rule_based_filter(text)

    try:
        result = await asyncio.wait_for(ai_filter.filter(text), timeout=timeout)
    except asyncio.TimeoutError:
        logger.warning("AI 過濾逾時 (%.1f 秒)，改用規則過濾", timeout)
        return rule_based_filter(text)
    except Exception as e:
        logger.warning("AI 過濾失敗，改用規則過濾: %s", e)
        return rule_based_filter(text)

    if result.fallback:
        return rule_based_filter(text)
    if not result.ingredients_text and result.extracted:
        result.ingredients_text = "、".join(result.extracted)
    return result
