"""Gemini API judge backend."""

from __future__ import annotations

import logging

from . import IngredientJudgment, JudgeBackend, fallback_judgment
from .prompt import (
    build_batch_prompt,
    is_judgeable,
    parse_judgments,
    with_blank_fallbacks,
)

logger = logging.getLogger(__name__)

_GENERATION_CONFIG = {
    "temperature": 0.1,
    "top_p": 0.8,
    "top_k": 20,
}


class GeminiJudgeBackend(JudgeBackend):
    """Judge unknown ingredients with Google Gemini."""

    def __init__(self, api_key: str = "", model: str = "gemini-2.0-flash") -> None:
        self._api_key = api_key
        self._model = model

    async def judge(
        self, names: list[str], locale: str = "zh"
    ) -> list[IngredientJudgment]:
        judgeable = [n for n in names if is_judgeable(n)]
        if not judgeable:
            return [fallback_judgment(n) for n in names]

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
        model = genai.GenerativeModel(
            self._model, generation_config=_GENERATION_CONFIG
        )

        logger.info("Gemini 判斷 %d 項成分", len(judgeable))
        response = await model.generate_content_async(
            build_batch_prompt(judgeable, locale)
        )
        logger.debug("Gemini 原始回應: %s", response.text)
        return with_blank_fallbacks(names, parse_judgments(response.text, judgeable))
