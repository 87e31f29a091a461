"""Claude API judge backend."""

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


class ClaudeJudgeBackend(JudgeBackend):
    """Judge unknown ingredients with Claude."""

    def __init__(
        self, api_key: str = "", model: str = "claude-sonnet-4-5-20250929"
    ) -> None:
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
                "Anthropic API 金鑰未設定。"
                "請確認設定檔或 ANTHROPIC_API_KEY 環境變數。"
            )

        try:
            import anthropic
        except ImportError:
            raise ImportError(
                "anthropic SDK is required: pip install anthropic"
            ) from None

        client = anthropic.AsyncAnthropic(api_key=self._api_key)
        logger.info("Claude 判斷 %d 項成分", len(judgeable))
        response = await client.messages.create(
            model=self._model,
            max_tokens=2048,
            temperature=0.1,
            messages=[
                {"role": "user", "content": build_batch_prompt(judgeable, locale)}
            ],
        )

        text = response.content[0].text
        logger.debug("Claude 原始回應: %s", text)
        return with_blank_fallbacks(names, parse_judgments(text, judgeable))
