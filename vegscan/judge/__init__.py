"""Judge backend base class, data types, and factory."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..config import VegscanConfig

FALLBACK_REASON = "無法判斷，建議人工確認"


@dataclass
class IngredientJudgment:
    ingredient: str
    vegetarian: bool | None  # None = could not judge
    vegan: bool | None
    risk: str  # low | medium | high | unknown
    reason: str
    fallback: bool = False

    def to_dict(self) -> dict:
        return {
            "ingredient": self.ingredient,
            "vegetarian": self.vegetarian,
            "vegan": self.vegan,
            "risk": self.risk,
            "reason": self.reason,
            "_fallback": self.fallback,
        }

    @classmethod
    def from_dict(cls, data: dict) -> IngredientJudgment:
        return cls(
            ingredient=data.get("ingredient", ""),
            vegetarian=data.get("vegetarian"),
            vegan=data.get("vegan"),
            risk=data.get("risk", "unknown"),
            reason=data.get("reason", ""),
            fallback=bool(data.get("_fallback", False)),
        )


def fallback_judgment(name: str) -> IngredientJudgment:
    return IngredientJudgment(
        ingredient=name,
        vegetarian=None,
        vegan=None,
        risk="unknown",
        reason=FALLBACK_REASON,
        fallback=True,
    )


class JudgeBackend(ABC):
    """Abstract base for judging ingredients missing from the reference data."""

    @abstractmethod
    async def judge(
        self, names: list[str], locale: str = "zh"
    ) -> list[IngredientJudgment]:
        """Judge a batch of ingredient names.

        Returns exactly one judgment per input name, in input order.
        Names that could not be judged get a fallback judgment.
        """
        ...


def create_judge(config: VegscanConfig) -> JudgeBackend:
    """Create a judge backend based on configuration."""
    backend_name = config.judge.backend

    match backend_name:
        case "gemini":
            from .gemini import GeminiJudgeBackend

            return GeminiJudgeBackend(
                api_key=config.judge.gemini.api_key,
                model=config.judge.gemini.model,
            )
        case "claude":
            from .claude import ClaudeJudgeBackend

            return ClaudeJudgeBackend(
                api_key=config.judge.claude.api_key,
                model=config.judge.claude.model,
            )
        case "rule":
            from .rule import RuleJudgeBackend

            return RuleJudgeBackend()
        case _:
            raise ValueError(
                f"未知的判斷後端: {backend_name!r}  "
                f"(gemini / claude / rule 擇一)"
            )
