"""Tests for judge backends (mocked API calls)."""

import json
import sys
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from vegscan.config import load_config
from vegscan.judge import IngredientJudgment, create_judge, fallback_judgment
from vegscan.judge.claude import ClaudeJudgeBackend
from vegscan.judge.gemini import GeminiJudgeBackend
from vegscan.judge.prompt import (
    build_batch_prompt,
    parse_judgments,
    strip_fences,
    with_blank_fallbacks,
)
from vegscan.judge.rule import RuleJudgeBackend, judge_by_rules


def _gemini_modules(response_text: str):
    model = MagicMock()
    model.generate_content_async = AsyncMock(return_value=MagicMock(text=response_text))
    mock_genai = MagicMock()
    mock_genai.GenerativeModel.return_value = model
    mock_google = MagicMock()
    mock_google.generativeai = mock_genai
    return {"google": mock_google, "google.generativeai": mock_genai}, mock_genai


class TestIngredientJudgment:
    def test_dict_roundtrip(self):
        judgment = IngredientJudgment("豆渣", True, True, "low", "黃豆副產品")
        data = judgment.to_dict()
        assert data["_fallback"] is False
        assert IngredientJudgment.from_dict(data) == judgment

    def test_fallback(self):
        judgment = fallback_judgment("某物")
        assert judgment.fallback
        assert judgment.vegetarian is None
        assert judgment.risk == "unknown"


class TestCreateJudge:
    def test_default_is_gemini(self):
        assert isinstance(create_judge(load_config()), GeminiJudgeBackend)

    def test_claude(self):
        config = load_config()
        config.judge.backend = "claude"
        assert isinstance(create_judge(config), ClaudeJudgeBackend)

    def test_rule(self):
        config = load_config()
        config.judge.backend = "rule"
        assert isinstance(create_judge(config), RuleJudgeBackend)

    def test_unknown_backend(self):
        config = load_config()
        config.judge.backend = "unknown"
        with pytest.raises(ValueError, match="未知的判斷後端"):
            create_judge(config)


class TestPrompt:
    def test_lists_every_name(self):
        prompt = build_batch_prompt(["豆渣", "鯊魚膽"])
        assert "1. 豆渣" in prompt
        assert "2. 鯊魚膽" in prompt
        assert "2 個成分" in prompt

    def test_english(self):
        prompt = build_batch_prompt(["okara"], locale="en")
        assert "1. okara" in prompt
        assert "vegetarian" in prompt

    def test_strip_fences(self):
        assert strip_fences('```json\n[1]\n```') == "[1]"
        assert strip_fences("[1]") == "[1]"

    def test_with_blank_fallbacks(self):
        judged = [IngredientJudgment("甲", True, True, "low", "x")]
        result = with_blank_fallbacks(["", "甲"], judged)
        assert result[0].fallback
        assert result[1] is judged[0]


class TestParseJudgments:
    def test_by_name(self):
        text = json.dumps([
            {"ingredient": "鯊魚膽", "vegetarian": False, "vegan": False, "risk": "high", "reason": "魚類"},
            {"ingredient": "豆渣", "vegetarian": True, "vegan": True, "risk": "low", "reason": "黃豆"},
        ], ensure_ascii=False)
        result = parse_judgments(text, ["豆渣", "鯊魚膽"])
        assert [j.ingredient for j in result] == ["豆渣", "鯊魚膽"]
        assert result[0].vegetarian is True
        assert result[1].vegetarian is False

    def test_by_position(self):
        text = json.dumps([
            {"ingredient": "okara", "vegetarian": True, "vegan": True, "risk": "low", "reason": "soy"},
        ])
        result = parse_judgments(text, ["豆渣"])
        assert result[0].ingredient == "豆渣"
        assert not result[0].fallback

    def test_invalid_json(self):
        result = parse_judgments("not json", ["甲", "乙"])
        assert all(j.fallback for j in result)
        assert len(result) == 2

    def test_not_a_list(self):
        result = parse_judgments('{"ingredient": "甲"}', ["甲"])
        assert result[0].fallback

    def test_malformed_item(self):
        text = json.dumps([{"ingredient": "甲", "vegetarian": "yes", "vegan": True, "risk": "low", "reason": "x"}])
        assert parse_judgments(text, ["甲"])[0].fallback

    def test_missing_item(self):
        text = json.dumps([{"ingredient": "甲", "vegetarian": True, "vegan": True, "risk": "low", "reason": "x"}])
        result = parse_judgments(text, ["甲", "乙"])
        assert not result[0].fallback
        assert result[1].fallback


class TestRuleJudge:
    @pytest.mark.parametrize(
        "name,vegetarian,vegan",
        [
            ("豆奶粉", True, True),
            ("肉桂粉", True, True),
            ("蛋黃粉", True, False),
            ("鮪魚片", False, False),
            ("天然香精", True, True),
            ("奶粉", True, False),
            ("蜂王乳", True, False),
            ("高麗菜", True, True),
        ],
    )
    def test_rules(self, name, vegetarian, vegan):
        judgment = judge_by_rules(name)
        assert judgment.vegetarian is vegetarian
        assert judgment.vegan is vegan
        assert not judgment.fallback

    def test_no_rule_matches(self):
        assert judge_by_rules("某某某").fallback

    @pytest.mark.asyncio
    async def test_backend(self):
        result = await RuleJudgeBackend().judge(["高麗菜", "", "某某某"])
        assert [j.ingredient for j in result] == ["高麗菜", "", "某某某"]
        assert not result[0].fallback
        assert result[1].fallback
        assert result[2].fallback


class TestClaudeJudgeBackend:
    @pytest.mark.asyncio
    async def test_requires_api_key(self):
        backend = ClaudeJudgeBackend(api_key="")
        with pytest.raises(ValueError, match="API 金鑰"):
            await backend.judge(["豆渣"])

    @pytest.mark.asyncio
    async def test_empty_names(self):
        assert await ClaudeJudgeBackend(api_key="").judge([]) == []

    @pytest.mark.asyncio
    async def test_blank_names_only(self):
        result = await ClaudeJudgeBackend(api_key="").judge(["", "  "])
        assert len(result) == 2
        assert all(j.fallback for j in result)

    @pytest.mark.asyncio
    async def test_blank_name_keeps_position(self):
        mock_response = MagicMock()
        mock_response.content = [
            MagicMock(
                text=json.dumps([
                    {"ingredient": "豆渣", "vegetarian": True, "vegan": True, "risk": "low", "reason": "黃豆"},
                    {"ingredient": "鯊魚膽", "vegetarian": False, "vegan": False, "risk": "high", "reason": "魚類"},
                ])
            )
        ]
        mock_client = AsyncMock()
        mock_client.messages.create = AsyncMock(return_value=mock_response)
        mock_anthropic = MagicMock()
        mock_anthropic.AsyncAnthropic.return_value = mock_client

        with patch.dict(sys.modules, {"anthropic": mock_anthropic}):
            result = await ClaudeJudgeBackend(api_key="test-key").judge(
                ["豆渣", " ", "鯊魚膽"]
            )

        assert [j.ingredient for j in result] == ["豆渣", " ", "鯊魚膽"]
        assert result[0].vegan is True
        assert result[1].fallback
        assert result[2].vegetarian is False
        prompt = mock_client.messages.create.call_args.kwargs["messages"][0]["content"]
        assert "2 個成分" in prompt

    @pytest.mark.asyncio
    async def test_judge_mocked(self):
        mock_response = MagicMock()
        mock_response.content = [
            MagicMock(
                text=json.dumps([
                    {"ingredient": "豆渣", "vegetarian": True, "vegan": True, "risk": "low", "reason": "黃豆"},
                ])
            )
        ]

        mock_client = AsyncMock()
        mock_client.messages.create = AsyncMock(return_value=mock_response)

        mock_anthropic = MagicMock()
        mock_anthropic.AsyncAnthropic.return_value = mock_client

        with patch.dict(sys.modules, {"anthropic": mock_anthropic}):
            backend = ClaudeJudgeBackend(api_key="test-key")
            result = await backend.judge(["豆渣"])

        assert len(result) == 1
        assert result[0].vegan is True
        mock_anthropic.AsyncAnthropic.assert_called_once_with(api_key="test-key")


class TestGeminiJudgeBackend:
    @pytest.mark.asyncio
    async def test_requires_api_key(self):
        backend = GeminiJudgeBackend(api_key="")
        with pytest.raises(ValueError, match="API 金鑰"):
            await backend.judge(["豆渣"])

    @pytest.mark.asyncio
    async def test_judge_mocked(self):
        modules, mock_genai = _gemini_modules(
            '```json\n[{"ingredient": "鯊魚膽", "vegetarian": false, "vegan": false, '
            '"risk": "high", "reason": "魚類"}]\n```'
        )

        with patch.dict(sys.modules, modules):
            backend = GeminiJudgeBackend(api_key="test-key", model="test-model")
            result = await backend.judge(["鯊魚膽"])

        assert result[0].vegetarian is False
        mock_genai.configure.assert_called_once_with(api_key="test-key")
        assert mock_genai.GenerativeModel.call_args.args[0] == "test-model"
