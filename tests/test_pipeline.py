"""Tests for the end-to-end analysis pipeline."""

import asyncio

import pytest

from vegscan.db import MemoryJudgeCache
from vegscan.judge import IngredientJudgment, JudgeBackend, fallback_judgment
from vegscan.pipeline import analyze, analyze_text, judge_unknowns
from vegscan.rules import DANGER, SAFE, WARNING


class _FakeJudge(JudgeBackend):
    def __init__(self, judgments=None):
        self.calls = []
        self._judgments = judgments or {}

    async def judge(self, names, locale="zh"):
        self.calls.append(list(names))
        return [self._judgments.get(name, fallback_judgment(name)) for name in names]


class _SlowJudge(JudgeBackend):
    async def judge(self, names, locale="zh"):
        await asyncio.sleep(1)
        return [IngredientJudgment(n, True, True, "low", "x") for n in names]


class _BrokenJudge(JudgeBackend):
    async def judge(self, names, locale="zh"):
        raise RuntimeError("service unavailable")


class _BrokenCache(MemoryJudgeCache):
    def get(self, name):
        raise OSError("disk full")

    def set(self, name, judgment):
        raise OSError("disk full")


OKARA = IngredientJudgment("豆渣", True, True, "low", "黃豆副產品")
SHARK = IngredientJudgment("鯊魚膽", False, False, "high", "魚類")


class TestAnalyzeText:
    def test_safe(self):
        result = analyze_text("水、糖、鹽")
        assert result.verdict == SAFE
        assert result.summary == "✅ 全部 3 項成分皆為素食可食用"

    def test_multiline_label(self):
        result = analyze_text("水\n糖\n豬油")
        assert result.token_data.tokens == ["水", "糖", "豬油"]
        assert result.verdict == DANGER

    def test_fullwidth_code(self):
        result = analyze_text("乳化劑（Ｅ４７１）、卵磷脂")
        assert result.token_data.e_codes == ["E471"]
        assert result.verdict == WARNING

    def test_heading_is_not_an_ingredient(self):
        result = analyze_text("成分：水、糖、鹽")
        assert result.token_data.tokens == ["水", "糖", "鹽"]
        assert result.verdict == SAFE

    def test_empty(self):
        result = analyze_text("")
        assert result.verdict == SAFE
        assert result.explanation.summary.total == 0

    def test_to_dict(self):
        data = analyze_text("水、豬油").to_dict()
        assert data["verdict"] == DANGER
        assert data["tokens"] == ["水", "豬油"]
        assert data["explanation"]["summary"]["danger"] == 1


class TestAnalyze:
    @pytest.mark.asyncio
    async def test_without_judge_matches_sync(self):
        result = await analyze("水、神秘成分")
        assert result.verdict == WARNING
        assert result.ai_judged == []

    @pytest.mark.asyncio
    async def test_judge_resolves_unknowns(self):
        judge = _FakeJudge({"豆渣": OKARA})
        result = await analyze("水、糖、豆渣", judge=judge)
        assert judge.calls == [["豆渣"]]
        assert result.verdict == SAFE
        assert result.ai_judged == ["豆渣"]
        assert result.bucket.safe[-1].match_type == "ai"

    @pytest.mark.asyncio
    async def test_judge_can_flag_danger(self):
        result = await analyze("水、鯊魚膽", judge=_FakeJudge({"鯊魚膽": SHARK}))
        assert result.verdict == DANGER

    @pytest.mark.asyncio
    async def test_judge_not_called_without_unknowns(self):
        judge = _FakeJudge()
        await analyze("水、糖", judge=judge)
        assert judge.calls == []

    @pytest.mark.asyncio
    async def test_fallback_stays_unknown(self):
        result = await analyze("水、豆渣", judge=_FakeJudge())
        assert [m.input for m in result.bucket.unknown] == ["豆渣"]
        assert result.verdict == WARNING

    @pytest.mark.asyncio
    async def test_timeout_keeps_core_result(self):
        result = await analyze("水、豆渣", judge=_SlowJudge(), timeout=0.05)
        assert [m.input for m in result.bucket.unknown] == ["豆渣"]
        assert result.verdict == WARNING

    @pytest.mark.asyncio
    async def test_judge_error_keeps_core_result(self):
        result = await analyze("水、豆渣", judge=_BrokenJudge())
        assert result.verdict == WARNING
        assert result.ai_judged == []


class TestJudgeCache:
    @pytest.mark.asyncio
    async def test_cache_hit_skips_judge(self):
        cache = MemoryJudgeCache()
        cache.set("豆渣", OKARA)
        judge = _FakeJudge()
        result = await analyze("豆渣", judge=judge, cache=cache)
        assert judge.calls == []
        assert result.verdict == SAFE

    @pytest.mark.asyncio
    async def test_fresh_judgments_are_cached(self):
        cache = MemoryJudgeCache()
        await analyze("豆渣、某某某", judge=_FakeJudge({"豆渣": OKARA}), cache=cache)
        assert cache.get("豆渣") == OKARA
        assert cache.get("某某某") is None

    @pytest.mark.asyncio
    async def test_broken_cache_is_ignored(self):
        judge = _FakeJudge({"豆渣": OKARA})
        result = await analyze("豆渣", judge=judge, cache=_BrokenCache())
        assert result.verdict == SAFE

    @pytest.mark.asyncio
    async def test_judge_unknowns_dedupes(self):
        judge = _FakeJudge({"豆渣": OKARA})
        result = await judge_unknowns(["豆渣", "豆渣"], judge)
        assert judge.calls == [["豆渣"]]
        assert result == [OKARA]
