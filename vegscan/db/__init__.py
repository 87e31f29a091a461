"""SQLite storage for cached judge results."""

from .judge_cache import JudgeCache, JudgeCacheDB, MemoryJudgeCache, cache_key
from .schema import ensure_schema

__all__ = [
    "JudgeCache",
    "JudgeCacheDB",
    "MemoryJudgeCache",
    "cache_key",
    "ensure_schema",
]
