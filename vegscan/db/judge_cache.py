"""Persistent cache of judge results, keyed by normalized ingredient name."""

from __future__ import annotations

import sqlite3
from abc import ABC, abstractmethod
from pathlib import Path

from ..judge import IngredientJudgment
from .schema import ensure_schema


def cache_key(name: str) -> str:
    return name.strip().lower()


def _to_db(value: bool | None) -> int | None:
    return None if value is None else int(value)


def _from_db(value: int | None) -> bool | None:
    return None if value is None else bool(value)


class JudgeCache(ABC):
    """Key-value store for judgments. A miss behaves like a cold start."""

    @abstractmethod
    def get(self, name: str) -> IngredientJudgment | None: ...

    @abstractmethod
    def set(self, name: str, judgment: IngredientJudgment) -> None: ...

    @abstractmethod
    def clear(self) -> None: ...


class MemoryJudgeCache(JudgeCache):
    """Process-local cache, mainly for tests and one-shot runs."""

    def __init__(self) -> None:
        self._entries: dict[str, IngredientJudgment] = {}

    def get(self, name: str) -> IngredientJudgment | None:
        return self._entries.get(cache_key(name))

    def set(self, name: str, judgment: IngredientJudgment) -> None:
        self._entries[cache_key(name)] = judgment

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


class JudgeCacheDB(JudgeCache):
    """Caches judge results in SQLite to avoid repeated API calls."""

    def __init__(
        self, db_path: str | Path = "~/.config/vegscan/judge_cache.db"
    ) -> None:
        self._db_path = db_path
        self._conn: sqlite3.Connection | None = None

    def _get_conn(self) -> sqlite3.Connection:
        if self._conn is None:
            self._conn = ensure_schema(self._db_path)
        return self._conn

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    def get(self, name: str) -> IngredientJudgment | None:
        """Look up a cached judgment.

        Returns:
            The judgment, or None if not cached.
        """
        conn = self._get_conn()
        row = conn.execute(
            "SELECT * FROM judge_cache WHERE ingredient_key = ?",
            (cache_key(name),),
        ).fetchone()
        if row is None:
            return None
        return IngredientJudgment(
            ingredient=row["ingredient"],
            vegetarian=_from_db(row["vegetarian"]),
            vegan=_from_db(row["vegan"]),
            risk=row["risk"],
            reason=row["reason"],
        )

    def set(self, name: str, judgment: IngredientJudgment) -> None:
        """Insert or update a cache entry."""
        conn = self._get_conn()
        conn.execute(
            """INSERT INTO judge_cache
               (ingredient_key, ingredient, vegetarian, vegan, risk, reason)
               VALUES (?, ?, ?, ?, ?, ?)
               ON CONFLICT(ingredient_key) DO UPDATE SET
                 ingredient=excluded.ingredient,
                 vegetarian=excluded.vegetarian,
                 vegan=excluded.vegan,
                 risk=excluded.risk,
                 reason=excluded.reason,
                 cached_at=datetime('now', 'localtime')""",
            (
                cache_key(name),
                judgment.ingredient,
                _to_db(judgment.vegetarian),
                _to_db(judgment.vegan),
                judgment.risk,
                judgment.reason,
            ),
        )
        conn.commit()

    def clear(self) -> int:
        """Delete every cached judgment and return how many were removed."""
        conn = self._get_conn()
        cur = conn.execute("DELETE FROM judge_cache")
        conn.commit()
        return cur.rowcount

    def get_all(self) -> list[dict]:
        """Return all cached entries."""
        conn = self._get_conn()
        rows = conn.execute("SELECT * FROM judge_cache").fetchall()
        return [dict(r) for r in rows]
