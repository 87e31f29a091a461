"""Reference ingredient tables (singleton loader)."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path

RISK_LEVELS = ("low", "medium", "high", "unknown")

_DATA_DIR = Path(__file__).parent / "data"
_FILES = {
    "e_codes": "e_codes.json",
    "ingredients": "ingredients.json",
    "blacklist": "blacklist.json",
    "whitelist": "whitelist.json",
}


@dataclass(frozen=True)
class IngredientRecord:
    """A curated ingredient entry."""

    name: str
    name_en: str | None = None
    aliases: tuple[str, ...] = ()
    vegetarian: bool | None = None  # None = unknown
    vegan: bool | None = None
    risk: str = "unknown"  # low | medium | high | unknown
    category: str = ""
    notes: str = ""
    source: str = "database"  # database | blacklist | whitelist | ai

    def names(self) -> tuple[str, ...]:
        """Name and English name, lower-cased, for exact lookups."""
        keys = [self.name.lower()]
        if self.name_en:
            keys.append(self.name_en.lower())
        return tuple(keys)

    def has_alias(self, text: str) -> bool:
        lowered = text.lower()
        return any(alias.lower() == lowered for alias in self.aliases)


@dataclass(frozen=True)
class AdditiveCodeRecord(IngredientRecord):
    """An additive keyed by its regulatory code (e.g. ``E471``)."""

    code: str = ""


def _parse_bool(value) -> bool | None:
    return value if isinstance(value, bool) else None


def _parse_record(entry: dict, source: str) -> IngredientRecord:
    risk = entry.get("risk")
    kwargs = dict(
        name=entry.get("name", ""),
        name_en=entry.get("nameEn") or entry.get("name_en") or None,
        aliases=tuple(entry.get("aliases") or ()),
        vegetarian=_parse_bool(entry.get("vegetarian")),
        vegan=_parse_bool(entry.get("vegan")),
        risk=risk if risk in RISK_LEVELS else "unknown",
        category=entry.get("category", "") or "",
        notes=entry.get("notes", "") or "",
        source=source,
    )
    if "code" in entry:
        return AdditiveCodeRecord(code=entry["code"], **kwargs)
    return IngredientRecord(**kwargs)


def _load_table(path: Path, source: str) -> list[IngredientRecord]:
    with open(path, encoding="utf-8") as f:
        raw = json.load(f)
    return [_parse_record(entry, source) for entry in raw]


@dataclass
class ReferenceData:
    """The four lookup tables the classifier consults.

    Usage:
        ref = ReferenceData.instance()
        ref.e_codes[0].code
    """

    e_codes: list[AdditiveCodeRecord] = field(default_factory=list)
    ingredients: list[IngredientRecord] = field(default_factory=list)
    blacklist: list[IngredientRecord] = field(default_factory=list)
    whitelist: list[IngredientRecord] = field(default_factory=list)

    _instance = None
    _data_dir = None

    @property
    def search_space(self) -> list[IngredientRecord]:
        """General ingredients followed by additive codes."""
        return [*self.ingredients, *self.e_codes]

    @classmethod
    def load(cls, data_dir: str | Path | None = None) -> ReferenceData:
        """Read the four JSON tables from ``data_dir`` (bundled by default)."""
        base = Path(data_dir).expanduser() if data_dir else _DATA_DIR
        return cls(
            e_codes=_load_table(base / _FILES["e_codes"], "database"),
            ingredients=_load_table(base / _FILES["ingredients"], "database"),
            blacklist=_load_table(base / _FILES["blacklist"], "blacklist"),
            whitelist=_load_table(base / _FILES["whitelist"], "whitelist"),
        )

    @classmethod
    def configure(cls, data_dir: str | Path | None) -> None:
        """Point the singleton at another table directory."""
        cls._data_dir = Path(data_dir) if data_dir else None
        cls._instance = None

    @classmethod
    def instance(cls) -> ReferenceData:
        if cls._instance is None:
            cls._instance = cls.load(cls._data_dir)
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Reset the singleton (for testing)."""
        cls._instance = None
        cls._data_dir = None


def from_dicts(
    *,
    e_codes: list[dict] = (),
    ingredients: list[dict] = (),
    blacklist: list[dict] = (),
    whitelist: list[dict] = (),
) -> ReferenceData:
    """Build reference tables from plain dicts in the JSON table shape."""
    return ReferenceData(
        e_codes=[_parse_record(e, "database") for e in e_codes],
        ingredients=[_parse_record(e, "database") for e in ingredients],
        blacklist=[_parse_record(e, "blacklist") for e in blacklist],
        whitelist=[_parse_record(e, "whitelist") for e in whitelist],
    )
