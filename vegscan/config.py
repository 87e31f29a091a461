"""TOML configuration loader for vegscan."""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field
from pathlib import Path

if sys.version_info >= (3, 11):
    import tomllib
else:
    try:
        import tomli as tomllib
    except ImportError:
        tomllib = None  # type: ignore[assignment]

DEFAULT_CLAUDE_MODEL = "claude-sonnet-4-5-20250929"
DEFAULT_GEMINI_MODEL = "gemini-2.0-flash"
DEFAULT_FILTER_MODEL = "gemini-2.5-flash-lite"
DEFAULT_CACHE_PATH = "~/.config/vegscan/judge_cache.db"


@dataclass
class DataConfig:
    dir: str = ""  # empty = bundled tables


@dataclass
class ClaudeConfig:
    api_key: str = ""
    model: str = DEFAULT_CLAUDE_MODEL


@dataclass
class GeminiConfig:
    api_key: str = ""
    model: str = DEFAULT_GEMINI_MODEL


@dataclass
class JudgeConfig:
    enabled: bool = False
    backend: str = "gemini"
    timeout: float = 3.0  # seconds
    locale: str = "zh"
    claude: ClaudeConfig = field(default_factory=ClaudeConfig)
    gemini: GeminiConfig = field(default_factory=GeminiConfig)


@dataclass
class CacheConfig:
    enabled: bool = True
    db_path: str = DEFAULT_CACHE_PATH


@dataclass
class OCRConfig:
    backend: str = "claude"
    claude: ClaudeConfig = field(default_factory=ClaudeConfig)
    gemini: GeminiConfig = field(default_factory=GeminiConfig)


@dataclass
class FilterConfig:
    enabled: bool = True
    timeout: float = 2.5
    api_key: str = ""
    model: str = DEFAULT_FILTER_MODEL


@dataclass
class VegscanConfig:
    data: DataConfig = field(default_factory=DataConfig)
    judge: JudgeConfig = field(default_factory=JudgeConfig)
    cache: CacheConfig = field(default_factory=CacheConfig)
    ocr: OCRConfig = field(default_factory=OCRConfig)
    filter: FilterConfig = field(default_factory=FilterConfig)


def _claude(section: dict, api_key: str) -> ClaudeConfig:
    return ClaudeConfig(
        api_key=section.get("api_key", "") or api_key,
        model=section.get("model", DEFAULT_CLAUDE_MODEL),
    )


def _gemini(section: dict, api_key: str) -> GeminiConfig:
    return GeminiConfig(
        api_key=section.get("api_key", "") or api_key,
        model=section.get("model", DEFAULT_GEMINI_MODEL),
    )


def load_config(path: str | Path | None = None) -> VegscanConfig:
    """Load configuration from a TOML file.

    Falls back to defaults if no path is given or the file doesn't exist.
    API keys can be overridden via environment variables.
    """
    raw: dict = {}

    if path is not None:
        p = Path(path)
        if p.exists():
            if tomllib is None:
                raise ImportError(
                    "tomli is required on Python < 3.11: pip install tomli"
                )
            with open(p, "rb") as f:
                raw = tomllib.load(f)

    dat = raw.get("data", {})
    jdg = raw.get("judge", {})
    cch = raw.get("cache", {})
    ocr = raw.get("ocr", {})
    flt = raw.get("filter", {})

    # Resolve API keys: config file → environment variable
    anthropic_key = os.environ.get("ANTHROPIC_API_KEY", "")
    gemini_key = os.environ.get("GEMINI_API_KEY", "")

    return VegscanConfig(
        data=DataConfig(dir=dat.get("dir", "")),
        judge=JudgeConfig(
            enabled=jdg.get("enabled", False),
            backend=jdg.get("backend", "gemini"),
            timeout=float(jdg.get("timeout", 3.0)),
            locale=jdg.get("locale", "zh"),
            claude=_claude(jdg.get("claude", {}), anthropic_key),
            gemini=_gemini(jdg.get("gemini", {}), gemini_key),
        ),
        cache=CacheConfig(
            enabled=cch.get("enabled", True),
            db_path=cch.get("db_path", DEFAULT_CACHE_PATH),
        ),
        ocr=OCRConfig(
            backend=ocr.get("backend", "claude"),
            claude=_claude(ocr.get("claude", {}), anthropic_key),
            gemini=_gemini(ocr.get("gemini", {}), gemini_key),
        ),
        filter=FilterConfig(
            enabled=flt.get("enabled", True),
            timeout=float(flt.get("timeout", 2.5)),
            api_key=flt.get("api_key", "") or gemini_key,
            model=flt.get("model", DEFAULT_FILTER_MODEL),
        ),
    )
