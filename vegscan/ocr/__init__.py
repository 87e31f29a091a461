"""OCR backend base class, data types, and factory."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING

from .cleanup import clean_ocr_text

if TYPE_CHECKING:
    from ..config import VegscanConfig


@dataclass
class OCRResult:
    text: str  # cleaned text
    raw_text: str = ""
    confidence: float = 0.0  # 0.0〜1.0
    success: bool = True
    error: str = ""


class OCRBackend(ABC):
    """Abstract base for reading ingredient text from label photos."""

    @abstractmethod
    async def extract_text(self, image_path: str) -> OCRResult:
        """Extract the printed text of one label image."""
        ...


def create_ocr_backend(config: VegscanConfig) -> OCRBackend:
    """Create an OCR backend based on configuration."""
    backend_name = config.ocr.backend

    match backend_name:
        case "claude":
            from .claude import ClaudeOCRBackend

            return ClaudeOCRBackend(
                api_key=config.ocr.claude.api_key,
                model=config.ocr.claude.model,
            )
        case "gemini":
            from .gemini import GeminiOCRBackend

            return GeminiOCRBackend(
                api_key=config.ocr.gemini.api_key,
                model=config.ocr.gemini.model,
            )
        case _:
            raise ValueError(
                f"未知的 OCR 後端: {backend_name!r}  "
                f"(claude / gemini 擇一)"
            )


__all__ = [
    "OCRBackend",
    "OCRResult",
    "clean_ocr_text",
    "create_ocr_backend",
]
