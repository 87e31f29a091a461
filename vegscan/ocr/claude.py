"""Claude API vision backend for label OCR."""

from __future__ import annotations

import base64
import logging
import mimetypes
from pathlib import Path

from . import OCRBackend, OCRResult
from .cleanup import clean_ocr_text
from .prompt import OCR_PROMPT

logger = logging.getLogger(__name__)


class ClaudeOCRBackend(OCRBackend):
    """Read label text using Claude's vision capability."""

    def __init__(self, api_key: str = "", model: str = "claude-sonnet-4-5-20250929") -> None:
        self._api_key = api_key
        self._model = model

    async def extract_text(self, image_path: str) -> OCRResult:
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

        data = Path(image_path).read_bytes()
        media_type = mimetypes.guess_type(image_path)[0] or "image/jpeg"
        content = [
            {
                "type": "image",
                "source": {
                    "type": "base64",
                    "media_type": media_type,
                    "data": base64.standard_b64encode(data).decode(),
                },
            },
            {"type": "text", "text": OCR_PROMPT},
        ]

        client = anthropic.AsyncAnthropic(api_key=self._api_key)
        response = await client.messages.create(
            model=self._model,
            max_tokens=4096,
            messages=[{"role": "user", "content": content}],
        )

        raw = response.content[0].text
        logger.debug("Claude OCR 原始文字: %s", raw)
        text = clean_ocr_text(raw)
        if not text:
            return OCRResult(
                text="", raw_text=raw, success=False, error="圖片中沒有可辨識的文字"
            )
        return OCRResult(text=text, raw_text=raw, confidence=1.0)
