"""Gemini API vision backend for label OCR."""

from __future__ import annotations

import logging
import mimetypes
from pathlib import Path

from . import OCRBackend, OCRResult
from .cleanup import clean_ocr_text
from .prompt import OCR_PROMPT

logger = logging.getLogger(__name__)


class GeminiOCRBackend(OCRBackend):
    """Read label text using Google Gemini's vision capability."""

    def __init__(self, api_key: str = "", model: str = "gemini-2.0-flash") -> None:
        self._api_key = api_key
        self._model = model

    async def extract_text(self, image_path: str) -> OCRResult:
        if not self._api_key:
            raise ValueError(
                "Gemini API 金鑰未設定。"
                "請確認設定檔或 GEMINI_API_KEY 環境變數。"
            )

        try:
            import google.generativeai as genai
        except ImportError:
            raise ImportError(
                "google-generativeai SDK is required: pip install google-generativeai"
            ) from None

        genai.configure(api_key=self._api_key)
        model = genai.GenerativeModel(self._model)

        data = Path(image_path).read_bytes()
        media_type = mimetypes.guess_type(image_path)[0] or "image/jpeg"
        response = await model.generate_content_async(
            [{"mime_type": media_type, "data": data}, OCR_PROMPT]
        )

        raw = response.text
        logger.debug("Gemini OCR 原始文字: %s", raw)
        text = clean_ocr_text(raw)
        if not text:
            return OCRResult(
                text="", raw_text=raw, success=False, error="圖片中沒有可辨識的文字"
            )
        return OCRResult(text=text, raw_text=raw, confidence=1.0)
