"""Tests for OCR backends (mocked API calls) and text cleanup."""

import sys
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from vegscan.config import load_config
from vegscan.ocr import OCRResult, clean_ocr_text, create_ocr_backend
from vegscan.ocr.claude import ClaudeOCRBackend
from vegscan.ocr.gemini import GeminiOCRBackend


@pytest.fixture
def image(tmp_path):
    img = tmp_path / "label.jpg"
    img.write_bytes(b"\xff\xd8\xff\xe0fake-jpeg")
    return img


class TestCleanOCRText:
    def test_joins_cjk(self):
        assert clean_ocr_text("小 麥 粉 、 糖") == "小麥粉、糖"

    def test_brackets(self):
        assert clean_ocr_text("卵磷脂 （ 大豆 ）") == "卵磷脂（大豆）"

    def test_keeps_lines(self):
        assert clean_ocr_text("成 分 ：水\n\n  糖  ") == "成分：水\n糖"

    def test_latin_words_keep_single_space(self):
        assert clean_ocr_text("palm   oil") == "palm oil"

    def test_empty(self):
        assert clean_ocr_text("") == ""
        assert clean_ocr_text(None) == ""


class TestCreateOCRBackend:
    def test_default_is_claude(self):
        assert isinstance(create_ocr_backend(load_config()), ClaudeOCRBackend)

    def test_gemini(self):
        config = load_config()
        config.ocr.backend = "gemini"
        assert isinstance(create_ocr_backend(config), GeminiOCRBackend)

    def test_unknown(self):
        config = load_config()
        config.ocr.backend = "tesseract"
        with pytest.raises(ValueError, match="未知的 OCR 後端"):
            create_ocr_backend(config)


class TestClaudeOCRBackend:
    @pytest.mark.asyncio
    async def test_requires_api_key(self, image):
        with pytest.raises(ValueError, match="API 金鑰"):
            await ClaudeOCRBackend(api_key="").extract_text(str(image))

    @pytest.mark.asyncio
    async def test_extract_mocked(self, image):
        mock_response = MagicMock()
        mock_response.content = [MagicMock(text="成 分：水 、 糖\n淨重：100g")]

        mock_client = AsyncMock()
        mock_client.messages.create = AsyncMock(return_value=mock_response)

        mock_anthropic = MagicMock()
        mock_anthropic.AsyncAnthropic.return_value = mock_client

        with patch.dict(sys.modules, {"anthropic": mock_anthropic}):
            result = await ClaudeOCRBackend(api_key="test-key").extract_text(str(image))

        assert isinstance(result, OCRResult)
        assert result.text == "成分：水、糖\n淨重：100g"
        assert result.raw_text.startswith("成 分")
        assert result.success

        content = mock_client.messages.create.call_args.kwargs["messages"][0]["content"]
        assert content[0]["type"] == "image"
        assert content[0]["source"]["media_type"] == "image/jpeg"


class TestGeminiOCRBackend:
    @pytest.mark.asyncio
    async def test_requires_api_key(self, image):
        with pytest.raises(ValueError, match="API 金鑰"):
            await GeminiOCRBackend(api_key="").extract_text(str(image))

    @pytest.mark.asyncio
    async def test_extract_mocked(self, image):
        model = MagicMock()
        model.generate_content_async = AsyncMock(return_value=MagicMock(text="水 、 糖"))
        mock_genai = MagicMock()
        mock_genai.GenerativeModel.return_value = model
        mock_google = MagicMock()
        mock_google.generativeai = mock_genai

        with patch.dict(
            sys.modules, {"google": mock_google, "google.generativeai": mock_genai}
        ):
            result = await GeminiOCRBackend(api_key="test-key").extract_text(str(image))

        assert result.text == "水、糖"
        parts = model.generate_content_async.call_args.args[0]
        assert parts[0]["mime_type"] == "image/jpeg"

    @pytest.mark.asyncio
    async def test_blank_transcription_is_failure(self, image):
        model = MagicMock()
        model.generate_content_async = AsyncMock(return_value=MagicMock(text="  \n "))
        mock_genai = MagicMock()
        mock_genai.GenerativeModel.return_value = model
        mock_google = MagicMock()
        mock_google.generativeai = mock_genai

        with patch.dict(
            sys.modules, {"google": mock_google, "google.generativeai": mock_genai}
        ):
            result = await GeminiOCRBackend(api_key="test-key").extract_text(str(image))

        assert not result.success
        assert result.text == ""
        assert result.error
