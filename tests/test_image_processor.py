# tests/test_image_processor.py
"""Tests for docrelay.processors.image_processor"""

from unittest.mock import Mock

import pytest

from docrelay.config.settings import BotSettings
from docrelay.models.types import FileType
from docrelay.processors.image_processor import ImageProcessor
from docrelay.processors.ocr import TesseractOcr
from docrelay.services.exceptions import AssemblyFailedError
from docrelay.services.translation_service import ChunkedTranslator


@pytest.fixture
def translator():
    translator = Mock(spec=ChunkedTranslator)
    translator.translate.return_value = "اختبار"
    return translator


@pytest.fixture
def ocr():
    ocr = Mock(spec=TesseractOcr)
    ocr.image_file_to_text.return_value = "TEST"
    return ocr


class TestImageProcessor:
    def test_returns_source_and_translation(self, tmp_path, translator, ocr):
        processed = ImageProcessor(BotSettings(), translator, ocr).process(tmp_path / "image.jpg", tmp_path)

        assert processed.file_type == FileType.IMAGE
        assert processed.source_text == "TEST"
        assert processed.text == "اختبار"
        assert processed.has_document is False
        translator.translate.assert_called_once_with("TEST")

    def test_whitespace_ocr_uses_placeholder(self, tmp_path, translator, ocr):
        ocr.image_file_to_text.return_value = " \n "
        processed = ImageProcessor(BotSettings(), translator, ocr).process(tmp_path / "image.jpg", tmp_path)

        assert processed.source_text == "(No text found)"
        translator.translate.assert_called_once_with("(No text found)")

    def test_empty_translation_uses_placeholder(self, tmp_path, translator, ocr):
        translator.translate.return_value = ""
        settings = BotSettings()
        processed = ImageProcessor(settings, translator, ocr).process(tmp_path / "image.jpg", tmp_path)
        assert processed.text == settings.no_translation_placeholder

    def test_unreadable_image_propagates(self, tmp_path, translator, ocr):
        ocr.image_file_to_text.side_effect = AssemblyFailedError("Cannot read image: image.jpg")
        with pytest.raises(AssemblyFailedError):
            ImageProcessor(BotSettings(), translator, ocr).process(tmp_path / "image.jpg", tmp_path)
        translator.translate.assert_not_called()
