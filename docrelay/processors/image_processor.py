# docrelay/processors/image_processor.py
"""
Image processor: OCR the picture, translate the text.
"""

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from docrelay.models.types import FileType, ProcessedFile
from docrelay.processors.base import FileProcessor
from docrelay.processors.ocr import TesseractOcr

if TYPE_CHECKING:
    from docrelay.config.settings import BotSettings
    from docrelay.services.translation_service import ChunkedTranslator

# Module logger
logger = logging.getLogger(__name__)


class ImageProcessor(FileProcessor):
    """
    Processor for photos and image documents.
    Produces translated text; the caller decides how to deliver it.
    """

    def __init__(
        self,
        settings: "BotSettings",
        translator: "ChunkedTranslator",
        ocr: TesseractOcr,
    ):
        self.settings = settings
        self.translator = translator
        self.ocr = ocr

    @property
    def file_type(self) -> FileType:
        return FileType.IMAGE

    def process(self, input_path: Path, work_dir: Path) -> ProcessedFile:
        extracted = self.ocr.image_file_to_text(input_path)
        if not self.has_text(extracted):
            extracted = self.settings.image_no_text_placeholder

        translated = self.translator.translate(extracted).strip()
        if not translated:
            translated = self.settings.no_translation_placeholder

        logger.info("Image OCR: %d chars -> %d translated chars", len(extracted), len(translated))
        return ProcessedFile(
            file_type=FileType.IMAGE,
            text=translated,
            source_text=extracted,
        )
