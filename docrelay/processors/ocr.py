# docrelay/processors/ocr.py
"""
Tesseract OCR engine wrapper.

Image in, string out. Recognition language packs and the page segmentation
mode come from BotSettings; the defaults (--oem 1 --psm 6) suit structured
documents with mixed blocks of text.
"""

import logging
from pathlib import Path
from typing import TYPE_CHECKING

import pytesseract
from PIL import Image

from docrelay.services.exceptions import AssemblyFailedError, UpstreamCallFailedError

if TYPE_CHECKING:
    from docrelay.config.settings import BotSettings

# Module logger
logger = logging.getLogger(__name__)

DEFAULT_OCR_LANGUAGES = "eng"
DEFAULT_ENGINE_MODE = 1       # LSTM only
DEFAULT_PAGE_SEGMENTATION = 6  # Assume a single uniform block of text


class TesseractOcr:
    """
    OCR engine backed by the tesseract binary (via pytesseract).
    Stateless; safe to share between worker threads.
    """

    def __init__(
        self,
        languages: str = DEFAULT_OCR_LANGUAGES,
        engine_mode: int = DEFAULT_ENGINE_MODE,
        page_segmentation_mode: int = DEFAULT_PAGE_SEGMENTATION,
    ):
        self.languages = languages
        self.engine_mode = engine_mode
        self.page_segmentation_mode = page_segmentation_mode

    @classmethod
    def from_settings(cls, settings: "BotSettings") -> "TesseractOcr":
        return cls(
            languages=settings.ocr_languages,
            engine_mode=settings.ocr_engine_mode,
            page_segmentation_mode=settings.ocr_page_segmentation_mode,
        )

    @property
    def config(self) -> str:
        """Command-line options passed to tesseract"""
        return f"--oem {self.engine_mode} --psm {self.page_segmentation_mode}"

    def image_to_text(self, image: Image.Image) -> str:
        """
        OCR a PIL image.

        Args:
            image: Image in any mode (converted to RGB first)

        Returns:
            Recognized text, stripped (may be empty)

        Raises:
            UpstreamCallFailedError: tesseract missing or failed
        """
        if image.mode != "RGB":
            image = image.convert("RGB")

        try:
            text = pytesseract.image_to_string(image, lang=self.languages, config=self.config)
        except pytesseract.TesseractNotFoundError as e:
            raise UpstreamCallFailedError("ocr", "tesseract is not installed or not in PATH") from e
        except pytesseract.TesseractError as e:
            raise UpstreamCallFailedError("ocr", f"tesseract failed: {e.message}") from e

        text = (text or "").strip()
        logger.debug("OCR %dx%d image -> %d chars", image.width, image.height, len(text))
        return text

    def image_file_to_text(self, image_path: Path) -> str:
        """
        OCR an image file.

        Raises:
            AssemblyFailedError: the file is not a readable image
            UpstreamCallFailedError: tesseract missing or failed
        """
        try:
            with Image.open(image_path) as image:
                image.load()
                rgb = image.convert("RGB")
        except Image.DecompressionBombError as e:
            raise AssemblyFailedError(f"Image is too large: {image_path.name}") from e
        except OSError as e:
            # UnidentifiedImageError and truncated files are both OSError
            raise AssemblyFailedError(f"Cannot read image: {image_path.name}") from e
        return self.image_to_text(rgb)

