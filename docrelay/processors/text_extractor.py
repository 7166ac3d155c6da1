# docrelay/processors/text_extractor.py
"""
Per-page text extraction: selectable text plus OCR of the rendered page.

Both sources are always used (not OCR-as-fallback) so text inside images on
otherwise digital pages is captured too.
"""

import logging

from PIL import Image

from docrelay.models.types import SourcePage
from docrelay.processors.font_manager import _get_pymupdf
from docrelay.processors.ocr import TesseractOcr
from docrelay.services.exceptions import PageExtractionError, UpstreamCallFailedError

# Module logger
logger = logging.getLogger(__name__)

# 3x ~= 216 dpi. OCR accuracy improves with zoom but render + OCR time grows
# roughly quadratically.
DEFAULT_RENDER_ZOOM = 3.0


def combine_page_text(embedded_text: str, ocr_text: str) -> str:
    """
    Join embedded and OCR text, embedded first.

    Each part is trimmed independently and empty parts are dropped, so the
    result is "" only when both are empty.
    """
    parts = [t.strip() for t in (embedded_text or "", ocr_text or "")]
    return "\n".join(p for p in parts if p)


def describe_page(page) -> SourcePage:
    """Snapshot the geometry and selectable text of a PyMuPDF page."""
    rect = page.rect
    return SourcePage(
        index=page.number,
        width=rect.width,
        height=rect.height,
        embedded_text=page.get_text("text") or "",
    )


def render_page_image(page, zoom: float = DEFAULT_RENDER_ZOOM) -> Image.Image:
    """Rasterize a PyMuPDF page to an RGB PIL image."""
    pymupdf = _get_pymupdf()
    pix = page.get_pixmap(matrix=pymupdf.Matrix(zoom, zoom), alpha=False)
    return Image.frombytes("RGB", (pix.width, pix.height), pix.samples)


class TextExtractor:
    """
    Produces a best-effort transcript of one PDF page.
    """

    def __init__(self, ocr: TesseractOcr, zoom: float = DEFAULT_RENDER_ZOOM):
        self.ocr = ocr
        self.zoom = zoom

    def extract(self, page) -> str:
        """
        Extract text from one page.

        Args:
            page: PyMuPDF page

        Returns:
            Embedded text and OCR text joined by a newline ("" if none).
            The caller substitutes a placeholder for "".

        Raises:
            PageExtractionError: rasterization or OCR failed (tagged with page index)
        """
        page_index = page.number
        try:
            source = describe_page(page)
            image = render_page_image(page, self.zoom)
            ocr_text = self.ocr.image_to_text(image)
        except UpstreamCallFailedError as e:
            raise PageExtractionError(page_index, str(e)) from e
        except (RuntimeError, ValueError, OSError) as e:
            # PyMuPDF reports damaged content streams as RuntimeError subclasses
            raise PageExtractionError(page_index, f"cannot render page: {e}") from e

        text = combine_page_text(source.embedded_text, ocr_text)
        logger.debug(
            "Page %d: %d embedded chars, %d OCR chars",
            page_index + 1, len(source.embedded_text.strip()), len(ocr_text),
        )
        return text
