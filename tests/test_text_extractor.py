# tests/test_text_extractor.py
"""
Tests for docrelay.processors.text_extractor.
Pages are real PyMuPDF pages; OCR is faked.
"""

from unittest.mock import Mock

import pymupdf
import pytest

from docrelay.processors.ocr import TesseractOcr
from docrelay.processors.text_extractor import (
    TextExtractor,
    combine_page_text,
    describe_page,
    render_page_image,
)
from docrelay.services.exceptions import PageExtractionError, UpstreamCallFailedError


@pytest.fixture
def text_doc():
    """Two A4 pages: text on the first, nothing on the second"""
    doc = pymupdf.open()
    page = doc.new_page(width=595, height=842)
    page.insert_text((72, 72), "Hello World")
    doc.new_page(width=595, height=842)
    yield doc
    doc.close()


@pytest.fixture
def fake_ocr():
    ocr = Mock(spec=TesseractOcr)
    ocr.image_to_text.return_value = ""
    return ocr


class TestCombinePageText:
    """Tests for combine_page_text"""

    def test_both_parts_embedded_first(self):
        assert combine_page_text(" embedded \n", "\nocr ") == "embedded\nocr"

    def test_empty_parts_dropped(self):
        assert combine_page_text("embedded", "   ") == "embedded"
        assert combine_page_text("", "ocr") == "ocr"

    def test_both_empty(self):
        assert combine_page_text("  \n", "") == ""
        assert combine_page_text(None, None) == ""


class TestPageHelpers:
    """Tests for describe_page / render_page_image"""

    def test_describe_page(self, text_doc):
        source = describe_page(text_doc[0])
        assert source.index == 0
        assert source.width == 595
        assert source.height == 842
        assert "Hello World" in source.embedded_text

        assert describe_page(text_doc[1]).embedded_text.strip() == ""

    def test_render_page_image_scales_with_zoom(self, text_doc):
        image = render_page_image(text_doc[0], zoom=2.0)
        assert image.mode == "RGB"
        assert abs(image.width - 2 * 595) <= 1
        assert abs(image.height - 2 * 842) <= 1


class TestTextExtractor:
    """Tests for TextExtractor.extract"""

    def test_embedded_and_ocr_combined(self, text_doc, fake_ocr):
        fake_ocr.image_to_text.return_value = "Scanned caption"
        text = TextExtractor(fake_ocr, zoom=1.0).extract(text_doc[0])
        assert text == "Hello World\nScanned caption"

    def test_ocr_runs_on_rendered_page(self, text_doc, fake_ocr):
        TextExtractor(fake_ocr, zoom=1.5).extract(text_doc[0])
        image = fake_ocr.image_to_text.call_args[0][0]
        assert abs(image.width - 1.5 * 595) <= 1

    def test_blank_page_yields_empty(self, text_doc, fake_ocr):
        assert TextExtractor(fake_ocr, zoom=1.0).extract(text_doc[1]) == ""

    def test_ocr_failure_tagged_with_page(self, text_doc, fake_ocr):
        fake_ocr.image_to_text.side_effect = UpstreamCallFailedError("ocr", "tesseract failed")
        with pytest.raises(PageExtractionError) as exc:
            TextExtractor(fake_ocr, zoom=1.0).extract(text_doc[1])
        assert exc.value.page_index == 1
        assert str(exc.value) == "page 2: tesseract failed"

    def test_render_failure_tagged_with_page(self, fake_ocr):
        page = Mock()
        page.number = 4
        page.rect = pymupdf.Rect(0, 0, 100, 100)
        page.get_text.return_value = ""
        page.get_pixmap.side_effect = RuntimeError("damaged content stream")

        with pytest.raises(PageExtractionError) as exc:
            TextExtractor(fake_ocr).extract(page)
        assert exc.value.page_index == 4
        assert "damaged content stream" in str(exc.value)
        fake_ocr.image_to_text.assert_not_called()
