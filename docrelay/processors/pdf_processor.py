# docrelay/processors/pdf_processor.py
"""
Bilingual PDF assembly.

Output format:
    Page 1: Original page 1 (copied verbatim)
    Page 2: Translation of page 1 (1/n)
    ...
    Page k: Original page 2
    Page k+1: Translation of page 2 (1/m)
    ...

Each source page is planned first (extract -> translate -> paginate) and
then emitted (copy original, append one generated page per chunk), so the
output page order always mirrors the source order.
"""

import logging
import re
import unicodedata
from contextlib import contextmanager
from pathlib import Path
from typing import Optional, TYPE_CHECKING

from docrelay.models.types import (
    AssemblyResult,
    AssemblyState,
    FileType,
    PagePlan,
    ProcessedFile,
)
from docrelay.processors.base import FileProcessor
from docrelay.processors.font_manager import _get_pymupdf, get_font_reference, resolve_rtl_font
from docrelay.processors.paginator import (
    HEADER_SPACE,
    estimate_lines_per_page,
    estimate_page_capacity,
    paginate,
    wrap_text,
)
from docrelay.processors.rtl_shaper import RtlShaper
from docrelay.processors.text_extractor import TextExtractor, describe_page
from docrelay.services.exceptions import AssemblyFailedError, InputRejectedError

if TYPE_CHECKING:
    from docrelay.config.settings import BotSettings
    from docrelay.services.translation_service import ChunkedTranslator

# Module logger
logger = logging.getLogger(__name__)

# Header template for generated pages
PAGE_HEADER_TEMPLATE = "Page {page} - {language} Translation {label}"

# Display names used in page headers
LANGUAGE_NAMES = {
    "ar": "Arabic",
    "fa": "Persian",
    "he": "Hebrew",
    "iw": "Hebrew",
    "ur": "Urdu",
    "en": "English",
}

# Rows are wrapped this much narrower than the text box so PyMuPDF never
# re-wraps them
WRAP_SLACK = 1.0

_RE_FILENAME_FORBIDDEN = re.compile(r'[\\/:*?"<>|\x00-\x1f]')


def _sanitize_output_stem(name: str) -> str:
    """Sanitize a filename stem for cross-platform safety.

    Replaces characters forbidden on Windows (\\, /, :, *, ?, ", <, >, | and control chars)
    with underscores while preserving Unicode characters like Arabic or emoji.
    Returns a fallback name when the result would be empty.
    """

    sanitized = _RE_FILENAME_FORBIDDEN.sub('_', unicodedata.normalize('NFC', name))
    sanitized = sanitized.strip()
    return sanitized or 'document'


def translated_pdf_name(file_name: Optional[str]) -> str:
    """Reply filename for a translated PDF: <stem>_translated.pdf"""
    stem = Path(file_name).stem if file_name else ""
    return f"{_sanitize_output_stem(stem)}_translated.pdf"


@contextmanager
def _open_pymupdf_document(file_path):
    """
    Context manager for safely opening and closing PyMuPDF documents.

    Ensures the PDF is properly closed even if an exception occurs.

    Args:
        file_path: Path to PDF file (str or Path), or None for a new empty document

    Yields:
        PyMuPDF Document object

    Raises:
        AssemblyFailedError: the file is not a readable PDF
    """
    pymupdf = _get_pymupdf()
    try:
        doc = pymupdf.open(file_path) if file_path is not None else pymupdf.open()
    except (RuntimeError, ValueError) as e:
        # FileDataError / FileNotFoundError are RuntimeError subclasses
        raise AssemblyFailedError(f"Cannot open PDF: {e}") from e
    try:
        yield doc
    finally:
        doc.close()


class PdfProcessor(FileProcessor):
    """
    Builds a bilingual PDF: every original page followed by its translation.
    """

    def __init__(
        self,
        settings: "BotSettings",
        translator: "ChunkedTranslator",
        extractor: TextExtractor,
        shaper: Optional[RtlShaper] = None,
        font_path: Optional[str] = None,
        resolve_font: bool = True,
    ):
        self.settings = settings
        self.translator = translator
        self.extractor = extractor
        self.shaper = shaper or RtlShaper()
        if font_path is None and resolve_font:
            font_path = resolve_rtl_font(settings.rtl_font_path)
        self.font_path = font_path
        self.state = AssemblyState.NOT_STARTED
        self.current_page: Optional[int] = None
        self._layout_font = None

    @property
    def file_type(self) -> FileType:
        return FileType.PDF

    @property
    def language_name(self) -> str:
        target = self.settings.target_language
        return LANGUAGE_NAMES.get(target, target)

    def process(self, input_path: Path, work_dir: Path) -> ProcessedFile:
        output_name = translated_pdf_name(input_path.name)
        output_path = work_dir / output_name
        if output_path == input_path:
            output_path = work_dir / f"out_{output_name}"

        result = self.build_bilingual_pdf(input_path, output_path)
        return ProcessedFile(
            file_type=FileType.PDF,
            output_path=output_path,
            output_name=output_name,
            page_count=result.total_pages,
        )

    def page_capacity(self, width: float, height: float) -> int:
        """Character capacity of one generated page with the given geometry."""
        if self.settings.max_page_chars:
            return self.settings.max_page_chars
        return estimate_page_capacity(
            width,
            height,
            margin=self.settings.page_margin,
            font_size=self.settings.body_font_size,
            line_height=self.settings.line_height,
        )

    def lines_per_page(self, height: float) -> int:
        """Rows that fit the text box of one generated page."""
        return estimate_lines_per_page(
            height,
            margin=self.settings.page_margin,
            font_size=self.settings.body_font_size,
            line_height=self.settings.line_height,
        )

    def text_box(self, width: float, height: float):
        """Area of a generated page that holds the translation."""
        pymupdf = _get_pymupdf()
        margin = self.settings.page_margin
        return pymupdf.Rect(margin, margin + HEADER_SPACE, width - margin, height - margin)

    @property
    def layout_font(self):
        """PyMuPDF Font used to measure rows; same face as the text box."""
        if self._layout_font is None:
            pymupdf = _get_pymupdf()
            fontname, fontfile = get_font_reference(self.font_path)
            try:
                if fontfile:
                    self._layout_font = pymupdf.Font(fontfile=fontfile)
                else:
                    self._layout_font = pymupdf.Font(fontname)
            except Exception as e:
                raise AssemblyFailedError(f"Cannot load font {fontfile or fontname}: {e}") from e
        return self._layout_font

    def measure(self, text: str) -> float:
        """Rendered width of text in points, after RTL shaping."""
        return self.layout_font.text_length(
            self.shaper.shape_line(text),
            fontsize=self.settings.body_font_size,
        )

    def plan_page(self, page) -> PagePlan:
        """
        Extract, translate and paginate one source page.

        The translation is word-wrapped to the text box width in logical
        order before pagination, so each chunk line is exactly one rendered
        row and shaping happens row by row.

        Args:
            page: PyMuPDF page of the source document

        Returns:
            PagePlan with at least one chunk

        Raises:
            PageExtractionError: OCR or rasterization failed
            UpstreamCallFailedError: translation failed
            AssemblyFailedError: layout font cannot be loaded
        """
        source = describe_page(page)

        extracted = self.extractor.extract(page).strip()
        if not extracted:
            extracted = self.settings.no_text_placeholder

        translated = self.translator.translate(extracted).strip()
        if not translated:
            translated = self.settings.no_translation_placeholder

        box = self.text_box(source.width, source.height)
        rows = wrap_text(translated, box.width - WRAP_SLACK, self.measure)
        capacity = self.page_capacity(source.width, source.height)
        max_lines = self.lines_per_page(source.height)
        chunks = paginate(rows, capacity, max_lines)

        logger.debug(
            "Page %d: %d source chars -> %d translated chars -> %d page(s) (capacity %d chars, %d rows)",
            source.index + 1, len(extracted), len(translated), len(chunks), capacity, max_lines,
        )
        return PagePlan(
            page=source,
            extracted_text=extracted,
            translated_text=translated,
            chunks=chunks,
        )

    @contextmanager
    def _render_errors(self, page_index: int):
        """Report PyMuPDF failures while emitting a page as AssemblyFailedError."""
        try:
            yield
        except Exception as e:
            raise AssemblyFailedError(f"Cannot render page {page_index + 1}: {e}", page_index) from e

    def render_plan(self, out_doc, src_doc, plan: PagePlan) -> int:
        """
        Append the original page and its generated translation pages.

        Returns:
            Number of generated pages appended

        Raises:
            AssemblyFailedError: PyMuPDF failed, or a chunk did not fit its text box
        """
        pymupdf = _get_pymupdf()
        page_index = plan.page.index
        with self._render_errors(page_index):
            out_doc.insert_pdf(src_doc, from_page=page_index, to_page=page_index)

        margin = self.settings.page_margin
        width, height = plan.page.width, plan.page.height
        fontname, fontfile = get_font_reference(self.font_path)
        box = self.text_box(width, height)

        for chunk in plan.chunks:
            header = PAGE_HEADER_TEMPLATE.format(
                page=page_index + 1,
                language=self.language_name,
                label=chunk.header_label,
            )
            with self._render_errors(page_index):
                new_page = out_doc.new_page(width=width, height=height)
                new_page.insert_text(
                    (margin, margin - HEADER_SPACE),
                    header,
                    fontsize=self.settings.header_font_size,
                )
                rc = new_page.insert_textbox(
                    box,
                    self.shaper.shape(chunk.text),
                    fontsize=self.settings.body_font_size,
                    fontname=fontname,
                    fontfile=fontfile,
                    align=pymupdf.TEXT_ALIGN_RIGHT,
                    lineheight=self.settings.line_height,
                )
            if rc < 0:
                # insert_textbox writes nothing when the text does not fit
                raise AssemblyFailedError(
                    f"Page {page_index + 1} translation {chunk.header_label} "
                    f"overflows its text box by {-rc:.1f}pt",
                    page_index,
                )

        return plan.generated_page_count

    def build_bilingual_pdf(self, input_path: Path, output_path: Path) -> AssemblyResult:
        """
        Create the bilingual PDF.

        Any page failure aborts the whole run; the output file is only
        written once every page has been planned and rendered.

        Args:
            input_path: Source PDF
            output_path: Destination PDF

        Returns:
            AssemblyResult with page statistics

        Raises:
            InputRejectedError: encrypted PDF
            AssemblyFailedError: unreadable input, empty document or save failure
            PageExtractionError / UpstreamCallFailedError: per-page failure
        """
        result = AssemblyResult(output_path=output_path)
        self.state = AssemblyState.NOT_STARTED
        self.current_page = None

        try:
            with _open_pymupdf_document(input_path) as src_doc, \
                    _open_pymupdf_document(None) as out_doc:
                if src_doc.needs_pass:
                    raise InputRejectedError("Password-protected PDFs are not supported.")
                page_count = src_doc.page_count
                if page_count == 0:
                    raise AssemblyFailedError("PDF has no pages")

                for i in range(page_count):
                    self.state = AssemblyState.PROCESSING_PAGE
                    self.current_page = i
                    logger.info("Processing page %d/%d", i + 1, page_count)

                    plan = self.plan_page(src_doc[i])
                    result.generated_pages += self.render_plan(out_doc, src_doc, plan)
                    result.source_pages += 1

                self.state = AssemblyState.FINALIZING
                self._save(out_doc, output_path)
        except Exception:
            self.state = AssemblyState.FAILED
            raise

        self.state = AssemblyState.DONE
        result.state = self.state
        logger.info(
            "Created bilingual PDF: %d pages (%d original + %d translated)",
            result.total_pages, result.source_pages, result.generated_pages,
        )
        return result

    @staticmethod
    def _save(out_doc, output_path: Path) -> None:
        """Serialize with garbage collection and deflate; never leave a partial file."""
        try:
            out_doc.save(str(output_path), garbage=4, deflate=True)
        except (RuntimeError, ValueError, OSError) as e:
            output_path.unlink(missing_ok=True)
            raise AssemblyFailedError(f"Cannot write PDF: {e}") from e
