# docrelay/services/relay_service.py
"""
Per-request orchestration.

RelayService turns one InboundRequest (already downloaded into a
request-scoped directory) into one BotReply. It is synchronous and blocking;
the bot layer runs it on a worker pool.
"""

import logging
import threading
from pathlib import Path
from typing import Optional, TYPE_CHECKING

from docrelay.models.types import BotReply, FileType, InboundRequest
from docrelay.services.exceptions import InputRejectedError, RelayError
from docrelay.services.translation_service import ChunkedTranslator

if TYPE_CHECKING:
    from docrelay.config.settings import BotSettings
    from docrelay.processors.base import FileProcessor
    from docrelay.processors.ocr import TesseractOcr
    from docrelay.processors.pdf_processor import PdfProcessor
    from docrelay.services.conversion_client import ConversionClient

# Module logger
logger = logging.getLogger(__name__)

PRESENTATION_MIME_TYPES = frozenset({
    'application/vnd.ms-powerpoint',
    'application/vnd.openxmlformats-officedocument.presentationml.presentation',
})

UNSUPPORTED_FILE_MESSAGE = "Only PDF, image and PPT/PPTX files are allowed."
CONVERSION_SUCCESS_MESSAGE = "✅ Converted successfully!"

# Unresolved marker for the lazily resolved RTL font
_FONT_UNRESOLVED = object()


def detect_file_type(file_name: Optional[str], mime_type: Optional[str] = None) -> FileType:
    """
    Classify an inbound document by extension, then by MIME type.

    Raises:
        InputRejectedError: neither a PDF, an image nor a presentation
    """
    ext = Path(file_name).suffix.lower() if file_name else ""
    mime = (mime_type or "").lower()

    for file_type in (FileType.PDF, FileType.IMAGE, FileType.PRESENTATION):
        if ext in file_type.extensions:
            return file_type

    if mime == 'application/pdf':
        return FileType.PDF
    if mime.startswith('image/'):
        return FileType.IMAGE
    if mime in PRESENTATION_MIME_TYPES:
        return FileType.PRESENTATION

    raise InputRejectedError(UNSUPPORTED_FILE_MESSAGE)


class RelayService:
    """
    Dispatches requests to processors and applies the reply policy.

    Collaborators (translator, OCR engine, conversion client) are built from
    settings unless injected.
    """

    def __init__(
        self,
        settings: "BotSettings",
        translator: Optional[ChunkedTranslator] = None,
        ocr: Optional["TesseractOcr"] = None,
        conversion_client: Optional["ConversionClient"] = None,
    ):
        self.settings = settings
        self.translator = translator or ChunkedTranslator.from_settings(settings)
        self._ocr = ocr
        self._conversion_client = conversion_client

        # Lazy-loaded processors (PyMuPDF / tesseract imports deferred)
        self._processors: Optional[dict[FileType, "FileProcessor"]] = None
        self._processors_lock = threading.Lock()
        self._font_path = _FONT_UNRESOLVED

    @property
    def ocr(self) -> "TesseractOcr":
        if self._ocr is None:
            from docrelay.processors.ocr import TesseractOcr
            self._ocr = TesseractOcr.from_settings(self.settings)
        return self._ocr

    @property
    def conversion_client(self) -> Optional["ConversionClient"]:
        if self._conversion_client is None and self.settings.conversion_enabled:
            from docrelay.services.conversion_client import ConversionClient
            self._conversion_client = ConversionClient(
                self.settings.start_task_url,
                timeout=self.settings.request_timeout,
            )
        return self._conversion_client

    @property
    def processors(self) -> dict[FileType, "FileProcessor"]:
        """
        Stateless processors, created on first access (thread-safe).
        PDF assembly tracks per-run state and gets a fresh processor per
        request instead (see create_pdf_processor).
        """
        if self._processors is None:
            with self._processors_lock:
                # Double-check locking pattern for thread safety
                if self._processors is None:
                    from docrelay.processors.image_processor import ImageProcessor
                    from docrelay.processors.presentation_processor import PresentationProcessor

                    self._processors = {
                        FileType.IMAGE: ImageProcessor(self.settings, self.translator, self.ocr),
                        FileType.PRESENTATION: PresentationProcessor(self.conversion_client),
                    }
        return self._processors

    @property
    def rtl_font_path(self) -> Optional[str]:
        """RTL font for generated pages, resolved once."""
        if self._font_path is _FONT_UNRESOLVED:
            with self._processors_lock:
                if self._font_path is _FONT_UNRESOLVED:
                    from docrelay.processors.font_manager import resolve_rtl_font
                    self._font_path = resolve_rtl_font(self.settings.rtl_font_path)
        return self._font_path

    def create_pdf_processor(self) -> "PdfProcessor":
        from docrelay.processors.pdf_processor import PdfProcessor
        from docrelay.processors.text_extractor import TextExtractor

        return PdfProcessor(
            self.settings,
            self.translator,
            TextExtractor(self.ocr, zoom=self.settings.render_zoom),
            font_path=self.rtl_font_path,
            resolve_font=False,
        )

    def handle(self, request: InboundRequest) -> BotReply:
        """
        Process one request. Never raises RelayError: every per-request
        failure becomes a plain-text error reply and no partial output is sent.

        Args:
            request: Downloaded inbound payload

        Returns:
            BotReply to send back through the transport
        """
        kind = request.file_type.label
        logger.info("Handling %s request: %s", kind, request.display_name)
        try:
            return self._dispatch(request)
        except InputRejectedError as e:
            logger.info("Rejected %s: %s", request.display_name, e)
            return BotReply.text_reply(f"❌ {e}", is_error=True)
        except RelayError as e:
            logger.exception("Failed to process %s %s: %s", kind, request.display_name, e)
            return BotReply.text_reply(f"Failed to process {kind}: {e}", is_error=True)

    def _dispatch(self, request: InboundRequest) -> BotReply:
        if request.file_type == FileType.TEXT:
            return self.translate_text(request.text or "", request.work_dir)

        if request.file_path is None:
            raise InputRejectedError("No file was received.")

        if request.file_type == FileType.PDF:
            processed = self.create_pdf_processor().process(request.file_path, request.work_dir)
            return BotReply.document_reply(processed.output_path, processed.output_name)

        processor = self.processors.get(request.file_type)
        if processor is None:
            raise InputRejectedError(UNSUPPORTED_FILE_MESSAGE)

        processed = processor.process(request.file_path, request.work_dir)
        if processed.has_document:
            return BotReply.document_reply(
                processed.output_path,
                processed.output_name,
                follow_up=CONVERSION_SUCCESS_MESSAGE,
            )
        return self.make_translation_reply(processed.text or "", request.work_dir)

    def translate_text(self, text: str, work_dir: Path) -> BotReply:
        """Translate a plain-text message."""
        if not text.strip():
            raise InputRejectedError("Send some text to translate.")
        translated = self.translator.translate(text)
        if not translated:
            translated = self.settings.no_translation_placeholder
        return self.make_translation_reply(translated, work_dir)

    def make_translation_reply(self, translated: str, work_dir: Path) -> BotReply:
        """
        Text reply when it fits one message, otherwise a UTF-8 .txt document
        whose content is exactly the translation.
        """
        if len(translated) <= self.settings.max_reply_chars:
            return BotReply.text_reply(translated)

        filename = self.settings.reply_document_name
        output_path = work_dir / filename
        output_path.write_text(translated, encoding="utf-8")
        logger.debug("Translation too long for a message (%d chars), sending %s", len(translated), filename)
        return BotReply.document_reply(output_path, filename)
