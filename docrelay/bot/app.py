# docrelay/bot/app.py
"""
Telegram bot: receives payloads, runs RelayService on a worker pool and
sends the reply back.

Each inbound message is an independent task. The payload is downloaded into
its own temporary directory, the blocking pipeline runs in a thread of the
pool (the event loop only awaits it), and the directory is removed on every
exit path once the reply has been sent.
"""

import asyncio
import logging
import re
import tempfile
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Optional

from telegram import Message, Update
from telegram.error import TelegramError
from telegram.ext import Application, CommandHandler, ContextTypes, MessageHandler, filters

from docrelay.config.settings import BotSettings
from docrelay.models.types import BotReply, FileType, InboundRequest
from docrelay.services.exceptions import InputRejectedError
from docrelay.services.relay_service import RelayService, detect_file_type

# Module logger
logger = logging.getLogger(__name__)

START_MESSAGE = (
    "Send me a PDF and I'll OCR + translate each page and return a bilingual PDF "
    "(original page followed by its translation).\n"
    "You can also send an image, a PPT/PPTX presentation or plain text."
)

PROGRESS_MESSAGES = {
    FileType.PDF: "Processing your PDF (OCR + translation)...",
    FileType.IMAGE: "Processing image (OCR + translation)...",
    FileType.PRESENTATION: "⏳ Converting your PPT… (جاري تحويل الملف)",
}

_RE_UNSAFE_NAME = re.compile(r'[\\/:*?"<>|\x00-\x1f]')


def safe_download_name(file_name: Optional[str], default: str) -> str:
    """File name to store a download under inside the request directory."""
    name = _RE_UNSAFE_NAME.sub('_', Path(file_name).name if file_name else "").strip(" .")
    return name or default


class RelayBot:
    """
    python-telegram-bot front end for RelayService.
    """

    def __init__(self, settings: BotSettings, service: Optional[RelayService] = None):
        self.settings = settings
        self.service = service or RelayService(settings)
        self._executor = ThreadPoolExecutor(
            max_workers=settings.worker_threads,
            thread_name_prefix="docrelay-worker",
        )

    def build_application(self) -> Application:
        """
        Build the Application with all handlers registered.

        Handlers in one group are tried in order, so PDFs and images are
        matched before the generic document handler.
        """
        token = self.settings.require_bot_token()
        application = Application.builder().token(token).build()

        application.add_handler(CommandHandler("start", self.start))
        application.add_handler(MessageHandler(filters.Document.PDF, self.handle_pdf))
        application.add_handler(MessageHandler(filters.PHOTO | filters.Document.IMAGE, self.handle_image))
        application.add_handler(MessageHandler(filters.Document.ALL, self.handle_document))
        application.add_handler(MessageHandler(filters.TEXT & ~filters.COMMAND, self.handle_text))
        application.add_error_handler(self.on_error)
        return application

    # =========================================================================
    # Handlers
    # =========================================================================

    async def start(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        await update.effective_message.reply_text(START_MESSAGE)

    async def handle_pdf(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        document = update.effective_message.document
        file_name = safe_download_name(document.file_name, "document.pdf")
        await self._relay_file(update.effective_message, FileType.PDF, document, file_name)

    async def handle_image(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        message = update.effective_message
        if message.photo:
            # Largest available size
            source = message.photo[-1]
            file_name = "image.jpg"
        else:
            source = message.document
            ext = Path(source.file_name or "").suffix.lower() or ".png"
            file_name = f"image{ext}"
        await self._relay_file(message, FileType.IMAGE, source, file_name)

    async def handle_document(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        message = update.effective_message
        document = message.document
        try:
            file_type = detect_file_type(document.file_name, document.mime_type)
        except InputRejectedError as e:
            logger.info("Rejected document %s (%s)", document.file_name, document.mime_type)
            await message.reply_text(f"❌ {e}")
            return

        default_name = "presentation.pptx" if file_type == FileType.PRESENTATION else "document"
        file_name = safe_download_name(document.file_name, default_name)
        await self._relay_file(message, file_type, document, file_name)

    async def handle_text(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        message = update.effective_message
        with tempfile.TemporaryDirectory(prefix="docrelay_") as tmp:
            request = InboundRequest(
                file_type=FileType.TEXT,
                work_dir=Path(tmp),
                text=message.text or "",
            )
            reply = await self.run_blocking(self.service.handle, request)
            await self.send_reply(message, reply)

    async def on_error(self, update: object, context: ContextTypes.DEFAULT_TYPE) -> None:
        """Log errors raised by handlers (e.g. failed sends)."""
        logger.error("Error while handling update %s", update, exc_info=context.error)

    # =========================================================================
    # Request plumbing
    # =========================================================================

    async def run_blocking(self, func, *args):
        """Run a blocking callable on the worker pool."""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(self._executor, func, *args)

    async def _relay_file(self, message: Message, file_type: FileType, source, file_name: str) -> None:
        """
        Download, process and reply for one file payload.

        Args:
            message: Inbound message (replies are sent to it)
            file_type: Payload kind
            source: Telegram object with get_file() (Document or PhotoSize)
            file_name: Name to store the download under
        """
        progress = PROGRESS_MESSAGES.get(file_type)
        if progress:
            await message.reply_text(progress)

        with tempfile.TemporaryDirectory(prefix="docrelay_") as tmp:
            work_dir = Path(tmp)
            input_path = work_dir / file_name
            try:
                telegram_file = await source.get_file()
                await telegram_file.download_to_drive(custom_path=input_path)
            except (TelegramError, OSError) as e:
                logger.warning("Download of %s failed: %s", file_name, e)
                await message.reply_text(f"Failed to process {file_type.label}: {e}")
                return

            request = InboundRequest(
                file_type=file_type,
                work_dir=work_dir,
                file_path=input_path,
                file_name=file_name,
            )
            reply = await self.run_blocking(self.service.handle, request)
            await self.send_reply(message, reply)

    async def send_reply(self, message: Message, reply: BotReply) -> None:
        """Deliver a BotReply; must be awaited before the work dir is removed."""
        if not reply.is_document:
            await message.reply_text(reply.text or "")
            return

        with open(reply.document_path, "rb") as f:
            await message.reply_document(document=f, filename=reply.filename)
        if reply.follow_up:
            await message.reply_text(reply.follow_up)

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def run(self) -> None:
        """
        Run until interrupted: webhook when WEBHOOK_URL is set, long polling otherwise.
        """
        application = self.build_application()
        try:
            if self.settings.webhook_url:
                token = self.settings.require_bot_token()
                logger.info(
                    "Starting webhook on %s:%d (%s)",
                    self.settings.listen_address, self.settings.port, self.settings.webhook_url,
                )
                application.run_webhook(
                    listen=self.settings.listen_address,
                    port=self.settings.port,
                    url_path=token,
                    webhook_url=f"{self.settings.webhook_url}/{token}",
                )
            else:
                logger.info("Starting long polling")
                application.run_polling(allowed_updates=Update.ALL_TYPES)
        finally:
            self.shutdown()

    def shutdown(self) -> None:
        """Stop the worker pool; running tasks finish, queued ones are dropped."""
        self._executor.shutdown(wait=False, cancel_futures=True)
        logger.info("Worker pool stopped")
