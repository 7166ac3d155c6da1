# docrelay/config/settings.py
"""
Bot settings for docrelay.

Settings are read once at startup (environment variables, optionally seeded
from a .env file) into a BotSettings instance that is passed explicitly to
every component. Nothing reads the environment after startup.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from dotenv import load_dotenv

from docrelay.services.exceptions import ConfigMissingError

# Module logger
logger = logging.getLogger(__name__)

# Translation placeholder for the default (Arabic) target
DEFAULT_NO_TRANSLATION_PLACEHOLDER = "(تعذر الحصول على ترجمة)"


def _env_str(environ: Mapping[str, str], name: str, default: Optional[str]) -> Optional[str]:
    raw = (environ.get(name) or "").strip()
    return raw or default


def _env_int(environ: Mapping[str, str], name: str, default: int) -> int:
    raw = (environ.get(name) or "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning("Ignoring non-integer %s=%r", name, raw)
        return default


def _env_optional_int(environ: Mapping[str, str], name: str) -> Optional[int]:
    raw = (environ.get(name) or "").strip()
    if not raw:
        return None
    try:
        return int(raw)
    except ValueError:
        logger.warning("Ignoring non-integer %s=%r", name, raw)
        return None


def _env_float(environ: Mapping[str, str], name: str, default: float) -> float:
    raw = (environ.get(name) or "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning("Ignoring non-numeric %s=%r", name, raw)
        return default


@dataclass
class BotSettings:
    """Bot settings"""

    # Transport
    bot_token: Optional[str] = None
    webhook_url: Optional[str] = None      # None = long polling
    listen_address: str = "0.0.0.0"
    port: int = 8080

    # Fonts (must be able to render the target script)
    rtl_font_path: Optional[str] = "fonts/Amiri-Regular.ttf"

    # OCR (tesseract)
    ocr_languages: str = "eng"             # e.g. "eng+ara"
    ocr_engine_mode: int = 1               # --oem (LSTM only)
    ocr_page_segmentation_mode: int = 6    # --psm (uniform block of text)
    render_zoom: float = 3.0               # ~216 dpi; 4.0 is more accurate but much slower

    # Translation
    source_language: str = "auto"
    target_language: str = "ar"
    max_chunk_chars: int = 3500            # Per-request ceiling of the translation back-end
    translation_workers: int = 1           # >1 translates chunks in parallel (order preserved)

    # Replies
    max_reply_chars: int = 3500            # Longer translations are sent as .txt documents

    # Generated pages
    max_page_chars: Optional[int] = None   # None = derive from page geometry
    page_margin: float = 40.0
    header_font_size: float = 11.0
    body_font_size: float = 12.0
    line_height: float = 1.2

    # Placeholders
    no_text_placeholder: str = "(No text found on this page)"
    image_no_text_placeholder: str = "(No text found)"
    no_translation_placeholder: str = DEFAULT_NO_TRANSLATION_PLACEHOLDER

    # Presentation conversion API (disabled when unset)
    start_task_url: Optional[str] = None
    request_timeout: int = 120             # Seconds

    # Worker pool for blocking OCR / translation / assembly work
    worker_threads: int = 4

    # Logging
    log_level: str = "INFO"
    log_file: Optional[str] = None

    @classmethod
    def from_env(
        cls,
        environ: Optional[Mapping[str, str]] = None,
        dotenv_path: Optional[Path] = None,
    ) -> "BotSettings":
        """Build settings from environment variables.

        When environ is None, a .env file (dotenv_path or the nearest one) is
        loaded first without overriding variables that are already set, and
        os.environ is used.

        Args:
            environ: Mapping to read instead of os.environ (tests)
            dotenv_path: Explicit .env file location
        """
        if environ is None:
            load_dotenv(dotenv_path=dotenv_path, override=False)
            environ = os.environ

        settings = cls(
            bot_token=_env_str(environ, "BOT_TOKEN", None),
            webhook_url=_env_str(environ, "WEBHOOK_URL", None),
            listen_address=_env_str(environ, "LISTEN_ADDRESS", cls.listen_address),
            port=_env_int(environ, "PORT", cls.port),
            rtl_font_path=_env_str(
                environ, "ARABIC_FONT",
                _env_str(environ, "RTL_FONT", cls.rtl_font_path),
            ),
            ocr_languages=_env_str(environ, "TESS_LANGS", cls.ocr_languages),
            ocr_engine_mode=_env_int(environ, "OCR_ENGINE_MODE", cls.ocr_engine_mode),
            ocr_page_segmentation_mode=_env_int(
                environ, "OCR_PAGE_SEGMENTATION_MODE", cls.ocr_page_segmentation_mode
            ),
            render_zoom=_env_float(environ, "RENDER_ZOOM", cls.render_zoom),
            source_language=_env_str(environ, "SOURCE_LANGUAGE", cls.source_language),
            target_language=_env_str(environ, "TARGET_LANGUAGE", cls.target_language),
            max_chunk_chars=_env_int(environ, "MAX_CHUNK_CHARS", cls.max_chunk_chars),
            translation_workers=_env_int(
                environ, "TRANSLATION_WORKERS", cls.translation_workers
            ),
            max_reply_chars=_env_int(environ, "MAX_REPLY_CHARS", cls.max_reply_chars),
            max_page_chars=_env_optional_int(environ, "MAX_PAGE_CHARS"),
            no_translation_placeholder=_env_str(
                environ, "NO_TRANSLATION_PLACEHOLDER", cls.no_translation_placeholder
            ),
            start_task_url=_env_str(environ, "START_TASK_URL", None),
            request_timeout=_env_int(environ, "REQUEST_TIMEOUT", cls.request_timeout),
            worker_threads=_env_int(environ, "WORKER_THREADS", cls.worker_threads),
            log_level=_env_str(environ, "LOG_LEVEL", cls.log_level).upper(),
            log_file=_env_str(environ, "LOG_FILE", None),
        )
        settings._validate()
        logger.debug(
            "Loaded settings: target=%s, ocr=%s, webhook=%s, conversion=%s",
            settings.target_language,
            settings.ocr_languages,
            bool(settings.webhook_url),
            bool(settings.start_task_url),
        )
        return settings

    def _validate(self) -> None:
        """Validate and normalize setting values for consistency.

        Invalid values are reset to defaults with warnings.
        """
        if self.webhook_url:
            self.webhook_url = self.webhook_url.rstrip("/")

        if not 1 <= self.port <= 65535:
            logger.warning("port out of range (%d), resetting to 8080", self.port)
            self.port = 8080

        if self.render_zoom < 1.0 or self.render_zoom > 6.0:
            logger.warning("render_zoom out of range (%.1f), resetting to 3.0", self.render_zoom)
            self.render_zoom = 3.0

        # Translation back-ends reject requests above ~5000 characters
        if self.max_chunk_chars < 100 or self.max_chunk_chars > 5000:
            logger.warning("max_chunk_chars out of range (%d), resetting to 3500", self.max_chunk_chars)
            self.max_chunk_chars = 3500

        # Telegram rejects messages above 4096 characters
        if self.max_reply_chars < 1 or self.max_reply_chars > 4096:
            logger.warning("max_reply_chars out of range (%d), resetting to 3500", self.max_reply_chars)
            self.max_reply_chars = 3500

        if self.max_page_chars is not None and self.max_page_chars < 1:
            logger.warning("max_page_chars must be positive (%d), deriving from geometry", self.max_page_chars)
            self.max_page_chars = None

        if self.translation_workers < 1:
            self.translation_workers = 1
        if self.worker_threads < 1:
            self.worker_threads = 4

        if self.request_timeout < 10:
            logger.warning("request_timeout too small (%d), resetting to 120", self.request_timeout)
            self.request_timeout = 120
        elif self.request_timeout > 1800:
            logger.warning("request_timeout too large (%d), resetting to 120", self.request_timeout)
            self.request_timeout = 120

        if self.log_level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            logger.warning("Unknown log_level %r, using INFO", self.log_level)
            self.log_level = "INFO"

    def require_bot_token(self) -> str:
        """Return the bot token or raise ConfigMissingError.

        Called before the transport is built so a misconfigured process
        stops before accepting any request.
        """
        if not self.bot_token:
            raise ConfigMissingError("BOT_TOKEN")
        return self.bot_token

    @property
    def conversion_enabled(self) -> bool:
        """True when presentation conversion can be used"""
        return bool(self.start_task_url)

    @property
    def reply_document_name(self) -> str:
        """Filename for translations too long for a text message"""
        return f"translation_{self.target_language}.txt"
