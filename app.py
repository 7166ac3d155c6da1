#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
docrelay - Telegram OCR / translation / conversion relay bot

Entry point: loads settings, configures logging and runs the bot
(long polling, or webhook when WEBHOOK_URL is set).
"""

import logging
import sys
from pathlib import Path
from typing import Optional

# Add project root to path
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))

from docrelay.config.settings import BotSettings  # noqa: E402
from docrelay.services.exceptions import ConfigMissingError  # noqa: E402

LOG_FORMAT = '%(asctime)s [%(levelname)s] %(name)s: %(message)s'

# Third-party loggers that log every request / poll
NOISY_LOGGERS = ['httpx', 'httpcore', 'telegram', 'telegram.ext', 'urllib3', 'PIL', 'asyncio']


def setup_logging(settings: BotSettings) -> tuple[logging.Handler, Optional[logging.Handler]]:
    """Configure logging to console and (optionally) a UTF-8 log file.

    Returns:
        tuple: (console_handler, file_handler) to keep references alive
    """
    level = getattr(logging, settings.log_level, logging.INFO)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt='%H:%M:%S'))

    file_handler = None
    if settings.log_file:
        log_file_path = Path(settings.log_file)
        try:
            log_file_path.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(log_file_path, mode='a', encoding='utf-8')
            file_handler.setLevel(logging.DEBUG)
            file_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt='%Y-%m-%d %H:%M:%S'))
        except OSError as e:
            # Fall back to console-only logging
            print(f"[WARNING] Failed to create log file {log_file_path}: {e}", file=sys.stderr)
            file_handler = None

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG if file_handler else level)
    # Remove existing handlers that might interfere
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
    root_logger.addHandler(console_handler)
    if file_handler:
        root_logger.addHandler(file_handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logger = logging.getLogger(__name__)
    logger.info("=" * 60)
    logger.info("docrelay starting...")
    logger.info("=" * 60)
    if file_handler:
        logger.info("Log file: %s", settings.log_file)

    return console_handler, file_handler


def main():
    """Main entry point"""
    settings = BotSettings.from_env()
    setup_logging(settings)
    logger = logging.getLogger(__name__)

    try:
        settings.require_bot_token()
    except ConfigMissingError as e:
        logger.critical("Cannot start: %s", e)
        raise

    logger.info(
        "Target language: %s, OCR languages: %s, presentation conversion: %s",
        settings.target_language,
        settings.ocr_languages,
        "on" if settings.conversion_enabled else "off",
    )

    from docrelay.bot.app import RelayBot
    RelayBot(settings).run()


if __name__ == '__main__':
    main()
