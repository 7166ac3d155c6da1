# docrelay/processors/presentation_processor.py
"""
Presentation processor: PPT/PPTX -> PDF through the conversion API.
"""

import logging
import re
from pathlib import Path
from typing import Optional, TYPE_CHECKING

from docrelay.models.types import FileType, ProcessedFile
from docrelay.processors.base import FileProcessor
from docrelay.services.exceptions import InputRejectedError

if TYPE_CHECKING:
    from docrelay.services.conversion_client import ConversionClient

# Module logger
logger = logging.getLogger(__name__)

_RE_PRESENTATION_EXT = re.compile(r"\.(ppt|pptx)$", re.IGNORECASE)


def converted_pdf_name(file_name: str) -> str:
    """deck.pptx -> deck.pdf"""
    return _RE_PRESENTATION_EXT.sub(".pdf", file_name)


class PresentationProcessor(FileProcessor):
    """
    Converts slide decks to PDF; no translation involved.
    """

    def __init__(self, client: Optional["ConversionClient"]):
        self.client = client

    @property
    def file_type(self) -> FileType:
        return FileType.PRESENTATION

    def process(self, input_path: Path, work_dir: Path) -> ProcessedFile:
        """
        Convert one presentation.

        The input file keeps the name the user sent, which is also what the
        conversion API sees.

        Raises:
            InputRejectedError: not a PPT/PPTX file, or conversion is not configured
            UpstreamCallFailedError: conversion API failure
        """
        file_name = input_path.name
        if not self.supports_extension(input_path.suffix):
            raise InputRejectedError("Only PPT/PPTX files are allowed.")
        if self.client is None:
            raise InputRejectedError("Presentation conversion is not enabled on this bot.")

        pdf_bytes = self.client.convert(input_path, file_name)

        output_name = converted_pdf_name(file_name)
        output_path = work_dir / f"converted_{output_name}"
        output_path.write_bytes(pdf_bytes)
        logger.info("Presentation %s converted (%d bytes)", file_name, len(pdf_bytes))

        return ProcessedFile(
            file_type=FileType.PRESENTATION,
            output_path=output_path,
            output_name=output_name,
        )
