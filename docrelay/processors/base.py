# docrelay/processors/base.py
"""
Abstract base class for file processors.
"""

from abc import ABC, abstractmethod
from pathlib import Path

from docrelay.models.types import FileType, ProcessedFile


class FileProcessor(ABC):
    """
    Abstract base class for file processors.
    Each inbound payload kind (PDF, image, presentation) implements this interface.
    """

    @property
    @abstractmethod
    def file_type(self) -> FileType:
        """Return the file type this processor handles"""
        pass

    @property
    def supported_extensions(self) -> list[str]:
        """Return list of supported file extensions"""
        return list(self.file_type.extensions)

    @abstractmethod
    def process(self, input_path: Path, work_dir: Path) -> ProcessedFile:
        """
        Run the processor on one downloaded file.

        Blocking and potentially slow (OCR, network calls); callers must run
        it off the event loop.

        Args:
            input_path: Path to the downloaded input file
            work_dir: Request-scoped directory for output files

        Returns:
            ProcessedFile with a generated document and/or translated text

        Raises:
            RelayError: on any failure (no partial output is returned)
        """
        pass

    def supports_extension(self, extension: str) -> bool:
        """Check if this processor supports the given file extension"""
        return extension.lower() in self.supported_extensions

    @staticmethod
    def has_text(text: str) -> bool:
        """True if text has any non-whitespace content."""
        return bool(text and text.strip())
