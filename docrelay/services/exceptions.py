# docrelay/services/exceptions.py
"""
Error taxonomy shared by processors, services and the bot layer.

Every per-request failure is a RelayError so the request handler has a single
type to catch. ConfigMissingError is raised only at startup.
"""

from typing import Optional


class RelayError(Exception):
    """Base class for failures while handling one request."""

    pass


class InputRejectedError(RelayError):
    """Raised when the inbound payload kind or extension is not supported.

    The message is the user-facing reason.
    """

    pass


class UpstreamCallFailedError(RelayError):
    """Raised when a translation, OCR or conversion back-end call fails."""

    def __init__(self, service: str, message: str):
        super().__init__(message)
        self.service = service


class PageExtractionError(UpstreamCallFailedError):
    """Raised when OCR or rasterization of a single PDF page fails."""

    def __init__(self, page_index: int, message: str):
        super().__init__("ocr", f"page {page_index + 1}: {message}")
        self.page_index = page_index


class AssemblyFailedError(RelayError):
    """Raised when a document cannot be read or written."""

    def __init__(self, message: str, page_index: Optional[int] = None):
        super().__init__(message)
        self.page_index = page_index


class ConfigMissingError(Exception):
    """Raised at startup when a required setting is absent."""

    def __init__(self, setting: str):
        super().__init__(f"{setting} is missing!")
        self.setting = setting
