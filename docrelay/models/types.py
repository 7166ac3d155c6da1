# docrelay/models/types.py
"""
Core data types for the docrelay pipeline.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional


class FileType(Enum):
    """Supported inbound payload kinds"""
    PDF = "pdf"
    IMAGE = "image"
    TEXT = "text"
    PRESENTATION = "presentation"

    @property
    def label(self) -> str:
        """Name used in user-facing messages"""
        return "PDF" if self is FileType.PDF else self.value

    @property
    def extensions(self) -> tuple[str, ...]:
        """File extensions (lowercase, with dot) recognized for this kind"""
        return FILE_EXTENSIONS.get(self, ())


FILE_EXTENSIONS: dict[FileType, tuple[str, ...]] = {
    FileType.PDF: ('.pdf',),
    FileType.IMAGE: ('.jpg', '.jpeg', '.png', '.webp', '.bmp', '.gif', '.tif', '.tiff'),
    FileType.PRESENTATION: ('.ppt', '.pptx'),
}


class ReplyKind(Enum):
    """How a result is delivered back through the transport"""
    TEXT = "text"
    DOCUMENT = "document"


class AssemblyState(Enum):
    """Document Assembler progress over the page index"""
    NOT_STARTED = "not_started"
    PROCESSING_PAGE = "processing_page"
    FINALIZING = "finalizing"
    DONE = "done"
    FAILED = "failed"


@dataclass(frozen=True)
class SourcePage:
    """
    One page of the input document.
    Owned by the source document and never mutated.
    """
    index: int                       # 0-based
    width: float
    height: float
    embedded_text: str = ""          # Selectable text (may be empty)


@dataclass(frozen=True)
class PaginatedChunk:
    """
    A slice of a translation that fits one generated page.
    """
    text: str
    ordinal: int                     # 1-based
    total: int                       # Chunk count for the parent string

    @property
    def header_label(self) -> str:
        """"(j/total)" label used in generated page headers"""
        return f"({self.ordinal}/{self.total})"


@dataclass
class PagePlan:
    """
    Everything needed to emit the output pages for one source page:
    the copied original plus one generated page per chunk.
    """
    page: SourcePage
    extracted_text: str
    translated_text: str
    chunks: list[PaginatedChunk] = field(default_factory=list)

    @property
    def generated_page_count(self) -> int:
        return len(self.chunks)


@dataclass
class AssemblyResult:
    """
    Statistics of one Document Assembler run.
    """
    output_path: Path
    source_pages: int = 0
    generated_pages: int = 0
    state: AssemblyState = AssemblyState.NOT_STARTED

    @property
    def total_pages(self) -> int:
        return self.source_pages + self.generated_pages


@dataclass
class ProcessedFile:
    """
    Output of a file processor: a document to send back, a translated text,
    or both source and translated text (image OCR).
    """
    file_type: FileType
    output_path: Optional[Path] = None      # Generated document, if any
    output_name: Optional[str] = None       # Suggested filename for output_path
    text: Optional[str] = None              # Translated text, if any
    source_text: Optional[str] = None       # Extracted source text, if any
    page_count: int = 0                     # Output page count (documents)

    @property
    def has_document(self) -> bool:
        return self.output_path is not None


@dataclass
class InboundRequest:
    """
    A payload delivered by the messaging transport, already downloaded.
    """
    file_type: FileType
    work_dir: Path                   # Request-scoped temporary directory
    file_path: Optional[Path] = None # None for plain text
    file_name: Optional[str] = None  # Name suggested by the sender
    text: Optional[str] = None       # Plain text body / caption

    @property
    def display_name(self) -> str:
        if self.file_name:
            return self.file_name
        if self.file_path is not None:
            return self.file_path.name
        return self.file_type.value


@dataclass
class BotReply:
    """
    What to send back: either a text message or a document.
    """
    kind: ReplyKind
    text: Optional[str] = None
    document_path: Optional[Path] = None
    filename: Optional[str] = None
    follow_up: Optional[str] = None  # Text sent after a document reply
    is_error: bool = False

    @classmethod
    def text_reply(cls, text: str, is_error: bool = False) -> "BotReply":
        return cls(kind=ReplyKind.TEXT, text=text, is_error=is_error)

    @classmethod
    def document_reply(
        cls,
        document_path: Path,
        filename: str,
        follow_up: Optional[str] = None,
    ) -> "BotReply":
        return cls(
            kind=ReplyKind.DOCUMENT,
            document_path=document_path,
            filename=filename,
            follow_up=follow_up,
        )

    @property
    def is_document(self) -> bool:
        return self.kind == ReplyKind.DOCUMENT
