"""
Data models for docrelay.
"""

from .types import (
    FileType,
    ReplyKind,
    AssemblyState,
    SourcePage,
    PaginatedChunk,
    PagePlan,
    AssemblyResult,
    ProcessedFile,
    InboundRequest,
    BotReply,
)

__all__ = [
    'FileType',
    'ReplyKind',
    'AssemblyState',
    'SourcePage',
    'PaginatedChunk',
    'PagePlan',
    'AssemblyResult',
    'ProcessedFile',
    'InboundRequest',
    'BotReply',
]
