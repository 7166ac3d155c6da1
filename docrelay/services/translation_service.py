# docrelay/services/translation_service.py
"""
Chunked machine translation.

Translation back-ends cap the length of a single request, so input is packed
into paragraph-aligned chunks below the cap, each chunk is translated with an
independent (stateless) call, and the results are joined in order.
"""

import logging
from abc import ABC, abstractmethod
from concurrent.futures import ThreadPoolExecutor
from typing import Optional, TYPE_CHECKING

import requests
from deep_translator import GoogleTranslator
from deep_translator.exceptions import BaseError, RequestError, ServerException, TooManyRequests

from docrelay.services.exceptions import UpstreamCallFailedError

if TYPE_CHECKING:
    from docrelay.config.settings import BotSettings

# Module logger
logger = logging.getLogger(__name__)

DEFAULT_MAX_CHUNK_CHARS = 3500
CHUNK_JOIN_SEPARATOR = "\n\n"


def split_into_chunks(text: str, max_chunk_chars: int = DEFAULT_MAX_CHUNK_CHARS) -> list[str]:
    """
    Split text into chunks of at most max_chunk_chars characters.

    Paragraphs (non-empty trimmed lines) are packed greedily, joined by "\\n".
    A paragraph longer than max_chunk_chars is hard-split into fixed-size
    slices, each its own chunk; word boundaries are not preserved there.

    Args:
        text: Input text (trimmed here)
        max_chunk_chars: Per-chunk character ceiling

    Returns:
        Chunks in input order ([] for empty or whitespace-only text)
    """
    if max_chunk_chars < 1:
        raise ValueError(f"max_chunk_chars must be positive, got {max_chunk_chars}")

    paragraphs = [p.strip() for p in (text or "").strip().split("\n") if p.strip()]
    chunks: list[str] = []
    buf = ""

    for paragraph in paragraphs:
        candidate_len = len(paragraph) if not buf else len(buf) + 1 + len(paragraph)
        if candidate_len <= max_chunk_chars:
            buf = paragraph if not buf else f"{buf}\n{paragraph}"
            continue

        if buf:
            chunks.append(buf)
            buf = ""

        if len(paragraph) <= max_chunk_chars:
            buf = paragraph
        else:
            for start in range(0, len(paragraph), max_chunk_chars):
                chunks.append(paragraph[start:start + max_chunk_chars])

    if buf:
        chunks.append(buf)

    return chunks


class TranslationBackend(ABC):
    """
    A stateless string-in/string-out translation service.
    """

    name: str = "translation"

    @abstractmethod
    def translate(self, text: str) -> str:
        """
        Translate one chunk.

        Raises:
            UpstreamCallFailedError: the service call failed
        """
        pass


class GoogleTranslateBackend(TranslationBackend):
    """
    Google Translate via deep-translator.

    A new GoogleTranslator is created per call: the client keeps the request
    payload on the instance, so one instance must not be shared between threads.
    """

    name = "google"

    def __init__(self, source: str = "auto", target: str = "ar"):
        self.source = source
        self.target = target

    def _make_client(self) -> GoogleTranslator:
        return GoogleTranslator(source=self.source, target=self.target)

    def translate(self, text: str) -> str:
        try:
            result = self._make_client().translate(text)
        except (BaseError, RequestError, ServerException, TooManyRequests) as e:
            raise UpstreamCallFailedError(self.name, f"translation failed: {e}") from e
        except requests.RequestException as e:
            raise UpstreamCallFailedError(self.name, f"translation request failed: {e}") from e
        return result or ""


class ChunkedTranslator:
    """
    Translates arbitrary-length text through a length-capped back-end.
    """

    def __init__(
        self,
        backend: TranslationBackend,
        max_chunk_chars: int = DEFAULT_MAX_CHUNK_CHARS,
        workers: int = 1,
    ):
        self.backend = backend
        self.max_chunk_chars = max_chunk_chars
        self.workers = max(1, workers)

    @classmethod
    def from_settings(
        cls,
        settings: "BotSettings",
        backend: Optional[TranslationBackend] = None,
    ) -> "ChunkedTranslator":
        if backend is None:
            backend = GoogleTranslateBackend(
                source=settings.source_language,
                target=settings.target_language,
            )
        return cls(
            backend,
            max_chunk_chars=settings.max_chunk_chars,
            workers=settings.translation_workers,
        )

    def translate(self, text: str) -> str:
        """
        Translate text chunk by chunk.

        Returns:
            Translated chunks joined by a blank line, trimmed.
            "" for empty input (no back-end call).

        Raises:
            UpstreamCallFailedError: any chunk failed (no partial result)
        """
        chunks = split_into_chunks(text, self.max_chunk_chars)
        if not chunks:
            return ""

        logger.debug(
            "Translating %d chars in %d chunk(s) via %s",
            sum(len(c) for c in chunks), len(chunks), self.backend.name,
        )

        if self.workers > 1 and len(chunks) > 1:
            with ThreadPoolExecutor(
                max_workers=min(self.workers, len(chunks)),
                thread_name_prefix="translate-chunk",
            ) as executor:
                # map() yields results in submission order
                translated = list(executor.map(self._translate_chunk, chunks))
        else:
            translated = [self._translate_chunk(chunk) for chunk in chunks]

        return CHUNK_JOIN_SEPARATOR.join(translated).strip()

    def _translate_chunk(self, chunk: str) -> str:
        return (self.backend.translate(chunk) or "").strip()
