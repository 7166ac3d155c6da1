# docrelay/processors/paginator.py
"""
Split long translations into page-sized pieces.

Text is first word-wrapped into rows that fit the text box (wrap_text), so
every row is rendered as one visual line. Pagination then splits at row
boundaries, bounded by both a character capacity and the number of rows the
box holds; a single row longer than the character capacity is hard-wrapped
and its remainder continues on the next page. No characters are dropped or
duplicated by pagination.
"""

from typing import Callable, Optional

from docrelay.models.types import PaginatedChunk

# Average glyph advance of Naskh-style Arabic fonts, in em
AVG_CHAR_WIDTH_EM = 0.5
# Word wrapping leaves the end of most lines empty
FILL_RATIO = 0.6
# Space reserved above the text box for the page header
HEADER_SPACE = 10.0


def estimate_page_capacity(
    width: float,
    height: float,
    margin: float = 40.0,
    font_size: float = 12.0,
    line_height: float = 1.2,
) -> int:
    """
    Estimate how many characters fit into the text box of a generated page.

    The text box spans the page minus margins, with HEADER_SPACE reserved
    below the top margin for the header line.

    Returns:
        Character capacity (at least 1)
    """
    box_width = max(width - 2 * margin, 0.0)
    box_height = max(height - 2 * margin - HEADER_SPACE, 0.0)
    chars_per_line = int(box_width / (font_size * AVG_CHAR_WIDTH_EM))
    lines_per_page = int(box_height / (font_size * line_height))
    return max(1, int(chars_per_line * lines_per_page * FILL_RATIO))


def estimate_lines_per_page(
    height: float,
    margin: float = 40.0,
    font_size: float = 12.0,
    line_height: float = 1.2,
) -> int:
    """
    Rows that fit into the text box of a generated page.

    One row is held back for the first line's ascent and the last line's
    descent, which the text box also has to hold.
    """
    box_height = max(height - 2 * margin - HEADER_SPACE, 0.0)
    return max(1, int(box_height / (font_size * line_height)) - 1)


def wrap_line(line: str, max_width: float, measure: Callable[[str], float]) -> list[str]:
    """
    Word-wrap one logical line into rows no wider than max_width.

    Rows keep logical (reading) order. Words are measured one at a time,
    which matches the shaped width since Arabic joining never crosses a
    space. A word wider than a whole row is broken between characters.

    Args:
        line: Logical line (no newlines)
        max_width: Row width in points
        measure: Rendered width of a string in points

    Returns:
        Non-empty list of rows; blank lines come back unchanged
    """
    words = line.split()
    if not words or measure(line) <= max_width:
        return [line]

    space = measure(" ")
    rows: list[str] = []
    current: list[str] = []
    width = 0.0

    for word in words:
        word_width = measure(word)
        needed = word_width if not current else width + space + word_width
        if needed <= max_width:
            current.append(word)
            width = needed
            continue

        if current:
            rows.append(" ".join(current))
            current = []

        while word_width > max_width and len(word) > 1:
            cut = len(word) - 1
            while cut > 1 and measure(word[:cut]) > max_width:
                cut -= 1
            rows.append(word[:cut])
            word = word[cut:]
            word_width = measure(word)

        current = [word]
        width = word_width

    if current:
        rows.append(" ".join(current))
    return rows


def wrap_text(text: str, max_width: float, measure: Callable[[str], float]) -> str:
    """Word-wrap every line of text; rows are joined with newlines."""
    rows: list[str] = []
    for line in text.split("\n"):
        rows.extend(wrap_line(line, max_width, measure))
    return "\n".join(rows)


def paginate_text(text: str, capacity: int, max_lines: Optional[int] = None) -> list[str]:
    """
    Split text into pages of at most `capacity` characters.

    Args:
        text: Text to split (not trimmed)
        capacity: Maximum characters per page (newlines count)
        max_lines: Maximum lines per page (None for no limit)

    Returns:
        Non-empty list of pages. "" yields [""].
    """
    if capacity < 1:
        raise ValueError(f"capacity must be positive, got {capacity}")
    if max_lines is not None and max_lines < 1:
        raise ValueError(f"max_lines must be positive, got {max_lines}")

    if len(text) <= capacity and (max_lines is None or text.count("\n") < max_lines):
        return [text]

    pages: list[str] = []
    buf: list[str] = []
    buf_len = 0

    def flush():
        nonlocal buf, buf_len
        if buf:
            pages.append("\n".join(buf))
        buf = []
        buf_len = 0

    for line in text.split("\n"):
        # Hard-wrap oversized lines; the remainder (<= capacity) carries on
        while len(line) > capacity:
            flush()
            pages.append(line[:capacity])
            line = line[capacity:]

        added = len(line) + (1 if buf else 0)
        page_full = max_lines is not None and len(buf) >= max_lines
        if buf and (buf_len + added > capacity or page_full):
            flush()
            added = len(line)
        buf.append(line)
        buf_len += added

    flush()
    return pages or [""]


def paginate(text: str, capacity: int, max_lines: Optional[int] = None) -> list[PaginatedChunk]:
    """
    Split text into numbered chunks, one per generated page.

    Always returns at least one chunk so callers have a page to put a
    placeholder on.
    """
    pages = paginate_text(text, capacity, max_lines)
    total = len(pages)
    return [
        PaginatedChunk(text=page, ordinal=i, total=total)
        for i, page in enumerate(pages, start=1)
    ]
