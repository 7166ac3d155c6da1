# docrelay/processors/rtl_shaper.py
"""
RTL text shaping for renderers that only lay out left-to-right.

PyMuPDF places glyphs in logical order and does no Arabic joining, so each
line is reshaped (contextual letter forms, harakat kept) and then reordered
into visual order with the Unicode bidirectional algorithm.
"""

import arabic_reshaper
from bidi.algorithm import get_display


class RtlShaper:
    """
    Line-by-line reshaping + bidi reordering.
    Line count and blank lines are preserved.
    """

    def __init__(self, keep_harakat: bool = True):
        self._reshaper = arabic_reshaper.ArabicReshaper(
            configuration={"delete_harakat": not keep_harakat}
        )

    def shape_line(self, line: str) -> str:
        """Reshape then reorder a single line."""
        return get_display(self._reshaper.reshape(line))

    def shape(self, text: str) -> str:
        """
        Shape every line of text.

        Blank (whitespace-only) lines are passed through unchanged so the
        output has the same number of lines at the same indices.
        """
        out_lines = []
        for line in text.split("\n"):
            if not line.strip():
                out_lines.append(line)
                continue
            out_lines.append(self.shape_line(line))
        return "\n".join(out_lines)
