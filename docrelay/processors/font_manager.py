# docrelay/processors/font_manager.py
"""
Font resolution for generated translation pages.

PyMuPDF's Base-14 fonts have no Arabic glyphs, so generated pages embed a
TrueType font that covers the target script. Lookup order:
1. The configured font file (BotSettings.rtl_font_path)
2. Well-known RTL-capable fonts in the system font directories
3. None (Base-14 Helvetica; non-Latin text may render blank)
"""

import logging
import os
import platform
from typing import Optional

# Module logger
logger = logging.getLogger(__name__)


# =============================================================================
# Font Path Cache (module-level for performance)
# =============================================================================
# Cache for font file path lookups (font_name -> path or None)
_font_path_cache: dict[str, Optional[str]] = {}


# =============================================================================
# Lazy Imports
# =============================================================================
_pymupdf = None


def _get_pymupdf():
    """Lazy import PyMuPDF"""
    global _pymupdf
    if _pymupdf is None:
        import pymupdf
        _pymupdf = pymupdf
    return _pymupdf


# Reference name for the embedded font inside generated pages.
# Must not collide with a Base-14 name, otherwise PyMuPDF ignores the file.
EMBEDDED_FONT_NAME = "rtlfont"
FALLBACK_FONT_NAME = "helv"

# Font files able to render Arabic script, in priority order
RTL_FONT_FILES = [
    "Amiri-Regular.ttf",
    "NotoNaskhArabic-Regular.ttf",
    "NotoSansArabic-Regular.ttf",
    "DejaVuSans.ttf",
    "FreeSans.ttf",
]


# =============================================================================
# Font Path Resolution (Cross-Platform)
# =============================================================================
def _get_system_font_dirs() -> list[str]:
    """
    Get system font directories based on OS.

    Returns:
        List of font directory paths
    """
    system = platform.system()

    if system == "Windows":
        windir = os.environ.get("WINDIR", "C:\\Windows")
        return [os.path.join(windir, "Fonts")]
    elif system == "Darwin":  # macOS
        return [
            "/System/Library/Fonts",
            "/Library/Fonts",
            os.path.expanduser("~/Library/Fonts"),
        ]
    else:  # Linux and others
        return [
            "/usr/share/fonts",
            "/usr/local/share/fonts",
            os.path.expanduser("~/.fonts"),
            os.path.expanduser("~/.local/share/fonts"),
        ]


def _search_font_dir(font_dir: str, font_name: str, depth: int = 2) -> Optional[str]:
    """Look for font_name in font_dir and up to `depth` levels of subdirectories."""
    direct_path = os.path.join(font_dir, font_name)
    if os.path.isfile(direct_path):
        return direct_path
    if depth <= 0:
        return None
    try:
        entries = os.listdir(font_dir)
    except (PermissionError, FileNotFoundError):
        return None
    for entry in entries:
        subdir_path = os.path.join(font_dir, entry)
        if os.path.isdir(subdir_path):
            found = _search_font_dir(subdir_path, font_name, depth - 1)
            if found:
                return found
    return None


def _find_font_file(font_names: list[str]) -> Optional[str]:
    """
    Search for font file in system font directories.

    Uses module-level cache to avoid repeated filesystem lookups.

    Args:
        font_names: List of font file names to search for (in priority order)

    Returns:
        Full path to font file if found, None otherwise
    """
    cache_key = "|".join(font_names)
    if cache_key in _font_path_cache:
        return _font_path_cache[cache_key]

    font_dirs = [d for d in _get_system_font_dirs() if os.path.isdir(d)]
    result = None

    for font_name in font_names:
        if font_name in _font_path_cache:
            result = _font_path_cache[font_name]
        else:
            for font_dir in font_dirs:
                result = _search_font_dir(font_dir, font_name)
                if result:
                    break
            _font_path_cache[font_name] = result
        if result:
            break

    _font_path_cache[cache_key] = result
    return result


def resolve_rtl_font(configured_path: Optional[str], search_system: bool = True) -> Optional[str]:
    """
    Resolve the font file to embed into generated pages.

    Args:
        configured_path: Font path from settings (may be None or missing)
        search_system: Also look for known RTL fonts in system directories

    Returns:
        Path to a font file, or None to fall back to Base-14 Helvetica
    """
    if configured_path and os.path.isfile(configured_path):
        return configured_path

    if configured_path:
        logger.warning("Configured RTL font not found: %s", configured_path)

    if search_system:
        found = _find_font_file(RTL_FONT_FILES)
        if found:
            logger.info("Using system RTL font: %s", found)
            return found

    logger.warning(
        "No RTL-capable font available; generated pages use %s and may not render the target script",
        FALLBACK_FONT_NAME,
    )
    return None


def get_font_reference(font_path: Optional[str]) -> tuple[str, Optional[str]]:
    """
    Get (fontname, fontfile) arguments for Page.insert_textbox.

    Args:
        font_path: Resolved font file, or None

    Returns:
        Tuple of reference name and font file (None for Base-14)
    """
    if font_path:
        return EMBEDDED_FONT_NAME, font_path
    return FALLBACK_FONT_NAME, None


def clear_font_cache() -> None:
    """Forget cached system font lookups."""
    _font_path_cache.clear()
