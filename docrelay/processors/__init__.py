# docrelay/processors/__init__.py
"""
File processors for docrelay.

Heavy processor imports (PyMuPDF, tesseract, translation back-ends) are
lazy-loaded. Use explicit imports like:
    from docrelay.processors.pdf_processor import PdfProcessor
"""

# Fast imports - base classes and pure-text helpers
from .base import FileProcessor
from .paginator import estimate_page_capacity, paginate, paginate_text

# Lazy-loaded processors via __getattr__
_LAZY_IMPORTS = {
    'PdfProcessor': 'pdf_processor',
    'ImageProcessor': 'image_processor',
    'PresentationProcessor': 'presentation_processor',
    'TextExtractor': 'text_extractor',
    'TesseractOcr': 'ocr',
    'RtlShaper': 'rtl_shaper',
}

# Submodules that can be accessed via __getattr__ (for patching support)
_SUBMODULES = {'pdf_processor', 'image_processor', 'presentation_processor', 'text_extractor',
               'ocr', 'rtl_shaper', 'paginator', 'font_manager', 'base'}


def __getattr__(name: str):
    """Lazy-load heavy processor modules on first access."""
    import importlib
    # Support accessing submodules directly (for unittest.mock.patch)
    if name in _SUBMODULES:
        return importlib.import_module(f'.{name}', __package__)
    if name in _LAZY_IMPORTS:
        module_name = _LAZY_IMPORTS[name]
        module = importlib.import_module(f'.{module_name}', __package__)
        return getattr(module, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    'FileProcessor',
    'estimate_page_capacity',
    'paginate',
    'paginate_text',
    'PdfProcessor',
    'ImageProcessor',
    'PresentationProcessor',
    'TextExtractor',
    'TesseractOcr',
    'RtlShaper',
]
