# docrelay/services/__init__.py
"""
Service layer for docrelay.

Heavy service imports are lazy-loaded for faster startup.
Use explicit imports like:
    from docrelay.services.relay_service import RelayService
"""

# Fast imports - error taxonomy
from .exceptions import (
    RelayError,
    InputRejectedError,
    UpstreamCallFailedError,
    PageExtractionError,
    AssemblyFailedError,
    ConfigMissingError,
)

# Lazy-loaded services via __getattr__
_LAZY_IMPORTS = {
    'RelayService': 'relay_service',
    'ChunkedTranslator': 'translation_service',
    'GoogleTranslateBackend': 'translation_service',
    'TranslationBackend': 'translation_service',
    'ConversionClient': 'conversion_client',
    'ConversionTask': 'conversion_client',
}

# Submodules that can be accessed via __getattr__ (for patching support)
_SUBMODULES = {'relay_service', 'translation_service', 'conversion_client', 'exceptions'}


def __getattr__(name: str):
    """Lazy-load heavy service modules on first access."""
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
    'RelayError',
    'InputRejectedError',
    'UpstreamCallFailedError',
    'PageExtractionError',
    'AssemblyFailedError',
    'ConfigMissingError',
    'RelayService',
    'ChunkedTranslator',
    'GoogleTranslateBackend',
    'TranslationBackend',
    'ConversionClient',
    'ConversionTask',
]
