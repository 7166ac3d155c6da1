# docrelay/bot/__init__.py
"""
Telegram transport for docrelay.

python-telegram-bot is imported lazily:
    from docrelay.bot.app import RelayBot
"""

_LAZY_IMPORTS = {
    'RelayBot': 'app',
}

_SUBMODULES = {'app'}


def __getattr__(name: str):
    """Lazy-load the transport module on first access."""
    import importlib
    if name in _SUBMODULES:
        return importlib.import_module(f'.{name}', __package__)
    if name in _LAZY_IMPORTS:
        module = importlib.import_module(f'.{_LAZY_IMPORTS[name]}', __package__)
        return getattr(module, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = ['RelayBot']
