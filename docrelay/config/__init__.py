"""
Configuration for docrelay.
"""

from .settings import BotSettings

__all__ = ['BotSettings']
