"""
Configuration package for the lodging reservation engine.

Environment settings and logging setup.
"""

from lodging.config.settings import Settings, get_settings, settings

__all__ = ['settings', 'Settings', 'get_settings']
