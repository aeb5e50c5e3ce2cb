"""Core configuration and factory components."""

from docgen.core.config import Settings, get_settings

__all__ = [
    "Settings",
    "get_settings",
]
