"""Concrete template storage implementations."""

from docgen.strategies.storage.local import LocalFileStorage

__all__ = [
    "LocalFileStorage",
]
