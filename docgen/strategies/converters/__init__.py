"""Concrete document converter implementations."""

from docgen.strategies.converters.gotenberg import GotenbergConverter
from docgen.strategies.converters.html import DocxHtmlConverter

__all__ = [
    "DocxHtmlConverter",
    "GotenbergConverter",
]
