"""Concrete document renderer implementations."""

from docgen.strategies.renderers.docx_renderer import DocxTemplateRenderer

__all__ = [
    "DocxTemplateRenderer",
]
