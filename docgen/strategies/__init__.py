"""Concrete strategy implementations."""

from docgen.strategies.converters import DocxHtmlConverter, GotenbergConverter
from docgen.strategies.renderers import DocxTemplateRenderer
from docgen.strategies.storage import LocalFileStorage
from docgen.strategies.template_engine import (
    DocxContainerValidator,
    ImageNormalizer,
    PlaceholderFieldExtractor,
)

__all__ = [
    "DocxContainerValidator",
    "DocxHtmlConverter",
    "DocxTemplateRenderer",
    "GotenbergConverter",
    "ImageNormalizer",
    "LocalFileStorage",
    "PlaceholderFieldExtractor",
]
