"""Abstract base classes for template processing collaborators."""

from docgen.interfaces.converter import (
    BaseDocumentConverter,
    ConversionError,
    ConversionUnavailableError,
)
from docgen.interfaces.renderer import BaseDocumentRenderer, RenderError
from docgen.interfaces.storage import (
    BaseTemplateStorage,
    StorageError,
    StoredTemplate,
    TemplateNotFoundError,
)
from docgen.interfaces.template import (
    BaseFieldExtractor,
    BaseTemplateValidator,
    ValidationResult,
)

__all__ = [
    "BaseDocumentConverter",
    "BaseDocumentRenderer",
    "BaseFieldExtractor",
    "BaseTemplateStorage",
    "BaseTemplateValidator",
    "ConversionError",
    "ConversionUnavailableError",
    "RenderError",
    "StorageError",
    "StoredTemplate",
    "TemplateNotFoundError",
    "ValidationResult",
]
