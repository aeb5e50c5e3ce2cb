"""Template engine strategies.

Implements container validation, placeholder field extraction and image
payload normalization for Word templates.
"""

from docgen.strategies.template_engine.extractor import PlaceholderFieldExtractor
from docgen.strategies.template_engine.images import ImageNormalizer, normalize_images
from docgen.strategies.template_engine.models import ImageDescriptor
from docgen.strategies.template_engine.validator import DocxContainerValidator

__all__ = [
    "DocxContainerValidator",
    "ImageDescriptor",
    "ImageNormalizer",
    "PlaceholderFieldExtractor",
    "normalize_images",
]
