"""Image payload normalization.

Rewrites every ``data:image/<fmt>;base64,<payload>`` string found anywhere
in a JSON-like data tree into an ImageDescriptor the renderer can place
with an IMAGE directive.
"""

import datetime
import enum
import re
from typing import Any

from docgen.strategies.template_engine.models import ImageDescriptor

DATA_URI_RE = re.compile(r"data:image/(png|jpg|jpeg);base64,(.*)")

# Both dimensions are fixed; the payload's pixel size is not inspected.
DEFAULT_IMAGE_SIZE_CM = 6


class ValueKind(enum.Enum):
    """The closed set of value kinds a data tree can contain."""

    STRING = "string"
    SEQUENCE = "sequence"
    MAPPING = "mapping"
    DATE = "date"
    BINARY = "binary"
    SCALAR = "scalar"


def classify(value: Any) -> ValueKind:
    """Return the kind of a data tree value."""
    if isinstance(value, str):
        return ValueKind.STRING
    if isinstance(value, (datetime.date, datetime.time)):
        return ValueKind.DATE
    if isinstance(value, (bytes, bytearray, memoryview)):
        return ValueKind.BINARY
    if isinstance(value, (list, tuple)):
        return ValueKind.SEQUENCE
    if isinstance(value, dict):
        return ValueKind.MAPPING
    return ValueKind.SCALAR


class ImageNormalizer:
    """Replaces data URI images in a data tree with ImageDescriptors."""

    def __init__(
        self,
        width: float = DEFAULT_IMAGE_SIZE_CM,
        height: float = DEFAULT_IMAGE_SIZE_CM,
    ) -> None:
        self._width = width
        self._height = height

    def normalize(self, value: Any) -> Any:
        """Return a copy of ``value`` with every image string replaced.

        The input is never modified. Dates and binary blobs are returned
        as-is rather than walked.
        """
        match classify(value):
            case ValueKind.STRING:
                return self._normalize_string(value)
            case ValueKind.SEQUENCE:
                return [self.normalize(item) for item in value]
            case ValueKind.MAPPING:
                return {key: self.normalize(item) for key, item in value.items()}
            case ValueKind.DATE | ValueKind.BINARY | ValueKind.SCALAR:
                return value

    def _normalize_string(self, value: str) -> str | ImageDescriptor:
        match = DATA_URI_RE.fullmatch(value)
        if match is None:
            return value
        return ImageDescriptor(
            width=self._width,
            height=self._height,
            data=match.group(2),
            extension=f".{match.group(1)}",
        )


def normalize_images(value: Any) -> Any:
    """Normalize a data tree using the default image dimensions."""
    return ImageNormalizer().normalize(value)
