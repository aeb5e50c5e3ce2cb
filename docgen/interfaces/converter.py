"""Document conversion interfaces.

The conversion delegate turns a rendered native document into another
output format.
"""

from abc import ABC, abstractmethod
from typing import Any


class BaseDocumentConverter(ABC):
    """Abstract base class for document conversion strategies."""

    @abstractmethod
    async def convert(
        self,
        document: bytes,
        source_name: str,
        metadata: dict[str, Any] | None = None,
    ) -> bytes:
        """Convert a rendered document.

        Args:
            document: The rendered native document.
            source_name: File name of the source document, extension included.
            metadata: Optional document metadata to embed in the output.

        Returns:
            The converted document content.

        Raises:
            ConversionUnavailableError: If the conversion service is unreachable.
            ConversionError: If the conversion is rejected.
        """

    @abstractmethod
    async def is_healthy(self) -> bool:
        """Return whether the conversion backend is reachable."""

    @property
    @abstractmethod
    def media_type(self) -> str:
        """Return the media type of the converted output."""


class ConversionError(Exception):
    """Exception raised when a document cannot be converted."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ConversionUnavailableError(ConversionError):
    """Raised when the conversion service cannot be reached."""

    pass
