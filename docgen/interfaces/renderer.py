"""Document rendering interfaces.

The rendering delegate substitutes a data tree into a template and returns
the populated document in its native binary format.
"""

from abc import ABC, abstractmethod
from typing import Any


class BaseDocumentRenderer(ABC):
    """Abstract base class for template rendering strategies."""

    @abstractmethod
    async def render(
        self,
        template: bytes,
        data: dict[str, Any],
        options: dict[str, Any] | None = None,
    ) -> bytes:
        """Render a template with already-normalized data.

        Args:
            template: The template document content.
            data: The data tree, already passed through the image normalizer.
            options: Optional rendering options (header_text, metadata, ...).

        Returns:
            The rendered document content.

        Raises:
            TemplateNotFoundError: If the template file cannot be located.
            RenderError: If rendering fails for any other reason.
        """

    @property
    @abstractmethod
    def native_extension(self) -> str:
        """Return the extension of the documents this renderer produces."""


class RenderError(Exception):
    """Exception raised when a template cannot be rendered."""

    pass
