"""Template storage interfaces.

Defines the abstract base class every template storage backend implements,
whether it reads from a local directory or an object store.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class StoredTemplate:
    """Metadata for a template held by a storage backend.

    Attributes:
        id: Identifier used to fetch the template (the stored file name).
        name: Human readable name (identifier without extension).
        engine: Template engine family, always "word" for .docx templates.
        created_at: Creation time, when the backend knows it.
        updated_at: Last modification time, when the backend knows it.
    """

    id: str
    name: str
    engine: str = "word"
    created_at: datetime | None = None
    updated_at: datetime | None = None


class BaseTemplateStorage(ABC):
    """Abstract base class for template storage backends."""

    @abstractmethod
    async def list(self, org_id: str) -> list[StoredTemplate]:
        """List all templates for an organization."""

    @abstractmethod
    async def get(self, org_id: str, template_id: str) -> bytes:
        """Return the template file content.

        Raises:
            TemplateNotFoundError: If no such template exists.
        """

    @abstractmethod
    async def put(
        self,
        org_id: str,
        template_id: str,
        content: bytes,
        name: str | None = None,
    ) -> StoredTemplate:
        """Store a template, replacing any existing one with the same id."""

    @abstractmethod
    async def delete(self, org_id: str, template_id: str) -> None:
        """Delete a template.

        Raises:
            TemplateNotFoundError: If no such template exists.
        """

    @abstractmethod
    async def exists(self, org_id: str, template_id: str) -> bool:
        """Check whether a template exists."""


class StorageError(Exception):
    """Exception raised when a storage backend fails."""

    pass


class TemplateNotFoundError(StorageError):
    """Raised when a template reference does not resolve to stored content."""

    def __init__(self, template_id: str) -> None:
        super().__init__(f"Template not found: {template_id}")
        self.template_id = template_id
