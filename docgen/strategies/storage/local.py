"""Local filesystem template storage.

Templates live in a local directory, optionally split into one
subdirectory per organization. Single-tenant deployments keep every
template in the root directory.
"""

import asyncio
import logging
from datetime import datetime
from pathlib import Path

from docgen.interfaces.storage import (
    BaseTemplateStorage,
    StorageError,
    StoredTemplate,
    TemplateNotFoundError,
)

logger = logging.getLogger(__name__)

TEMPLATE_SUFFIX = ".docx"


class LocalFileStorage(BaseTemplateStorage):
    """Storage backend reading and writing templates on local disk.

    Attributes:
        base_dir: Root directory for templates.
        multi_tenant: Whether each organization gets its own subdirectory.
    """

    def __init__(self, base_dir: Path, multi_tenant: bool = False) -> None:
        self._base_dir = Path(base_dir).resolve()
        self._multi_tenant = multi_tenant

    def _org_dir(self, org_id: str) -> Path | None:
        """Directory of an organization, or None when the id escapes the root."""
        if not self._multi_tenant:
            return self._base_dir
        org_dir = (self._base_dir / org_id).resolve()
        if not org_id or org_dir == self._base_dir or not org_dir.is_relative_to(self._base_dir):
            logger.warning(f"Rejected organization id outside the storage root: {org_id!r}")
            return None
        return org_dir

    def _template_path(self, org_id: str, template_id: str) -> Path:
        """Resolve a template path, refusing ids that escape the storage root."""
        org_dir = self._org_dir(org_id)
        if org_dir is None:
            raise TemplateNotFoundError(template_id)
        path = (org_dir / template_id).resolve()
        if not template_id or not path.is_relative_to(org_dir) or path == org_dir:
            raise TemplateNotFoundError(template_id)
        return path

    @staticmethod
    def _describe(path: Path) -> StoredTemplate:
        stats = path.stat()
        return StoredTemplate(
            id=path.name,
            name=path.stem,
            created_at=datetime.fromtimestamp(stats.st_ctime),
            updated_at=datetime.fromtimestamp(stats.st_mtime),
        )

    async def list(self, org_id: str) -> list[StoredTemplate]:
        """List the .docx templates of an organization, sorted by id."""
        org_dir = self._org_dir(org_id)
        if org_dir is None or not org_dir.is_dir():
            return []

        paths = sorted(
            p for p in org_dir.iterdir() if p.is_file() and p.suffix == TEMPLATE_SUFFIX
        )
        return [self._describe(p) for p in paths]

    async def get(self, org_id: str, template_id: str) -> bytes:
        """Read a template from disk."""
        path = self._template_path(org_id, template_id)
        try:
            return await asyncio.to_thread(path.read_bytes)
        except (FileNotFoundError, IsADirectoryError, NotADirectoryError) as e:
            raise TemplateNotFoundError(template_id) from e
        except OSError as e:
            raise StorageError(f"Failed to read template {template_id}: {e}") from e

    async def put(
        self,
        org_id: str,
        template_id: str,
        content: bytes,
        name: str | None = None,
    ) -> StoredTemplate:
        """Write a template to disk, creating the directory if needed."""
        path = self._template_path(org_id, template_id)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            await asyncio.to_thread(path.write_bytes, content)
        except OSError as e:
            raise StorageError(f"Failed to store template {template_id}: {e}") from e

        logger.info(f"Stored template {template_id} for org {org_id} ({len(content)} bytes)")
        stored = self._describe(path)
        if name:
            stored = StoredTemplate(
                id=stored.id,
                name=name,
                engine=stored.engine,
                created_at=stored.created_at,
                updated_at=stored.updated_at,
            )
        return stored

    async def delete(self, org_id: str, template_id: str) -> None:
        """Remove a template from disk."""
        path = self._template_path(org_id, template_id)
        try:
            path.unlink()
        except FileNotFoundError as e:
            raise TemplateNotFoundError(template_id) from e
        logger.info(f"Deleted template {template_id} for org {org_id}")

    async def exists(self, org_id: str, template_id: str) -> bool:
        """Check whether a template file exists."""
        try:
            return self._template_path(org_id, template_id).is_file()
        except TemplateNotFoundError:
            return False
