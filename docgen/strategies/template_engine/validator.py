"""Template container validator.

A Word template is a ZIP package. Checks the archive signature, that the
archive opens, and that the mandatory package parts are present.
"""

import io
import logging
import zipfile

from docgen.interfaces.template import BaseTemplateValidator, ValidationResult
from docgen.strategies.template_engine.models import REQUIRED_PARTS

logger = logging.getLogger(__name__)

ZIP_SIGNATURE = b"PK"
MIN_CONTAINER_SIZE = 4


class DocxContainerValidator(BaseTemplateValidator):
    """Validates that a buffer holds a structurally sound .docx package."""

    def __init__(self, required_parts: tuple[str, ...] = REQUIRED_PARTS) -> None:
        self._required_parts = required_parts

    def validate(self, content: bytes) -> ValidationResult:
        """Validate a template container.

        Args:
            content: The raw template bytes.

        Returns:
            ValidationResult listing every structural problem found.
        """
        if len(content) < MIN_CONTAINER_SIZE or content[:2] != ZIP_SIGNATURE:
            logger.info(f"Rejected template without ZIP signature ({len(content)} bytes)")
            return ValidationResult.failed(
                "File is not a valid ZIP archive (missing PK signature)"
            )

        try:
            with zipfile.ZipFile(io.BytesIO(content)) as archive:
                names = set(archive.namelist())
        except Exception as e:
            logger.info(f"Rejected unreadable template archive: {e}")
            return ValidationResult.failed(f"Failed to parse ZIP archive: {e}")

        errors = [
            f"Missing required file: {part}"
            for part in self._required_parts
            if part not in names
        ]
        if errors:
            logger.info(f"Rejected template archive: {errors}")
            return ValidationResult.failed(*errors)

        return ValidationResult.ok()

    @property
    def supported_extensions(self) -> set[str]:
        """Return supported file extensions."""
        return {".docx"}
