"""Gotenberg-based PDF converter.

Sends rendered documents to Gotenberg's LibreOffice route and returns
the resulting PDF.
"""

import json
import logging
from typing import Any

import httpx

from docgen.interfaces.converter import (
    BaseDocumentConverter,
    ConversionError,
    ConversionUnavailableError,
)
from docgen.strategies.template_engine.models import DOCX_MEDIA_TYPE

logger = logging.getLogger(__name__)


class GotenbergConverter(BaseDocumentConverter):
    """Converter implementation using the Gotenberg HTTP API.

    Attributes:
        base_url: Gotenberg server URL.
        timeout: Timeout in seconds for a single conversion.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 60.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the converter.

        Args:
            base_url: Gotenberg server URL, e.g. http://gotenberg:3000.
            timeout: Timeout in seconds for a single conversion.
            transport: Optional httpx transport, used by tests.
        """
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport

    def _client(self, timeout: float | None = None) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self._base_url,
            timeout=timeout or self._timeout,
            transport=self._transport,
        )

    async def convert(
        self,
        document: bytes,
        source_name: str = "document.docx",
        metadata: dict[str, Any] | None = None,
    ) -> bytes:
        """Convert a document to PDF through LibreOffice.

        Args:
            document: The source document content.
            source_name: File name sent to Gotenberg; its extension selects the import filter.
            metadata: Optional PDF metadata (Title, Author, ...).

        Returns:
            The PDF content.

        Raises:
            ConversionUnavailableError: If Gotenberg cannot be reached.
            ConversionError: If Gotenberg rejects the document.
        """
        files = {"files": (source_name, document, DOCX_MEDIA_TYPE)}
        form = {"metadata": json.dumps(metadata)} if metadata else None

        logger.info(f"Converting {source_name} to PDF ({len(document)} bytes)")
        try:
            async with self._client() as client:
                response = await client.post(
                    "/forms/libreoffice/convert", files=files, data=form
                )
        except httpx.HTTPError as e:
            raise ConversionUnavailableError(
                f"Gotenberg unreachable at {self._base_url}: {e}"
            ) from e

        if response.status_code >= 400:
            raise ConversionError(
                f"Gotenberg conversion failed: {response.status_code} - {response.text}",
                status_code=response.status_code,
            )

        logger.info(f"PDF conversion completed ({len(response.content)} bytes)")
        return response.content

    async def is_healthy(self) -> bool:
        """Check Gotenberg's health endpoint."""
        try:
            async with self._client(timeout=5.0) as client:
                response = await client.get("/health")
            return response.status_code == 200
        except httpx.HTTPError:
            return False

    @property
    def media_type(self) -> str:
        """Return the media type of converted documents."""
        return "application/pdf"
