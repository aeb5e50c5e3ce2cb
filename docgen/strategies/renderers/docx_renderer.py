"""Word template renderer.

Commands are rewritten into docxtpl tags (see ``commands``), then docxtpl
renders the document through Jinja2. Loops and conditions are evaluated by
Jinja; pictures are ``InlineImage`` objects built from ``ImageDescriptor``
values. The options bag is applied to the rendered document with python-docx.
"""

import asyncio
import base64
import binascii
import datetime
import io
import logging
from typing import Any

from docx import Document
from docx.document import Document as DocumentObject
from docx.shared import Cm
from docxtpl import DocxTemplate, InlineImage
from jinja2 import ChainableUndefined, Environment, Undefined
from pydantic import ValidationError

from docgen.interfaces.renderer import BaseDocumentRenderer, RenderError
from docgen.strategies.renderers.commands import CommandTranslator
from docgen.strategies.template_engine.models import ImageDescriptor

logger = logging.getLogger(__name__)

CORE_PROPERTY_KEYS = {
    "author",
    "category",
    "comments",
    "content_status",
    "identifier",
    "keywords",
    "language",
    "subject",
    "title",
    "version",
}


def format_value(value: Any) -> Any:
    """Jinja ``finalize`` hook: how data values print in the document."""
    if value is None or isinstance(value, Undefined):
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (datetime.date, datetime.time)):
        return value.isoformat()
    return value


def loop_items(value: Any) -> list | tuple:
    """``each`` filter: the collection a FOR command iterates."""
    if value is None or isinstance(value, Undefined):
        return []
    if not isinstance(value, (list, tuple)):
        raise RenderError(f"FOR requires a list, got {type(value).__name__}")
    return value


def inline_image(template: DocxTemplate, value: Any, path: str) -> InlineImage:
    if isinstance(value, dict):
        try:
            value = ImageDescriptor.model_validate(value)
        except ValidationError as e:
            raise RenderError(f"IMAGE {path} requires an image value") from e
    if not isinstance(value, ImageDescriptor):
        raise RenderError(f"IMAGE {path} requires an image value")

    try:
        content = base64.b64decode(value.data, validate=False)
    except (binascii.Error, ValueError) as e:
        raise RenderError(f"IMAGE {path} has an undecodable payload: {e}") from e

    return InlineImage(
        template,
        io.BytesIO(content),
        width=Cm(value.width),
        height=Cm(value.height),
    )


class DocxTemplateRenderer(BaseDocumentRenderer):
    """Renders .docx templates with docxtpl."""

    def __init__(self) -> None:
        self._translator = CommandTranslator()

    async def render(
        self,
        template: bytes,
        data: dict[str, Any],
        options: dict[str, Any] | None = None,
    ) -> bytes:
        """Render a template in a worker thread.

        Args:
            template: The .docx template content.
            data: Normalized data tree.
            options: Optional header_text and metadata.

        Returns:
            The rendered .docx content.

        Raises:
            RenderError: If the template cannot be opened or a command is invalid.
        """
        return await asyncio.to_thread(self.render_sync, template, data, options or {})

    def render_sync(
        self,
        template: bytes,
        data: dict[str, Any],
        options: dict[str, Any],
    ) -> bytes:
        try:
            source = Document(io.BytesIO(template))
        except Exception as e:
            raise RenderError(f"Template could not be opened: {e}") from e

        self._translator.translate(source)
        translated = io.BytesIO()
        source.save(translated)
        translated.seek(0)

        document = DocxTemplate(translated)
        try:
            document.render(dict(data), self._environment(document), autoescape=True)
        except RenderError:
            raise
        except Exception as e:
            raise RenderError(f"Template rendering failed: {e}") from e

        self._apply_options(document.docx, options)

        output = io.BytesIO()
        document.save(output)
        return output.getvalue()

    @property
    def native_extension(self) -> str:
        """Return the extension of rendered documents."""
        return ".docx"

    @staticmethod
    def _environment(document: DocxTemplate) -> Environment:
        environment = Environment(undefined=ChainableUndefined, finalize=format_value)
        environment.filters["each"] = loop_items
        environment.filters["image"] = lambda value, path: inline_image(document, value, path)
        return environment

    @staticmethod
    def _apply_options(document: DocumentObject, options: dict[str, Any]) -> None:
        header_text = options.get("header_text")
        if header_text:
            header = document.sections[0].header
            header.is_linked_to_previous = False
            paragraphs = header.paragraphs
            if paragraphs and not paragraphs[0].text:
                paragraphs[0].text = header_text
            else:
                header.add_paragraph(header_text)

        if options.get("watermark"):
            logger.warning("Watermark requested but not supported by the docx renderer")

        for key, value in (options.get("metadata") or {}).items():
            name = key.lower().replace(" ", "_")
            if name in CORE_PROPERTY_KEYS:
                setattr(document.core_properties, name, str(value))
            else:
                logger.debug(f"Ignoring unknown metadata key: {key}")
