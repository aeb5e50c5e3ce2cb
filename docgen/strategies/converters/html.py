"""HTML export of rendered Word documents.

Produces a structural HTML view of a .docx document: headings, paragraphs
with bold/italic/underlined runs, and tables. Page layout, images and
styles are not carried over.
"""

import asyncio
import io
import logging
import re
from html import escape
from typing import Any

from docx import Document
from docx.table import Table
from docx.text.paragraph import Paragraph

from docgen.interfaces.converter import BaseDocumentConverter, ConversionError

logger = logging.getLogger(__name__)

HEADING_STYLE_RE = re.compile(r"Heading\s+([1-6])")


def _paragraph_html(paragraph: Paragraph) -> str:
    parts = []
    for run in paragraph.runs:
        text = escape(run.text)
        if not text:
            continue
        if run.bold:
            text = f"<strong>{text}</strong>"
        if run.italic:
            text = f"<em>{text}</em>"
        if run.underline:
            text = f"<u>{text}</u>"
        parts.append(text)
    content = "".join(parts)

    style_name = paragraph.style.name if paragraph.style is not None else ""
    heading = HEADING_STYLE_RE.fullmatch(style_name or "")
    if heading:
        level = heading.group(1)
        return f"<h{level}>{content}</h{level}>"
    if style_name == "Title":
        return f"<h1>{content}</h1>"
    return f"<p>{content}</p>"


def _table_html(table: Table) -> str:
    rows = []
    for row in table.rows:
        cells = "".join(
            "<td>" + "".join(_paragraph_html(p) for p in cell.paragraphs) + "</td>"
            for cell in row.cells
        )
        rows.append(f"<tr>{cells}</tr>")
    return "<table>" + "".join(rows) + "</table>"


def document_to_html(content: bytes, title: str = "Document") -> str:
    """Render a .docx document as a standalone HTML page."""
    document = Document(io.BytesIO(content))

    blocks = []
    for block in document.iter_inner_content():
        if isinstance(block, Paragraph):
            blocks.append(_paragraph_html(block))
        else:
            blocks.append(_table_html(block))

    title = document.core_properties.title or title
    return (
        "<!DOCTYPE html>\n"
        '<html><head><meta charset="utf-8">'
        f"<title>{escape(title)}</title></head>\n"
        "<body>\n" + "\n".join(blocks) + "\n</body></html>\n"
    )


class DocxHtmlConverter(BaseDocumentConverter):
    """Converts rendered .docx documents to HTML in-process."""

    async def convert(
        self,
        document: bytes,
        source_name: str = "document.docx",
        metadata: dict[str, Any] | None = None,
    ) -> bytes:
        """Convert a document to HTML.

        Raises:
            ConversionError: If the document cannot be read.
        """
        metadata = metadata or {}
        title = metadata.get("title") or metadata.get("Title") or source_name.rsplit(".", 1)[0]
        try:
            markup = await asyncio.to_thread(document_to_html, document, title)
        except Exception as e:
            raise ConversionError(f"HTML conversion failed: {e}") from e
        return markup.encode("utf-8")

    async def is_healthy(self) -> bool:
        """In-process conversion is always available."""
        return True

    @property
    def media_type(self) -> str:
        """Return the media type of converted documents."""
        return "text/html; charset=utf-8"
