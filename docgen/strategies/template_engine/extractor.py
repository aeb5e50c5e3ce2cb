"""Placeholder field extractor.

Scans the text parts of a Word template and derives the data fields its
``{{ }}`` commands reference. Recognised forms:

- ``{{customer.name}}``: simple (possibly dotted) reference
- ``{{FOR item IN items}}`` / ``{{FOR items}}``: loop over a collection
- ``{{IMAGE logo}}``: image insertion
- ``{{IF paid ...}}``: conditional block

Word frequently splits a command across several runs, so the patterns are
applied to the text with XML tags stripped. The raw markup is scanned a
second time with a whitespace-tolerant reference pattern.
"""

import html
import io
import logging
import re
import zipfile

from docgen.interfaces.template import BaseFieldExtractor
from docgen.strategies.template_engine.models import TEXT_PARTS

logger = logging.getLogger(__name__)

_IDENT = r"[a-zA-Z_][a-zA-Z0-9_]*"
_PATH = rf"{_IDENT}(?:\.{_IDENT})*"

SIMPLE_FIELD_RE = re.compile(rf"\{{\{{({_PATH})\}}\}}")
FOR_LOOP_RE = re.compile(rf"\{{\{{FOR\s+({_IDENT})(?:\s+IN\s+({_PATH}))?\}}\}}", re.IGNORECASE)
IMAGE_RE = re.compile(rf"\{{\{{IMAGE\s+({_PATH})\}}\}}", re.IGNORECASE)
IF_RE = re.compile(rf"\{{\{{IF\s+({_PATH})", re.IGNORECASE)
RAW_FIELD_RE = re.compile(r"\{\{\s*([a-zA-Z_][a-zA-Z0-9_.]*)\s*\}\}")

_TAG_RE = re.compile(r"<[^>]+>")

CONTROL_KEYWORDS = frozenset(
    {
        "END-FOR",
        "END-IF",
        "ENDFOR",
        "ENDIF",
        "FOR",
        "IF",
        "ELSE",
        "IMAGE",
        "LINK",
        "HTML",
        "this",
        "$idx",
        "$index",
    }
)


def is_control_keyword(name: str) -> bool:
    """Return True for command keywords and implicit loop aliases."""
    return name.upper() in CONTROL_KEYWORDS or name in CONTROL_KEYWORDS


def strip_markup(xml: str) -> str:
    """Return the plain text view of a WordprocessingML part."""
    return html.unescape(_TAG_RE.sub("", xml))


def extract_fields_from_xml(xml: str, fields: set[str]) -> None:
    """Add every field referenced in one XML part to ``fields``."""
    text = strip_markup(xml)

    for match in SIMPLE_FIELD_RE.finditer(text):
        if not is_control_keyword(match.group(1)):
            fields.add(match.group(1))

    for match in FOR_LOOP_RE.finditer(text):
        # FOR item IN collection: the collection is the field.
        # FOR items: the loop variable names the collection itself.
        fields.add(match.group(2) or match.group(1))

    for match in IMAGE_RE.finditer(text):
        fields.add(match.group(1))

    for match in IF_RE.finditer(text):
        fields.add(match.group(1))

    # TODO: drop this pass once split-run documents are covered by fixtures
    # showing it finds nothing the stripped view misses.
    for match in RAW_FIELD_RE.finditer(xml):
        name = match.group(1).strip()
        if not is_control_keyword(name):
            fields.add(name)


class PlaceholderFieldExtractor(BaseFieldExtractor):
    """Extracts placeholder field names from .docx templates."""

    def __init__(self, text_parts: tuple[str, ...] = TEXT_PARTS) -> None:
        self._text_parts = text_parts

    def extract(self, content: bytes) -> list[str]:
        """Extract the fields referenced anywhere in the template.

        Args:
            content: The raw template bytes.

        Returns:
            Sorted list of distinct field names. Empty if the archive
            cannot be read.
        """
        fields: set[str] = set()

        try:
            with zipfile.ZipFile(io.BytesIO(content)) as archive:
                names = set(archive.namelist())
                for part in self._text_parts:
                    if part not in names:
                        continue
                    xml = archive.read(part).decode("utf-8", errors="replace")
                    extract_fields_from_xml(xml, fields)
        except Exception as e:
            logger.warning(f"Field extraction failed: {e}")
            return []

        logger.debug(f"Extracted {len(fields)} fields")
        return sorted(fields)

    @property
    def supported_extensions(self) -> set[str]:
        """Return supported file extensions."""
        return {".docx"}
