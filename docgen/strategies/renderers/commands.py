"""Translation of template commands into docxtpl tags.

Templates are written with ``{{ }}`` commands:

    {{customer.name}}               value reference ({{= x}} and {{INS x}} too)
    {{IMAGE logo}}                  picture from an ImageDescriptor
    {{FOR item IN items}} ... {{END-FOR item}}
    {{FOR items}} ... {{END-FOR}}   loop, items available as ``this``
    {{IF paid}} ... {{END-IF}}      conditional, also ``!x`` and ``x > 3``

Before rendering, each command is rewritten into the Jinja tag docxtpl
understands. FOR and IF must sit alone in their paragraph or table row and
become ``{%p ... %}`` or ``{%tr ... %}`` tags, so docxtpl repeats or drops
the paragraphs and rows between the opening and closing command.
"""

import re

from docx.document import Document as DocumentObject
from docx.oxml.ns import qn

from docgen.interfaces.renderer import RenderError

COMMAND_RE = re.compile(r"\{\{(.*?)\}\}", re.DOTALL)

FOR_RE = re.compile(r"FOR\s+\$?([a-zA-Z_]\w*)(?:\s+IN\s+(\S+))?", re.IGNORECASE)
END_FOR_RE = re.compile(r"END-?FOR(?:\s+\S+)?", re.IGNORECASE)
IF_RE = re.compile(r"IF\s+(.+)", re.IGNORECASE | re.DOTALL)
END_IF_RE = re.compile(r"END-?IF(?:\s+.*)?", re.IGNORECASE | re.DOTALL)
IMAGE_RE = re.compile(r"IMAGE\s+(\S+)", re.IGNORECASE)
INSERT_RE = re.compile(r"(?:=|INS\s)\s*(.+)", re.IGNORECASE | re.DOTALL)
REFERENCE_RE = re.compile(r"\$?[a-zA-Z_]\w*(?:\.\w+)*")

# Quoted literals pass through untouched.
TOKEN_RE = re.compile(r"""('[^']*'|"[^"]*")|(!(?!=))|(\$?[a-zA-Z_]\w*(?:\.\w+)*)""")

INDEX_ALIASES = ("$idx", "$index")
LITERALS = {"null": "none", "true": "true", "false": "false"}


def jinja_path(path: str, loops: list[str]) -> str:
    """Rewrite a dotted reference into a Jinja expression.

    ``$item`` loses its sigil, ``this`` names the innermost loop variable,
    ``$idx``/``$index`` become the loop counter and a trailing ``.length``
    becomes the ``length`` filter.
    """
    head, *rest = path.split(".")
    if head in LITERALS and not rest:
        return LITERALS[head]
    if head in INDEX_ALIASES:
        head = "loop.index0"
    elif head == "this":
        head = loops[-1] if loops else "this"
    elif head.startswith("$"):
        head = head[1:]

    suffix = ""
    if rest and rest[-1] == "length":
        rest = rest[:-1]
        suffix = "|length"
    return ".".join([head, *rest]) + suffix


def jinja_condition(expression: str, loops: list[str]) -> str:
    def replace(match: re.Match) -> str:
        quoted, negation, path = match.groups()
        if quoted:
            return quoted
        if negation:
            return "not "
        return jinja_path(path, loops)

    return TOKEN_RE.sub(replace, expression).strip()


class CommandTranslator:
    """Rewrites the commands of one document into docxtpl tags.

    Loop variables are tracked per story (body, each header and footer), in
    document order, so ``this`` resolves to the innermost enclosing loop.
    """

    def translate(self, document: DocumentObject) -> None:
        self._translate_story(document.element.body)

        for section in document.sections:
            for story in (
                section.header,
                section.first_page_header,
                section.even_page_header,
                section.footer,
                section.first_page_footer,
                section.even_page_footer,
            ):
                if not story.is_linked_to_previous:
                    self._translate_story(story._element)

    def _translate_story(self, root) -> None:
        loops: list[str] = []
        for p in root.iter(qn("w:p")):
            self._translate_paragraph(p, loops)

    def _translate_paragraph(self, p, loops: list[str]) -> None:
        texts = list(p.iter(qn("w:t")))
        full = "".join(t.text or "" for t in texts)
        if "{{" not in full:
            return

        matches = list(COMMAND_RE.finditer(full))
        if "{{" in COMMAND_RE.sub("", full):
            raise RenderError(f"Unterminated command in: {full[:80]}")

        # Loop bookkeeping must follow reading order.
        replacements = []
        for match in matches:
            command = match.group(1).strip()
            block = self._block_tag(command, loops)
            if block is None:
                replacements.append(self._inline_tag(command, loops))
                continue
            if full.strip() != match.group(0):
                raise RenderError(
                    f"{{{{{command}}}}} must be alone in its paragraph or table row"
                )
            scope = "tr" if _fills_table_row(p, full) else "p"
            replacements.append(f"{{%{scope} {block} %}}")

        # (offset, length) of each w:t in the original paragraph text
        spans = []
        position = 0
        for t in texts:
            spans.append((position, len(t.text or "")))
            position += spans[-1][1]

        # Right to left, so earlier spans stay valid after each splice.
        for match, value in reversed(list(zip(matches, replacements))):
            _splice(texts, spans, match.start(), match.end(), value)

    @staticmethod
    def _block_tag(command: str, loops: list[str]) -> str | None:
        if END_FOR_RE.fullmatch(command):
            if loops:
                loops.pop()
            return "endfor"
        if END_IF_RE.fullmatch(command):
            return "endif"

        loop = FOR_RE.fullmatch(command)
        if loop:
            variable, collection = loop.groups()
            if collection is None:
                variable, collection = "this", variable
            source = jinja_path(collection, loops)
            loops.append(variable)
            return f"for {variable} in {source}|each"

        condition = IF_RE.fullmatch(command)
        if condition:
            return f"if {jinja_condition(condition.group(1), loops)}"
        return None

    @staticmethod
    def _inline_tag(command: str, loops: list[str]) -> str:
        image = IMAGE_RE.fullmatch(command)
        if image:
            path = image.group(1)
            return f"{{{{ {jinja_path(path, loops)}|image('{path}') }}}}"

        insert = INSERT_RE.fullmatch(command)
        if insert:
            command = insert.group(1).strip()
        if REFERENCE_RE.fullmatch(command):
            return f"{{{{ {jinja_path(command, loops)} }}}}"
        raise RenderError(f"Invalid command: {{{{{command}}}}}")


def _fills_table_row(p, text: str) -> bool:
    """Whether the paragraph sits in a table row holding nothing but ``text``."""
    cell = p.getparent()
    if cell is None or cell.tag != qn("w:tc"):
        return False
    row = cell.getparent()
    row_text = "".join(t.text or "" for t in row.iter(qn("w:t")))
    return row_text.strip() == text.strip()


def _splice(texts: list, spans: list[tuple[int, int]], start: int, end: int, value: str) -> None:
    """Replace paragraph text range [start, end), which may cross w:t elements."""
    first = next(
        i for i, (offset, length) in enumerate(spans) if offset <= start < offset + length
    )
    last = next(
        i for i, (offset, length) in enumerate(spans) if offset < end <= offset + length
    )

    head = texts[first].text or ""
    local_start = start - spans[first][0]
    if first == last:
        texts[first].text = head[:local_start] + value + head[end - spans[first][0]:]
    else:
        texts[first].text = head[:local_start] + value
        for i in range(first + 1, last):
            texts[i].text = ""
        last_text = texts[last].text or ""
        texts[last].text = last_text[end - spans[last][0]:]
        texts[last].set(qn("xml:space"), "preserve")
    texts[first].set(qn("xml:space"), "preserve")
