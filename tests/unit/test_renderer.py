"""Unit tests for the docxtpl template renderer."""

import asyncio
import datetime
import io

import pytest
from docx import Document

from builders import PNG_BASE64, build_docx, read_paragraphs
from docgen.interfaces.renderer import RenderError
from docgen.strategies.renderers import DocxTemplateRenderer
from docgen.strategies.renderers.commands import CommandTranslator, jinja_condition, jinja_path
from docgen.strategies.template_engine import ImageDescriptor


def build_table_docx(rows: list[list[str]]) -> bytes:
    document = Document()
    table = document.add_table(rows=len(rows), cols=len(rows[0]))
    for row, values in zip(table.rows, rows):
        for cell, value in zip(row.cells, values):
            cell.text = value
    output = io.BytesIO()
    document.save(output)
    return output.getvalue()


class TestDocxTemplateRenderer:
    """Test suite for DocxTemplateRenderer."""

    @pytest.fixture
    def renderer(self):
        return DocxTemplateRenderer()

    def render(self, renderer, template, data, options=None) -> bytes:
        return asyncio.run(renderer.render(template, data, options))

    def test_native_extension(self, renderer):
        assert renderer.native_extension == ".docx"

    # =========================================================================
    # Reference Tests
    # =========================================================================

    def test_simple_and_dotted_references(self, renderer):
        template = build_docx("Dear {{customer.name}},", "Total: {{total}} EUR")

        output = self.render(renderer, template, {"customer": {"name": "Ada"}, "total": 42})

        assert read_paragraphs(output) == ["Dear Ada,", "Total: 42 EUR"]

    def test_reference_split_across_runs(self, renderer):
        """Test that a command Word split over several runs is replaced."""
        template = build_docx(["Hello {{cus", "tomer.na", "me}}, welcome!"])

        output = self.render(renderer, template, {"customer": {"name": "Grace"}})

        assert read_paragraphs(output) == ["Hello Grace, welcome!"]

    def test_several_references_in_one_run(self, renderer):
        template = build_docx("{{a}}-{{b}}-{{ c }}")

        output = self.render(renderer, template, {"a": 1, "b": "two", "c": 3.5})

        assert read_paragraphs(output) == ["1-two-3.5"]

    def test_markup_characters_in_values_are_escaped(self, renderer):
        template = build_docx("Client: {{client}}")

        output = self.render(renderer, template, {"client": "Smith & <Sons>"})

        assert read_paragraphs(output) == ["Client: Smith & <Sons>"]

    def test_insert_forms_and_value_formatting(self, renderer):
        template = build_docx("{{= paid}} {{INS due}} {{items.length}} {{items.0}}")

        output = self.render(
            renderer,
            template,
            {"paid": True, "due": datetime.date(2024, 3, 1), "items": ["x", "y"]},
        )

        assert read_paragraphs(output) == ["true 2024-03-01 2 x"]

    def test_missing_values_render_empty(self, renderer):
        template = build_docx("[{{missing}}][{{a.b.c}}][{{nothing}}]")

        output = self.render(renderer, template, {"a": {}, "nothing": None})

        assert read_paragraphs(output) == ["[][][]"]

    def test_header_placeholders(self, renderer):
        document = Document()
        header = document.sections[0].header
        header.is_linked_to_previous = False
        paragraph = header.paragraphs[0] if header.paragraphs else header.add_paragraph()
        paragraph.text = "Ref {{ref}}"
        document.add_paragraph("Body")
        buffer = io.BytesIO()
        document.save(buffer)

        output = self.render(renderer, buffer.getvalue(), {"ref": "INV-7"})

        rendered = Document(io.BytesIO(output))
        assert "Ref INV-7" in [p.text for p in rendered.sections[0].header.paragraphs]

    # =========================================================================
    # Block Tests
    # =========================================================================

    def test_for_loop_over_paragraphs(self, renderer):
        template = build_docx(
            "Items:",
            "{{FOR item IN items}}",
            "{{$idx}}. {{item.name}} x{{$item.qty}}",
            "{{END-FOR item}}",
            "Done",
        )
        data = {"items": [{"name": "Pen", "qty": 2}, {"name": "Ink", "qty": 1}]}

        output = self.render(renderer, template, data)

        assert read_paragraphs(output) == ["Items:", "0. Pen x2", "1. Ink x1", "Done"]

    def test_for_loop_with_this(self, renderer):
        template = build_docx("{{FOR tags}}", "#{{this}}", "{{END-FOR}}")

        output = self.render(renderer, template, {"tags": ["a", "b", "c"]})

        assert read_paragraphs(output) == ["#a", "#b", "#c"]

    def test_this_names_the_innermost_loop_variable(self, renderer):
        template = build_docx(
            "{{FOR row IN rows}}",
            "{{$index}}: {{this.label}}",
            "{{END-FOR row}}",
        )

        output = self.render(renderer, template, {"rows": [{"label": "a"}, {"label": "b"}]})

        assert read_paragraphs(output) == ["0: a", "1: b"]

    def test_for_loop_over_empty_or_missing_collection(self, renderer):
        template = build_docx("Before", "{{FOR x IN xs}}", "{{x}}", "{{END-FOR x}}", "After")

        assert read_paragraphs(self.render(renderer, template, {"xs": []})) == ["Before", "After"]
        assert read_paragraphs(self.render(renderer, template, {})) == ["Before", "After"]

    def test_nested_loops(self, renderer):
        template = build_docx(
            "{{FOR group IN groups}}",
            "{{group.title}}",
            "{{FOR member IN group.members}}",
            "- {{member}}",
            "{{END-FOR member}}",
            "{{END-FOR group}}",
        )
        data = {"groups": [{"title": "A", "members": ["x", "y"]}, {"title": "B", "members": []}]}

        output = self.render(renderer, template, data)

        assert read_paragraphs(output) == ["A", "- x", "- y", "B"]

    def test_for_loop_over_table_rows(self, renderer):
        template = build_table_docx(
            [
                ["Item", "Qty"],
                ["{{FOR line IN lines}}", ""],
                ["{{line.name}}", "{{line.qty}}"],
                ["{{END-FOR line}}", ""],
            ]
        )
        data = {"lines": [{"name": "Pen", "qty": 2}, {"name": "Ink", "qty": 1}]}

        output = self.render(renderer, template, data)

        table = Document(io.BytesIO(output)).tables[0]
        assert [[cell.text for cell in row.cells] for row in table.rows] == [
            ["Item", "Qty"],
            ["Pen", "2"],
            ["Ink", "1"],
        ]

    @pytest.mark.parametrize(
        "condition, data, shown",
        [
            ("paid", {"paid": True}, True),
            ("paid", {"paid": False}, False),
            ("paid", {}, False),
            ("!paid", {"paid": False}, True),
            ("total > 100", {"total": 150}, True),
            ("total > 100", {"total": 50}, False),
            ("status == 'open'", {"status": "open"}, True),
            ('status != "open"', {"status": "open"}, False),
        ],
    )
    def test_if_blocks(self, renderer, condition, data, shown):
        template = build_docx("Start", f"{{{{IF {condition}}}}}", "Shown", "{{END-IF}}", "End")

        output = self.render(renderer, template, data)

        expected = ["Start", "Shown", "End"] if shown else ["Start", "End"]
        assert read_paragraphs(output) == expected

    # =========================================================================
    # Image Tests
    # =========================================================================

    def test_image_directive(self, renderer):
        template = build_docx("Logo: {{IMAGE logo}} (official)")
        logo = ImageDescriptor(width=2, height=1, data=PNG_BASE64, extension=".png")

        output = self.render(renderer, template, {"logo": logo})

        rendered = Document(io.BytesIO(output))
        assert len(rendered.inline_shapes) == 1
        assert rendered.paragraphs[0].text == "Logo:  (official)"

    def test_image_directive_requires_image(self, renderer):
        template = build_docx("{{IMAGE logo}}")

        with pytest.raises(RenderError):
            self.render(renderer, template, {"logo": "not an image"})

    def test_image_with_undecodable_payload(self, renderer):
        template = build_docx("{{IMAGE logo}}")
        logo = ImageDescriptor(width=2, height=2, data="AAAA", extension=".png")

        with pytest.raises(RenderError):
            self.render(renderer, template, {"logo": logo})

    # =========================================================================
    # Failure Tests
    # =========================================================================

    @pytest.mark.parametrize(
        "paragraphs",
        [
            ("{{FOR x IN xs}}", "{{x}}"),
            ("{{END-FOR}}",),
            ("{{IF a}}", "{{END-FOR}}"),
            ("Inline {{FOR x IN xs}} loop {{END-FOR}}",),
            ("{{1 + 2}}",),
            ("Unclosed {{name",),
        ],
    )
    def test_invalid_templates_fail(self, renderer, paragraphs):
        with pytest.raises(RenderError):
            self.render(renderer, build_docx(*paragraphs), {"xs": [1], "a": True})

    def test_comparison_between_incompatible_types_fails(self, renderer):
        template = build_docx("{{IF total >= 10}}", "Shown", "{{END-IF}}")

        with pytest.raises(RenderError):
            self.render(renderer, template, {"total": "n/a"})

    def test_loop_over_non_list_fails(self, renderer):
        template = build_docx("{{FOR x IN xs}}", "{{x}}", "{{END-FOR}}")

        with pytest.raises(RenderError):
            self.render(renderer, template, {"xs": "abc"})

    def test_unreadable_template_fails(self, renderer):
        with pytest.raises(RenderError):
            self.render(renderer, b"PK\x03\x04 broken", {})

    # =========================================================================
    # Options Tests
    # =========================================================================

    def test_header_text_option(self, renderer):
        output = self.render(renderer, build_docx("Body"), {}, {"header_text": "CONFIDENTIAL"})

        header = Document(io.BytesIO(output)).sections[0].header
        assert "CONFIDENTIAL" in [p.text for p in header.paragraphs]

    def test_metadata_option(self, renderer):
        options = {"metadata": {"title": "Invoice 7", "Author": "Billing", "x-custom": "skip"}}

        output = self.render(renderer, build_docx("Body"), {}, options)

        properties = Document(io.BytesIO(output)).core_properties
        assert properties.title == "Invoice 7"
        assert properties.author == "Billing"

    def test_watermark_is_logged_as_unsupported(self, renderer, caplog):
        with caplog.at_level("WARNING"):
            output = self.render(renderer, build_docx("Body"), {}, {"watermark": True})

        assert read_paragraphs(output) == ["Body"]
        assert "Watermark requested but not supported" in caplog.text


class TestCommandTranslator:
    """Test suite for the command to docxtpl tag translation."""

    @pytest.mark.parametrize(
        "expression, expected",
        [
            ("!paid", "not paid"),
            ("$item.qty > 2", "item.qty > 2"),
            ("status != 'this'", "status != 'this'"),
            ("items.length >= 1", "items|length >= 1"),
            ("owner == null", "owner == none"),
        ],
    )
    def test_conditions(self, expression, expected):
        assert jinja_condition(expression, []) == expected

    def test_loop_aliases(self):
        assert jinja_path("this.name", ["line"]) == "line.name"
        assert jinja_path("$idx", ["line"]) == "loop.index0"

    def test_loop_commands_in_table_rows_become_row_tags(self):
        document = Document(io.BytesIO(build_table_docx([["{{FOR x IN xs}}", ""], ["{{x}}", ""]])))

        CommandTranslator().translate(document)

        cells = [[cell.text for cell in row.cells] for row in document.tables[0].rows]
        assert cells == [["{%tr for x in xs|each %}", ""], ["{{ x }}", ""]]
