"""Syntax-highlighted code blocks."""

from __future__ import annotations

from docx.oxml.ns import qn
from docx.shared import Pt, RGBColor
from docx.text.paragraph import Paragraph

from mddocx.config.models import CodeStyleConfig
from mddocx.engine.base import FormatterKind, Node, NodeFormatter
from mddocx.engine.builder import DocxBuilder, set_shading
from mddocx.engine.highlight import TokenSpan, highlight_lines

LINE_NUMBER_COLOR = "999999"


class CodeFormatter(NodeFormatter):
    """One shaded paragraph per source line, coloured by Pygments tokens."""

    kind = FormatterKind.code
    block_types = frozenset({"block_code"})

    def __init__(self, config: CodeStyleConfig | None = None) -> None:
        self.config = config or CodeStyleConfig()

    def render_block(self, node: Node, builder: DocxBuilder) -> None:
        code = node.get("raw", "").rstrip("\n")
        language = (node.get("attrs") or {}).get("info")

        lines = highlight_lines(code, language, self.config.style)
        if lines is None:
            lines = [[TokenSpan(text=line)] if line else [] for line in code.split("\n")]

        last = len(lines) - 1
        for index, spans in enumerate(lines):
            paragraph = builder.add_paragraph()
            self._format_line(paragraph, first=index == 0, last=index == last)
            if self.config.show_line_numbers:
                self._add_span(paragraph, TokenSpan(f"{index + 1:>3} │ ", LINE_NUMBER_COLOR))
            if not spans:
                # Word collapses empty paragraphs, keep blank lines visible.
                self._add_span(paragraph, TokenSpan(" "))
            for span in spans:
                self._add_span(paragraph, span)

    def _format_line(self, paragraph: Paragraph, *, first: bool, last: bool) -> None:
        fmt = paragraph.paragraph_format
        fmt.space_before = Pt(6) if first else Pt(0)
        fmt.space_after = Pt(6) if last else Pt(0)
        fmt.line_spacing = 1.15
        set_shading(paragraph._p.get_or_add_pPr(), self.config.background_color)

    def _add_span(self, paragraph: Paragraph, span: TokenSpan) -> None:
        run = paragraph.add_run(span.text)
        font = run.font
        font.name = self.config.font_family
        run._r.get_or_add_rPr().get_or_add_rFonts().set(qn("w:eastAsia"), self.config.font_family)
        font.size = Pt(self.config.font_size / 2)
        if span.color:
            font.color.rgb = RGBColor.from_string(span.color.upper())
        if span.bold:
            font.bold = True
        if span.italic:
            font.italic = True
