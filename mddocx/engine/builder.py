"""Walks a mistune AST and emits python-docx content."""

from __future__ import annotations

import logging
import re
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from dataclasses import replace
from typing import Any

from docx.enum.text import WD_BREAK
from docx.opc.constants import RELATIONSHIP_TYPE as RT
from docx.oxml import OxmlElement, parse_xml
from docx.oxml.ns import nsdecls, qn
from docx.shared import Inches, Pt, RGBColor
from docx.text.paragraph import Paragraph
from docx.text.run import Run

from mddocx.engine.base import Node, NodeFormatter, RunStyle

logger = logging.getLogger(__name__)

LINK_COLOR = "0563C1"
INLINE_CODE_BG = "F0F0F0"
QUOTE_INDENT_IN = 0.4

_PAGE_BREAK_RE = re.compile(r"page-break-(?:after|before)\s*:\s*always", re.IGNORECASE)
_BR_RE = re.compile(r"^<br\s*/?>$", re.IGNORECASE)


def flatten_text(nodes: Any) -> str:
    """Recursively extract plain text from AST nodes."""
    if isinstance(nodes, str):
        return nodes
    if isinstance(nodes, dict):
        if "children" in nodes:
            return flatten_text(nodes["children"])
        return nodes.get("raw", "")
    if isinstance(nodes, list):
        return "".join(flatten_text(n) for n in nodes)
    return ""


def set_shading(element, color: str) -> None:
    element.append(parse_xml(f'<w:shd {nsdecls("w")} w:val="clear" w:color="auto" w:fill="{color}"/>'))


class DocxBuilder:
    """Accumulates python-docx elements from parsed Markdown nodes.

    Node types claimed by a formatter go to the first formatter in the list
    that handles them; everything else uses the handlers defined here.
    """

    def __init__(self, document, formatters: Sequence[NodeFormatter], code_font: str = "Consolas") -> None:
        self.document = document
        self.formatters = list(formatters)
        self.code_font = code_font
        self._containers: list[Any] = [document]
        self._quote_depth = 0

    # -- containers ----------------------------------------------------------

    @property
    def container(self):
        return self._containers[-1]

    @contextmanager
    def inside(self, container) -> Iterator[None]:
        """Route new paragraphs into ``container`` (e.g. a table cell)."""
        self._containers.append(container)
        try:
            yield
        finally:
            self._containers.pop()

    def add_paragraph(self, style: str | None = None) -> Paragraph:
        paragraph = self.container.add_paragraph(style=style)
        if self._quote_depth:
            paragraph.paragraph_format.left_indent = Inches(QUOTE_INDENT_IN * self._quote_depth)
            pPr = paragraph._p.get_or_add_pPr()
            pPr.append(parse_xml(
                f'<w:pBdr {nsdecls("w")}>'
                f'<w:left w:val="single" w:sz="12" w:space="8" w:color="AAAAAA"/>'
                f"</w:pBdr>"
            ))
        return paragraph

    # -- dispatch ------------------------------------------------------------

    def formatter_for(self, node_type: str, *, inline: bool = False) -> NodeFormatter | None:
        for formatter in self.formatters:
            if formatter.handles(node_type, inline=inline):
                return formatter
        return None

    def render_blocks(self, nodes: Sequence[Node]) -> None:
        for node in nodes:
            self.render_block(node)

    def render_block(self, node: Node) -> None:
        node_type = node.get("type", "")
        formatter = self.formatter_for(node_type)
        if formatter is not None:
            formatter.render_block(node, self)
            return

        handler = getattr(self, f"_block_{node_type}", None)
        if handler is not None:
            handler(node)
            return

        logger.debug("No handler for block node %r, rendering its content", node_type)
        children = node.get("children")
        if isinstance(children, list):
            self.render_blocks(children)
        elif node.get("raw"):
            self.add_run(self.add_paragraph(), node["raw"], RunStyle())

    def render_inline(self, nodes: Sequence[Node], paragraph: Paragraph, style: RunStyle = RunStyle()) -> None:
        for node in nodes:
            node_type = node.get("type", "")
            formatter = self.formatter_for(node_type, inline=True)
            if formatter is not None:
                formatter.render_inline(node, self, paragraph, style)
                continue

            children = node.get("children") or []
            if node_type == "text":
                self.add_run(paragraph, node.get("raw", ""), style)
            elif node_type == "strong":
                self.render_inline(children, paragraph, replace(style, bold=True))
            elif node_type == "emphasis":
                self.render_inline(children, paragraph, replace(style, italic=True))
            elif node_type == "strikethrough":
                self.render_inline(children, paragraph, replace(style, strike=True))
            elif node_type == "codespan":
                self.add_run(paragraph, node.get("raw", ""), replace(style, code=True))
            elif node_type == "link":
                self._inline_link(node, paragraph, style)
            elif node_type == "softbreak":
                self.add_run(paragraph, " ", style)
            elif node_type == "linebreak":
                paragraph.add_run().add_break()
            elif node_type == "inline_html":
                raw = node.get("raw", "")
                if _BR_RE.match(raw.strip()):
                    paragraph.add_run().add_break()
                else:
                    self.add_run(paragraph, raw, style)
            elif node_type == "image":
                alt = flatten_text(children) or node.get("attrs", {}).get("url", "")
                self.add_run(paragraph, f"[Image: {alt}]", replace(style, italic=True))
            elif children:
                self.render_inline(children, paragraph, style)
            else:
                self.add_run(paragraph, node.get("raw", ""), style)

    # -- runs ----------------------------------------------------------------

    def add_run(self, paragraph: Paragraph, text: str, style: RunStyle) -> Run | None:
        if not text:
            return None
        if style.link:
            self._add_hyperlink(paragraph, style.link, text, style)
            return None
        run = paragraph.add_run(text)
        if style.bold:
            run.bold = True
        if style.italic:
            run.italic = True
        if style.strike:
            run.font.strike = True
        if style.code:
            run.font.name = self.code_font
            run.font.size = Pt(9.5)
            set_shading(run._r.get_or_add_rPr(), INLINE_CODE_BG)
        return run

    def _inline_link(self, node: Node, paragraph: Paragraph, style: RunStyle) -> None:
        url = (node.get("attrs") or {}).get("url", "")
        children = node.get("children") or []
        # Linked images (badges) keep the image and drop the link.
        if not url or any(c.get("type") == "image" for c in children):
            self.render_inline(children, paragraph, style)
            return
        self.render_inline(children, paragraph, replace(style, link=url))

    def _add_hyperlink(self, paragraph: Paragraph, url: str, text: str, style: RunStyle) -> None:
        r_id = paragraph.part.relate_to(url, RT.HYPERLINK, is_external=True)
        hyperlink = OxmlElement("w:hyperlink")
        hyperlink.set(qn("r:id"), r_id)

        run = OxmlElement("w:r")
        rPr = OxmlElement("w:rPr")
        if style.bold:
            rPr.append(OxmlElement("w:b"))
        if style.italic:
            rPr.append(OxmlElement("w:i"))
        if style.strike:
            rPr.append(OxmlElement("w:strike"))
        color = OxmlElement("w:color")
        color.set(qn("w:val"), LINK_COLOR)
        rPr.append(color)
        underline = OxmlElement("w:u")
        underline.set(qn("w:val"), "single")
        rPr.append(underline)
        run.append(rPr)

        t = OxmlElement("w:t")
        t.text = text
        t.set(qn("xml:space"), "preserve")
        run.append(t)
        hyperlink.append(run)
        paragraph._p.append(hyperlink)

    # -- default block handlers ---------------------------------------------

    def _block_heading(self, node: Node) -> None:
        level = min(max(int((node.get("attrs") or {}).get("level", 1)), 1), 6)
        paragraph = self.add_paragraph(style=f"Heading {level}")
        self.render_inline(node.get("children") or [], paragraph)

    def _block_paragraph(self, node: Node) -> None:
        paragraph = self.add_paragraph()
        self.render_inline(node.get("children") or [], paragraph)

    _block_block_text = _block_paragraph

    def _block_block_quote(self, node: Node) -> None:
        self._quote_depth += 1
        try:
            self.render_blocks(node.get("children") or [])
        finally:
            self._quote_depth -= 1

    def _block_thematic_break(self, node: Node) -> None:
        paragraph = self.add_paragraph()
        pPr = paragraph._p.get_or_add_pPr()
        pPr.append(parse_xml(
            f'<w:pBdr {nsdecls("w")}>'
            f'<w:bottom w:val="single" w:sz="6" w:space="1" w:color="CCCCCC"/>'
            f"</w:pBdr>"
        ))

    def _block_block_html(self, node: Node) -> None:
        raw = node.get("raw", "").strip()
        if not raw:
            return
        if _PAGE_BREAK_RE.search(raw):
            self.add_page_break()
            return
        run = self.add_run(self.add_paragraph(), raw, RunStyle())
        if run is not None:
            run.font.size = Pt(9)
            run.font.color.rgb = RGBColor(0x88, 0x88, 0x88)

    def _block_block_code(self, node: Node) -> None:
        paragraph = self.add_paragraph()
        set_shading(paragraph._p.get_or_add_pPr(), INLINE_CODE_BG)
        self.add_run(paragraph, node.get("raw", "").rstrip("\n"), RunStyle(code=True))

    def _block_blank_line(self, node: Node) -> None:
        pass

    def add_page_break(self) -> None:
        self.add_paragraph().add_run().add_break(WD_BREAK.PAGE)
