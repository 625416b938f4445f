"""LaTeX math rendered as native Word equations (OMML)."""

from __future__ import annotations

import logging

import mathml2omml
from docx.enum.text import WD_ALIGN_PARAGRAPH
from docx.oxml import parse_xml
from docx.text.paragraph import Paragraph
from latex2mathml.converter import convert as latex_to_mathml

from mddocx.engine.base import FormatterKind, Node, NodeFormatter, RunStyle
from mddocx.engine.builder import DocxBuilder

logger = logging.getLogger(__name__)

M_NS = "http://schemas.openxmlformats.org/officeDocument/2006/math"
W_NS = "http://schemas.openxmlformats.org/wordprocessingml/2006/main"


def latex_to_omml(latex: str) -> str:
    """Convert a LaTeX expression to an ``<m:oMath>`` fragment."""
    return mathml2omml.convert(latex_to_mathml(latex))


def _with_namespace(omml: str) -> str:
    s = omml.strip()
    head = s.split(">", 1)[0]
    if s.startswith("<m:oMath") and "xmlns:m=" not in head:
        s = s.replace("<m:oMath", f'<m:oMath xmlns:m="{M_NS}" xmlns:w="{W_NS}"', 1)
    return s


class MathFormatter(NodeFormatter):
    kind = FormatterKind.math
    block_types = frozenset({"block_math"})
    inline_types = frozenset({"inline_math"})

    def render_block(self, node: Node, builder: DocxBuilder) -> None:
        latex = node.get("raw", "").strip()
        if not latex:
            return
        paragraph = builder.add_paragraph()
        paragraph.alignment = WD_ALIGN_PARAGRAPH.CENTER
        try:
            omml = latex_to_omml(latex)
            paragraph._p.append(parse_xml(
                f'<m:oMathPara xmlns:m="{M_NS}" xmlns:w="{W_NS}">{omml}</m:oMathPara>'
            ))
        except Exception as e:
            logger.warning("Math conversion failed, keeping LaTeX source: %s", e)
            builder.add_run(paragraph, f"$${latex}$$", RunStyle(code=True))

    def render_inline(
        self, node: Node, builder: DocxBuilder, paragraph: Paragraph, style: RunStyle
    ) -> None:
        latex = node.get("raw", "").strip()
        if not latex:
            return
        try:
            element = parse_xml(_with_namespace(latex_to_omml(latex)))
        except Exception as e:
            logger.warning("Inline math conversion failed, keeping LaTeX source: %s", e)
            builder.add_run(paragraph, f"${latex}$", style)
            return
        paragraph._p.append(element)
