"""``:shortcode:`` emoji in text runs."""

from __future__ import annotations

import emoji
from docx.text.paragraph import Paragraph

from mddocx.engine.base import FormatterKind, Node, NodeFormatter, RunStyle
from mddocx.engine.builder import DocxBuilder


class EmojiFormatter(NodeFormatter):
    kind = FormatterKind.emoji
    inline_types = frozenset({"text"})

    def render_inline(
        self, node: Node, builder: DocxBuilder, paragraph: Paragraph, style: RunStyle
    ) -> None:
        text = node.get("raw", "")
        if ":" in text and not style.code:
            text = emoji.emojize(text, language="alias")
        builder.add_run(paragraph, text, style)
