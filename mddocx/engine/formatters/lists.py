"""Bullet, numbered and task lists."""

from __future__ import annotations

from docx.shared import Inches, Pt

from mddocx.engine.base import FormatterKind, Node, NodeFormatter, RunStyle
from mddocx.engine.builder import DocxBuilder

BULLETS = ("•", "◦", "▪")
CHECKED = "☑"
UNCHECKED = "☐"

_LEVEL_INDENT_IN = 0.25
_HANGING_IN = 0.25


class ListFormatter(NodeFormatter):
    kind = FormatterKind.list
    block_types = frozenset({"list"})

    def render_block(self, node: Node, builder: DocxBuilder) -> None:
        self._render_list(node, builder, level=0)

    def _render_list(self, node: Node, builder: DocxBuilder, level: int) -> None:
        attrs = node.get("attrs") or {}
        ordered = bool(attrs.get("ordered"))
        counter = attrs.get("start", 1) or 1

        for item in node.get("children") or []:
            item_type = item.get("type")
            if item_type not in ("list_item", "task_list_item"):
                continue
            if ordered:
                prefix = f"{counter}. "
                counter += 1
            else:
                prefix = BULLETS[min(level, len(BULLETS) - 1)] + " "
            if item_type == "task_list_item":
                checked = (item.get("attrs") or {}).get("checked")
                prefix += (CHECKED if checked else UNCHECKED) + " "
            self._render_item(item, builder, level, prefix)

    def _render_item(self, item: Node, builder: DocxBuilder, level: int, prefix: str) -> None:
        first = True
        for child in item.get("children") or []:
            child_type = child.get("type")
            if child_type in ("paragraph", "block_text"):
                paragraph = builder.add_paragraph()
                fmt = paragraph.paragraph_format
                fmt.left_indent = Inches(_LEVEL_INDENT_IN * (level + 1) + _HANGING_IN)
                fmt.first_line_indent = Inches(-_HANGING_IN)
                fmt.space_before = Pt(1)
                fmt.space_after = Pt(1)
                # Continuation paragraphs are indented but unmarked.
                builder.add_run(paragraph, prefix if first else "", RunStyle())
                first = False
                builder.render_inline(child.get("children") or [], paragraph)
            elif child_type == "list":
                self._render_list(child, builder, level + 1)
            elif child_type == "blank_line":
                continue
            else:
                builder.render_block(child)
                first = False
