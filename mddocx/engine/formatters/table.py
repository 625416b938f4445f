"""GFM tables."""

from __future__ import annotations

from docx.enum.table import WD_TABLE_ALIGNMENT
from docx.enum.text import WD_ALIGN_PARAGRAPH
from docx.oxml import parse_xml
from docx.oxml.ns import nsdecls

from mddocx.engine.base import FormatterKind, Node, NodeFormatter, RunStyle
from mddocx.engine.builder import DocxBuilder

HEADER_FILL = "F2F2F2"
BORDER_COLOR = "CCCCCC"

_ALIGNMENTS = {
    "left": WD_ALIGN_PARAGRAPH.LEFT,
    "center": WD_ALIGN_PARAGRAPH.CENTER,
    "right": WD_ALIGN_PARAGRAPH.RIGHT,
}


def _collect_rows(node: Node) -> tuple[list[Node], list[list[Node]]]:
    """Split a mistune table node into header cells and body rows."""
    header: list[Node] = []
    body: list[list[Node]] = []
    for section in node.get("children") or []:
        section_type = section.get("type")
        if section_type == "table_head":
            for item in section.get("children") or []:
                if item.get("type") == "table_cell":
                    header.append(item)
                elif item.get("type") == "table_row":
                    header.extend(item.get("children") or [])
        elif section_type == "table_body":
            for row in section.get("children") or []:
                if row.get("type") == "table_row":
                    body.append(list(row.get("children") or []))
    return header, body


class TableFormatter(NodeFormatter):
    kind = FormatterKind.table
    block_types = frozenset({"table"})

    def render_block(self, node: Node, builder: DocxBuilder) -> None:
        header, body = _collect_rows(node)
        if not header:
            return

        cols = len(header)
        table = builder.container.add_table(rows=1 + len(body), cols=cols)
        try:
            table.style = "Table Grid"
        except KeyError:
            self._set_borders(table)
        table.alignment = WD_TABLE_ALIGNMENT.CENTER

        for col, cell_node in enumerate(header):
            cell = table.rows[0].cells[col]
            self._fill(builder, cell, cell_node, RunStyle(bold=True))
            self._shade(cell, HEADER_FILL)

        for row_idx, row in enumerate(body, start=1):
            for col in range(cols):
                cell_node = row[col] if col < len(row) else {"type": "table_cell", "children": []}
                self._fill(builder, table.rows[row_idx].cells[col], cell_node, RunStyle())

        # Keep following content from fusing with the table.
        builder.add_paragraph()

    @staticmethod
    def _fill(builder: DocxBuilder, cell, cell_node: Node, style: RunStyle) -> None:
        paragraph = cell.paragraphs[0]
        align = (cell_node.get("attrs") or {}).get("align")
        if align in _ALIGNMENTS:
            paragraph.alignment = _ALIGNMENTS[align]
        with builder.inside(cell):
            builder.render_inline(cell_node.get("children") or [], paragraph, style)

    @staticmethod
    def _shade(cell, color: str) -> None:
        tc_pr = cell._element.get_or_add_tcPr()
        tc_pr.append(parse_xml(f'<w:shd {nsdecls("w")} w:val="clear" w:color="auto" w:fill="{color}"/>'))

    @staticmethod
    def _set_borders(table) -> None:
        tbl_pr = table._tbl.tblPr
        edges = "".join(
            f'<w:{edge} w:val="single" w:sz="4" w:space="0" w:color="{BORDER_COLOR}"/>'
            for edge in ("top", "left", "bottom", "right", "insideH", "insideV")
        )
        tbl_pr.append(parse_xml(f'<w:tblBorders {nsdecls("w")}>{edges}</w:tblBorders>'))
