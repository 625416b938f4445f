"""Multi-document assembly: ordering and joining of Markdown sources."""

from mddocx.assembly.joiner import PAGE_BREAK_MARKER, join_sections, separator_fragment
from mddocx.assembly.models import OrderedDocumentSet, SeparatorKind, SourceDocument
from mddocx.assembly.ordering import (
    Comparator,
    natural_compare,
    order_names,
    select_markdown_files,
)

__all__ = [
    "Comparator",
    "OrderedDocumentSet",
    "PAGE_BREAK_MARKER",
    "SeparatorKind",
    "SourceDocument",
    "join_sections",
    "natural_compare",
    "order_names",
    "select_markdown_files",
    "separator_fragment",
]
