"""Formatter contract and engine interface for Markdown-to-docx rendering."""

from __future__ import annotations

from abc import ABC
from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, ClassVar, Protocol, runtime_checkable

if TYPE_CHECKING:
    from docx.text.paragraph import Paragraph

    from mddocx.engine.builder import DocxBuilder

Node = dict[str, Any]


class FormatterKind(str, Enum):
    """Capability tag carried by every formatter."""

    list = "list"
    math = "math"
    table = "table"
    emoji = "emoji"
    code = "code"
    image = "image"


@dataclass(frozen=True)
class RunStyle:
    """Character formatting inherited by nested inline nodes."""

    bold: bool = False
    italic: bool = False
    strike: bool = False
    code: bool = False
    link: str | None = None


class NodeFormatter(ABC):
    """Renders the AST node types it declares.

    Subclasses list the block and inline node types they take over; the
    builder asks :meth:`handles` before falling back to its own handlers.
    """

    kind: ClassVar[FormatterKind]
    block_types: ClassVar[frozenset[str]] = frozenset()
    inline_types: ClassVar[frozenset[str]] = frozenset()

    def handles(self, node_type: str, *, inline: bool = False) -> bool:
        return node_type in (self.inline_types if inline else self.block_types)

    def render_block(self, node: Node, builder: DocxBuilder) -> None:
        raise NotImplementedError(f"{type(self).__name__} renders no block nodes")

    def render_inline(
        self, node: Node, builder: DocxBuilder, paragraph: Paragraph, style: RunStyle
    ) -> None:
        raise NotImplementedError(f"{type(self).__name__} renders no inline nodes")


@runtime_checkable
class RenderEngine(Protocol):
    """Turns a full Markdown document into a binary document payload."""

    def render(self, markdown: str, formatters: Sequence[NodeFormatter]) -> Any: ...
