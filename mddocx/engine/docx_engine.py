"""Markdown text to .docx bytes via mistune and python-docx."""

from __future__ import annotations

import logging
import re
from collections.abc import Sequence
from io import BytesIO

import mistune
from docx import Document

from mddocx.engine.base import NodeFormatter
from mddocx.engine.builder import DocxBuilder

logger = logging.getLogger(__name__)

_FRONT_MATTER_RE = re.compile(r"\A---\s*\n.*?\n---\s*\n", re.DOTALL)

MISTUNE_PLUGINS = ["table", "strikethrough", "math", "task_lists", "url"]


def strip_front_matter(markdown: str) -> str:
    return _FRONT_MATTER_RE.sub("", markdown, count=1)


class DocxRenderEngine:
    """Default :class:`~mddocx.engine.base.RenderEngine` implementation.

    Parses Markdown into a mistune AST, then walks it with a
    :class:`DocxBuilder` that delegates claimed node types to the given
    formatters. Returns the serialized document as ``bytes``.
    """

    def __init__(self, code_font: str = "Consolas") -> None:
        self.code_font = code_font
        self._parse = mistune.create_markdown(renderer="ast", plugins=MISTUNE_PLUGINS)

    def parse(self, markdown: str) -> list[dict]:
        return self._parse(strip_front_matter(markdown))

    def render(self, markdown: str, formatters: Sequence[NodeFormatter]) -> bytes:
        tokens = self.parse(markdown)
        logger.debug("Parsed %d top-level blocks", len(tokens))

        document = Document()
        builder = DocxBuilder(document, formatters, code_font=self.code_font)
        builder.render_blocks(tokens)

        buf = BytesIO()
        document.save(buf)
        return buf.getvalue()
