"""Node formatters plugged into the docx engine."""

from __future__ import annotations

from pathlib import Path

from mddocx.config.models import MdDocxConfig
from mddocx.engine.base import NodeFormatter
from mddocx.engine.formatters.code import CodeFormatter
from mddocx.engine.formatters.emoji import EmojiFormatter
from mddocx.engine.formatters.image import ImageFormatter
from mddocx.engine.formatters.lists import ListFormatter
from mddocx.engine.formatters.math import MathFormatter
from mddocx.engine.formatters.table import TableFormatter
from mddocx.engine.images import ImageResolver

__all__ = [
    "CodeFormatter",
    "EmojiFormatter",
    "ImageFormatter",
    "ListFormatter",
    "MathFormatter",
    "TableFormatter",
    "build_formatters",
]


def build_formatters(config: MdDocxConfig, base_dir: str | Path | None = None) -> list[NodeFormatter]:
    """Fixed formatter set, in dispatch order: list, math, table, emoji, code, image."""
    return [
        ListFormatter(),
        MathFormatter(),
        TableFormatter(),
        EmojiFormatter(),
        CodeFormatter(config.code),
        ImageFormatter(ImageResolver(config.images, base_dir=base_dir)),
    ]
