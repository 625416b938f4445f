"""Embedded images (data URIs, remote URLs, local files)."""

from __future__ import annotations

import logging
from dataclasses import replace

from docx.shared import Inches
from docx.text.paragraph import Paragraph

from mddocx.engine.base import FormatterKind, Node, NodeFormatter, RunStyle
from mddocx.engine.builder import DocxBuilder, flatten_text
from mddocx.engine.images import ImageResolveError, ImageResolver

logger = logging.getLogger(__name__)


class ImageFormatter(NodeFormatter):
    kind = FormatterKind.image
    inline_types = frozenset({"image"})

    def __init__(self, resolver: ImageResolver) -> None:
        self.resolver = resolver

    def render_inline(
        self, node: Node, builder: DocxBuilder, paragraph: Paragraph, style: RunStyle
    ) -> None:
        src = (node.get("attrs") or {}).get("url", "")
        alt = flatten_text(node.get("children") or []) or "image"
        try:
            image = self.resolver.resolve(src)
            dpi = self.resolver.config.dpi
            paragraph.add_run().add_picture(
                image.stream,
                width=Inches(image.width_px / dpi),
                height=Inches(image.height_px / dpi),
            )
        except ImageResolveError as e:
            logger.warning("%s", e)
            builder.add_run(paragraph, f"[Image: {alt}]", replace(style, italic=True, link=None))
