"""Replace diagram blocks in Markdown with embedded PNG image references."""

from __future__ import annotations

import base64
import logging
from collections.abc import Mapping, Sequence
from concurrent.futures import ThreadPoolExecutor

from mddocx.config.models import DiagramConfig
from mddocx.diagrams.cache import RenderCache
from mddocx.diagrams.models import (
    DiagramBlock,
    DiagramFailure,
    DiagramRenderError,
    PreprocessResult,
    RenderOutputMissing,
)
from mddocx.diagrams.scanner import scan_diagram_blocks

logger = logging.getLogger(__name__)


def image_reference(png: bytes, alt: str) -> str:
    """Markdown for an inline base64 PNG, padded with blank lines."""
    data = base64.b64encode(png).decode("ascii")
    return f"\n\n![{alt}](data:image/png;base64,{data})\n\n"


def rewrite_blocks(
    text: str,
    blocks: Sequence[DiagramBlock],
    replacements: Mapping[DiagramBlock, str],
) -> str:
    """Stream ``text`` into a new string, swapping each block for its replacement.

    Offsets are always read against the original ``text``; blocks without a
    replacement keep their original span.
    """
    parts: list[str] = []
    cursor = 0
    for block in sorted(blocks, key=lambda b: b.start):
        parts.append(text[cursor:block.start])
        parts.append(replacements.get(block, text[block.start:block.end]))
        cursor = block.end
    parts.append(text[cursor:])
    return "".join(parts)


class DiagramPreprocessor:
    """Scans a text, renders its diagrams through the cache, and rewrites it."""

    def __init__(self, cache: RenderCache, config: DiagramConfig) -> None:
        self.cache = cache
        self.config = config

    def process(self, text: str) -> PreprocessResult:
        blocks = scan_diagram_blocks(text, self.config.language)
        if not blocks:
            return PreprocessResult(text=text)

        outcomes = self._render_all(blocks)

        replacements: dict[DiagramBlock, str] = {}
        failures: list[DiagramFailure] = []
        for block in blocks:
            outcome = outcomes[block.source_text]
            if isinstance(outcome, DiagramRenderError):
                failure = DiagramFailure(block=block, error=outcome)
                logger.warning("Failed to render %s", failure.describe())
                failures.append(failure)
                continue
            replacements[block] = image_reference(outcome, self.config.alt_text)

        return PreprocessResult(
            text=rewrite_blocks(text, blocks, replacements),
            rendered=len(replacements),
            failures=failures,
        )

    def _render_all(
        self, blocks: Sequence[DiagramBlock]
    ) -> dict[str, bytes | DiagramRenderError]:
        """Resolve each distinct source once to PNG bytes; failures are returned, not raised."""
        sources = list(dict.fromkeys(b.source_text for b in blocks))

        def _resolve(source: str) -> bytes | DiagramRenderError:
            try:
                image = self.cache.resolve(source)
            except DiagramRenderError as e:
                return e
            try:
                return image.read_bytes()
            except OSError:
                # Removed by a concurrent cache clear, or never written.
                return RenderOutputMissing(image)

        workers = min(self.config.max_workers, len(sources))
        if workers <= 1:
            return {source: _resolve(source) for source in sources}

        with ThreadPoolExecutor(max_workers=workers) as pool:
            return dict(zip(sources, pool.map(_resolve, sources)))
