"""Content-addressed cache of rendered diagram images."""

from __future__ import annotations

import hashlib
import logging
from pathlib import Path

from mddocx.diagrams.renderer import DiagramRenderer

logger = logging.getLogger(__name__)

SOURCE_SUFFIX = ".mmd"
IMAGE_SUFFIX = ".png"


class RenderCache:
    """Maps diagram source text to a rendered PNG in a flat scratch directory.

    Files are named ``<sha256>.mmd`` (source) and ``<sha256>.png`` (image).
    Entries never expire; :meth:`clear` is the only way to drop them.
    """

    def __init__(self, cache_dir: str | Path, renderer: DiagramRenderer) -> None:
        self.cache_dir = Path(cache_dir)
        self.renderer = renderer

    @staticmethod
    def key_for(source_text: str) -> str:
        return hashlib.sha256(source_text.strip().encode("utf-8")).hexdigest()

    def image_path(self, key: str) -> Path:
        return self.cache_dir / f"{key}{IMAGE_SUFFIX}"

    def source_path(self, key: str) -> Path:
        return self.cache_dir / f"{key}{SOURCE_SUFFIX}"

    def lookup(self, source_text: str) -> Path | None:
        """Return the cached image for ``source_text`` without rendering."""
        path = self.image_path(self.key_for(source_text))
        return path if path.is_file() else None

    def resolve(self, source_text: str) -> Path:
        """Return the image for ``source_text``, rendering it on a miss.

        Raises DiagramRenderError subclasses from the renderer.
        """
        key = self.key_for(source_text)
        image = self.image_path(key)
        if image.is_file():
            logger.debug("cache hit %s", key[:12])
            return image

        self.cache_dir.mkdir(parents=True, exist_ok=True)
        source = self.source_path(key)
        source.write_text(source_text.strip(), encoding="utf-8")
        logger.debug("cache miss %s, rendering", key[:12])
        return self.renderer.render(source)

    def clear(self) -> int:
        """Delete every file in the cache directory. Returns the count removed."""
        if not self.cache_dir.is_dir():
            return 0
        removed = 0
        for entry in self.cache_dir.iterdir():
            if entry.is_file():
                entry.unlink(missing_ok=True)
                removed += 1
        logger.info("cleared %d file(s) from %s", removed, self.cache_dir)
        return removed

    def stats(self) -> dict[str, int]:
        """Count cached images and their total size in bytes."""
        if not self.cache_dir.is_dir():
            return {"images": 0, "bytes": 0}
        images = [p for p in self.cache_dir.glob(f"*{IMAGE_SUFFIX}") if p.is_file()]
        return {"images": len(images), "bytes": sum(p.stat().st_size for p in images)}
