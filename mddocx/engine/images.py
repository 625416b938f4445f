"""Resolve Markdown image sources to bytes plus display size."""

from __future__ import annotations

import base64
import binascii
import logging
import re
from dataclasses import dataclass
from io import BytesIO
from pathlib import Path

import httpx
from PIL import Image, UnidentifiedImageError

from mddocx.config.models import ImageConfig

logger = logging.getLogger(__name__)

_DATA_URI_RE = re.compile(r"^data:image/([\w.+-]+);base64,(.+)$", re.DOTALL)

# Formats python-docx can embed directly.
_EMBEDDABLE = {"PNG", "JPEG", "GIF", "BMP", "TIFF"}

_FALLBACK_SIZE = (200, 200)


class ImageResolveError(Exception):
    """An image source could not be loaded."""

    def __init__(self, src: str, reason: str) -> None:
        self.src = src
        self.reason = reason
        shown = src if len(src) <= 80 else src[:77] + "..."
        super().__init__(f"Cannot load image {shown}: {reason}")


@dataclass
class ResolvedImage:
    data: bytes
    format: str
    width_px: float
    height_px: float

    @property
    def stream(self) -> BytesIO:
        return BytesIO(self.data)


class ImageResolver:
    """Loads data URIs, remote URLs and local files, scaled to fit the page."""

    def __init__(self, config: ImageConfig, base_dir: str | Path | None = None) -> None:
        self.config = config
        self.base_dir = Path(base_dir) if base_dir else None

    def resolve(self, src: str) -> ResolvedImage:
        src = src.strip()
        if src.startswith("data:"):
            data = self._decode_data_uri(src)
        elif src.startswith(("http://", "https://")):
            data = self._fetch(src)
        else:
            data = self._read_local(src)
        return self._measure(src, data)

    # ------------------------------------------------------------------
    # Loaders
    # ------------------------------------------------------------------

    @staticmethod
    def _decode_data_uri(src: str) -> bytes:
        match = _DATA_URI_RE.match(src)
        if match is None:
            raise ImageResolveError(src, "invalid data URI format")
        try:
            return base64.b64decode(match.group(2), validate=False)
        except (binascii.Error, ValueError) as e:
            raise ImageResolveError(src, f"bad base64 payload ({e})") from e

    def _fetch(self, src: str) -> bytes:
        logger.debug("Fetching image %s", src)
        try:
            resp = httpx.get(src, timeout=self.config.fetch_timeout, follow_redirects=True)
            resp.raise_for_status()
        except httpx.HTTPError as e:
            raise ImageResolveError(src, str(e)) from e
        return resp.content

    def _read_local(self, src: str) -> bytes:
        path = Path(src)
        if not path.is_absolute() and self.base_dir is not None:
            path = self.base_dir / path
        try:
            return path.read_bytes()
        except OSError as e:
            raise ImageResolveError(src, str(e)) from e

    # ------------------------------------------------------------------
    # Sizing
    # ------------------------------------------------------------------

    def _measure(self, src: str, data: bytes) -> ResolvedImage:
        try:
            with Image.open(BytesIO(data)) as img:
                width, height = img.size
                fmt = (img.format or "PNG").upper()
                if fmt not in _EMBEDDABLE:
                    data = self._to_png(img)
                    fmt = "PNG"
        except (UnidentifiedImageError, OSError) as e:
            raise ImageResolveError(src, f"unreadable image ({e})") from e

        if not width or not height:
            width, height = _FALLBACK_SIZE

        max_w = self.config.max_width_in * self.config.dpi
        max_h = self.config.max_height_in * self.config.dpi
        scale = min(max_w / width, max_h / height, 1.0)
        return ResolvedImage(
            data=data,
            format=fmt,
            width_px=width * scale,
            height_px=height * scale,
        )

    @staticmethod
    def _to_png(img: Image.Image) -> bytes:
        buf = BytesIO()
        img.convert("RGBA").save(buf, format="PNG")
        return buf.getvalue()
