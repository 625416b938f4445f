"""Adapters around the external diagram rendering process."""

from __future__ import annotations

import logging
import shutil
import subprocess
from abc import ABC, abstractmethod
from pathlib import Path

from mddocx.config.models import DiagramConfig
from mddocx.diagrams.models import RenderFailure, RenderOutputMissing

logger = logging.getLogger(__name__)

_LOCAL_MMDC = Path("node_modules") / ".bin" / "mmdc"


class DiagramRenderer(ABC):
    """Turns a diagram source file into a PNG image next to it."""

    @staticmethod
    def output_path_for(input_path: Path) -> Path:
        return input_path.with_suffix(".png")

    @abstractmethod
    def render(self, input_path: Path) -> Path:
        """Render ``input_path`` and return the produced image path.

        Raises RenderFailure or RenderOutputMissing.
        """
        ...


def resolve_mmdc(explicit: str | None = None, cwd: Path | None = None) -> str:
    """Pick the mermaid-cli executable.

    Checks in order:
    1. an explicit path or command name from config
    2. ./node_modules/.bin/mmdc under ``cwd``
    3. ``mmdc`` on PATH
    Falls back to the bare name so the spawn error names what was missing.
    """
    if explicit:
        return explicit
    local = (cwd or Path.cwd()) / _LOCAL_MMDC
    if local.is_file():
        return str(local)
    found = shutil.which("mmdc")
    return found or "mmdc"


class MermaidCliRenderer(DiagramRenderer):
    """Shells out to mermaid-cli (``mmdc``)."""

    def __init__(self, config: DiagramConfig) -> None:
        self.config = config
        self._executable: str | None = None

    @property
    def executable(self) -> str:
        if self._executable is None:
            self._executable = resolve_mmdc(self.config.renderer)
        return self._executable

    def command_for(self, input_path: Path, output_path: Path) -> list[str]:
        return [
            self.executable,
            "-i", str(input_path),
            "-o", str(output_path),
            "-b", self.config.background,
            "-s", str(self.config.scale),
        ]

    def render(self, input_path: Path) -> Path:
        output_path = self.output_path_for(input_path)
        cmd = self.command_for(input_path, output_path)
        logger.debug("running %s", " ".join(cmd))

        try:
            result = subprocess.run(cmd, capture_output=True, text=True)
        except OSError as e:
            raise RenderFailure(input_path, str(e)) from e

        if result.returncode != 0:
            # mmdc can leave a truncated PNG behind; the cache must not serve it.
            output_path.unlink(missing_ok=True)
            raise RenderFailure(input_path, result.stderr or "", result.returncode)

        if not output_path.is_file():
            raise RenderOutputMissing(output_path)

        return output_path
