"""Data types and errors for the diagram subsystem."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path


@dataclass(frozen=True)
class DiagramBlock:
    """One fenced diagram region of a Markdown text.

    ``start``/``end`` are half-open character offsets into the text the
    block was scanned from, covering the whole fence including backticks.
    """

    source_text: str
    start: int
    end: int


class DiagramRenderError(Exception):
    """Base class for failures of the external diagram renderer."""


class RenderFailure(DiagramRenderError):
    """The renderer process could not run or exited non-zero."""

    def __init__(self, input_path: Path, stderr: str, returncode: int | None = None) -> None:
        self.input_path = input_path
        self.stderr = stderr
        self.returncode = returncode
        detail = stderr.strip() or "no error output"
        if returncode is None:
            super().__init__(f"Diagram rendering failed for {input_path}: {detail}")
        else:
            super().__init__(
                f"Diagram rendering failed for {input_path} (exit {returncode}): {detail}"
            )


class RenderOutputMissing(DiagramRenderError):
    """The renderer exited cleanly but never produced its output file."""

    def __init__(self, output_path: Path) -> None:
        self.output_path = output_path
        super().__init__(f"Diagram output file not created: {output_path}")


@dataclass
class DiagramFailure:
    """A block that was left unrendered, with the reason."""

    block: DiagramBlock
    error: DiagramRenderError

    def describe(self) -> str:
        first_line = self.block.source_text.splitlines()[0] if self.block.source_text else ""
        return f"diagram at offset {self.block.start} ({first_line!r}): {self.error}"


@dataclass
class PreprocessResult:
    """Output of running diagram preprocessing over one Markdown text."""

    text: str
    rendered: int = 0
    failures: list[DiagramFailure] = field(default_factory=list)

    @property
    def has_failures(self) -> bool:
        return bool(self.failures)
