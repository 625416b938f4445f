"""Models and errors for the conversion pipeline."""

from __future__ import annotations

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from mddocx.assembly.models import SeparatorKind


class ConversionOptions(BaseModel):
    """Per-call switches. Frozen so one call cannot leak into the next."""

    model_config = ConfigDict(frozen=True)

    render_diagrams: bool = False
    separator: SeparatorKind = SeparatorKind.page_break


class ConversionResult(BaseModel):
    """Outcome of rendering one (possibly merged) Markdown document."""

    payload: bytes
    warnings: list[str] = Field(default_factory=list)
    diagrams_rendered: int = 0
    sources: list[str] = Field(default_factory=list)


class ConversionStage(str, Enum):
    idle = "idle"
    preprocessing = "preprocessing"
    rendering = "rendering"
    normalizing = "normalizing"
    writing = "writing"
    done = "done"


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


class ConversionError(Exception):
    """Base for every fatal conversion error."""


class RenderEngineFailure(ConversionError):
    """The rendering engine raised while producing the document."""

    def __init__(self, cause: BaseException) -> None:
        self.cause = cause
        super().__init__(f"Document rendering failed: {cause}")


class UnexpectedOutputType(ConversionError):
    """The rendering engine returned something other than binary data."""

    def __init__(self, output: object) -> None:
        self.output_type = type(output).__name__
        super().__init__(f"Unexpected output type from rendering engine: {self.output_type}")


class _PathError(ConversionError):
    template = "{path}"

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        super().__init__(self.template.format(path=path))


class InputNotFound(_PathError):
    template = "Input file not found: {path}"


class DirectoryNotFound(_PathError):
    template = "Input directory not found: {path}"


class NotADirectory(_PathError):
    template = "Not a directory: {path}"


class NoEligibleFiles(_PathError):
    template = "No markdown files found in: {path}"


class InputUnreadable(ConversionError):
    """An input exists but could not be read or decoded as UTF-8."""

    def __init__(self, path: str | Path, cause: Exception) -> None:
        self.path = Path(path)
        self.cause = cause
        super().__init__(f"Cannot read {path}: {cause}")


class NoInputFiles(ConversionError):
    def __init__(self) -> None:
        super().__init__("No input files provided")


class WriteFailure(ConversionError):
    def __init__(self, path: str | Path, cause: OSError) -> None:
        self.path = Path(path)
        self.cause = cause
        super().__init__(f"Failed to write {path}: {cause}")
