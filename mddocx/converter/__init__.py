"""Conversion pipeline: Markdown sources to a written .docx."""

from mddocx.converter.models import (
    ConversionError,
    ConversionOptions,
    ConversionResult,
    ConversionStage,
    DirectoryNotFound,
    InputNotFound,
    InputUnreadable,
    NoEligibleFiles,
    NoInputFiles,
    NotADirectory,
    RenderEngineFailure,
    UnexpectedOutputType,
    WriteFailure,
)
from mddocx.converter.converter import MarkdownConverter, normalize_payload, read_source

__all__ = [
    "ConversionError",
    "ConversionOptions",
    "ConversionResult",
    "ConversionStage",
    "DirectoryNotFound",
    "InputNotFound",
    "InputUnreadable",
    "MarkdownConverter",
    "NoEligibleFiles",
    "NoInputFiles",
    "NotADirectory",
    "RenderEngineFailure",
    "UnexpectedOutputType",
    "WriteFailure",
    "normalize_payload",
    "read_source",
]
