"""md-docx: Markdown to Word conversion with diagram rendering."""

from mddocx.config import MdDocxConfig, load_config
from mddocx.converter import (
    ConversionError,
    ConversionOptions,
    ConversionResult,
    MarkdownConverter,
)
from mddocx.assembly import SeparatorKind

__version__ = "0.1.0"

__all__ = [
    "ConversionError",
    "ConversionOptions",
    "ConversionResult",
    "MarkdownConverter",
    "MdDocxConfig",
    "SeparatorKind",
    "load_config",
]
