"""Diagram preprocessing: scan, render (cached), rewrite."""

from mddocx.diagrams.cache import RenderCache
from mddocx.diagrams.models import (
    DiagramBlock,
    DiagramFailure,
    DiagramRenderError,
    PreprocessResult,
    RenderFailure,
    RenderOutputMissing,
)
from mddocx.diagrams.renderer import DiagramRenderer, MermaidCliRenderer
from mddocx.diagrams.rewriter import DiagramPreprocessor, image_reference, rewrite_blocks
from mddocx.diagrams.scanner import contains_diagrams, scan_diagram_blocks

__all__ = [
    "DiagramBlock",
    "DiagramFailure",
    "DiagramPreprocessor",
    "DiagramRenderError",
    "DiagramRenderer",
    "MermaidCliRenderer",
    "PreprocessResult",
    "RenderCache",
    "RenderFailure",
    "RenderOutputMissing",
    "contains_diagrams",
    "image_reference",
    "rewrite_blocks",
    "scan_diagram_blocks",
]
