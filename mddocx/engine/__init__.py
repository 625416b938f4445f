from mddocx.engine.base import FormatterKind, Node, NodeFormatter, RenderEngine, RunStyle
from mddocx.engine.builder import DocxBuilder
from mddocx.engine.docx_engine import DocxRenderEngine
from mddocx.engine.formatters import build_formatters
from mddocx.engine.images import ImageResolveError, ImageResolver, ResolvedImage

__all__ = [
    "DocxBuilder",
    "DocxRenderEngine",
    "FormatterKind",
    "ImageResolveError",
    "ImageResolver",
    "Node",
    "NodeFormatter",
    "RenderEngine",
    "ResolvedImage",
    "RunStyle",
    "build_formatters",
]
