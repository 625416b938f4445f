"""Markdown-to-docx conversion pipeline with diagram preprocessing."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from pathlib import Path

from mddocx.assembly import (
    Comparator,
    OrderedDocumentSet,
    SourceDocument,
    join_sections,
    order_names,
    select_markdown_files,
)
from mddocx.config.models import MdDocxConfig
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
)
from mddocx.diagrams import (
    DiagramPreprocessor,
    DiagramRenderer,
    MermaidCliRenderer,
    PreprocessResult,
    RenderCache,
)
from mddocx.engine import DocxRenderEngine, RenderEngine, build_formatters
from mddocx.engine.docx_engine import strip_front_matter
from mddocx.output.writer import DocxWriter

logger = logging.getLogger(__name__)


def normalize_payload(output: object) -> bytes:
    """Coerce engine output to ``bytes``; reject anything non-binary."""
    if isinstance(output, bytes):
        return output
    if isinstance(output, (bytearray, memoryview)):
        return bytes(output)
    raise UnexpectedOutputType(output)


class MarkdownConverter:
    """Runs Markdown sources through preprocessing, rendering and writing.

    One pipeline per call: ``idle -> preprocessing -> rendering ->
    normalizing -> writing -> done``. The stage reached is kept on
    :attr:`stage`; a failure leaves it at the stage that failed. Inputs are
    validated before any of them is read, and nothing is written unless
    rendering succeeded.
    """

    def __init__(
        self,
        config: MdDocxConfig | None = None,
        renderer: DiagramRenderer | None = None,
        engine: RenderEngine | None = None,
    ) -> None:
        self.config = config or MdDocxConfig()
        self.renderer = renderer or MermaidCliRenderer(self.config.diagrams)
        self.cache = RenderCache(self.config.diagrams.cache_dir, self.renderer)
        self.preprocessor = DiagramPreprocessor(self.cache, self.config.diagrams)
        self.engine = engine or DocxRenderEngine(code_font=self.config.code.font_family)
        self.writer = DocxWriter()
        self.stage = ConversionStage.idle
        self.last_result: ConversionResult | None = None

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def preprocess(self, text: str) -> PreprocessResult:
        """Render every diagram block in ``text`` and inline the images."""
        return self.preprocessor.process(text)

    def convert(self, text: str, options: ConversionOptions | None = None) -> bytes:
        """Convert Markdown text to .docx bytes."""
        return self.render(text, options).payload

    def render(
        self,
        text: str,
        options: ConversionOptions | None = None,
        base_dir: str | Path | None = None,
    ) -> ConversionResult:
        """Like :meth:`convert` but returns payload plus warnings and counts.

        ``base_dir`` anchors relative image paths.
        """
        documents = OrderedDocumentSet([SourceDocument(name="", body=text)])
        result = self._render_set(documents, options or ConversionOptions(), base_dir)
        self._enter(ConversionStage.done)
        return result

    def convert_file(
        self,
        input_path: str | Path,
        output_path: str | Path,
        options: ConversionOptions | None = None,
    ) -> Path:
        self.stage = ConversionStage.idle
        path = Path(input_path)
        if not path.is_file():
            raise InputNotFound(path)

        documents = OrderedDocumentSet([SourceDocument(path.name, read_source(path))])
        return self._convert_to(documents, output_path, options, base_dir=path.parent)

    def convert_directory(
        self,
        input_dir: str | Path,
        output_path: str | Path,
        options: ConversionOptions | None = None,
        comparator: Comparator | None = None,
    ) -> Path:
        """Merge every ``.md`` file of ``input_dir`` in natural order.

        ``comparator`` replaces the natural ordering entirely when given.
        """
        self.stage = ConversionStage.idle
        directory = Path(input_dir)
        if not directory.exists():
            raise DirectoryNotFound(directory)
        if not directory.is_dir():
            raise NotADirectory(directory)

        names = order_names(select_markdown_files(directory), comparator)
        if not names:
            raise NoEligibleFiles(directory)

        logger.debug("merging %d file(s) from %s: %s", len(names), directory, names)
        documents = OrderedDocumentSet(
            [SourceDocument(name, read_source(directory / name)) for name in names]
        )
        return self._convert_to(documents, output_path, options, base_dir=directory)

    def convert_files(
        self,
        paths: Sequence[str | Path],
        output_path: str | Path,
        options: ConversionOptions | None = None,
    ) -> Path:
        """Merge ``paths`` in the given order (no sorting)."""
        self.stage = ConversionStage.idle
        if not paths:
            raise NoInputFiles()

        files = [Path(p) for p in paths]
        for path in files:
            if not path.is_file():
                raise InputNotFound(path)

        documents = OrderedDocumentSet([SourceDocument(p.name, read_source(p)) for p in files])
        return self._convert_to(documents, output_path, options, base_dir=files[0].parent)

    def cleanup(self) -> int:
        """Purge the diagram render cache. Returns the number of files removed."""
        return self.cache.clear()

    # ------------------------------------------------------------------
    # Pipeline
    # ------------------------------------------------------------------

    def _convert_to(
        self,
        documents: OrderedDocumentSet,
        output_path: str | Path,
        options: ConversionOptions | None,
        base_dir: Path,
    ) -> Path:
        result = self._render_set(documents, options or ConversionOptions(), base_dir)

        self._enter(ConversionStage.writing)
        dest = self.writer.write(result.payload, output_path)

        self._enter(ConversionStage.done)
        return dest

    def _render_set(
        self,
        documents: OrderedDocumentSet,
        options: ConversionOptions,
        base_dir: str | Path | None,
    ) -> ConversionResult:
        self.stage = ConversionStage.idle
        bodies = documents.bodies
        if len(documents) > 1:
            bodies = [strip_front_matter(body) for body in bodies]

        warnings: list[str] = []
        rendered = 0
        if options.render_diagrams:
            self._enter(ConversionStage.preprocessing)
            processed: list[str] = []
            for doc, body in zip(documents.documents, bodies):
                outcome = self.preprocess(body)
                rendered += outcome.rendered
                prefix = f"{doc.name}: " if doc.name else ""
                warnings.extend(prefix + f.describe() for f in outcome.failures)
                processed.append(outcome.text)
            bodies = processed

        merged = join_sections(bodies, options.separator)

        self._enter(ConversionStage.rendering)
        formatters = build_formatters(self.config, base_dir=base_dir)
        try:
            output = self.engine.render(merged, formatters)
        except ConversionError:
            raise
        except Exception as e:
            raise RenderEngineFailure(e) from e

        self._enter(ConversionStage.normalizing)
        payload = normalize_payload(output)

        result = ConversionResult(
            payload=payload,
            warnings=warnings,
            diagrams_rendered=rendered,
            sources=[name for name in documents.names if name],
        )
        self.last_result = result
        return result

    def _enter(self, stage: ConversionStage) -> None:
        logger.debug("stage %s -> %s", self.stage.value, stage.value)
        self.stage = stage


def read_source(path: Path) -> str:
    """Read a Markdown source as UTF-8, raising InputUnreadable on failure."""
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise InputUnreadable(path, e) from e
