"""Tests for diagram rewriting and the preprocessor."""

import base64
import re
from io import BytesIO

from PIL import Image

from mddocx.config.models import DiagramConfig
from mddocx.diagrams.cache import RenderCache
from mddocx.diagrams.models import DiagramBlock, RenderFailure, RenderOutputMissing
from mddocx.diagrams.rewriter import DiagramPreprocessor, image_reference, rewrite_blocks
from mddocx.diagrams.scanner import scan_diagram_blocks

from conftest import StubRenderer

_DATA_URI_RE = re.compile(r"data:image/png;base64,([A-Za-z0-9+/=]+)\)")


def _image_widths(text: str) -> list[int]:
    widths = []
    for data in _DATA_URI_RE.findall(text):
        with Image.open(BytesIO(base64.b64decode(data))) as img:
            widths.append(img.size[0])
    return widths


def _preprocessor(tmp_path, renderer, **kwargs):
    config = DiagramConfig(cache_dir=str(tmp_path / "cache"), **kwargs)
    return DiagramPreprocessor(RenderCache(config.cache_dir, renderer), config)


# ---------------------------------------------------------------------------
# rewrite_blocks / image_reference
# ---------------------------------------------------------------------------


class TestRewriteBlocks:
    def test_no_blocks_is_identity(self):
        assert rewrite_blocks("abc", [], {}) == "abc"

    def test_replacements_of_different_length(self):
        text = "a\n```mermaid\nX1\n```\nb\n```mermaid\nY2\n```\nc"
        first, second = scan_diagram_blocks(text)
        out = rewrite_blocks(text, [first, second], {first: "[a much longer one]", second: "[2]"})
        assert out == "a\n[a much longer one]\nb\n[2]\nc"

    def test_unreplaced_block_kept(self):
        text = "a\n```mermaid\nX1\n```\nb\n```mermaid\nY2\n```\nc"
        first, second = scan_diagram_blocks(text)
        out = rewrite_blocks(text, [first, second], {second: "IMG"})
        assert out == "a\n```mermaid\nX1\n```\nb\nIMG\nc"

    def test_blocks_given_out_of_order(self):
        text = "0123456789"
        blocks = [DiagramBlock("x", 6, 8), DiagramBlock("y", 1, 3)]
        out = rewrite_blocks(text, blocks, {blocks[0]: "B", blocks[1]: "A"})
        assert out == "0A345B89"


class TestImageReference:
    def test_format(self):
        ref = image_reference(b"\x89PNG", "Flow")
        assert ref == "\n\n![Flow](data:image/png;base64,iVBORw==)\n\n"


# ---------------------------------------------------------------------------
# DiagramPreprocessor
# ---------------------------------------------------------------------------


class TestDiagramPreprocessor:
    def test_no_blocks_returns_text_unchanged(self, tmp_path, stub_renderer):
        text = "# Title\n\n```python\nprint(1)\n```\n"
        result = _preprocessor(tmp_path, stub_renderer).process(text)
        assert result.text == text
        assert result.rendered == 0
        assert stub_renderer.calls == []

    def test_blocks_replaced_in_place(self, tmp_path, stub_renderer):
        text = "a\n```mermaid\nX1\n```\nb\n```mermaid\nY2\n```\nc"
        result = _preprocessor(tmp_path, stub_renderer).process(text)

        assert "```mermaid" not in result.text
        assert result.rendered == 2
        assert result.text.startswith("a\n\n\n![Mermaid Diagram](data:image/png;base64,")
        assert result.text.endswith(")\n\n\nc")
        assert "\n\n\nb\n\n\n" in result.text
        assert _image_widths(result.text) == [
            StubRenderer.width_for("X1"),
            StubRenderer.width_for("Y2"),
        ]

    def test_identical_sources_rendered_once(self, tmp_path, stub_renderer):
        text = "```mermaid\nA\n```\n\n```mermaid\n  A\n```\n"
        result = _preprocessor(tmp_path, stub_renderer).process(text)
        assert len(stub_renderer.calls) == 1
        assert result.rendered == 2

    def test_cached_across_documents(self, tmp_path, stub_renderer):
        pre = _preprocessor(tmp_path, stub_renderer)
        pre.process("```mermaid\nA\n```")
        pre.process("intro\n```mermaid\nA\n```")
        assert len(stub_renderer.calls) == 1

    def test_failure_leaves_block_verbatim(self, tmp_path, failing_renderer):
        text = "a\n```mermaid\nbroken\n```\nb"
        result = _preprocessor(tmp_path, failing_renderer).process(text)
        assert result.text == text
        assert result.rendered == 0
        assert result.has_failures
        assert "Parse error" in result.failures[0].describe()

    def test_one_failure_does_not_abort_others(self, tmp_path):
        class PickyRenderer(StubRenderer):
            def render(self, input_path):
                if "bad" in input_path.read_text():
                    raise RenderFailure(input_path, "bad diagram", 1)
                return super().render(input_path)

        text = "```mermaid\nbad\n```\n\n```mermaid\ngood\n```"
        result = _preprocessor(tmp_path, PickyRenderer()).process(text)
        assert result.rendered == 1
        assert "```mermaid\nbad\n```" in result.text
        assert "```mermaid\ngood" not in result.text
        assert len(result.failures) == 1

    def test_parallel_rendering(self, tmp_path, stub_renderer):
        text = "".join(f"```mermaid\nnode{i}\n```\n\n" for i in range(4))
        result = _preprocessor(tmp_path, stub_renderer, max_workers=3).process(text)
        assert result.rendered == 4
        assert len(stub_renderer.calls) == 4
        assert "```mermaid" not in result.text
        assert _image_widths(result.text) == [StubRenderer.width_for(f"node{i}") for i in range(4)]

    def test_custom_alt_text(self, tmp_path, stub_renderer):
        result = _preprocessor(tmp_path, stub_renderer, alt_text="Flow").process("```mermaid\nA\n```")
        assert "![Flow](data:image/png;base64," in result.text

    def test_unreadable_image_is_a_block_failure(self, tmp_path):
        class GhostRenderer(StubRenderer):
            def render(self, input_path):
                self.calls.append(input_path)
                return self.output_path_for(input_path)

        text = "a\n```mermaid\nA\n```\nb"
        result = _preprocessor(tmp_path, GhostRenderer()).process(text)
        assert result.text == text
        assert result.rendered == 0
        [failure] = result.failures
        assert isinstance(failure.error, RenderOutputMissing)

