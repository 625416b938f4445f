"""Shared test fixtures for md-docx."""

from io import BytesIO
from pathlib import Path

import pytest
from docx import Document
from PIL import Image

from mddocx.config.models import DiagramConfig, MdDocxConfig
from mddocx.diagrams.models import RenderFailure
from mddocx.diagrams.renderer import DiagramRenderer


class StubRenderer(DiagramRenderer):
    """Writes a real PNG whose width depends on the diagram source."""

    def __init__(self):
        self.calls: list[Path] = []

    @staticmethod
    def width_for(source: str) -> int:
        return 16 + sum(map(ord, source.strip())) % 64

    def render(self, input_path: Path) -> Path:
        self.calls.append(input_path)
        source = input_path.read_text(encoding="utf-8")
        output = self.output_path_for(input_path)
        Image.new("RGB", (self.width_for(source), 12), "white").save(output, format="PNG")
        return output


class FailingRenderer(DiagramRenderer):
    def __init__(self):
        self.calls: list[Path] = []

    def render(self, input_path: Path) -> Path:
        self.calls.append(input_path)
        raise RenderFailure(input_path, "Parse error on line 1", 1)


@pytest.fixture
def sample_config(tmp_path):
    return MdDocxConfig(diagrams=DiagramConfig(cache_dir=str(tmp_path / "cache")))


@pytest.fixture
def stub_renderer():
    return StubRenderer()


@pytest.fixture
def failing_renderer():
    return FailingRenderer()


@pytest.fixture
def png_bytes():
    buf = BytesIO()
    Image.new("RGB", (30, 20), "red").save(buf, format="PNG")
    return buf.getvalue()


def load_docx(payload: bytes):
    return Document(BytesIO(payload))


def paragraph_texts(payload: bytes) -> list[str]:
    return [p.text for p in load_docx(payload).paragraphs]
