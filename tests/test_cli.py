"""Tests for the md-docx CLI."""

import json
import logging
from unittest.mock import patch

import pytest
from typer.testing import CliRunner

from mddocx.cli import JsonLineFormatter, app

from conftest import FailingRenderer, StubRenderer, load_docx

runner = CliRunner()


@pytest.fixture
def workdir(tmp_path, monkeypatch):
    """Isolated cwd with a config that keeps the cache under tmp_path."""
    monkeypatch.chdir(tmp_path)
    cfg = tmp_path / "cfg.yaml"
    cfg.write_text(f'diagrams:\n  cache_dir: "{tmp_path / "cache"}"\n')
    return tmp_path


def invoke(workdir, *args):
    return runner.invoke(app, ["--config", str(workdir / "cfg.yaml"), *args])


@pytest.fixture
def stub():
    renderer = StubRenderer()
    with patch("mddocx.converter.converter.MermaidCliRenderer", return_value=renderer):
        yield renderer


# ---------------------------------------------------------------------------
# convert
# ---------------------------------------------------------------------------


class TestConvert:
    def test_file_default_output(self, workdir):
        (workdir / "doc.md").write_text("# Hello\n")
        result = invoke(workdir, "convert", "doc.md")
        assert result.exit_code == 0, result.output
        assert "Created" in result.output
        assert (workdir / "doc.docx").is_file()

    def test_explicit_output(self, workdir):
        (workdir / "doc.md").write_text("# Hello\n")
        result = invoke(workdir, "convert", "doc.md", "-o", "build/out.docx")
        assert result.exit_code == 0, result.output
        assert (workdir / "build" / "out.docx").is_file()

    def test_missing_file(self, workdir):
        result = invoke(workdir, "convert", "nope.md")
        assert result.exit_code == 1
        assert "Input file not found" in result.output

    def test_directory_default_output(self, workdir):
        docs = workdir / "docs"
        docs.mkdir()
        (docs / "ch2.md").write_text("# Two\n")
        (docs / "ch10.md").write_text("# Ten\n")
        (docs / "ch1.md").write_text("# One\n")

        result = invoke(workdir, "convert", "docs")

        assert result.exit_code == 0, result.output
        assert result.output.index("ch1.md") < result.output.index("ch2.md") < result.output.index("ch10.md")
        doc = load_docx((workdir / "docs.docx").read_bytes())
        headings = [p.text for p in doc.paragraphs if p.text]
        assert headings == ["One", "Two", "Ten"]

    def test_empty_directory(self, workdir):
        (workdir / "empty").mkdir()
        result = invoke(workdir, "convert", "empty")
        assert result.exit_code == 1
        assert "No markdown files found" in result.output

    def test_diagrams_auto_detected(self, workdir, stub):
        (workdir / "doc.md").write_text("# D\n\n```mermaid\ngraph TD\n```\n")
        result = invoke(workdir, "convert", "doc.md")
        assert result.exit_code == 0, result.output
        assert len(stub.calls) == 1
        assert "Diagrams rendered" in result.output
        assert len(load_docx((workdir / "doc.docx").read_bytes()).inline_shapes) == 1

    def test_no_mermaid_flag(self, workdir, stub):
        (workdir / "doc.md").write_text("```mermaid\ngraph TD\n```\n")
        result = invoke(workdir, "convert", "doc.md", "--no-mermaid")
        assert result.exit_code == 0, result.output
        assert stub.calls == []

    def test_no_diagrams_skips_renderer(self, workdir, stub):
        (workdir / "doc.md").write_text("plain text\n")
        result = invoke(workdir, "convert", "doc.md", "--mermaid")
        assert result.exit_code == 0, result.output
        assert stub.calls == []

    def test_render_failure_is_warning(self, workdir):
        (workdir / "doc.md").write_text("```mermaid\nbroken\n```\n")
        with patch(
            "mddocx.converter.converter.MermaidCliRenderer", return_value=FailingRenderer()
        ):
            result = invoke(workdir, "convert", "doc.md")
        assert result.exit_code == 0, result.output
        assert "Warning" in result.output
        assert (workdir / "doc.docx").is_file()

    def test_bad_separator(self, workdir):
        (workdir / "doc.md").write_text("x\n")
        result = invoke(workdir, "convert", "doc.md", "-s", "dots")
        assert result.exit_code == 1
        assert "Unknown separator" in result.output

    def test_undecodable_file(self, workdir):
        (workdir / "doc.md").write_bytes(b"# Caf\xe9\n")
        result = invoke(workdir, "convert", "doc.md")
        assert result.exit_code == 1
        assert "Error" in result.output
        assert "Cannot read" in result.output
        assert not (workdir / "doc.docx").exists()

    def test_undecodable_file_without_detection(self, workdir):
        (workdir / "doc.md").write_bytes(b"# Caf\xe9\n")
        result = invoke(workdir, "convert", "doc.md", "--no-mermaid")
        assert result.exit_code == 1
        assert "Cannot read" in result.output

    def test_undecodable_file_in_directory(self, workdir):
        docs = workdir / "docs"
        docs.mkdir()
        (docs / "a.md").write_text("# A\n")
        (docs / "b.md").write_bytes(b"\xff\xfe")
        result = invoke(workdir, "convert", "docs")
        assert result.exit_code == 1
        assert "Cannot read" in result.output
        assert not (workdir / "docs.docx").exists()


# ---------------------------------------------------------------------------
# merge
# ---------------------------------------------------------------------------


class TestMerge:
    def test_given_order(self, workdir):
        (workdir / "b.md").write_text("# B\n")
        (workdir / "a.md").write_text("# A\n")
        result = invoke(workdir, "merge", "b.md", "a.md", "-o", "all.docx", "-s", "none")
        assert result.exit_code == 0, result.output
        doc = load_docx((workdir / "all.docx").read_bytes())
        assert [p.text for p in doc.paragraphs if p.text] == ["B", "A"]

    def test_missing_file(self, workdir):
        (workdir / "a.md").write_text("# A\n")
        result = invoke(workdir, "merge", "a.md", "gone.md", "-o", "all.docx")
        assert result.exit_code == 1
        assert "Input file not found" in result.output
        assert not (workdir / "all.docx").exists()

    def test_undecodable_file(self, workdir):
        (workdir / "a.md").write_text("# A\n")
        (workdir / "b.md").write_bytes(b"# Caf\xe9\n")
        result = invoke(workdir, "merge", "a.md", "b.md", "-o", "all.docx")
        assert result.exit_code == 1
        assert "Cannot read" in result.output
        assert not (workdir / "all.docx").exists()


# ---------------------------------------------------------------------------
# cache / config
# ---------------------------------------------------------------------------


class TestCacheCommands:
    def test_info(self, workdir):
        result = invoke(workdir, "cache", "info")
        assert result.exit_code == 0, result.output
        assert "Images" in result.output

    def test_clear(self, workdir, stub):
        (workdir / "doc.md").write_text("```mermaid\ngraph TD\n```\n")
        invoke(workdir, "convert", "doc.md")
        result = invoke(workdir, "cache", "clear")
        assert result.exit_code == 0, result.output
        assert "Removed 2 file(s)" in result.output
        assert list((workdir / "cache").iterdir()) == []


class TestConfigCommands:
    def test_show(self, workdir):
        result = invoke(workdir, "config", "show")
        assert result.exit_code == 0, result.output
        assert "diagrams" in result.output

    def test_init(self, workdir):
        result = runner.invoke(app, ["config", "init"])
        assert result.exit_code == 0, result.output
        assert (workdir / "md-docx.yaml").is_file()

    def test_init_refuses_overwrite(self, workdir):
        (workdir / "md-docx.yaml").write_text("log_level: info\n")
        result = runner.invoke(app, ["config", "init"])
        assert result.exit_code == 1
        result = runner.invoke(app, ["config", "init", "--force"])
        assert result.exit_code == 0

    def test_invalid_config_file(self, workdir):
        (workdir / "cfg.yaml").write_text("merge:\n  separator: dots\n")
        result = invoke(workdir, "config", "show")
        assert result.exit_code == 1
        assert "Invalid config" in result.output


class TestJsonLineFormatter:
    def test_one_json_object(self):
        record = logging.LogRecord("mddocx.x", logging.WARNING, __file__, 1, "hi %s", ("there",), None)
        entry = json.loads(JsonLineFormatter().format(record))
        assert entry["level"] == "warning"
        assert entry["message"] == "hi there"
        assert entry["logger"] == "mddocx.x"
