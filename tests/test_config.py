"""Tests for mddocx.config: models and YAML loader."""

import logging
import os
from pathlib import Path
from unittest.mock import patch

import pytest
import yaml
from pydantic import ValidationError

from mddocx.config.loader import (
    DEFAULT_CONFIG_TEMPLATE,
    _expand_env_vars,
    config_search_path,
    load_config,
)
from mddocx.config.models import (
    CodeStyleConfig,
    DiagramConfig,
    ImageConfig,
    MdDocxConfig,
    MergeConfig,
)


# ── Defaults ────────────────────────────────────────────────────────


class TestMdDocxConfigDefaults:
    def test_log_settings(self):
        cfg = MdDocxConfig()
        assert cfg.log_level == "info"
        assert cfg.log_format == "text"

    def test_diagram_defaults(self):
        cfg = DiagramConfig()
        assert cfg.language == "mermaid"
        assert cfg.renderer is None
        assert cfg.background == "white"
        assert cfg.scale == 2
        assert cfg.max_workers == 1
        assert cfg.alt_text == "Mermaid Diagram"
        assert Path(cfg.cache_dir).name == "md-docx-mermaid"

    def test_code_defaults(self):
        cfg = CodeStyleConfig()
        assert cfg.background_color == "F6F8FA"
        assert cfg.font_family == "Consolas"
        assert cfg.font_size == 20
        assert cfg.show_line_numbers is False

    def test_image_and_merge_defaults(self):
        assert ImageConfig().max_width_in == 6.0
        assert MergeConfig().separator == "pagebreak"


# ── Validation ──────────────────────────────────────────────────────


class TestValidation:
    def test_bad_background_color(self):
        with pytest.raises(ValidationError):
            CodeStyleConfig(background_color="#F6F8FA")

    def test_bad_separator(self):
        with pytest.raises(ValidationError):
            MergeConfig(separator="dots")

    def test_scale_must_be_positive(self):
        with pytest.raises(ValidationError):
            DiagramConfig(scale=0)

    def test_empty_language_rejected(self):
        with pytest.raises(ValidationError):
            DiagramConfig(language="")

    def test_bad_log_level(self):
        with pytest.raises(ValidationError):
            MdDocxConfig(log_level="verbose")


# ── Loader ──────────────────────────────────────────────────────────


@pytest.fixture
def isolated(tmp_path, monkeypatch):
    """Run with an empty cwd and home so no real config is picked up."""
    monkeypatch.chdir(tmp_path)
    with patch("mddocx.config.loader.Path.home", return_value=tmp_path / "home"):
        yield tmp_path


class TestLoadConfig:
    def test_defaults_when_nothing_found(self, isolated):
        assert load_config() == MdDocxConfig()

    def test_explicit_path(self, isolated):
        path = isolated / "custom.yaml"
        path.write_text("diagrams:\n  scale: 3\nmerge:\n  separator: hr\n")
        cfg = load_config(str(path))
        assert cfg.diagrams.scale == 3
        assert cfg.merge.separator == "hr"

    def test_project_local_file(self, isolated):
        (isolated / "md-docx.yaml").write_text("log_level: debug\n")
        assert load_config().log_level == "debug"

    def test_user_global_file(self, isolated):
        user_dir = isolated / "home" / ".md-docx"
        user_dir.mkdir(parents=True)
        (user_dir / "config.yaml").write_text("log_format: json\n")
        assert load_config().log_format == "json"

    def test_explicit_beats_local(self, isolated):
        (isolated / "md-docx.yaml").write_text("log_level: debug\n")
        path = isolated / "custom.yaml"
        path.write_text("log_level: error\n")
        assert load_config(str(path)).log_level == "error"

    def test_empty_file_falls_through(self, isolated, caplog):
        (isolated / "md-docx.yaml").write_text("")
        user_dir = isolated / "home" / ".md-docx"
        user_dir.mkdir(parents=True)
        (user_dir / "config.yaml").write_text("log_level: warn\n")
        with caplog.at_level(logging.DEBUG, logger="mddocx.config.loader"):
            cfg = load_config()
        assert cfg.log_level == "warn"
        assert "md-docx.yaml is empty" in caplog.text
        assert "loaded config from" in caplog.text

    def test_non_mapping_rejected(self, isolated):
        (isolated / "md-docx.yaml").write_text("- just\n- a list\n")
        with pytest.raises(ValueError, match="expected a mapping, got list"):
            load_config()

    def test_undecodable_file(self, isolated):
        (isolated / "md-docx.yaml").write_bytes(b"log_level: \xff\n")
        with pytest.raises(ValueError, match="Cannot read config"):
            load_config()

    def test_search_path_order(self, isolated):
        assert config_search_path("x.yaml") == [
            Path("x.yaml"),
            Path("md-docx.yaml"),
            isolated / "home" / ".md-docx" / "config.yaml",
        ]
        assert config_search_path()[0] == Path("md-docx.yaml")

    def test_invalid_yaml(self, isolated):
        (isolated / "md-docx.yaml").write_text("diagrams: [unclosed\n")
        with pytest.raises(ValueError, match="Invalid YAML"):
            load_config()

    def test_invalid_schema(self, isolated):
        (isolated / "md-docx.yaml").write_text("merge:\n  separator: dots\n")
        with pytest.raises(ValueError, match="Invalid config"):
            load_config()

    def test_env_expansion(self, isolated):
        (isolated / "md-docx.yaml").write_text('diagrams:\n  renderer: "${MMDC_BIN}"\n')
        with patch.dict(os.environ, {"MMDC_BIN": "/opt/mmdc"}):
            assert load_config().diagrams.renderer == "/opt/mmdc"


class TestExpandEnvVars:
    def test_nested(self):
        with patch.dict(os.environ, {"A": "1"}):
            assert _expand_env_vars({"x": ["${A}", {"y": "v${A}"}], "n": 2}) == {
                "x": ["1", {"y": "v1"}],
                "n": 2,
            }

    def test_missing_var_is_empty(self):
        with patch.dict(os.environ, {}, clear=True):
            assert _expand_env_vars("${NOPE}") == ""


class TestDefaultTemplate:
    def test_parses_into_defaults(self):
        cfg = MdDocxConfig(**yaml.safe_load(DEFAULT_CONFIG_TEMPLATE))
        defaults = MdDocxConfig()
        assert cfg.code == defaults.code
        assert cfg.merge == defaults.merge
        assert cfg.diagrams.scale == defaults.diagrams.scale
