"""YAML config loading with env var expansion."""

import logging
import os
import re
from pathlib import Path

import yaml
from pydantic import ValidationError

from .models import MdDocxConfig

logger = logging.getLogger(__name__)

PROJECT_CONFIG = "md-docx.yaml"


def config_search_path(cli_path: str | None = None) -> list[Path]:
    """Candidate config files, highest precedence first."""
    paths = [Path(PROJECT_CONFIG), Path.home() / ".md-docx" / "config.yaml"]
    if cli_path:
        paths.insert(0, Path(cli_path))
    return paths


def load_config(cli_path: str | None = None) -> MdDocxConfig:
    """Load config with resolution order: CLI > project-local > user-global > defaults.

    Missing and empty files are skipped. The first file with content wins;
    anything unreadable, malformed or failing validation raises ``ValueError``
    naming the file.
    """
    for path in config_search_path(cli_path):
        if not path.is_file():
            continue
        raw = _read_yaml(path)
        if raw is None:
            logger.debug("config %s is empty, skipping", path)
            continue
        if not isinstance(raw, dict):
            raise ValueError(
                f"Invalid config in {path}: expected a mapping, got {type(raw).__name__}"
            )
        try:
            cfg = MdDocxConfig(**_expand_env_vars(raw))
        except ValidationError as e:
            raise ValueError(f"Invalid config in {path}: {e}") from e
        logger.debug("loaded config from %s", path)
        return cfg

    logger.debug("no config file found, using defaults")
    return MdDocxConfig()


def _read_yaml(path: Path) -> object:
    try:
        with open(path, encoding="utf-8") as f:
            return yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in {path}: {e}") from e
    except (OSError, UnicodeDecodeError) as e:
        raise ValueError(f"Cannot read config {path}: {e}") from e


def _expand_env_vars(obj: object) -> object:
    """Recursively expand ${VAR} references in strings."""
    if isinstance(obj, str):
        return re.sub(r"\$\{(\w+)\}", lambda m: os.environ.get(m.group(1), ""), obj)
    elif isinstance(obj, dict):
        return {k: _expand_env_vars(v) for k, v in obj.items()}
    elif isinstance(obj, list):
        return [_expand_env_vars(v) for v in obj]
    return obj


# Default YAML template for `md-docx config init`
DEFAULT_CONFIG_TEMPLATE = """\
# md-docx.yaml

# Diagram rendering
diagrams:
  language: "mermaid"          # fence tag that marks a diagram block
  # renderer: "/usr/local/bin/mmdc"   # default: ./node_modules/.bin/mmdc, then PATH
  background: "white"
  scale: 2
  # cache_dir: "/tmp/md-docx-mermaid"
  max_workers: 1               # >1 renders distinct diagrams in parallel
  alt_text: "Mermaid Diagram"

# Code blocks
code:
  background_color: "F6F8FA"
  font_family: "Consolas"
  font_size: 20                # half-points (20 = 10pt)
  show_line_numbers: false
  style: "default"             # any pygments style name

# Images
images:
  max_width_in: 6.0
  max_height_in: 8.0
  dpi: 96
  fetch_timeout: 30

# Multi-file merge
merge:
  separator: "pagebreak"       # pagebreak | hr | none

# Logging
log_level: "info"              # debug | info | warn | error
log_format: "text"             # text | json
"""
