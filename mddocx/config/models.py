import tempfile
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field


def _default_cache_dir() -> str:
    return str(Path(tempfile.gettempdir()) / "md-docx-mermaid")


class DiagramConfig(BaseModel):
    language: str = Field(default="mermaid", min_length=1)
    renderer: str | None = None
    background: str = "white"
    scale: int = Field(default=2, gt=0)
    cache_dir: str = Field(default_factory=_default_cache_dir)
    max_workers: int = Field(default=1, gt=0)
    alt_text: str = "Mermaid Diagram"


class CodeStyleConfig(BaseModel):
    background_color: str = Field(default="F6F8FA", pattern=r"^[0-9A-Fa-f]{6}$")
    font_family: str = "Consolas"
    font_size: int = Field(default=20, gt=0)  # half-points, 20 = 10pt
    show_line_numbers: bool = False
    style: str = "default"


class ImageConfig(BaseModel):
    max_width_in: float = Field(default=6.0, gt=0)
    max_height_in: float = Field(default=8.0, gt=0)
    dpi: int = Field(default=96, gt=0)
    fetch_timeout: float = Field(default=30.0, gt=0)


class MergeConfig(BaseModel):
    separator: Literal["pagebreak", "hr", "none"] = "pagebreak"


class MdDocxConfig(BaseModel):
    diagrams: DiagramConfig = Field(default_factory=DiagramConfig)
    code: CodeStyleConfig = Field(default_factory=CodeStyleConfig)
    images: ImageConfig = Field(default_factory=ImageConfig)
    merge: MergeConfig = Field(default_factory=MergeConfig)
    log_level: Literal["debug", "info", "warn", "error"] = "info"
    log_format: Literal["text", "json"] = "text"
