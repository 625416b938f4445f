"""CLI entry point for md-docx."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Annotated

import typer
import yaml
from rich import print as rprint
from rich.logging import RichHandler
from rich.syntax import Syntax
from rich.table import Table

from mddocx.assembly import SeparatorKind, order_names, select_markdown_files
from mddocx.config import MdDocxConfig, load_config
from mddocx.config.loader import DEFAULT_CONFIG_TEMPLATE, PROJECT_CONFIG
from mddocx.converter import (
    ConversionError,
    ConversionOptions,
    MarkdownConverter,
    read_source,
)
from mddocx.diagrams import contains_diagrams
from mddocx.diagrams.renderer import resolve_mmdc

app = typer.Typer(
    name="md-docx",
    help="Convert Markdown (with Mermaid diagrams) to Word documents.",
)

config_app = typer.Typer(help="Manage md-docx configuration.")
app.add_typer(config_app, name="config")

cache_app = typer.Typer(help="Inspect or clear the diagram render cache.")
app.add_typer(cache_app, name="cache")

# Global state
_config: MdDocxConfig | None = None

_LOG_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "error": logging.ERROR,
}


class JsonLineFormatter(logging.Formatter):
    """One JSON object per record."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "time": self.formatTime(record),
            "level": record.levelname.lower(),
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            entry["exc"] = self.formatException(record.exc_info)
        return json.dumps(entry)


def _setup_logging(cfg: MdDocxConfig) -> None:
    if cfg.log_format == "json":
        handler: logging.Handler = logging.StreamHandler()
        handler.setFormatter(JsonLineFormatter())
    else:
        handler = RichHandler(show_path=False)
    logging.basicConfig(
        level=_LOG_LEVELS[cfg.log_level], handlers=[handler], format="%(message)s", force=True
    )


def _get_config() -> MdDocxConfig:
    if _config is None:
        return load_config()
    return _config


@app.callback()
def main(
    config: Annotated[
        str | None, typer.Option("--config", "-c", help="Path to md-docx.yaml")
    ] = None,
) -> None:
    """Global options."""
    global _config
    try:
        _config = load_config(config)
    except ValueError as e:
        rprint(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)
    _setup_logging(_config)


def _resolve_separator(value: str | None, cfg: MdDocxConfig) -> SeparatorKind:
    raw = value if value is not None else cfg.merge.separator
    try:
        return SeparatorKind(raw)
    except ValueError:
        choices = ", ".join(k.value for k in SeparatorKind)
        rprint(f"[red]Error:[/red] Unknown separator '{raw}' (choose from {choices})")
        raise typer.Exit(1)


def _default_output(input_path: Path) -> Path:
    if input_path.is_dir():
        resolved = input_path.resolve()
        return resolved.parent / f"{resolved.name}.docx"
    return input_path.with_suffix(".docx")


def _display_sources(directory: Path, names: list[str], language: str) -> bool:
    """Show the merge order; returns whether any file holds a diagram."""
    table = Table(title=f"Markdown files ({len(names)})")
    table.add_column("#", justify="right", style="dim")
    table.add_column("File", style="cyan")
    table.add_column("Diagrams", justify="center")

    found = False
    for i, name in enumerate(names, start=1):
        has = contains_diagrams(read_source(directory / name), language)
        found = found or has
        table.add_row(str(i), name, "[green]yes[/green]" if has else "-")
    rprint(table)
    return found


def _report(converter: MarkdownConverter, dest: Path) -> None:
    result = converter.last_result
    if result is not None:
        for warning in result.warnings:
            rprint(f"[yellow]Warning:[/yellow] {warning}")
        if result.diagrams_rendered:
            rprint(f"[dim]Diagrams rendered:[/dim] {result.diagrams_rendered}")
    rprint(f"[green]Created[/green] {dest}")


@app.command()
def convert(
    input_path: Path = typer.Argument(..., help="Markdown file or directory of .md files"),
    output: Path | None = typer.Option(None, "--output", "-o", help="Output .docx path"),
    separator: str | None = typer.Option(
        None, "--separator", "-s", help="Between merged files: pagebreak, hr or none"
    ),
    mermaid: bool | None = typer.Option(
        None, "--mermaid/--no-mermaid", help="Render diagram blocks (default: auto-detect)"
    ),
) -> None:
    """Convert a Markdown file, or every .md file of a directory, to .docx."""
    cfg = _get_config()
    kind = _resolve_separator(separator, cfg)
    dest = output or _default_output(input_path)
    language = cfg.diagrams.language
    converter = MarkdownConverter(cfg)

    try:
        if input_path.is_dir():
            names = order_names(select_markdown_files(input_path))
            detected = _display_sources(input_path, names, language) if names else False
            render = mermaid if mermaid is not None else detected
            result = converter.convert_directory(
                input_path, dest, ConversionOptions(render_diagrams=render, separator=kind)
            )
        else:
            if mermaid is not None:
                render = mermaid
            else:
                render = input_path.is_file() and contains_diagrams(
                    read_source(input_path), language
                )
            result = converter.convert_file(
                input_path, dest, ConversionOptions(render_diagrams=render, separator=kind)
            )
    except ConversionError as e:
        rprint(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    _report(converter, result)


@app.command()
def merge(
    files: list[Path] = typer.Argument(..., help="Markdown files, merged in the given order"),
    output: Path = typer.Option(..., "--output", "-o", help="Output .docx path"),
    separator: str | None = typer.Option(
        None, "--separator", "-s", help="Between merged files: pagebreak, hr or none"
    ),
    mermaid: bool | None = typer.Option(
        None, "--mermaid/--no-mermaid", help="Render diagram blocks (default: auto-detect)"
    ),
) -> None:
    """Merge several Markdown files into one .docx."""
    cfg = _get_config()
    kind = _resolve_separator(separator, cfg)
    converter = MarkdownConverter(cfg)

    try:
        render = mermaid
        if render is None:
            render = any(
                f.is_file() and contains_diagrams(read_source(f), cfg.diagrams.language)
                for f in files
            )
        result = converter.convert_files(
            files, output, ConversionOptions(render_diagrams=render, separator=kind)
        )
    except ConversionError as e:
        rprint(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    _report(converter, result)


# ---------------------------------------------------------------------------
# Cache commands
# ---------------------------------------------------------------------------


def _format_bytes(size: int) -> str:
    if size < 1024:
        return f"{size} B"
    if size < 1024 * 1024:
        return f"{size / 1024:.1f} KB"
    return f"{size / (1024 * 1024):.1f} MB"


@cache_app.command("info")
def cache_info() -> None:
    """Show the cache location, renderer and cached image count."""
    cfg = _get_config()
    cache = MarkdownConverter(cfg).cache
    stats = cache.stats()

    table = Table(title="Diagram cache", show_header=False)
    table.add_column("Key", style="dim")
    table.add_column("Value")
    table.add_row("Directory", str(cache.cache_dir))
    table.add_row("Renderer", resolve_mmdc(cfg.diagrams.renderer))
    table.add_row("Images", str(stats["images"]))
    table.add_row("Size", _format_bytes(stats["bytes"]))
    rprint(table)


@cache_app.command("clear")
def cache_clear() -> None:
    """Delete every cached diagram source and image."""
    cfg = _get_config()
    removed = MarkdownConverter(cfg).cleanup()
    rprint(f"[green]Removed[/green] {removed} file(s) from {cfg.diagrams.cache_dir}")


# ---------------------------------------------------------------------------
# Config commands
# ---------------------------------------------------------------------------


@config_app.command("show")
def config_show() -> None:
    """Show current resolved configuration."""
    cfg = _get_config()
    rprint(Syntax(yaml.dump(cfg.model_dump(), default_flow_style=False), "yaml"))


@config_app.command("init")
def config_init(
    force: bool = typer.Option(False, "--force", help="Overwrite existing config"),
) -> None:
    """Create default md-docx.yaml in current directory."""
    target = Path(PROJECT_CONFIG)
    if target.exists() and not force:
        rprint("[yellow]md-docx.yaml already exists.[/yellow] Use --force to overwrite.")
        raise typer.Exit(1)
    target.write_text(DEFAULT_CONFIG_TEMPLATE)
    rprint(f"[green]Created[/green] {target}")


if __name__ == "__main__":
    app()
