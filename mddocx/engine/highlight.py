"""Syntax highlighting of code blocks via Pygments."""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache

from pygments import lex
from pygments.lexer import Lexer
from pygments.lexers import get_lexer_by_name
from pygments.styles import get_style_by_name
from pygments.util import ClassNotFound

# Tags Pygments does not know under these names.
LANGUAGE_ALIASES: dict[str, str] = {
    "shellscript": "bash",
    "zsh": "bash",
    "c++": "cpp",
    "yml": "yaml",
    "md": "markdown",
}


@dataclass(frozen=True)
class TokenSpan:
    text: str
    color: str | None = None  # RRGGBB without '#'
    bold: bool = False
    italic: bool = False


def resolve_lexer(language: str | None) -> Lexer | None:
    """Map a fence info string to a Pygments lexer, or None if unknown."""
    words = (language or "").split()
    if not words:
        return None
    name = words[0].lower()
    name = LANGUAGE_ALIASES.get(name, name)
    try:
        return get_lexer_by_name(name, stripnl=False, ensurenl=False)
    except ClassNotFound:
        return None


@lru_cache(maxsize=8)
def _style(style_name: str):
    try:
        return get_style_by_name(style_name)
    except ClassNotFound:
        return get_style_by_name("default")


def highlight_lines(code: str, language: str | None, style_name: str = "default") -> list[list[TokenSpan]] | None:
    """Split ``code`` into lines of coloured spans.

    Returns None when the language is unknown so callers can render plain
    text instead.
    """
    lexer = resolve_lexer(language)
    if lexer is None:
        return None

    style = _style(style_name)
    lines: list[list[TokenSpan]] = [[]]
    for token_type, value in lex(code, lexer):
        info = style.style_for_token(token_type)
        parts = value.split("\n")
        for i, part in enumerate(parts):
            if i:
                lines.append([])
            if part:
                lines[-1].append(
                    TokenSpan(
                        text=part,
                        color=info["color"] or None,
                        bold=bool(info["bold"]),
                        italic=bool(info["italic"]),
                    )
                )
    if len(lines) > 1 and not lines[-1]:
        lines.pop()
    return lines
