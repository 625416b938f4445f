"""Locate fenced diagram blocks in raw Markdown text."""

from __future__ import annotations

import re
from functools import lru_cache

from mddocx.diagrams.models import DiagramBlock

DEFAULT_LANGUAGE = "mermaid"


@lru_cache(maxsize=16)
def _fence_pattern(language: str) -> re.Pattern[str]:
    # Opening fence must be followed by a newline; the body ends at the next
    # triple backtick. An unclosed fence never matches.
    return re.compile(r"```" + re.escape(language) + r"[ \t]*\r?\n(.*?)```", re.DOTALL)


def scan_diagram_blocks(text: str, language: str = DEFAULT_LANGUAGE) -> list[DiagramBlock]:
    """Return every diagram block in ``text`` in ascending offset order."""
    if not text:
        return []
    return [
        DiagramBlock(source_text=m.group(1).strip(), start=m.start(), end=m.end())
        for m in _fence_pattern(language).finditer(text)
    ]


def contains_diagrams(text: str, language: str = DEFAULT_LANGUAGE) -> bool:
    """Check whether ``text`` holds at least one complete diagram block."""
    return bool(text) and _fence_pattern(language).search(text) is not None
