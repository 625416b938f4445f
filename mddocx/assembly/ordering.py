"""Natural (numeric-aware) ordering of source file names."""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable
from functools import cmp_to_key
from pathlib import Path

Comparator = Callable[[str, str], int]

MARKDOWN_SUFFIX = ".md"

_TOKEN_RE = re.compile(r"\d+|\D+")


def _tokenize(name: str) -> list[str]:
    return _TOKEN_RE.findall(name)


def _cmp(a, b) -> int:
    return (a > b) - (a < b)


def natural_compare(a: str, b: str) -> int:
    """Compare two names treating digit runs as integers.

    ``natural_compare("file2.md", "file10.md") < 0``. When every compared
    token is equal the name with fewer tokens sorts first.
    """
    a_parts = _tokenize(a)
    b_parts = _tokenize(b)
    for a_part, b_part in zip(a_parts, b_parts):
        if a_part.isdecimal() and b_part.isdecimal():
            result = _cmp(int(a_part), int(b_part))
        else:
            result = _cmp(a_part, b_part)
        if result:
            return result
    return _cmp(len(a_parts), len(b_parts))


def order_names(names: Iterable[str], comparator: Comparator | None = None) -> list[str]:
    """Stable sort of ``names`` by ``comparator`` (natural order by default)."""
    return sorted(names, key=cmp_to_key(comparator or natural_compare))


def select_markdown_files(directory: Path) -> list[str]:
    """Names of the regular ``.md`` files directly inside ``directory``."""
    return [
        entry.name
        for entry in directory.iterdir()
        if entry.name.endswith(MARKDOWN_SUFFIX) and entry.is_file()
    ]
