"""Concatenate document bodies with a section separator."""

from __future__ import annotations

from collections.abc import Sequence

from mddocx.assembly.models import SeparatorKind

PAGE_BREAK_MARKER = '<div style="page-break-after: always;"></div>'

_FRAGMENTS: dict[SeparatorKind, str] = {
    SeparatorKind.page_break: f"\n\n{PAGE_BREAK_MARKER}\n\n",
    SeparatorKind.rule: "\n\n---\n\n",
    SeparatorKind.none: "",
}


def separator_fragment(kind: SeparatorKind | str) -> str:
    return _FRAGMENTS[SeparatorKind(kind)]


def join_sections(bodies: Sequence[str], kind: SeparatorKind | str = SeparatorKind.page_break) -> str:
    """Join ``bodies`` with the fragment for ``kind`` between each pair."""
    return separator_fragment(kind).join(bodies)
