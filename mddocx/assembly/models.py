"""Models for multi-document assembly."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class SeparatorKind(str, Enum):
    """How consecutive documents are separated in a merged document."""

    page_break = "pagebreak"
    rule = "hr"
    none = "none"


@dataclass(frozen=True)
class SourceDocument:
    name: str
    body: str


@dataclass
class OrderedDocumentSet:
    """Documents in merge order. Built per merge, never persisted."""

    documents: list[SourceDocument] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.documents)

    @property
    def names(self) -> list[str]:
        return [d.name for d in self.documents]

    @property
    def bodies(self) -> list[str]:
        return [d.body for d in self.documents]
