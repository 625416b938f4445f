"""Output subsystem: writes .docx payloads to disk."""

from mddocx.output.writer import DocxWriter

__all__ = ["DocxWriter"]
