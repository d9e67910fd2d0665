"""Output writers for finished documents."""

from admitwriter.output.writer import DocumentWriter, render_document

__all__ = ["DocumentWriter", "render_document"]
