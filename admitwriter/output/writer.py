"""DocumentWriter: files finished statements as markdown on disk."""

from __future__ import annotations

import logging
import re
import uuid
from datetime import datetime, timezone
from pathlib import Path

import yaml

from admitwriter.config.models import OutputConfig
from admitwriter.interfaces.storage import SavedDocument

logger = logging.getLogger(__name__)


def _sanitize_name(name: str) -> str:
    """Make a document title safe for use as a filename.

    Whitespace and `/` become dashes, `..` segments are dropped and
    anything outside word characters, dash, dot and @ is removed.
    """
    name = re.sub(r"\s+", "-", name.strip()).replace("/", "-")
    name = name.replace("..", "")
    name = re.sub(r"[^\w\-\.@]", "", name)
    name = re.sub(r"-{2,}", "-", name)
    if not name or name.strip(".") == "":
        name = "_unnamed"
    return name


def _document_id(title: str, saved_at: datetime) -> str:
    return f"{_sanitize_name(title)}-{saved_at:%Y%m%dT%H%M%SZ}-{uuid.uuid4().hex[:8]}"


def render_document(document: SavedDocument, saved_at: datetime | None = None) -> str:
    """Render a SavedDocument as markdown with YAML frontmatter."""
    meta = {
        "title": document.title,
        "target_identity": document.target_identity,
        "kind": document.kind,
        "word_count": document.word_count,
        "owner": document.owner,
        "saved_at": (saved_at or datetime.now(timezone.utc)).isoformat(),
    }
    yaml_block = yaml.safe_dump(meta, default_flow_style=False, sort_keys=False)
    return f"---\n{yaml_block}---\n\n{document.content.strip()}\n"


class DocumentWriter:
    """Writes SavedDocument instances to disk as .sop.md files.

    Satisfies the DocumentStore protocol; ``save`` returns the written
    path as the document id. Every save gets its own file and index entry,
    named after the title plus the save time and a short random suffix.
    """

    def __init__(self, config: OutputConfig) -> None:
        self.config = config
        self.base_dir = Path(config.base_dir) / "documents"

    def save(self, document: SavedDocument) -> str:
        return str(self.write(document))

    def write(self, document: SavedDocument, *, dry_run: bool = False) -> Path:
        """Write a single document. Returns the written (or would-be) path."""
        saved_at = datetime.now(timezone.utc)
        doc_id = _document_id(document.title, saved_at)
        dest = self.base_dir / f"{doc_id}.sop.md"

        if dry_run:
            logger.debug("dry-run: would write %s", dest)
            return dest

        content = render_document(document, saved_at)
        dest.parent.mkdir(parents=True, exist_ok=True)
        dest.write_text(content, encoding="utf-8")
        logger.info("wrote %s (%d words)", dest, document.word_count)

        if self.config.create_index:
            self._update_index(doc_id, document, dest, saved_at)

        return dest

    # -- index management --------------------------------------------------

    def _update_index(
        self, doc_id: str, document: SavedDocument, path: Path, saved_at: datetime
    ) -> None:
        """Append an entry for the written file to _index.yaml."""
        index_path = self.base_dir / "_index.yaml"

        entries: list[dict] = []
        if index_path.exists():
            try:
                loaded = yaml.safe_load(index_path.read_text(encoding="utf-8"))
            except OSError as e:
                logger.warning("Failed to read index %s: %s", index_path, e)
                loaded = None
            except yaml.YAMLError as e:
                logger.warning("Failed to parse index %s, rebuilding: %s", index_path, e)
                loaded = None
            if isinstance(loaded, list):
                entries = [e for e in loaded if isinstance(e, dict)]

        entries.append({
            "id": doc_id,
            "title": document.title,
            "target_identity": document.target_identity,
            "word_count": document.word_count,
            "path": str(path),
            "timestamp": saved_at.isoformat(),
        })

        index_path.write_text(
            yaml.safe_dump(entries, default_flow_style=False, sort_keys=False),
            encoding="utf-8",
        )
        logger.debug("updated index %s (%d entries)", index_path, len(entries))
