"""Per-editing-session section state, owned by the caller."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from pathlib import Path
from types import MappingProxyType

from pydantic import BaseModel, Field

from admitwriter.errors import UnknownSectionError
from admitwriter.writer.models import GeneratedSection, SectionState
from admitwriter.writer.sections import SECTIONS, resolve_section_id

logger = logging.getLogger(__name__)


class _SessionFile(BaseModel):
    version: int = 1
    sections: list[GeneratedSection] = Field(default_factory=list)


class WriterSession:
    """Generated sections for one user's editing session.

    Nothing is shared between sessions and nothing is locked. Callers that
    want every section to see all previously written ones must await each
    request before issuing the next.
    """

    def __init__(self, sections: Iterable[GeneratedSection] = ()) -> None:
        self._sections: dict[str, GeneratedSection] = {}
        self._states: dict[str, SectionState] = {s.id: SectionState.idle for s in SECTIONS}
        for section in sections:
            self.store(section)

    def __len__(self) -> int:
        return len(self._sections)

    def __contains__(self, section_id: object) -> bool:
        try:
            return resolve_section_id(section_id) in self._sections
        except UnknownSectionError:
            return False

    @property
    def sections(self) -> Mapping[str, GeneratedSection]:
        """Read-only view of stored sections, in catalog order."""
        return MappingProxyType(
            {s.id: self._sections[s.id] for s in SECTIONS if s.id in self._sections}
        )

    def state(self, section_id: str) -> SectionState:
        return self._states[resolve_section_id(section_id)]

    def get(self, section_id: str) -> GeneratedSection | None:
        return self._sections.get(resolve_section_id(section_id))

    def text(self, section_id: str) -> str:
        section = self.get(section_id)
        return section.text if section else ""

    def store(self, section: GeneratedSection) -> GeneratedSection:
        """Store section, replacing any earlier text for the same id."""
        section_id = resolve_section_id(section.section_id)
        if section_id != section.section_id:
            section = section.model_copy(update={"section_id": section_id})
        self._sections[section_id] = section
        self._states[section_id] = SectionState.completed
        return section

    def discard(self, section_id: str) -> GeneratedSection | None:
        section_id = resolve_section_id(section_id)
        self._states[section_id] = SectionState.idle
        return self._sections.pop(section_id, None)

    def clear(self) -> None:
        self._sections.clear()
        for section_id in self._states:
            self._states[section_id] = SectionState.idle

    def prior_sections(self, exclude: str | None = None) -> dict[str, str]:
        """Non-empty section texts other than exclude, in catalog order."""
        if exclude is not None:
            exclude = resolve_section_id(exclude)
        return {
            sid: section.text
            for sid, section in self.sections.items()
            if sid != exclude and section.has_content
        }

    def completed_ids(self) -> list[str]:
        """Ids of sections holding non-empty text, in catalog order."""
        return [sid for sid, section in self.sections.items() if section.has_content]

    def is_assembly_ready(self, quorum: int) -> bool:
        return len(self.completed_ids()) >= quorum

    # -- lifecycle hooks used by the orchestrator ----------------------------

    def _mark(self, section_id: str, state: SectionState) -> None:
        self._states[section_id] = state

    def _reset(self, section_id: str) -> None:
        """Return a section to where it was before an unfinished request."""
        self._states[section_id] = (
            SectionState.completed if section_id in self._sections else SectionState.idle
        )

    # -- persistence ---------------------------------------------------------

    def save(self, path: str | Path) -> Path:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        data = _SessionFile(sections=list(self.sections.values()))
        path.write_text(data.model_dump_json(indent=2), encoding="utf-8")
        logger.debug("saved session %s (%d sections)", path, len(self))
        return path

    @classmethod
    def load(cls, path: str | Path) -> WriterSession:
        """Load a saved session; a missing file yields an empty session."""
        path = Path(path)
        if not path.exists():
            return cls()
        data = _SessionFile.model_validate_json(path.read_text(encoding="utf-8"))
        return cls(data.sections)
