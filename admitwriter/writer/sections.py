"""Fixed catalog of SOP sections.

Catalog order is the assembly order, whatever order sections were
generated in.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from admitwriter.errors import UnknownSectionError


class SectionDefinition(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    display_name: str
    description: str
    narrative_share: int
    order: int


OPENING = SectionDefinition(
    id="opening",
    display_name="Opening Hook",
    description="Compelling first impression",
    narrative_share=5,
    order=0,
)
JOURNEY = SectionDefinition(
    id="journey",
    display_name="Your Journey",
    description="Stories & experiences",
    narrative_share=60,
    order=1,
)
WHY_PROGRAM = SectionDefinition(
    id="whyProgram",
    display_name="Why MBA",
    description="Gaps & growth areas",
    narrative_share=15,
    order=2,
)
WHY_INSTITUTION = SectionDefinition(
    id="whyInstitution",
    display_name="Why This School",
    description="School-specific fit",
    narrative_share=15,
    order=3,
)
CLOSING = SectionDefinition(
    id="closing",
    display_name="Closing",
    description="Memorable ending",
    narrative_share=5,
    order=4,
)

SECTIONS: tuple[SectionDefinition, ...] = (OPENING, JOURNEY, WHY_PROGRAM, WHY_INSTITUTION, CLOSING)

SECTION_IDS: tuple[str, ...] = tuple(s.id for s in SECTIONS)

_BY_ID = {s.id: s for s in SECTIONS}

# Ids used by earlier saved sessions.
_ALIASES = {
    "whyMba": WHY_PROGRAM.id,
    "whySchool": WHY_INSTITUTION.id,
}


def resolve_section_id(section_id: object) -> str:
    """Return the canonical id for section_id, accepting legacy aliases."""
    if isinstance(section_id, str):
        canonical = _ALIASES.get(section_id, section_id)
        if canonical in _BY_ID:
            return canonical
    raise UnknownSectionError(section_id)


def get_section(section_id: object) -> SectionDefinition:
    return _BY_ID[resolve_section_id(section_id)]
