"""Section-aware SOP writer: catalog, prompts, orchestration and review."""

from admitwriter.writer.models import (
    AssembledDocument,
    GeneratedSection,
    GenerationMode,
    GenerationRequest,
    PromptPayload,
    SectionState,
    Tone,
)
from admitwriter.writer.orchestrator import GenerationStream, SectionOrchestrator
from admitwriter.writer.prompts import PRIOR_SECTIONS_MARKER, PromptComposer
from admitwriter.writer.review import SOPReview, SOPReviewer
from admitwriter.writer.sections import SECTION_IDS, SECTIONS, SectionDefinition, get_section
from admitwriter.writer.session import WriterSession
from admitwriter.writer.stats import DocumentStats

__all__ = [
    "AssembledDocument",
    "DocumentStats",
    "GeneratedSection",
    "GenerationMode",
    "GenerationRequest",
    "GenerationStream",
    "PRIOR_SECTIONS_MARKER",
    "PromptComposer",
    "PromptPayload",
    "SECTIONS",
    "SECTION_IDS",
    "SOPReview",
    "SOPReviewer",
    "SectionDefinition",
    "SectionOrchestrator",
    "SectionState",
    "Tone",
    "WriterSession",
    "get_section",
]
