"""Prompt templates for Statement of Purpose generation.

Everything here is a pure function of its inputs: the same profile and
request always render byte-identical instructions and content.
"""

from __future__ import annotations

from collections.abc import Mapping

from admitwriter.profile.normalizer import NormalizedProfile
from admitwriter.writer.models import GenerationMode, GenerationRequest, PromptPayload, Tone
from admitwriter.writer.sections import (
    CLOSING,
    JOURNEY,
    OPENING,
    SECTIONS,
    WHY_INSTITUTION,
    WHY_PROGRAM,
    SectionDefinition,
    get_section,
    resolve_section_id,
)

TONE_DESCRIPTIONS: dict[Tone, str] = {
    Tone.professional: "composed, thoughtful tone",
    Tone.conversational: "warm but substantive, like talking to a mentor",
    Tone.confident: "assertive about achievements without arrogance",
    Tone.humble: "reflective and showing genuine growth",
}

FORBIDDEN_OPENING = "I am [Name] from [City]"

CLICHE_PHRASES: tuple[str, ...] = (
    "I am eager to pursue",
    "I have always been passionate",
    "Since childhood",
    "I firmly believe",
)

BUZZWORDS: tuple[str, ...] = ("synergy", "leverage", "cutting-edge", "propel")

NO_HIGHLIGHTS_FALLBACK = "No specific stories provided - use the profile data below."

PRIOR_SECTIONS_MARKER = "## ALREADY WRITTEN SECTIONS (DO NOT REPEAT THESE POINTS):"

_STRUCTURE_HINTS: dict[str, str] = {
    OPENING.id: "A compelling hook that reveals something about the candidate's mindset (2-3 sentences)",
    JOURNEY.id: "2-3 specific stories with concrete outcomes - NOT a chronological resume",
    WHY_PROGRAM.id: "Genuine gaps identified, what the candidate needs to learn",
    WHY_INSTITUTION.id: "Specific programs, faculty, culture - NOT generic praise",
    CLOSING.id: "Forward-looking, confident but not arrogant (2-3 sentences)",
}


def _quoted(phrases: tuple[str, ...]) -> str:
    return ", ".join(f'"{p}"' for p in phrases)


FULL_SYSTEM_TEMPLATE = """\
You are an expert MBA admissions consultant who writes SOPs that sound like the candidate wrote them personally - authentic, reflective, and specific.

CRITICAL RULES - NEVER VIOLATE THESE:
1. NEVER start with "{forbidden_opening}" - this is lazy writing
2. NEVER use phrases like {cliches}
3. NEVER write generic statements - every sentence must be specific to THIS candidate
4. NEVER list achievements like a resume - weave them into a narrative
5. NEVER use corporate buzzwords like {buzzwords}

DATA SELECTION - BE HIGHLY SELECTIVE:
You will receive the candidate's complete profile data. DO NOT use everything. Be strategic:
- ONLY use data points that genuinely strengthen the narrative
- SKIP mediocre achievements, generic responsibilities, or filler content
- PRIORITIZE: Unique experiences, quantifiable impact, leadership moments, unconventional paths, genuine struggles/pivots
- If academics are average, don't emphasize them - focus on work/extracurriculars instead
- If work experience is entry-level, highlight growth trajectory or unique projects
- Cherry-pick 2-3 STRONGEST stories rather than mentioning everything superficially

WRITING STYLE:
- Start with a hook - an insight, realization, or defining moment
- Write in first person with a reflective, mature tone
- Use SHORT, PUNCHY sentences mixed with longer ones for rhythm
- Be SPECIFIC - use numbers, names, outcomes (e.g., "20,000 subscribers in 3 months" not "significant growth")
- Show self-awareness - acknowledge gaps, pivots, and learnings honestly
- Tone: {tone}

STRUCTURE:
{structure}

The SOP should read like the candidate's authentic voice, not an AI-generated document.
Word limit: approximately {length} words\
"""

SECTION_SYSTEM_TEMPLATE = """\
You are an expert MBA admissions consultant. Write ONLY the "{section_name}" section of an SOP.

CRITICAL RULES:
- Write ONLY this section, nothing else - no heading, no other sections
- NEVER start with "{forbidden_opening}"
- NO clichés like {cliches}
- Be SPECIFIC with numbers, names, outcomes
- Use authentic, reflective voice
- Tone: {tone}
- Keep this section focused and impactful\
"""

AVOID_REPETITION_TEMPLATE = """\
VERY IMPORTANT - AVOID REPETITION:
- These sections have ALREADY been written (shown in the content): {written}
- DO NOT repeat any stories, achievements, or points already mentioned
- Build on what's been said, don't repeat it
- Use DIFFERENT examples and angles
- Maintain narrative continuity - reference previous points naturally if needed\
"""

PRIOR_SECTIONS_FOOTER = """\
## IMPORTANT:
- The above sections are ALREADY part of the SOP
- DO NOT repeat any stories, achievements, or examples mentioned above
- Use DIFFERENT angles and examples for this new section
- Maintain consistency in tone and narrative flow\
"""

FULL_WRITING_INSTRUCTIONS = """\
## WRITING INSTRUCTIONS:
1. START with an insight or realization - NOT "{forbidden_opening}"
2. PRIORITIZE the key stories provided above (if any) - they are the candidate's unique differentiators
3. BE SELECTIVE: Scan all the data above and ONLY use what genuinely strengthens the profile
4. Write in first person with a reflective, mature voice
5. Use specific numbers and outcomes
6. Show the candidate's thought process and self-awareness
7. For "Why {target}" - mention specific programs, faculty, clubs, or initiatives at this school
8. End with a forward-looking statement that feels genuine, not generic
9. Keep it around {length} words

Write the complete SOP now:\
"""


def _section_words(section: SectionDefinition, length: int) -> int:
    return max(1, round(length * section.narrative_share / 100))


class PromptComposer:
    """Builds the instructions/content payload for full or per-section generation."""

    def __init__(
        self,
        full_max_tokens: int = 4000,
        section_max_tokens: int = 1000,
        opening_excerpt_chars: int = 100,
    ) -> None:
        self.full_max_tokens = full_max_tokens
        self.section_max_tokens = section_max_tokens
        self.opening_excerpt_chars = opening_excerpt_chars

    def compose(self, profile: NormalizedProfile, request: GenerationRequest) -> PromptPayload:
        """Compose the payload for request.

        Raises UnknownSectionError when request.section_id (or a key of
        request.prior_sections) is not part of the catalog.
        """
        if request.mode is GenerationMode.section:
            section = get_section(request.section_id)
            prior = self.prior_context(request.prior_sections, exclude=section.id)
            return PromptPayload(
                instructions=self._section_instructions(section, request, prior),
                content=self._section_content(section, profile, request, prior),
                max_tokens=self.section_max_tokens,
            )
        return PromptPayload(
            instructions=self._full_instructions(request),
            content=self._full_content(profile, request),
            max_tokens=min(request.length_target * 3, self.full_max_tokens),
        )

    @staticmethod
    def prior_context(prior_sections: Mapping[str, str], exclude: str | None = None) -> dict[str, str]:
        """Canonical, catalog-ordered, non-empty prior sections."""
        resolved: dict[str, str] = {}
        for key, text in prior_sections.items():
            section_id = resolve_section_id(key)
            if section_id != exclude and text and text.strip():
                resolved[section_id] = text
        return {s.id: resolved[s.id] for s in SECTIONS if s.id in resolved}

    # -- full document ------------------------------------------------------

    @staticmethod
    def _full_instructions(request: GenerationRequest) -> str:
        structure = "\n".join(
            f"{i}. {s.display_name} (~{s.narrative_share}%): {_STRUCTURE_HINTS[s.id]}"
            for i, s in enumerate(SECTIONS, start=1)
        )
        return FULL_SYSTEM_TEMPLATE.format(
            forbidden_opening=FORBIDDEN_OPENING,
            cliches=_quoted(CLICHE_PHRASES),
            buzzwords=_quoted(BUZZWORDS),
            tone=TONE_DESCRIPTIONS[request.tone],
            structure=structure,
            length=request.length_target,
        )

    def _full_content(self, profile: NormalizedProfile, request: GenerationRequest) -> str:
        name = profile.full_name or "the candidate"
        parts = [
            f"Write a Statement of Purpose (SOP) for {name} applying to {request.target_identity}.",
            "",
            "## KEY STORIES & ACHIEVEMENTS TO HIGHLIGHT (MOST IMPORTANT - USE THESE):",
            self._highlights(request),
            "",
            "## CANDIDATE PROFILE:",
            "",
            profile.render(),
            "",
            "## REQUIREMENTS:",
            f"- Target School: {request.target_identity}",
            f"- Word Limit: Approximately {request.length_target} words",
            f"- Tone: {request.tone.value}",
        ]
        if request.freeform_instructions.strip():
            parts.append(f"- Additional Instructions: {request.freeform_instructions.strip()}")
        parts += [
            "",
            FULL_WRITING_INSTRUCTIONS.format(
                forbidden_opening=FORBIDDEN_OPENING,
                target=request.target_identity,
                length=request.length_target,
            ),
        ]
        return "\n".join(parts)

    # -- single section -----------------------------------------------------

    @staticmethod
    def _section_instructions(
        section: SectionDefinition, request: GenerationRequest, prior: dict[str, str]
    ) -> str:
        text = SECTION_SYSTEM_TEMPLATE.format(
            section_name=section.display_name,
            forbidden_opening=FORBIDDEN_OPENING,
            cliches=_quoted(CLICHE_PHRASES),
            tone=TONE_DESCRIPTIONS[request.tone],
        )
        if not prior:
            return text
        written = ", ".join(get_section(sid).display_name for sid in prior)
        text += "\n\n" + AVOID_REPETITION_TEMPLATE.format(written=written)
        if OPENING.id in prior:
            text += "\n- DO NOT re-introduce the candidate; the opening already did that"
        return text

    def _section_content(
        self,
        section: SectionDefinition,
        profile: NormalizedProfile,
        request: GenerationRequest,
        prior: dict[str, str],
    ) -> str:
        parts = [
            "## KEY STORIES (PRIORITIZE THESE):",
            self._highlights(request),
            "",
            "## CANDIDATE PROFILE:",
            "",
            profile.render(),
            "",
            f"Target: {request.target_identity}",
        ]
        if request.freeform_instructions.strip():
            parts.append(f"Instructions: {request.freeform_instructions.strip()}")
        if prior:
            parts += ["", PRIOR_SECTIONS_MARKER]
            for sid, text in prior.items():
                parts += [f"### {get_section(sid).display_name}:", text, ""]
            parts.append(PRIOR_SECTIONS_FOOTER)
        parts += ["", self._section_guidance(section, request, prior)]
        return "\n".join(parts)

    def _section_guidance(
        self, section: SectionDefinition, request: GenerationRequest, prior: dict[str, str]
    ) -> str:
        target = request.target_identity
        length = request.length_target
        share = f"- About {section.narrative_share}% of a {length}-word SOP (~{_section_words(section, length)} words)"

        if section.id == OPENING.id:
            lines = [
                f"Write ONLY the OPENING (2-3 sentences) for an SOP to {target}.",
                "- Start with an insight, realization, or defining moment",
                f'- NO "{FORBIDDEN_OPENING}"',
                "- Hook the reader immediately",
                "- Show the candidate's mindset",
            ]
        elif section.id == JOURNEY.id:
            lines = [
                f"Write ONLY the JOURNEY section (main body) for an SOP to {target}.",
                "- Focus on specific stories from the key stories above",
                "- Use concrete numbers and outcomes",
                "- Show growth and self-awareness",
                "- Connect experiences to future goals",
                share,
            ]
            if OPENING.id in prior:
                lines.append("- Continue naturally from the opening hook above")
        elif section.id == WHY_PROGRAM.id:
            lines = [
                f'Write ONLY the "Why MBA" section for an SOP to {target}.',
                "- Identify genuine gaps in skills/knowledge",
                "- Explain what structured learning will add",
                "- Be honest about what the candidate needs to grow",
                share,
            ]
            if JOURNEY.id in prior:
                lines.append("- Build on the journey described above - what gaps remain?")
        elif section.id == WHY_INSTITUTION.id:
            lines = [
                f'Write ONLY the "Why {target}" section.',
                f"- Mention SPECIFIC programs, courses, or specializations at {target}",
                "- Reference specific faculty, clubs, or initiatives if known",
                "- Explain fit between the candidate's goals and the school's offerings",
                share,
            ]
            if WHY_PROGRAM.id in prior:
                lines.append("- Connect this to the MBA goals mentioned above")
        else:
            lines = [
                f"Write ONLY the CLOSING (2-3 sentences) for an SOP to {target}.",
                "- Forward-looking and confident",
                f"- Reinforce fit with {target}",
                "- NOT generic - specific to this candidate",
                "- Tie back to the opening hook if possible for a satisfying conclusion",
            ]
            if OPENING.id in prior and self.opening_excerpt_chars:
                excerpt = prior[OPENING.id][: self.opening_excerpt_chars]
                lines.append(f'- Reference the opening theme: "{excerpt}..."')
        return "\n".join(lines)

    @staticmethod
    def _highlights(request: GenerationRequest) -> str:
        return request.freeform_highlights.strip() or NO_HIGHLIGHTS_FALLBACK
