"""Profile normalizer: reduces a CandidateProfile to the parts worth narrating.

Filtering is presence-only. Deciding which highlights matter is left to the
generation service through the prompt instructions.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from admitwriter.errors import ValidationError
from admitwriter.profile.models import (
    AcademicRecord,
    Achievement,
    Activity,
    AdditionalInfo,
    CandidateProfile,
    CareerGoals,
    Certification,
    EntranceScore,
    WorkExperience,
)

_NONE = "None mentioned"
_UNSPECIFIED = "Not specified"


def _filled(value: str | None) -> bool:
    return bool(value and value.strip())


def _or(value: str, fallback: str) -> str:
    return value.strip() if _filled(value) else fallback


class NormalizedProfile(BaseModel):
    """Non-empty subset of a profile, in the profile's original entry order."""

    model_config = ConfigDict(frozen=True)

    full_name: str = ""
    city: str = ""
    state: str = ""
    academics: list[AcademicRecord] = Field(default_factory=list)
    entrance_scores: list[EntranceScore] = Field(default_factory=list)
    work_experience: list[WorkExperience] = Field(default_factory=list)
    activities: list[Activity] = Field(default_factory=list)
    achievements: list[Achievement] = Field(default_factory=list)
    certifications: list[Certification] = Field(default_factory=list)
    career_goals: CareerGoals = Field(default_factory=CareerGoals)
    additional_info: AdditionalInfo = Field(default_factory=AdditionalInfo)

    @property
    def location(self) -> str:
        return ", ".join(p for p in (self.city.strip(), self.state.strip()) if p)

    def render(self) -> str:
        """Render the deterministic profile block embedded in prompts."""
        parts = [
            "### Personal Background:",
            f"- Name: {_or(self.full_name, _UNSPECIFIED)}",
            f"- Location: {self.location or _UNSPECIFIED}",
            "",
            "### Education:",
            _lines([_format_academic(a) for a in self.academics]),
            "",
            "### Entrance Scores:",
            _lines([_format_score(s) for s in self.entrance_scores]),
            "",
            f"### Work Experience ({_role_count(len(self.work_experience))}):",
            _lines([_format_work(w) for w in self.work_experience], sep="\n\n", empty="Fresher"),
            "",
            "### Extra-Curricular & Co-Curricular Activities:",
            _lines([_format_activity(a) for a in self.activities]),
            "",
            "### Awards & Achievements:",
            _lines([_format_achievement(a) for a in self.achievements]),
            "",
            "### Certifications:",
            _lines([_format_certification(c) for c in self.certifications]),
            "",
            "### Career Goals:",
            f"- Why MBA: {_or(self.career_goals.why_mba, _UNSPECIFIED)}",
            f"- Short-term Goals (2-3 years): {_or(self.career_goals.short_term_goals, _UNSPECIFIED)}",
            f"- Long-term Goals (5-10 years): {_or(self.career_goals.long_term_goals, _UNSPECIFIED)}",
            "- Preferred Specialization: "
            + (", ".join(self.career_goals.preferred_specialization) or _UNSPECIFIED),
            "",
            "### Additional Information:",
            f"- Hobbies: {_or(self.additional_info.hobbies, _UNSPECIFIED)}",
            f"- Languages: {', '.join(self.additional_info.languages) or _UNSPECIFIED}",
            f"- Social Projects: {_or(self.additional_info.social_projects, _NONE)}",
            f"- Publications: {_or(self.additional_info.publications, _NONE)}",
            f"- Patents: {_or(self.additional_info.patents, _NONE)}",
            f"- Other: {_or(self.additional_info.other_info, 'None')}",
        ]
        return "\n".join(parts)


def _lines(entries: list[str], sep: str = "\n", empty: str = _NONE) -> str:
    return sep.join(entries) if entries else empty


def _role_count(n: int) -> str:
    return f"{n} {'role' if n == 1 else 'roles'}"


def _format_academic(a: AcademicRecord) -> str:
    subject = f"{a.stream_branch} from {a.institution}" if _filled(a.stream_branch) else a.institution
    detail = ", ".join(p for p in (a.percentage_cgpa, a.year_of_completion) if _filled(p))
    return f"- {a.level}: {subject}" + (f" ({detail})" if detail else "")


def _format_score(s: EntranceScore) -> str:
    label = f"{s.exam_name} {s.year}".strip()
    line = f"- {label}: {s.overall_percentile} percentile"
    sectionals = [
        f"{x.section} {x.percentile}" for x in s.sectional_scores if _filled(x.percentile)
    ]
    if sectionals:
        line += f" ({', '.join(sectionals)})"
    return line


def _format_work(w: WorkExperience) -> str:
    heading = f"**{w.designation} at {w.company_name}**" if _filled(w.designation) else f"**{w.company_name}**"
    if _filled(w.industry):
        heading += f" ({w.industry})"
    end = "Present" if w.is_current_role else w.end_date
    lines = [heading]
    if _filled(w.start_date) or _filled(end):
        lines.append(f"{w.start_date} - {end}".strip(" -"))
    if _filled(w.responsibilities):
        lines.append(f"Responsibilities: {w.responsibilities.strip()}")
    if _filled(w.achievements):
        lines.append(f"Key Achievements: {w.achievements.strip()}")
    return "\n".join(lines)


def _format_activity(a: Activity) -> str:
    line = f"- {a.name} ({a.level} level)"
    if _filled(a.description):
        line += f": {a.description.strip()}"
    if _filled(a.achievements):
        line += f" Achievement: {a.achievements.strip()}"
    return line


def _format_achievement(a: Achievement) -> str:
    line = f"- {a.title}" + (f" ({a.year})" if _filled(a.year) else "")
    if _filled(a.description):
        line += f": {a.description.strip()}"
    return line


def _format_certification(c: Certification) -> str:
    if _filled(c.issuing_organization):
        return f"- {c.name} by {c.issuing_organization}"
    return f"- {c.name}"


def _field_from_error(exc: PydanticValidationError) -> str:
    first = exc.errors()[0]
    return ".".join(str(p) for p in first["loc"]) or "profile"


class ProfileNormalizer:
    """Builds NormalizedProfile instances from profile snapshots."""

    def normalize(self, profile: CandidateProfile | Mapping[str, Any] | None) -> NormalizedProfile:
        if profile is None:
            raise ValidationError("profile", "Candidate profile is required")
        if not isinstance(profile, CandidateProfile):
            if not isinstance(profile, Mapping):
                raise ValidationError("profile", f"Expected a profile mapping, got {type(profile).__name__}")
            try:
                profile = CandidateProfile.model_validate(profile)
            except PydanticValidationError as e:
                field = _field_from_error(e)
                raise ValidationError(field, f"Invalid profile field {field!r}: {e.errors()[0]['msg']}") from e

        goals = profile.career_goals
        extra = profile.additional_info
        return NormalizedProfile(
            full_name=profile.personal_info.full_name.strip(),
            city=profile.personal_info.city,
            state=profile.personal_info.state,
            academics=[a for a in profile.academics if _filled(a.institution)],
            entrance_scores=[s for s in profile.entrance_scores if _filled(s.overall_percentile)],
            work_experience=[w for w in profile.work_experience if _filled(w.company_name)],
            activities=[a for a in profile.activities if _filled(a.name)],
            achievements=[a for a in profile.achievements if _filled(a.title)],
            certifications=[c for c in profile.certifications if _filled(c.name)],
            career_goals=goals.model_copy(
                update={
                    "target_schools": [s for s in goals.target_schools if _filled(s)],
                    "preferred_specialization": [
                        s for s in goals.preferred_specialization if _filled(s)
                    ],
                }
            ),
            additional_info=extra.model_copy(
                update={"languages": [lang for lang in extra.languages if _filled(lang)]}
            ),
        )


def normalize_profile(profile: CandidateProfile | Mapping[str, Any] | None) -> NormalizedProfile:
    """Normalize a profile with the default normalizer."""
    return ProfileNormalizer().normalize(profile)
