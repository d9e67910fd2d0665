"""Pydantic models for the candidate profile snapshot.

The profile store keeps camelCase keys (``personalInfo``, ``companyName``);
every model accepts those as well as the snake_case field names.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _ProfileModel(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


class PersonalInfo(_ProfileModel):
    full_name: str = ""
    email: str = ""
    phone: str = ""
    date_of_birth: str = ""
    gender: Literal["male", "female", "other", ""] = ""
    category: Literal["general", "obc", "sc", "st", "ews", ""] = ""
    city: str = ""
    state: str = ""


class AcademicRecord(_ProfileModel):
    # Stored with snake_case keys upstream; populate_by_name covers them.
    level: Literal["10th", "12th", "graduation", "post_graduation"]
    institution: str = ""
    board_university: str = ""
    stream_branch: str = ""
    percentage_cgpa: str = ""
    year_of_completion: str = ""


class SectionalScore(_ProfileModel):
    section: str
    score: str = ""
    percentile: str = ""


class EntranceScore(_ProfileModel):
    exam_name: str
    overall_score: str = ""
    overall_percentile: str = ""
    sectional_scores: list[SectionalScore] = Field(default_factory=list)
    year: str = ""


class WorkExperience(_ProfileModel):
    id: str = ""
    company_name: str = ""
    designation: str = ""
    industry: str = ""
    start_date: str = ""
    end_date: str = ""
    is_current_role: bool = False
    responsibilities: str = ""
    achievements: str = ""


class Activity(_ProfileModel):
    id: str = ""
    name: str = ""
    type: Literal["extra_curricular", "co_curricular"] = "extra_curricular"
    level: Literal["school", "college", "state", "national", "international"] = "college"
    duration: str = ""
    description: str = ""
    achievements: str = ""


class Achievement(_ProfileModel):
    id: str = ""
    title: str = ""
    year: str = ""
    issuing_organization: str = ""
    description: str = ""
    type: Literal["academic", "professional", "sports", "cultural", "social", "other"] = "other"


class Certification(_ProfileModel):
    id: str = ""
    name: str = ""
    issuing_organization: str = ""
    year: str = ""
    credential_id: str | None = None


class CareerGoals(_ProfileModel):
    short_term_goals: str = ""
    long_term_goals: str = ""
    why_mba: str = ""
    target_schools: list[str] = Field(default_factory=list)
    preferred_specialization: list[str] = Field(default_factory=list)


class AdditionalInfo(_ProfileModel):
    hobbies: str = ""
    languages: list[str] = Field(default_factory=list)
    social_projects: str = ""
    publications: str = ""
    patents: str = ""
    other_info: str = ""


class CandidateProfile(_ProfileModel):
    """Read-only snapshot of everything a candidate has entered."""

    personal_info: PersonalInfo
    academics: list[AcademicRecord]
    entrance_scores: list[EntranceScore]
    work_experience: list[WorkExperience]
    activities: list[Activity]
    achievements: list[Achievement]
    certifications: list[Certification]
    career_goals: CareerGoals
    additional_info: AdditionalInfo

    @classmethod
    def empty(cls) -> CandidateProfile:
        """Blank profile with the rows a new candidate starts from."""
        return cls(
            personal_info=PersonalInfo(),
            academics=[
                AcademicRecord(level="10th"),
                AcademicRecord(level="12th"),
                AcademicRecord(level="graduation"),
            ],
            entrance_scores=[
                EntranceScore(
                    exam_name="CAT",
                    sectional_scores=[
                        SectionalScore(section="VARC"),
                        SectionalScore(section="DILR"),
                        SectionalScore(section="QA"),
                    ],
                )
            ],
            work_experience=[],
            activities=[],
            achievements=[],
            certifications=[],
            career_goals=CareerGoals(),
            additional_info=AdditionalInfo(),
        )
