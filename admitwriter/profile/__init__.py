"""Candidate profile snapshot and its normalizer."""

from admitwriter.profile.models import (
    AcademicRecord,
    Achievement,
    Activity,
    AdditionalInfo,
    CandidateProfile,
    CareerGoals,
    Certification,
    EntranceScore,
    PersonalInfo,
    SectionalScore,
    WorkExperience,
)
from admitwriter.profile.normalizer import NormalizedProfile, ProfileNormalizer, normalize_profile

__all__ = [
    "AcademicRecord",
    "Achievement",
    "Activity",
    "AdditionalInfo",
    "CandidateProfile",
    "CareerGoals",
    "Certification",
    "EntranceScore",
    "NormalizedProfile",
    "PersonalInfo",
    "ProfileNormalizer",
    "SectionalScore",
    "WorkExperience",
    "normalize_profile",
]
