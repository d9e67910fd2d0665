"""Admissions-consultant style review of a finished statement of purpose."""

from __future__ import annotations

import logging
import re
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from admitwriter.errors import GenerationFailedError, ValidationError
from admitwriter.llm.base import LLMProvider

logger = logging.getLogger(__name__)

_REVIEW_SYSTEM = """\
You are an expert MBA admissions consultant who has reviewed thousands of SOPs \
for top B-schools like IIMs, ISB, XLRI, SP Jain, and other premier institutions.

Analyze the given SOP and provide a detailed assessment. Be constructive but honest.

RESPOND IN THIS EXACT JSON FORMAT:
{
  "overallScore": <number 1-100>,
  "summary": "<2-3 sentence summary of the SOP quality>",
  "scores": {
    "opening": { "score": <1-10>, "comment": "<brief comment>" },
    "storytelling": { "score": <1-10>, "comment": "<brief comment>" },
    "specificity": { "score": <1-10>, "comment": "<brief comment>" },
    "whyMba": { "score": <1-10>, "comment": "<brief comment>" },
    "whySchool": { "score": <1-10>, "comment": "<brief comment>" },
    "authenticity": { "score": <1-10>, "comment": "<brief comment>" },
    "structure": { "score": <1-10>, "comment": "<brief comment>" },
    "language": { "score": <1-10>, "comment": "<brief comment>" }
  },
  "strengths": ["<strength>", "..."],
  "improvements": [
    { "issue": "<what's wrong>", "suggestion": "<how to fix>", "priority": "high|medium|low" }
  ],
  "cliches": ["<cliche phrase found>", "..."],
  "wordCountAnalysis": "<comment on word count vs limit>",
  "admissionChance": "<low|medium|high|very high> - <1 sentence reasoning>"
}

## Scoring Criteria

- Opening: Does it hook the reader? Avoids "I am X from Y"?
- Storytelling: Are there compelling, specific stories with outcomes?
- Specificity: Are there concrete numbers, names, achievements?
- Why MBA: Are genuine gaps and growth areas identified?
- Why School: Is there school-specific content (programs, faculty, culture)?
- Authenticity: Does it sound like a real person, not a template?
- Structure: Clear flow from hook to journey to why MBA to why school to closing?
- Language: Professional but personal? No corporate buzzwords?

Be specific in your feedback. Point to exact issues and give actionable suggestions. \
Respond with the JSON object only.\
"""

_REVIEW_USER = """\
Analyze this SOP for {target_identity}. Word limit: {length_target} words.

SOP Content:
{text}\
"""

_FENCE = re.compile(r"^```(?:json)?\s*(.*?)\s*```$", re.DOTALL)


class _ReviewModel(BaseModel):
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)


class CriterionScore(_ReviewModel):
    score: int = Field(ge=1, le=10)
    comment: str = ""


class CriterionScores(_ReviewModel):
    opening: CriterionScore
    storytelling: CriterionScore
    specificity: CriterionScore
    why_mba: CriterionScore
    why_school: CriterionScore
    authenticity: CriterionScore
    structure: CriterionScore
    language: CriterionScore


class Improvement(_ReviewModel):
    issue: str
    suggestion: str
    priority: Literal["high", "medium", "low"] = "medium"


class SOPReview(_ReviewModel):
    """Structured assessment returned by SOPReviewer."""

    overall_score: int = Field(ge=1, le=100)
    summary: str
    scores: CriterionScores
    strengths: list[str] = Field(default_factory=list)
    improvements: list[Improvement] = Field(default_factory=list)
    cliches: list[str] = Field(default_factory=list)
    word_count_analysis: str = ""
    admission_chance: str = ""


def _strip_fence(raw: str) -> str:
    raw = raw.strip()
    match = _FENCE.match(raw)
    return match.group(1) if match else raw


class SOPReviewer:
    """Scores a statement against eight admissions criteria via the LLM."""

    def __init__(
        self,
        llm: LLMProvider,
        min_chars: int = 100,
        temperature: float = 0.3,
        max_tokens: int = 2000,
    ) -> None:
        self.llm = llm
        self.min_chars = min_chars
        self.temperature = temperature
        self.max_tokens = max_tokens

    async def review(self, text: str, target_identity: str, length_target: int = 1000) -> SOPReview:
        if len(text.strip()) < self.min_chars:
            raise ValidationError("content", "SOP content is too short to analyze")
        if not target_identity.strip():
            raise ValidationError("target_identity")

        user = _REVIEW_USER.format(
            target_identity=target_identity.strip(),
            length_target=length_target,
            text=text,
        )
        try:
            response = await self.llm.generate(
                system=_REVIEW_SYSTEM,
                user=user,
                max_tokens=self.max_tokens,
                temperature=self.temperature,
            )
            review = SOPReview.model_validate_json(_strip_fence(response.content))
        except PydanticValidationError as e:
            logger.warning("Review response did not match the expected format: %d errors", e.error_count())
            raise GenerationFailedError(None, e) from e
        except Exception as e:
            logger.warning("Review generation failed: %s", e)
            raise GenerationFailedError(None, e) from e

        logger.info("Reviewed SOP for %s: %d/100", target_identity.strip(), review.overall_score)
        return review
