"""Pydantic models for the SOP writer."""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic import ValidationError as PydanticValidationError

from admitwriter.errors import ValidationError
from admitwriter.writer.stats import DocumentStats


class Tone(str, Enum):
    professional = "professional"
    conversational = "conversational"
    confident = "confident"
    humble = "humble"


class GenerationMode(str, Enum):
    full = "full"
    section = "section"


class SectionState(str, Enum):
    """Per-section lifecycle inside a WriterSession."""

    idle = "idle"
    composing = "composing"
    dispatched = "dispatched"
    completed = "completed"


class GenerationRequest(BaseModel):
    """Parameters for one generation call. Built fresh per call."""

    model_config = ConfigDict(frozen=True)

    target_identity: str
    length_target: int = Field(default=1000, gt=0)
    tone: Tone = Tone.conversational
    freeform_highlights: str = ""
    freeform_instructions: str = ""
    mode: GenerationMode = GenerationMode.full
    section_id: str | None = None
    prior_sections: dict[str, str] = Field(default_factory=dict)

    @field_validator("target_identity")
    @classmethod
    def validate_target_identity(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("target_identity cannot be empty or whitespace")
        return v.strip()

    @model_validator(mode="after")
    def check_section_mode(self) -> GenerationRequest:
        if self.mode is GenerationMode.section and not self.section_id:
            raise ValueError("section_id is required when mode is 'section'")
        return self

    @classmethod
    def parse(cls, data: Mapping[str, Any]) -> GenerationRequest:
        """Validate raw request data, raising the writer's ValidationError."""
        try:
            return cls.model_validate(dict(data))
        except PydanticValidationError as e:
            first = e.errors()[0]
            field = ".".join(str(p) for p in first["loc"]) or "request"
            raise ValidationError(field, f"Invalid request field {field!r}: {first['msg']}") from e

    def for_section(self, section_id: str, prior_sections: Mapping[str, str]) -> GenerationRequest:
        return self.model_copy(
            update={
                "mode": GenerationMode.section,
                "section_id": section_id,
                "prior_sections": dict(prior_sections),
            }
        )

    def as_full(self) -> GenerationRequest:
        return self.model_copy(
            update={"mode": GenerationMode.full, "section_id": None, "prior_sections": {}}
        )


class PromptPayload(BaseModel):
    """Instructions/content pair sent to the text-generation service."""

    model_config = ConfigDict(frozen=True)

    instructions: str
    content: str
    max_tokens: int


class GeneratedSection(BaseModel):
    """Output of one successful section generation. Replaced, never edited."""

    model_config = ConfigDict(frozen=True)

    section_id: str
    text: str
    generated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def has_content(self) -> bool:
        return bool(self.text.strip())


class AssembledDocument(BaseModel):
    """Final document text plus the sections it was built from."""

    model_config = ConfigDict(frozen=True)

    text: str
    section_ids: list[str] = Field(default_factory=list)
    stats: DocumentStats

    @classmethod
    def from_text(
        cls, text: str, section_ids: list[str] | None = None, word_limit: int | None = None
    ) -> AssembledDocument:
        return cls(
            text=text,
            section_ids=section_ids or [],
            stats=DocumentStats.from_text(text, word_limit),
        )
