from typing import Literal

from pydantic import BaseModel, Field


class LLMSettings(BaseModel):
    provider: Literal["anthropic", "openai", "google", "ollama", "auto"] = "openai"
    model: str = "gpt-4o"
    api_key_env: str = "OPENAI_API_KEY"
    max_tokens: int = Field(default=4000, gt=0)
    section_max_tokens: int = Field(default=1000, gt=0)
    temperature: float = Field(default=0.7, ge=0, le=2)
    timeout: int = Field(default=60, gt=0)
    base_url: str | None = None


class WriterConfig(BaseModel):
    quorum: int = Field(default=3, ge=1, le=5)
    default_word_limit: int = Field(default=1000, gt=0)
    default_tone: Literal["professional", "conversational", "confident", "humble"] = "conversational"
    opening_excerpt_chars: int = Field(default=100, ge=0)


class ReviewConfig(BaseModel):
    min_chars: int = Field(default=100, ge=0)
    temperature: float = Field(default=0.3, ge=0, le=2)
    max_tokens: int = Field(default=2000, gt=0)


class OutputConfig(BaseModel):
    base_dir: str = ".admitwriter"
    create_index: bool = True


class AdmitWriterConfig(BaseModel):
    llm: LLMSettings = Field(default_factory=LLMSettings)
    writer: WriterConfig = Field(default_factory=WriterConfig)
    review: ReviewConfig = Field(default_factory=ReviewConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    log_level: Literal["debug", "info", "warn", "error"] = "info"
    log_format: Literal["text", "json"] = "text"
