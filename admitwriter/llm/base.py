"""Abstract LLM interface for admitwriter."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator

from admitwriter.llm.models import LLMConfig, LLMResponse


class LLMProvider(ABC):
    """Provider-agnostic interface for long-form document generation.

    Every adapter must implement both one-shot and streaming generation:
    a full statement of purpose runs to 1000+ words and callers render it
    incrementally while it arrives.
    """

    def __init__(self, config: LLMConfig) -> None:
        self.config = config

    def _temperature(self, temperature: float | None) -> float:
        return self.config.temperature if temperature is None else temperature

    @abstractmethod
    async def generate(
        self,
        system: str,
        user: str,
        max_tokens: int = 4000,
        temperature: float | None = None,
    ) -> LLMResponse:
        """Generate a complete response (one-shot)."""
        ...

    @abstractmethod
    def generate_stream(
        self,
        system: str,
        user: str,
        max_tokens: int = 4000,
        temperature: float | None = None,
    ) -> AsyncIterator[str]:
        """Yield response text chunks as they arrive."""
        ...
