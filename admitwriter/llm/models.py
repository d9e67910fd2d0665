"""Request settings and results passed between the SOP writer and its model adapters."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel


class LLMError(Exception):
    """A failed generation call, tagged with the adapter that raised it.

    ``operation`` is ``"generate"`` or ``"generate_stream"``. ``retryable``
    marks rate limits and timeouts. ``status_code`` carries the HTTP status
    when the SDK exposes one.
    """

    def __init__(
        self,
        provider: str,
        operation: str,
        cause: Exception,
        retryable: bool = False,
        status_code: int | None = None,
    ) -> None:
        self.provider = provider
        self.operation = operation
        self.retryable = retryable
        self.status_code = status_code
        super().__init__(f"{provider} {operation} failed: {cause}")
        self.__cause__ = cause


class LLMConfig(BaseModel):
    """Resolved adapter settings, built from ``LLMSettings`` once the API key is read.

    ``max_tokens`` and ``temperature`` are defaults for a full-document
    request; per-section calls pass their own limits.
    """

    provider: Literal["anthropic", "openai", "google", "ollama", "auto"]
    model: str
    max_tokens: int = 4000
    temperature: float = 0.7
    # seconds, forwarded to each SDK client
    timeout: float = 60.0
    api_key: str | None = None
    base_url: str | None = None


class TokenUsage(BaseModel):
    """Prompt and completion token counts for one request."""

    input_tokens: int
    output_tokens: int


class LLMResponse(BaseModel):
    """Generated SOP or section text returned by a non-streaming call."""

    content: str
    usage: TokenUsage
    model: str
