"""Anthropic Claude adapter for admitwriter."""

from __future__ import annotations

from collections.abc import AsyncIterator

from anthropic import APIError, APITimeoutError, AsyncAnthropic, RateLimitError

from admitwriter.llm.base import LLMProvider
from admitwriter.llm.models import LLMConfig, LLMError, LLMResponse, TokenUsage


class ClaudeProvider(LLMProvider):
    """Claude adapter using the Anthropic async SDK."""

    def __init__(self, config: LLMConfig) -> None:
        super().__init__(config)
        self._client = AsyncAnthropic(
            api_key=config.api_key,  # falls back to ANTHROPIC_API_KEY env var
            base_url=config.base_url,
            timeout=config.timeout,
            max_retries=2,
        )

    def _error(self, operation: str, e: APIError) -> LLMError:
        return LLMError(
            "claude",
            operation,
            e,
            retryable=isinstance(e, (RateLimitError, APITimeoutError)),
            status_code=getattr(e, "status_code", None),
        )

    async def generate(
        self,
        system: str,
        user: str,
        max_tokens: int = 4000,
        temperature: float | None = None,
    ) -> LLMResponse:
        try:
            message = await self._client.messages.create(
                model=self.config.model,
                max_tokens=max_tokens,
                temperature=self._temperature(temperature),
                system=system,
                messages=[{"role": "user", "content": user}],
            )
        except APIError as e:
            raise self._error("generate", e) from e
        if not message.content or not hasattr(message.content[0], "text"):
            raise ValueError("No text content in Claude response")
        return LLMResponse(
            content=message.content[0].text,
            usage=TokenUsage(
                input_tokens=message.usage.input_tokens,
                output_tokens=message.usage.output_tokens,
            ),
            model=message.model,
        )

    async def generate_stream(
        self,
        system: str,
        user: str,
        max_tokens: int = 4000,
        temperature: float | None = None,
    ) -> AsyncIterator[str]:
        try:
            async with self._client.messages.stream(
                model=self.config.model,
                max_tokens=max_tokens,
                temperature=self._temperature(temperature),
                system=system,
                messages=[{"role": "user", "content": user}],
            ) as stream:
                async for text in stream.text_stream:
                    yield text
        except APIError as e:
            raise self._error("generate_stream", e) from e
