"""OpenAI adapter for admitwriter."""

from __future__ import annotations

from collections.abc import AsyncIterator

from openai import APIError, APITimeoutError, AsyncOpenAI, RateLimitError

from admitwriter.llm.base import LLMProvider
from admitwriter.llm.models import LLMConfig, LLMError, LLMResponse, TokenUsage


def _wrap(operation: str, e: APIError) -> LLMError:
    return LLMError(
        "openai",
        operation,
        e,
        retryable=isinstance(e, (RateLimitError, APITimeoutError)),
        status_code=getattr(e, "status_code", None),
    )


class OpenAIProvider(LLMProvider):
    """OpenAI adapter using the async SDK."""

    def __init__(self, config: LLMConfig) -> None:
        super().__init__(config)
        self._client = AsyncOpenAI(
            api_key=config.api_key,  # falls back to OPENAI_API_KEY env var
            base_url=config.base_url,
            timeout=config.timeout,
            max_retries=2,
        )

    async def generate(
        self,
        system: str,
        user: str,
        max_tokens: int = 4000,
        temperature: float | None = None,
    ) -> LLMResponse:
        try:
            response = await self._client.chat.completions.create(
                model=self.config.model,
                max_tokens=max_tokens,
                temperature=self._temperature(temperature),
                messages=[
                    {"role": "system", "content": system},
                    {"role": "user", "content": user},
                ],
            )
        except APIError as e:
            raise _wrap("generate", e) from e
        if not response.choices:
            raise ValueError("No choices in OpenAI response")
        choice = response.choices[0]
        usage = response.usage
        return LLMResponse(
            content=choice.message.content or "",
            usage=TokenUsage(
                input_tokens=usage.prompt_tokens if usage else 0,
                output_tokens=usage.completion_tokens if usage else 0,
            ),
            model=response.model,
        )

    async def generate_stream(
        self,
        system: str,
        user: str,
        max_tokens: int = 4000,
        temperature: float | None = None,
    ) -> AsyncIterator[str]:
        try:
            stream = await self._client.chat.completions.create(
                model=self.config.model,
                max_tokens=max_tokens,
                temperature=self._temperature(temperature),
                messages=[
                    {"role": "system", "content": system},
                    {"role": "user", "content": user},
                ],
                stream=True,
            )
            async for chunk in stream:
                if not chunk.choices:
                    continue
                delta = chunk.choices[0].delta
                if delta.content:
                    yield delta.content
        except APIError as e:
            raise _wrap("generate_stream", e) from e
