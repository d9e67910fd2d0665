"""Google Gemini adapter for admitwriter."""

from __future__ import annotations

from collections.abc import AsyncIterator

import httpx
from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from admitwriter.llm.base import LLMProvider
from admitwriter.llm.models import LLMConfig, LLMError, LLMResponse, TokenUsage


class GeminiProvider(LLMProvider):
    """Gemini adapter using the google-genai async client."""

    def __init__(self, config: LLMConfig) -> None:
        super().__init__(config)
        # HttpOptions.timeout is in milliseconds
        self._client = genai.Client(
            api_key=config.api_key,
            http_options=types.HttpOptions(
                timeout=int(config.timeout * 1000),
                base_url=config.base_url,
            ),
        )

    def _generation_config(
        self, system: str, max_tokens: int, temperature: float | None
    ) -> types.GenerateContentConfig:
        return types.GenerateContentConfig(
            system_instruction=system,
            max_output_tokens=max_tokens,
            temperature=self._temperature(temperature),
        )

    @staticmethod
    def _error(operation: str, e: Exception) -> LLMError:
        code = getattr(e, "code", None)
        return LLMError(
            "gemini",
            operation,
            e,
            retryable=code == 429 or isinstance(e, httpx.TimeoutException),
            status_code=code if isinstance(code, int) else None,
        )

    async def generate(
        self,
        system: str,
        user: str,
        max_tokens: int = 4000,
        temperature: float | None = None,
    ) -> LLMResponse:
        try:
            response = await self._client.aio.models.generate_content(
                model=self.config.model,
                contents=user,
                config=self._generation_config(system, max_tokens, temperature),
            )
        except (genai_errors.APIError, httpx.HTTPError) as e:
            raise self._error("generate", e) from e
        if not response.text:
            raise ValueError("No text content in Gemini response")
        usage = response.usage_metadata
        return LLMResponse(
            content=response.text,
            usage=TokenUsage(
                input_tokens=(usage.prompt_token_count or 0) if usage else 0,
                output_tokens=(usage.candidates_token_count or 0) if usage else 0,
            ),
            model=self.config.model,
        )

    async def generate_stream(
        self,
        system: str,
        user: str,
        max_tokens: int = 4000,
        temperature: float | None = None,
    ) -> AsyncIterator[str]:
        try:
            stream = await self._client.aio.models.generate_content_stream(
                model=self.config.model,
                contents=user,
                config=self._generation_config(system, max_tokens, temperature),
            )
            async for chunk in stream:
                if chunk.text:
                    yield chunk.text
        except (genai_errors.APIError, httpx.HTTPError) as e:
            raise self._error("generate_stream", e) from e
