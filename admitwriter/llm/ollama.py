"""Ollama adapter for admitwriter."""

from __future__ import annotations

import json
import logging
from collections.abc import AsyncIterator
from urllib.parse import urlparse

import httpx

from admitwriter.llm.base import LLMProvider
from admitwriter.llm.models import LLMConfig, LLMError, LLMResponse, TokenUsage

logger = logging.getLogger(__name__)

_DEFAULT_BASE_URL = "http://localhost:11434"


def _validate_base_url(url: str) -> str:
    """Validate Ollama base_url for SSRF and injection risks.

    Raises ValueError if the URL is malformed or contains injection patterns.
    Warns if the URL is not localhost (remote Ollama is valid but uncommon).
    """
    parsed = urlparse(url)

    if parsed.scheme not in ("http", "https"):
        raise ValueError(f"Ollama base_url must be http(s), got {parsed.scheme}")

    if "\r" in url or "\n" in url:
        raise ValueError("CRLF injection detected in base_url")

    allowed_hosts = {"localhost", "127.0.0.1", "::1", "0.0.0.0"}
    if parsed.hostname not in allowed_hosts:
        logger.warning(
            "Ollama base_url %s is not localhost; make sure this is intentional",
            parsed.hostname,
        )

    return url


def _status_code(e: httpx.HTTPError) -> int | None:
    if isinstance(e, httpx.HTTPStatusError):
        return e.response.status_code
    return None


class OllamaProvider(LLMProvider):
    """Ollama adapter using its REST chat API via httpx."""

    def __init__(self, config: LLMConfig) -> None:
        super().__init__(config)
        raw_url = (config.base_url or _DEFAULT_BASE_URL).rstrip("/")
        self._base_url = _validate_base_url(raw_url)

    def _payload(
        self, system: str, user: str, max_tokens: int, temperature: float | None, stream: bool
    ) -> dict:
        return {
            "model": self.config.model,
            "messages": [
                {"role": "system", "content": system},
                {"role": "user", "content": user},
            ],
            "options": {
                "num_predict": max_tokens,
                "temperature": self._temperature(temperature),
            },
            "stream": stream,
        }

    async def generate(
        self,
        system: str,
        user: str,
        max_tokens: int = 4000,
        temperature: float | None = None,
    ) -> LLMResponse:
        payload = self._payload(system, user, max_tokens, temperature, stream=False)
        try:
            async with httpx.AsyncClient() as client:
                resp = await client.post(
                    f"{self._base_url}/api/chat",
                    json=payload,
                    timeout=self.config.timeout,
                )
                resp.raise_for_status()
                data = resp.json()
        except httpx.HTTPError as e:
            raise LLMError(
                "ollama",
                "generate",
                e,
                retryable=isinstance(e, httpx.TimeoutException),
                status_code=_status_code(e),
            ) from e

        content = data.get("message", {}).get("content", "")
        if not content:
            raise ValueError("No content in Ollama response")
        return LLMResponse(
            content=content,
            usage=TokenUsage(
                input_tokens=data.get("prompt_eval_count", 0),
                output_tokens=data.get("eval_count", 0),
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
        payload = self._payload(system, user, max_tokens, temperature, stream=True)
        try:
            async with httpx.AsyncClient() as client:
                async with client.stream(
                    "POST",
                    f"{self._base_url}/api/chat",
                    json=payload,
                    timeout=self.config.timeout,
                ) as resp:
                    resp.raise_for_status()
                    async for line in resp.aiter_lines():
                        if not line:
                            continue
                        data = json.loads(line)
                        text = data.get("message", {}).get("content", "")
                        if text:
                            yield text
        except json.JSONDecodeError as e:
            raise LLMError("ollama", "generate_stream", e) from e
        except httpx.HTTPError as e:
            raise LLMError(
                "ollama",
                "generate_stream",
                e,
                retryable=isinstance(e, httpx.TimeoutException),
                status_code=_status_code(e),
            ) from e
