"""Auto-detect the best available LLM provider."""

from __future__ import annotations

import os

import httpx

from admitwriter.llm.base import LLMProvider
from admitwriter.llm.models import LLMConfig


def auto_detect_provider(
    max_tokens: int = 4000,
    temperature: float = 0.7,
    timeout: float = 60.0,
) -> LLMProvider:
    """Try providers in priority order and return the first available one.

    Order: OpenAI > Anthropic > Google Gemini > Ollama (local).
    Raises ValueError if nothing is available.
    """
    common = {"max_tokens": max_tokens, "temperature": temperature, "timeout": timeout}

    # 1. OpenAI
    api_key = os.environ.get("OPENAI_API_KEY")
    if api_key:
        from admitwriter.llm.openai_adapter import OpenAIProvider

        return OpenAIProvider(
            LLMConfig(provider="openai", model="gpt-4o", api_key=api_key, **common)
        )

    # 2. Anthropic
    api_key = os.environ.get("ANTHROPIC_API_KEY")
    if api_key:
        from admitwriter.llm.claude import ClaudeProvider

        return ClaudeProvider(
            LLMConfig(
                provider="anthropic",
                model="claude-haiku-4-5-20251001",
                api_key=api_key,
                **common,
            )
        )

    # 3. Google Gemini
    api_key = os.environ.get("GOOGLE_API_KEY") or os.environ.get("GEMINI_API_KEY")
    if api_key:
        from admitwriter.llm.gemini import GeminiProvider

        return GeminiProvider(
            LLMConfig(provider="google", model="gemini-2.0-flash", api_key=api_key, **common)
        )

    # 4. Ollama (local)
    try:
        resp = httpx.get("http://localhost:11434/api/tags", timeout=2.0)
        resp.raise_for_status()
        models = resp.json().get("models", [])
        if models:
            from admitwriter.llm.ollama import OllamaProvider

            return OllamaProvider(
                LLMConfig(provider="ollama", model=models[0]["name"], **common)
            )
    except (httpx.ConnectError, httpx.TimeoutException, httpx.HTTPStatusError):
        pass

    raise ValueError(
        "No LLM provider found. Set llm.provider in admitwriter.yaml or export an "
        "API key (OPENAI_API_KEY, ANTHROPIC_API_KEY, GOOGLE_API_KEY) or start Ollama."
    )
