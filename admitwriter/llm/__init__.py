"""LLM provider abstraction layer."""

import os

from admitwriter.config.models import LLMSettings
from admitwriter.llm.base import LLMProvider
from admitwriter.llm.claude import ClaudeProvider
from admitwriter.llm.gemini import GeminiProvider
from admitwriter.llm.models import LLMConfig, LLMError, LLMResponse, TokenUsage
from admitwriter.llm.ollama import OllamaProvider
from admitwriter.llm.openai_adapter import OpenAIProvider

_PROVIDER_MAP: dict[str, type[LLMProvider]] = {
    "anthropic": ClaudeProvider,
    "openai": OpenAIProvider,
    "google": GeminiProvider,
    "ollama": OllamaProvider,
}


def create_llm_provider(config: LLMSettings) -> LLMProvider:
    """Create an LLM provider from app-level settings.

    Resolves the API key from the env var in config.api_key_env, then
    bridges the app-level LLMSettings to the provider-level LLMConfig.
    For "auto" provider, delegates to auto_detect_provider().
    """
    if config.provider == "auto":
        from admitwriter.llm.auto_detect import auto_detect_provider

        return auto_detect_provider(
            max_tokens=config.max_tokens,
            temperature=config.temperature,
            timeout=config.timeout,
        )

    cls = _PROVIDER_MAP.get(config.provider)
    if cls is None:
        raise ValueError(
            f"Unsupported LLM provider: {config.provider!r}. "
            f"Supported: {', '.join(_PROVIDER_MAP)}"
        )

    api_key = None
    # Ollama doesn't require an API key
    if config.provider != "ollama":
        api_key = os.environ.get(config.api_key_env)
        if not api_key:
            raise ValueError(
                f"Missing API key: set environment variable {config.api_key_env!r}"
            )

    llm_config = LLMConfig(
        provider=config.provider,
        model=config.model,
        max_tokens=config.max_tokens,
        temperature=config.temperature,
        timeout=config.timeout,
        api_key=api_key,
        base_url=config.base_url,
    )
    return cls(llm_config)


__all__ = [
    "ClaudeProvider",
    "GeminiProvider",
    "LLMConfig",
    "LLMError",
    "LLMProvider",
    "LLMResponse",
    "OllamaProvider",
    "OpenAIProvider",
    "TokenUsage",
    "create_llm_provider",
]
